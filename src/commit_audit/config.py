"""JSON configuration file for audited organisations and their windows.

Example ``config.json``::

    {
      "organizations": [
        {
          "name": "cs101-2026",
          "timeWindows": [
            {"startDay": "Monday", "startTime": "10:00", "endDay": "Monday", "endTime": "12:00"}
          ],
          "ignoreAuthors": ["Teaching Assistant"]
        }
      ],
      "debugCommits": false
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ConfigurationError
from .models import WindowSpec
from .window import window_spec_from_mapping


@dataclass(frozen=True)
class OrganizationConfig:
    name: str
    windows: tuple[WindowSpec, ...]
    ignore_authors: tuple[str, ...] = ()

    @property
    def window(self) -> WindowSpec:
        return self.windows[0]


@dataclass(frozen=True)
class AuditConfig:
    organizations: tuple[OrganizationConfig, ...] = field(default_factory=tuple)
    debug_commits: bool = False

    def find(self, name: str) -> OrganizationConfig | None:
        for org in self.organizations:
            if org.name.lower() == name.lower():
                return org
        return None


def _parse_organization(index: int, raw: Any) -> OrganizationConfig:
    where = f"organizations[{index}]"
    if not isinstance(raw, dict):
        raise ConfigurationError("Organization entry must be an object", details={"key": where})

    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError("Organization is missing a name", details={"key": f"{where}.name"})

    windows = raw.get("timeWindows")
    if not isinstance(windows, list) or not windows:
        raise ConfigurationError(
            "Organization needs at least one time window", details={"key": f"{where}.timeWindows"}
        )
    for i, entry in enumerate(windows):
        if not isinstance(entry, dict):
            raise ConfigurationError(
                "Time window must be an object", details={"key": f"{where}.timeWindows[{i}]"}
            )

    ignore = raw.get("ignoreAuthors", [])
    if not isinstance(ignore, list) or not all(isinstance(a, str) for a in ignore):
        raise ConfigurationError(
            "ignoreAuthors must be a list of names", details={"key": f"{where}.ignoreAuthors"}
        )

    return OrganizationConfig(
        name=name.strip(),
        windows=tuple(window_spec_from_mapping(w) for w in windows),
        ignore_authors=tuple(ignore),
    )


def parse_config(data: Any) -> AuditConfig:
    if not isinstance(data, dict):
        raise ConfigurationError("Config root must be an object")
    orgs = data.get("organizations")
    if not isinstance(orgs, list) or not orgs:
        raise ConfigurationError("No organizations configured", details={"key": "organizations"})
    return AuditConfig(
        organizations=tuple(_parse_organization(i, o) for i, o in enumerate(orgs)),
        debug_commits=bool(data.get("debugCommits", False)),
    )


def load_config(path: str | Path) -> AuditConfig:
    """Load and validate a JSON config file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file: {path}", details={"reason": str(e)}) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Config file is not valid JSON: {path}", details={"reason": str(e)}) from e
    return parse_config(data)
