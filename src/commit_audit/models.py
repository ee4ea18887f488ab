"""Data models for commit-audit."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Union


@dataclass(frozen=True)
class RecurringWindow:
    """A window that repeats every week, e.g. Monday 10:00 to Friday 17:00."""

    start_day: int  # datetime.weekday(), Monday=0
    start_time: time
    end_day: int
    end_time: time


@dataclass(frozen=True)
class DateWindow:
    """A one-off window between two calendar dates."""

    start_date: date
    start_time: time
    end_date: date
    end_time: time


WindowSpec = Union[RecurringWindow, DateWindow]


@dataclass(frozen=True)
class ResolvedWindow:
    since: datetime
    until: datetime


@dataclass(frozen=True)
class CommitRecord:
    sha: str
    author_name: str
    timestamp: datetime
    message: str = ""
    additions: int = 0
    deletions: int = 0

    @property
    def lines(self) -> int:
        return (self.additions or 0) + (self.deletions or 0)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> CommitRecord:
        """Create from a GitHub "get a commit" payload."""
        commit = data.get("commit") or {}
        author = commit.get("author") or {}
        stats = data.get("stats") or {}
        return cls(
            sha=data.get("sha", ""),
            author_name=author.get("name") or "",
            timestamp=parse_timestamp(author["date"]),
            message=commit.get("message") or "",
            additions=stats.get("additions") or 0,
            deletions=stats.get("deletions") or 0,
        )


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO-8601 timestamp; naive values are taken as UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class FlagKind(str, Enum):
    MASS_ACTIVITY = "MASS_ACTIVITY"
    MASS_COMMIT = "MASS_COMMIT"
    SINGLE_COMMIT = "SINGLE_COMMIT"
    NO_CORRECTIONS = "NO_CORRECTIONS"
    ONLY_ADDITIONS = "ONLY_ADDITIONS"
    RAPID_FIRE = "RAPID_FIRE"
    UNREALISTIC_SPEED = "UNREALISTIC_SPEED"
    GENERIC_MESSAGES = "GENERIC_MESSAGES"
    MOSTLY_GENERIC = "MOSTLY_GENERIC"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class SuspicionFlag:
    kind: FlagKind
    severity: Severity
    message: str
    points: int


@dataclass
class SuspicionReport:
    repo_label: str
    score: int = 0
    flags: list[SuspicionFlag] = field(default_factory=list)
    commit_count: int = 0
    total_lines: int = 0

    @property
    def flag_kinds(self) -> list[FlagKind]:
        return [f.kind for f in self.flags]

    def has_flag(self, kind: FlagKind) -> bool:
        return any(f.kind is kind for f in self.flags)


@dataclass
class CommitStats:
    commit_count: int = 0
    total_additions: int = 0
    total_deletions: int = 0
    total_lines: int = 0
    avg_lines_per_commit: int = 0
    lines_per_commit: list[int] = field(default_factory=list)


@dataclass
class RepoAudit:
    name: str
    url: str
    stats: CommitStats
    suspicion: SuspicionReport


@dataclass
class AuditReport:
    org: str
    since: str
    until: str
    total_repos: int
    repos: list[RepoAudit] = field(default_factory=list)
    failed_repos: list[str] = field(default_factory=list)

    @property
    def flagged_repos(self) -> list[RepoAudit]:
        return [r for r in self.repos if r.suspicion.score > 0]
