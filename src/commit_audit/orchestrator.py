"""Async orchestration: resolve the window, audit the organisation, render output."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from .aggregator import audit_organization
from .github.client import GitHubClient
from .models import AuditReport, WindowSpec
from .renderer import render_csv, render_json, render_report
from .scorer import SuspicionScorer
from .window import resolve_window

logger = logging.getLogger(__name__)


async def run(
    org: str,
    token: str,
    window_spec: WindowSpec,
    now: datetime,
    repo: str | None = None,
    ignore_authors: Iterable[str] = (),
    exclude_repos: Iterable[str] = (),
    output_format: str = "table",
    output_file: str | None = None,
    concurrency: int = 5,
    scorer: SuspicionScorer | None = None,
) -> AuditReport:
    """Audit ``org`` over the most recent occurrence of ``window_spec`` and render it."""
    window = resolve_window(window_spec, now)
    logger.info("Auditing %s from %s to %s", org, window.since, window.until)

    async with GitHubClient(token) as client:
        report = await audit_organization(
            client,
            org,
            window,
            repo=repo,
            ignore_authors=ignore_authors,
            exclude_repos=exclude_repos,
            scorer=scorer,
            concurrency=concurrency,
        )

    if output_format == "json":
        render_json(report, output_file=output_file)
    elif output_format == "csv":
        render_csv(report, output_file=output_file)
    else:
        render_report(report, output_file=output_file)
    return report
