"""Fetch an organisation's commits inside a window and score every repository."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Iterable, Sequence

from .github.client import GitHubClient
from .models import AuditReport, CommitRecord, CommitStats, RepoAudit, ResolvedWindow
from .scorer import SuspicionScorer

logger = logging.getLogger(__name__)


def summarize_commits(commits: Sequence[CommitRecord]) -> CommitStats:
    lines_per_commit = [c.lines for c in commits]
    total_additions = sum(c.additions or 0 for c in commits)
    total_deletions = sum(c.deletions or 0 for c in commits)
    total_lines = total_additions + total_deletions
    avg = math.floor(total_lines / len(commits) + 0.5) if commits else 0
    return CommitStats(
        commit_count=len(commits),
        total_additions=total_additions,
        total_deletions=total_deletions,
        total_lines=total_lines,
        avg_lines_per_commit=avg,
        lines_per_commit=lines_per_commit,
    )


def _is_ignored(commit: dict[str, Any], ignored: set[str]) -> bool:
    name = ((commit.get("commit") or {}).get("author") or {}).get("name") or ""
    return name.strip().lower() in ignored


def _log_commits(repo: str, commits: Sequence[CommitRecord]) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    for i, c in enumerate(commits, 1):
        logger.debug(
            "%s %d. [%s] %s | %s | %s",
            repo, i, c.sha[:7], c.timestamp.isoformat(), c.author_name, c.message,
        )


async def _audit_repo(
    client: GitHubClient,
    org: str,
    repo: dict[str, Any],
    window: ResolvedWindow,
    ignored: set[str],
    scorer: SuspicionScorer,
) -> RepoAudit | None:
    name = repo["name"]
    listed = await client.list_commits(org, name, since=window.since, until=window.until)
    listed = [c for c in listed if not _is_ignored(c, ignored)]
    if not listed:
        logger.info("%s: 0 commits", name)
        return None

    details = await asyncio.gather(
        *(client.get_commit(org, name, c["sha"]) for c in listed), return_exceptions=True
    )
    commits: list[CommitRecord] = []
    for c, detail in zip(listed, details):
        if isinstance(detail, BaseException):
            if not isinstance(detail, Exception):
                raise detail
            logger.warning("Skipping commit %s in %s/%s: %s", c["sha"][:7], org, name, detail)
            continue
        commits.append(CommitRecord.from_api(detail))
    if not commits:
        logger.info("%s: no commit details available", name)
        return None
    _log_commits(name, commits)

    stats = summarize_commits(commits)
    logger.info("%s: %d commits, %d lines changed", name, stats.commit_count, stats.total_lines)
    return RepoAudit(
        name=name,
        url=repo.get("html_url") or f"https://github.com/{org}/{name}",
        stats=stats,
        suspicion=scorer.score(commits, name),
    )


async def audit_organization(
    client: GitHubClient,
    org: str,
    window: ResolvedWindow,
    *,
    repo: str | None = None,
    ignore_authors: Iterable[str] = (),
    exclude_repos: Iterable[str] = (),
    scorer: SuspicionScorer | None = None,
    concurrency: int = 5,
) -> AuditReport:
    """Audit every repository of ``org`` (or just ``repo``) within ``window``."""
    scorer = scorer or SuspicionScorer()
    ignored = {a.strip().lower() for a in ignore_authors}
    excluded = set(exclude_repos)

    if repo:
        repos = [{"name": repo}]
    else:
        repos = await client.list_repos(org)
    repos = [r for r in repos if r["name"] not in excluded]
    logger.info("Found %d repositories in %s", len(repos), org)

    semaphore = asyncio.Semaphore(concurrency)

    async def _bounded(r: dict[str, Any]) -> RepoAudit | None:
        async with semaphore:
            return await _audit_repo(client, org, r, window, ignored, scorer)

    results = await asyncio.gather(*(_bounded(r) for r in repos), return_exceptions=True)

    audits: list[RepoAudit] = []
    failed: list[str] = []
    for r, result in zip(repos, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.warning("Failed to audit %s/%s: %s", org, r["name"], result)
            failed.append(r["name"])
        elif result is not None:
            audits.append(result)

    audits.sort(key=lambda a: (-a.suspicion.score, a.name))
    return AuditReport(
        org=org,
        since=window.since.isoformat(),
        until=window.until.isoformat(),
        total_repos=len(repos) - len(failed),
        repos=audits,
        failed_repos=failed,
    )
