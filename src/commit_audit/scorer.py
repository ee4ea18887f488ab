"""Rule engine that scores a repository's commits for non-organic patterns.

Rules run in a fixed order and each one appends at most the flags it
detects; the score is the sum of flag points capped at 100. The scorer keeps
no state between calls, so one instance can score many repositories
concurrently.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .models import CommitRecord, FlagKind, Severity, SuspicionFlag, SuspicionReport

GENERIC_MESSAGES = frozenset({"update", "fix", "done", "asdf", "test", "commit", ".", "..", "..."})


@dataclass(frozen=True)
class ScorerConfig:
    """Thresholds and point values for every rule."""

    max_score: int = 100

    mass_activity_min_commits: int = 3
    mass_activity_min_lines: int = 200
    mass_activity_max_minutes: float = 10
    mass_activity_base_points: int = 50
    mass_activity_scale_lines: int = 300
    mass_activity_max_multiplier: float = 2
    mass_activity_high_lines: int = 500

    mass_commit_lines: int = 300
    mass_commit_points: int = 20

    single_commit_min_additions: int = 50
    single_commit_points: int = 20

    no_corrections_ratio: float = 20
    no_corrections_points: int = 10
    only_additions_min: int = 100
    only_additions_points: int = 12

    rapid_fire_min_commits: int = 3
    rapid_fire_max_seconds: float = 120
    rapid_fire_points: int = 15

    unrealistic_lines_per_minute: float = 100
    unrealistic_speed_points: int = 25

    generic_messages: frozenset[str] = GENERIC_MESSAGES
    generic_all_points: int = 8
    mostly_generic_share: float = 0.7
    mostly_generic_points: int = 5


DEFAULT_CONFIG = ScorerConfig()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _lines(commit: CommitRecord) -> int:
    return (commit.additions or 0) + (commit.deletions or 0)


class SuspicionScorer:
    def __init__(self, config: ScorerConfig = DEFAULT_CONFIG):
        self.config = config

    def score(self, commits: Iterable[CommitRecord], repo_label: str) -> SuspicionReport:
        """Score one repository's commits. Never raises for degenerate input."""
        ordered = sorted(commits, key=lambda c: c.timestamp)
        if not ordered:
            return SuspicionReport(repo_label=repo_label)

        additions = sum(c.additions or 0 for c in ordered)
        deletions = sum(c.deletions or 0 for c in ordered)
        total_lines = additions + deletions
        span_seconds = (ordered[-1].timestamp - ordered[0].timestamp).total_seconds()

        flags: list[SuspicionFlag] = []
        self._check_mass_activity(ordered, total_lines, span_seconds, flags)
        self._check_mass_commits(ordered, flags)
        self._check_single_commit(ordered, flags)
        self._check_corrections(additions, deletions, flags)
        self._check_rapid_fire(ordered, span_seconds, flags)
        self._check_speed(ordered, flags)
        self._check_messages(ordered, flags)

        return SuspicionReport(
            repo_label=repo_label,
            score=min(self.config.max_score, sum(f.points for f in flags)),
            flags=flags,
            commit_count=len(ordered),
            total_lines=total_lines,
        )

    def _check_mass_activity(
        self,
        commits: Sequence[CommitRecord],
        total_lines: int,
        span_seconds: float,
        flags: list[SuspicionFlag],
    ) -> None:
        cfg = self.config
        minutes = span_seconds / 60
        if (
            len(commits) < cfg.mass_activity_min_commits
            or total_lines < cfg.mass_activity_min_lines
            or minutes > cfg.mass_activity_max_minutes
        ):
            return

        raw_points = min(
            cfg.mass_activity_base_points * cfg.mass_activity_max_multiplier,
            cfg.mass_activity_base_points * total_lines / cfg.mass_activity_scale_lines,
        )
        severity = Severity.HIGH if total_lines >= cfg.mass_activity_high_lines else Severity.MEDIUM
        flags.append(SuspicionFlag(
            kind=FlagKind.MASS_ACTIVITY,
            severity=severity,
            message=f"{len(commits)} commits, {total_lines} lines in {_round_half_up(minutes)} minutes",
            points=_round_half_up(raw_points),
        ))

    def _check_mass_commits(self, commits: Sequence[CommitRecord], flags: list[SuspicionFlag]) -> None:
        for i, commit in enumerate(commits, 1):
            lines = _lines(commit)
            if lines > self.config.mass_commit_lines:
                flags.append(SuspicionFlag(
                    kind=FlagKind.MASS_COMMIT,
                    severity=Severity.HIGH,
                    message=f"Commit {i}: {lines} lines in single commit",
                    points=self.config.mass_commit_points,
                ))

    def _check_single_commit(self, commits: Sequence[CommitRecord], flags: list[SuspicionFlag]) -> None:
        if len(commits) != 1:
            return
        added = commits[0].additions or 0
        if added > self.config.single_commit_min_additions:
            flags.append(SuspicionFlag(
                kind=FlagKind.SINGLE_COMMIT,
                severity=Severity.HIGH,
                message=f"Entire exercise ({added} lines) in single commit",
                points=self.config.single_commit_points,
            ))

    def _check_corrections(self, additions: int, deletions: int, flags: list[SuspicionFlag]) -> None:
        cfg = self.config
        if deletions > 0:
            ratio = additions / deletions
            if ratio > cfg.no_corrections_ratio:
                flags.append(SuspicionFlag(
                    kind=FlagKind.NO_CORRECTIONS,
                    severity=Severity.LOW,
                    message=f"Ratio {ratio:.1f}:1 additions/deletions (no mistakes/refactoring)",
                    points=cfg.no_corrections_points,
                ))
        elif additions > cfg.only_additions_min:
            flags.append(SuspicionFlag(
                kind=FlagKind.ONLY_ADDITIONS,
                severity=Severity.LOW,
                message=f"{additions} additions, 0 deletions (no corrections)",
                points=cfg.only_additions_points,
            ))

    def _check_rapid_fire(
        self, commits: Sequence[CommitRecord], span_seconds: float, flags: list[SuspicionFlag]
    ) -> None:
        cfg = self.config
        if len(commits) < cfg.rapid_fire_min_commits or span_seconds > cfg.rapid_fire_max_seconds:
            return
        # Mass activity already covers a fast burst.
        if any(f.kind is FlagKind.MASS_ACTIVITY for f in flags):
            return
        flags.append(SuspicionFlag(
            kind=FlagKind.RAPID_FIRE,
            severity=Severity.MEDIUM,
            message=f"{len(commits)} commits in {_round_half_up(span_seconds)}s",
            points=cfg.rapid_fire_points,
        ))

    def _check_speed(self, commits: Sequence[CommitRecord], flags: list[SuspicionFlag]) -> None:
        for i in range(1, len(commits)):
            minutes = (commits[i].timestamp - commits[i - 1].timestamp).total_seconds() / 60
            if minutes <= 0:
                continue
            lines_per_minute = _lines(commits[i]) / minutes
            if lines_per_minute > self.config.unrealistic_lines_per_minute:
                flags.append(SuspicionFlag(
                    kind=FlagKind.UNREALISTIC_SPEED,
                    severity=Severity.HIGH,
                    message=(
                        f"{_round_half_up(lines_per_minute)} lines/min "
                        f"between commits {i} and {i + 1}"
                    ),
                    points=self.config.unrealistic_speed_points,
                ))
                return

    def _check_messages(self, commits: Sequence[CommitRecord], flags: list[SuspicionFlag]) -> None:
        cfg = self.config
        generic = sum(1 for c in commits if self.is_generic_message(c.message))
        if generic == 0:
            return
        if generic == len(commits):
            flags.append(SuspicionFlag(
                kind=FlagKind.GENERIC_MESSAGES,
                severity=Severity.LOW,
                message=f"All {generic} commit messages are generic/empty",
                points=cfg.generic_all_points,
            ))
        elif generic >= len(commits) * cfg.mostly_generic_share:
            flags.append(SuspicionFlag(
                kind=FlagKind.MOSTLY_GENERIC,
                severity=Severity.LOW,
                message=f"{generic}/{len(commits)} commit messages are generic",
                points=cfg.mostly_generic_points,
            ))

    def is_generic_message(self, message: Optional[str]) -> bool:
        msg = (message or "").strip().lower()
        return not msg or msg in self.config.generic_messages


_default_scorer = SuspicionScorer()


def score(commits: Iterable[CommitRecord], repo_label: str) -> SuspicionReport:
    """Score with :data:`DEFAULT_CONFIG`."""
    return _default_scorer.score(commits, repo_label)
