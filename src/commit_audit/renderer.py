"""Rich-based terminal report renderer with JSON/CSV support."""

from __future__ import annotations

import csv
import io
import json
from dataclasses import asdict
from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import AuditReport, Severity

_SEVERITY_MARKERS = {
    Severity.HIGH: "[bold red]![/bold red]",
    Severity.MEDIUM: "[yellow]~[/yellow]",
    Severity.LOW: "[dim]i[/dim]",
}


def _format_number(n: int) -> str:
    return f"{n:,}"


def _score_style(score: int) -> str:
    if score >= 50:
        return "bold red"
    if score >= 25:
        return "yellow"
    return "green"


def _format_for_git(value: str) -> str:
    """Format an ISO timestamp as ``YYYY-MM-DD HH:MM`` for ``git log``."""
    return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M")


def _write_to_file(content: str, output_file: str) -> None:
    """Write content to a file and print confirmation."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
    Console().print(f"Saved to {output_file}")


def render_report(report: AuditReport, output_file: str | None = None) -> None:
    """Render an AuditReport to the terminal using rich."""
    if output_file:
        string_io = io.StringIO()
        console = Console(file=string_io, force_terminal=False, width=120)
    else:
        console = Console()

    since, until = _format_for_git(report.since), _format_for_git(report.until)
    console.print(Panel(
        Text(f"commit-audit: {report.org}\nWindow: {since} ~ {until}", justify="center"),
        style="bold cyan",
    ))
    console.print()

    if report.failed_repos:
        console.print(
            f"[bold yellow]Warning:[/bold yellow] Failed to audit "
            f"{len(report.failed_repos)} repo(s): {', '.join(report.failed_repos)}"
        )
        console.print()

    console.print(
        f"{_format_number(report.total_repos)} repositories processed, "
        f"{_format_number(len(report.repos))} with commits in time window."
    )
    console.print()

    if report.repos:
        console.print("[bold]Repository Summary[/bold]")
        repo_table = Table(show_header=True, header_style="bold")
        repo_table.add_column("Repo")
        repo_table.add_column("Commits", justify="right")
        repo_table.add_column("Lines", justify="right")
        repo_table.add_column("Avg/Commit", justify="right")
        repo_table.add_column("Score", justify="right")
        for r in report.repos:
            score = r.suspicion.score
            repo_table.add_row(
                r.name,
                _format_number(r.stats.commit_count),
                _format_number(r.stats.total_lines),
                _format_number(r.stats.avg_lines_per_commit),
                Text(f"{score}/100", style=_score_style(score)),
            )
        console.print(repo_table)
        console.print()

    flagged = sorted(report.flagged_repos, key=lambda r: r.suspicion.score, reverse=True)
    if not flagged:
        console.print("[bold green]No suspicious activity detected.[/bold green]")
    else:
        console.print("[bold]SUSPICIOUS ACTIVITY REPORT[/bold]")
        for r in flagged:
            s = r.suspicion
            console.print()
            console.print(
                Text(f"{r.name} (Suspicion Score: {s.score}/100)", style=_score_style(s.score))
            )
            console.print(f"   {s.commit_count} commits, {_format_number(s.total_lines)} lines changed")
            for flag in s.flags:
                console.print(
                    f"   {_SEVERITY_MARKERS[flag.severity]} {flag.message} (+{flag.points} points)",
                    highlight=False,
                    soft_wrap=True,
                )
        console.print()
        console.print(f"[bold]Total: {len(flagged)} repositories flagged for review[/bold]")
        console.print()
        console.print("Inspect a flagged repository with:")
        console.print(
            f'   git log --since="{since}" --until="{until}" '
            '--pretty=format:"%h %ad %s" --date=iso --stat HEAD',
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
    console.print()

    if output_file:
        _write_to_file(string_io.getvalue(), output_file)


def render_json(report: AuditReport, output_file: str | None = None) -> None:
    """Render an AuditReport as JSON."""
    content = json.dumps(asdict(report), indent=2, ensure_ascii=False)
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content)


def render_csv(report: AuditReport, output_file: str | None = None) -> None:
    """Render one row per audited repository as CSV."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["repo", "commits", "lines", "score", "flags"])
    for r in report.repos:
        writer.writerow([
            r.name,
            r.stats.commit_count,
            r.stats.total_lines,
            r.suspicion.score,
            ";".join(k.value for k in r.suspicion.flag_kinds),
        ])
    content = output.getvalue()
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content, end="")
