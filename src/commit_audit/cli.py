"""Command-line entry point for commit-audit."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import click
import httpx
from rich.logging import RichHandler

from . import __version__
from .config import AuditConfig, OrganizationConfig, load_config
from .exceptions import AuditError, ConfigurationError
from .models import WindowSpec
from .orchestrator import run
from .window import build_window_spec


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _now(tz_name: str | None) -> datetime:
    if not tz_name:
        return datetime.now().astimezone()
    try:
        return datetime.now(ZoneInfo(tz_name))
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise click.BadParameter(f"Unknown time zone: {tz_name}", param_hint="--timezone") from e


def _select_organization(config: AuditConfig) -> OrganizationConfig:
    """Prompt for an organisation when the config holds more than one."""
    orgs = config.organizations
    if len(orgs) == 1:
        return orgs[0]
    click.echo("Available organizations:")
    for i, org in enumerate(orgs, 1):
        click.echo(f"  {i}. {org.name}")
    choice = click.prompt("Select organization number", type=click.IntRange(1, len(orgs)))
    return orgs[choice - 1]


def _window_from_options(
    start: str | None, start_time: str, end: str | None, end_time: str
) -> WindowSpec | None:
    if start is None and end is None:
        return None
    if start is None or end is None:
        raise click.UsageError("--start and --end must be given together.")
    return build_window_spec(start, start_time, end, end_time)


@click.command()
@click.argument("target", required=False)
@click.option("--token", envvar="GITHUB_TOKEN", required=True, help="GitHub token (or GITHUB_TOKEN env).")
@click.option(
    "--config", "config_path", type=click.Path(exists=True, dir_okay=False),
    help="JSON config file with organizations and time windows.",
)
@click.option("--start", default=None, help="Window start: day name (e.g. Monday) or YYYY-MM-DD.")
@click.option("--start-time", default="00:00", show_default=True, help="Window start time, HH:MM.")
@click.option("--end", default=None, help="Window end: day name or YYYY-MM-DD.")
@click.option("--end-time", default="23:59", show_default=True, help="Window end time, HH:MM.")
@click.option("--timezone", "tz_name", default=None, help="IANA time zone for the window (default: local).")
@click.option("--ignore-author", multiple=True, help="Author name to ignore (repeatable).")
@click.option("--exclude-repo", multiple=True, help="Repository to exclude (repeatable).")
@click.option(
    "--format", "output_format",
    type=click.Choice(["table", "json", "csv"]), default="table", show_default=True,
    help="Output format.",
)
@click.option("--output", "output_file", default=None, help="Write output to this file.")
@click.option("--concurrency", default=5, show_default=True, type=click.IntRange(min=1),
              help="Repositories audited in parallel.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging, including every fetched commit.")
@click.version_option(version=__version__, prog_name="commit-audit")
def main(
    target: str | None,
    token: str,
    config_path: str | None,
    start: str | None,
    start_time: str,
    end: str | None,
    end_time: str,
    tz_name: str | None,
    ignore_author: tuple[str, ...],
    exclude_repo: tuple[str, ...],
    output_format: str,
    output_file: str | None,
    concurrency: int,
    verbose: bool,
) -> None:
    """Flag commit patterns inconsistent with incremental work.

    TARGET is an organization name or org/repo.
    """
    org, repo = None, None
    if target:
        org, _, repo = target.partition("/")
        repo = repo or None

    try:
        config = load_config(config_path) if config_path else None
        _configure_logging(verbose or bool(config and config.debug_commits))

        window_spec = _window_from_options(start, start_time, end, end_time)
        ignore_authors = list(ignore_author)

        if config is not None:
            org_config = config.find(org) if org else _select_organization(config)
            if org_config is None:
                raise ConfigurationError(
                    f"Organization {org!r} is not in the config file",
                    details={"available": ", ".join(o.name for o in config.organizations)},
                )
            org = org_config.name
            window_spec = window_spec or org_config.window
            ignore_authors.extend(org_config.ignore_authors)

        if not org:
            raise click.UsageError("TARGET is required without --config.")
        if window_spec is None:
            raise click.UsageError("Give --start and --end, or a --config with a time window.")

        asyncio.run(run(
            org=org,
            token=token,
            window_spec=window_spec,
            now=_now(tz_name),
            repo=repo,
            ignore_authors=ignore_authors,
            exclude_repos=exclude_repo,
            output_format=output_format,
            output_file=output_file,
            concurrency=concurrency,
        ))
    except AuditError as e:
        raise click.ClickException(str(e)) from e
    except httpx.HTTPError as e:
        raise click.ClickException(f"GitHub request failed: {e}") from e
