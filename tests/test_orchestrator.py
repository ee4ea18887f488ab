"""Tests for the orchestrator module."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest

from commit_audit.models import AuditReport, ResolvedWindow
from commit_audit.orchestrator import run
from commit_audit.window import build_window_spec

NOW = datetime(2026, 2, 25, 12, 0)
SPEC = build_window_spec("Monday", "09:00", "Friday", "17:00")


def _make_report(**kwargs) -> AuditReport:
    defaults = dict(
        org="test-org",
        since="2026-02-16T09:00:00",
        until="2026-02-20T17:00:00",
        total_repos=0,
    )
    defaults.update(kwargs)
    return AuditReport(**defaults)


def _patch_client(mock_client_cls) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client_cls.return_value.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client_cls.return_value.__aexit__ = AsyncMock(return_value=False)
    return mock_client


@pytest.mark.asyncio
@patch("commit_audit.orchestrator.render_report")
@patch("commit_audit.orchestrator.audit_organization")
@patch("commit_audit.orchestrator.GitHubClient")
async def test_run_table_format(mock_client_cls, mock_audit, mock_render):
    """run() should call render_report for table format."""
    _patch_client(mock_client_cls)
    report = _make_report()
    mock_audit.return_value = report

    result = await run(org="test-org", token="fake", window_spec=SPEC, now=NOW, output_format="table")

    assert result is report
    mock_client_cls.assert_called_once_with("fake")
    mock_render.assert_called_once_with(report, output_file=None)


@pytest.mark.asyncio
@patch("commit_audit.orchestrator.render_report")
@patch("commit_audit.orchestrator.audit_organization")
@patch("commit_audit.orchestrator.GitHubClient")
async def test_run_resolves_window(mock_client_cls, mock_audit, mock_render):
    """run() should pass the resolved window and filters to the audit."""
    mock_client = _patch_client(mock_client_cls)
    mock_audit.return_value = _make_report()

    await run(
        org="test-org",
        token="fake",
        window_spec=SPEC,
        now=NOW,
        repo="one-repo",
        ignore_authors=["TA"],
        exclude_repos=["skip-me"],
        concurrency=2,
        output_file="/tmp/out.txt",
    )

    args = mock_audit.call_args
    assert args.args[0] is mock_client
    assert args.args[1] == "test-org"
    assert args.args[2] == ResolvedWindow(since=datetime(2026, 2, 16, 9), until=datetime(2026, 2, 20, 17))
    assert args.kwargs["repo"] == "one-repo"
    assert args.kwargs["ignore_authors"] == ["TA"]
    assert args.kwargs["exclude_repos"] == ["skip-me"]
    assert args.kwargs["concurrency"] == 2
    assert mock_render.call_args.kwargs["output_file"] == "/tmp/out.txt"


@pytest.mark.asyncio
@patch("commit_audit.orchestrator.render_json")
@patch("commit_audit.orchestrator.audit_organization")
@patch("commit_audit.orchestrator.GitHubClient")
async def test_run_json_format(mock_client_cls, mock_audit, mock_render_json):
    _patch_client(mock_client_cls)
    mock_audit.return_value = _make_report()

    await run(org="test-org", token="fake", window_spec=SPEC, now=NOW, output_format="json")

    mock_render_json.assert_called_once()


@pytest.mark.asyncio
@patch("commit_audit.orchestrator.render_csv")
@patch("commit_audit.orchestrator.audit_organization")
@patch("commit_audit.orchestrator.GitHubClient")
async def test_run_csv_format(mock_client_cls, mock_audit, mock_render_csv):
    _patch_client(mock_client_cls)
    mock_audit.return_value = _make_report()

    await run(org="test-org", token="fake", window_spec=SPEC, now=NOW, output_format="csv")

    mock_render_csv.assert_called_once()
