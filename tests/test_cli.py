"""Tests for the CLI module."""

from __future__ import annotations

import json
from datetime import time
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytest
from click.testing import CliRunner

from commit_audit.cli import main
from commit_audit.models import DateWindow, RecurringWindow


def _close_coroutine(coro):
    coro.close()


@pytest.fixture
def mock_run():
    """Patch the orchestrator so no network call is made; returns the run() mock."""
    with patch("commit_audit.cli.asyncio.run", side_effect=_close_coroutine), \
            patch("commit_audit.cli.run", new_callable=MagicMock) as run_mock:
        yield run_mock


def _write_config(tmp_path, organizations) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"organizations": organizations}), encoding="utf-8")
    return str(path)


ORG_A = {
    "name": "org-a",
    "timeWindows": [{"startDay": "Monday", "startTime": "10:00", "endDay": "Monday", "endTime": "12:00"}],
    "ignoreAuthors": ["Teaching Assistant"],
}
ORG_B = {
    "name": "org-b",
    "timeWindows": [{"startDate": "2026-02-16", "startTime": "09:00", "endDate": "2026-02-20", "endTime": "17:00"}],
}


def test_main_org_target(mock_run):
    runner = CliRunner()
    result = runner.invoke(main, ["myorg", "--token", "fake-token", "--start", "Monday", "--end", "Friday"])
    assert result.exit_code == 0, result.output
    kwargs = mock_run.call_args.kwargs
    assert kwargs["org"] == "myorg"
    assert kwargs["repo"] is None
    assert kwargs["token"] == "fake-token"
    assert kwargs["window_spec"] == RecurringWindow(
        start_day=0, start_time=time(0, 0), end_day=4, end_time=time(23, 59)
    )
    assert kwargs["now"].tzinfo is not None


def test_main_repo_target(mock_run):
    runner = CliRunner()
    result = runner.invoke(main, [
        "myorg/myrepo", "--token", "fake-token",
        "--start", "2026-02-16", "--start-time", "10:30",
        "--end", "2026-02-20", "--end-time", "17:45",
    ])
    assert result.exit_code == 0, result.output
    kwargs = mock_run.call_args.kwargs
    assert kwargs["org"] == "myorg"
    assert kwargs["repo"] == "myrepo"
    assert isinstance(kwargs["window_spec"], DateWindow)


def test_main_with_all_options(mock_run):
    runner = CliRunner()
    result = runner.invoke(main, [
        "myorg", "--token", "fake-token",
        "--start", "monday", "--end", "MONDAY", "--start-time", "11:00", "--end-time", "09:00",
        "--ignore-author", "TA", "--ignore-author", "bot",
        "--exclude-repo", "repo1",
        "--format", "json",
        "--output", "/tmp/test-output.json",
        "--concurrency", "3",
    ])
    assert result.exit_code == 0, result.output
    kwargs = mock_run.call_args.kwargs
    assert kwargs["ignore_authors"] == ["TA", "bot"]
    assert kwargs["exclude_repos"] == ("repo1",)
    assert kwargs["output_format"] == "json"
    assert kwargs["output_file"] == "/tmp/test-output.json"
    assert kwargs["concurrency"] == 3


def test_main_timezone(mock_run):
    try:
        ZoneInfo("Asia/Tokyo")
    except ZoneInfoNotFoundError:
        pytest.skip("tz database not available")
    runner = CliRunner()
    result = runner.invoke(main, [
        "myorg", "--token", "t", "--start", "Monday", "--end", "Friday", "--timezone", "Asia/Tokyo",
    ])
    assert result.exit_code == 0, result.output
    assert mock_run.call_args.kwargs["now"].utcoffset().total_seconds() == 9 * 3600


def test_main_mixed_window_fails(mock_run):
    runner = CliRunner()
    result = runner.invoke(main, ["myorg", "--token", "t", "--start", "Monday", "--end", "2026-02-20"])
    assert result.exit_code == 1
    assert "not mixed" in result.output
    mock_run.assert_not_called()


def test_main_unknown_day_fails(mock_run):
    runner = CliRunner()
    result = runner.invoke(main, ["myorg", "--token", "t", "--start", "Moonday", "--end", "Friday"])
    assert result.exit_code == 1
    assert "day name" in result.output


def test_main_bad_time_fails(mock_run):
    runner = CliRunner()
    result = runner.invoke(main, [
        "myorg", "--token", "t", "--start", "Monday", "--end", "Friday", "--end-time", "5pm",
    ])
    assert result.exit_code == 1
    assert "time of day" in result.output


def test_main_requires_both_boundaries(mock_run):
    runner = CliRunner()
    result = runner.invoke(main, ["myorg", "--token", "t", "--start", "Monday"])
    assert result.exit_code == 2


def test_main_requires_window(mock_run):
    runner = CliRunner()
    result = runner.invoke(main, ["myorg", "--token", "t"])
    assert result.exit_code == 2
    mock_run.assert_not_called()


def test_main_requires_target_without_config(mock_run):
    runner = CliRunner()
    result = runner.invoke(main, ["--token", "t", "--start", "Monday", "--end", "Friday"])
    assert result.exit_code == 2


def test_main_config_single_org(mock_run, tmp_path):
    runner = CliRunner()
    result = runner.invoke(main, ["--token", "t", "--config", _write_config(tmp_path, [ORG_A])])
    assert result.exit_code == 0, result.output
    kwargs = mock_run.call_args.kwargs
    assert kwargs["org"] == "org-a"
    assert kwargs["window_spec"].start_time == time(10, 0)
    assert kwargs["ignore_authors"] == ["Teaching Assistant"]


def test_main_config_prompts_for_org(mock_run, tmp_path):
    runner = CliRunner()
    result = runner.invoke(
        main, ["--token", "t", "--config", _write_config(tmp_path, [ORG_A, ORG_B])], input="2\n"
    )
    assert result.exit_code == 0, result.output
    assert "1. org-a" in result.output
    assert "2. org-b" in result.output
    assert mock_run.call_args.kwargs["org"] == "org-b"
    assert isinstance(mock_run.call_args.kwargs["window_spec"], DateWindow)


def test_main_config_target_selects_org(mock_run, tmp_path):
    runner = CliRunner()
    result = runner.invoke(
        main, ["ORG-B/some-repo", "--token", "t", "--config", _write_config(tmp_path, [ORG_A, ORG_B])]
    )
    assert result.exit_code == 0, result.output
    kwargs = mock_run.call_args.kwargs
    assert kwargs["org"] == "org-b"
    assert kwargs["repo"] == "some-repo"


def test_main_options_override_config_window(mock_run, tmp_path):
    runner = CliRunner()
    result = runner.invoke(main, [
        "--token", "t", "--config", _write_config(tmp_path, [ORG_A]),
        "--start", "Tuesday", "--end", "Tuesday",
    ])
    assert result.exit_code == 0, result.output
    assert mock_run.call_args.kwargs["window_spec"].start_day == 1


def test_main_config_unknown_org(mock_run, tmp_path):
    runner = CliRunner()
    result = runner.invoke(main, ["nope", "--token", "t", "--config", _write_config(tmp_path, [ORG_A])])
    assert result.exit_code == 1
    assert "not in the config file" in result.output


def test_main_invalid_config(mock_run, tmp_path):
    runner = CliRunner()
    result = runner.invoke(main, ["--token", "t", "--config", _write_config(tmp_path, [])])
    assert result.exit_code == 1
    assert "No organizations configured" in result.output


def test_main_unknown_timezone(mock_run):
    runner = CliRunner()
    result = runner.invoke(main, [
        "myorg", "--token", "t", "--start", "Monday", "--end", "Friday", "--timezone", "Mars/Olympus",
    ])
    assert result.exit_code == 2


def test_main_missing_token():
    """CLI should fail without token."""
    runner = CliRunner(env={"GITHUB_TOKEN": ""})
    result = runner.invoke(main, ["myorg", "--start", "Monday", "--end", "Friday"], catch_exceptions=False)
    assert result.exit_code != 0


def test_main_version():
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output
