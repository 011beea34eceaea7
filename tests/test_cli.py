"""Tests for the CLI module."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from ghstats.cli import _parse_relative_date, _resolve_date, _resolve_window, main
from ghstats.config import ColorScheme, Config
from ghstats.errors import AuthenticationError, ConfigError


def _days_ago(days: int) -> str:
    return (datetime.now(timezone.utc).date() - timedelta(days=days)).isoformat()


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def _run_kwargs(mock_run) -> dict:
    return mock_run.call_args.kwargs


def test_parse_relative_date_days():
    assert _parse_relative_date("7d") == _days_ago(7)


def test_parse_relative_date_weeks():
    assert _parse_relative_date("2w") == _days_ago(14)


def test_parse_relative_date_months():
    assert _parse_relative_date("3m") == _days_ago(90)


def test_parse_relative_date_years():
    assert _parse_relative_date("1y") == _days_ago(365)


def test_parse_relative_date_invalid():
    assert _parse_relative_date("abc") is None
    assert _parse_relative_date("10x") is None
    assert _parse_relative_date("") is None
    assert _parse_relative_date("2024-01-01") is None


def test_resolve_date_none():
    assert _resolve_date(None) is None


def test_resolve_date_absolute():
    assert _resolve_date("2024-01-15") == "2024-01-15"


def test_resolve_date_invalid():
    with pytest.raises(ConfigError):
        _resolve_date("15/01/2024")


def test_resolve_window_defaults_to_days_before_today():
    assert _resolve_window(None, None, 30) == (_days_ago(30), _today())


def test_resolve_window_since_and_until():
    assert _resolve_window("2024-01-01", "2024-01-31", 30) == ("2024-01-01", "2024-01-31")


def test_resolve_window_until_only_counts_back():
    assert _resolve_window(None, "2024-03-10", 7) == ("2024-03-03", "2024-03-10")


def test_resolve_window_rejects_reversed_range():
    with pytest.raises(ConfigError):
        _resolve_window("2024-02-01", "2024-01-01", 30)


@pytest.fixture
def no_config():
    with patch("ghstats.cli.load_config", return_value=Config()) as mock_load:
        yield mock_load


@patch("ghstats.cli.run")
@patch("ghstats.cli.asyncio.run")
def test_main_defaults(mock_asyncio_run, mock_run, no_config):
    runner = CliRunner()
    result = runner.invoke(main, ["--token", "fake-token"])
    assert result.exit_code == 0
    mock_asyncio_run.assert_called_once()
    kwargs = _run_kwargs(mock_run)
    assert kwargs["token"] == "fake-token"
    assert kwargs["start_date"] == _days_ago(30)
    assert kwargs["end_date"] == _today()
    assert kwargs["output_format"] == "graph"
    assert kwargs["include"] is None
    assert kwargs["exclude"] is None
    assert kwargs["branch"] is None


@patch("ghstats.cli.run")
@patch("ghstats.cli.asyncio.run")
def test_main_with_all_options(mock_asyncio_run, mock_run, no_config):
    runner = CliRunner()
    result = runner.invoke(main, [
        "--token", "fake-token",
        "--since", "2024-01-01",
        "--until", "2024-01-31",
        "--format", "csv",
        "--output", "/tmp/stats.csv",
        "--repos", "foo*",
        "--exclude", "bar",
        "--branch", "main",
        "--api-url", "https://ghe.example.com/api/v3",
        "--verbose",
    ])
    assert result.exit_code == 0
    kwargs = _run_kwargs(mock_run)
    assert kwargs["start_date"] == "2024-01-01"
    assert kwargs["end_date"] == "2024-01-31"
    assert kwargs["output_format"] == "csv"
    assert kwargs["output_file"] == "/tmp/stats.csv"
    assert kwargs["include"] == "foo*"
    assert kwargs["exclude"] == "bar"
    assert kwargs["branch"] == "main"
    assert kwargs["api_url"] == "https://ghe.example.com/api/v3"


@patch("ghstats.cli.run")
@patch("ghstats.cli.asyncio.run")
def test_main_with_relative_since(mock_asyncio_run, mock_run, no_config):
    runner = CliRunner()
    result = runner.invoke(main, ["--token", "fake-token", "--since", "7d"])
    assert result.exit_code == 0
    assert _run_kwargs(mock_run)["start_date"] == _days_ago(7)


@patch("ghstats.cli.run")
@patch("ghstats.cli.asyncio.run")
def test_main_uses_config_defaults(mock_asyncio_run, mock_run):
    config = Config(
        default_days=7,
        default_output="summary",
        include_repos=["work-*", "lib-*"],
        exclude_repos=["archive"],
        branch="develop",
        color_scheme=ColorScheme(additions="green"),
    )
    runner = CliRunner()
    with patch("ghstats.cli.load_config", return_value=config):
        result = runner.invoke(main, ["--token", "fake-token"])
    assert result.exit_code == 0
    kwargs = _run_kwargs(mock_run)
    assert kwargs["start_date"] == _days_ago(7)
    assert kwargs["output_format"] == "summary"
    assert kwargs["include"] == "work-*|lib-*"
    assert kwargs["exclude"] == "archive"
    assert kwargs["branch"] == "develop"
    assert kwargs["colors"].additions == "green"


@patch("ghstats.cli.run")
@patch("ghstats.cli.asyncio.run")
def test_main_options_override_config(mock_asyncio_run, mock_run):
    config = Config(default_days=7, default_output="summary", branch="develop")
    runner = CliRunner()
    with patch("ghstats.cli.load_config", return_value=config):
        result = runner.invoke(main, ["--token", "t", "-d", "14", "-f", "json", "-b", "main"])
    assert result.exit_code == 0
    kwargs = _run_kwargs(mock_run)
    assert kwargs["start_date"] == _days_ago(14)
    assert kwargs["output_format"] == "json"
    assert kwargs["branch"] == "main"


@patch("ghstats.cli.asyncio.run")
def test_main_token_from_env(mock_asyncio_run, no_config):
    runner = CliRunner(env={"GITHUB_TOKEN": "env-token"})
    with patch("ghstats.cli.run") as mock_run:
        result = runner.invoke(main, [])
    assert result.exit_code == 0
    assert _run_kwargs(mock_run)["token"] == "env-token"


def test_main_missing_token(no_config):
    """CLI should fail without token."""
    runner = CliRunner(env={"GITHUB_TOKEN": ""})
    result = runner.invoke(main, [], catch_exceptions=False)
    assert result.exit_code == 1


def test_main_invalid_config():
    runner = CliRunner()
    with patch("ghstats.cli.load_config", return_value=Config(default_output="pie")):
        result = runner.invoke(main, ["--token", "fake-token"])
    assert result.exit_code == 1


def test_main_mistyped_config_file_exits_1(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".ghstatsrc.json").write_text('{"includeRepos": "work-api"}', encoding="utf-8")
    runner = CliRunner()
    with patch("ghstats.cli.asyncio.run") as mock_asyncio_run:
        result = runner.invoke(main, ["--token", "fake-token"])
    assert result.exit_code == 1
    assert "includeRepos" in result.output
    mock_asyncio_run.assert_not_called()


def test_main_invalid_format_option(no_config):
    runner = CliRunner()
    result = runner.invoke(main, ["--token", "fake-token", "--format", "pie"])
    assert result.exit_code != 0


@patch("ghstats.cli.run")
@patch("ghstats.cli.asyncio.run", side_effect=AuthenticationError("Invalid GitHub token"))
def test_main_auth_failure_exits_1(mock_asyncio_run, mock_run, no_config):
    runner = CliRunner()
    result = runner.invoke(main, ["--token", "bad"])
    assert result.exit_code == 1


@patch("ghstats.cli.run")
@patch("ghstats.cli.asyncio.run", side_effect=RuntimeError("boom"))
def test_main_unhandled_error_exits_1(mock_asyncio_run, mock_run, no_config):
    runner = CliRunner()
    result = runner.invoke(main, ["--token", "fake-token", "--verbose"])
    assert result.exit_code == 1


@patch("ghstats.cli.run")
@patch("ghstats.cli.asyncio.run", side_effect=KeyboardInterrupt)
def test_main_interrupt_exits_130(mock_asyncio_run, mock_run, no_config):
    runner = CliRunner()
    result = runner.invoke(main, ["--token", "fake-token"])
    assert result.exit_code == 130


def test_main_version():
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "version" in result.output.lower()
