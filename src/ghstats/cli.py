"""Command-line interface for ghstats."""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import date, datetime, timedelta, timezone

import click
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .config import OUTPUT_FORMATS, load_config, resolve_token, validate_config
from .errors import AuthenticationError, ConfigError
from .filters import join_patterns
from .orchestrator import run

DEFAULT_DAYS = 30

_RELATIVE_RE = re.compile(r"^(\d+)([dwmy])$")
_UNIT_DAYS = {"d": 1, "w": 7, "m": 30, "y": 365}

_TOKEN_HELP = """\
Authentication options:
  1. Set GITHUB_TOKEN environment variable:
     export GITHUB_TOKEN="your-token-here"

  2. Use --token flag (less secure):
     ghstats --token your-token-here

  3. Create a .env file in the working directory:
     GITHUB_TOKEN=your-token-here

Generate a token at: https://github.com/settings/tokens
Required scope: repo"""


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _parse_relative_date(value: str) -> str | None:
    """Convert a relative date like ``7d``, ``2w``, ``3m`` or ``1y`` to ``YYYY-MM-DD``."""
    match = _RELATIVE_RE.match(value)
    if not match:
        return None
    amount, unit = int(match.group(1)), match.group(2)
    return (_today() - timedelta(days=amount * _UNIT_DAYS[unit])).isoformat()


def _resolve_date(value: str | None) -> str | None:
    if value is None:
        return None
    relative = _parse_relative_date(value)
    if relative is not None:
        return relative
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        raise ConfigError(f"Invalid date {value!r}, expected YYYY-MM-DD or e.g. 7d/2w/3m/1y") from None


def _resolve_window(since: str | None, until: str | None, days: int) -> tuple[str, str]:
    end_date = _resolve_date(until) or _today().isoformat()
    start_date = _resolve_date(since)
    if start_date is None:
        start_date = (date.fromisoformat(end_date) - timedelta(days=days)).isoformat()
    if start_date > end_date:
        raise ConfigError(f"Start date {start_date} is after end date {end_date}")
    return start_date, end_date


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, show_time=False)],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@click.command()
@click.version_option(version=__version__, prog_name="ghstats")
@click.option("-t", "--token", default=None, help="GitHub personal access token (prefer GITHUB_TOKEN).")
@click.option("-d", "--days", type=click.IntRange(min=0), default=None, help="Number of days to analyze (default: 30).")
@click.option("-s", "--since", default=None, help="Start date (YYYY-MM-DD or relative: 7d, 2w, 3m, 1y).")
@click.option("-u", "--until", default=None, help="End date (YYYY-MM-DD, default: today).")
@click.option(
    "-f", "--format", "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Output format (default: graph).",
)
@click.option("-o", "--output", "output_file", default=None, help="Save output to file instead of stdout.")
@click.option("-r", "--repos", "include", default=None, help="Only include repositories matching this pattern.")
@click.option("-e", "--exclude", default=None, help="Exclude repositories matching this pattern.")
@click.option("-b", "--branch", default=None, help="Only count commits reachable from this branch.")
@click.option("--api-url", default=None, help="GitHub API base URL (for GitHub Enterprise).")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable verbose logging.")
@click.pass_context
def main(
    ctx: click.Context,
    token: str | None,
    days: int | None,
    since: str | None,
    until: str | None,
    output_format: str | None,
    output_file: str | None,
    include: str | None,
    exclude: str | None,
    branch: str | None,
    api_url: str | None,
    verbose: bool,
) -> None:
    """Fetch and visualize line-change statistics for your GitHub commits."""
    _configure_logging(verbose)
    err_console = Console(stderr=True)
    load_dotenv(find_dotenv(usecwd=True))

    token = resolve_token(token)
    if not token:
        err_console.print("[red]Error: GitHub authentication failed[/red]")
        err_console.print()
        err_console.print(_TOKEN_HELP, highlight=False, markup=False)
        ctx.exit(1)

    try:
        config = load_config()
        validate_config(config)

        if days is None:
            days = config.default_days if config.default_days is not None else DEFAULT_DAYS
        start_date, end_date = _resolve_window(since, until, days)

        asyncio.run(run(
            token=token,
            start_date=start_date,
            end_date=end_date,
            output_format=output_format or config.default_output or "graph",
            output_file=output_file,
            include=include or join_patterns(config.include_repos),
            exclude=exclude or join_patterns(config.exclude_repos),
            branch=branch or config.branch,
            colors=config.color_scheme,
            api_url=api_url,
        ))
    except KeyboardInterrupt:
        err_console.print("\n\nOperation interrupted by user")
        ctx.exit(130)
    except AuthenticationError as exc:
        err_console.print(f"[red]Error: {escape(str(exc))}[/red]", highlight=False)
        err_console.print("Please check your GITHUB_TOKEN environment variable")
        if verbose:
            err_console.print_exception()
        ctx.exit(1)
    except Exception as exc:
        err_console.print(f"[red]Error: {escape(str(exc))}[/red]", highlight=False)
        if verbose:
            err_console.print_exception()
        ctx.exit(1)
