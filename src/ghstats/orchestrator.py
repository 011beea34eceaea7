"""Orchestrator: wires together client, filter, fetcher, aggregator, and renderer."""

from __future__ import annotations

import logging

from rich.console import Console

from .aggregator import aggregate_stats
from .config import ColorScheme
from .errors import AuthenticationError
from .fetcher import fetch_all_commits
from .filters import filter_repos
from .github.client import GitHubClient
from .models import AggregatedStats
from .renderer import render_output

logger = logging.getLogger(__name__)


def fetch_window(start_date: str, end_date: str) -> tuple[str, str]:
    """API ``since``/``until`` timestamps covering both boundary days."""
    return f"{start_date}T00:00:00Z", f"{end_date}T23:59:59Z"


async def run(
    token: str,
    start_date: str,
    end_date: str,
    output_format: str = "graph",
    output_file: str | None = None,
    include: str | None = None,
    exclude: str | None = None,
    branch: str | None = None,
    colors: ColorScheme | None = None,
    api_url: str | None = None,
) -> AggregatedStats | None:
    """Main pipeline: authenticate, fetch, aggregate, render.

    Returns ``None`` when there was nothing to report (no matching
    repositories or no commits in the period).
    """
    err_console = Console(stderr=True)

    async with GitHubClient(token=token, base_url=api_url) as client:
        logger.info("Validating GitHub token...")
        validation = await client.validate_token()
        if not validation.valid:
            raise AuthenticationError(validation.error or "GitHub authentication failed")
        username = validation.username
        logger.info("Authenticated as %s", username)
        logger.info("Date range: %s to %s", start_date, end_date)

        logger.info("Fetching repositories...")
        all_repos = await client.list_repos()
        repos = filter_repos(all_repos, include=include, exclude=exclude)
        if not repos:
            err_console.print("[yellow]Warning: No repositories match the filter criteria[/yellow]")
            return None

        logger.info("Analyzing %d repositories...", len(repos))
        since, until = fetch_window(start_date, end_date)
        commits_by_repo = await fetch_all_commits(
            client, repos, since=since, until=until, branch=branch
        )

    logger.info("Processing statistics...")
    stats = aggregate_stats(commits_by_repo, username, start_date, end_date)

    if stats.total_commits == 0:
        console = Console()
        console.print("[yellow]No commits found for the specified period[/yellow]")
        console.print(f"User: {username}", highlight=False)
        console.print(f"Period: {start_date} to {end_date}", highlight=False)
        console.print("\nTry:")
        console.print("  - Expanding the date range with --days or --since/--until")
        console.print("  - Checking if repositories have commits in this period")
        return None

    render_output(stats, output_format=output_format, output_file=output_file, colors=colors)
    return stats
