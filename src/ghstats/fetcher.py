"""Batched commit fetching across repositories."""

from __future__ import annotations

import asyncio
import logging

from .github.client import GitHubClient
from .models import Commit, Repository

logger = logging.getLogger(__name__)

BATCH_SIZE = 10


async def fetch_all_commits(
    client: GitHubClient,
    repos: list[Repository],
    since: str,
    until: str,
    branch: str | None = None,
    batch_size: int = BATCH_SIZE,
) -> dict[str, list[Commit]]:
    """Fetch commits for every repository, ``batch_size`` repositories at a time.

    A batch must finish before the next one starts. A repository whose fetch
    raises contributes nothing; repositories without commits are left out of
    the result.
    """
    commits_by_repo: dict[str, list[Commit]] = {}
    processed = 0
    total = len(repos)

    async def _fetch(repo: Repository) -> list[Commit]:
        nonlocal processed
        owner, name = repo.full_name.split("/", 1)
        try:
            commits = await client.list_commits(
                owner, name, since=since, until=until, branch=branch
            )
        except Exception as exc:
            processed += 1
            logger.info(
                "Progress: %d/%d repositories analyzed (error: %s)", processed, total, repo.full_name
            )
            logger.debug("Failed to fetch commits for %s: %s", repo.full_name, exc)
            return []
        processed += 1
        logger.info("Progress: %d/%d repositories analyzed...", processed, total)
        return commits

    for start in range(0, total, batch_size):
        batch = repos[start:start + batch_size]
        results = await asyncio.gather(*(_fetch(repo) for repo in batch))
        for repo, commits in zip(batch, results):
            if commits:
                commits_by_repo[repo.full_name] = commits

    return commits_by_repo
