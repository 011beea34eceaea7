"""Async GitHub REST API client."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any
from urllib.request import getproxies, proxy_bypass

import httpx

from .. import __version__
from ..errors import RateLimitError
from ..models import Commit, CommitStats, Repository
from .rate_limit import RateLimitMonitor, RateLimitTransport

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
PER_PAGE = 100


def _default_transport(base_url: str) -> httpx.AsyncHTTPTransport:
    """A transport that honours the proxy environment for ``base_url``.

    httpx only reads the proxy variables when it builds its own transport, so
    the wrapped one has to pick them up here.
    """
    url = httpx.URL(base_url)
    proxies = getproxies()
    proxy = proxies.get(url.scheme) or proxies.get("all")
    if proxy and proxy_bypass(url.host):
        proxy = None
    return httpx.AsyncHTTPTransport(proxy=proxy)


@dataclass
class TokenValidation:
    valid: bool
    username: str | None = None
    error: str | None = None
    invalid_token: bool = False


class GitHubClient:
    """Authenticated access to the endpoints ghstats needs.

    Use as an async context manager so the underlying connection pool is
    closed::

        async with GitHubClient(token) as client:
            repos = await client.list_repos()
    """

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        monitor: RateLimitMonitor | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.rate_limit = monitor or RateLimitMonitor()
        base_url = (base_url or DEFAULT_API_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"token {token}",
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": f"gh-commit-stats/{__version__}",
            },
            transport=RateLimitTransport(
                transport or _default_transport(base_url), self.rate_limit
            ),
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._client.get(path, params=params)
        response.raise_for_status()
        return response.json()

    async def validate_token(self) -> TokenValidation:
        """Look up the authenticated user."""
        try:
            data = await self._get("/user")
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 401:
                return TokenValidation(valid=False, error="Invalid GitHub token", invalid_token=True)
            return TokenValidation(valid=False, error=str(exc))
        except httpx.HTTPError as exc:
            return TokenValidation(valid=False, error=str(exc) or type(exc).__name__)
        return TokenValidation(valid=True, username=data["login"])

    async def list_repos(self) -> list[Repository]:
        """List the authenticated user's repositories, most recently updated first."""
        repos: list[Repository] = []
        page = 1
        while True:
            try:
                data = await self._get(
                    "/user/repos",
                    params={
                        "page": page,
                        "per_page": PER_PAGE,
                        "sort": "updated",
                        "direction": "desc",
                    },
                )
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code == 403:
                    raise RateLimitError(
                        "GitHub API rate limit exceeded. Please wait and try again."
                    ) from exc
                raise

            if not data:
                break
            repos.extend(
                Repository(
                    name=item["name"],
                    full_name=item["full_name"],
                    private=bool(item.get("private", False)),
                )
                for item in data
            )
            logger.info("Fetched %d repositories...", len(repos))
            if len(data) < PER_PAGE:
                break
            page += 1

        return repos

    async def get_commit_stats(self, owner: str, repo: str, sha: str) -> CommitStats | None:
        data = await self._get(f"/repos/{owner}/{repo}/commits/{sha}")
        stats = data.get("stats")
        if not stats:
            return None
        return CommitStats(
            additions=stats.get("additions", 0) or 0,
            deletions=stats.get("deletions", 0) or 0,
            total=stats.get("total", 0) or 0,
        )

    async def _with_stats(self, owner: str, repo: str, item: dict[str, Any]) -> Commit:
        info = item.get("commit") or {}
        author = info.get("author") or {}
        committer = info.get("committer") or {}
        try:
            stats = await self.get_commit_stats(owner, repo, item["sha"])
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug("No stats for %s/%s@%s: %s", owner, repo, item["sha"][:7], exc)
            stats = None
        return Commit(
            sha=item["sha"],
            date=author.get("date") or committer.get("date") or "",
            message=info.get("message", ""),
            author_name=author.get("name", ""),
            author_email=author.get("email", ""),
            stats=stats,
        )

    async def list_commits(
        self,
        owner: str,
        repo: str,
        since: str,
        until: str,
        branch: str | None = None,
    ) -> list[Commit]:
        """List commits in ``[since, until)`` with their line stats.

        Pages are fetched in order; the stats for one page are fetched
        concurrently and joined before the next page is requested. An empty
        repository yields no commits. Any failure other than an exhausted
        rate limit ends the listing with the commits gathered so far.
        """
        commits: list[Commit] = []
        page = 1
        while True:
            params: dict[str, Any] = {
                "since": since,
                "until": until,
                "page": page,
                "per_page": PER_PAGE,
            }
            if branch:
                params["sha"] = branch

            try:
                data = await self._get(f"/repos/{owner}/{repo}/commits", params=params)
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code == 409:
                    break
                if RateLimitMonitor.is_exhausted(exc.response):
                    raise RateLimitError("GitHub API rate limit exceeded") from exc
                logger.debug("Stopped listing %s/%s at page %d: %s", owner, repo, page, exc)
                break
            except (httpx.HTTPError, ValueError) as exc:
                logger.debug("Stopped listing %s/%s at page %d: %s", owner, repo, page, exc)
                break

            if not isinstance(data, list) or not data:
                break
            commits.extend(
                await asyncio.gather(*(self._with_stats(owner, repo, item) for item in data))
            )
            if len(data) < PER_PAGE:
                break
            page += 1

        return commits
