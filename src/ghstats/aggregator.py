"""Fold per-repository commit lists into daily and per-repository statistics."""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone

from .models import AggregatedStats, Commit, DailyStats, Period, RepoStats, Summary


def _commit_day(timestamp: str) -> str:
    """UTC calendar date (``YYYY-MM-DD``) of an ISO 8601 timestamp."""
    if timestamp.endswith("Z"):
        timestamp = timestamp[:-1] + "+00:00"
    moment = datetime.fromisoformat(timestamp)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).date().isoformat()


def _date_range(start_date: str, end_date: str) -> list[str]:
    start = date.fromisoformat(start_date)
    end = date.fromisoformat(end_date)
    return [(start + timedelta(days=i)).isoformat() for i in range((end - start).days + 1)]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def aggregate_stats(
    commits_by_repo: dict[str, list[Commit]],
    username: str,
    start_date: str,
    end_date: str,
) -> AggregatedStats:
    """Build the aggregated result for ``[start_date, end_date]``.

    Every date in the range gets a row, zero-filled when nothing was
    committed that day. Commits without stats count as commits with no
    line changes. Commits without a date count in the totals only.
    """
    daily: dict[str, DailyStats] = {}
    repositories: list[RepoStats] = []
    total_additions = 0
    total_deletions = 0

    for repo_name, commits in commits_by_repo.items():
        repo_stats = RepoStats(name=repo_name, additions=0, deletions=0, commits=0)
        for commit in commits:
            additions = commit.stats.additions if commit.stats else 0
            deletions = commit.stats.deletions if commit.stats else 0

            if commit.date:
                day = _commit_day(commit.date)
                bucket = daily.setdefault(day, DailyStats(date=day))
                bucket.additions += additions
                bucket.deletions += deletions
                bucket.net = bucket.additions - bucket.deletions
                bucket.commits += 1

            repo_stats.additions += additions
            repo_stats.deletions += deletions
            repo_stats.commits += 1

        total_additions += repo_stats.additions
        total_deletions += repo_stats.deletions
        repositories.append(repo_stats)

    daily_stats = [daily.get(day) or DailyStats(date=day) for day in _date_range(start_date, end_date)]
    daily_stats.sort(key=lambda d: d.date)

    active_days = sum(1 for d in daily_stats if d.commits > 0)
    avg_lines_per_day = (
        _round_half_up((total_additions + total_deletions) / active_days) if active_days else 0
    )

    # sorted() is stable, so ties keep encounter order
    repositories = sorted(repositories, key=lambda r: r.lines, reverse=True)

    return AggregatedStats(
        user=username,
        period=Period(start=start_date, end=end_date),
        summary=Summary(
            total_additions=total_additions,
            total_deletions=total_deletions,
            net_change=total_additions - total_deletions,
            active_days=active_days,
            avg_lines_per_day=avg_lines_per_day,
        ),
        daily_stats=daily_stats,
        repositories=repositories,
    )
