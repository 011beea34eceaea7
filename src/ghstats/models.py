"""Data models for ghstats."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Repository:
    name: str
    full_name: str
    private: bool = False


@dataclass(frozen=True)
class CommitStats:
    additions: int
    deletions: int
    total: int


@dataclass(frozen=True)
class Commit:
    """A commit as listed by the API, with line stats when they could be fetched."""

    sha: str
    date: str
    message: str = ""
    author_name: str = ""
    author_email: str = ""
    stats: CommitStats | None = None


@dataclass
class DailyStats:
    date: str
    additions: int = 0
    deletions: int = 0
    net: int = 0
    commits: int = 0


@dataclass
class RepoStats:
    name: str
    additions: int
    deletions: int
    commits: int

    @property
    def lines(self) -> int:
        return self.additions + self.deletions


@dataclass
class Period:
    start: str
    end: str


@dataclass
class Summary:
    total_additions: int
    total_deletions: int
    net_change: int
    active_days: int
    avg_lines_per_day: int


@dataclass
class AggregatedStats:
    user: str
    period: Period
    summary: Summary
    daily_stats: list[DailyStats] = field(default_factory=list)
    repositories: list[RepoStats] = field(default_factory=list)

    @property
    def total_commits(self) -> int:
        return sum(r.commits for r in self.repositories)
