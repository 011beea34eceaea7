"""Repository name filtering."""

from __future__ import annotations

import re

from .errors import ConfigError
from .models import Repository


def _compile(pattern: str) -> re.Pattern[str]:
    # Only "*" is translated; anything else is regex syntax.
    try:
        return re.compile(pattern.replace("*", ".*"))
    except re.error as exc:
        raise ConfigError(f"Invalid repository pattern {pattern!r}: {exc}") from exc


def _matches(regex: re.Pattern[str], repo: Repository) -> bool:
    return bool(regex.search(repo.name) or regex.search(repo.full_name))


def join_patterns(patterns: list[str] | None) -> str | None:
    """Combine a list of patterns from the config file into one alternation."""
    if not patterns:
        return None
    return "|".join(patterns)


def filter_repos(
    repos: list[Repository],
    include: str | None = None,
    exclude: str | None = None,
) -> list[Repository]:
    """Keep repositories matching ``include`` and drop those matching ``exclude``.

    Both patterns are tested against the short name and the ``owner/name``
    form. Exclude wins when both match.
    """
    filtered = list(repos)
    if include:
        include_re = _compile(include)
        filtered = [r for r in filtered if _matches(include_re, r)]
    if exclude:
        exclude_re = _compile(exclude)
        filtered = [r for r in filtered if not _matches(exclude_re, r)]
    return filtered
