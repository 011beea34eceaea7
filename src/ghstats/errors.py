"""Exception hierarchy for ghstats."""

from __future__ import annotations


class GhStatsError(Exception):
    """Base class for errors reported to the user."""


class AuthenticationError(GhStatsError):
    """Missing or rejected GitHub token."""


class ConfigError(GhStatsError):
    """Invalid configuration value, date or repository pattern."""


class RateLimitError(GhStatsError):
    """GitHub API quota still exhausted after the automatic retry."""
