"""ghstats: GitHub commit statistics for the authenticated user."""

__version__ = "1.0.0"
