"""Config file loading and token resolution."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".ghstatsrc.json"
OUTPUT_FORMATS = ("graph", "json", "csv", "summary")
_COLOR_KEYS = ("additions", "deletions", "neutral")


@dataclass
class ColorScheme:
    additions: str = "blue"
    deletions: str = "red"
    neutral: str = "default"


def _string_list(data: dict, key: str) -> list[str]:
    value = data.get(key) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"Invalid {key}: expected a list of strings")
    return list(value)


@dataclass
class Config:
    default_days: int | None = None
    default_output: str | None = None
    include_repos: list[str] = field(default_factory=list)
    exclude_repos: list[str] = field(default_factory=list)
    branch: str | None = None
    color_scheme: ColorScheme = field(default_factory=ColorScheme)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        """Build a config from the camelCase JSON keys, rejecting mistyped values."""
        colors = data.get("colorScheme") or {}
        if not isinstance(colors, dict):
            raise ConfigError("Invalid colorScheme: expected an object")
        for key, value in colors.items():
            if key in _COLOR_KEYS and not isinstance(value, str):
                raise ConfigError(f"Invalid colorScheme.{key}: expected a string")
        branch = data.get("branch")
        if branch is not None and not isinstance(branch, str):
            raise ConfigError("Invalid branch: expected a string")
        return cls(
            default_days=data.get("defaultDays"),
            default_output=data.get("defaultOutput"),
            include_repos=_string_list(data, "includeRepos"),
            exclude_repos=_string_list(data, "excludeRepos"),
            branch=branch,
            color_scheme=ColorScheme(**{k: v for k, v in colors.items() if k in _COLOR_KEYS}),
        )


def config_paths() -> list[Path]:
    return [Path.cwd() / CONFIG_FILENAME, Path.home() / CONFIG_FILENAME]


def load_config(paths: list[Path] | None = None) -> Config:
    """Load the first readable config file; an empty config if there is none."""
    for path in paths if paths is not None else config_paths():
        if not path.exists():
            continue
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Could not parse config file %s", path)
            continue
        if not isinstance(data, dict):
            logger.warning("Could not parse config file %s", path)
            continue
        return Config.from_dict(data)
    return Config()


def validate_config(config: Config) -> None:
    if config.default_output and config.default_output not in OUTPUT_FORMATS:
        raise ConfigError(f"Invalid output format: {config.default_output}")
    if config.default_days is not None and (
        not isinstance(config.default_days, int) or config.default_days < 0
    ):
        raise ConfigError(f"Invalid defaultDays: {config.default_days}")


def resolve_token(cli_token: str | None = None) -> str | None:
    """The ``--token`` value wins over ``GITHUB_TOKEN``."""
    if cli_token:
        return cli_token
    return os.environ.get("GITHUB_TOKEN") or None
