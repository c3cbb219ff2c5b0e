from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from roaster.aggregate import LOOKBACK_DAYS, REPO_LIMIT

# GitHub caps per_page at 100 and repositories are fetched as a single page
MAX_REPO_LIMIT = 100

KNOWN_KEYS = {"github_token", "repo_limit", "lookback_days", "timezone"}


@dataclass(frozen=True)
class AppConfig:
    github_token: str | None = None
    repo_limit: int = REPO_LIMIT
    lookback_days: int = LOOKBACK_DAYS
    timezone: str | None = None

    @property
    def tz(self) -> ZoneInfo | None:
        return ZoneInfo(self.timezone) if self.timezone else None


def load_app_config(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    env = os.environ if env is None else env
    data: dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with path.open("r", encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config {path} must be a mapping")

        unknown = sorted(set(loaded) - KNOWN_KEYS)
        if unknown:
            raise ValueError(f"Config {path} has unknown key(s): {', '.join(unknown)}")
        data = loaded

    token = data.get("github_token") or env.get("GITHUB_TOKEN") or None

    return validate_config(
        AppConfig(
            github_token=str(token) if token else None,
            repo_limit=data.get("repo_limit", REPO_LIMIT),
            lookback_days=data.get("lookback_days", LOOKBACK_DAYS),
            timezone=str(data["timezone"]) if data.get("timezone") else None,
        )
    )


def apply_overrides(config: AppConfig, **overrides: Any) -> AppConfig:
    values = {key: value for key, value in overrides.items() if value is not None}
    return validate_config(replace(config, **values))


def validate_config(config: AppConfig) -> AppConfig:
    for key in ("repo_limit", "lookback_days"):
        value = getattr(config, key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(f"{key} must be a positive integer, got {value!r}")

    if config.repo_limit > MAX_REPO_LIMIT:
        raise ValueError(f"repo_limit must be at most {MAX_REPO_LIMIT}, got {config.repo_limit}")

    if config.timezone:
        try:
            ZoneInfo(config.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {config.timezone}") from exc

    return config
