"""
Startup configuration for CommitBoard.

All values come from the process environment (optionally seeded from a .env
file by app.main) and are read exactly once. There is no runtime
reconfiguration.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    github_token: str
    cache_ttl_seconds: int = 300
    cache_max_entries: int = 256
    fetch_max_workers: int = 8
    github_api_base: str = "https://api.github.com"
    github_api_version: str = "2022-11-28"
    port: int = 8080
    log_level: str = "INFO"


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}.")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}.")
    return value


def _log_level(env: Mapping[str, str]) -> str:
    level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"LOG_LEVEL must be a logging level name, got {level!r}.")
    return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    token = (env.get("GITHUB_TOKEN") or "").strip()
    if not token:
        raise ConfigError("GitHub token missing. Set GITHUB_TOKEN in .env file.")

    return Settings(
        github_token=token,
        cache_ttl_seconds=_positive_int(env, "CACHE_TTL", 300),
        cache_max_entries=_positive_int(env, "CACHE_MAX_ENTRIES", 256),
        fetch_max_workers=_positive_int(env, "FETCH_MAX_WORKERS", 8),
        github_api_base=(env.get("GITHUB_API_BASE") or "https://api.github.com").rstrip("/"),
        github_api_version=env.get("GITHUB_API_VERSION", "2022-11-28"),
        port=_positive_int(env, "PORT", 8080),
        log_level=_log_level(env),
    )
