"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    for filename in (".env", ".env.local"):
        env_path = PROJECT_ROOT / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _resolve_path(raw: str | None) -> Path | None:
    """
    Resolve a configured path relative to the project root.
    """

    if not raw:
        return None
    path = Path(raw)
    return path if path.is_absolute() else PROJECT_ROOT / path


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for external connectors.
    """

    timeout_seconds: float = 30.0
    download_timeout_seconds: float = 60.0
    max_retries: int = 2
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 2.0


@dataclass(frozen=True)
class StatCanSettings:
    """
    Statistics Canada web data service settings.
    """

    enabled: bool = True
    base_url: str = "https://www150.statcan.gc.ca/t1/wds/rest"
    table_id: str = "34100133"
    language: str = "en"


@dataclass(frozen=True)
class SnapshotSettings:
    """
    Location of the precomputed rental dataset snapshot.
    """

    path: Path | None = None
    url: str | None = None


@dataclass(frozen=True)
class CacheSettings:
    """
    In-memory dataset cache policy.
    """

    ttl_seconds: float = 86400.0
    invalidation_check_seconds: float = 60.0
    signal_path: Path | None = None


@dataclass(frozen=True)
class RefreshSettings:
    """
    Background dataset refresh settings.
    """

    enabled: bool = True
    check_interval_seconds: float = 86400.0
    poll_minutes: int = 60
    last_check_path: Path | None = None


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared connector HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 30.0)),
        download_timeout_seconds=max(
            1.0, _get_float_env("EXTERNAL_HTTP_DOWNLOAD_TIMEOUT_SECONDS", 60.0)
        ),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 2)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
        rate_limit_per_second=max(0.1, _get_float_env("EXTERNAL_HTTP_RATE_LIMIT_PER_SECOND", 2.0)),
    )


@lru_cache(maxsize=1)
def get_statcan_settings() -> StatCanSettings:
    """
    Return Statistics Canada connector settings from environment variables.
    """

    return StatCanSettings(
        enabled=_get_bool_env("STATCAN_ENABLED", True),
        base_url=_get_str_env("STATCAN_WDS_BASE_URL", "https://www150.statcan.gc.ca/t1/wds/rest"),
        table_id=_get_str_env("STATCAN_TABLE_ID", "34100133"),
        language=_get_str_env("STATCAN_LANGUAGE", "en"),
    )


@lru_cache(maxsize=1)
def get_snapshot_settings() -> SnapshotSettings:
    """
    Return snapshot location settings from environment variables.
    """

    return SnapshotSettings(
        path=_resolve_path(_get_str_env("SNAPSHOT_PATH", "data/cmhc-data.json")),
        url=_get_optional_str_env("SNAPSHOT_URL"),
    )


@lru_cache(maxsize=1)
def get_cache_settings() -> CacheSettings:
    """
    Return dataset cache settings from environment variables.

    An empty CACHE_SIGNAL_PATH disables the file marker; invalidation is then
    in-process only.
    """

    _load_env_once()
    raw_signal_path = os.getenv("CACHE_SIGNAL_PATH")
    if raw_signal_path is None:
        raw_signal_path = "data/.cache-invalidated"
    return CacheSettings(
        ttl_seconds=max(1.0, _get_float_env("CACHE_TTL_SECONDS", 86400.0)),
        invalidation_check_seconds=max(
            0.0, _get_float_env("CACHE_INVALIDATION_CHECK_SECONDS", 60.0)
        ),
        signal_path=_resolve_path(raw_signal_path.strip()),
    )


@lru_cache(maxsize=1)
def get_refresh_settings() -> RefreshSettings:
    """
    Return background refresh settings from environment variables.
    """

    return RefreshSettings(
        enabled=_get_bool_env("REFRESH_ENABLED", True),
        check_interval_seconds=max(60.0, _get_float_env("REFRESH_CHECK_INTERVAL_SECONDS", 86400.0)),
        poll_minutes=max(1, _get_int_env("REFRESH_POLL_MINUTES", 60)),
        last_check_path=_resolve_path(_get_str_env("REFRESH_LAST_CHECK_PATH", "data/.last-check")),
    )
