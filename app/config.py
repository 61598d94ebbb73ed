"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


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


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Timeouts applied to every outbound integration call.
    """

    connect_timeout_seconds: float = 10.0
    response_timeout_seconds: float = 30.0
    body_timeout_seconds: float = 30.0


@dataclass(frozen=True)
class PaginationSettings:
    """
    Page sizing for user listing endpoints.
    """

    default_page_size: int = 20
    max_page_size: int = 100


@dataclass(frozen=True)
class SeedSettings:
    """
    Credentials used when seeding the default integrations.
    """

    calendly_api_token: str | None = None


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return outbound HTTP timeout settings from environment variables.
    """

    return ExternalHTTPSettings(
        connect_timeout_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_CONNECT_TIMEOUT_SECONDS", 10.0)),
        response_timeout_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_RESPONSE_TIMEOUT_SECONDS", 30.0)),
        body_timeout_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BODY_TIMEOUT_SECONDS", 30.0)),
    )


@lru_cache(maxsize=1)
def get_pagination_settings() -> PaginationSettings:
    """
    Return pagination settings; the default never exceeds the maximum.
    """

    max_page_size = max(1, _get_int_env("API_MAX_PAGE_SIZE", 100))
    default_page_size = max(1, _get_int_env("API_DEFAULT_PAGE_SIZE", 20))
    return PaginationSettings(
        default_page_size=min(default_page_size, max_page_size),
        max_page_size=max_page_size,
    )


@lru_cache(maxsize=1)
def get_seed_settings() -> SeedSettings:
    return SeedSettings(calendly_api_token=_get_optional_str_env("CALENDLY_API_TOKEN"))
