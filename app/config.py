"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

DEFAULT_ALLOWED_MIME_TYPES: tuple[str, ...] = (
    "text/csv",
    "application/vnd.ms-excel",
    "text/plain",
)


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


def _get_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Read a comma-separated list; blank entries are dropped.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    items = tuple(item.strip() for item in raw_value.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class UploadSettings:
    """
    Runtime settings for bulk CSV uploads and record listing.
    """

    max_file_size_bytes: int = 10 * 1024 * 1024
    max_records_per_upload: int = 10000
    allowed_mime_types: tuple[str, ...] = DEFAULT_ALLOWED_MIME_TYPES
    default_batch_size: int = 100
    default_records_limit: int = 100
    default_records_offset: int = 0
    log_row_errors: bool = True


@dataclass(frozen=True)
class RateLimitSettings:
    """
    Fixed-window rate limiting applied to every inbound request.
    """

    enabled: bool = True
    max_requests: int = 10
    window_ms: int = 60000


@dataclass(frozen=True)
class ApiKeySettings:
    """
    Shared-secret header check for mutating endpoints.
    """

    api_key: str = "default-dev-key"
    header_name: str = "x-api-key"


@dataclass(frozen=True)
class DatabaseSettings:
    auto_create_schema: bool = True


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    """
    Return cached upload settings from environment variables.
    """

    return UploadSettings(
        max_file_size_bytes=max(1, _get_int_env("MAX_FILE_SIZE_BYTES", 10 * 1024 * 1024)),
        max_records_per_upload=max(1, _get_int_env("MAX_RECORDS_PER_UPLOAD", 10000)),
        allowed_mime_types=tuple(
            mime.lower() for mime in _get_list_env("ALLOWED_MIME_TYPES", DEFAULT_ALLOWED_MIME_TYPES)
        ),
        default_batch_size=max(1, _get_int_env("DEFAULT_BATCH_SIZE", 100)),
        default_records_limit=max(0, _get_int_env("DEFAULT_RECORDS_LIMIT", 100)),
        default_records_offset=max(0, _get_int_env("DEFAULT_RECORDS_OFFSET", 0)),
        log_row_errors=_get_bool_env("UPLOAD_LOG_ROW_ERRORS", True),
    )


@lru_cache(maxsize=1)
def get_rate_limit_settings() -> RateLimitSettings:
    """
    Return cached rate limit settings from environment variables.
    """

    return RateLimitSettings(
        enabled=_get_bool_env("RATE_LIMIT_ENABLED", True),
        max_requests=max(1, _get_int_env("RATE_LIMIT_MAX", 10)),
        window_ms=max(1, _get_int_env("RATE_LIMIT_WINDOW_MS", 60000)),
    )


@lru_cache(maxsize=1)
def get_api_key_settings() -> ApiKeySettings:
    """
    Return cached API key settings from environment variables.
    """

    _load_env_once()
    return ApiKeySettings(
        api_key=(os.getenv("API_KEY") or "default-dev-key").strip(),
        header_name=_get_str_env("API_KEY_HEADER", "x-api-key").lower(),
    )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
    return DatabaseSettings(
        auto_create_schema=_get_bool_env("DB_AUTO_CREATE_SCHEMA", True),
    )
