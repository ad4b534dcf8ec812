"""
tests/test_config.py

Environment-driven settings and database URL resolution.
"""

from __future__ import annotations

import pytest

from app.config import (
    DEFAULT_ALLOWED_MIME_TYPES,
    get_api_key_settings,
    get_rate_limit_settings,
    get_upload_settings,
)
from app.main import create_app
from db.config import normalize_postgres_url, resolve_database_url

_ENV_NAMES = (
    "MAX_FILE_SIZE_BYTES",
    "MAX_RECORDS_PER_UPLOAD",
    "ALLOWED_MIME_TYPES",
    "DEFAULT_BATCH_SIZE",
    "UPLOAD_LOG_ROW_ERRORS",
    "RATE_LIMIT_ENABLED",
    "RATE_LIMIT_MAX",
    "RATE_LIMIT_WINDOW_MS",
    "API_KEY",
    "API_KEY_HEADER",
)


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    for getter in (get_upload_settings, get_rate_limit_settings, get_api_key_settings):
        getter.cache_clear()
    yield
    for getter in (get_upload_settings, get_rate_limit_settings, get_api_key_settings):
        getter.cache_clear()


def test_defaults() -> None:
    upload = get_upload_settings()
    rate_limit = get_rate_limit_settings()
    api_key = get_api_key_settings()

    assert upload.max_file_size_bytes == 10 * 1024 * 1024
    assert upload.max_records_per_upload == 10000
    assert upload.allowed_mime_types == DEFAULT_ALLOWED_MIME_TYPES
    assert upload.default_batch_size == 100
    assert upload.log_row_errors is True
    assert (rate_limit.enabled, rate_limit.max_requests, rate_limit.window_ms) == (True, 10, 60000)
    assert (api_key.api_key, api_key.header_name) == ("default-dev-key", "x-api-key")


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAX_RECORDS_PER_UPLOAD", "500")
    monkeypatch.setenv("ALLOWED_MIME_TYPES", " Text/CSV , ,application/csv")
    monkeypatch.setenv("UPLOAD_LOG_ROW_ERRORS", "off")
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "0")
    monkeypatch.setenv("API_KEY_HEADER", "X-Token")

    assert get_upload_settings().max_records_per_upload == 500
    assert get_upload_settings().allowed_mime_types == ("text/csv", "application/csv")
    assert get_upload_settings().log_row_errors is False
    assert get_rate_limit_settings().enabled is False
    assert get_api_key_settings().header_name == "x-token"


def test_unparseable_and_out_of_range_numbers_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEFAULT_BATCH_SIZE", "lots")
    monkeypatch.setenv("RATE_LIMIT_MAX", "-4")

    assert get_upload_settings().default_batch_size == 100
    assert get_rate_limit_settings().max_requests == 1


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("postgres://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("sqlite:///tmp/x.db", "sqlite:///tmp/x.db"),
    ],
)
def test_normalize_postgres_url(url: str, expected: str) -> None:
    assert normalize_postgres_url(url) == expected


def test_database_url_priority(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgres://direct/db")
    monkeypatch.setenv("LOCAL_DATABASE_URL", "postgresql://local/db")

    assert resolve_database_url() == "postgresql+psycopg://direct/db"

    monkeypatch.delenv("DATABASE_URL")
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("CLOUD_DATABASE_URL", "postgresql://cloud/db")

    assert resolve_database_url() == "postgresql+psycopg://cloud/db"


def test_database_url_falls_back_to_sqlite(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)

    url = resolve_database_url()

    assert url.startswith("sqlite:///")
    assert url.endswith("bulk_upload.db")


def test_whitespace_only_api_key_fails_startup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_KEY", "   ")

    with pytest.raises(RuntimeError, match="API_KEY is whitespace only"):
        create_app()


def test_empty_api_key_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_KEY", "")

    create_app()

    assert get_api_key_settings().api_key == "default-dev-key"
