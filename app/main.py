from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.api.middleware import RateLimitMiddleware
from app.config import (
    get_api_key_settings,
    get_database_settings,
    get_rate_limit_settings,
    get_upload_settings,
)
from app.services.rate_limiter import FixedWindowRateLimiter


def _validate_env() -> None:
    """
    Validate configuration at startup.

    Raises RuntimeError listing every problem so the operator can fix them
    in one restart cycle.
    """

    errors: list[str] = []

    if not get_api_key_settings().api_key:
        errors.append("API_KEY is whitespace only. Provide a non-empty key or unset it.")

    upload = get_upload_settings()
    if upload.default_batch_size > upload.max_records_per_upload:
        errors.append(
            f"DEFAULT_BATCH_SIZE={upload.default_batch_size} exceeds "
            f"MAX_RECORDS_PER_UPLOAD={upload.max_records_per_upload}."
        )
    if not upload.allowed_mime_types:
        errors.append("ALLOWED_MIME_TYPES resolved to an empty list.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Missing tables are created when DB_AUTO_CREATE_SCHEMA is on; otherwise
    startup aborts so the operator runs migrations first.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401
    from db.base import Base
    from db.session import get_engine

    log = logging.getLogger(__name__)
    engine = get_engine()
    actual: set[str] = set(sa_inspect(engine).get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if not missing:
        return

    if get_database_settings().auto_create_schema:
        Base.metadata.create_all(bind=engine)
        log.info("Created missing tables: %s", ", ".join(sorted(missing)))
        return

    log.critical(
        "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
        "the database: %s. Run 'alembic upgrade head' and restart.",
        len(missing),
        ", ".join(sorted(missing)),
    )
    raise RuntimeError(
        f"Schema mismatch: {len(missing)} table(s) missing from the database "
        f"({', '.join(sorted(missing))}). Run migrations and restart."
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema, start the rate limit sweep on boot; stop it on exit."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")

    limiter: FixedWindowRateLimiter | None = application.state.rate_limiter
    if limiter is not None:
        limiter.start()
    try:
        yield
    finally:
        if limiter is not None:
            limiter.stop()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Bulk Upload API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    rate_limit = get_rate_limit_settings()
    limiter: FixedWindowRateLimiter | None = None
    if rate_limit.enabled:
        limiter = FixedWindowRateLimiter(
            max_requests=rate_limit.max_requests,
            window_ms=rate_limit.window_ms,
        )
        application.add_middleware(RateLimitMiddleware, limiter=limiter)
    application.state.rate_limiter = limiter

    from app.api.routers import bulk_upload_router

    application.include_router(bulk_upload_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
