"""
Shared fixtures: in-memory SQLite store and a fake store.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401
from app.repositories.bulk_upload_record_repository import BulkUploadRecordRepository
from db.base import Base
from db.session import build_session_factory
from tests.support import FakeRecordStore


@pytest.fixture()
def fake_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture()
def db_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def db_session(db_engine: Engine) -> Iterator[Session]:
    session = build_session_factory(db_engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def record_store(db_session: Session) -> BulkUploadRecordRepository:
    return BulkUploadRecordRepository(db_session)
