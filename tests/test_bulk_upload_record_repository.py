"""
tests/test_bulk_upload_record_repository.py

Store behaviour against an in-memory SQLite database.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from unittest import mock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.domain.bulk_upload import BulkUploadRecord, RecordStatus
from app.repositories.bulk_upload_record_repository import BulkUploadRecordRepository
from app.services.bulk_upload_service import BulkUploadService
from app.services.errors import StorePersistenceError
from app.services.record_builder import RecordBuilder
from db.models.bulk_upload_record import STORE_METADATA_ROW_ID, BulkUploadStoreMetadata
from db.session import build_session_factory
from tests.support import make_upload


def _record(**data: object) -> BulkUploadRecord:
    return BulkUploadRecord(
        id=uuid.uuid4(),
        data=data,
        status=RecordStatus.PENDING,
        created_at=datetime(2026, 10, 19, 8, 30, 15, 123456, tzinfo=timezone.utc),
    )


def test_empty_store_stats(record_store: BulkUploadRecordRepository) -> None:
    stats = record_store.get_stats()

    assert stats.total_records == 0
    assert stats.last_updated is None


def test_insert_returns_count_and_updates_stats(record_store: BulkUploadRecordRepository) -> None:
    inserted = record_store.insert_records([_record(a=1), _record(a=2)])

    stats = record_store.get_stats()
    assert inserted == 2
    assert stats.total_records == 2
    assert stats.last_updated is not None
    assert stats.last_updated.tzinfo is not None


def test_insert_of_nothing_is_noop(record_store: BulkUploadRecordRepository) -> None:
    assert record_store.insert_records([]) == 0
    assert record_store.get_stats().last_updated is None


def test_stats_are_idempotent_without_writes(record_store: BulkUploadRecordRepository) -> None:
    record_store.insert_records([_record(a=1)])

    assert record_store.get_stats() == record_store.get_stats()


def test_record_round_trips_unchanged(record_store: BulkUploadRecordRepository) -> None:
    original = _record(id=1, name="Ann", score=9.5, active=True, note=None, code="007")
    record_store.insert_records([original])

    loaded = record_store.get_record(original.id)

    assert loaded == original


def test_unknown_record_is_absent(record_store: BulkUploadRecordRepository) -> None:
    assert record_store.get_record(uuid.uuid4()) is None


def test_list_records_pages_in_insertion_order(record_store: BulkUploadRecordRepository) -> None:
    record_store.insert_records([_record(n=index) for index in range(1, 4)])
    record_store.insert_records([_record(n=index) for index in range(4, 6)])

    page = record_store.list_records(limit=2, offset=1)

    assert page.total == 5
    assert [record.data["n"] for record in page.records] == [2, 3]
    assert record_store.list_records(limit=10, offset=10).records == []


def test_clear_removes_everything_and_touches_metadata(record_store: BulkUploadRecordRepository) -> None:
    record_store.insert_records([_record(a=1)])
    before = record_store.get_stats().last_updated

    record_store.clear_records()

    stats = record_store.get_stats()
    assert stats.total_records == 0
    assert record_store.count_records() == 0
    assert stats.last_updated is not None
    assert before is not None and stats.last_updated >= before


def test_insert_failure_rolls_back_whole_batch(record_store: BulkUploadRecordRepository, db_session) -> None:
    record_store.insert_records([_record(a=1)])

    with mock.patch.object(db_session, "commit", side_effect=OperationalError("INSERT", {}, Exception("disk I/O error"))):
        with pytest.raises(StorePersistenceError, match="Failed to write to database"):
            record_store.insert_records([_record(a=2), _record(a=3)])

    assert record_store.count_records() == 1


def test_second_writer_with_stale_metadata_view_keeps_its_batch(db_engine, db_session) -> None:
    first_writer = BulkUploadRecordRepository(db_session)
    other_session = build_session_factory(db_engine)()
    second_writer = BulkUploadRecordRepository(other_session)
    try:
        # The second writer last looked before the first writer created the metadata row.
        with mock.patch.object(other_session, "get", return_value=None):
            first_writer.insert_records([_record(a=1)])
            inserted = second_writer.insert_records([_record(a=2), _record(a=3)])
    finally:
        other_session.close()

    stats = first_writer.get_stats()
    assert inserted == 2
    assert stats.total_records == 3
    assert stats.last_updated is not None


def test_metadata_row_stays_single(record_store: BulkUploadRecordRepository, db_session) -> None:
    record_store.insert_records([_record(a=1)])
    record_store.clear_records()
    record_store.insert_records([_record(a=2)])

    rows = db_session.scalars(select(BulkUploadStoreMetadata)).all()
    assert [row.id for row in rows] == [STORE_METADATA_ROW_ID]
    assert rows[0].created_at is not None


def test_pipeline_records_are_retrievable_unchanged(record_store: BulkUploadRecordRepository) -> None:
    service = BulkUploadService(
        max_file_size_bytes=1024 * 1024,
        max_records_per_upload=100,
        allowed_mime_types=("text/csv",),
        default_batch_size=2,
        builder=RecordBuilder(),
    )
    captured: list[BulkUploadRecord] = []
    original_insert = record_store.insert_records

    def _capture(records):  # type: ignore[no-untyped-def]
        captured.extend(records)
        return original_insert(records)

    with mock.patch.object(record_store, "insert_records", side_effect=_capture):
        result = service.ingest_csv(
            upload_file=make_upload("id,name,active\n1,Ann,true\n2,,FALSE\n3,Cy,\n"),
            store=record_store,
        )

    assert result.records_processed == 3
    assert len(captured) == 3
    for built in captured:
        assert record_store.get_record(built.id) == built
