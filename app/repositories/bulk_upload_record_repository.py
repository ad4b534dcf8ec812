"""
app/repositories/bulk_upload_record_repository.py

Persistence layer for bulk upload records.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.bulk_upload import BulkUploadRecord, RecordPage, RecordStatus, StoreStats
from app.services.errors import StorePersistenceError
from db.models.bulk_upload_record import (
    STORE_METADATA_ROW_ID,
    BulkUploadRecordRow,
    BulkUploadStoreMetadata,
)

logger = logging.getLogger(__name__)

_STORE_DESCRIPTION = "Records persisted by bulk CSV uploads"

_DIALECT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class BulkUploadRecordRepository:
    """
    SQLAlchemy-backed record store.

    Every write commits its own transaction, so one ``insert_records`` call
    persists a whole batch or nothing.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def insert_records(self, records: Sequence[BulkUploadRecord]) -> int:
        if not records:
            return 0

        rows = [
            BulkUploadRecordRow(
                id=record.id,
                data=dict(record.data),
                status=record.status.value,
                created_at=record.created_at,
            )
            for record in records
        ]
        try:
            self._session.add_all(rows)
            self._touch_metadata()
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.exception("Record insert failed batch_size=%s", len(rows))
            raise StorePersistenceError("Failed to write to database") from exc
        return len(rows)

    def list_records(self, *, limit: int, offset: int) -> RecordPage:
        try:
            total = self._count()
            rows = self._session.scalars(
                select(BulkUploadRecordRow)
                .order_by(BulkUploadRecordRow.sequence_id)
                .offset(max(0, offset))
                .limit(max(0, limit))
            ).all()
        except SQLAlchemyError as exc:
            logger.exception("Record listing failed limit=%s offset=%s", limit, offset)
            raise StorePersistenceError("Failed to read database") from exc
        return RecordPage(total=total, records=[self._to_domain(row) for row in rows])

    def get_record(self, record_id: uuid.UUID) -> BulkUploadRecord | None:
        try:
            row = self._session.scalars(
                select(BulkUploadRecordRow).where(BulkUploadRecordRow.id == record_id)
            ).one_or_none()
        except SQLAlchemyError as exc:
            logger.exception("Record lookup failed id=%s", record_id)
            raise StorePersistenceError("Failed to read database") from exc
        return self._to_domain(row) if row is not None else None

    def clear_records(self) -> None:
        try:
            self._session.execute(delete(BulkUploadRecordRow))
            self._touch_metadata()
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.exception("Record clear failed")
            raise StorePersistenceError("Failed to write to database") from exc

    def count_records(self) -> int:
        try:
            return self._count()
        except SQLAlchemyError as exc:
            logger.exception("Record count failed")
            raise StorePersistenceError("Failed to read database") from exc

    def get_stats(self) -> StoreStats:
        try:
            total = self._count()
            last_updated = self._session.scalar(
                select(BulkUploadStoreMetadata.updated_at).where(
                    BulkUploadStoreMetadata.id == STORE_METADATA_ROW_ID
                )
            )
        except SQLAlchemyError as exc:
            logger.exception("Store stats lookup failed")
            raise StorePersistenceError("Failed to read database") from exc
        return StoreStats(total_records=total, last_updated=_as_utc(last_updated))

    def _count(self) -> int:
        return int(self._session.scalar(select(func.count()).select_from(BulkUploadRecordRow)) or 0)

    def _touch_metadata(self) -> None:
        # Upsert, so concurrent first writers cannot both insert the single row.
        dialect = self._session.get_bind().dialect.name
        insert = _DIALECT_INSERTS.get(dialect)
        if insert is None:
            raise StorePersistenceError(f"Unsupported database dialect: {dialect}")

        now = datetime.now(timezone.utc)
        statement = insert(BulkUploadStoreMetadata.__table__).values(
            id=STORE_METADATA_ROW_ID,
            description=_STORE_DESCRIPTION,
            created_at=now,
            updated_at=now,
        )
        self._session.execute(
            statement.on_conflict_do_update(
                index_elements=["id"],
                set_={"updated_at": now},
            )
        )

    @staticmethod
    def _to_domain(row: BulkUploadRecordRow) -> BulkUploadRecord:
        return BulkUploadRecord(
            id=row.id,
            data=dict(row.data),
            status=RecordStatus(row.status),
            created_at=_as_utc(row.created_at),
        )
