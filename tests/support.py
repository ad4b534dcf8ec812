"""
Test helpers shared across modules: upload builders and a fake record store.
"""

from __future__ import annotations

import io
import uuid
from collections.abc import Sequence

from fastapi import UploadFile
from starlette.datastructures import Headers

from app.domain.bulk_upload import BulkUploadRecord, RecordPage, StoreStats
from app.services.errors import StorePersistenceError


def make_upload(
    content: bytes | str,
    *,
    filename: str | None = "data.csv",
    content_type: str | None = "text/csv",
    size: int | None = -1,
) -> UploadFile:
    """
    Build an UploadFile as FastAPI would hand it to a route.

    ``size=-1`` means "the real payload length"; ``None`` leaves it undeclared.
    """

    payload = content.encode("utf-8") if isinstance(content, str) else content
    headers = Headers({"content-type": content_type}) if content_type else Headers({})
    return UploadFile(
        file=io.BytesIO(payload),
        size=len(payload) if size == -1 else size,
        filename=filename,
        headers=headers,
    )


class FakeRecordStore:
    """
    In-memory store that records every insert call.
    """

    def __init__(self, *, fail_on_call: int | None = None) -> None:
        self.records: list[BulkUploadRecord] = []
        self.insert_calls: list[int] = []
        self.fail_on_call = fail_on_call
        self.clear_calls = 0

    def insert_records(self, records: Sequence[BulkUploadRecord]) -> int:
        self.insert_calls.append(len(records))
        if self.fail_on_call is not None and len(self.insert_calls) == self.fail_on_call:
            raise StorePersistenceError("Failed to write to database")
        self.records.extend(records)
        return len(records)

    def list_records(self, *, limit: int, offset: int) -> RecordPage:
        return RecordPage(total=len(self.records), records=self.records[offset : offset + limit])

    def get_record(self, record_id: uuid.UUID) -> BulkUploadRecord | None:
        return next((record for record in self.records if record.id == record_id), None)

    def clear_records(self) -> None:
        self.clear_calls += 1
        self.records.clear()

    def count_records(self) -> int:
        return len(self.records)

    def get_stats(self) -> StoreStats:
        return StoreStats(total_records=len(self.records), last_updated=None)
