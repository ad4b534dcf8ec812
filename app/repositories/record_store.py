"""
app/repositories/record_store.py

Storage contract the bulk upload flow depends on.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Protocol

from app.domain.bulk_upload import BulkUploadRecord, RecordPage, StoreStats


class RecordStore(Protocol):
    """
    Durable record storage.

    ``insert_records`` must be all-or-nothing for one call.
    """

    def insert_records(self, records: Sequence[BulkUploadRecord]) -> int: ...

    def list_records(self, *, limit: int, offset: int) -> RecordPage: ...

    def get_record(self, record_id: uuid.UUID) -> BulkUploadRecord | None: ...

    def clear_records(self) -> None: ...

    def count_records(self) -> int: ...

    def get_stats(self) -> StoreStats: ...
