"""
app/services/batch_accumulator.py

Bounded in-memory buffer between the row stream and the record store.
"""

from __future__ import annotations

import logging
import threading

from app.domain.bulk_upload import BulkUploadRecord
from app.repositories.record_store import RecordStore

logger = logging.getLogger(__name__)


class BatchAccumulator:
    """
    Buffers records and flushes them to the store ``batch_size`` at a time.

    The buffer never holds more than ``batch_size`` records: the push that
    fills it flushes before returning.
    """

    def __init__(self, *, store: RecordStore, batch_size: int) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._store = store
        self._batch_size = batch_size
        self._buffer: list[BulkUploadRecord] = []
        self._lock = threading.RLock()
        self._total_inserted = 0
        self._flush_count = 0

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._buffer)

    @property
    def total_inserted(self) -> int:
        return self._total_inserted

    @property
    def flush_count(self) -> int:
        return self._flush_count

    def push(self, record: BulkUploadRecord) -> int:
        """
        Buffer one record; return the inserted count if this push flushed.
        """

        with self._lock:
            self._buffer.append(record)
            if len(self._buffer) >= self._batch_size:
                return self.flush()
            return 0

    def flush(self) -> int:
        """
        Persist and clear the buffer. Empty buffers are a no-op returning 0.

        The buffer is cleared even when the store raises; the error propagates.
        """

        with self._lock:
            if not self._buffer:
                return 0
            batch = list(self._buffer)
            try:
                inserted = self._store.insert_records(batch)
            finally:
                self._buffer.clear()
            self._total_inserted += inserted
            self._flush_count += 1
            logger.info(
                "Flushed batch batch_number=%s size=%s inserted=%s",
                self._flush_count,
                len(batch),
                inserted,
            )
            return inserted

    def discard(self) -> int:
        """
        Drop unflushed records; return how many were dropped.
        """

        with self._lock:
            dropped = len(self._buffer)
            self._buffer.clear()
        if dropped:
            logger.warning("Discarded unflushed records count=%s", dropped)
        return dropped
