"""
app/services/bulk_upload_service.py

Service layer for bulk CSV uploads and record queries.

An upload is validated up front, then streamed row by row:

    parse -> RecordBuilder.build -> BatchAccumulator.push -> store.insert_records

A malformed row is reported against its 1-based index and skipped; it never
aborts the upload. Crossing the row ceiling does abort it. Batches flushed
before an abort stay persisted; records still buffered are discarded.
"""

from __future__ import annotations

import csv
import io
import logging
import uuid
from collections.abc import Iterator
from functools import lru_cache
from typing import Any

from fastapi import UploadFile

from app.config import get_upload_settings
from app.domain.bulk_upload import BulkUploadRecord, RawRow, RecordPage, RowError, StoreStats, UploadResult
from app.repositories.record_store import RecordStore
from app.services.batch_accumulator import BatchAccumulator
from app.services.errors import EmptyUploadError, InvalidCSVError, MalformedRowError, TooManyRowsError
from app.services.record_builder import RecordBuilder
from app.validators.upload_validator import UploadValidator

logger = logging.getLogger(__name__)


class BulkUploadService:
    """
    Coordinates CSV validation, parsing, normalization, and batched persistence.
    """

    def __init__(
        self,
        *,
        max_file_size_bytes: int,
        max_records_per_upload: int,
        allowed_mime_types: tuple[str, ...],
        default_batch_size: int,
        default_records_limit: int = 100,
        default_records_offset: int = 0,
        log_row_errors: bool = True,
        builder: RecordBuilder | None = None,
    ) -> None:
        self._max_records_per_upload = max(1, max_records_per_upload)
        self._default_batch_size = max(1, default_batch_size)
        self._default_records_limit = max(0, default_records_limit)
        self._default_records_offset = max(0, default_records_offset)
        self._log_row_errors = log_row_errors
        # The csv module's per-field cap is process-wide; a single cell may be as
        # large as the whole accepted file.
        if csv.field_size_limit() < max_file_size_bytes:
            csv.field_size_limit(max_file_size_bytes)
        self._validator = UploadValidator(
            max_file_size_bytes=max_file_size_bytes,
            allowed_mime_types=allowed_mime_types,
        )
        self._builder = builder or RecordBuilder()

    @property
    def default_batch_size(self) -> int:
        return self._default_batch_size

    def ingest_csv(
        self,
        *,
        upload_file: UploadFile | None,
        store: RecordStore,
        batch_size: int | None = None,
    ) -> UploadResult:
        """
        Stream a CSV upload into the store in batches of ``batch_size``.

        Args:
            upload_file: File to ingest; None raises MissingFileError.
            store:       Record store receiving one insert per flushed batch.
            batch_size:  Records per insert; falls back to the configured default.

        Raises:
            MissingFileError, PayloadTooLargeError, UnsupportedMediaTypeError:
                pre-stream validation failures.
            TooManyRowsError: the row ceiling was crossed mid-stream.
            InvalidCSVError: the payload is not UTF-8 or not parseable CSV.
            EmptyUploadError: the file has no data rows.
            StorePersistenceError: a batch insert failed.
        """

        upload = self._validator.validate(upload_file)
        effective_batch_size = self._default_batch_size if batch_size is None else batch_size
        accumulator = BatchAccumulator(store=store, batch_size=effective_batch_size)

        logger.info(
            "Bulk upload started filename=%r content_type=%r batch_size=%s",
            upload.filename,
            upload.content_type,
            effective_batch_size,
        )

        raw_file = upload.file
        raw_file.seek(0)
        text_stream: io.TextIOWrapper | None = None

        total_rows = 0
        records_processed = 0
        errors: list[RowError] = []
        completed = False

        try:
            text_stream = io.TextIOWrapper(raw_file, encoding="utf-8-sig", newline="")
            for raw_row in self._iter_rows(text_stream):
                total_rows += 1
                if total_rows > self._max_records_per_upload:
                    logger.warning(
                        "Bulk upload aborted at row ceiling limit=%s persisted=%s",
                        self._max_records_per_upload,
                        records_processed,
                    )
                    raise TooManyRowsError(self._max_records_per_upload)

                try:
                    record = self._builder.build(raw_row, total_rows)
                except MalformedRowError as exc:
                    self._record_error(errors, RowError(row=total_rows, error=str(exc)))
                    continue

                records_processed += accumulator.push(record)

            records_processed += accumulator.flush()
            completed = True

        except UnicodeDecodeError as exc:
            raise InvalidCSVError("CSV must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            raise InvalidCSVError(f"Invalid CSV format: {exc}") from exc
        finally:
            if not completed:
                accumulator.discard()
            if text_stream is not None:
                try:
                    text_stream.detach()
                except ValueError:
                    pass

        if records_processed == 0 and not errors:
            raise EmptyUploadError()

        logger.info(
            "Bulk upload finished total_rows=%s records_processed=%s row_errors=%s batches=%s",
            total_rows,
            records_processed,
            len(errors),
            accumulator.flush_count,
        )

        return UploadResult(
            success=True,
            total_rows=total_rows,
            records_processed=records_processed,
            errors=errors,
            message=f"Successfully processed {records_processed} records",
        )

    # ------------------------------------------------------------------
    # Record queries
    # ------------------------------------------------------------------

    def list_records(
        self,
        *,
        store: RecordStore,
        limit: int | None = None,
        offset: int | None = None,
    ) -> RecordPage:
        effective_limit = self._default_records_limit if limit is None else max(0, limit)
        effective_offset = self._default_records_offset if offset is None else max(0, offset)
        return store.list_records(limit=effective_limit, offset=effective_offset)

    def get_record(self, *, store: RecordStore, record_id: str | uuid.UUID) -> BulkUploadRecord | None:
        """
        Look up one record; identifiers that are not UUIDs simply match nothing.
        """

        if isinstance(record_id, uuid.UUID):
            parsed_id = record_id
        else:
            try:
                parsed_id = uuid.UUID(str(record_id).strip())
            except ValueError:
                return None
        return store.get_record(parsed_id)

    def clear_all_records(self, *, store: RecordStore) -> None:
        store.clear_records()
        logger.info("All bulk upload records cleared")

    def get_stats(self, *, store: RecordStore) -> StoreStats:
        return store.get_stats()

    # ------------------------------------------------------------------
    # Ingestion internals
    # ------------------------------------------------------------------

    @staticmethod
    def _iter_rows(text_stream: io.TextIOWrapper) -> Iterator[RawRow]:
        """
        Yield header-keyed rows with trimmed cells, skipping blank lines.
        """

        # strict: an unclosed quote raises instead of swallowing the rest of the file.
        reader = csv.DictReader(text_stream, strict=True)
        for raw_row in reader:
            if _is_blank_row(raw_row):
                continue
            yield {key: _trim_cell(value) for key, value in raw_row.items()}

    def _record_error(self, errors: list[RowError], error: RowError) -> None:
        if self._log_row_errors:
            logger.warning("CSV row rejected row=%s error=%s", error.row, error.error)
        errors.append(error)


def _trim_cell(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return [item.strip() for item in value]
    return value


def _is_blank_row(row: RawRow) -> bool:
    for value in row.values():
        if isinstance(value, list):
            if any(item.strip() for item in value):
                return False
        elif value is not None and value.strip():
            return False
    return True


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_bulk_upload_service() -> BulkUploadService:
    """
    Build and cache the upload service with env-driven settings.
    """
    settings = get_upload_settings()
    return BulkUploadService(
        max_file_size_bytes=settings.max_file_size_bytes,
        max_records_per_upload=settings.max_records_per_upload,
        allowed_mime_types=settings.allowed_mime_types,
        default_batch_size=settings.default_batch_size,
        default_records_limit=settings.default_records_limit,
        default_records_offset=settings.default_records_offset,
        log_row_errors=settings.log_row_errors,
    )
