"""
app/services/record_builder.py

Builds persisted-record shapes from raw CSV rows.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from app.domain.bulk_upload import BulkUploadRecord, NormalizedValue, RawRow, RecordStatus
from app.services.errors import MalformedRowError
from app.services.value_normalizer import normalize_value


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecordBuilder:
    """
    Turns one raw row into an immutable ``BulkUploadRecord``.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ) -> None:
        self._clock = clock
        self._id_factory = id_factory

    def build(self, row: RawRow, row_index: int) -> BulkUploadRecord:
        """
        Normalize every named column of ``row``.

        Blank column names are dropped. Raises MalformedRowError when the row
        carries non-blank cells past the header width or a cell cannot be
        normalized.
        """

        # Blank trailing cells (a trailing comma) carry no data and are ignored.
        overflow = [cell for cell in row.get(None) or () if cell is not None and str(cell).strip()]
        if overflow:
            header_width = sum(1 for key in row if key is not None)
            raise MalformedRowError(
                row_index,
                f"Row has {header_width + len(overflow)} values but the header "
                f"defines {header_width} columns",
            )

        data: dict[str, NormalizedValue] = {}
        for key, value in row.items():
            if key is None:
                continue
            column = key.strip()
            if not column:
                continue
            try:
                data[column] = normalize_value(value)
            except Exception as exc:
                raise MalformedRowError(
                    row_index,
                    f"Column {column!r} could not be normalized: {exc}",
                ) from exc

        return BulkUploadRecord(
            id=self._id_factory(),
            data=data,
            status=RecordStatus.PENDING,
            created_at=self._clock(),
        )
