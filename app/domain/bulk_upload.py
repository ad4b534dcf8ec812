"""
app/domain/bulk_upload.py

Domain models used by the bulk CSV upload flow.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union

# Closed set of scalar shapes a CSV cell can normalize to.
NormalizedValue = Union[str, int, float, bool, None]

# One parsed CSV line. Cells past the header width are collected under the
# ``None`` key by csv.DictReader; missing trailing cells are ``None``.
RawRow = Mapping[Union[str, None], Union[str, list[str], None]]


class RecordStatus(str, Enum):
    PENDING = "pending"


@dataclass(frozen=True)
class BulkUploadRecord:
    """
    Normalized record built from one CSV row.
    """

    id: uuid.UUID
    data: Mapping[str, NormalizedValue]
    status: RecordStatus
    created_at: datetime


@dataclass(frozen=True)
class RowError:
    """
    One row that could not be turned into a record.
    """

    row: int
    error: str


@dataclass(frozen=True)
class UploadResult:
    """
    End-of-upload summary.
    """

    success: bool
    total_rows: int
    records_processed: int
    message: str
    errors: list[RowError] = field(default_factory=list)


@dataclass(frozen=True)
class RecordPage:
    total: int
    records: list[BulkUploadRecord]


@dataclass(frozen=True)
class StoreStats:
    total_records: int
    last_updated: datetime | None
