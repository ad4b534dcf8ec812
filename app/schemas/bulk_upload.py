"""
app/schemas/bulk_upload.py

Response schemas for bulk upload endpoints.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.bulk_upload import BulkUploadRecord, NormalizedValue, RecordStatus, UploadResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RowErrorResponse(_CamelModel):
    """
    One rejected CSV row.
    """

    row: int = Field(..., ge=1)
    error: str


class UploadResultResponse(_CamelModel):
    """
    API response model for one completed upload.
    """

    success: bool
    total_rows: int = Field(..., ge=0)
    records_processed: int = Field(..., ge=0)
    errors: list[RowErrorResponse] | None = None
    message: str

    @classmethod
    def from_domain(cls, result: UploadResult) -> "UploadResultResponse":
        return cls(
            success=result.success,
            total_rows=result.total_rows,
            records_processed=result.records_processed,
            errors=[RowErrorResponse(row=error.row, error=error.error) for error in result.errors] or None,
            message=result.message,
        )


class RecordResponse(_CamelModel):
    id: uuid.UUID
    data: dict[str, NormalizedValue]
    status: RecordStatus
    created_at: datetime

    @classmethod
    def from_domain(cls, record: BulkUploadRecord) -> "RecordResponse":
        return cls(
            id=record.id,
            data=dict(record.data),
            status=record.status,
            created_at=record.created_at,
        )


class RecordPageResponse(_CamelModel):
    total: int = Field(..., ge=0)
    records: list[RecordResponse] = Field(default_factory=list)


class RecordLookupResponse(_CamelModel):
    success: bool
    record: RecordResponse | None = None
    message: str | None = None


class StoreStatsResponse(_CamelModel):
    total_records: int = Field(..., ge=0)
    last_updated: datetime | None = None


class ClearRecordsResponse(_CamelModel):
    success: bool
    message: str
