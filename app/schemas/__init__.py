"""
app/schemas package marker.
"""

from app.schemas.bulk_upload import (
    ClearRecordsResponse,
    RecordLookupResponse,
    RecordPageResponse,
    RecordResponse,
    RowErrorResponse,
    StoreStatsResponse,
    UploadResultResponse,
)

__all__ = [
    "ClearRecordsResponse",
    "RecordLookupResponse",
    "RecordPageResponse",
    "RecordResponse",
    "RowErrorResponse",
    "StoreStatsResponse",
    "UploadResultResponse",
]
