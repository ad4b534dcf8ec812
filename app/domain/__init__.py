"""
app/domain package marker.
"""

from app.domain.bulk_upload import (
    BulkUploadRecord,
    NormalizedValue,
    RawRow,
    RecordPage,
    RecordStatus,
    RowError,
    StoreStats,
    UploadResult,
)

__all__ = [
    "BulkUploadRecord",
    "NormalizedValue",
    "RawRow",
    "RecordPage",
    "RecordStatus",
    "RowError",
    "StoreStats",
    "UploadResult",
]
