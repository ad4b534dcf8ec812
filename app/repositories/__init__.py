"""
app/repositories package marker.
"""

from app.repositories.bulk_upload_record_repository import BulkUploadRecordRepository
from app.repositories.record_store import RecordStore

__all__ = [
    "BulkUploadRecordRepository",
    "RecordStore",
]
