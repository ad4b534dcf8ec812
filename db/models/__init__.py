"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.bulk_upload_record import BulkUploadRecordRow, BulkUploadStoreMetadata

__all__ = [
    "BulkUploadRecordRow",
    "BulkUploadStoreMetadata",
]
