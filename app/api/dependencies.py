"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and store access.
"""

from __future__ import annotations

import hmac

from fastapi import Depends, File, HTTPException, Request, UploadFile, status
from sqlalchemy.orm import Session

from app.config import get_api_key_settings
from app.repositories.bulk_upload_record_repository import BulkUploadRecordRepository
from db.session import get_db


def get_optional_upload(file: UploadFile | None = File(default=None)) -> UploadFile | None:
    """
    Pass the multipart ``file`` field through; absence is reported by the service.
    """

    return file


def get_record_store(db: Session = Depends(get_db)) -> BulkUploadRecordRepository:
    return BulkUploadRecordRepository(db)


def require_api_key(request: Request) -> None:
    """
    Reject requests whose API key header is missing or wrong.
    """

    settings = get_api_key_settings()
    provided = request.headers.get(settings.header_name)

    if not provided:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key is required",
        )

    if not hmac.compare_digest(provided.encode("utf-8"), settings.api_key.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
