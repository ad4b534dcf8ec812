"""
app/api/routers/bulk_upload.py

Bulk CSV upload and record query HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status

from app.api.dependencies import get_optional_upload, get_record_store, require_api_key
from app.repositories.bulk_upload_record_repository import BulkUploadRecordRepository
from app.schemas.bulk_upload import (
    ClearRecordsResponse,
    RecordLookupResponse,
    RecordPageResponse,
    RecordResponse,
    StoreStatsResponse,
    UploadResultResponse,
)
from app.services.bulk_upload_service import BulkUploadService, get_bulk_upload_service
from app.services.errors import (
    EmptyUploadError,
    InvalidCSVError,
    MissingFileError,
    PayloadTooLargeError,
    StorePersistenceError,
    TooManyRowsError,
    UnsupportedMediaTypeError,
)

router = APIRouter(prefix="/bulk-upload", tags=["bulk-upload"])


@router.post(
    "/upload",
    response_model=UploadResultResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_api_key)],
)
def upload_csv(
    file: UploadFile | None = Depends(get_optional_upload),
    batch_size: int | None = Query(default=None, alias="batchSize", ge=1, description="Records per insert"),
    store: BulkUploadRecordRepository = Depends(get_record_store),
    upload_service: BulkUploadService = Depends(get_bulk_upload_service),
) -> UploadResultResponse:
    """
    Ingest one CSV file into bulk upload records.
    """

    try:
        result = upload_service.ingest_csv(upload_file=file, store=store, batch_size=batch_size)
    except (PayloadTooLargeError, TooManyRowsError) as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(exc),
        ) from exc
    except UnsupportedMediaTypeError as exc:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=str(exc),
        ) from exc
    except (MissingFileError, EmptyUploadError, InvalidCSVError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except StorePersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to persist uploaded records.",
        ) from exc
    finally:
        if file is not None:
            file.file.close()

    return UploadResultResponse.from_domain(result)


@router.get("/stats", response_model=StoreStatsResponse)
def get_stats(
    store: BulkUploadRecordRepository = Depends(get_record_store),
    upload_service: BulkUploadService = Depends(get_bulk_upload_service),
) -> StoreStatsResponse:
    try:
        stats = upload_service.get_stats(store=store)
    except StorePersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    return StoreStatsResponse(total_records=stats.total_records, last_updated=stats.last_updated)


@router.get("/records", response_model=RecordPageResponse)
def list_records(
    limit: int | None = Query(default=None, ge=0),
    offset: int | None = Query(default=None, ge=0),
    store: BulkUploadRecordRepository = Depends(get_record_store),
    upload_service: BulkUploadService = Depends(get_bulk_upload_service),
) -> RecordPageResponse:
    try:
        page = upload_service.list_records(store=store, limit=limit, offset=offset)
    except StorePersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    return RecordPageResponse(
        total=page.total,
        records=[RecordResponse.from_domain(record) for record in page.records],
    )


@router.get(
    "/records/{record_id}",
    response_model=RecordLookupResponse,
    dependencies=[Depends(require_api_key)],
)
def get_record(
    record_id: str,
    store: BulkUploadRecordRepository = Depends(get_record_store),
    upload_service: BulkUploadService = Depends(get_bulk_upload_service),
) -> RecordLookupResponse:
    """
    Fetch one record. Unknown ids answer 200 with ``success: false``.
    """

    try:
        record = upload_service.get_record(store=store, record_id=record_id)
    except StorePersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc

    if record is None:
        return RecordLookupResponse(success=False, message="Record not found")
    return RecordLookupResponse(success=True, record=RecordResponse.from_domain(record))


@router.delete(
    "/records",
    response_model=ClearRecordsResponse,
    dependencies=[Depends(require_api_key)],
)
def clear_records(
    store: BulkUploadRecordRepository = Depends(get_record_store),
    upload_service: BulkUploadService = Depends(get_bulk_upload_service),
) -> ClearRecordsResponse:
    try:
        upload_service.clear_all_records(store=store)
    except StorePersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    return ClearRecordsResponse(success=True, message="All records cleared")
