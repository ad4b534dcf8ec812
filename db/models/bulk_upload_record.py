"""
db/models/bulk_upload_record.py

Persisted rows produced by bulk CSV uploads, plus store-level metadata.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, PortableJSON

STORE_METADATA_ROW_ID = 1


class BulkUploadRecordRow(Base):
    __tablename__ = "bulk_upload_records"

    # Insertion order; SQLite only autoincrements INTEGER primary keys.
    sequence_id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
    )
    data: Mapped[dict[str, Any]] = mapped_column(
        PortableJSON,
        nullable=False,
        comment="Trimmed column name -> normalized scalar",
    )
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Normalization time of the source row",
    )

    __table_args__ = (
        UniqueConstraint("id", name="uq_bulk_upload_records_id"),
        Index("ix_bulk_upload_records_status", "status"),
    )


class BulkUploadStoreMetadata(Base):
    __tablename__ = "bulk_upload_store_metadata"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
