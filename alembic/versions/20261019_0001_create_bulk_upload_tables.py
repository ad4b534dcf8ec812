"""create bulk upload tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

_JSON = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def upgrade() -> None:
    op.create_table(
        "bulk_upload_records",
        sa.Column(
            "sequence_id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("data", _JSON, nullable=False, comment="Trimmed column name -> normalized scalar"),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="Normalization time of the source row",
        ),
        sa.PrimaryKeyConstraint("sequence_id"),
        sa.UniqueConstraint("id", name="uq_bulk_upload_records_id"),
    )
    op.create_index(
        "ix_bulk_upload_records_status",
        "bulk_upload_records",
        ["status"],
        unique=False,
    )

    op.create_table(
        "bulk_upload_store_metadata",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("bulk_upload_store_metadata")
    op.drop_index("ix_bulk_upload_records_status", table_name="bulk_upload_records")
    op.drop_table("bulk_upload_records")
