"""create hotels, snapshots, snapshot_rows and processed_mail_records tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "hotels",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("total_available_rooms", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_hotels"),
        sa.UniqueConstraint("email", name="uq_hotels_email"),
    )
    op.create_index("ix_hotels_is_active", "hotels", ["is_active"], unique=False)

    op.create_table(
        "snapshots",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("hotel_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("snapshot_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("original_filename", sa.String(length=512), nullable=False),
        sa.Column("storage_reference", sa.String(length=1024), nullable=False),
        sa.Column("content_hash", sa.String(length=64), nullable=False),
        sa.Column("total_available_rooms_snapshot", sa.Integer(), nullable=False),
        sa.Column("is_seed", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("processing_error", sa.Text(), nullable=True),
        sa.Column("row_count", sa.Integer(), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(
            ["hotel_id"],
            ["hotels.id"],
            name="fk_snapshots_hotel_id_hotels",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_snapshots"),
        sa.UniqueConstraint("content_hash", name="uq_snapshots_content_hash"),
    )
    op.create_index(
        "ix_snapshots_hotel_id_snapshot_time",
        "snapshots",
        ["hotel_id", "snapshot_time"],
        unique=False,
    )
    op.create_index("ix_snapshots_hotel_id_status", "snapshots", ["hotel_id", "status"], unique=False)
    op.create_index(
        "uq_snapshots_one_seed_per_hotel",
        "snapshots",
        ["hotel_id"],
        unique=True,
        postgresql_where=sa.text("is_seed"),
    )

    op.create_table(
        "snapshot_rows",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("snapshot_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("hotel_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("stay_date", sa.Date(), nullable=False),
        sa.Column("data_type", sa.String(length=16), nullable=False),
        sa.Column("raw_values", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("room_nights", sa.Float(), nullable=False),
        sa.Column("room_revenue", sa.Float(), nullable=False),
        sa.Column("oo_rooms", sa.Float(), nullable=False),
        sa.Column("occupancy_percent", sa.Float(), nullable=False),
        sa.Column("adr", sa.Float(), nullable=False),
        sa.Column("revpar", sa.Float(), nullable=False),
        sa.Column("row_index", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["snapshot_id"],
            ["snapshots.id"],
            name="fk_snapshot_rows_snapshot_id_snapshots",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_snapshot_rows"),
        sa.UniqueConstraint(
            "snapshot_id",
            "stay_date",
            "data_type",
            name="uq_snapshot_rows_snapshot_stay_date_type",
        ),
    )
    op.create_index(
        "ix_snapshot_rows_hotel_id_stay_date",
        "snapshot_rows",
        ["hotel_id", "stay_date"],
        unique=False,
    )

    op.create_table(
        "processed_mail_records",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("message_id", sa.String(length=512), nullable=False),
        sa.Column("sender", sa.String(length=320), nullable=False),
        sa.Column("subject", sa.String(length=1024), nullable=False),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("content_hash", sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_processed_mail_records"),
        sa.UniqueConstraint("message_id", name="uq_processed_mail_records_message_id"),
    )
    op.create_index(
        "ix_processed_mail_records_sender",
        "processed_mail_records",
        ["sender"],
        unique=False,
    )
    op.create_index(
        "ix_processed_mail_records_content_hash",
        "processed_mail_records",
        ["content_hash"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_processed_mail_records_content_hash", table_name="processed_mail_records")
    op.drop_index("ix_processed_mail_records_sender", table_name="processed_mail_records")
    op.drop_table("processed_mail_records")
    op.drop_index("ix_snapshot_rows_hotel_id_stay_date", table_name="snapshot_rows")
    op.drop_table("snapshot_rows")
    op.drop_index("uq_snapshots_one_seed_per_hotel", table_name="snapshots")
    op.drop_index("ix_snapshots_hotel_id_status", table_name="snapshots")
    op.drop_index("ix_snapshots_hotel_id_snapshot_time", table_name="snapshots")
    op.drop_table("snapshots")
    op.drop_index("ix_hotels_is_active", table_name="hotels")
    op.drop_table("hotels")
