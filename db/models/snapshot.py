"""
db/models/snapshot.py

Snapshot model: one immutable ingestion of a history/forecast file.

A snapshot is registered (PENDING) as soon as its file is durably stored and
only becomes usable once its rows are committed (COMPLETED). A snapshot may
stay rowless in PENDING or FAILED; that is the audit trail for files whose
parsing or row commit failed.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.hotel import Hotel
    from db.models.snapshot_row import SnapshotRow


class SnapshotStatus:
    """Processing states: pending → processing → completed | failed."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


# PENDING → FAILED covers failures before the row transaction starts, and
# the state left behind after that transaction rolls back.
ALLOWED_STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    SnapshotStatus.PENDING: frozenset({SnapshotStatus.PROCESSING, SnapshotStatus.FAILED}),
    SnapshotStatus.PROCESSING: frozenset({SnapshotStatus.COMPLETED, SnapshotStatus.FAILED}),
    SnapshotStatus.COMPLETED: frozenset(),
    SnapshotStatus.FAILED: frozenset(),
}


class InvalidStatusTransitionError(ValueError):
    """Raised when a snapshot status change violates the state machine."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Illegal snapshot status transition {current} -> {target}")
        self.current = current
        self.target = target


class Snapshot(Base, TimestampMixin):
    """
    One stored file and the metadata needed to interpret its rows.

    ``snapshot_time`` is the business moment the file describes (parsed from
    the filename, or the ingestion time) and drives every chronological
    ordering; ``uploaded_at`` is when the file reached the object store.
    ``total_available_rooms_snapshot`` freezes the hotel's room count so
    later edits to the hotel do not rewrite historic occupancy.
    """

    __tablename__ = "snapshots"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    hotel_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("hotels.id", ondelete="CASCADE"),
        nullable=False,
    )

    snapshot_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    original_filename: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
    )

    storage_reference: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        comment="Opaque object store reference returned on upload",
    )

    content_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="SHA-256 of file bytes; unique across all hotels",
    )

    total_available_rooms_snapshot: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    is_seed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="One-time onboarding upload of a full year of history",
    )

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=SnapshotStatus.PENDING,
    )

    processing_error: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    row_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    hotel: Mapped["Hotel"] = relationship(
        "Hotel",
        back_populates="snapshots",
    )

    rows: Mapped[list["SnapshotRow"]] = relationship(
        "SnapshotRow",
        back_populates="snapshot",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_snapshots_hotel_id_snapshot_time", "hotel_id", "snapshot_time"),
        Index("ix_snapshots_hotel_id_status", "hotel_id", "status"),
        Index(
            "uq_snapshots_one_seed_per_hotel",
            "hotel_id",
            unique=True,
            postgresql_where=text("is_seed"),
            sqlite_where=text("is_seed = 1"),
        ),
    )

    def transition_to(self, target: str) -> None:
        """Move to ``target`` or raise InvalidStatusTransitionError."""
        if target not in ALLOWED_STATUS_TRANSITIONS.get(self.status, frozenset()):
            raise InvalidStatusTransitionError(self.status, target)
        self.status = target

    @property
    def is_completed(self) -> bool:
        return self.status == SnapshotStatus.COMPLETED

    def __repr__(self) -> str:
        return (
            f"<Snapshot id={self.id} hotel_id={self.hotel_id} "
            f"status={self.status!r} seed={self.is_seed}>"
        )
