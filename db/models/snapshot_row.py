"""
db/models/snapshot_row.py

One stay-date line of a snapshot file.

The source format has 30 positional columns of which only five carry known
meaning. All 30 are kept verbatim in ``raw_values``; the known ones are
promoted to typed columns alongside the three derived metrics.
"""

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Date,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base

if TYPE_CHECKING:
    from db.models.snapshot import Snapshot


class RowDataType:
    HISTORY = "HISTORY"
    FORECAST = "FORECAST"


class SnapshotRow(Base):
    __tablename__ = "snapshot_rows"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    snapshot_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("snapshots.id", ondelete="CASCADE"),
        nullable=False,
    )

    hotel_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        comment="Copied from the owning snapshot for hotel-wide range reads",
    )

    stay_date: Mapped[date] = mapped_column(Date, nullable=False)

    data_type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="HISTORY or FORECAST",
    )

    raw_values: Mapped[list[str]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        comment="All 30 positional source columns as text",
    )

    room_nights: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    room_revenue: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    oo_rooms: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    occupancy_percent: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    adr: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    revpar: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    row_index: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Zero-based position among the file's non-blank lines",
    )

    snapshot: Mapped["Snapshot"] = relationship(
        "Snapshot",
        back_populates="rows",
    )

    __table_args__ = (
        UniqueConstraint(
            "snapshot_id",
            "stay_date",
            "data_type",
            name="uq_snapshot_rows_snapshot_stay_date_type",
        ),
        Index("ix_snapshot_rows_hotel_id_stay_date", "hotel_id", "stay_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<SnapshotRow snapshot_id={self.snapshot_id} stay_date={self.stay_date} "
            f"data_type={self.data_type!r}>"
        )
