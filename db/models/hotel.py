"""
db/models/hotel.py

Hotel model: the root entity; every snapshot belongs to exactly one hotel.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.snapshot import Snapshot


class Hotel(Base, TimestampMixin):
    """
    A property whose forecast files are ingested.

    ``email`` is the routing address: incoming mail is matched to a hotel by
    its sender, so it is stored lowercase and must be unique.
    """

    __tablename__ = "hotels"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        comment="Sender address that routes mail to this hotel (lowercase)",
    )

    total_available_rooms: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Sellable room count used for occupancy and RevPAR",
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Soft-disable a hotel without deletion",
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    snapshots: Mapped[list["Snapshot"]] = relationship(
        "Snapshot",
        back_populates="hotel",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_hotels_is_active", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Hotel id={self.id} name={self.name!r} email={self.email!r}>"
