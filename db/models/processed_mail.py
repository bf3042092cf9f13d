"""
db/models/processed_mail.py

Append-only record of mail items that were fully ingested.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class ProcessedMailRecord(Base):
    __tablename__ = "processed_mail_records"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    message_id: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
        unique=True,
        comment="Mail provider message identifier",
    )
    sender: Mapped[str] = mapped_column(String(320), nullable=False)
    subject: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    received_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    processed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    content_hash: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        comment="SHA-256 of the attachment that produced a snapshot",
    )

    __table_args__ = (
        Index("ix_processed_mail_records_sender", "sender"),
        Index("ix_processed_mail_records_content_hash", "content_hash"),
    )

    def __repr__(self) -> str:
        return f"<ProcessedMailRecord message_id={self.message_id!r} sender={self.sender!r}>"
