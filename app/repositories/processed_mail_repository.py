"""
app/repositories/processed_mail_repository.py

Append-only log of mail items that finished ingestion.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.ingestion import MailItem
from db.models.processed_mail import ProcessedMailRecord


class ProcessedMailRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def is_processed(self, message_id: str) -> bool:
        stmt = select(ProcessedMailRecord.id).where(ProcessedMailRecord.message_id == message_id)
        return self._session.execute(stmt).first() is not None

    def record(
        self,
        item: MailItem,
        *,
        content_hash: str | None = None,
        processed_at: datetime | None = None,
    ) -> ProcessedMailRecord:
        record = ProcessedMailRecord(
            message_id=item.message_id,
            sender=item.sender.lower(),
            subject=item.subject or "",
            received_at=item.received_at,
            processed_at=processed_at or datetime.now(timezone.utc),
            content_hash=content_hash,
        )
        self._session.add(record)
        self._session.flush()
        return record
