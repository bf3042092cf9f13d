"""
app/services/dedup_gate.py

Read-only duplicate checks run before any write.

Two independent signals: a mail message id that already produced a
processed-mail record, and a content hash that already belongs to a
snapshot (of any hotel). The gate fails closed: if the store cannot answer,
StorageUnavailableError propagates and the caller must not proceed.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.repositories.processed_mail_repository import ProcessedMailRepository
from app.repositories.snapshot_repository import SnapshotRepository
from db.repositories.errors import StorageUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DedupDecision:
    message_processed: bool
    duplicate_snapshot_id: uuid.UUID | None

    @property
    def is_duplicate(self) -> bool:
        return self.message_processed or self.duplicate_snapshot_id is not None


class DedupGate:
    def __init__(self, *, session_factory: sessionmaker[Session] | None = None) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory

    def is_message_processed(self, message_id: str) -> bool:
        try:
            with self._session_factory() as session:
                return ProcessedMailRepository(session).is_processed(message_id)
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(f"Processed-mail lookup failed: {exc}") from exc

    def find_duplicate_snapshot(self, content_hash: str) -> uuid.UUID | None:
        """
        Return the id of the snapshot already holding this content, if any.
        """

        try:
            with self._session_factory() as session:
                existing = SnapshotRepository(session).find_by_hash(content_hash)
                return existing.id if existing is not None else None
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(f"Content hash lookup failed: {exc}") from exc

    def check(self, message_id: str, content_hash: str) -> DedupDecision:
        decision = DedupDecision(
            message_processed=self.is_message_processed(message_id),
            duplicate_snapshot_id=self.find_duplicate_snapshot(content_hash),
        )
        if decision.is_duplicate:
            logger.info(
                "Duplicate detected message_id=%s message_processed=%s existing_snapshot=%s",
                message_id,
                decision.message_processed,
                decision.duplicate_snapshot_id,
            )
        return decision
