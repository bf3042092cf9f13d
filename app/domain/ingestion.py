"""
app/domain/ingestion.py

Domain models for the mail-driven ingestion cycle and seed registration.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class MailItem:
    """
    One unread mail message that carries attachments.
    """

    message_id: str
    sender: str
    subject: str
    received_at: datetime


@dataclass(frozen=True)
class MailAttachment:
    name: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class CycleSummary:
    """
    Aggregate outcome of one ingestion cycle.
    """

    items_seen: int = 0
    processed: int = 0
    skipped: int = 0
    snapshots_created: int = 0
    error_count: int = 0
    error_messages: list[str] = field(default_factory=list)

    def record_error(self, message: str) -> None:
        self.error_count += 1
        self.error_messages.append(message)


@dataclass(frozen=True)
class SeedRegistrationResult:
    snapshot_id: uuid.UUID
    snapshot_time: datetime
    filename: str
    row_count: int
