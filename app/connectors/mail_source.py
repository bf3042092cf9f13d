"""
app/connectors/mail_source.py

Contract the ingestion cycle expects from a mailbox.
"""

from __future__ import annotations

from typing import Protocol

from app.domain.ingestion import MailAttachment, MailItem


class MailSource(Protocol):
    def list_unread_items(self) -> list[MailItem]:
        """
        Unread items that carry attachments, oldest first.
        """
        ...

    def fetch_attachments(self, message_id: str) -> list[MailAttachment]:
        ...

    def mark_processed(self, message_id: str) -> None:
        """
        Mark the item so ``list_unread_items`` no longer returns it.
        """
        ...
