"""
app/services/ingestion_cycle_service.py

One pass over the mailbox: every unread item with attachments is routed to
its hotel by sender address and each accepted attachment becomes a
snapshot.

Per attachment the order is fixed:

    1. content hash dedup (any hotel)
    2. upload to the object store
    3. mark the mail item read
    4. phase 1 registration (PENDING)
    5. parse + phase 2 row commit (COMPLETED, or FAILED on error)
    6. seed overlay

A failing item or attachment is logged and counted; it never stops the
cycle. Cycles never overlap: IngestionCycleRunner skips a trigger while a
cycle is in flight.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from app.config import IngestionSettings, get_ingestion_settings
from app.connectors.mail_source import MailSource
from app.domain.ingestion import CycleSummary, MailAttachment, MailItem
from app.hashing import compute_content_hash
from app.parsers.history_forecast import extract_snapshot_time, parse_history_forecast
from app.repositories.hotel_repository import HotelRepository
from app.repositories.processed_mail_repository import ProcessedMailRepository
from app.services.dedup_gate import DedupGate
from app.services.seed_overlay import SeedOverlayService
from app.services.snapshot_registrar import SnapshotRegistrar
from db.repositories.errors import DuplicateContentError, FileStorageError
from db.repositories.storage import BlobStorageBackend

logger = logging.getLogger(__name__)


class IngestionCycleService:
    """
    Coordinates mailbox reads, dedup, storage and two-phase registration.
    """

    def __init__(
        self,
        *,
        mail_source: MailSource,
        storage: BlobStorageBackend,
        session_factory: sessionmaker[Session] | None = None,
        dedup_gate: DedupGate | None = None,
        registrar: SnapshotRegistrar | None = None,
        seed_overlay: SeedOverlayService | None = None,
        settings: IngestionSettings | None = None,
    ) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory

        self._settings = settings or get_ingestion_settings()
        self._mail_source = mail_source
        self._storage = storage
        self._dedup_gate = dedup_gate or DedupGate(session_factory=self._session_factory)
        self._registrar = registrar or SnapshotRegistrar(
            session_factory=self._session_factory,
            batch_size=self._settings.batch_size,
        )
        self._seed_overlay = seed_overlay or SeedOverlayService(
            session_factory=self._session_factory,
            window=self._settings.overlay_window,
        )

    def run_ingestion_cycle(self) -> CycleSummary:
        summary = CycleSummary()

        try:
            items = self._mail_source.list_unread_items()
        except Exception as exc:  # noqa: BLE001
            logger.exception("Could not list unread mail items")
            summary.record_error(f"mailbox: {exc}")
            return summary

        for item in items:
            summary.items_seen += 1
            try:
                processed = self._process_item(item, summary)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Mail item failed message_id=%s sender=%s", item.message_id, item.sender)
                summary.record_error(f"{item.message_id}: {exc}")
                summary.skipped += 1
                continue

            if processed:
                summary.processed += 1
            else:
                summary.skipped += 1

        logger.info(
            "Ingestion cycle finished items=%s processed=%s skipped=%s snapshots=%s errors=%s",
            summary.items_seen,
            summary.processed,
            summary.skipped,
            summary.snapshots_created,
            summary.error_count,
        )
        return summary

    # ------------------------------------------------------------------
    # Per item
    # ------------------------------------------------------------------

    def _process_item(self, item: MailItem, summary: CycleSummary) -> bool:
        """
        Returns True when the item produced at least one snapshot and no
        attachment failed; only then is the item recorded as processed.
        """

        if self._dedup_gate.is_message_processed(item.message_id):
            logger.info("Mail item already processed message_id=%s", item.message_id)
            return False

        with self._session_factory() as session:
            hotel = HotelRepository(session).get_by_email(item.sender)
            if hotel is None:
                logger.info("No hotel for sender=%s message_id=%s", item.sender, item.message_id)
                return False
            if not hotel.is_active:
                logger.info("Hotel inactive hotel_id=%s sender=%s", hotel.id, item.sender)
                return False
            hotel_id = hotel.id
            total_available_rooms = hotel.total_available_rooms

        attachments = self._mail_source.fetch_attachments(item.message_id)
        if not attachments:
            logger.info("Mail item has no file attachments message_id=%s", item.message_id)
            return False

        state = _ItemState()
        for attachment in attachments:
            if not self._is_accepted(attachment.name):
                logger.debug("Ignoring attachment name=%r message_id=%s", attachment.name, item.message_id)
                continue
            try:
                content_hash = self._process_attachment(
                    item,
                    attachment,
                    hotel_id=hotel_id,
                    total_available_rooms=total_available_rooms,
                    state=state,
                )
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "Attachment failed message_id=%s name=%r",
                    item.message_id,
                    attachment.name,
                )
                summary.record_error(f"{item.message_id}/{attachment.name}: {exc}")
                state.failed = True
                continue

            if content_hash is not None:
                summary.snapshots_created += 1
                state.created += 1
                state.last_hash = content_hash

        if state.created == 0 or state.failed:
            return False

        try:
            with self._session_factory() as session:
                with session.begin():
                    ProcessedMailRepository(session).record(item, content_hash=state.last_hash)
        except IntegrityError:
            logger.warning("Mail item recorded concurrently message_id=%s", item.message_id)
        return True

    # ------------------------------------------------------------------
    # Per attachment
    # ------------------------------------------------------------------

    def _process_attachment(
        self,
        item: MailItem,
        attachment: MailAttachment,
        *,
        hotel_id: uuid.UUID,
        total_available_rooms: int,
        state: _ItemState,
    ) -> str | None:
        """
        Store and register one attachment; returns its content hash when a
        COMPLETED snapshot was created, None when it was a duplicate.
        """

        content_hash = compute_content_hash(attachment.content)
        existing = self._dedup_gate.find_duplicate_snapshot(content_hash)
        if existing is not None:
            logger.info(
                "Duplicate attachment skipped name=%r hash=%s existing_snapshot=%s",
                attachment.name,
                content_hash[:16],
                existing,
            )
            self._mark_read_once(item, state)
            return None

        blob = self._storage.upload(hotel_id=hotel_id, file_name=attachment.name, content=attachment.content)
        self._mark_read_once(item, state)

        try:
            snapshot_id = self._registrar.register(
                hotel_id=hotel_id,
                original_filename=attachment.name,
                storage_reference=blob.reference,
                content_hash=content_hash,
                snapshot_time=extract_snapshot_time(attachment.name),
                total_available_rooms=total_available_rooms,
                uploaded_at=blob.stored_at,
            )
        except DuplicateContentError:
            logger.info("Attachment registered concurrently hash=%s; removing blob", content_hash[:16])
            self._delete_blob_quietly(blob.reference)
            return None

        try:
            rows = parse_history_forecast(attachment.content, total_available_rooms)
            self._registrar.commit_rows(snapshot_id, rows)
        except Exception as exc:
            self._registrar.mark_failed(snapshot_id, str(exc) or exc.__class__.__name__)
            raise

        self._seed_overlay.apply(snapshot_id)
        return content_hash

    def _is_accepted(self, file_name: str) -> bool:
        return file_name.lower().endswith(self._settings.allowed_extensions)

    def _mark_read_once(self, item: MailItem, state: _ItemState) -> None:
        if state.marked_read:
            return
        try:
            self._mail_source.mark_processed(item.message_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not mark mail item read message_id=%s error=%s", item.message_id, exc)
            return
        state.marked_read = True

    def _delete_blob_quietly(self, reference: str) -> None:
        try:
            self._storage.delete(reference=reference)
        except FileStorageError as exc:
            logger.warning("Could not delete orphan blob reference=%s error=%s", reference, exc)


@dataclass
class _ItemState:
    created: int = 0
    failed: bool = False
    last_hash: str | None = None
    marked_read: bool = False


# ---------------------------------------------------------------------------
# Single-flight runner
# ---------------------------------------------------------------------------


class IngestionCycleRunner:
    """
    Runs at most one ingestion cycle at a time within the process.

    A trigger that arrives while a cycle is running is dropped, not queued.
    """

    def __init__(self, service_provider: Callable[[], IngestionCycleService] | None = None) -> None:
        self._service_provider = service_provider or get_ingestion_cycle_service
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def run_if_idle(self) -> CycleSummary | None:
        if not self._lock.acquire(blocking=False):
            logger.info("Ingestion cycle already running; trigger skipped")
            return None
        try:
            return self._service_provider().run_ingestion_cycle()
        finally:
            self._lock.release()


@lru_cache(maxsize=1)
def get_ingestion_cycle_service() -> IngestionCycleService:
    from app.config import get_external_http_settings, get_mail_settings, get_storage_settings
    from app.connectors.graph_mail_connector import GraphMailConnector
    from db.repositories.storage import LocalBlobStorage

    return IngestionCycleService(
        mail_source=GraphMailConnector(
            settings=get_mail_settings(),
            http_settings=get_external_http_settings(),
        ),
        storage=LocalBlobStorage(get_storage_settings().root_dir),
    )


@lru_cache(maxsize=1)
def get_ingestion_cycle_runner() -> IngestionCycleRunner:
    return IngestionCycleRunner()
