"""
app/services/snapshot_registrar.py

Two-phase snapshot registration.

Phase 1 (``register``) commits a PENDING snapshot as soon as the file is
stored, so a file is never stored without a record. Phase 2
(``commit_rows``) inserts every row and flips the status to COMPLETED in a
single transaction: readers see all of a snapshot's rows or none of them.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.domain.forecast_rows import ParsedRow
from app.repositories.hotel_repository import HotelRepository
from app.repositories.snapshot_repository import SnapshotRepository
from db.models.snapshot import SnapshotStatus
from db.repositories.errors import (
    DuplicateContentError,
    HotelNotFoundError,
    SeedAlreadyExistsError,
    SnapshotConstraintError,
    SnapshotNotFoundError,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 2000


class SnapshotRegistrar:
    def __init__(
        self,
        *,
        session_factory: sessionmaker[Session] | None = None,
        batch_size: int = 1000,
    ) -> None:
        self._batch_size = batch_size
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory

    def register(
        self,
        *,
        hotel_id: uuid.UUID,
        original_filename: str,
        storage_reference: str,
        content_hash: str,
        snapshot_time: datetime,
        is_seed: bool = False,
        total_available_rooms: int | None = None,
        uploaded_at: datetime | None = None,
    ) -> uuid.UUID:
        """
        Phase 1: create a PENDING snapshot in its own committed transaction.

        The room count defaults to the hotel's current value and is frozen on
        the snapshot.

        Raises:
            HotelNotFoundError:      hotel_id is unknown.
            DuplicateContentError:   content_hash is already registered.
            StorageUnavailableError: the store failed.
        """

        try:
            with self._session_factory() as session:
                with session.begin():
                    hotel = HotelRepository(session).get(hotel_id)
                    if hotel is None:
                        raise HotelNotFoundError(f"Hotel {hotel_id} not found")

                    snapshot = SnapshotRepository(session).create_pending(
                        hotel_id=hotel_id,
                        snapshot_time=snapshot_time,
                        original_filename=original_filename,
                        storage_reference=storage_reference,
                        content_hash=content_hash,
                        total_available_rooms=(
                            hotel.total_available_rooms
                            if total_available_rooms is None
                            else total_available_rooms
                        ),
                        uploaded_at=uploaded_at or datetime.now(timezone.utc),
                        is_seed=is_seed,
                    )
                    snapshot_id = snapshot.id
        except IntegrityError as exc:
            if is_seed and "content_hash" not in str(exc.orig):
                raise SeedAlreadyExistsError(f"Hotel {hotel_id} already has a seed snapshot") from exc
            raise DuplicateContentError(content_hash) from exc
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(f"Snapshot registration failed: {exc}") from exc

        logger.info(
            "Registered snapshot id=%s hotel_id=%s file=%s seed=%s",
            snapshot_id,
            hotel_id,
            original_filename,
            is_seed,
        )
        return snapshot_id

    def commit_rows(self, snapshot_id: uuid.UUID, rows: Iterable[ParsedRow]) -> int:
        """
        Phase 2: insert rows and complete the snapshot atomically.

        On any failure the transaction rolls back and the snapshot stays
        PENDING; the caller records the failure with ``mark_failed``.

        Raises:
            SnapshotNotFoundError:   snapshot_id is unknown.
            SnapshotConstraintError: two rows share (stay date, data type).
            StorageUnavailableError: the store failed.
        """

        try:
            with self._session_factory() as session:
                with session.begin():
                    repository = SnapshotRepository(session)
                    snapshot = repository.get(snapshot_id)
                    if snapshot is None:
                        raise SnapshotNotFoundError(f"Snapshot {snapshot_id} not found")

                    snapshot.transition_to(SnapshotStatus.PROCESSING)
                    session.flush()

                    row_count = repository.insert_rows(snapshot, rows, batch_size=self._batch_size)

                    snapshot.row_count = row_count
                    snapshot.transition_to(SnapshotStatus.COMPLETED)
        except IntegrityError as exc:
            raise SnapshotConstraintError(
                f"Duplicate (stay_date, data_type) in snapshot {snapshot_id}: {exc.orig}"
            ) from exc
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(f"Row commit failed for snapshot {snapshot_id}: {exc}") from exc

        logger.info("Committed snapshot id=%s rows=%s", snapshot_id, row_count)
        return row_count

    def mark_failed(self, snapshot_id: uuid.UUID, message: str) -> None:
        """
        Record a processing failure in a separate transaction.
        """

        try:
            with self._session_factory() as session:
                with session.begin():
                    snapshot = SnapshotRepository(session).get(snapshot_id)
                    if snapshot is None:
                        raise SnapshotNotFoundError(f"Snapshot {snapshot_id} not found")
                    snapshot.transition_to(SnapshotStatus.FAILED)
                    snapshot.processing_error = message[:MAX_ERROR_LENGTH]
        except SQLAlchemyError as exc:
            raise StorageUnavailableError(f"Could not mark snapshot {snapshot_id} failed: {exc}") from exc

        logger.warning("Marked snapshot id=%s FAILED: %s", snapshot_id, message[:200])
