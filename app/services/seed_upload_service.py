"""
app/services/seed_upload_service.py

One-time onboarding upload of a hotel's historical file.

The seed follows the same store-then-register-then-commit path as mailed
files, with two differences: a hotel may only ever have one seed, and its
snapshot time is the hotel's onboarding date rather than a filename stamp.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, time, timezone
from functools import lru_cache

from sqlalchemy.orm import Session, sessionmaker

from app.domain.ingestion import SeedRegistrationResult
from app.hashing import compute_content_hash
from app.parsers.history_forecast import parse_history_forecast
from app.repositories.hotel_repository import HotelRepository
from app.repositories.snapshot_repository import SnapshotRepository
from app.services.snapshot_registrar import SnapshotRegistrar
from db.repositories.errors import DuplicateContentError, HotelNotFoundError, SeedAlreadyExistsError
from db.repositories.storage import BlobStorageBackend

logger = logging.getLogger(__name__)


class SeedUploadService:
    def __init__(
        self,
        *,
        storage: BlobStorageBackend,
        session_factory: sessionmaker[Session] | None = None,
        registrar: SnapshotRegistrar | None = None,
    ) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory
        self._storage = storage
        self._registrar = registrar or SnapshotRegistrar(session_factory=self._session_factory)

    def register_seed(
        self,
        hotel_id: uuid.UUID,
        file_bytes: bytes,
        filename: str,
        onboarding_date: date | None = None,
    ) -> SeedRegistrationResult:
        """
        Store, register and commit a hotel's seed file.

        Raises:
            HotelNotFoundError:     hotel_id is unknown.
            SeedAlreadyExistsError: the hotel already has a seed.
            DuplicateContentError:  identical bytes were already ingested.
            Any phase 2 error, after the snapshot was marked FAILED.
        """

        content_hash = compute_content_hash(file_bytes)

        with self._session_factory() as session:
            hotel = HotelRepository(session).get(hotel_id)
            if hotel is None:
                raise HotelNotFoundError(f"Hotel {hotel_id} not found")
            total_available_rooms = hotel.total_available_rooms

            repository = SnapshotRepository(session)
            if repository.find_seed(hotel_id) is not None:
                raise SeedAlreadyExistsError(f"Hotel {hotel_id} already has a seed snapshot")
            existing = repository.find_by_hash(content_hash)
            if existing is not None:
                raise DuplicateContentError(content_hash, existing.id)

        snapshot_time = (
            datetime.combine(onboarding_date, time.min, tzinfo=timezone.utc)
            if onboarding_date is not None
            else datetime.now(timezone.utc)
        )

        blob = self._storage.upload(hotel_id=hotel_id, file_name=filename, content=file_bytes)
        snapshot_id = self._registrar.register(
            hotel_id=hotel_id,
            original_filename=filename,
            storage_reference=blob.reference,
            content_hash=content_hash,
            snapshot_time=snapshot_time,
            is_seed=True,
            total_available_rooms=total_available_rooms,
            uploaded_at=blob.stored_at,
        )

        try:
            row_count = self._registrar.commit_rows(
                snapshot_id,
                parse_history_forecast(file_bytes, total_available_rooms),
            )
        except Exception as exc:
            self._registrar.mark_failed(snapshot_id, str(exc) or exc.__class__.__name__)
            raise

        logger.info("Seed registered hotel_id=%s snapshot_id=%s rows=%s", hotel_id, snapshot_id, row_count)
        return SeedRegistrationResult(
            snapshot_id=snapshot_id,
            snapshot_time=snapshot_time,
            filename=filename,
            row_count=row_count,
        )


@lru_cache(maxsize=1)
def get_seed_upload_service() -> SeedUploadService:
    from app.config import get_storage_settings
    from db.repositories.storage import LocalBlobStorage

    return SeedUploadService(storage=LocalBlobStorage(get_storage_settings().root_dir))
