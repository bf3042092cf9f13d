"""
tests/test_seed_upload.py

Onboarding seed registration.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

import pytest
from sqlalchemy import select

from app.services.seed_upload_service import SeedUploadService
from db.models.snapshot import Snapshot, SnapshotStatus
from db.repositories.errors import (
    DuplicateContentError,
    FileStorageError,
    HotelNotFoundError,
    SeedAlreadyExistsError,
    SnapshotConstraintError,
)
from forecast_fixtures import build_file, build_line


def _seed_file(rooms: str = "60") -> bytes:
    return build_file(
        build_line("History", date(2025, 9, 1), rooms, "9000"),
        build_line("History", date(2025, 9, 2), "65", "9750"),
    )


@pytest.fixture()
def service(session_factory, blob_storage) -> SeedUploadService:
    return SeedUploadService(storage=blob_storage, session_factory=session_factory)


class TestSeedUpload:
    def test_registers_completed_seed_at_onboarding_date(self, service, session_factory, make_hotel, blob_storage) -> None:
        hotel = make_hotel(total_available_rooms=90)

        result = service.register_seed(hotel.id, _seed_file(), "seed.txt", onboarding_date=date(2025, 9, 15))

        assert result.row_count == 2
        assert result.filename == "seed.txt"
        assert result.snapshot_time == datetime(2025, 9, 15, tzinfo=timezone.utc)
        with session_factory() as session:
            snapshot = session.get(Snapshot, result.snapshot_id)
            assert snapshot.is_seed is True
            assert snapshot.status == SnapshotStatus.COMPLETED
            assert snapshot.total_available_rooms_snapshot == 90
            assert snapshot.storage_reference in blob_storage.blobs

    def test_second_seed_is_rejected(self, service, make_hotel) -> None:
        hotel = make_hotel()
        service.register_seed(hotel.id, _seed_file("60"), "seed.txt")

        with pytest.raises(SeedAlreadyExistsError):
            service.register_seed(hotel.id, _seed_file("61"), "seed-2.txt")

    def test_duplicate_content_is_rejected(self, service, make_hotel, blob_storage) -> None:
        first = make_hotel()
        second = make_hotel(email="gm@second.example")
        service.register_seed(first.id, _seed_file(), "seed.txt")

        with pytest.raises(DuplicateContentError):
            service.register_seed(second.id, _seed_file(), "seed.txt")
        assert len(blob_storage.blobs) == 1

    def test_unknown_hotel(self, service) -> None:
        with pytest.raises(HotelNotFoundError):
            service.register_seed(uuid.uuid4(), _seed_file(), "seed.txt")

    def test_storage_failure_registers_nothing(self, service, session_factory, make_hotel, blob_storage) -> None:
        hotel = make_hotel()
        blob_storage.fail_uploads = True

        with pytest.raises(FileStorageError):
            service.register_seed(hotel.id, _seed_file(), "seed.txt")
        with session_factory() as session:
            assert session.execute(select(Snapshot)).first() is None

    def test_bad_rows_leave_a_failed_seed(self, service, session_factory, make_hotel) -> None:
        hotel = make_hotel()
        content = build_file(
            build_line("History", date(2025, 9, 1), "60", "9000"),
            build_line("History", date(2025, 9, 1), "61", "9100"),
        )

        with pytest.raises(SnapshotConstraintError):
            service.register_seed(hotel.id, content, "seed.txt")
        with session_factory() as session:
            (snapshot,) = session.execute(select(Snapshot)).scalars().all()
            assert snapshot.status == SnapshotStatus.FAILED
            assert snapshot.row_count == 0
