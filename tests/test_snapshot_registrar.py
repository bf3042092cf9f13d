"""
tests/test_snapshot_registrar.py

Two-phase registration, status machine and dedup gate against SQLite.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

import pytest
from sqlalchemy import func, select

from app.hashing import compute_content_hash
from app.parsers.history_forecast import parse_history_forecast
from app.services.dedup_gate import DedupGate
from app.services.snapshot_registrar import MAX_ERROR_LENGTH, SnapshotRegistrar
from app.repositories.processed_mail_repository import ProcessedMailRepository
from app.domain.ingestion import MailItem
from db.models.snapshot import InvalidStatusTransitionError, Snapshot, SnapshotStatus
from db.models.snapshot_row import SnapshotRow
from db.repositories.errors import (
    DuplicateContentError,
    HotelNotFoundError,
    SeedAlreadyExistsError,
    SnapshotConstraintError,
    SnapshotNotFoundError,
    StorageUnavailableError,
)
from forecast_fixtures import UnreachableSession, build_file, build_line

SNAPSHOT_TIME = datetime(2025, 11, 1, 6, 0, tzinfo=timezone.utc)


def _register(registrar: SnapshotRegistrar, hotel_id: uuid.UUID, content: bytes, **kwargs) -> uuid.UUID:
    return registrar.register(
        hotel_id=hotel_id,
        original_filename=kwargs.pop("filename", "history_forecast1761976800.txt"),
        storage_reference="history-forecast/x/file.txt",
        content_hash=compute_content_hash(content),
        snapshot_time=kwargs.pop("snapshot_time", SNAPSHOT_TIME),
        **kwargs,
    )


def _row_count(session_factory, snapshot_id: uuid.UUID) -> int:
    with session_factory() as session:
        return session.execute(
            select(func.count()).select_from(SnapshotRow).where(SnapshotRow.snapshot_id == snapshot_id)
        ).scalar_one()


class TestContentHash:
    def test_sha256_hex(self) -> None:
        assert compute_content_hash(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        assert len(compute_content_hash(b"abc")) == 64


class TestRegister:
    def test_creates_pending_snapshot_with_frozen_room_count(self, session_factory, make_hotel) -> None:
        hotel = make_hotel(total_available_rooms=80)
        registrar = SnapshotRegistrar(session_factory=session_factory)

        snapshot_id = _register(registrar, hotel.id, b"file-a")

        with session_factory() as session:
            snapshot = session.get(Snapshot, snapshot_id)
            assert snapshot.status == SnapshotStatus.PENDING
            assert snapshot.total_available_rooms_snapshot == 80
            assert snapshot.row_count == 0
            assert snapshot.is_seed is False

    def test_unknown_hotel(self, session_factory) -> None:
        registrar = SnapshotRegistrar(session_factory=session_factory)
        with pytest.raises(HotelNotFoundError):
            _register(registrar, uuid.uuid4(), b"file-a")

    def test_duplicate_hash_across_hotels(self, session_factory, make_hotel) -> None:
        first = make_hotel(email="a@example.com")
        second = make_hotel(email="b@example.com")
        registrar = SnapshotRegistrar(session_factory=session_factory)
        _register(registrar, first.id, b"same bytes")

        with pytest.raises(DuplicateContentError):
            _register(registrar, second.id, b"same bytes")

    def test_second_seed_rejected(self, session_factory, make_hotel) -> None:
        hotel = make_hotel()
        registrar = SnapshotRegistrar(session_factory=session_factory)
        _register(registrar, hotel.id, b"seed one", is_seed=True)

        with pytest.raises(SeedAlreadyExistsError):
            _register(registrar, hotel.id, b"seed two", is_seed=True)


class TestCommitRows:
    def test_commit_completes_snapshot(self, session_factory, make_hotel) -> None:
        hotel = make_hotel(total_available_rooms=120)
        content = build_file(
            build_line("History", date(2025, 10, 31), "40", "8000"),
            build_line("Forecast", date(2025, 11, 1), "45", "12500"),
        )
        registrar = SnapshotRegistrar(session_factory=session_factory)
        snapshot_id = _register(registrar, hotel.id, content)

        inserted = registrar.commit_rows(snapshot_id, parse_history_forecast(content, 120))

        assert inserted == 2
        with session_factory() as session:
            snapshot = session.get(Snapshot, snapshot_id)
            assert snapshot.status == SnapshotStatus.COMPLETED
            assert snapshot.row_count == 2
            rows = session.execute(select(SnapshotRow).where(SnapshotRow.snapshot_id == snapshot_id)).scalars().all()
            assert {row.hotel_id for row in rows} == {hotel.id}
            assert all(len(row.raw_values) == 30 for row in rows)

    def test_duplicate_stay_date_rolls_back_everything(self, session_factory, make_hotel) -> None:
        hotel = make_hotel()
        content = build_file(
            build_line("Forecast", date(2025, 11, 1), "45", "12500"),
            build_line("Forecast", date(2025, 11, 2), "20", "4000"),
            build_line("Forecast", date(2025, 11, 1), "46", "12600"),
        )
        registrar = SnapshotRegistrar(session_factory=session_factory)
        snapshot_id = _register(registrar, hotel.id, content)

        with pytest.raises(SnapshotConstraintError):
            registrar.commit_rows(snapshot_id, parse_history_forecast(content, 120))

        assert _row_count(session_factory, snapshot_id) == 0
        with session_factory() as session:
            assert session.get(Snapshot, snapshot_id).status == SnapshotStatus.PENDING

        registrar.mark_failed(snapshot_id, "duplicate stay date")

        with session_factory() as session:
            snapshot = session.get(Snapshot, snapshot_id)
            assert snapshot.status == SnapshotStatus.FAILED
            assert snapshot.processing_error == "duplicate stay date"
        assert _row_count(session_factory, snapshot_id) == 0

    def test_unknown_snapshot(self, session_factory) -> None:
        registrar = SnapshotRegistrar(session_factory=session_factory)
        with pytest.raises(SnapshotNotFoundError):
            registrar.commit_rows(uuid.uuid4(), [])

    def test_completed_snapshot_cannot_be_recommitted(self, session_factory, make_hotel) -> None:
        hotel = make_hotel()
        registrar = SnapshotRegistrar(session_factory=session_factory)
        snapshot_id = _register(registrar, hotel.id, b"empty")
        registrar.commit_rows(snapshot_id, [])

        with pytest.raises(InvalidStatusTransitionError):
            registrar.commit_rows(snapshot_id, [])
        with pytest.raises(InvalidStatusTransitionError):
            registrar.mark_failed(snapshot_id, "late failure")

    def test_mark_failed_truncates_error(self, session_factory, make_hotel) -> None:
        hotel = make_hotel()
        registrar = SnapshotRegistrar(session_factory=session_factory)
        snapshot_id = _register(registrar, hotel.id, b"bytes")

        registrar.mark_failed(snapshot_id, "x" * (MAX_ERROR_LENGTH + 500))

        with session_factory() as session:
            assert len(session.get(Snapshot, snapshot_id).processing_error) == MAX_ERROR_LENGTH


class TestStatusMachine:
    @pytest.mark.parametrize(
        ("start", "target"),
        [
            (SnapshotStatus.PENDING, SnapshotStatus.COMPLETED),
            (SnapshotStatus.PROCESSING, SnapshotStatus.PENDING),
            (SnapshotStatus.COMPLETED, SnapshotStatus.FAILED),
            (SnapshotStatus.FAILED, SnapshotStatus.PENDING),
            (SnapshotStatus.FAILED, SnapshotStatus.PROCESSING),
        ],
    )
    def test_illegal_transitions(self, start: str, target: str) -> None:
        snapshot = Snapshot(status=start)
        with pytest.raises(InvalidStatusTransitionError):
            snapshot.transition_to(target)

    def test_happy_path(self) -> None:
        snapshot = Snapshot(status=SnapshotStatus.PENDING)
        snapshot.transition_to(SnapshotStatus.PROCESSING)
        snapshot.transition_to(SnapshotStatus.COMPLETED)
        assert snapshot.is_completed


class TestDedupGate:
    def test_detects_processed_message_and_known_hash(self, session_factory, make_hotel) -> None:
        hotel = make_hotel()
        registrar = SnapshotRegistrar(session_factory=session_factory)
        snapshot_id = _register(registrar, hotel.id, b"known")
        with session_factory() as session:
            with session.begin():
                ProcessedMailRepository(session).record(
                    MailItem(
                        message_id="msg-1",
                        sender="Revenue@HarbourView.example",
                        subject="",
                        received_at=SNAPSHOT_TIME,
                    )
                )
        gate = DedupGate(session_factory=session_factory)

        assert gate.is_message_processed("msg-1") is True
        assert gate.is_message_processed("msg-2") is False
        assert gate.find_duplicate_snapshot(compute_content_hash(b"known")) == snapshot_id
        assert gate.find_duplicate_snapshot(compute_content_hash(b"new")) is None

        decision = gate.check("msg-2", compute_content_hash(b"known"))
        assert decision.is_duplicate
        assert decision.message_processed is False
        assert decision.duplicate_snapshot_id == snapshot_id
        assert not gate.check("msg-2", compute_content_hash(b"new")).is_duplicate

    def test_unreachable_store_fails_closed(self) -> None:
        gate = DedupGate(session_factory=UnreachableSession)

        with pytest.raises(StorageUnavailableError):
            gate.is_message_processed("msg-1")
        with pytest.raises(StorageUnavailableError):
            gate.find_duplicate_snapshot(compute_content_hash(b"any"))
        with pytest.raises(StorageUnavailableError):
            gate.check("msg-1", compute_content_hash(b"any"))
