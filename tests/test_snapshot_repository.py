"""
tests/test_snapshot_repository.py

Snapshot and row reads used by listings and date-range queries.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from app.hashing import compute_content_hash
from app.parsers.history_forecast import parse_history_forecast
from app.repositories.snapshot_repository import SnapshotRepository
from app.services.snapshot_registrar import SnapshotRegistrar
from db.models.snapshot import SnapshotStatus
from db.models.snapshot_row import RowDataType
from forecast_fixtures import build_file, build_line


def _store(session_factory, hotel_id: uuid.UUID, content: bytes, when: datetime, *, complete: bool = True) -> uuid.UUID:
    registrar = SnapshotRegistrar(session_factory=session_factory, batch_size=2)
    snapshot_id = registrar.register(
        hotel_id=hotel_id,
        original_filename=f"history_forecast{int(when.timestamp())}.txt",
        storage_reference=f"ref/{uuid.uuid4()}",
        content_hash=compute_content_hash(content),
        snapshot_time=when,
    )
    if complete:
        registrar.commit_rows(snapshot_id, parse_history_forecast(content, 100))
    return snapshot_id


def test_rows_are_inserted_in_batches_and_read_in_date_order(session_factory, make_hotel) -> None:
    hotel = make_hotel()
    content = build_file(
        build_line("Forecast", date(2025, 11, 3), "30", "6000"),
        build_line("History", date(2025, 11, 1), "20", "4000"),
        build_line("Forecast", date(2025, 11, 2), "25", "5000"),
    )
    snapshot_id = _store(session_factory, hotel.id, content, datetime(2025, 11, 1, tzinfo=timezone.utc))

    with session_factory() as session:
        repository = SnapshotRepository(session)
        rows = repository.list_rows(snapshot_id)
        forecast = repository.list_rows(snapshot_id, data_type=RowDataType.FORECAST)
        history = repository.last_history_rows(snapshot_id, limit=7)

    assert [row.stay_date.day for row in rows] == [1, 2, 3]
    assert all(row.hotel_id == hotel.id for row in rows)
    assert [row.stay_date.day for row in forecast] == [2, 3]
    assert [row.row_index for row in history] == [1]
    assert len(rows[0].raw_values) == 30


def test_listing_and_range_reads(session_factory, make_hotel) -> None:
    hotel = make_hotel()
    older = _store(
        session_factory,
        hotel.id,
        build_file(build_line("Forecast", date(2025, 11, 10), "10", "1000")),
        datetime(2025, 10, 1, tzinfo=timezone.utc),
    )
    newer = _store(
        session_factory,
        hotel.id,
        build_file(
            build_line("Forecast", date(2025, 11, 10), "12", "1200"),
            build_line("Forecast", date(2025, 12, 10), "5", "500"),
        ),
        datetime(2025, 10, 8, tzinfo=timezone.utc),
    )
    pending = _store(
        session_factory,
        hotel.id,
        build_file(build_line("Forecast", date(2025, 11, 10), "99", "9900")),
        datetime(2025, 10, 9, tzinfo=timezone.utc),
        complete=False,
    )

    with session_factory() as session:
        repository = SnapshotRepository(session)
        listed = repository.list_for_hotel(hotel.id)
        latest = repository.latest_completed(hotel.id, limit=5)
        in_november = repository.rows_in_range(hotel.id, start=date(2025, 11, 1), end=date(2025, 11, 30))
        other_hotel = repository.rows_in_range(uuid.uuid4(), start=date(2025, 1, 1), end=date(2025, 12, 31))

        assert [snapshot.id for snapshot in listed] == [pending, newer, older]
        assert listed[0].status == SnapshotStatus.PENDING
        assert [snapshot.id for snapshot in latest] == [newer, older]
        assert [(row.snapshot_id, row.room_nights) for row in in_november] == [(older, 10.0), (newer, 12.0)]
        assert other_hotel == []
