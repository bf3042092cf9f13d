"""
app/services/comparison_service.py

Snapshot selection for the three comparison modes.

    pickup              two regular snapshots (given or latest two), FORECAST rows
    actual_vs_snapshot  seed HISTORY rows vs every row of one regular snapshot
    stly                snapshot nearest to the same time last year vs latest,
                        FORECAST rows

Only COMPLETED snapshots are ever compared.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache

from sqlalchemy.orm import Session, sessionmaker

from app.domain.comparison import ComparableRow, ComparisonMode, ComparisonReport, SnapshotRef
from app.repositories.hotel_repository import HotelRepository
from app.repositories.snapshot_repository import SnapshotRepository
from app.services.comparison_engine import compare_row_sets
from db.models.snapshot import Snapshot, SnapshotStatus
from db.models.snapshot_row import RowDataType, SnapshotRow
from db.repositories.errors import HotelNotFoundError, SnapshotNotFoundError

logger = logging.getLogger(__name__)

STLY_WINDOW_DAYS = 7


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ComparisonError(ValueError):
    """
    Raised when the requested comparison cannot be built from the stored snapshots.
    """


class SeedSnapshotNotFoundError(SnapshotNotFoundError):
    """
    Raised when actual-vs-snapshot is requested for a hotel without a completed seed.
    """


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ComparisonService:
    def __init__(self, *, session_factory: sessionmaker[Session] | None = None) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory

    def compare(
        self,
        hotel_id: uuid.UUID,
        mode: str,
        snapshot_id_a: uuid.UUID | None = None,
        snapshot_id_b: uuid.UUID | None = None,
        as_of_date: date | None = None,
    ) -> ComparisonReport:
        """
        Build a comparison report for one hotel.

        Args:
            hotel_id:      Hotel whose snapshots are compared.
            mode:          One of ComparisonMode.ALL.
            snapshot_id_a: Pickup: either snapshot. Actual-vs-snapshot: the
                           snapshot compared against the seed.
            snapshot_id_b: Pickup: the other snapshot.
            as_of_date:    Anchor for MTD and STLY; defaults to today.

        Raises:
            HotelNotFoundError, SnapshotNotFoundError, SeedSnapshotNotFoundError,
            ComparisonError.
        """

        if mode not in ComparisonMode.ALL:
            raise ComparisonError(f"Unknown comparison mode {mode!r}")

        today = as_of_date or date.today()

        with self._session_factory() as session:
            if HotelRepository(session).get(hotel_id) is None:
                raise HotelNotFoundError(f"Hotel {hotel_id} not found")
            repository = SnapshotRepository(session)

            if mode == ComparisonMode.PICKUP:
                baseline, current = self._select_pickup(repository, hotel_id, snapshot_id_a, snapshot_id_b)
                baseline_rows = repository.list_rows(baseline.id, data_type=RowDataType.FORECAST)
                current_rows = repository.list_rows(current.id, data_type=RowDataType.FORECAST)
            elif mode == ComparisonMode.ACTUAL_VS_SNAPSHOT:
                baseline = repository.find_seed(hotel_id, completed_only=True)
                if baseline is None:
                    raise SeedSnapshotNotFoundError(f"Hotel {hotel_id} has no completed seed snapshot")
                current = (
                    self._load_completed(repository, hotel_id, snapshot_id_a)
                    if snapshot_id_a is not None
                    else self._latest(repository, hotel_id)
                )
                baseline_rows = repository.list_rows(baseline.id, data_type=RowDataType.HISTORY)
                current_rows = repository.list_rows(current.id)
            else:
                current = self._latest(repository, hotel_id)
                baseline = self._select_stly(repository, hotel_id, today)
                baseline_rows = repository.list_rows(baseline.id, data_type=RowDataType.FORECAST)
                current_rows = repository.list_rows(current.id, data_type=RowDataType.FORECAST)

            result = compare_row_sets(
                [_comparable(row) for row in baseline_rows],
                [_comparable(row) for row in current_rows],
                today=today,
                current_available_rooms=current.total_available_rooms_snapshot,
            )
            report = ComparisonReport(
                hotel_id=hotel_id,
                mode=mode,
                baseline=_ref(baseline),
                current=_ref(current),
                result=result,
            )

        logger.info(
            "Comparison hotel_id=%s mode=%s baseline=%s current=%s days=%s",
            hotel_id,
            mode,
            report.baseline.id,
            report.current.id,
            len(result.daily),
        )
        return report

    # ------------------------------------------------------------------
    # Snapshot selection
    # ------------------------------------------------------------------

    def _select_pickup(
        self,
        repository: SnapshotRepository,
        hotel_id: uuid.UUID,
        snapshot_id_a: uuid.UUID | None,
        snapshot_id_b: uuid.UUID | None,
    ) -> tuple[Snapshot, Snapshot]:
        if (snapshot_id_a is None) != (snapshot_id_b is None):
            raise ComparisonError("Pickup needs both snapshot ids or neither.")

        if snapshot_id_a is not None and snapshot_id_b is not None:
            if snapshot_id_a == snapshot_id_b:
                raise ComparisonError("Cannot compare a snapshot with itself.")
            first = self._load_completed(repository, hotel_id, snapshot_id_a)
            second = self._load_completed(repository, hotel_id, snapshot_id_b)
            for snapshot in (first, second):
                if snapshot.is_seed:
                    raise ComparisonError(
                        f"Snapshot {snapshot.id} is a seed; pickup compares regular snapshots."
                    )
            ordered = sorted((first, second), key=_chronological_key)
            return ordered[0], ordered[1]

        latest = repository.latest_completed(hotel_id, limit=2)
        if len(latest) < 2:
            raise ComparisonError(
                f"Pickup needs at least two completed snapshots; hotel {hotel_id} has {len(latest)}."
            )
        return latest[1], latest[0]

    def _select_stly(self, repository: SnapshotRepository, hotel_id: uuid.UUID, target: date) -> Snapshot:
        anchor = datetime.combine(same_day_last_year(target), time.min, tzinfo=timezone.utc)
        window = timedelta(days=STLY_WINDOW_DAYS)
        candidates = repository.completed_between(
            hotel_id,
            start=anchor - window,
            end=anchor + window + timedelta(days=1) - timedelta(microseconds=1),
        )
        if not candidates:
            raise SnapshotNotFoundError(
                f"No completed snapshot within {STLY_WINDOW_DAYS} days of {anchor.date().isoformat()}"
            )
        # Ties go to the earlier snapshot; candidates are already ascending.
        return min(candidates, key=lambda snapshot: abs(_as_utc(snapshot.snapshot_time) - anchor))

    def _latest(self, repository: SnapshotRepository, hotel_id: uuid.UUID) -> Snapshot:
        latest = repository.latest_completed(hotel_id, limit=1)
        if not latest:
            raise ComparisonError(f"Hotel {hotel_id} has no completed snapshots.")
        return latest[0]

    def _load_completed(
        self,
        repository: SnapshotRepository,
        hotel_id: uuid.UUID,
        snapshot_id: uuid.UUID,
    ) -> Snapshot:
        snapshot = repository.get(snapshot_id)
        if snapshot is None:
            raise SnapshotNotFoundError(f"Snapshot {snapshot_id} not found")
        if snapshot.hotel_id != hotel_id:
            raise ComparisonError(f"Snapshot {snapshot_id} does not belong to hotel {hotel_id}")
        if snapshot.status != SnapshotStatus.COMPLETED:
            raise ComparisonError(f"Snapshot {snapshot_id} is {snapshot.status}, not COMPLETED")
        return snapshot


def same_day_last_year(value: date) -> date:
    """One year earlier; 29 February maps to 28 February."""
    if value.month == 2 and value.day == 29:
        return date(value.year - 1, 2, 28)
    return value.replace(year=value.year - 1)


def _chronological_key(snapshot: Snapshot) -> tuple[datetime, datetime, str]:
    # Same order as SnapshotRepository.latest_completed, read ascending.
    return _as_utc(snapshot.snapshot_time), _as_utc(snapshot.uploaded_at), snapshot.id.hex


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _comparable(row: SnapshotRow) -> ComparableRow:
    return ComparableRow(
        stay_date=row.stay_date,
        data_type=row.data_type,
        room_nights=row.room_nights,
        room_revenue=row.room_revenue,
    )


def _ref(snapshot: Snapshot) -> SnapshotRef:
    return SnapshotRef(
        id=snapshot.id,
        snapshot_time=_as_utc(snapshot.snapshot_time),
        filename=snapshot.original_filename,
        is_seed=snapshot.is_seed,
    )


@lru_cache(maxsize=1)
def get_comparison_service() -> ComparisonService:
    return ComparisonService()
