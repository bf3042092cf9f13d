"""
app/services/seed_overlay.py

Refresh a hotel's seed with the latest actuals.

When a regular snapshot carries HISTORY rows, its final few HISTORY stay
dates are the freshest actuals available. Those values are copied onto the
matching HISTORY rows of the hotel's earliest seed so "actual vs snapshot"
comparisons use up-to-date actuals. Only existing seed rows are updated;
stay dates the seed does not cover are ignored.

The overlay is best-effort: a failure here never fails the ingestion that
triggered it.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.orm import Session, sessionmaker

from app.parsers.columns import calculate_adr, calculate_occupancy_percent, calculate_revpar
from app.repositories.snapshot_repository import SnapshotRepository
from db.models.snapshot import SnapshotStatus

logger = logging.getLogger(__name__)

DEFAULT_OVERLAY_WINDOW = 7


class SeedOverlayService:
    def __init__(
        self,
        *,
        session_factory: sessionmaker[Session] | None = None,
        window: int = DEFAULT_OVERLAY_WINDOW,
    ) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory
        self._window = max(0, window)

    def apply(self, snapshot_id: uuid.UUID) -> int:
        """
        Overlay the final HISTORY rows of ``snapshot_id`` onto the seed.

        Returns the number of seed rows updated; 0 when there is nothing to
        do or the overlay failed.
        """

        try:
            return self._apply(snapshot_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Seed overlay failed for snapshot_id=%s: %s", snapshot_id, exc)
            return 0

    def _apply(self, snapshot_id: uuid.UUID) -> int:
        with self._session_factory() as session:
            with session.begin():
                repository = SnapshotRepository(session)
                snapshot = repository.get(snapshot_id)
                if snapshot is None or snapshot.is_seed or snapshot.status != SnapshotStatus.COMPLETED:
                    return 0

                seed = repository.find_seed(snapshot.hotel_id)
                if seed is None:
                    logger.debug("No seed for hotel_id=%s; overlay skipped", snapshot.hotel_id)
                    return 0

                latest = repository.last_history_rows(snapshot.id, limit=self._window)
                if not latest:
                    return 0

                by_date = {row.stay_date: row for row in latest}
                seed_rows = repository.history_rows_for_dates(seed.id, list(by_date))
                available = seed.total_available_rooms_snapshot

                for seed_row in seed_rows:
                    source = by_date[seed_row.stay_date]
                    seed_row.raw_values = list(source.raw_values)
                    seed_row.room_nights = source.room_nights
                    seed_row.room_revenue = source.room_revenue
                    seed_row.oo_rooms = source.oo_rooms
                    seed_row.occupancy_percent = calculate_occupancy_percent(source.room_nights, available)
                    seed_row.adr = calculate_adr(source.room_revenue, source.room_nights)
                    seed_row.revpar = calculate_revpar(source.room_revenue, available)

                updated = len(seed_rows)
                seed_id = seed.id

        logger.info(
            "Seed overlay snapshot_id=%s seed_id=%s updated=%s",
            snapshot_id,
            seed_id,
            updated,
        )
        return updated
