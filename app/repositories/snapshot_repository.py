"""
app/repositories/snapshot_repository.py

Queries and bulk writes for snapshots and their rows.

All reads used for comparisons filter on COMPLETED status: a PENDING or
FAILED snapshot is an audit record, never a data source.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.orm import Session

from app.domain.forecast_rows import ParsedRow
from db.models.snapshot import Snapshot, SnapshotStatus
from db.models.snapshot_row import RowDataType, SnapshotRow


class SnapshotRepository:
    """
    Repository for snapshot registration, row commits and read queries.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def get(self, snapshot_id: uuid.UUID) -> Snapshot | None:
        return self._session.get(Snapshot, snapshot_id)

    def find_by_hash(self, content_hash: str) -> Snapshot | None:
        stmt = select(Snapshot).where(Snapshot.content_hash == content_hash)
        return self._session.execute(stmt).scalars().first()

    def create_pending(
        self,
        *,
        hotel_id: uuid.UUID,
        snapshot_time: datetime,
        original_filename: str,
        storage_reference: str,
        content_hash: str,
        total_available_rooms: int,
        uploaded_at: datetime,
        is_seed: bool = False,
    ) -> Snapshot:
        snapshot = Snapshot(
            hotel_id=hotel_id,
            snapshot_time=snapshot_time,
            original_filename=original_filename,
            storage_reference=storage_reference,
            content_hash=content_hash,
            total_available_rooms_snapshot=total_available_rooms,
            uploaded_at=uploaded_at,
            is_seed=is_seed,
            status=SnapshotStatus.PENDING,
            row_count=0,
        )
        self._session.add(snapshot)
        self._session.flush()
        return snapshot

    def list_for_hotel(self, hotel_id: uuid.UUID, *, limit: int = 50) -> list[Snapshot]:
        """
        Most recent snapshots of a hotel, any status, newest first.
        """

        stmt = (
            select(Snapshot)
            .where(Snapshot.hotel_id == hotel_id)
            .order_by(Snapshot.snapshot_time.desc(), Snapshot.created_at.desc())
            .limit(max(1, limit))
        )
        return list(self._session.execute(stmt).scalars().all())

    def latest_completed(self, hotel_id: uuid.UUID, *, limit: int = 2) -> list[Snapshot]:
        """
        Newest COMPLETED non-seed snapshots, newest first.
        """

        stmt = (
            select(Snapshot)
            .where(
                Snapshot.hotel_id == hotel_id,
                Snapshot.status == SnapshotStatus.COMPLETED,
                Snapshot.is_seed.is_(False),
            )
            .order_by(
                Snapshot.snapshot_time.desc(),
                Snapshot.uploaded_at.desc(),
                Snapshot.id.desc(),
            )
            .limit(max(1, limit))
        )
        return list(self._session.execute(stmt).scalars().all())

    def completed_between(
        self,
        hotel_id: uuid.UUID,
        *,
        start: datetime,
        end: datetime,
    ) -> list[Snapshot]:
        """
        COMPLETED non-seed snapshots whose snapshot_time falls in [start, end].
        """

        stmt = (
            select(Snapshot)
            .where(
                Snapshot.hotel_id == hotel_id,
                Snapshot.status == SnapshotStatus.COMPLETED,
                Snapshot.is_seed.is_(False),
                Snapshot.snapshot_time >= start,
                Snapshot.snapshot_time <= end,
            )
            .order_by(Snapshot.snapshot_time.asc())
        )
        return list(self._session.execute(stmt).scalars().all())

    def find_seed(self, hotel_id: uuid.UUID, *, completed_only: bool = False) -> Snapshot | None:
        """
        Earliest seed snapshot of a hotel.
        """

        stmt = select(Snapshot).where(Snapshot.hotel_id == hotel_id, Snapshot.is_seed.is_(True))
        if completed_only:
            stmt = stmt.where(Snapshot.status == SnapshotStatus.COMPLETED)
        stmt = stmt.order_by(Snapshot.snapshot_time.asc())
        return self._session.execute(stmt).scalars().first()

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def insert_rows(
        self,
        snapshot: Snapshot,
        rows: Iterable[ParsedRow],
        *,
        batch_size: int = 1000,
    ) -> int:
        """
        Bulk insert parsed rows in chunks; hotel_id is copied from the snapshot.
        """

        size = max(1, batch_size)
        inserted = 0
        chunk: list[dict[str, Any]] = []
        for row in rows:
            chunk.append(_row_payload(snapshot, row))
            if len(chunk) >= size:
                self._session.execute(insert(SnapshotRow), chunk)
                inserted += len(chunk)
                chunk = []
        if chunk:
            self._session.execute(insert(SnapshotRow), chunk)
            inserted += len(chunk)
        return inserted

    def list_rows(
        self,
        snapshot_id: uuid.UUID,
        *,
        data_type: str | None = None,
    ) -> list[SnapshotRow]:
        stmt = select(SnapshotRow).where(SnapshotRow.snapshot_id == snapshot_id)
        if data_type is not None:
            stmt = stmt.where(SnapshotRow.data_type == data_type)
        stmt = stmt.order_by(SnapshotRow.stay_date.asc(), SnapshotRow.data_type.asc())
        return list(self._session.execute(stmt).scalars().all())

    def last_history_rows(self, snapshot_id: uuid.UUID, *, limit: int) -> list[SnapshotRow]:
        """
        The final ``limit`` HISTORY rows of a snapshot in file order.
        """

        stmt = (
            select(SnapshotRow)
            .where(
                SnapshotRow.snapshot_id == snapshot_id,
                SnapshotRow.data_type == RowDataType.HISTORY,
            )
            .order_by(SnapshotRow.row_index.desc())
            .limit(max(0, limit))
        )
        rows = list(self._session.execute(stmt).scalars().all())
        rows.reverse()
        return rows

    def history_rows_for_dates(
        self,
        snapshot_id: uuid.UUID,
        stay_dates: Sequence[date],
    ) -> list[SnapshotRow]:
        if not stay_dates:
            return []
        stmt = select(SnapshotRow).where(
            SnapshotRow.snapshot_id == snapshot_id,
            SnapshotRow.data_type == RowDataType.HISTORY,
            SnapshotRow.stay_date.in_(list(stay_dates)),
        )
        return list(self._session.execute(stmt).scalars().all())

    def rows_in_range(
        self,
        hotel_id: uuid.UUID,
        *,
        start: date,
        end: date,
        data_type: str | None = None,
    ) -> list[SnapshotRow]:
        """
        Rows of COMPLETED snapshots of a hotel with stay_date in [start, end].
        """

        stmt = (
            select(SnapshotRow)
            .join(Snapshot, Snapshot.id == SnapshotRow.snapshot_id)
            .where(
                SnapshotRow.hotel_id == hotel_id,
                SnapshotRow.stay_date >= start,
                SnapshotRow.stay_date <= end,
                Snapshot.status == SnapshotStatus.COMPLETED,
            )
        )
        if data_type is not None:
            stmt = stmt.where(SnapshotRow.data_type == data_type)
        stmt = stmt.order_by(SnapshotRow.stay_date.asc(), Snapshot.snapshot_time.asc())
        return list(self._session.execute(stmt).scalars().all())


def _row_payload(snapshot: Snapshot, row: ParsedRow) -> dict[str, Any]:
    return {
        "id": uuid.uuid4(),
        "snapshot_id": snapshot.id,
        "hotel_id": snapshot.hotel_id,
        "stay_date": row.stay_date,
        "data_type": row.data_type,
        "raw_values": list(row.raw_values),
        "room_nights": row.room_nights,
        "room_revenue": row.room_revenue,
        "oo_rooms": row.oo_rooms,
        "occupancy_percent": row.occupancy_percent,
        "adr": row.adr,
        "revpar": row.revpar,
        "row_index": row.row_index,
    }
