"""
app/domain/comparison.py

Result types for snapshot-vs-snapshot pickup and variance comparisons.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime


class ComparisonMode:
    PICKUP = "pickup"
    ACTUAL_VS_SNAPSHOT = "actual_vs_snapshot"
    STLY = "stly"

    ALL = frozenset({PICKUP, ACTUAL_VS_SNAPSHOT, STLY})


@dataclass(frozen=True)
class ComparableRow:
    """
    The slice of a committed snapshot row the comparison engine needs.
    """

    stay_date: date
    data_type: str
    room_nights: float
    room_revenue: float


@dataclass(frozen=True)
class PickupValue:
    """
    A signed delta rounded to 2 places, pre-classified for presentation.
    """

    value: float
    is_positive: bool
    is_negative: bool
    is_zero: bool

    @classmethod
    def of(cls, delta: float) -> "PickupValue":
        rounded = round(delta, 2)
        # round() can yield -0.0; normalise so the sign flags stay consistent.
        if rounded == 0:
            rounded = 0.0
        return cls(
            value=rounded,
            is_positive=rounded > 0,
            is_negative=rounded < 0,
            is_zero=rounded == 0,
        )


@dataclass(frozen=True)
class SideFigures:
    rooms: float
    revenue: float
    adr: float


@dataclass(frozen=True)
class ComparisonBucket:
    """
    One day, one month, or the month-to-date window.

    ``key`` is an ISO date for daily buckets, ``YYYY-MM`` for months and
    ``MTD`` for month-to-date.
    """

    key: str
    label: str
    current: SideFigures
    baseline: SideFigures
    occupancy: float
    pickup_rooms: PickupValue
    pickup_revenue: PickupValue
    pickup_adr: PickupValue
    data_type: str | None = None


@dataclass(frozen=True)
class ComparisonResult:
    daily: list[ComparisonBucket] = field(default_factory=list)
    monthly: list[ComparisonBucket] = field(default_factory=list)
    mtd: ComparisonBucket | None = None


@dataclass(frozen=True)
class SnapshotRef:
    id: uuid.UUID
    snapshot_time: datetime
    filename: str
    is_seed: bool = False


@dataclass(frozen=True)
class ComparisonReport:
    """
    Structured payload returned to callers of ComparisonService.compare.
    """

    hotel_id: uuid.UUID
    mode: str
    baseline: SnapshotRef
    current: SnapshotRef
    result: ComparisonResult
