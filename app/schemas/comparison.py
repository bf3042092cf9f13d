"""
Schemas for comparison endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.domain.comparison import ComparisonBucket, ComparisonReport, PickupValue, SideFigures, SnapshotRef


class PickupValueResponse(BaseModel):
    value: float
    is_positive: bool
    is_negative: bool
    is_zero: bool


class SideFiguresResponse(BaseModel):
    rooms: float
    revenue: float
    adr: float


class ComparisonBucketResponse(BaseModel):
    key: str
    label: str
    data_type: str | None = None
    occupancy: float
    current: SideFiguresResponse
    baseline: SideFiguresResponse
    pickup_rooms: PickupValueResponse
    pickup_revenue: PickupValueResponse
    pickup_adr: PickupValueResponse


class SnapshotRefResponse(BaseModel):
    id: UUID
    snapshot_time: datetime
    filename: str
    is_seed: bool


class ComparisonResponse(BaseModel):
    hotel_id: UUID
    mode: str
    baseline: SnapshotRefResponse
    current: SnapshotRefResponse
    mtd: ComparisonBucketResponse | None = None
    monthly: list[ComparisonBucketResponse] = Field(default_factory=list)
    daily: list[ComparisonBucketResponse] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: ComparisonReport) -> "ComparisonResponse":
        return cls(
            hotel_id=report.hotel_id,
            mode=report.mode,
            baseline=_ref(report.baseline),
            current=_ref(report.current),
            mtd=_bucket(report.result.mtd) if report.result.mtd is not None else None,
            monthly=[_bucket(bucket) for bucket in report.result.monthly],
            daily=[_bucket(bucket) for bucket in report.result.daily],
        )


def _ref(ref: SnapshotRef) -> SnapshotRefResponse:
    return SnapshotRefResponse(id=ref.id, snapshot_time=ref.snapshot_time, filename=ref.filename, is_seed=ref.is_seed)


def _side(figures: SideFigures) -> SideFiguresResponse:
    return SideFiguresResponse(rooms=figures.rooms, revenue=figures.revenue, adr=figures.adr)


def _pickup(value: PickupValue) -> PickupValueResponse:
    return PickupValueResponse(
        value=value.value,
        is_positive=value.is_positive,
        is_negative=value.is_negative,
        is_zero=value.is_zero,
    )


def _bucket(bucket: ComparisonBucket) -> ComparisonBucketResponse:
    return ComparisonBucketResponse(
        key=bucket.key,
        label=bucket.label,
        data_type=bucket.data_type,
        occupancy=bucket.occupancy,
        current=_side(bucket.current),
        baseline=_side(bucket.baseline),
        pickup_rooms=_pickup(bucket.pickup_rooms),
        pickup_revenue=_pickup(bucket.pickup_revenue),
        pickup_adr=_pickup(bucket.pickup_adr),
    )
