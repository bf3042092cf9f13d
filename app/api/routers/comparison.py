"""
app/api/routers/comparison.py

Pickup and variance comparison endpoints.
"""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.domain.comparison import ComparisonMode
from app.schemas.comparison import ComparisonResponse
from app.services.comparison_service import ComparisonError, ComparisonService, get_comparison_service
from db.repositories.errors import HotelNotFoundError, SnapshotNotFoundError

router = APIRouter(tags=["comparison"])


@router.get("/comparison/{hotel_id}", response_model=ComparisonResponse)
def get_comparison(
    hotel_id: uuid.UUID,
    mode: str = Query(default=ComparisonMode.PICKUP, description="pickup, actual_vs_snapshot or stly"),
    snapshot_a: uuid.UUID | None = Query(default=None, description="First snapshot id"),
    snapshot_b: uuid.UUID | None = Query(default=None, description="Second snapshot id (pickup only)"),
    as_of_date: date | None = Query(default=None, description="Anchor date for MTD and STLY"),
    service: ComparisonService = Depends(get_comparison_service),
) -> ComparisonResponse:
    try:
        report = service.compare(
            hotel_id,
            mode,
            snapshot_id_a=snapshot_a,
            snapshot_id_b=snapshot_b,
            as_of_date=as_of_date,
        )
    except (HotelNotFoundError, SnapshotNotFoundError) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ComparisonError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return ComparisonResponse.from_report(report)
