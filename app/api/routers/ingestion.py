"""
app/api/routers/ingestion.py

Manual trigger for the mail ingestion cycle.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas.ingestion import IngestionCycleResponse
from app.services.ingestion_cycle_service import IngestionCycleRunner, get_ingestion_cycle_runner

router = APIRouter(tags=["ingestion"])


@router.post("/ingestion/run", response_model=IngestionCycleResponse)
def run_ingestion(
    runner: IngestionCycleRunner = Depends(get_ingestion_cycle_runner),
) -> IngestionCycleResponse:
    """
    Run one ingestion cycle now. Raises HTTP 409 if a cycle is already running.
    """
    summary = runner.run_if_idle()
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An ingestion cycle is already running.",
        )
    return IngestionCycleResponse(
        items_seen=summary.items_seen,
        processed=summary.processed,
        skipped=summary.skipped,
        snapshots_created=summary.snapshots_created,
        error_count=summary.error_count,
        error_messages=list(summary.error_messages),
    )
