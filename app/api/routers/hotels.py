"""
app/api/routers/hotels.py

Hotel administration, snapshot listing and seed upload endpoints.
"""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_forecast_upload
from app.repositories.hotel_repository import HotelRepository
from app.repositories.snapshot_repository import SnapshotRepository
from app.schemas.hotels import (
    HotelCreateRequest,
    HotelResponse,
    HotelUpdateRequest,
    SeedRegistrationResponse,
    SnapshotListResponse,
    SnapshotResponse,
)
from app.services.hotel_service import HotelEmailConflictError, HotelService, get_hotel_service
from app.services.seed_upload_service import SeedUploadService, get_seed_upload_service
from db.repositories.errors import (
    DuplicateContentError,
    HotelNotFoundError,
    SeedAlreadyExistsError,
    SnapshotConstraintError,
    StorageUnavailableError,
)
from db.session import get_db

router = APIRouter(prefix="/hotels", tags=["hotels"])


@router.get("", response_model=list[HotelResponse])
def list_hotels(
    active_only: bool = Query(default=False, description="Only return active hotels"),
    service: HotelService = Depends(get_hotel_service),
) -> list[HotelResponse]:
    return [HotelResponse.model_validate(hotel) for hotel in service.list_hotels(active_only=active_only)]


@router.post("", response_model=HotelResponse, status_code=status.HTTP_201_CREATED)
def create_hotel(
    body: HotelCreateRequest,
    service: HotelService = Depends(get_hotel_service),
) -> HotelResponse:
    """
    Register a hotel. Raises HTTP 409 if the email already routes to another hotel.
    """
    try:
        hotel = service.create_hotel(
            name=body.name,
            email=body.email,
            total_available_rooms=body.total_available_rooms,
            is_active=body.is_active,
        )
    except HotelEmailConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return HotelResponse.model_validate(hotel)


@router.patch("/{hotel_id}", response_model=HotelResponse)
def update_hotel(
    hotel_id: uuid.UUID,
    body: HotelUpdateRequest,
    service: HotelService = Depends(get_hotel_service),
) -> HotelResponse:
    try:
        hotel = service.update_hotel(
            hotel_id,
            name=body.name,
            email=body.email,
            total_available_rooms=body.total_available_rooms,
        )
    except HotelNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except HotelEmailConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return HotelResponse.model_validate(hotel)


@router.post("/{hotel_id}/activate", response_model=HotelResponse)
def activate_hotel(hotel_id: uuid.UUID, service: HotelService = Depends(get_hotel_service)) -> HotelResponse:
    try:
        return HotelResponse.model_validate(service.activate(hotel_id))
    except HotelNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("/{hotel_id}/deactivate", response_model=HotelResponse)
def deactivate_hotel(hotel_id: uuid.UUID, service: HotelService = Depends(get_hotel_service)) -> HotelResponse:
    try:
        return HotelResponse.model_validate(service.deactivate(hotel_id))
    except HotelNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/{hotel_id}/snapshots", response_model=SnapshotListResponse)
def list_snapshots(
    hotel_id: uuid.UUID,
    limit: int = Query(default=50, ge=1, le=500, description="Max snapshots returned"),
    db: Session = Depends(get_db),
) -> SnapshotListResponse:
    if HotelRepository(db).get(hotel_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Hotel not found: {hotel_id}")
    snapshots = SnapshotRepository(db).list_for_hotel(hotel_id, limit=limit)
    return SnapshotListResponse(snapshots=[SnapshotResponse.model_validate(item) for item in snapshots])


@router.post(
    "/{hotel_id}/seed",
    response_model=SeedRegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
def upload_seed(
    hotel_id: uuid.UUID,
    file: UploadFile = Depends(get_forecast_upload),
    onboarding_date: date | None = Form(default=None),
    service: SeedUploadService = Depends(get_seed_upload_service),
) -> SeedRegistrationResponse:
    try:
        content = file.file.read()
    finally:
        file.file.close()

    try:
        result = service.register_seed(
            hotel_id,
            content,
            file.filename or "seed.txt",
            onboarding_date=onboarding_date,
        )
    except HotelNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (SeedAlreadyExistsError, DuplicateContentError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except SnapshotConstraintError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except StorageUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return SeedRegistrationResponse(
        snapshot_id=result.snapshot_id,
        snapshot_time=result.snapshot_time,
        filename=result.filename,
        row_count=result.row_count,
    )
