"""
Schemas for hotel administration and snapshot listing endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class HotelCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=320)
    total_available_rooms: int = Field(default=0, ge=0)
    is_active: bool = True


class HotelUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, min_length=3, max_length=320)
    total_available_rooms: int | None = Field(default=None, ge=0)


class HotelResponse(BaseModel):
    id: UUID
    name: str
    email: str
    total_available_rooms: int
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class SnapshotResponse(BaseModel):
    id: UUID
    hotel_id: UUID
    snapshot_time: datetime
    original_filename: str
    status: str
    is_seed: bool
    row_count: int
    total_available_rooms_snapshot: int
    processing_error: str | None = None
    uploaded_at: datetime

    model_config = {"from_attributes": True}


class SnapshotListResponse(BaseModel):
    snapshots: list[SnapshotResponse] = Field(default_factory=list)


class SeedRegistrationResponse(BaseModel):
    snapshot_id: UUID
    snapshot_time: datetime
    filename: str
    row_count: int
