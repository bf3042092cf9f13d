"""
app/schemas package marker.
"""

from app.schemas.comparison import ComparisonResponse
from app.schemas.hotels import (
    HotelCreateRequest,
    HotelResponse,
    HotelUpdateRequest,
    SeedRegistrationResponse,
    SnapshotListResponse,
    SnapshotResponse,
)
from app.schemas.ingestion import IngestionCycleResponse

__all__ = [
    "ComparisonResponse",
    "HotelCreateRequest",
    "HotelResponse",
    "HotelUpdateRequest",
    "IngestionCycleResponse",
    "SeedRegistrationResponse",
    "SnapshotListResponse",
    "SnapshotResponse",
]
