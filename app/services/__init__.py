"""
app/services package marker.
"""

from app.services.comparison_service import (
    ComparisonError,
    ComparisonService,
    SeedSnapshotNotFoundError,
    get_comparison_service,
)
from app.services.dedup_gate import DedupDecision, DedupGate
from app.services.hotel_service import HotelEmailConflictError, HotelService, get_hotel_service
from app.services.ingestion_cycle_service import (
    IngestionCycleRunner,
    IngestionCycleService,
    get_ingestion_cycle_runner,
    get_ingestion_cycle_service,
)
from app.services.seed_overlay import SeedOverlayService
from app.services.seed_upload_service import SeedUploadService, get_seed_upload_service
from app.services.snapshot_registrar import SnapshotRegistrar

__all__ = [
    "ComparisonError",
    "ComparisonService",
    "SeedSnapshotNotFoundError",
    "get_comparison_service",
    "DedupDecision",
    "DedupGate",
    "HotelEmailConflictError",
    "HotelService",
    "get_hotel_service",
    "IngestionCycleRunner",
    "IngestionCycleService",
    "get_ingestion_cycle_runner",
    "get_ingestion_cycle_service",
    "SeedOverlayService",
    "SeedUploadService",
    "get_seed_upload_service",
    "SnapshotRegistrar",
]
