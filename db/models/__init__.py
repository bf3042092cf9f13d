"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.hotel import Hotel
from db.models.processed_mail import ProcessedMailRecord
from db.models.snapshot import (
    ALLOWED_STATUS_TRANSITIONS,
    InvalidStatusTransitionError,
    Snapshot,
    SnapshotStatus,
)
from db.models.snapshot_row import RowDataType, SnapshotRow

__all__ = [
    "ALLOWED_STATUS_TRANSITIONS",
    "Hotel",
    "InvalidStatusTransitionError",
    "ProcessedMailRecord",
    "RowDataType",
    "Snapshot",
    "SnapshotRow",
    "SnapshotStatus",
]
