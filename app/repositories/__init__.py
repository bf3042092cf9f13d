"""
app/repositories package marker.
"""

from app.repositories.hotel_repository import HotelRepository
from app.repositories.processed_mail_repository import ProcessedMailRepository
from app.repositories.snapshot_repository import SnapshotRepository

__all__ = [
    "HotelRepository",
    "ProcessedMailRepository",
    "SnapshotRepository",
]
