"""
Object store layer exports.
"""

from db.repositories.errors import (
    DuplicateContentError,
    FileStorageError,
    HotelNotFoundError,
    SeedAlreadyExistsError,
    SnapshotConstraintError,
    SnapshotNotFoundError,
    SnapshotStoreError,
    StorageUnavailableError,
)
from db.repositories.storage import BlobStorageBackend, LocalBlobStorage
from db.repositories.types import StoredBlob

__all__ = [
    "BlobStorageBackend",
    "DuplicateContentError",
    "FileStorageError",
    "HotelNotFoundError",
    "LocalBlobStorage",
    "SeedAlreadyExistsError",
    "SnapshotConstraintError",
    "SnapshotNotFoundError",
    "SnapshotStoreError",
    "StorageUnavailableError",
    "StoredBlob",
]
