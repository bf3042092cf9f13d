"""
Store-level exceptions shared by repositories, storage backends and services.

Taxonomy:
- StorageUnavailableError: transient infrastructure failure; safe to retry on
  the next ingestion cycle.
- DuplicateContentError: content hash already registered; a normal skip.
- SnapshotConstraintError: uniqueness broken inside one snapshot's rows; a
  source-file defect that needs operator attention.
- *NotFoundError: operation against an unknown id; rejected with no effect.
"""

from __future__ import annotations

import uuid


class SnapshotStoreError(Exception):
    """Base exception for snapshot store failures."""


class StorageUnavailableError(SnapshotStoreError):
    """Raised when the relational store or object store cannot be reached."""


class FileStorageError(StorageUnavailableError):
    """Raised when storing, reading or deleting a stored file fails."""


class DuplicateContentError(SnapshotStoreError):
    """Raised when a file with the same content hash was already registered."""

    def __init__(self, content_hash: str, existing_snapshot_id: uuid.UUID | None = None) -> None:
        super().__init__(f"Duplicate content hash {content_hash[:16]}...")
        self.content_hash = content_hash
        self.existing_snapshot_id = existing_snapshot_id


class SnapshotConstraintError(SnapshotStoreError):
    """Raised when a row commit breaks the (snapshot, stay date, type) uniqueness."""


class SnapshotNotFoundError(SnapshotStoreError):
    """Raised when a referenced snapshot does not exist."""


class HotelNotFoundError(SnapshotStoreError):
    """Raised when a referenced hotel does not exist."""


class SeedAlreadyExistsError(SnapshotStoreError):
    """Raised when a hotel already has a seed snapshot."""
