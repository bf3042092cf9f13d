"""
Object store backends for raw forecast files.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from db.repositories.errors import FileStorageError
from db.repositories.types import StoredBlob

BLOB_PREFIX = "history-forecast"


class BlobStorageBackend(Protocol):
    """
    Object store contract: hotel-scoped uploads addressed by opaque reference.
    """

    def upload(self, *, hotel_id: uuid.UUID, file_name: str, content: bytes) -> StoredBlob:
        ...

    def download(self, *, reference: str) -> bytes:
        ...

    def delete(self, *, reference: str) -> None:
        ...


def _sanitize_file_name(file_name: str) -> str:
    safe_name = Path(file_name).name.strip()
    if not safe_name:
        raise FileStorageError("Invalid file name.")
    return safe_name


class LocalBlobStorage:
    """
    Filesystem-backed object store.

    References are POSIX paths relative to ``root_dir`` shaped as
    ``history-forecast/<hotel_id>/<utc timestamp>_<file name>``.
    """

    def __init__(self, root_dir: str | Path = "data/blobs") -> None:
        self._root_dir = Path(root_dir)

    def upload(self, *, hotel_id: uuid.UUID, file_name: str, content: bytes) -> StoredBlob:
        safe_file_name = _sanitize_file_name(file_name)
        stored_at = datetime.now(timezone.utc)
        stamp = stored_at.strftime("%Y-%m-%dT%H-%M-%S-%fZ")

        relative_path = Path(BLOB_PREFIX) / str(hotel_id) / f"{stamp}_{safe_file_name}"
        absolute_path = self._root_dir / relative_path
        tmp_path = absolute_path.with_suffix(f"{absolute_path.suffix}.tmp")
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("wb") as handle:
                handle.write(content)
            tmp_path.replace(absolute_path)
        except OSError as exc:
            raise FileStorageError("Failed to write file to object storage.") from exc
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass

        return StoredBlob(
            reference=relative_path.as_posix(),
            file_name=safe_file_name,
            size_bytes=len(content),
            stored_at=stored_at,
        )

    def download(self, *, reference: str) -> bytes:
        target = self._resolve(reference)
        try:
            return target.read_bytes()
        except OSError as exc:
            raise FileStorageError(f"Failed to read stored file: {reference}") from exc

    def delete(self, *, reference: str) -> None:
        target = self._resolve(reference)
        if not target.exists():
            return
        try:
            target.unlink()
        except OSError as exc:
            raise FileStorageError(f"Failed to delete stored file: {reference}") from exc

    def _resolve(self, reference: str) -> Path:
        root = self._root_dir.resolve()
        target = (root / Path(reference)).resolve()
        if root not in target.parents:
            raise FileStorageError(f"Reference escapes storage root: {reference}")
        return target
