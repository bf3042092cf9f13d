"""
tests/test_blob_storage.py

Filesystem object store.
"""

from __future__ import annotations

import uuid

import pytest

from db.repositories.errors import FileStorageError
from db.repositories.storage import LocalBlobStorage


def test_upload_download_delete(tmp_path) -> None:
    storage = LocalBlobStorage(tmp_path)
    hotel_id = uuid.uuid4()

    blob = storage.upload(hotel_id=hotel_id, file_name="../../history_forecast1761955200.txt", content=b"rows")

    assert blob.reference.startswith(f"history-forecast/{hotel_id}/")
    assert blob.file_name == "history_forecast1761955200.txt"
    assert blob.size_bytes == 4
    assert storage.download(reference=blob.reference) == b"rows"

    storage.delete(reference=blob.reference)
    storage.delete(reference=blob.reference)
    with pytest.raises(FileStorageError):
        storage.download(reference=blob.reference)


def test_rejects_references_outside_root(tmp_path) -> None:
    storage = LocalBlobStorage(tmp_path / "blobs")

    with pytest.raises(FileStorageError):
        storage.download(reference="../secrets.txt")


def test_rejects_empty_file_name(tmp_path) -> None:
    with pytest.raises(FileStorageError):
        LocalBlobStorage(tmp_path).upload(hotel_id=uuid.uuid4(), file_name="  ", content=b"")
