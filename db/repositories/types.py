"""
Typed DTOs used by the object store layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StoredBlob:
    """
    Metadata produced by a storage backend after saving a file.
    """

    reference: str
    file_name: str
    size_bytes: int
    stored_at: datetime
