"""
Schemas for the manual ingestion trigger.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class IngestionCycleResponse(BaseModel):
    items_seen: int
    processed: int
    skipped: int
    snapshots_created: int
    error_count: int
    error_messages: list[str] = Field(default_factory=list)
