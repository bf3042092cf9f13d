"""
app/domain/forecast_rows.py

Typed rows produced by the history/forecast file parser.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

RAW_COLUMN_COUNT = 30


@dataclass(frozen=True)
class ParsedRow:
    """
    One accepted source line.

    ``raw_values`` holds the 30 positional columns (after the discarded
    leading placeholder) exactly as they appeared, stripped of whitespace.
    """

    data_type: str
    stay_date: date
    raw_values: tuple[str, ...]
    room_nights: float
    room_revenue: float
    oo_rooms: float
    occupancy_percent: float
    adr: float
    revpar: float
    row_index: int
