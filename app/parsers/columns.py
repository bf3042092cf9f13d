"""
app/parsers/columns.py

Positional layout and value coercion for history/forecast files.

Positions are 1-based and counted after the leading placeholder column has
been discarded. Only the positions named here carry known meaning; every
other column is preserved verbatim and never interpreted.
"""

from __future__ import annotations

import math
import re
from datetime import date
from typing import Final

from db.models.snapshot_row import RowDataType

COL_DATA_TYPE: Final[int] = 1
COL_STAY_DATE: Final[int] = 2
COL_ROOM_NIGHTS: Final[int] = 3
COL_ROOM_REVENUE: Final[int] = 10
COL_OO_ROOMS: Final[int] = 15

_NUMERIC_NOISE = re.compile(r"[,\s%]")
_STAY_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2})$")
_WEEKDAY_ABBREVIATIONS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class StayDateParseError(ValueError):
    """Raised when a stay date cell is not a valid ``DD/MM/YY`` calendar date."""


def raw_value(raw_values: tuple[str, ...] | list[str], position: int) -> str:
    """Return the cell at a 1-based position."""
    return raw_values[position - 1]


def parse_data_type(value: str) -> str:
    return RowDataType.HISTORY if value.strip().upper() == "HISTORY" else RowDataType.FORECAST


def parse_numeric_value(value: str | None) -> float:
    """
    Parse a numeric cell, tolerating thousands separators, whitespace and a
    trailing percent sign. Anything unparseable becomes 0.0.
    """

    if not value:
        return 0.0
    cleaned = _NUMERIC_NOISE.sub("", value)
    if not cleaned:
        return 0.0
    try:
        parsed = float(cleaned)
    except ValueError:
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def parse_stay_date(value: str) -> date:
    """
    Parse ``DD/MM/YY`` optionally followed by a weekday token.

    >>> parse_stay_date("01/11/25 Sat")
    datetime.date(2025, 11, 1)
    """

    tokens = value.strip().split()
    if not tokens:
        raise StayDateParseError("Empty stay date.")

    match = _STAY_DATE.match(tokens[0])
    if match is None:
        raise StayDateParseError(f"Invalid date format: {value!r}. Expected DD/MM/YY Day")

    day, month, short_year = (int(part) for part in match.groups())
    try:
        return date(2000 + short_year, month, day)
    except ValueError as exc:
        raise StayDateParseError(f"Invalid calendar date: {value!r}") from exc


def format_stay_date(value: date) -> str:
    """Inverse of parse_stay_date for dates in 2000-2099."""
    return f"{value:%d/%m/%y} {_WEEKDAY_ABBREVIATIONS[value.weekday()]}"


def calculate_occupancy_percent(room_nights: float, total_available_rooms: float) -> float:
    if total_available_rooms == 0:
        return 0.0
    return room_nights / total_available_rooms * 100


def calculate_adr(room_revenue: float, room_nights: float) -> float:
    if room_nights == 0:
        return 0.0
    return room_revenue / room_nights


def calculate_revpar(room_revenue: float, total_available_rooms: float) -> float:
    if total_available_rooms == 0:
        return 0.0
    return room_revenue / total_available_rooms
