"""
app/parsers/history_forecast.py

Parser for tab-separated history/forecast files.

Parsing is lazy and single-pass: ``parse_history_forecast`` yields one
ParsedRow per accepted line. A bad line is logged and skipped; it never
aborts the rest of the file.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from datetime import datetime, timezone

from app.domain.forecast_rows import RAW_COLUMN_COUNT, ParsedRow
from app.parsers.columns import (
    COL_DATA_TYPE,
    COL_OO_ROOMS,
    COL_ROOM_NIGHTS,
    COL_ROOM_REVENUE,
    COL_STAY_DATE,
    StayDateParseError,
    calculate_adr,
    calculate_occupancy_percent,
    calculate_revpar,
    parse_data_type,
    parse_numeric_value,
    parse_stay_date,
    raw_value,
)

logger = logging.getLogger(__name__)

_FILENAME_TIMESTAMP = re.compile(r"history_forecast(\d+)", re.IGNORECASE)
_REQUIRED_POSITIONS = (COL_DATA_TYPE, COL_STAY_DATE, COL_ROOM_NIGHTS)


def parse_history_forecast(content: bytes, total_available_rooms: int) -> Iterator[ParsedRow]:
    """
    Yield parsed rows from raw file bytes.

    Args:
        content:               Raw attachment bytes (UTF-8, BOM tolerated).
        total_available_rooms: Room count used for occupancy and RevPAR.
    """

    text = content.decode("utf-8-sig", errors="replace")
    lines = [line.rstrip("\r") for line in text.split("\n") if line.strip()]

    for row_index, line in enumerate(lines):
        try:
            row = parse_line(line, row_index=row_index, total_available_rooms=total_available_rooms)
        except StayDateParseError as exc:
            logger.warning("Skipping line %s: %s", row_index + 1, exc)
            continue
        if row is not None:
            yield row


def parse_line(line: str, *, row_index: int, total_available_rooms: int) -> ParsedRow | None:
    """
    Parse one line, returning None when it does not look like a data line.

    Raises StayDateParseError for a data line with an invalid stay date.
    """

    # Column 0 is a constant placeholder in every line.
    columns = line.split("\t")[1:]
    if len(columns) < RAW_COLUMN_COUNT:
        logger.debug("Dropping line %s: %s columns after placeholder", row_index + 1, len(columns))
        return None

    raw_values = tuple(cell.strip() for cell in columns[:RAW_COLUMN_COUNT])
    if any(not raw_value(raw_values, position) for position in _REQUIRED_POSITIONS):
        return None

    stay_date = parse_stay_date(raw_value(raw_values, COL_STAY_DATE))
    room_nights = parse_numeric_value(raw_value(raw_values, COL_ROOM_NIGHTS))
    room_revenue = parse_numeric_value(raw_value(raw_values, COL_ROOM_REVENUE))
    oo_rooms = parse_numeric_value(raw_value(raw_values, COL_OO_ROOMS))

    return ParsedRow(
        data_type=parse_data_type(raw_value(raw_values, COL_DATA_TYPE)),
        stay_date=stay_date,
        raw_values=raw_values,
        room_nights=room_nights,
        room_revenue=room_revenue,
        oo_rooms=oo_rooms,
        occupancy_percent=calculate_occupancy_percent(room_nights, total_available_rooms),
        adr=calculate_adr(room_revenue, room_nights),
        revpar=calculate_revpar(room_revenue, total_available_rooms),
        row_index=row_index,
    )


def extract_snapshot_time(filename: str, *, now: datetime | None = None) -> datetime:
    """
    Derive the business snapshot time from a ``history_forecast<epoch>`` name.

    Ten-digit values are epoch seconds, values above 10^12 epoch milliseconds.
    Anything else falls back to ``now`` (wall-clock UTC by default).
    """

    fallback = now or datetime.now(timezone.utc)
    match = _FILENAME_TIMESTAMP.search(filename)
    if match is None:
        return fallback

    value = int(match.group(1))
    try:
        if 1_000_000_000 < value < 9_999_999_999:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        if value > 1_000_000_000_000:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        logger.warning("Filename timestamp out of range filename=%r", filename)
    return fallback
