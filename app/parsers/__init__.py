"""
app/parsers package marker.
"""

from app.parsers.columns import StayDateParseError, format_stay_date, parse_numeric_value, parse_stay_date
from app.parsers.history_forecast import extract_snapshot_time, parse_history_forecast, parse_line

__all__ = [
    "StayDateParseError",
    "extract_snapshot_time",
    "format_stay_date",
    "parse_history_forecast",
    "parse_line",
    "parse_numeric_value",
    "parse_stay_date",
]
