"""
app/domain package marker.
"""

from app.domain.comparison import (
    ComparableRow,
    ComparisonBucket,
    ComparisonMode,
    ComparisonReport,
    ComparisonResult,
    PickupValue,
    SideFigures,
    SnapshotRef,
)
from app.domain.forecast_rows import RAW_COLUMN_COUNT, ParsedRow
from app.domain.ingestion import CycleSummary, MailAttachment, MailItem, SeedRegistrationResult

__all__ = [
    "ComparableRow",
    "ComparisonBucket",
    "ComparisonMode",
    "ComparisonReport",
    "ComparisonResult",
    "CycleSummary",
    "MailAttachment",
    "MailItem",
    "ParsedRow",
    "PickupValue",
    "RAW_COLUMN_COUNT",
    "SeedRegistrationResult",
    "SideFigures",
    "SnapshotRef",
]
