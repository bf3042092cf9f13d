"""
app/services/comparison_engine.py

Pure pickup/variance arithmetic over two row sets.

No I/O: callers select the rows, this module buckets and diffs them. Rows
are grouped per stay date, per calendar month and into a month-to-date
window; each bucket sums rooms and revenue per side before deriving ADR, so
ADR pickup is a difference of ratios rather than a sum of daily ADRs.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from app.domain.comparison import ComparableRow, ComparisonBucket, ComparisonResult, PickupValue, SideFigures
from app.parsers.columns import calculate_adr, format_stay_date

MTD_KEY = "MTD"


@dataclass
class _Totals:
    rooms: float = 0.0
    revenue: float = 0.0

    def add(self, row: ComparableRow) -> None:
        self.rooms += row.room_nights
        self.revenue += row.room_revenue

    @property
    def adr(self) -> float:
        return calculate_adr(self.revenue, self.rooms)

    def figures(self) -> SideFigures:
        return SideFigures(rooms=round(self.rooms, 2), revenue=round(self.revenue, 2), adr=round(self.adr, 2))


def compare_row_sets(
    baseline_rows: Iterable[ComparableRow],
    current_rows: Iterable[ComparableRow],
    *,
    today: date,
    current_available_rooms: int,
) -> ComparisonResult:
    """
    Diff ``current_rows`` against ``baseline_rows``.

    Args:
        baseline_rows:           Rows of the older / reference snapshot.
        current_rows:            Rows of the newer snapshot.
        today:                   Anchor for the month-to-date window.
        current_available_rooms: Room count of the current snapshot, used for
                                 bucket occupancy.

    Pickup deltas, ADR included, are taken from unrounded bucket totals and
    rounded once, so ``current.adr - baseline.adr`` as displayed can differ
    from ``pickup_adr.value`` by 0.01.
    """

    baseline_by_date = _group_by_date(baseline_rows)
    current_by_date = _group_by_date(current_rows)
    data_types = {stay_date: rows[0].data_type for stay_date, rows in current_by_date.items()}

    stay_dates = sorted(set(baseline_by_date) | set(current_by_date))

    daily = [
        _bucket(
            key=stay_date.isoformat(),
            label=format_stay_date(stay_date) if 2000 <= stay_date.year <= 2099 else stay_date.isoformat(),
            baseline=baseline_by_date.get(stay_date, []),
            current=current_by_date.get(stay_date, []),
            occupancy_days=1,
            available_rooms=current_available_rooms,
            data_type=data_types.get(stay_date),
        )
        for stay_date in stay_dates
    ]

    months: dict[tuple[int, int], list[date]] = defaultdict(list)
    for stay_date in stay_dates:
        months[(stay_date.year, stay_date.month)].append(stay_date)

    monthly = [
        _bucket(
            key=f"{year:04d}-{month:02d}",
            label=date(year, month, 1).strftime("%B %Y"),
            baseline=_collect(baseline_by_date, dates),
            current=_collect(current_by_date, dates),
            occupancy_days=sum(1 for d in dates if d in current_by_date),
            available_rooms=current_available_rooms,
        )
        for (year, month), dates in sorted(months.items())
    ]

    month_start = today.replace(day=1)
    mtd_dates = [d for d in stay_dates if month_start <= d <= today]
    mtd = _bucket(
        key=MTD_KEY,
        label=f"MTD {today:%B %Y}",
        baseline=_collect(baseline_by_date, mtd_dates),
        current=_collect(current_by_date, mtd_dates),
        occupancy_days=sum(1 for d in mtd_dates if d in current_by_date),
        available_rooms=current_available_rooms,
    )

    return ComparisonResult(daily=daily, monthly=monthly, mtd=mtd)


def _group_by_date(rows: Iterable[ComparableRow]) -> dict[date, list[ComparableRow]]:
    grouped: dict[date, list[ComparableRow]] = defaultdict(list)
    for row in rows:
        grouped[row.stay_date].append(row)
    return dict(grouped)


def _collect(grouped: dict[date, list[ComparableRow]], dates: Sequence[date]) -> list[ComparableRow]:
    return [row for stay_date in dates for row in grouped.get(stay_date, [])]


def _bucket(
    *,
    key: str,
    label: str,
    baseline: Sequence[ComparableRow],
    current: Sequence[ComparableRow],
    occupancy_days: int,
    available_rooms: int,
    data_type: str | None = None,
) -> ComparisonBucket:
    baseline_totals = _Totals()
    for row in baseline:
        baseline_totals.add(row)
    current_totals = _Totals()
    for row in current:
        current_totals.add(row)

    capacity = available_rooms * occupancy_days
    occupancy = current_totals.rooms / capacity * 100 if capacity > 0 else 0.0

    return ComparisonBucket(
        key=key,
        label=label,
        current=current_totals.figures(),
        baseline=baseline_totals.figures(),
        occupancy=round(occupancy, 2),
        pickup_rooms=PickupValue.of(current_totals.rooms - baseline_totals.rooms),
        pickup_revenue=PickupValue.of(current_totals.revenue - baseline_totals.revenue),
        pickup_adr=PickupValue.of(current_totals.adr - baseline_totals.adr),
        data_type=data_type,
    )
