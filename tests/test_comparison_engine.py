from __future__ import annotations

import unittest
from datetime import date

from app.domain.comparison import ComparableRow, PickupValue
from app.services.comparison_engine import MTD_KEY, compare_row_sets
from db.models.snapshot_row import RowDataType


def _row(stay_date: date, rooms: float, revenue: float, data_type: str = RowDataType.FORECAST) -> ComparableRow:
    return ComparableRow(stay_date=stay_date, data_type=data_type, room_nights=rooms, room_revenue=revenue)


class TestPickupValue(unittest.TestCase):
    def test_classification(self) -> None:
        self.assertEqual(PickupValue.of(8), PickupValue(value=8.0, is_positive=True, is_negative=False, is_zero=False))
        self.assertTrue(PickupValue.of(-1.234).is_negative)
        self.assertEqual(PickupValue.of(-1.234).value, -1.23)

    def test_tiny_negative_rounds_to_clean_zero(self) -> None:
        value = PickupValue.of(-0.001)
        self.assertEqual(value.value, 0.0)
        self.assertTrue(value.is_zero)
        self.assertFalse(value.is_negative)
        self.assertEqual(str(value.value), "0.0")


class TestCompareRowSets(unittest.TestCase):
    def test_worked_example(self) -> None:
        result = compare_row_sets(
            [_row(date(2025, 11, 5), 30, 6000)],
            [_row(date(2025, 11, 5), 38, 9500)],
            today=date(2025, 11, 10),
            current_available_rooms=100,
        )

        day = result.daily[0]
        self.assertEqual(day.key, "2025-11-05")
        self.assertEqual(day.pickup_rooms.value, 8.0)
        self.assertTrue(day.pickup_rooms.is_positive)
        self.assertEqual(day.pickup_revenue.value, 3500.0)
        self.assertEqual(day.baseline.adr, 200.0)
        self.assertEqual(day.current.adr, 250.0)
        self.assertEqual(day.pickup_adr.value, 50.0)
        self.assertEqual(day.occupancy, 38.0)

    def test_adr_pickup_uses_summed_figures(self) -> None:
        baseline = [_row(date(2025, 11, 1), 10, 1000), _row(date(2025, 11, 2), 30, 9000)]
        current = [_row(date(2025, 11, 1), 20, 3000), _row(date(2025, 11, 2), 30, 9000)]

        result = compare_row_sets(baseline, current, today=date(2025, 11, 30), current_available_rooms=50)

        month = result.monthly[0]
        self.assertEqual(month.key, "2025-11")
        self.assertEqual(month.label, "November 2025")
        self.assertEqual(month.baseline.adr, 250.0)
        self.assertEqual(month.current.adr, 240.0)
        self.assertEqual(month.pickup_adr.value, -10.0)
        self.assertEqual(month.occupancy, 50.0)

    def test_adr_pickup_is_rounded_from_unrounded_ratios(self) -> None:
        result = compare_row_sets(
            [_row(date(2025, 11, 1), 3, 100)],
            [_row(date(2025, 11, 1), 3, 101.03)],
            today=date(2025, 11, 30),
            current_available_rooms=10,
        )

        day = result.daily[0]
        self.assertEqual(day.baseline.adr, 33.33)
        self.assertEqual(day.current.adr, 33.68)
        self.assertEqual(day.pickup_adr.value, 0.34)

    def test_month_to_date_window(self) -> None:
        baseline = [_row(date(2025, 10, 31), 5, 500), _row(date(2025, 11, 1), 10, 1000), _row(date(2025, 11, 3), 10, 1000)]
        current = [_row(date(2025, 10, 31), 6, 600), _row(date(2025, 11, 1), 12, 1200), _row(date(2025, 11, 3), 20, 2000)]

        result = compare_row_sets(baseline, current, today=date(2025, 11, 2), current_available_rooms=100)

        self.assertEqual(result.mtd.key, MTD_KEY)
        self.assertEqual(result.mtd.current.rooms, 12.0)
        self.assertEqual(result.mtd.baseline.rooms, 10.0)
        self.assertEqual(result.mtd.pickup_rooms.value, 2.0)
        self.assertEqual([bucket.key for bucket in result.monthly], ["2025-10", "2025-11"])

    def test_empty_mtd_is_all_zero(self) -> None:
        result = compare_row_sets([], [], today=date(2025, 11, 2), current_available_rooms=100)

        self.assertEqual(result.daily, [])
        self.assertEqual(result.monthly, [])
        self.assertTrue(result.mtd.pickup_rooms.is_zero)
        self.assertEqual(result.mtd.occupancy, 0.0)

    def test_dates_on_one_side_only(self) -> None:
        result = compare_row_sets(
            [_row(date(2025, 12, 1), 4, 400)],
            [_row(date(2025, 12, 2), 3, 450, RowDataType.HISTORY)],
            today=date(2025, 12, 2),
            current_available_rooms=10,
        )

        first, second = result.daily
        self.assertEqual(first.pickup_rooms.value, -4.0)
        self.assertEqual(first.current.adr, 0.0)
        self.assertIsNone(first.data_type)
        self.assertEqual(second.pickup_rooms.value, 3.0)
        self.assertEqual(second.data_type, RowDataType.HISTORY)

    def test_zero_room_count_gives_zero_occupancy(self) -> None:
        result = compare_row_sets([], [_row(date(2025, 12, 1), 4, 400)], today=date(2025, 12, 1), current_available_rooms=0)

        self.assertEqual(result.daily[0].occupancy, 0.0)


if __name__ == "__main__":
    unittest.main()
