"""Tests for calendar helpers."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from transport_payroll.calculators.dates import (
    add_months,
    age_on,
    calendar_days,
    elapsed_seconds,
    is_weekend,
    iter_days,
    localize,
    month_bounds,
    overlap_days,
    work_days,
)

COPENHAGEN = ZoneInfo("Europe/Copenhagen")


class TestDayCounting:
    def test_calendar_days_inclusive(self):
        assert calendar_days(date(2025, 6, 2), date(2025, 6, 2)) == 1
        assert calendar_days(date(2025, 6, 2), date(2025, 6, 8)) == 7

    def test_calendar_days_reversed_range(self):
        assert calendar_days(date(2025, 6, 8), date(2025, 6, 2)) == 0

    @pytest.mark.parametrize(
        "start,end,expected",
        [
            (date(2025, 6, 2), date(2025, 6, 8), 5),
            (date(2025, 6, 7), date(2025, 6, 8), 0),
            (date(2025, 6, 6), date(2025, 6, 9), 2),
            (date(2025, 5, 5), date(2025, 7, 18), 55),
            (date(2025, 6, 9), date(2025, 6, 2), 0),
        ],
    )
    def test_work_days(self, start, end, expected):
        assert work_days(start, end) == expected

    def test_work_days_matches_iteration(self):
        start, end = date(2025, 1, 1), date(2025, 3, 17)
        expected = sum(1 for day in iter_days(start, end) if not is_weekend(day))
        assert work_days(start, end) == expected

    def test_overlap_days(self):
        assert overlap_days(date(2025, 1, 1), date(2025, 1, 10), date(2025, 1, 5), date(2025, 1, 31)) == 6
        assert overlap_days(date(2025, 1, 1), date(2025, 1, 10), date(2025, 2, 1), date(2025, 2, 28)) == 0


class TestMonthArithmetic:
    def test_add_months_clamps_to_month_end(self):
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)

    def test_add_months_across_years(self):
        assert add_months(date(2025, 6, 2), -12) == date(2024, 6, 2)
        assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)

    def test_month_bounds(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_bounds(2025, 12) == (date(2025, 12, 1), date(2025, 12, 31))


class TestAge:
    def test_birthday_counts_on_the_day(self):
        assert age_on(date(2007, 6, 30), date(2025, 6, 30)) == 18
        assert age_on(date(2007, 7, 1), date(2025, 6, 30)) == 17


class TestTimestamps:
    def test_localize_naive(self):
        moment = localize(datetime(2025, 6, 2, 7, 0), COPENHAGEN)
        assert moment.tzinfo is COPENHAGEN

    def test_localize_keeps_aware(self):
        moment = datetime(2025, 6, 2, 7, 0, tzinfo=timezone.utc)
        assert localize(moment, COPENHAGEN) is moment

    def test_elapsed_across_fall_back(self):
        """Local 00:00 to 06:00 on the last Sunday of October is seven hours."""
        start = datetime(2025, 10, 26, 0, 0)
        end = datetime(2025, 10, 26, 6, 0)
        assert elapsed_seconds(start, end, COPENHAGEN) == 7 * 3600
