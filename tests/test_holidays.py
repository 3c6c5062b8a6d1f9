"""Tests for the Danish public holiday calendar."""

from datetime import date

import pytest

from transport_payroll.calculators.holidays import (
    easter_sunday,
    get_holiday,
    holidays_for_year,
    is_half_day,
    is_holiday,
)


class TestEaster:
    @pytest.mark.parametrize(
        "year,expected",
        [
            (2023, date(2023, 4, 9)),
            (2024, date(2024, 3, 31)),
            (2025, date(2025, 4, 20)),
            (2026, date(2026, 4, 5)),
        ],
    )
    def test_easter_sunday(self, year, expected):
        assert easter_sunday(year) == expected


class TestHolidayCalendar:
    def test_movable_holidays_2025(self):
        days = {h.day: h.name for h in holidays_for_year(2025)}

        assert days[date(2025, 4, 17)] == "Skærtorsdag"
        assert days[date(2025, 4, 18)] == "Langfredag"
        assert days[date(2025, 4, 21)] == "2. påskedag"
        assert days[date(2025, 5, 29)] == "Kristi himmelfartsdag"
        assert days[date(2025, 6, 9)] == "2. pinsedag"

    def test_great_prayer_day_until_2023(self):
        """Store bededag was abolished from 2024."""
        assert get_holiday(date(2023, 5, 5)).name == "Store bededag"
        assert all(h.name != "Store bededag" for h in holidays_for_year(2024))
        assert len(holidays_for_year(2023)) == len(holidays_for_year(2024)) + 1

    def test_sorted_by_date(self):
        days = [h.day for h in holidays_for_year(2025)]
        assert days == sorted(days)

    def test_half_days(self):
        assert is_half_day(date(2025, 6, 5))
        assert is_half_day(date(2025, 12, 24))
        assert not is_half_day(date(2025, 12, 25))
        assert not is_half_day(date(2025, 6, 4))

    def test_is_holiday(self):
        assert is_holiday(date(2025, 1, 1))
        assert is_holiday(date(2025, 5, 1))
        assert is_holiday(date(2025, 12, 26))
        assert not is_holiday(date(2025, 6, 2))
        assert get_holiday(date(2025, 6, 2)) is None
