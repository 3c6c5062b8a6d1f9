"""Danish public holiday calendar."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache

# Store Bededag was abolished as a public holiday from 2024
GREAT_PRAYER_DAY_LAST_YEAR = 2023


@dataclass(frozen=True)
class PublicHoliday:
    """A public holiday on a specific date."""

    day: date
    name: str
    is_half_day: bool = False


def easter_sunday(year: int) -> date:
    """Compute Easter Sunday with the anonymous Gregorian algorithm."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


@lru_cache(maxsize=64)
def holidays_for_year(year: int) -> tuple[PublicHoliday, ...]:
    """All public holidays for a year, ordered by date."""
    easter = easter_sunday(year)

    def relative(days: int, name: str) -> PublicHoliday:
        return PublicHoliday(easter + timedelta(days=days), name)

    holidays = [
        PublicHoliday(date(year, 1, 1), "Nytårsdag"),
        relative(-3, "Skærtorsdag"),
        relative(-2, "Langfredag"),
        relative(0, "Påskedag"),
        relative(1, "2. påskedag"),
        relative(39, "Kristi himmelfartsdag"),
        relative(49, "Pinsedag"),
        relative(50, "2. pinsedag"),
        PublicHoliday(date(year, 5, 1), "1. maj"),
        PublicHoliday(date(year, 6, 5), "Grundlovsdag", is_half_day=True),
        PublicHoliday(date(year, 12, 24), "Juleaftensdag", is_half_day=True),
        PublicHoliday(date(year, 12, 25), "1. juledag"),
        PublicHoliday(date(year, 12, 26), "2. juledag"),
        PublicHoliday(date(year, 12, 31), "Nytårsaftensdag", is_half_day=True),
    ]
    if year <= GREAT_PRAYER_DAY_LAST_YEAR:
        holidays.append(relative(26, "Store bededag"))

    return tuple(sorted(holidays, key=lambda h: h.day))


def get_holiday(day: date) -> PublicHoliday | None:
    for holiday in holidays_for_year(day.year):
        if holiday.day == day:
            return holiday
    return None


def is_holiday(day: date) -> bool:
    """Check if a date is a public holiday (full or half day)."""
    return get_holiday(day) is not None


def is_half_day(day: date) -> bool:
    holiday = get_holiday(day)
    return holiday is not None and holiday.is_half_day
