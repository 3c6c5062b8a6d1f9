"""Calendar helpers for day counting and age calculation."""

from __future__ import annotations

import calendar
from collections.abc import Iterator
from datetime import date, datetime, timedelta, timezone, tzinfo

SATURDAY = 5


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def calendar_days(start: date, end: date) -> int:
    """Count calendar days from start to end inclusive (0 if end < start)."""
    return max(0, (end - start).days + 1)


def is_weekend(day: date) -> bool:
    return day.weekday() >= SATURDAY


def work_days(start: date, end: date) -> int:
    """Count Monday to Friday days from start to end inclusive."""
    if end < start:
        return 0
    total = calendar_days(start, end)
    full_weeks, remainder = divmod(total, 7)
    count = full_weeks * 5
    for offset in range(remainder):
        if not is_weekend(start + timedelta(days=full_weeks * 7 + offset)):
            count += 1
    return count


def add_months(day: date, months: int) -> date:
    """Shift a date by whole months, clamping to the end of the month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def age_on(birth_date: date, on: date) -> int:
    """Age in whole years on the given date."""
    years = on.year - birth_date.year
    if (on.month, on.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def overlap_days(
    start: date, end: date, window_start: date, window_end: date
) -> int:
    """Number of calendar days shared by two inclusive ranges."""
    return calendar_days(max(start, window_start), min(end, window_end))


def localize(moment: datetime, tz: tzinfo) -> datetime:
    """Attach the employer time zone to naive timestamps."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment


def elapsed_seconds(start: datetime, end: datetime, tz: tzinfo) -> int:
    """Seconds between two timestamps, measured in UTC so DST shifts count."""
    delta = localize(end, tz).astimezone(timezone.utc) - localize(start, tz).astimezone(timezone.utc)
    return int(delta.total_seconds())
