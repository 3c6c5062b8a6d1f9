"""Split worked time into regular, overtime and premium hour buckets."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, tzinfo
from decimal import Decimal
from zoneinfo import ZoneInfo

from transport_payroll.calculators.dates import elapsed_seconds
from transport_payroll.calculators.types import TimeEntryRecord

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
SECONDS_PER_HOUR = Decimal("3600")
MINUTES_PER_HOUR = Decimal("60")


@dataclass(frozen=True)
class DayHours:
    """Hour buckets for one work date."""

    work_date: date
    total_hours: Decimal = ZERO
    regular_hours: Decimal = ZERO
    overtime_tier1_hours: Decimal = ZERO
    overtime_tier2_hours: Decimal = ZERO
    night_hours: Decimal = ZERO
    weekend_hours: Decimal = ZERO
    holiday_hours: Decimal = ZERO

    @property
    def overtime_hours(self) -> Decimal:
        return self.overtime_tier1_hours + self.overtime_tier2_hours


class TimeCategorizer:
    """Categorizes one day's worked time against the agreement's daily norm.

    Regular hours are capped at the normal daily hours (weekly hours / 5).
    Anything above is overtime: the first 3 hours are tier 1, the rest tier 2.
    Night, weekend and holiday buckets are tracked independently of the
    regular/overtime split, so an hour can be both overtime and night.
    A holiday entry that also falls on a weekend counts as holiday only.
    """

    OVERTIME_TIER1_LIMIT = Decimal("3")
    WORK_DAYS_PER_WEEK = Decimal("5")

    def __init__(self, tz: tzinfo | None = None):
        self.tz = tz or ZoneInfo("Europe/Copenhagen")

    def net_hours(self, entry: TimeEntryRecord) -> Decimal:
        """Worked hours for one entry, never negative.

        A missing end time, an end before the start, or a break longer than
        the interval all yield zero hours.
        """
        if entry.end_time is None:
            return ZERO
        seconds = Decimal(elapsed_seconds(entry.start_time, entry.end_time, self.tz))
        hours = seconds / SECONDS_PER_HOUR - Decimal(entry.break_minutes) / MINUTES_PER_HOUR
        if hours < ZERO:
            logger.warning("Entry %s has negative net hours %s, clamped to 0", entry.entry_id, hours)
            return ZERO
        return hours

    def categorize_day(
        self,
        work_date: date,
        entries: Iterable[TimeEntryRecord],
        weekly_hours: Decimal,
    ) -> DayHours:
        """Split one day's entries into hour buckets."""
        total = night = weekend = holiday = ZERO

        for entry in entries:
            hours = self.net_hours(entry)
            total += hours
            if entry.is_night_work:
                night += hours
            if entry.is_holiday:
                holiday += hours
            elif entry.is_weekend:
                weekend += hours

        normal = weekly_hours / self.WORK_DAYS_PER_WEEK
        regular = min(total, normal)
        overtime = max(total - normal, ZERO)
        tier1 = min(overtime, self.OVERTIME_TIER1_LIMIT)

        return DayHours(
            work_date=work_date,
            total_hours=total,
            regular_hours=regular,
            overtime_tier1_hours=tier1,
            overtime_tier2_hours=overtime - tier1,
            night_hours=night,
            weekend_hours=weekend,
            holiday_hours=holiday,
        )

    def categorize(
        self,
        entries: Iterable[TimeEntryRecord],
        weekly_hours: Decimal,
    ) -> dict[date, DayHours]:
        """Group entries by work date and categorize each day."""
        by_date: dict[date, list[TimeEntryRecord]] = defaultdict(list)
        for entry in entries:
            by_date[entry.work_date].append(entry)

        return {
            work_date: self.categorize_day(work_date, day_entries, weekly_hours)
            for work_date, day_entries in sorted(by_date.items())
        }
