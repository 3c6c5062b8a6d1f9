"""Sickness pay (§ 14)."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from transport_payroll.calculators.component_builder import ComponentBuilder
from transport_payroll.calculators.dates import add_months, calendar_days, work_days
from transport_payroll.calculators.rules import EffectiveRule, RuleSchedule
from transport_payroll.calculators.types import AbsenceType, EmployeeSnapshot
from transport_payroll.calculators.validation import ValidationResult, require_valid_range
from transport_payroll.entitlements.base import (
    AbsenceRecord,
    EntitlementCalculator,
    UsageLookup,
    daily_pay,
)

logger = logging.getLogger(__name__)

WORK_DAYS_PER_WEEK = 5
SELF_CERTIFICATION_DAYS = 3
PENSION_PERCENT = Decimal("11")
VACATION_PERCENT = Decimal("12.5")
LOW_REMAINING_WEEKS = 2

MAX_SICKNESS_WEEKS: RuleSchedule[int] = RuleSchedule(
    "max_sickness_weeks",
    [
        EffectiveRule(date.min, 9),
        EffectiveRule(date(2025, 5, 1), 11),
    ],
)


@dataclass(frozen=True)
class SicknessCalculation:
    """Sick pay for one sickness period."""

    employee_id: str
    start_date: date
    end_date: date | None
    counted_until: date
    calendar_days: int
    work_days: int
    weeks: int
    max_weeks: int
    rule_effective_from: date
    has_exceeded_limit: bool
    payable_days: int
    daily_pay: Decimal
    total_pay: Decimal
    pension_contribution: Decimal
    vacation_pay: Decimal
    requires_doctors_note: bool
    remaining_weeks: int

    @property
    def is_open(self) -> bool:
        return self.end_date is None


@dataclass(frozen=True)
class RollingSicknessCheck:
    """Sickness weeks used in the 12 months before a new period."""

    weeks_used: int
    weeks_remaining: int
    max_weeks: int
    has_exceeded: bool
    warning: str | None = None


@dataclass(frozen=True)
class SicknessHistory:
    """Summary of an employee's sickness records."""

    employee_id: str
    total_days: int
    total_weeks: int
    period_count: int
    average_days_per_period: Decimal
    longest_period: int
    current_streak: int


class SicknessCalculator(EntitlementCalculator[SicknessCalculation]):
    """Calculates sick pay under § 14.

    The maximum number of paid weeks depends on the date the sickness
    started: 9 weeks before 2025-05-01 and 11 weeks from then on. Days are
    counted Monday to Friday. Pay above the maximum is not payable but the
    requested days are kept on the calculation.
    """

    legal_reference = "§ 14 Sygeløn"

    def __init__(
        self,
        usage: UsageLookup | None = None,
        max_weeks: RuleSchedule[int] | None = None,
    ):
        super().__init__(usage)
        self.max_weeks = max_weeks or MAX_SICKNESS_WEEKS

    def calculate(
        self,
        employee: EmployeeSnapshot,
        start_date: date,
        end_date: date | None = None,
        as_of: date | None = None,
    ) -> SicknessCalculation:
        """Calculate sick pay for a period.

        An open period (no end date) is counted up to as_of, which defaults
        to today.

        Raises:
            InvalidDateRangeError: If the period starts after it ends
        """
        counted_until = end_date or as_of or date.today()
        require_valid_range(start_date, counted_until)
        max_weeks = self.max_weeks.resolve(start_date)

        days = work_days(start_date, counted_until)
        weeks = days // WORK_DAYS_PER_WEEK
        exceeded = weeks > max_weeks
        payable_days = min(days, max_weeks * WORK_DAYS_PER_WEEK)

        day_pay = daily_pay(employee, start_date)
        total = self.money(day_pay * payable_days)

        calc = SicknessCalculation(
            employee_id=employee.employee_id,
            start_date=start_date,
            end_date=end_date,
            counted_until=counted_until,
            calendar_days=calendar_days(start_date, counted_until),
            work_days=days,
            weeks=weeks,
            max_weeks=max_weeks,
            rule_effective_from=self.max_weeks.effective_from(start_date),
            has_exceeded_limit=exceeded,
            payable_days=payable_days,
            daily_pay=self.money(day_pay),
            total_pay=total,
            pension_contribution=self.money(ComponentBuilder.percent_of(total, PENSION_PERCENT)),
            vacation_pay=self.money(ComponentBuilder.percent_of(total, VACATION_PERCENT)),
            requires_doctors_note=days > SELF_CERTIFICATION_DAYS,
            remaining_weeks=max(0, max_weeks - weeks),
        )
        if payable_days < days:
            logger.warning(
                "Sickness for employee %s exceeds %s weeks: %s work days, %s paid",
                employee.employee_id,
                max_weeks,
                days,
                payable_days,
            )
        logger.debug("Calculated sickness pay: %s", calc)
        return calc

    def validate(
        self, employee: EmployeeSnapshot, calculation: SicknessCalculation
    ) -> ValidationResult:
        result = ValidationResult()

        if calculation.has_exceeded_limit:
            result.add_warning(
                f"Sickness period of {calculation.weeks} weeks exceeds the maximum of "
                f"{calculation.max_weeks} paid weeks; only {calculation.payable_days} days are paid"
            )
        elif calculation.payable_days < calculation.work_days:
            result.add_warning(
                f"Only {calculation.payable_days} of {calculation.work_days} work days are paid "
                f"within the maximum of {calculation.max_weeks} weeks"
            )

        if calculation.requires_doctors_note:
            result.add_warning(self.documentation_message(calculation.work_days))

        rolling = self.check_rolling_duration(employee.employee_id, calculation.start_date)
        if rolling.warning:
            result.add_warning(rolling.warning)

        return result

    @staticmethod
    def documentation_message(days: int) -> str:
        """Describe which documentation the absence requires."""
        if days <= SELF_CERTIFICATION_DAYS:
            return (
                f"Self-certification is sufficient ({days} days <= "
                f"{SELF_CERTIFICATION_DAYS} days)"
            )
        return f"Doctor's note required ({days} days > {SELF_CERTIFICATION_DAYS} days)"

    def check_rolling_duration(self, employee_id: str, start_date: date) -> RollingSicknessCheck:
        """Check sickness weeks already used in the 12 months before start_date."""
        max_weeks = self.max_weeks.resolve(start_date)
        window_start = add_months(start_date, -12)
        days_used = self._days_used(
            employee_id,
            [AbsenceType.SICKNESS],
            window_start,
            start_date - timedelta(days=1),
        )
        weeks_used = days_used // WORK_DAYS_PER_WEEK
        remaining = max(0, max_weeks - weeks_used)
        exceeded = weeks_used > max_weeks

        warning = None
        if exceeded:
            warning = (
                f"Employee has used {weeks_used} of {max_weeks} sick pay weeks in the "
                f"last 12 months"
            )
        elif remaining <= LOW_REMAINING_WEEKS:
            warning = f"Only {remaining} weeks of sick pay remain in the last 12 months"

        return RollingSicknessCheck(
            weeks_used=weeks_used,
            weeks_remaining=remaining,
            max_weeks=max_weeks,
            has_exceeded=exceeded,
            warning=warning,
        )

    @staticmethod
    def summarize_history(
        employee_id: str,
        records: Iterable[AbsenceRecord],
        as_of: date | None = None,
    ) -> SicknessHistory:
        """Summarize sickness records for one employee."""
        as_of = as_of or date.today()
        sickness = [
            r for r in records
            if r.employee_id == employee_id and r.absence_type == AbsenceType.SICKNESS
        ]
        total = sum(r.days_count for r in sickness)
        current = next(
            (
                r for r in sickness
                if r.start_date <= as_of and (r.end_date is None or r.end_date >= as_of)
            ),
            None,
        )
        average = (
            (Decimal(total) / len(sickness)).quantize(Decimal("0.1"))
            if sickness
            else Decimal("0")
        )
        return SicknessHistory(
            employee_id=employee_id,
            total_days=total,
            total_weeks=total // WORK_DAYS_PER_WEEK,
            period_count=len(sickness),
            average_days_per_period=average,
            longest_period=max((r.days_count for r in sickness), default=0),
            current_streak=work_days(current.start_date, as_of) if current else 0,
        )

    def _build_absence(
        self,
        employee: EmployeeSnapshot,
        calculation: SicknessCalculation,
        note: str | None,
    ) -> AbsenceRecord:
        return AbsenceRecord(
            employee_id=employee.employee_id,
            absence_type=AbsenceType.SICKNESS,
            start_date=calculation.start_date,
            end_date=calculation.end_date,
            days_count=calculation.work_days,
            is_paid=calculation.payable_days > 0,
            payment_amount=calculation.total_pay,
            legal_reference=self.legal_reference,
            note=note or f"Sygdom ({calculation.work_days} dage, {calculation.weeks} uger)",
        )
