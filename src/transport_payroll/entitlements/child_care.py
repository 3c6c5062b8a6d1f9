"""Child care, relative escort and child hospitalization (§ 16-17)."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum

from transport_payroll.calculators.dates import add_months, calendar_days
from transport_payroll.calculators.types import AbsenceType, EmployeeSnapshot
from transport_payroll.calculators.validation import ValidationResult, require_valid_range
from transport_payroll.entitlements.base import AbsenceRecord, EntitlementCalculator, daily_pay

logger = logging.getLogger(__name__)

CHILD_CARE_DAYS_PER_YEAR = 2
GRANDCHILD_CARE_DAYS_PER_YEAR = 2
ESCORT_MIN_DAYS = 2
ESCORT_MAX_DAYS = 7
HOSPITALIZATION_MAX_DAYS = 7
MAX_CHILD_SICK_DAY = 3
MAX_DAYS_AHEAD = 30


class ChildCareType(str, Enum):
    CHILD_SICK_DAY = "CHILD_SICK_DAY"
    DOCTOR_VISIT = "DOCTOR_VISIT"
    CHILD_CARE_DAY = "CHILD_CARE_DAY"
    GRANDCHILD_CARE_DAY = "GRANDCHILD_CARE_DAY"
    RELATIVE_ESCORT = "RELATIVE_ESCORT"
    HOSPITALIZATION = "HOSPITALIZATION"


ABSENCE_TYPES: dict[ChildCareType, AbsenceType] = {
    ChildCareType.CHILD_SICK_DAY: AbsenceType.CHILD_SICK_DAY,
    ChildCareType.DOCTOR_VISIT: AbsenceType.CHILD_DOCTOR_VISIT,
    ChildCareType.CHILD_CARE_DAY: AbsenceType.CHILD_CARE_DAY,
    ChildCareType.GRANDCHILD_CARE_DAY: AbsenceType.GRANDCHILD_CARE_DAY,
    ChildCareType.RELATIVE_ESCORT: AbsenceType.RELATIVE_ESCORT,
    ChildCareType.HOSPITALIZATION: AbsenceType.CHILD_HOSPITALIZATION,
}

# Types registered for a single day
SINGLE_DAY_TYPES = {
    ChildCareType.CHILD_SICK_DAY,
    ChildCareType.DOCTOR_VISIT,
    ChildCareType.CHILD_CARE_DAY,
    ChildCareType.GRANDCHILD_CARE_DAY,
}

YEARLY_CAPS: dict[ChildCareType, int] = {
    ChildCareType.CHILD_CARE_DAY: CHILD_CARE_DAYS_PER_YEAR,
    ChildCareType.GRANDCHILD_CARE_DAY: GRANDCHILD_CARE_DAYS_PER_YEAR,
}

DOCUMENTATION_REQUIRED = {
    ChildCareType.DOCTOR_VISIT,
    ChildCareType.RELATIVE_ESCORT,
    ChildCareType.HOSPITALIZATION,
}


@dataclass(frozen=True)
class ChildCareCalculation:
    """Pay for one child care absence."""

    employee_id: str
    care_type: ChildCareType
    start_date: date
    end_date: date
    request_date: date
    days_count: int
    day_number: int | None
    daily_pay: Decimal
    total_pay: Decimal
    requires_documentation: bool
    allowance: int | None = None
    days_used: int = 0

    @property
    def absence_type(self) -> AbsenceType:
        return ABSENCE_TYPES[self.care_type]

    @property
    def days_remaining(self) -> int | None:
        if self.allowance is None:
            return None
        return max(0, self.allowance - self.days_used)


@dataclass(frozen=True)
class ChildCareHistory:
    """Child care days taken by one employee in a calendar year."""

    employee_id: str
    year: int
    child_sick_days_used: int
    doctor_visits_used: int
    child_care_days_used: int
    child_care_days_remaining: int
    grandchild_care_days_used: int
    grandchild_care_days_remaining: int
    relative_escort_days_used: int
    hospitalization_days_used: int
    hospitalization_days_remaining: int

    @property
    def total_days_taken(self) -> int:
        return (
            self.child_sick_days_used
            + self.doctor_visits_used
            + self.child_care_days_used
            + self.grandchild_care_days_used
            + self.relative_escort_days_used
            + self.hospitalization_days_used
        )


class ChildCareCalculator(EntitlementCalculator[ChildCareCalculation]):
    """Calculates paid child care absence under § 16-17.

    Every type is paid at the full daily wage. Child-care and grandchild-care
    days are capped per calendar year; hospitalization is capped per rolling
    12 months. Caps are checked against the usage lookup.
    """

    legal_reference = "§ 16-17 Børns sygdom og hospitalsindlæggelse"

    def calculate(
        self,
        employee: EmployeeSnapshot,
        care_type: ChildCareType,
        start_date: date,
        end_date: date | None = None,
        day_number: int | None = None,
        request_date: date | None = None,
    ) -> ChildCareCalculation:
        """Calculate pay for a child care absence.

        Single-day types always end on start_date. day_number is the child's
        sick day (1-3) and defaults to 1 for CHILD_SICK_DAY.

        Raises:
            InvalidDateRangeError: If the absence starts after it ends
        """
        if care_type in SINGLE_DAY_TYPES or end_date is None:
            end_date = start_date
        require_valid_range(start_date, end_date)
        if care_type == ChildCareType.CHILD_SICK_DAY and day_number is None:
            day_number = 1

        days = calendar_days(start_date, end_date)
        allowance: int | None = None
        used = 0
        if care_type in YEARLY_CAPS:
            allowance = YEARLY_CAPS[care_type]
            used = self._days_used(
                employee.employee_id,
                [ABSENCE_TYPES[care_type]],
                date(start_date.year, 1, 1),
                date(start_date.year, 12, 31),
            )
        elif care_type == ChildCareType.HOSPITALIZATION:
            allowance = HOSPITALIZATION_MAX_DAYS
            used = self._days_used(
                employee.employee_id,
                [AbsenceType.CHILD_HOSPITALIZATION],
                add_months(start_date, -12),
                start_date - timedelta(days=1),
            )

        day_pay = daily_pay(employee, start_date)
        calc = ChildCareCalculation(
            employee_id=employee.employee_id,
            care_type=care_type,
            start_date=start_date,
            end_date=end_date,
            request_date=request_date or date.today(),
            days_count=days,
            day_number=day_number if care_type == ChildCareType.CHILD_SICK_DAY else None,
            daily_pay=self.money(day_pay),
            total_pay=self.money(day_pay * days),
            requires_documentation=care_type in DOCUMENTATION_REQUIRED,
            allowance=allowance,
            days_used=used,
        )
        logger.debug("Calculated child care absence: %s", calc)
        return calc

    def validate(
        self, employee: EmployeeSnapshot, calculation: ChildCareCalculation
    ) -> ValidationResult:
        result = ValidationResult()
        care_type = calculation.care_type

        if calculation.start_date > calculation.request_date + timedelta(days=MAX_DAYS_AHEAD):
            result.add_warning(f"Start date is more than {MAX_DAYS_AHEAD} days in the future")

        if care_type == ChildCareType.CHILD_SICK_DAY:
            if calculation.day_number is None or not 1 <= calculation.day_number <= MAX_CHILD_SICK_DAY:
                result.add_error(
                    f"Child sick day number must be between 1 and {MAX_CHILD_SICK_DAY}"
                )

        if care_type in YEARLY_CAPS:
            if calculation.days_used + calculation.days_count > calculation.allowance:
                result.add_error(
                    f"No {care_type.value.lower().replace('_', ' ')}s left for "
                    f"{calculation.start_date.year}; already used {calculation.days_used} of "
                    f"{calculation.allowance} days"
                )

        if care_type == ChildCareType.RELATIVE_ESCORT:
            if calculation.days_count < ESCORT_MIN_DAYS:
                result.add_error(f"Relative escort must be at least {ESCORT_MIN_DAYS} days")
            if calculation.days_count > ESCORT_MAX_DAYS:
                result.add_error(f"Relative escort can be at most {ESCORT_MAX_DAYS} days")

        if care_type == ChildCareType.HOSPITALIZATION:
            if calculation.days_used + calculation.days_count > HOSPITALIZATION_MAX_DAYS:
                result.add_error(
                    f"Child hospitalization exceeds {HOSPITALIZATION_MAX_DAYS} days per 12 "
                    f"months (requested {calculation.days_count}, available "
                    f"{calculation.days_remaining})"
                )

        return result

    @staticmethod
    def history(employee_id: str, records: Iterable[AbsenceRecord], year: int) -> ChildCareHistory:
        """Summarize child care records that start in a calendar year."""
        used: dict[AbsenceType, int] = {}
        for record in records:
            if record.employee_id != employee_id or record.start_date.year != year:
                continue
            used[record.absence_type] = used.get(record.absence_type, 0) + record.days_count

        child_care = used.get(AbsenceType.CHILD_CARE_DAY, 0)
        grandchild_care = used.get(AbsenceType.GRANDCHILD_CARE_DAY, 0)
        hospitalization = used.get(AbsenceType.CHILD_HOSPITALIZATION, 0)
        return ChildCareHistory(
            employee_id=employee_id,
            year=year,
            child_sick_days_used=used.get(AbsenceType.CHILD_SICK_DAY, 0),
            doctor_visits_used=used.get(AbsenceType.CHILD_DOCTOR_VISIT, 0),
            child_care_days_used=child_care,
            child_care_days_remaining=max(0, CHILD_CARE_DAYS_PER_YEAR - child_care),
            grandchild_care_days_used=grandchild_care,
            grandchild_care_days_remaining=max(0, GRANDCHILD_CARE_DAYS_PER_YEAR - grandchild_care),
            relative_escort_days_used=used.get(AbsenceType.RELATIVE_ESCORT, 0),
            hospitalization_days_used=hospitalization,
            hospitalization_days_remaining=max(0, HOSPITALIZATION_MAX_DAYS - hospitalization),
        )

    def _build_absence(
        self,
        employee: EmployeeSnapshot,
        calculation: ChildCareCalculation,
        note: str | None,
    ) -> AbsenceRecord:
        if note is None:
            if calculation.care_type == ChildCareType.CHILD_SICK_DAY:
                note = f"Barnets {calculation.day_number}. sygedag"
            elif calculation.days_count > 1:
                note = f"{calculation.care_type.value} ({calculation.days_count} dage)"
        return AbsenceRecord(
            employee_id=employee.employee_id,
            absence_type=calculation.absence_type,
            start_date=calculation.start_date,
            end_date=calculation.end_date,
            days_count=calculation.days_count,
            is_paid=True,
            payment_amount=calculation.total_pay,
            legal_reference=self.legal_reference,
            note=note,
        )
