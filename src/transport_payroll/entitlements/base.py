"""Shared contract for entitlement calculators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Generic, Protocol, TypeVar

from transport_payroll.calculators.allowances import AllowanceComposer
from transport_payroll.calculators.component_builder import ComponentBuilder
from transport_payroll.calculators.dates import overlap_days
from transport_payroll.calculators.types import AbsenceType, EmployeeSnapshot
from transport_payroll.calculators.validation import (
    PolicyViolationError,
    ValidationResult,
)

STANDARD_DAILY_HOURS = Decimal("7.4")

CalculationT = TypeVar("CalculationT")


def daily_pay(employee: EmployeeSnapshot, as_of: date) -> Decimal:
    """Pay for one standard 7.4 hour day at the effective hourly wage."""
    return AllowanceComposer.effective_hourly_wage(employee, as_of) * STANDARD_DAILY_HOURS


def apply_guarantee_floor(amount: Decimal, guarantee: Decimal) -> Decimal:
    """Raise an amount to a guaranteed minimum."""
    return max(amount, guarantee)


@dataclass(frozen=True)
class AbsenceRecord:
    """An absence period ready to be persisted."""

    employee_id: str
    absence_type: AbsenceType
    start_date: date
    end_date: date | None
    days_count: int
    is_paid: bool
    payment_amount: Decimal
    legal_reference: str
    note: str | None = None
    absence_id: str | None = None

    def overlaps(self, start: date, end: date) -> bool:
        own_end = self.end_date or date.max
        return self.start_date <= end and start <= own_end


class UsageLookup(Protocol):
    """Read-only view of absence days already taken."""

    def days_used(
        self,
        employee_id: str,
        absence_types: Iterable[AbsenceType],
        window_start: date,
        window_end: date,
    ) -> int:
        ...


class AbsenceUsageLedger:
    """In-memory UsageLookup over a set of absence records.

    A closed record counts its full days_count in the window containing its
    start date. An open record counts the calendar days it overlaps the window.
    """

    def __init__(self, records: Iterable[AbsenceRecord] = ()):
        self.records = list(records)

    def days_used(
        self,
        employee_id: str,
        absence_types: Iterable[AbsenceType],
        window_start: date,
        window_end: date,
    ) -> int:
        wanted = set(absence_types)
        total = 0
        for record in self.records:
            if record.employee_id != employee_id or record.absence_type not in wanted:
                continue
            if record.end_date is None:
                total += overlap_days(record.start_date, window_end, window_start, window_end)
            elif window_start <= record.start_date <= window_end:
                total += record.days_count
        return total


class EntitlementCalculator(ABC, Generic[CalculationT]):
    """Base class for entitlement calculators.

    Subclasses implement calculate() and validate(). Calculations are frozen
    dataclasses so validate() is a pure inspection. to_absence() only
    produces a persistable record for a calculation that validates.
    """

    legal_reference: str = ""

    def __init__(self, usage: UsageLookup | None = None):
        self.usage = usage

    @abstractmethod
    def calculate(self, employee: EmployeeSnapshot, *args: Any, **kwargs: Any) -> CalculationT:
        ...

    @abstractmethod
    def validate(self, employee: EmployeeSnapshot, calculation: CalculationT) -> ValidationResult:
        ...

    def to_absence(
        self,
        employee: EmployeeSnapshot,
        calculation: CalculationT,
        note: str | None = None,
    ) -> AbsenceRecord:
        """Validate a calculation and turn it into an absence record.

        Raises:
            PolicyViolationError: If validation reports errors
        """
        validation = self.validate(employee, calculation)
        if not validation.is_valid:
            raise PolicyViolationError(validation)
        return self._build_absence(employee, calculation, note)

    def _build_absence(
        self,
        employee: EmployeeSnapshot,
        calculation: CalculationT,
        note: str | None,
    ) -> AbsenceRecord:
        raise NotImplementedError(f"{type(self).__name__} does not produce absence records")

    def _days_used(
        self,
        employee_id: str,
        absence_types: Iterable[AbsenceType],
        window_start: date,
        window_end: date,
    ) -> int:
        if self.usage is None:
            return 0
        return self.usage.days_used(employee_id, absence_types, window_start, window_end)

    @staticmethod
    def money(amount: Decimal) -> Decimal:
        return ComponentBuilder.round_to_cents(amount)
