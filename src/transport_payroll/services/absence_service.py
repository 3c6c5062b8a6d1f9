"""Absence registration service.

Wraps the entitlement calculators with persistence: every registration runs
the calculator against the employee's stored absence history, validates,
and stores an AbsenceEntry. Stored entries are never recreated; an open
sickness period is closed with end_absence().
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from transport_payroll.calculators.types import AbsenceType
from transport_payroll.calculators.validation import EmployeeNotFoundError, require_valid_range
from transport_payroll.entitlements.base import (
    AbsenceRecord,
    AbsenceUsageLedger,
    EntitlementCalculator,
)
from transport_payroll.entitlements.child_care import (
    ChildCareCalculator,
    ChildCareHistory,
    ChildCareType,
)
from transport_payroll.entitlements.competence_development import (
    CompetenceDevelopmentCalculator,
    EducationRequest,
)
from transport_payroll.entitlements.maternity import MaternityLeaveCalculator, ParentalLeaveType
from transport_payroll.entitlements.sickness import SicknessCalculator, SicknessHistory
from transport_payroll.models import AbsenceEntry, Employee
from transport_payroll.services.state_machine import InvalidTransitionError, RequestStatus

logger = logging.getLogger(__name__)


class AbsenceAlreadyRegisteredError(Exception):
    """Raised when an absence overlaps a stored absence of the same type."""

    def __init__(self, employee_id: Any, absence_type: AbsenceType, existing_id: Any):
        self.employee_id = employee_id
        self.absence_type = absence_type
        self.existing_id = existing_id
        super().__init__(
            f"Employee {employee_id} already has a {absence_type.value} absence "
            f"({existing_id}) in this period"
        )


class AbsenceService:
    """Registers, closes and reports absence entries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_employee(self, employee_id: UUID) -> Employee:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        return employee

    async def list_absences(
        self,
        employee_id: UUID,
        absence_types: list[AbsenceType] | None = None,
    ) -> list[AbsenceEntry]:
        query = select(AbsenceEntry).where(AbsenceEntry.employee_id == employee_id)
        if absence_types:
            query = query.where(AbsenceEntry.absence_type.in_([t.value for t in absence_types]))
        result = await self.session.execute(query.order_by(AbsenceEntry.start_date))
        return list(result.scalars())

    async def usage_ledger(
        self, employee_id: UUID, exclude: UUID | None = None
    ) -> AbsenceUsageLedger:
        """Usage lookup over the employee's stored absences."""
        entries = await self.list_absences(employee_id)
        return AbsenceUsageLedger(
            entry.to_record() for entry in entries if entry.absence_id != exclude
        )

    async def register(
        self,
        employee: Employee,
        calculator: EntitlementCalculator,
        calculation: Any,
        note: str | None = None,
    ) -> AbsenceEntry:
        """Validate a calculation and store it as an absence entry.

        Raises:
            PolicyViolationError: If the calculation does not validate
            AbsenceAlreadyRegisteredError: If it overlaps a stored absence of the same type
        """
        record = calculator.to_absence(employee.to_snapshot(), calculation, note)
        await self._ensure_not_registered(employee.employee_id, record)

        entry = AbsenceEntry.from_record(employee.employee_id, record)
        self.session.add(entry)
        await self.session.flush()

        logger.info(
            "Registered %s absence %s for employee %s: %s..%s, %s days, paid %s",
            record.absence_type.value,
            entry.absence_id,
            employee.employee_id,
            record.start_date,
            record.end_date,
            record.days_count,
            record.payment_amount,
        )
        return entry

    async def _ensure_not_registered(self, employee_id: UUID, record: AbsenceRecord) -> None:
        existing = await self.list_absences(employee_id, [record.absence_type])
        new_end = record.end_date or date.max
        for entry in existing:
            if entry.to_record().overlaps(record.start_date, new_end):
                raise AbsenceAlreadyRegisteredError(
                    employee_id, record.absence_type, entry.absence_id
                )

    # === Registration per entitlement ===

    async def register_sickness(
        self,
        employee_id: UUID,
        start_date: date,
        end_date: date | None = None,
        note: str | None = None,
        as_of: date | None = None,
    ) -> AbsenceEntry:
        """Register a sickness period; leave end_date open while it is ongoing."""
        employee = await self.get_employee(employee_id)
        calculator = SicknessCalculator(usage=await self.usage_ledger(employee_id))
        calculation = calculator.calculate(employee.to_snapshot(), start_date, end_date, as_of)
        return await self.register(employee, calculator, calculation, note)

    async def register_parental_leave(
        self,
        employee_id: UUID,
        leave_type: ParentalLeaveType,
        start_date: date,
        end_date: date | None = None,
        due_date: date | None = None,
        note: str | None = None,
    ) -> AbsenceEntry:
        employee = await self.get_employee(employee_id)
        calculator = MaternityLeaveCalculator(usage=await self.usage_ledger(employee_id))
        calculation = calculator.calculate(
            employee.to_snapshot(), leave_type, start_date, end_date, due_date
        )
        return await self.register(employee, calculator, calculation, note)

    async def register_child_care(
        self,
        employee_id: UUID,
        care_type: ChildCareType,
        start_date: date,
        end_date: date | None = None,
        day_number: int | None = None,
        note: str | None = None,
        request_date: date | None = None,
    ) -> AbsenceEntry:
        employee = await self.get_employee(employee_id)
        calculator = ChildCareCalculator(usage=await self.usage_ledger(employee_id))
        calculation = calculator.calculate(
            employee.to_snapshot(),
            care_type,
            start_date,
            end_date,
            day_number=day_number,
            request_date=request_date,
        )
        return await self.register(employee, calculator, calculation, note)

    async def register_education(
        self, employee_id: UUID, request: EducationRequest, note: str | None = None
    ) -> AbsenceEntry:
        """Store an approved education request as an absence.

        Raises:
            InvalidTransitionError: If the request has not been approved
        """
        if request.status not in (RequestStatus.APPROVED, RequestStatus.COMPLETED):
            raise InvalidTransitionError(
                request.status, RequestStatus.APPROVED, "only approved education is registered"
            )
        employee = await self.get_employee(employee_id)
        calculator = CompetenceDevelopmentCalculator(usage=await self.usage_ledger(employee_id))
        return await self.register(employee, calculator, request, note)

    # === Amendments ===

    async def end_absence(self, absence_id: UUID, end_date: date) -> AbsenceEntry:
        """Close an open sickness period and recompute its days and payment.

        Raises:
            InvalidDateRangeError: If end_date is before the start date
        """
        entry = await self.session.get(AbsenceEntry, absence_id)
        if entry is None:
            raise ValueError(f"Absence {absence_id} not found")
        if entry.end_date is not None:
            raise ValueError(f"Absence {absence_id} is already closed on {entry.end_date}")
        if entry.absence_type != AbsenceType.SICKNESS.value:
            raise ValueError(f"Absence {absence_id} is not an open sickness period")
        require_valid_range(entry.start_date, end_date)

        employee = await self.get_employee(entry.employee_id)
        calculator = SicknessCalculator(
            usage=await self.usage_ledger(entry.employee_id, exclude=entry.absence_id)
        )
        calculation = calculator.calculate(employee.to_snapshot(), entry.start_date, end_date)

        entry.end_date = end_date
        entry.days_count = calculation.work_days
        entry.is_paid = calculation.payable_days > 0
        entry.payment_amount = calculation.total_pay
        await self.session.flush()

        logger.info(
            "Closed sickness absence %s on %s: %s days, paid %s",
            absence_id,
            end_date,
            entry.days_count,
            entry.payment_amount,
        )
        return entry

    # === Reporting ===

    async def history(self, employee_id: UUID, year: int | None = None) -> list[AbsenceRecord]:
        """All absence records for an employee, optionally limited to a start year."""
        entries = await self.list_absences(employee_id)
        return [
            entry.to_record()
            for entry in entries
            if year is None or entry.start_date.year == year
        ]

    async def sickness_history(self, employee_id: UUID, as_of: date | None = None) -> SicknessHistory:
        records = await self.history(employee_id)
        return SicknessCalculator.summarize_history(str(employee_id), records, as_of)

    async def child_care_history(self, employee_id: UUID, year: int) -> ChildCareHistory:
        records = await self.history(employee_id, year)
        return ChildCareCalculator.history(str(employee_id), records, year)
