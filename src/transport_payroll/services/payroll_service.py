"""Payroll calculation service - persists aggregator results and drives their lifecycle."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from transport_payroll.calculators.agreement_resolver import AgreementResolver
from transport_payroll.calculators.aggregator import PayrollAggregator, PayrollResult
from transport_payroll.calculators.types import PayrollStatus, TimeEntryStatus
from transport_payroll.calculators.validation import EmployeeNotFoundError
from transport_payroll.models import (
    Agreement,
    Employee,
    PayrollCalculation,
    PayrollComponentLine,
    TimeEntry,
)
from transport_payroll.services.state_machine import InvalidTransitionError, PayrollStateMachine

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PayrollService:
    """Service for payroll calculations.

    Operations:
    - calculate: Run the aggregator for one employee and period and persist it
    - approve: Lock the time entries and transition to approved
    - reopen: Unlock the time entries and transition back to pending review
    - mark_exported: Record the export and make the calculation final
    """

    def __init__(self, session: AsyncSession, aggregator: PayrollAggregator | None = None):
        self.session = session
        self.aggregator = aggregator or PayrollAggregator()

    async def get_employee(self, employee_id: UUID) -> Employee:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        return employee

    async def get_calculation(self, payroll_calculation_id: UUID) -> PayrollCalculation | None:
        """Load a calculation with its components."""
        result = await self.session.execute(
            select(PayrollCalculation)
            .where(PayrollCalculation.payroll_calculation_id == payroll_calculation_id)
            .options(selectinload(PayrollCalculation.components))
        )
        return result.scalar_one_or_none()

    async def find_calculation(
        self, employee_id: UUID, period_start: date, period_end: date
    ) -> PayrollCalculation | None:
        result = await self.session.execute(
            select(PayrollCalculation)
            .where(
                PayrollCalculation.employee_id == employee_id,
                PayrollCalculation.period_start == period_start,
                PayrollCalculation.period_end == period_end,
            )
            .options(selectinload(PayrollCalculation.components))
        )
        return result.scalar_one_or_none()

    async def preview(self, employee_id: UUID, period_start: date, period_end: date) -> PayrollResult:
        """Calculate without persisting anything.

        Raises:
            EmployeeNotFoundError: If the employee does not exist
            AgreementNotFoundError: If no agreement covers period_start
            AmbiguousAgreementError: If several agreements cover period_start
            InvalidDateRangeError: If period_start is after period_end
        """
        employee = await self.get_employee(employee_id)
        snapshot = employee.to_snapshot()

        agreements = await self.session.execute(
            select(Agreement).where(Agreement.agreement_type == employee.agreement_type)
        )
        resolver = AgreementResolver(a.to_snapshot() for a in agreements.scalars())
        agreement = resolver.resolve(snapshot.agreement_type, period_start)

        entries = await self.session.execute(
            select(TimeEntry).where(
                TimeEntry.employee_id == employee_id,
                TimeEntry.work_date >= period_start,
                TimeEntry.work_date <= period_end,
                TimeEntry.status == TimeEntryStatus.APPROVED.value,
            )
        )
        records = [entry.to_record() for entry in entries.scalars()]

        return self.aggregator.calculate(snapshot, agreement, records, period_start, period_end)

    async def calculate(
        self, employee_id: UUID, period_start: date, period_end: date
    ) -> PayrollCalculation:
        """Calculate and persist payroll for one employee and period.

        A pending calculation for the same period is replaced; an unchanged
        recalculation (same calculation_id) returns the stored row untouched.

        Raises:
            InvalidTransitionError: If the stored calculation is approved or exported
        """
        result = await self.preview(employee_id, period_start, period_end)

        existing = await self.find_calculation(employee_id, period_start, period_end)
        if existing is not None:
            if PayrollStateMachine.are_inputs_locked(existing.status):
                raise InvalidTransitionError(
                    existing.status,
                    PayrollStatus.PENDING_REVIEW,
                    "calculation is locked; reopen it before recalculating",
                )
            if existing.calculation_id == result.calculation_id:
                logger.info(
                    "Payroll for employee %s %s..%s unchanged (%s)",
                    employee_id,
                    period_start,
                    period_end,
                    result.calculation_id,
                )
                return existing
            existing.components.clear()
            await self.session.flush()
            calculation = existing
        else:
            calculation = PayrollCalculation(
                employee_id=employee_id,
                period_start=period_start,
                period_end=period_end,
            )
            self.session.add(calculation)

        self._apply_result(calculation, result)
        await self.session.flush()

        logger.info(
            "Persisted payroll for employee %s %s..%s: gross %s (%s components)",
            employee_id,
            period_start,
            period_end,
            result.total_gross_pay,
            len(result.components),
        )
        return calculation

    def _apply_result(self, calculation: PayrollCalculation, result: PayrollResult) -> None:
        calculation.agreement_name = result.agreement_name
        calculation.calculation_id = result.calculation_id
        calculation.inputs_fingerprint = result.inputs_fingerprint
        calculation.engine_version = self.aggregator.settings.engine_version
        calculation.status = PayrollStatus.PENDING_REVIEW.value

        calculation.total_hours = result.total_hours
        calculation.regular_hours = result.regular_hours
        calculation.overtime_hours = result.overtime_hours
        calculation.night_hours = result.night_hours
        calculation.weekend_hours = result.weekend_hours
        calculation.holiday_hours = result.holiday_hours

        calculation.base_pay = result.base_pay
        calculation.allowance_pay = result.allowance_pay
        calculation.overtime_pay = result.overtime_pay
        calculation.night_pay = result.night_pay
        calculation.weekend_pay = result.weekend_pay
        calculation.holiday_pay = result.holiday_pay
        calculation.special_allowance = result.special_allowance
        calculation.pension_employer = result.pension_employer
        calculation.pension_employee = result.pension_employee
        calculation.vacation_pay = result.vacation_pay
        calculation.total_gross_pay = result.total_gross_pay
        calculation.warnings_json = list(result.warnings)

        calculation.components = [
            PayrollComponentLine(
                line_number=number,
                component_type=component.component_type.value,
                description=component.description,
                hours=component.hours,
                rate=component.rate,
                amount=component.amount,
                legal_reference=component.legal_reference,
                work_date=component.work_date,
                metadata_json=dict(component.metadata),
            )
            for number, component in enumerate(result.components, start=1)
        ]

    # === Lifecycle ===

    async def transition_status(
        self,
        calculation: PayrollCalculation,
        to_status: str,
        actor: str | None = None,
        export_reference: str | None = None,
    ) -> PayrollCalculation:
        """Transition a calculation to a new status.

        Side effects:
        - approved: lock the period's time entries
        - pending_review (from approved): unlock them, increment reopen_count
        - exported: set exported_at and export_reference

        Raises InvalidTransitionError if transition is not allowed.
        """
        from_status = calculation.status
        PayrollStateMachine.validate_transition(from_status, to_status)

        if to_status == PayrollStatus.APPROVED:
            locked = await self._lock_entries(calculation)
            calculation.approved_by = actor
            calculation.approved_at = _utcnow()
            logger.info(
                "Locked %s time entries for calculation %s",
                locked,
                calculation.payroll_calculation_id,
            )
        elif PayrollStateMachine.is_reopen(from_status, to_status):
            await self._unlock_entries(calculation)
            calculation.reopen_count += 1
            calculation.approved_by = None
            calculation.approved_at = None
        elif to_status == PayrollStatus.EXPORTED:
            calculation.exported_at = _utcnow()
            calculation.export_reference = export_reference

        calculation.status = PayrollStatus(to_status).value
        await self.session.flush()
        logger.info(
            "Payroll calculation %s: %s -> %s",
            calculation.payroll_calculation_id,
            from_status,
            calculation.status,
        )
        return calculation

    async def _require(self, payroll_calculation_id: UUID) -> PayrollCalculation:
        calculation = await self.get_calculation(payroll_calculation_id)
        if calculation is None:
            raise ValueError(f"Payroll calculation {payroll_calculation_id} not found")
        return calculation

    async def approve(self, payroll_calculation_id: UUID, approved_by: str | None = None) -> PayrollCalculation:
        """Approve a calculation, locking its time entries."""
        calculation = await self._require(payroll_calculation_id)
        return await self.transition_status(calculation, PayrollStatus.APPROVED, approved_by)

    async def reopen(self, payroll_calculation_id: UUID) -> PayrollCalculation:
        """Reopen an approved calculation for corrections."""
        calculation = await self._require(payroll_calculation_id)
        return await self.transition_status(calculation, PayrollStatus.PENDING_REVIEW)

    async def mark_exported(
        self, payroll_calculation_id: UUID, export_reference: str | None = None
    ) -> PayrollCalculation:
        """Mark an approved calculation as exported to the payroll provider."""
        calculation = await self._require(payroll_calculation_id)
        return await self.transition_status(
            calculation, PayrollStatus.EXPORTED, export_reference=export_reference
        )

    async def _lock_entries(self, calculation: PayrollCalculation) -> int:
        result = await self.session.execute(
            update(TimeEntry)
            .where(
                TimeEntry.employee_id == calculation.employee_id,
                TimeEntry.work_date >= calculation.period_start,
                TimeEntry.work_date <= calculation.period_end,
                TimeEntry.status == TimeEntryStatus.APPROVED.value,
                TimeEntry.locked_by_calculation_id.is_(None),
            )
            .values(
                locked_by_calculation_id=calculation.payroll_calculation_id,
                locked_at=_utcnow(),
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def _unlock_entries(self, calculation: PayrollCalculation) -> int:
        result = await self.session.execute(
            update(TimeEntry)
            .where(TimeEntry.locked_by_calculation_id == calculation.payroll_calculation_id)
            .values(locked_by_calculation_id=None, locked_at=None)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0
