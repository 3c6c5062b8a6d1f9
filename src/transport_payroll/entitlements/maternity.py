"""Maternity and parental leave (§ 15)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum

from transport_payroll.calculators.component_builder import ComponentBuilder
from transport_payroll.calculators.dates import calendar_days
from transport_payroll.calculators.types import AbsenceType, EmployeeSnapshot
from transport_payroll.calculators.validation import ValidationResult, require_valid_range
from transport_payroll.entitlements.base import (
    AbsenceRecord,
    EntitlementCalculator,
    daily_pay,
)

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
NORMAL_PENSION_PERCENT = Decimal("11")
ENHANCED_PENSION_PERCENT = Decimal("13.5")
VACATION_PERCENT = Decimal("12.5")
MAX_DAYS_BEFORE_DUE_DATE = 28


class ParentalLeaveType(str, Enum):
    """Variants of parental leave."""

    BIRTHING_PARENT = "BIRTHING_PARENT"
    NON_BIRTHING_PARENT = "NON_BIRTHING_PARENT"
    SOCIAL_PARENT = "SOCIAL_PARENT"
    PREGNANCY_RELATED = "PREGNANCY_RELATED"


@dataclass(frozen=True)
class LeaveEntitlement:
    """Weeks of paid leave for one leave type."""

    total_weeks: int
    weeks_before_birth: int
    absence_type: AbsenceType
    description: str


ENTITLEMENTS: dict[ParentalLeaveType, LeaveEntitlement] = {
    ParentalLeaveType.BIRTHING_PARENT: LeaveEntitlement(
        18, 4, AbsenceType.MATERNITY_LEAVE, "Barselsorlov (fødende)"
    ),
    ParentalLeaveType.NON_BIRTHING_PARENT: LeaveEntitlement(
        2, 0, AbsenceType.PATERNITY_LEAVE, "Barselsorlov (ikke-fødende)"
    ),
    ParentalLeaveType.SOCIAL_PARENT: LeaveEntitlement(
        2, 0, AbsenceType.SOCIAL_PARENT_LEAVE, "Barselsorlov (social forælder)"
    ),
    ParentalLeaveType.PREGNANCY_RELATED: LeaveEntitlement(
        12, 0, AbsenceType.PREGNANCY_RELATED_ABSENCE, "Graviditetsbetinget fravær"
    ),
}


@dataclass(frozen=True)
class MaternityLeaveCalculation:
    """Pay and pension for one parental leave period."""

    employee_id: str
    leave_type: ParentalLeaveType
    start_date: date
    end_date: date
    due_date: date | None
    weeks_entitlement: int
    requested_days: int
    requested_weeks: int
    payable_days: int
    has_exceeded_limit: bool
    daily_pay: Decimal
    total_pay: Decimal
    normal_pension_contribution: Decimal
    enhanced_pension_contribution: Decimal
    pension_benefit: Decimal
    vacation_pay: Decimal

    @property
    def absence_type(self) -> AbsenceType:
        return ENTITLEMENTS[self.leave_type].absence_type


class MaternityLeaveCalculator(EntitlementCalculator[MaternityLeaveCalculation]):
    """Calculates pay during parental leave under § 15.

    Leave days are calendar days (weekends count) and are paid in full up to
    the entitlement. During leave the employer pension contribution is raised
    from 11% to 13.5%; the difference is reported as a separate benefit.
    """

    legal_reference = "§ 15 Barsel"

    def calculate(
        self,
        employee: EmployeeSnapshot,
        leave_type: ParentalLeaveType,
        start_date: date,
        end_date: date | None = None,
        due_date: date | None = None,
    ) -> MaternityLeaveCalculation:
        """Calculate parental leave pay.

        Without an end date the leave runs for the full entitlement.

        Raises:
            InvalidDateRangeError: If the leave starts after it ends
        """
        entitlement = ENTITLEMENTS[leave_type]
        entitlement_days = entitlement.total_weeks * DAYS_PER_WEEK
        if end_date is None:
            end_date = start_date + timedelta(days=entitlement_days - 1)
        require_valid_range(start_date, end_date)

        requested_days = calendar_days(start_date, end_date)
        exceeded = requested_days > entitlement_days
        payable_days = min(requested_days, entitlement_days)

        day_pay = daily_pay(employee, start_date)
        total = self.money(day_pay * payable_days)
        normal_pension = self.money(ComponentBuilder.percent_of(total, NORMAL_PENSION_PERCENT))
        enhanced_pension = self.money(ComponentBuilder.percent_of(total, ENHANCED_PENSION_PERCENT))

        if exceeded:
            logger.warning(
                "Parental leave for employee %s is %s days, entitlement is %s days",
                employee.employee_id,
                requested_days,
                entitlement_days,
            )

        return MaternityLeaveCalculation(
            employee_id=employee.employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            due_date=due_date,
            weeks_entitlement=entitlement.total_weeks,
            requested_days=requested_days,
            requested_weeks=requested_days // DAYS_PER_WEEK,
            payable_days=payable_days,
            has_exceeded_limit=exceeded,
            daily_pay=self.money(day_pay),
            total_pay=total,
            normal_pension_contribution=normal_pension,
            enhanced_pension_contribution=enhanced_pension,
            pension_benefit=enhanced_pension - normal_pension,
            vacation_pay=self.money(ComponentBuilder.percent_of(total, VACATION_PERCENT)),
        )

    def validate(
        self, employee: EmployeeSnapshot, calculation: MaternityLeaveCalculation
    ) -> ValidationResult:
        result = ValidationResult()

        if calculation.start_date >= calculation.end_date:
            result.add_error("Leave start date must be before end date")

        if calculation.leave_type == ParentalLeaveType.BIRTHING_PARENT:
            if calculation.due_date is None:
                result.add_warning("Due date is not specified")
            elif calculation.start_date < calculation.due_date - timedelta(
                days=MAX_DAYS_BEFORE_DUE_DATE
            ):
                result.add_warning(
                    "Leave starts more than 4 weeks before the due date"
                )

        if calculation.has_exceeded_limit:
            result.add_warning(
                f"Leave of {calculation.requested_weeks} weeks exceeds the entitlement of "
                f"{calculation.weeks_entitlement} weeks; only {calculation.payable_days} days are paid"
            )

        return result

    @staticmethod
    def birth_split(due_date: date) -> tuple[date, date]:
        """Default leave window for a birthing parent: 4 weeks before, 14 after."""
        entitlement = ENTITLEMENTS[ParentalLeaveType.BIRTHING_PARENT]
        start = due_date - timedelta(weeks=entitlement.weeks_before_birth)
        end = start + timedelta(days=entitlement.total_weeks * DAYS_PER_WEEK - 1)
        return start, end

    def _build_absence(
        self,
        employee: EmployeeSnapshot,
        calculation: MaternityLeaveCalculation,
        note: str | None,
    ) -> AbsenceRecord:
        entitlement = ENTITLEMENTS[calculation.leave_type]
        return AbsenceRecord(
            employee_id=employee.employee_id,
            absence_type=entitlement.absence_type,
            start_date=calculation.start_date,
            end_date=calculation.end_date,
            days_count=calculation.requested_days,
            is_paid=True,
            payment_amount=calculation.total_pay,
            legal_reference=self.legal_reference,
            note=note or entitlement.description,
        )
