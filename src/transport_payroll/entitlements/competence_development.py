"""Competence development and education leave (§ 23)."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum

from transport_payroll.calculators.dates import calendar_days
from transport_payroll.calculators.types import AbsenceType, EmployeeSnapshot
from transport_payroll.calculators.validation import ValidationResult, require_valid_range
from transport_payroll.entitlements.base import AbsenceRecord, EntitlementCalculator, daily_pay
from transport_payroll.services.state_machine import LeaveRequestStateMachine, RequestStatus

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
SELF_SELECTED_DAYS_PER_YEAR = 5
ADVANCE_NOTICE_DAYS = 14
LONG_COURSE_DAYS = 30
MANAGEMENT_APPROVAL_COST = Decimal("10000")


class EducationType(str, Enum):
    SELF_SELECTED = "SELF_SELECTED"
    AGREED = "AGREED"
    MANDATORY = "MANDATORY"
    CERTIFICATION_RENEWAL = "CERTIFICATION_RENEWAL"


ABSENCE_TYPES: dict[EducationType, AbsenceType] = {
    EducationType.SELF_SELECTED: AbsenceType.EDUCATION_SELF_SELECTED,
    EducationType.AGREED: AbsenceType.EDUCATION_AGREED,
    EducationType.MANDATORY: AbsenceType.EDUCATION_MANDATORY,
    EducationType.CERTIFICATION_RENEWAL: AbsenceType.EDUCATION_CERTIFICATION,
}

DESCRIPTIONS: dict[EducationType, str] = {
    EducationType.SELF_SELECTED: "Selvvalgt uddannelse",
    EducationType.AGREED: "Aftalt uddannelse",
    EducationType.MANDATORY: "Obligatorisk uddannelse",
    EducationType.CERTIFICATION_RENEWAL: "Certificering/fornyelse",
}

# Education paid at full daily wage
PAID_TYPES = {
    EducationType.AGREED,
    EducationType.MANDATORY,
    EducationType.CERTIFICATION_RENEWAL,
}

# Education where the employer carries course fees and travel
EMPLOYER_COST_TYPES = {EducationType.AGREED, EducationType.MANDATORY}


@dataclass(frozen=True)
class EducationRequest:
    """An education leave request with its computed pay and cost."""

    employee_id: str
    education_type: EducationType
    course_name: str
    course_provider: str
    start_date: date
    end_date: date
    request_date: date
    days_count: int
    is_paid: bool
    daily_pay: Decimal
    total_pay: Decimal
    course_fees: Decimal
    travel_expenses: Decimal
    total_cost: Decimal
    days_used_this_year: int
    days_remaining_this_year: int
    approval_deadline: date | None
    status: RequestStatus = RequestStatus.REQUESTED
    decided_by: str | None = None
    decided_on: date | None = None
    decision_reason: str | None = None
    completion_date: date | None = None
    completion_certificate: str | None = None

    @property
    def absence_type(self) -> AbsenceType:
        return ABSENCE_TYPES[self.education_type]

    @property
    def is_postponable(self) -> bool:
        return self.education_type == EducationType.SELF_SELECTED


@dataclass(frozen=True)
class EducationCostSummary:
    total_requests: int
    paid_education: int
    unpaid_education: int
    total_salary_cost: Decimal
    total_course_fees: Decimal
    total_travel_expenses: Decimal
    total_cost: Decimal
    average_cost_per_education: Decimal


class CompetenceDevelopmentCalculator(EntitlementCalculator[EducationRequest]):
    """Calculates education leave under § 23.

    Self-selected education is unpaid, limited to 5 days per calendar year
    and needs 14 days' notice. Agreed, mandatory and certification education
    is paid at the full daily wage; for agreed and mandatory education the
    employer also carries course fees and travel.

    Requests move through REQUESTED, APPROVED/REJECTED/POSTPONED and
    COMPLETED. Transition methods return a new request and raise
    InvalidTransitionError for illegal moves.
    """

    legal_reference = "§ 23 Kompetenceudvikling"

    def calculate(
        self,
        employee: EmployeeSnapshot,
        education_type: EducationType,
        start_date: date,
        end_date: date,
        course_name: str = "",
        course_provider: str = "",
        course_fees: Decimal | None = None,
        travel_expenses: Decimal | None = None,
        days_used_this_year: int | None = None,
        request_date: date | None = None,
    ) -> EducationRequest:
        """Calculate pay and cost for an education request.

        Self-selected days already used this year come from days_used_this_year
        when given, otherwise from the usage lookup.

        Raises:
            InvalidDateRangeError: If the course starts after it ends
        """
        require_valid_range(start_date, end_date)
        request_date = request_date or date.today()
        days = calendar_days(start_date, end_date)

        used = remaining = 0
        deadline = None
        if education_type == EducationType.SELF_SELECTED:
            if days_used_this_year is None:
                year = start_date.year
                days_used_this_year = self._days_used(
                    employee.employee_id,
                    [AbsenceType.EDUCATION_SELF_SELECTED],
                    date(year, 1, 1),
                    date(year, 12, 31),
                )
            used = days_used_this_year
            remaining = max(0, SELF_SELECTED_DAYS_PER_YEAR - used)
            deadline = start_date - timedelta(days=ADVANCE_NOTICE_DAYS)

        is_paid = education_type in PAID_TYPES
        day_pay = daily_pay(employee, start_date) if is_paid else ZERO
        total_pay = self.money(day_pay * days)

        fees = travel = ZERO
        total_cost = ZERO
        if education_type in EMPLOYER_COST_TYPES:
            fees = self.money(course_fees or ZERO)
            travel = self.money(travel_expenses or ZERO)
            total_cost = total_pay + fees + travel

        request = EducationRequest(
            employee_id=employee.employee_id,
            education_type=education_type,
            course_name=course_name,
            course_provider=course_provider,
            start_date=start_date,
            end_date=end_date,
            request_date=request_date,
            days_count=days,
            is_paid=is_paid,
            daily_pay=self.money(day_pay),
            total_pay=total_pay,
            course_fees=fees,
            travel_expenses=travel,
            total_cost=total_cost,
            days_used_this_year=used,
            days_remaining_this_year=remaining,
            approval_deadline=deadline,
        )
        logger.info(
            "Calculated education leave for employee %s: %s, %s days, paid=%s, cost %s",
            employee.employee_id,
            education_type.value,
            days,
            is_paid,
            total_cost,
        )
        return request

    def validate(self, employee: EmployeeSnapshot, calculation: EducationRequest) -> ValidationResult:
        result = ValidationResult()

        if calculation.days_count < 1:
            result.add_error("Education must last at least 1 day")

        if calculation.start_date <= calculation.request_date:
            result.add_warning("Education starts today or in the past; confirm the timing")

        if calculation.education_type == EducationType.SELF_SELECTED:
            total = calculation.days_used_this_year + calculation.days_count
            if total > SELF_SELECTED_DAYS_PER_YEAR:
                result.add_error(
                    f"Self-selected education exceeds {SELF_SELECTED_DAYS_PER_YEAR} days per "
                    f"year (requested {calculation.days_count}, already used "
                    f"{calculation.days_used_this_year})"
                )
            if (
                calculation.approval_deadline is not None
                and calculation.approval_deadline < calculation.request_date
            ):
                result.add_error(
                    f"Request is too late; it had to be submitted by "
                    f"{calculation.approval_deadline.isoformat()} "
                    f"({ADVANCE_NOTICE_DAYS} days before start)"
                )

        if calculation.days_count > LONG_COURSE_DAYS:
            result.add_warning(
                f"Education lasts more than {LONG_COURSE_DAYS} days; confirm this is correct"
            )

        if calculation.education_type == EducationType.AGREED:
            result.add_warning("Agreed education requires documentation")

        if calculation.total_cost > MANAGEMENT_APPROVAL_COST:
            result.add_warning(
                f"Education costs {calculation.total_cost:.2f}, above "
                f"{MANAGEMENT_APPROVAL_COST}; management approval is recommended"
            )

        return result

    # Lifecycle

    def _transition(self, request: EducationRequest, to_status: RequestStatus, **changes) -> EducationRequest:
        LeaveRequestStateMachine.validate_transition(
            request.status, to_status, postponable=request.is_postponable
        )
        logger.info(
            "Education request for employee %s: %s -> %s",
            request.employee_id,
            request.status.value,
            to_status.value,
        )
        return replace(request, status=to_status, **changes)

    def approve(self, request: EducationRequest, approved_by: str, on: date | None = None) -> EducationRequest:
        return self._transition(
            request, RequestStatus.APPROVED, decided_by=approved_by, decided_on=on or date.today()
        )

    def reject(
        self, request: EducationRequest, reason: str, rejected_by: str, on: date | None = None
    ) -> EducationRequest:
        return self._transition(
            request,
            RequestStatus.REJECTED,
            decided_by=rejected_by,
            decided_on=on or date.today(),
            decision_reason=reason,
        )

    def postpone(
        self, request: EducationRequest, reason: str, postponed_by: str, on: date | None = None
    ) -> EducationRequest:
        """Postpone for operational reasons; self-selected education only."""
        return self._transition(
            request,
            RequestStatus.POSTPONED,
            decided_by=postponed_by,
            decided_on=on or date.today(),
            decision_reason=reason,
        )

    def complete(
        self, request: EducationRequest, completion_date: date, certificate: str | None = None
    ) -> EducationRequest:
        return self._transition(
            request,
            RequestStatus.COMPLETED,
            completion_date=completion_date,
            completion_certificate=certificate,
        )

    def cancel(self, request: EducationRequest, reason: str | None = None) -> EducationRequest:
        return self._transition(request, RequestStatus.CANCELLED, decision_reason=reason)

    @staticmethod
    def summarize_costs(requests: Iterable[EducationRequest]) -> EducationCostSummary:
        """Employer cost across a set of education requests."""
        requests = list(requests)
        paid = sum(1 for r in requests if r.is_paid)
        total_cost = sum((r.total_cost for r in requests), ZERO)
        return EducationCostSummary(
            total_requests=len(requests),
            paid_education=paid,
            unpaid_education=len(requests) - paid,
            total_salary_cost=sum((r.total_pay for r in requests), ZERO),
            total_course_fees=sum((r.course_fees for r in requests), ZERO),
            total_travel_expenses=sum((r.travel_expenses for r in requests), ZERO),
            total_cost=total_cost,
            average_cost_per_education=(
                EntitlementCalculator.money(total_cost / len(requests)) if requests else ZERO
            ),
        )

    def _build_absence(
        self,
        employee: EmployeeSnapshot,
        calculation: EducationRequest,
        note: str | None,
    ) -> AbsenceRecord:
        description = DESCRIPTIONS[calculation.education_type]
        if calculation.course_name:
            description = f"{description}: {calculation.course_name}"
        return AbsenceRecord(
            employee_id=employee.employee_id,
            absence_type=calculation.absence_type,
            start_date=calculation.start_date,
            end_date=calculation.end_date,
            days_count=calculation.days_count,
            is_paid=calculation.is_paid,
            payment_amount=calculation.total_pay,
            legal_reference=self.legal_reference,
            note=note or description,
        )
