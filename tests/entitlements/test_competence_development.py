"""Tests for competence development and education leave."""

from datetime import date
from decimal import Decimal

import pytest

from transport_payroll.calculators.types import AbsenceType
from transport_payroll.calculators.validation import PolicyViolationError
from transport_payroll.entitlements.base import AbsenceRecord, AbsenceUsageLedger
from transport_payroll.entitlements.competence_development import (
    CompetenceDevelopmentCalculator,
    EducationType,
)
from transport_payroll.services.state_machine import InvalidTransitionError, RequestStatus

REQUEST_DATE = date(2025, 6, 1)


@pytest.fixture
def calculator():
    return CompetenceDevelopmentCalculator()


@pytest.fixture
def agreed_request(calculator, employee):
    return calculator.calculate(
        employee,
        EducationType.AGREED,
        date(2025, 6, 16),
        date(2025, 6, 17),
        course_name="Kran certifikat",
        course_provider="AMU Syd",
        course_fees=Decimal("5000"),
        travel_expenses=Decimal("500"),
        request_date=REQUEST_DATE,
    )


class TestPayAndCost:
    def test_agreed_education_is_paid_with_employer_costs(self, agreed_request):
        assert agreed_request.days_count == 2
        assert agreed_request.is_paid is True
        assert agreed_request.daily_pay == Decimal("1221.00")
        assert agreed_request.total_pay == Decimal("2442.00")
        assert agreed_request.course_fees == Decimal("5000.00")
        assert agreed_request.total_cost == Decimal("7942.00")
        assert agreed_request.status == RequestStatus.REQUESTED
        assert agreed_request.absence_type == AbsenceType.EDUCATION_AGREED

    def test_self_selected_is_unpaid(self, calculator, employee):
        request = calculator.calculate(
            employee,
            EducationType.SELF_SELECTED,
            date(2025, 6, 16),
            date(2025, 6, 18),
            course_fees=Decimal("2000"),
            days_used_this_year=0,
            request_date=REQUEST_DATE,
        )

        assert request.is_paid is False
        assert request.total_pay == Decimal("0.00")
        assert request.course_fees == 0
        assert request.total_cost == 0
        assert request.days_remaining_this_year == 5
        assert request.approval_deadline == date(2025, 6, 2)

    def test_certification_renewal_has_no_employer_costs(self, calculator, employee):
        request = calculator.calculate(
            employee,
            EducationType.CERTIFICATION_RENEWAL,
            date(2025, 6, 16),
            date(2025, 6, 16),
            course_fees=Decimal("3000"),
            request_date=REQUEST_DATE,
        )
        assert request.total_pay == Decimal("1221.00")
        assert request.total_cost == 0

    def test_expensive_course_warns(self, calculator, employee):
        request = calculator.calculate(
            employee,
            EducationType.MANDATORY,
            date(2025, 9, 1),
            date(2025, 9, 10),
            request_date=REQUEST_DATE,
        )

        assert request.total_cost == Decimal("12210.00")
        warnings = calculator.validate(employee, request).warnings
        assert "Education costs 12210.00, above 10000; management approval is recommended" in warnings


class TestSelfSelectedLimits:
    def test_within_yearly_cap(self, calculator, employee):
        request = calculator.calculate(
            employee,
            EducationType.SELF_SELECTED,
            date(2025, 6, 16),
            date(2025, 6, 18),
            days_used_this_year=2,
            request_date=REQUEST_DATE,
        )
        assert calculator.validate(employee, request).errors == []

    def test_yearly_cap_exceeded(self, calculator, employee):
        request = calculator.calculate(
            employee,
            EducationType.SELF_SELECTED,
            date(2025, 6, 16),
            date(2025, 6, 18),
            days_used_this_year=3,
            request_date=REQUEST_DATE,
        )

        result = calculator.validate(employee, request)
        assert result.errors == [
            "Self-selected education exceeds 5 days per year (requested 3, already used 3)"
        ]
        with pytest.raises(PolicyViolationError):
            calculator.to_absence(employee, request)

    def test_days_used_come_from_usage_lookup(self, employee):
        ledger = AbsenceUsageLedger(
            [
                AbsenceRecord(
                    employee_id="E1",
                    absence_type=AbsenceType.EDUCATION_SELF_SELECTED,
                    start_date=date(2025, 3, 3),
                    end_date=date(2025, 3, 4),
                    days_count=2,
                    is_paid=False,
                    payment_amount=Decimal("0"),
                    legal_reference="§ 23 Kompetenceudvikling",
                ),
            ]
        )
        request = CompetenceDevelopmentCalculator(usage=ledger).calculate(
            employee,
            EducationType.SELF_SELECTED,
            date(2025, 6, 16),
            date(2025, 6, 16),
            request_date=REQUEST_DATE,
        )

        assert request.days_used_this_year == 2
        assert request.days_remaining_this_year == 3

    def test_late_request(self, calculator, employee):
        request = calculator.calculate(
            employee,
            EducationType.SELF_SELECTED,
            date(2025, 6, 16),
            date(2025, 6, 16),
            days_used_this_year=0,
            request_date=date(2025, 6, 10),
        )

        errors = calculator.validate(employee, request).errors
        assert errors == [
            "Request is too late; it had to be submitted by 2025-06-02 (14 days before start)"
        ]


class TestLifecycle:
    def test_approve_then_complete(self, calculator, agreed_request):
        approved = calculator.approve(agreed_request, "HR", on=date(2025, 6, 3))
        completed = calculator.complete(approved, date(2025, 6, 17), certificate="CERT-1")

        assert agreed_request.status == RequestStatus.REQUESTED
        assert approved.status == RequestStatus.APPROVED
        assert approved.decided_by == "HR"
        assert approved.decided_on == date(2025, 6, 3)
        assert completed.status == RequestStatus.COMPLETED
        assert completed.completion_certificate == "CERT-1"

    def test_complete_requires_approval(self, calculator, agreed_request):
        with pytest.raises(InvalidTransitionError):
            calculator.complete(agreed_request, date(2025, 6, 17))

    def test_only_self_selected_can_be_postponed(self, calculator, employee, agreed_request):
        with pytest.raises(InvalidTransitionError):
            calculator.postpone(agreed_request, "Peak season", "HR")

        self_selected = calculator.calculate(
            employee,
            EducationType.SELF_SELECTED,
            date(2025, 6, 16),
            date(2025, 6, 16),
            days_used_this_year=0,
            request_date=REQUEST_DATE,
        )
        postponed = calculator.postpone(self_selected, "Peak season", "HR")
        assert postponed.status == RequestStatus.POSTPONED
        assert postponed.decision_reason == "Peak season"

    def test_rejected_is_terminal(self, calculator, agreed_request):
        rejected = calculator.reject(agreed_request, "Budget", "HR")

        assert rejected.decision_reason == "Budget"
        with pytest.raises(InvalidTransitionError):
            calculator.approve(rejected, "HR")


class TestRecords:
    def test_to_absence(self, calculator, employee, agreed_request):
        record = calculator.to_absence(employee, agreed_request)

        assert record.absence_type == AbsenceType.EDUCATION_AGREED
        assert record.days_count == 2
        assert record.is_paid is True
        assert record.payment_amount == Decimal("2442.00")
        assert record.note == "Aftalt uddannelse: Kran certifikat"

    def test_summarize_costs(self, calculator, employee, agreed_request):
        unpaid = calculator.calculate(
            employee,
            EducationType.SELF_SELECTED,
            date(2025, 6, 16),
            date(2025, 6, 16),
            days_used_this_year=0,
            request_date=REQUEST_DATE,
        )

        summary = CompetenceDevelopmentCalculator.summarize_costs([agreed_request, unpaid])

        assert summary.total_requests == 2
        assert summary.paid_education == 1
        assert summary.unpaid_education == 1
        assert summary.total_cost == Decimal("7942.00")
        assert summary.average_cost_per_education == Decimal("3971.00")
