"""Special allowance and free-choice account (§ 8)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from transport_payroll.calculators.allowances import AllowanceComposer, LegalReference
from transport_payroll.calculators.component_builder import ComponentBuilder
from transport_payroll.calculators.rules import EffectiveRule, RuleSchedule
from transport_payroll.calculators.types import EmployeeSnapshot, WorkTimeType

logger = logging.getLogger(__name__)

FREEDOM_ACCOUNT_PERCENT = Decimal("6.75")
HOURS_PER_FREE_DAY = Decimal("7.4")

SALARIED_ALLOWANCE_SCHEDULE: RuleSchedule[Decimal] = RuleSchedule(
    "salaried_special_allowance_percent",
    [
        EffectiveRule(date.min, Decimal("7.60")),
        EffectiveRule(date(2026, 5, 1), Decimal("7.80")),
        EffectiveRule(date(2027, 5, 1), Decimal("8.00")),
        EffectiveRule(date(2028, 5, 1), Decimal("8.20")),
    ],
)

HOURLY_TYPES = frozenset({WorkTimeType.HOURLY, WorkTimeType.SUBSTITUTE})


@dataclass(frozen=True)
class SpecialAllowanceCalculation:
    """Special allowance or savings on a vacation-eligible pay base."""

    base_amount: Decimal
    percentage: Decimal
    allowance_amount: Decimal
    effective_from: date
    is_savings: bool
    legal_reference: str = LegalReference.SPECIAL_ALLOWANCE


class SpecialAllowanceCalculator:
    """Computes § 8 special allowance for hourly and salaried employees.

    Hourly and substitute workers accrue a free-choice account at a fixed
    percentage. Salaried workers receive an allowance whose percentage steps
    up each May through the agreement period, optionally taken as savings.
    """

    def __init__(self, salaried_schedule: RuleSchedule[Decimal] | None = None):
        self.salaried_schedule = salaried_schedule or SALARIED_ALLOWANCE_SCHEDULE

    def calculate(
        self,
        employee: EmployeeSnapshot,
        vacation_eligible_pay: Decimal,
        as_of: date,
        use_savings: bool = False,
        hourly_percent: Decimal | None = None,
    ) -> SpecialAllowanceCalculation:
        """Allowance on vacation-eligible pay.

        hourly_percent overrides the free-choice account percentage, for
        agreements that set their own.
        """
        if employee.work_time_type in HOURLY_TYPES:
            percentage = FREEDOM_ACCOUNT_PERCENT if hourly_percent is None else hourly_percent
            effective_from = date.min
            is_savings = True
        else:
            percentage = self.salaried_schedule.resolve(as_of)
            effective_from = self.salaried_schedule.effective_from(as_of)
            is_savings = use_savings

        amount = ComponentBuilder.round_to_cents(
            ComponentBuilder.percent_of(vacation_eligible_pay, percentage)
        )
        logger.debug(
            "Special allowance for employee %s: %s%% of %s = %s",
            employee.employee_id,
            percentage,
            vacation_eligible_pay,
            amount,
        )
        return SpecialAllowanceCalculation(
            base_amount=vacation_eligible_pay,
            percentage=percentage,
            allowance_amount=amount,
            effective_from=effective_from,
            is_savings=is_savings,
        )

    @staticmethod
    def estimated_free_days(
        balance: Decimal, employee: EmployeeSnapshot, as_of: date
    ) -> Decimal:
        """Number of paid free days a free-choice balance would cover."""
        daily = AllowanceComposer.effective_hourly_wage(employee, as_of) * HOURS_PER_FREE_DAY
        if daily <= 0:
            return Decimal("0")
        return (balance / daily).quantize(Decimal("0.1"))
