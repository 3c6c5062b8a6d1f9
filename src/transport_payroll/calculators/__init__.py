"""Wage rule engine: time categorization, allowances and period aggregation."""

from transport_payroll.calculators.aggregator import (
    BatchResult,
    PayrollAggregator,
    PayrollJob,
    PayrollResult,
)
from transport_payroll.calculators.agreement_resolver import (
    AgreementNotFoundError,
    AgreementResolver,
    AmbiguousAgreementError,
)
from transport_payroll.calculators.allowances import AllowanceBreakdown, AllowanceComposer
from transport_payroll.calculators.component_builder import ComponentBuilder
from transport_payroll.calculators.time_categorizer import DayHours, TimeCategorizer
from transport_payroll.calculators.validation import (
    CalculationError,
    EmployeeNotFoundError,
    InvalidDateRangeError,
    PolicyViolationError,
    ValidationResult,
)

__all__ = [
    "AgreementNotFoundError",
    "AgreementResolver",
    "AllowanceBreakdown",
    "AllowanceComposer",
    "AmbiguousAgreementError",
    "BatchResult",
    "CalculationError",
    "ComponentBuilder",
    "DayHours",
    "EmployeeNotFoundError",
    "InvalidDateRangeError",
    "PayrollAggregator",
    "PayrollJob",
    "PayrollResult",
    "PolicyViolationError",
    "TimeCategorizer",
    "ValidationResult",
]
