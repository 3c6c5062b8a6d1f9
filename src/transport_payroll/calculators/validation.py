"""Shared validation contract and fatal calculation errors.

Every calculator reports policy violations through a ValidationResult:
errors block persistence, warnings are advisory. Exceptions are reserved
for fatal conditions where no meaningful result can be produced.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass
class ValidationResult:
    """Outcome of validating a calculation."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Append another result's messages to this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


class CalculationError(Exception):
    """Base class for fatal calculation errors."""


class EmployeeNotFoundError(CalculationError):
    """Raised when the employee record does not exist."""

    def __init__(self, employee_id: Any):
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} not found")


class InvalidDateRangeError(CalculationError):
    """Raised when a date range is structurally invalid."""

    def __init__(self, start: date, end: date, reason: str | None = None):
        self.start = start
        self.end = end
        self.reason = reason
        msg = f"Invalid date range {start} to {end}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PolicyViolationError(CalculationError):
    """Raised when a mutating operation is attempted on an invalid calculation."""

    def __init__(self, validation: ValidationResult):
        self.validation = validation
        super().__init__("; ".join(validation.errors) or "Policy violation")


def require_valid_range(start: date, end: date) -> None:
    """Raise InvalidDateRangeError if start is after end."""
    if start > end:
        raise InvalidDateRangeError(start, end, "start is after end")
