"""SQLAlchemy ORM models."""

from transport_payroll.models.base import Base, TimestampMixin
from transport_payroll.models.employee import Employee
from transport_payroll.models.agreement import Agreement
from transport_payroll.models.time_entry import TimeEntry
from transport_payroll.models.payroll import PayrollCalculation, PayrollComponentLine
from transport_payroll.models.absence import AbsenceEntry

__all__ = [
    "Base",
    "TimestampMixin",
    "Employee",
    "Agreement",
    "TimeEntry",
    "PayrollCalculation",
    "PayrollComponentLine",
    "AbsenceEntry",
]
