"""Persistence-backed services around the calculation engine.

Service classes live in their own modules (payroll_service, time_entry_service,
absence_service); only the dependency-free state machines are exported here so
calculators can use them without loading the ORM.
"""

from transport_payroll.services.state_machine import (
    InvalidTransitionError,
    LeaveRequestStateMachine,
    PayrollStateMachine,
    RequestStatus,
    TimeEntryStateMachine,
)

__all__ = [
    "InvalidTransitionError",
    "LeaveRequestStateMachine",
    "PayrollStateMachine",
    "RequestStatus",
    "TimeEntryStateMachine",
]
