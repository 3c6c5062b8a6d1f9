"""Lifecycle state machines with transition validation."""

from __future__ import annotations

from enum import Enum

from transport_payroll.calculators.types import PayrollStatus, TimeEntryStatus


class RequestStatus(str, Enum):
    """Leave request status values."""

    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    POSTPONED = "POSTPONED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{_value(from_status)}' to '{_value(to_status)}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


def _value(status: str) -> str:
    return status.value if isinstance(status, Enum) else str(status)


class PayrollStateMachine:
    """State machine for payroll calculation status transitions.

    Allowed transitions:
    - pending_review → approved
    - approved → pending_review (reopen)
    - approved → exported
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PayrollStatus.PENDING_REVIEW: [PayrollStatus.APPROVED],
        PayrollStatus.APPROVED: [PayrollStatus.PENDING_REVIEW, PayrollStatus.EXPORTED],
        PayrollStatus.EXPORTED: [],  # Terminal state
    }

    # Statuses where time entries included in the calculation are locked
    INPUTS_LOCKED = {
        PayrollStatus.APPROVED,
        PayrollStatus.EXPORTED,
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def are_inputs_locked(cls, status: str) -> bool:
        """Check if the calculation's time entries are locked."""
        return status in cls.INPUTS_LOCKED

    @classmethod
    def is_reopen(cls, from_status: str, to_status: str) -> bool:
        """Check if this transition is a reopen (approved → pending_review)."""
        return from_status == PayrollStatus.APPROVED and to_status == PayrollStatus.PENDING_REVIEW

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])


class LeaveRequestStateMachine:
    """State machine for request-based leave (education, some absences).

    Allowed transitions:
    - REQUESTED → APPROVED | REJECTED | POSTPONED | CANCELLED
    - APPROVED → COMPLETED | CANCELLED

    Postponement is only available when the request allows it
    (self-selected education).
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        RequestStatus.REQUESTED: [
            RequestStatus.APPROVED,
            RequestStatus.REJECTED,
            RequestStatus.POSTPONED,
            RequestStatus.CANCELLED,
        ],
        RequestStatus.APPROVED: [RequestStatus.COMPLETED, RequestStatus.CANCELLED],
        RequestStatus.REJECTED: [],
        RequestStatus.POSTPONED: [],
        RequestStatus.COMPLETED: [],
        RequestStatus.CANCELLED: [],
    }

    TERMINAL = {
        RequestStatus.REJECTED,
        RequestStatus.POSTPONED,
        RequestStatus.COMPLETED,
        RequestStatus.CANCELLED,
    }

    @classmethod
    def can_transition(
        cls, from_status: str, to_status: str, postponable: bool = True
    ) -> bool:
        """Check if a transition is valid."""
        if to_status == RequestStatus.POSTPONED and not postponable:
            return False
        return to_status in cls.VALID_TRANSITIONS.get(from_status, [])

    @classmethod
    def validate_transition(
        cls, from_status: str, to_status: str, postponable: bool = True
    ) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if to_status == RequestStatus.POSTPONED and not postponable:
            raise InvalidTransitionError(
                from_status, to_status, "only self-selected education can be postponed"
            )
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return status in cls.TERMINAL

    @classmethod
    def get_next_statuses(cls, current_status: str, postponable: bool = True) -> list[str]:
        """Get list of valid next statuses from current status."""
        return [
            status
            for status in cls.VALID_TRANSITIONS.get(current_status, [])
            if postponable or status != RequestStatus.POSTPONED
        ]


class TimeEntryStateMachine:
    """State machine for time entry approval.

    Allowed transitions:
    - PENDING → APPROVED | REJECTED
    - APPROVED → REJECTED (correction)
    - REJECTED → APPROVED (correction)

    Entries locked by an approved payroll calculation cannot change at all;
    that check belongs to the caller holding the lock information.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        TimeEntryStatus.PENDING: [TimeEntryStatus.APPROVED, TimeEntryStatus.REJECTED],
        TimeEntryStatus.APPROVED: [TimeEntryStatus.REJECTED],
        TimeEntryStatus.REJECTED: [TimeEntryStatus.APPROVED],
        TimeEntryStatus.CALCULATED: [],
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        return to_status in cls.VALID_TRANSITIONS.get(from_status, [])

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)
