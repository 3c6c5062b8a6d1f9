"""Tests for lifecycle state machines."""

import pytest

from transport_payroll.calculators.types import PayrollStatus, TimeEntryStatus
from transport_payroll.services.state_machine import (
    InvalidTransitionError,
    LeaveRequestStateMachine,
    PayrollStateMachine,
    RequestStatus,
    TimeEntryStateMachine,
)


class TestPayrollStateMachine:
    """Test payroll calculation transitions."""

    def test_valid_transitions(self):
        """Test that valid transitions are allowed."""
        # pending_review → approved
        assert PayrollStateMachine.can_transition("pending_review", "approved") is True

        # approved → pending_review (reopen)
        assert PayrollStateMachine.can_transition("approved", "pending_review") is True

        # approved → exported
        assert PayrollStateMachine.can_transition("approved", "exported") is True

    def test_invalid_transitions(self):
        """Test that invalid transitions are blocked."""
        # Can't export without approval
        assert PayrollStateMachine.can_transition("pending_review", "exported") is False

        # Exported is terminal
        assert PayrollStateMachine.can_transition("exported", "approved") is False
        assert PayrollStateMachine.can_transition("exported", "pending_review") is False

    def test_enum_and_string_statuses_are_interchangeable(self):
        assert PayrollStateMachine.can_transition(PayrollStatus.APPROVED, "exported") is True
        assert PayrollStateMachine.can_transition("approved", PayrollStatus.EXPORTED) is True

    def test_validate_transition_raises(self):
        """Test that validate_transition raises for invalid transitions."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            PayrollStateMachine.validate_transition("pending_review", "exported")

        assert exc_info.value.from_status == "pending_review"
        assert exc_info.value.to_status == "exported"
        assert "'pending_review' to 'exported'" in str(exc_info.value)

    def test_is_reopen(self):
        """Test reopen detection."""
        assert PayrollStateMachine.is_reopen("approved", "pending_review") is True
        assert PayrollStateMachine.is_reopen("pending_review", "approved") is False

    def test_are_inputs_locked(self):
        assert PayrollStateMachine.are_inputs_locked("pending_review") is False
        assert PayrollStateMachine.are_inputs_locked("approved") is True
        assert PayrollStateMachine.are_inputs_locked("exported") is True

    def test_get_next_statuses(self):
        """Test getting allowed next statuses."""
        assert set(PayrollStateMachine.get_next_statuses("approved")) == {"pending_review", "exported"}
        assert PayrollStateMachine.get_next_statuses("exported") == []


class TestLeaveRequestStateMachine:
    """Test leave request transitions."""

    def test_decisions_from_requested(self):
        for status in ("APPROVED", "REJECTED", "POSTPONED", "CANCELLED"):
            assert LeaveRequestStateMachine.can_transition("REQUESTED", status) is True

    def test_completion_requires_approval(self):
        assert LeaveRequestStateMachine.can_transition("REQUESTED", "COMPLETED") is False
        assert LeaveRequestStateMachine.can_transition("APPROVED", "COMPLETED") is True

    def test_postpone_only_when_postponable(self):
        assert LeaveRequestStateMachine.can_transition("REQUESTED", "POSTPONED", postponable=False) is False

        with pytest.raises(InvalidTransitionError) as exc_info:
            LeaveRequestStateMachine.validate_transition(
                RequestStatus.REQUESTED, RequestStatus.POSTPONED, postponable=False
            )
        assert exc_info.value.reason == "only self-selected education can be postponed"

    def test_terminal_statuses(self):
        for status in RequestStatus:
            expected = status not in (RequestStatus.REQUESTED, RequestStatus.APPROVED)
            assert LeaveRequestStateMachine.is_terminal(status) is expected
            if expected:
                assert LeaveRequestStateMachine.get_next_statuses(status) == []

    def test_next_statuses_hide_postpone(self):
        statuses = LeaveRequestStateMachine.get_next_statuses("REQUESTED", postponable=False)
        assert RequestStatus.POSTPONED not in statuses
        assert len(statuses) == 3


class TestTimeEntryStateMachine:
    """Test time entry approval transitions."""

    def test_valid_transitions(self):
        assert TimeEntryStateMachine.can_transition("PENDING", "APPROVED") is True
        assert TimeEntryStateMachine.can_transition("PENDING", "REJECTED") is True
        assert TimeEntryStateMachine.can_transition("APPROVED", "REJECTED") is True
        assert TimeEntryStateMachine.can_transition("REJECTED", "APPROVED") is True

    def test_invalid_transitions(self):
        assert TimeEntryStateMachine.can_transition("APPROVED", "APPROVED") is False
        assert TimeEntryStateMachine.can_transition("APPROVED", "PENDING") is False
        assert TimeEntryStateMachine.can_transition(TimeEntryStatus.CALCULATED, "APPROVED") is False

    def test_validate_transition_raises(self):
        with pytest.raises(InvalidTransitionError):
            TimeEntryStateMachine.validate_transition("REJECTED", "REJECTED")
