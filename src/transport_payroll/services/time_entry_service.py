"""Time entry approval service."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from transport_payroll.calculators.types import TimeEntryStatus
from transport_payroll.models import TimeEntry
from transport_payroll.services.state_machine import TimeEntryStateMachine

logger = logging.getLogger(__name__)


class TimeEntryLockedError(Exception):
    """Raised when changing a time entry locked by an approved payroll."""

    def __init__(self, time_entry_id: UUID, calculation_id: UUID):
        self.time_entry_id = time_entry_id
        self.calculation_id = calculation_id
        super().__init__(
            f"Time entry {time_entry_id} is locked by payroll calculation {calculation_id}"
        )


class TimeEntryService:
    """Approves and rejects time entries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_entry(self, time_entry_id: UUID) -> TimeEntry:
        entry = await self.session.get(TimeEntry, time_entry_id)
        if entry is None:
            raise ValueError(f"Time entry {time_entry_id} not found")
        return entry

    async def list_for_period(
        self,
        employee_id: UUID,
        period_start: date,
        period_end: date,
        status: TimeEntryStatus | None = None,
    ) -> list[TimeEntry]:
        query = select(TimeEntry).where(
            TimeEntry.employee_id == employee_id,
            TimeEntry.work_date >= period_start,
            TimeEntry.work_date <= period_end,
        )
        if status is not None:
            query = query.where(TimeEntry.status == status.value)
        result = await self.session.execute(
            query.order_by(TimeEntry.work_date, TimeEntry.start_time)
        )
        return list(result.scalars())

    async def _transition(self, entry: TimeEntry, to_status: TimeEntryStatus) -> None:
        if entry.is_locked:
            raise TimeEntryLockedError(entry.time_entry_id, entry.locked_by_calculation_id)
        TimeEntryStateMachine.validate_transition(entry.status, to_status)
        entry.status = to_status.value

    async def approve(self, time_entry_id: UUID, approved_by: str) -> TimeEntry:
        """Approve an entry so payroll picks it up.

        Raises:
            TimeEntryLockedError: If an approved payroll has locked the entry
            InvalidTransitionError: If the entry cannot be approved from its status
        """
        entry = await self.get_entry(time_entry_id)
        await self._transition(entry, TimeEntryStatus.APPROVED)
        entry.approved_by = approved_by
        entry.approved_at = datetime.now(timezone.utc)
        entry.rejection_reason = None
        await self.session.flush()
        logger.info("Time entry %s approved by %s", time_entry_id, approved_by)
        return entry

    async def reject(self, time_entry_id: UUID, reason: str, rejected_by: str) -> TimeEntry:
        """Reject an entry; rejected entries are never paid."""
        entry = await self.get_entry(time_entry_id)
        await self._transition(entry, TimeEntryStatus.REJECTED)
        entry.approved_by = rejected_by
        entry.approved_at = datetime.now(timezone.utc)
        entry.rejection_reason = reason
        await self.session.flush()
        logger.info("Time entry %s rejected by %s: %s", time_entry_id, rejected_by, reason)
        return entry
