"""Time entry model."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transport_payroll.calculators.types import TaskType, TimeEntryRecord, TimeEntryStatus
from transport_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from transport_payroll.models.employee import Employee


class TimeEntry(Base, TimestampMixin):
    """One worked interval as registered by the employee."""

    __tablename__ = "time_entry"

    time_entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_night_work: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_weekend: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_holiday: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_irregular: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    task_type: Mapped[str] = mapped_column(String, nullable=False, default=TaskType.DRIVING.value)

    status: Mapped[str] = mapped_column(
        String, nullable=False, default=TimeEntryStatus.PENDING.value
    )
    approved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(String, nullable=True)

    # Locking
    locked_by_calculation_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("payroll_calculation.payroll_calculation_id"),
        nullable=True,
    )
    locked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("break_minutes >= 0", name="time_entry_break_check"),
        CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED', 'CALCULATED')",
            name="time_entry_status_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="time_entries")

    @property
    def is_locked(self) -> bool:
        return self.locked_by_calculation_id is not None

    def to_record(self) -> TimeEntryRecord:
        """Immutable view of this entry for the calculators."""
        return TimeEntryRecord(
            entry_id=str(self.time_entry_id),
            employee_id=str(self.employee_id),
            work_date=self.work_date,
            start_time=self.start_time,
            end_time=self.end_time,
            break_minutes=self.break_minutes,
            is_night_work=self.is_night_work,
            is_weekend=self.is_weekend,
            is_holiday=self.is_holiday,
            is_irregular=self.is_irregular,
            task_type=TaskType(self.task_type),
            status=TimeEntryStatus(self.status),
        )
