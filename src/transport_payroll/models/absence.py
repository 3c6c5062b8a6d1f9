"""Absence and leave entries."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transport_payroll.calculators.types import AbsenceType
from transport_payroll.entitlements.base import AbsenceRecord
from transport_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from transport_payroll.models.employee import Employee


class AbsenceEntry(Base, TimestampMixin):
    """A persisted absence period.

    Entries are immutable once created except for closing an open period,
    which sets end_date and recomputes days_count and payment_amount.
    """

    __tablename__ = "absence_entry"

    absence_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    absence_type: Mapped[str] = mapped_column(String, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    days_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    payment_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    legal_reference: Mapped[str] = mapped_column(String, nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "end_date IS NULL OR end_date >= start_date",
            name="absence_entry_dates_check",
        ),
        CheckConstraint("days_count >= 0", name="absence_entry_days_check"),
    )

    employee: Mapped[Employee] = relationship(back_populates="absences")

    @classmethod
    def from_record(cls, employee_id: UUID, record: AbsenceRecord) -> AbsenceEntry:
        return cls(
            employee_id=employee_id,
            absence_type=record.absence_type.value,
            start_date=record.start_date,
            end_date=record.end_date,
            days_count=record.days_count,
            is_paid=record.is_paid,
            payment_amount=record.payment_amount,
            legal_reference=record.legal_reference,
            note=record.note,
        )

    def to_record(self) -> AbsenceRecord:
        return AbsenceRecord(
            employee_id=str(self.employee_id),
            absence_type=AbsenceType(self.absence_type),
            start_date=self.start_date,
            end_date=self.end_date,
            days_count=self.days_count,
            is_paid=self.is_paid,
            payment_amount=self.payment_amount,
            legal_reference=self.legal_reference,
            note=self.note,
            absence_id=str(self.absence_id),
        )
