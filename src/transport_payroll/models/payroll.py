"""Persisted payroll calculations and their components."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transport_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from transport_payroll.models.employee import Employee


class PayrollCalculation(Base, TimestampMixin):
    """One employee's payroll result for a period."""

    __tablename__ = "payroll_calculation"

    payroll_calculation_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    agreement_name: Mapped[str] = mapped_column(String, nullable=False)

    # Deterministic identity of the computation
    calculation_id: Mapped[UUID] = mapped_column(nullable=False)
    inputs_fingerprint: Mapped[str] = mapped_column(String(64), nullable=False)
    engine_version: Mapped[str] = mapped_column(String, nullable=False)

    # Hours
    total_hours: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=0)
    regular_hours: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=0)
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=0)
    night_hours: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=0)
    weekend_hours: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=0)
    holiday_hours: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=0)

    # Pay
    base_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    allowance_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    overtime_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    night_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    weekend_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    holiday_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    special_allowance: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    pension_employer: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    pension_employee: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    vacation_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    total_gross_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)

    warnings_json: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Lifecycle
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending_review")
    approved_by: Mapped[str | None] = mapped_column(String, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reopen_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    exported_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    export_reference: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "employee_id",
            "period_start",
            "period_end",
            name="payroll_calculation_employee_period_unique",
        ),
        CheckConstraint(
            "status IN ('pending_review', 'approved', 'exported')",
            name="payroll_calculation_status_check",
        ),
        CheckConstraint("period_end >= period_start", name="payroll_calculation_dates_check"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship()
    components: Mapped[list[PayrollComponentLine]] = relationship(
        back_populates="calculation",
        cascade="all, delete-orphan",
        order_by="PayrollComponentLine.line_number",
    )


class PayrollComponentLine(Base):
    """One itemized component of a persisted calculation."""

    __tablename__ = "payroll_component"

    payroll_component_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    payroll_calculation_id: Mapped[UUID] = mapped_column(
        ForeignKey("payroll_calculation.payroll_calculation_id", ondelete="CASCADE"),
        nullable=False,
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    component_type: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    hours: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    rate: Mapped[Decimal | None] = mapped_column(Numeric(14, 6), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    legal_reference: Mapped[str] = mapped_column(String, nullable=False)
    work_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    metadata_json: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint(
            "payroll_calculation_id", "line_number", name="payroll_component_line_unique"
        ),
    )

    calculation: Mapped[PayrollCalculation] = relationship(back_populates="components")
