"""Collective agreement rate tables."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from transport_payroll.calculators.types import AgreementSnapshot, AgreementType
from transport_payroll.models.base import Base, TimestampMixin


class Agreement(Base, TimestampMixin):
    """One version of an agreement's rate table."""

    __tablename__ = "agreement"

    agreement_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    agreement_type: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)

    base_hourly_rate: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    weekly_hours: Mapped[Decimal] = mapped_column(
        Numeric(6, 2), nullable=False, default=Decimal("37")
    )
    overtime_tier1_rate: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    overtime_tier2_rate: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    night_rate: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    weekend_premium_percent: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    holiday_premium_percent: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    special_allowance_percent: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    pension_employer_percent: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    pension_employee_percent: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    vacation_percent: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    vacation_days_per_year: Mapped[int] = mapped_column(Integer, nullable=False, default=25)

    valid_from: Mapped[date] = mapped_column(Date, nullable=False)
    valid_to: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint(
            "valid_to IS NULL OR valid_to >= valid_from",
            name="agreement_dates_check",
        ),
    )

    def to_snapshot(self) -> AgreementSnapshot:
        """Immutable view of this rate table for the calculators."""
        return AgreementSnapshot(
            agreement_type=AgreementType(self.agreement_type),
            name=self.name,
            base_hourly_rate=self.base_hourly_rate,
            overtime_tier1_rate=self.overtime_tier1_rate,
            overtime_tier2_rate=self.overtime_tier2_rate,
            night_rate=self.night_rate,
            weekend_premium_percent=self.weekend_premium_percent,
            holiday_premium_percent=self.holiday_premium_percent,
            special_allowance_percent=self.special_allowance_percent,
            pension_employer_percent=self.pension_employer_percent,
            pension_employee_percent=self.pension_employee_percent,
            vacation_percent=self.vacation_percent,
            valid_from=self.valid_from,
            valid_to=self.valid_to,
            weekly_hours=self.weekly_hours,
            vacation_days_per_year=self.vacation_days_per_year,
            is_active=self.is_active,
            agreement_id=str(self.agreement_id),
        )
