"""Employee model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transport_payroll.calculators.types import (
    AgreementType,
    EmployeeSnapshot,
    JobCategory,
    VehicleWeightClass,
    WorkTimeType,
)
from transport_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from transport_payroll.models.absence import AbsenceEntry
    from transport_payroll.models.time_entry import TimeEntry


class Employee(Base, TimestampMixin):
    """Employee master record with the attributes that drive allowances."""

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_number: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    job_category: Mapped[str] = mapped_column(String, nullable=False)
    agreement_type: Mapped[str] = mapped_column(String, nullable=False)
    work_time_type: Mapped[str] = mapped_column(
        String, nullable=False, default=WorkTimeType.HOURLY.value
    )
    base_hourly_rate: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    employment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    seniority_months: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    postal_code: Mapped[str | None] = mapped_column(String(4), nullable=True)
    location: Mapped[str | None] = mapped_column(String, nullable=True)

    has_driver_license: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    driver_license_number: Mapped[str | None] = mapped_column(String, nullable=True)
    driver_license_expiry: Mapped[date | None] = mapped_column(Date, nullable=True)
    vehicle_weight_class: Mapped[str | None] = mapped_column(String, nullable=True)
    has_tachograph_card: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tachograph_card_expiry: Mapped[date | None] = mapped_column(Date, nullable=True)

    has_forklift_certificate: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_crane_certificate: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_adr_certificate: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    adr_certificate_type: Mapped[str | None] = mapped_column(String, nullable=True)
    has_vocational_degree: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    vocational_degree_type: Mapped[str | None] = mapped_column(String, nullable=True)

    local_salary_supplement: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 4), nullable=True
    )
    is_youth_worker: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_cross_border_driver: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_fixed_cross_border: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'terminated', 'on_leave')",
            name="employee_status_check",
        ),
        CheckConstraint("seniority_months >= 0", name="employee_seniority_check"),
    )

    # Relationships
    time_entries: Mapped[list[TimeEntry]] = relationship(back_populates="employee")
    absences: Mapped[list[AbsenceEntry]] = relationship(back_populates="employee")

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"

    def to_snapshot(self) -> EmployeeSnapshot:
        """Immutable view of this employee for the calculators."""
        return EmployeeSnapshot(
            employee_id=str(self.employee_id),
            job_category=JobCategory(self.job_category),
            agreement_type=AgreementType(self.agreement_type),
            base_hourly_rate=self.base_hourly_rate,
            employment_date=self.employment_date,
            seniority_months=self.seniority_months,
            work_time_type=WorkTimeType(self.work_time_type),
            postal_code=self.postal_code,
            location=self.location,
            has_driver_license=self.has_driver_license,
            driver_license_number=self.driver_license_number,
            driver_license_expiry=self.driver_license_expiry,
            vehicle_weight_class=(
                VehicleWeightClass(self.vehicle_weight_class)
                if self.vehicle_weight_class
                else None
            ),
            has_tachograph_card=self.has_tachograph_card,
            tachograph_card_expiry=self.tachograph_card_expiry,
            has_forklift_certificate=self.has_forklift_certificate,
            has_crane_certificate=self.has_crane_certificate,
            has_adr_certificate=self.has_adr_certificate,
            adr_certificate_type=self.adr_certificate_type,
            has_vocational_degree=self.has_vocational_degree,
            vocational_degree_type=self.vocational_degree_type,
            local_salary_supplement=self.local_salary_supplement,
            is_youth_worker=self.is_youth_worker,
            birth_date=self.birth_date,
            is_cross_border_driver=self.is_cross_border_driver,
            is_fixed_cross_border=self.is_fixed_cross_border,
        )
