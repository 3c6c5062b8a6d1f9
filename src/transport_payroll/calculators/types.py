"""Type definitions for the calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class JobCategory(str, Enum):
    """Job categories covered by the transport agreements."""

    DRIVER = "DRIVER"
    WAREHOUSE = "WAREHOUSE"
    MOVER = "MOVER"
    TERMINAL = "TERMINAL"
    RENOVATION = "RENOVATION"


class AgreementType(str, Enum):
    """Collective agreement families."""

    DRIVER_AGREEMENT = "DRIVER_AGREEMENT"
    WAREHOUSE_AGREEMENT = "WAREHOUSE_AGREEMENT"
    MOVER_AGREEMENT = "MOVER_AGREEMENT"


class WorkTimeType(str, Enum):
    """How the employee's working time is contracted."""

    HOURLY = "HOURLY"
    SALARIED = "SALARIED"
    SUBSTITUTE = "SUBSTITUTE"
    SHIFT_WORK = "SHIFT_WORK"


class VehicleWeightClass(str, Enum):
    """Vehicle weight classes for the driver allowance."""

    LIGHT = "LIGHT"
    MEDIUM = "MEDIUM"
    HEAVY = "HEAVY"
    ARTICULATED = "ARTICULATED"


class TaskType(str, Enum):
    """Task performed during a time entry."""

    DISTRIBUTION = "DISTRIBUTION"
    TERMINAL_WORK = "TERMINAL_WORK"
    DRIVING = "DRIVING"
    MOVING = "MOVING"
    LOADING = "LOADING"
    UNLOADING = "UNLOADING"


class TimeEntryStatus(str, Enum):
    """Approval status of a time entry."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CALCULATED = "CALCULATED"


class PayrollStatus(str, Enum):
    """Payroll calculation lifecycle status."""

    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    EXPORTED = "exported"


class ComponentType(str, Enum):
    """Payroll component types."""

    BASE_SALARY = "BASE_SALARY"
    OVERTIME = "OVERTIME"
    NIGHT_ALLOWANCE = "NIGHT_ALLOWANCE"
    WEEKEND_ALLOWANCE = "WEEKEND_ALLOWANCE"
    HOLIDAY_ALLOWANCE = "HOLIDAY_ALLOWANCE"
    SPECIAL_ALLOWANCE = "SPECIAL_ALLOWANCE"
    DRIVER_ALLOWANCE = "DRIVER_ALLOWANCE"
    WAREHOUSE_ALLOWANCE = "WAREHOUSE_ALLOWANCE"
    MOVER_ALLOWANCE = "MOVER_ALLOWANCE"
    RENOVATION_ALLOWANCE = "RENOVATION_ALLOWANCE"
    VOCATIONAL_ALLOWANCE = "VOCATIONAL_ALLOWANCE"
    SENIORITY_ALLOWANCE = "SENIORITY_ALLOWANCE"
    CERTIFICATE_ALLOWANCE = "CERTIFICATE_ALLOWANCE"
    LOCAL_SALARY = "LOCAL_SALARY"
    PENSION_EMPLOYER = "PENSION_EMPLOYER"
    PENSION_EMPLOYEE = "PENSION_EMPLOYEE"
    VACATION = "VACATION"


class AbsenceType(str, Enum):
    """Absence and leave types recorded as absence entries."""

    SICKNESS = "SICKNESS"
    MATERNITY_LEAVE = "MATERNITY_LEAVE"
    PATERNITY_LEAVE = "PATERNITY_LEAVE"
    SOCIAL_PARENT_LEAVE = "SOCIAL_PARENT_LEAVE"
    PREGNANCY_RELATED_ABSENCE = "PREGNANCY_RELATED_ABSENCE"
    CHILD_SICK_DAY = "CHILD_SICK_DAY"
    CHILD_DOCTOR_VISIT = "CHILD_DOCTOR_VISIT"
    CHILD_CARE_DAY = "CHILD_CARE_DAY"
    GRANDCHILD_CARE_DAY = "GRANDCHILD_CARE_DAY"
    RELATIVE_ESCORT = "RELATIVE_ESCORT"
    CHILD_HOSPITALIZATION = "CHILD_HOSPITALIZATION"
    EDUCATION_SELF_SELECTED = "EDUCATION_SELF_SELECTED"
    EDUCATION_AGREED = "EDUCATION_AGREED"
    EDUCATION_MANDATORY = "EDUCATION_MANDATORY"
    EDUCATION_CERTIFICATION = "EDUCATION_CERTIFICATION"


@dataclass(frozen=True)
class EmployeeSnapshot:
    """Immutable view of an employee used for one calculation."""

    employee_id: str
    job_category: JobCategory
    agreement_type: AgreementType
    base_hourly_rate: Decimal
    employment_date: date | None = None
    seniority_months: int = 0
    work_time_type: WorkTimeType = WorkTimeType.HOURLY

    # Location
    postal_code: str | None = None
    location: str | None = None

    # Driving
    has_driver_license: bool = False
    driver_license_number: str | None = None
    driver_license_expiry: date | None = None
    vehicle_weight_class: VehicleWeightClass | None = None
    has_tachograph_card: bool = False
    tachograph_card_expiry: date | None = None

    # Certificates and education
    has_forklift_certificate: bool = False
    has_crane_certificate: bool = False
    has_adr_certificate: bool = False
    adr_certificate_type: str | None = None
    has_vocational_degree: bool = False
    vocational_degree_type: str | None = None

    local_salary_supplement: Decimal | None = None

    # Youth workers are paid a share of the base rate by age
    is_youth_worker: bool = False
    birth_date: date | None = None

    is_cross_border_driver: bool = False
    is_fixed_cross_border: bool = False


@dataclass(frozen=True)
class AgreementSnapshot:
    """Versioned rate table for one agreement type."""

    agreement_type: AgreementType
    name: str
    base_hourly_rate: Decimal
    overtime_tier1_rate: Decimal
    overtime_tier2_rate: Decimal
    night_rate: Decimal
    weekend_premium_percent: Decimal
    holiday_premium_percent: Decimal
    special_allowance_percent: Decimal
    pension_employer_percent: Decimal
    pension_employee_percent: Decimal
    vacation_percent: Decimal
    valid_from: date
    valid_to: date | None = None
    weekly_hours: Decimal = Decimal("37")
    vacation_days_per_year: int = 25
    is_active: bool = True
    agreement_id: str | None = None

    @property
    def normal_daily_hours(self) -> Decimal:
        """Hours per day before overtime starts."""
        return self.weekly_hours / Decimal("5")

    def is_valid_on(self, on: date) -> bool:
        """Check if the agreement is active and its window contains the date."""
        if not self.is_active:
            return False
        if on < self.valid_from:
            return False
        return self.valid_to is None or on <= self.valid_to


@dataclass(frozen=True)
class TimeEntryRecord:
    """One worked interval."""

    entry_id: str
    employee_id: str
    work_date: date
    start_time: datetime
    end_time: datetime | None = None
    break_minutes: int = 0
    is_night_work: bool = False
    is_weekend: bool = False
    is_holiday: bool = False
    is_irregular: bool = False
    task_type: TaskType = TaskType.DRIVING
    status: TimeEntryStatus = TimeEntryStatus.APPROVED

    @property
    def is_payroll_eligible(self) -> bool:
        return self.status == TimeEntryStatus.APPROVED

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict for hashing (deterministic ordering)."""
        return {
            "entry_id": self.entry_id,
            "work_date": self.work_date.isoformat(),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "break_minutes": self.break_minutes,
            "is_night_work": self.is_night_work,
            "is_weekend": self.is_weekend,
            "is_holiday": self.is_holiday,
            "task_type": self.task_type.value,
        }


@dataclass
class PayrollComponent:
    """One itemized line of a payroll calculation."""

    component_type: ComponentType
    description: str
    amount: Decimal
    legal_reference: str
    hours: Decimal | None = None
    rate: Decimal | None = None
    work_date: date | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "component_type": self.component_type.value,
            "description": self.description,
            "hours": str(self.hours) if self.hours is not None else None,
            "rate": str(self.rate) if self.rate is not None else None,
            "amount": str(self.amount),
            "legal_reference": self.legal_reference,
            "work_date": self.work_date.isoformat() if self.work_date else None,
        }
