"""Hourly allowance composition from employee attributes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from transport_payroll.calculators.dates import age_on
from transport_payroll.calculators.types import (
    ComponentType,
    EmployeeSnapshot,
    JobCategory,
    VehicleWeightClass,
)
from transport_payroll.calculators.validation import ValidationResult

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

DRIVER_ALLOWANCE_RATES: dict[VehicleWeightClass, Decimal] = {
    VehicleWeightClass.LIGHT: Decimal("10.50"),
    VehicleWeightClass.MEDIUM: Decimal("15.00"),
    VehicleWeightClass.HEAVY: Decimal("22.50"),
    VehicleWeightClass.ARTICULATED: Decimal("28.00"),
}
DEFAULT_WEIGHT_CLASS = VehicleWeightClass.MEDIUM

WAREHOUSE_COPENHAGEN_RATE = Decimal("18.00")
WAREHOUSE_PROVINCE_RATE = Decimal("14.50")
MOVER_RATE = Decimal("20.00")
RENOVATION_RATE = Decimal("16.50")
VOCATIONAL_DEGREE_RATE = Decimal("12.00")

SENIORITY_RATE_PER_MONTH = Decimal("0.15")
SENIORITY_CAP_MONTHS = 60

ADR_RATE = Decimal("5.00")
FORKLIFT_RATE = Decimal("3.50")
CRANE_RATE = Decimal("4.00")

LOCAL_SALARY_CAP = Decimal("2.50")

# Postal codes outside 1000-2099 that belong to the Copenhagen wage zone
COPENHAGEN_SUBURBAN_CODES = frozenset(
    {
        2100, 2200, 2300, 2400, 2450, 2500, 2600, 2650, 2700, 2720,
        2730, 2750, 2770, 2800, 2820, 2830, 2840, 2850, 2860, 2870,
        2880, 2900, 2920, 2930, 2942, 2950, 2960, 2970, 2980, 2990,
    }
)


class LegalReference:
    """Citations used on allowance and pay components."""

    BASE_SALARY = "§ 6 Løn"
    DRIVER = "§ 2 Løn - Chaufførtillæg"
    WAREHOUSE = "§ 2 Løn - Lager/Terminaltillæg"
    MOVER = "§ 2 Løn - Flyttetillæg"
    RENOVATION = "§ 2 Løn - Renovationstillæg"
    VOCATIONAL = "§ 6 stk. 4 Faglært tillæg"
    SENIORITY = "§ 6 stk. 4 Anciennitetstillæg"
    ADR = "§ 2 Løn - ADR tillæg"
    FORKLIFT = "§ 2 Løn - Gaffeltruck tillæg"
    CRANE = "§ 2 Løn - Kran tillæg"
    LOCAL_SALARY = "§ 6 stk. 3 Lokalløn"
    SPECIAL_ALLOWANCE = "§ 8 Særligt løntillæg"
    PENSION = "§ 9 Pension"
    VACATION = "§ 12-13 Ferie"
    OVERTIME = "§ 7 Overarbejde"
    NIGHT = "§ 4 stk. 5 Forskudt tid"
    WEEKEND_HOLIDAY = "§ 11 Weekend- og helligdagstillæg"


@dataclass(frozen=True)
class AllowanceLine:
    """One qualifying hourly allowance."""

    component_type: ComponentType
    description: str
    rate: Decimal
    legal_reference: str


@dataclass(frozen=True)
class AllowanceBreakdown:
    """Hourly allowances and wage multipliers for one employee."""

    base_hourly_rate: Decimal
    youth_percentage: Decimal
    lines: tuple[AllowanceLine, ...] = ()
    warnings: tuple[str, ...] = field(default=())

    @property
    def total_hourly_allowance(self) -> Decimal:
        return sum((line.rate for line in self.lines), ZERO)

    @property
    def effective_base_rate(self) -> Decimal:
        """Base rate adjusted for the youth-worker percentage."""
        return self.base_hourly_rate * self.youth_percentage

    @property
    def effective_hourly_wage(self) -> Decimal:
        """Effective base rate plus all allowances."""
        return self.effective_base_rate + self.total_hourly_allowance

    def rate_for(self, component_type: ComponentType) -> Decimal:
        return sum(
            (line.rate for line in self.lines if line.component_type == component_type),
            ZERO,
        )


def is_copenhagen_postal_code(postal_code: str | None) -> bool:
    """Check if a postal code falls in the Copenhagen wage zone."""
    if not postal_code:
        return False
    try:
        code = int(postal_code.strip())
    except ValueError:
        return False
    return 1000 <= code <= 2099 or code in COPENHAGEN_SUBURBAN_CODES


def driver_license_valid(employee: EmployeeSnapshot, as_of: date) -> bool:
    if not employee.has_driver_license:
        return False
    expiry = employee.driver_license_expiry
    return expiry is None or expiry >= as_of


class AllowanceComposer:
    """Maps employee attributes to an hourly allowance bundle.

    Allowances are paid per hour on top of the base rate:
    - Job category allowance (driver weight class, warehouse zone, mover, renovation)
    - Vocational degree allowance
    - Seniority allowance, capped at 60 months
    - Certificate allowances (ADR, forklift, crane), summed independently
    - Local salary supplement, capped

    The youth-worker percentage scales the base rate only; allowances are
    always paid in full.
    """

    @staticmethod
    def job_category_allowance(
        employee: EmployeeSnapshot, as_of: date
    ) -> AllowanceLine | None:
        """Allowance for the employee's job category, if it qualifies."""
        category = employee.job_category

        if category == JobCategory.DRIVER:
            if not driver_license_valid(employee, as_of):
                return None
            weight_class = employee.vehicle_weight_class or DEFAULT_WEIGHT_CLASS
            return AllowanceLine(
                ComponentType.DRIVER_ALLOWANCE,
                f"Chaufførtillæg ({weight_class.value})",
                DRIVER_ALLOWANCE_RATES[weight_class],
                LegalReference.DRIVER,
            )

        if category in (JobCategory.WAREHOUSE, JobCategory.TERMINAL):
            if is_copenhagen_postal_code(employee.postal_code):
                rate, zone = WAREHOUSE_COPENHAGEN_RATE, "København"
            else:
                rate, zone = WAREHOUSE_PROVINCE_RATE, "Provins"
            return AllowanceLine(
                ComponentType.WAREHOUSE_ALLOWANCE,
                f"Lager/terminaltillæg ({zone})",
                rate,
                LegalReference.WAREHOUSE,
            )

        if category == JobCategory.MOVER:
            return AllowanceLine(
                ComponentType.MOVER_ALLOWANCE,
                "Flyttetillæg",
                MOVER_RATE,
                LegalReference.MOVER,
            )

        if category == JobCategory.RENOVATION:
            return AllowanceLine(
                ComponentType.RENOVATION_ALLOWANCE,
                "Renovationstillæg",
                RENOVATION_RATE,
                LegalReference.RENOVATION,
            )

        return None

    @staticmethod
    def seniority_allowance(seniority_months: int) -> Decimal:
        """Seniority allowance per hour, capped at 60 months."""
        months = min(max(seniority_months, 0), SENIORITY_CAP_MONTHS)
        return Decimal(months) * SENIORITY_RATE_PER_MONTH

    @staticmethod
    def youth_percentage(employee: EmployeeSnapshot, as_of: date) -> Decimal:
        """Share of the base rate paid to a youth worker."""
        if not employee.is_youth_worker or employee.birth_date is None:
            return Decimal("1.00")
        age = age_on(employee.birth_date, as_of)
        if age < 18:
            return Decimal("0.50")
        if age == 18:
            return Decimal("0.70")
        if age == 19:
            return Decimal("0.85")
        return Decimal("1.00")

    @classmethod
    def compose(cls, employee: EmployeeSnapshot, as_of: date) -> AllowanceBreakdown:
        """Compute the allowance bundle for an employee on a date."""
        lines: list[AllowanceLine] = []
        warnings: list[str] = []

        job_line = cls.job_category_allowance(employee, as_of)
        if job_line is not None:
            lines.append(job_line)
        elif employee.job_category == JobCategory.DRIVER:
            warnings.append("Driver allowance withheld: no valid driver license")

        if employee.has_vocational_degree:
            lines.append(
                AllowanceLine(
                    ComponentType.VOCATIONAL_ALLOWANCE,
                    "Faglært tillæg",
                    VOCATIONAL_DEGREE_RATE,
                    LegalReference.VOCATIONAL,
                )
            )

        seniority = cls.seniority_allowance(employee.seniority_months)
        if seniority > 0:
            lines.append(
                AllowanceLine(
                    ComponentType.SENIORITY_ALLOWANCE,
                    f"Anciennitetstillæg ({min(employee.seniority_months, SENIORITY_CAP_MONTHS)} mdr.)",
                    seniority,
                    LegalReference.SENIORITY,
                )
            )

        certificates = (
            (employee.has_adr_certificate, "ADR tillæg", ADR_RATE, LegalReference.ADR),
            (employee.has_forklift_certificate, "Gaffeltruck tillæg", FORKLIFT_RATE, LegalReference.FORKLIFT),
            (employee.has_crane_certificate, "Kran tillæg", CRANE_RATE, LegalReference.CRANE),
        )
        for held, description, rate, reference in certificates:
            if held:
                lines.append(
                    AllowanceLine(ComponentType.CERTIFICATE_ALLOWANCE, description, rate, reference)
                )

        supplement = employee.local_salary_supplement
        if supplement is not None and supplement > 0:
            if supplement > LOCAL_SALARY_CAP:
                logger.warning(
                    "Local salary supplement %s for employee %s capped at %s",
                    supplement,
                    employee.employee_id,
                    LOCAL_SALARY_CAP,
                )
                warnings.append(
                    f"Local salary supplement {supplement} capped at {LOCAL_SALARY_CAP}"
                )
                supplement = LOCAL_SALARY_CAP
            lines.append(
                AllowanceLine(
                    ComponentType.LOCAL_SALARY,
                    "Lokalløn",
                    supplement,
                    LegalReference.LOCAL_SALARY,
                )
            )

        return AllowanceBreakdown(
            base_hourly_rate=employee.base_hourly_rate,
            youth_percentage=cls.youth_percentage(employee, as_of),
            lines=tuple(lines),
            warnings=tuple(warnings),
        )

    @staticmethod
    def effective_hourly_wage(employee: EmployeeSnapshot, as_of: date) -> Decimal:
        """Effective hourly wage (youth-adjusted base plus allowances)."""
        return AllowanceComposer.compose(employee, as_of).effective_hourly_wage

    @staticmethod
    def validate_configuration(
        employee: EmployeeSnapshot, as_of: date
    ) -> ValidationResult:
        """Check that the employee's allowance-relevant attributes are consistent."""
        result = ValidationResult()

        if employee.job_category == JobCategory.DRIVER:
            if not employee.has_driver_license:
                result.add_error("Driver must hold a driver license")
            elif employee.driver_license_expiry and employee.driver_license_expiry < as_of:
                result.add_error(
                    f"Driver license expired on {employee.driver_license_expiry}"
                )
            if employee.has_driver_license and not employee.driver_license_number:
                result.add_warning("Driver license number is missing")

        if (
            employee.has_tachograph_card
            and employee.tachograph_card_expiry
            and employee.tachograph_card_expiry < as_of
        ):
            result.add_error(
                f"Tachograph card expired on {employee.tachograph_card_expiry}"
            )

        if employee.has_adr_certificate and not employee.adr_certificate_type:
            result.add_warning("ADR certificate type is missing")

        if employee.has_vocational_degree and not employee.vocational_degree_type:
            result.add_warning("Vocational degree type is missing")

        supplement = employee.local_salary_supplement
        if supplement is not None:
            if supplement < 0:
                result.add_error("Local salary supplement cannot be negative")
            elif supplement > LOCAL_SALARY_CAP:
                result.add_warning(
                    f"Local salary supplement {supplement} exceeds cap {LOCAL_SALARY_CAP}"
                )

        if employee.is_youth_worker and employee.birth_date is None:
            result.add_error("Youth worker requires a birth date")

        return result
