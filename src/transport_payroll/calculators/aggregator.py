"""Payroll period aggregation - main orchestrator."""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date, tzinfo
from decimal import Decimal
from typing import Any
from uuid import UUID

from transport_payroll.calculators.agreement_resolver import (
    AgreementNotFoundError,
    AgreementResolver,
)
from transport_payroll.calculators.allowances import (
    AllowanceBreakdown,
    AllowanceComposer,
    LegalReference,
)
from transport_payroll.calculators.component_builder import ComponentBuilder
from transport_payroll.calculators.special_allowance import SpecialAllowanceCalculator
from transport_payroll.calculators.time_categorizer import DayHours, TimeCategorizer
from transport_payroll.calculators.types import (
    AgreementSnapshot,
    ComponentType,
    EmployeeSnapshot,
    PayrollComponent,
    PayrollStatus,
    TimeEntryRecord,
)
from transport_payroll.calculators.validation import (
    CalculationError,
    require_valid_range,
)
from transport_payroll.config import Settings, get_settings

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

ALLOWANCE_TYPES = frozenset(
    {
        ComponentType.DRIVER_ALLOWANCE,
        ComponentType.WAREHOUSE_ALLOWANCE,
        ComponentType.MOVER_ALLOWANCE,
        ComponentType.RENOVATION_ALLOWANCE,
        ComponentType.VOCATIONAL_ALLOWANCE,
        ComponentType.SENIORITY_ALLOWANCE,
        ComponentType.CERTIFICATE_ALLOWANCE,
        ComponentType.LOCAL_SALARY,
    }
)
BASE_PAY_TYPES = ALLOWANCE_TYPES | {ComponentType.BASE_SALARY}
GROSS_TYPES = BASE_PAY_TYPES | {
    ComponentType.OVERTIME,
    ComponentType.NIGHT_ALLOWANCE,
    ComponentType.WEEKEND_ALLOWANCE,
    ComponentType.HOLIDAY_ALLOWANCE,
    ComponentType.SPECIAL_ALLOWANCE,
}


@dataclass
class PayrollResult:
    """Computed payroll for one employee and period."""

    employee_id: str
    agreement_name: str
    period_start: date
    period_end: date
    calculation_id: UUID
    inputs_fingerprint: str
    allowances: AllowanceBreakdown
    days: list[DayHours]
    components: list[PayrollComponent]
    warnings: list[str] = field(default_factory=list)
    status: PayrollStatus = PayrollStatus.PENDING_REVIEW

    def _hours(self, attr: str) -> Decimal:
        return ComponentBuilder.round_hours(
            sum((getattr(day, attr) for day in self.days), ZERO)
        )

    def _pay(self, *types: ComponentType) -> Decimal:
        return ComponentBuilder.sum_amounts(self.components, types)

    @property
    def effective_hourly_wage(self) -> Decimal:
        return self.allowances.effective_hourly_wage

    # Hour totals

    @property
    def total_hours(self) -> Decimal:
        return self._hours("total_hours")

    @property
    def regular_hours(self) -> Decimal:
        return self._hours("regular_hours")

    @property
    def overtime_tier1_hours(self) -> Decimal:
        return self._hours("overtime_tier1_hours")

    @property
    def overtime_tier2_hours(self) -> Decimal:
        return self._hours("overtime_tier2_hours")

    @property
    def overtime_hours(self) -> Decimal:
        return self.overtime_tier1_hours + self.overtime_tier2_hours

    @property
    def night_hours(self) -> Decimal:
        return self._hours("night_hours")

    @property
    def weekend_hours(self) -> Decimal:
        return self._hours("weekend_hours")

    @property
    def holiday_hours(self) -> Decimal:
        return self._hours("holiday_hours")

    # Pay totals

    @property
    def base_pay(self) -> Decimal:
        """Base salary plus hourly allowances."""
        return self._pay(*BASE_PAY_TYPES)

    @property
    def allowance_pay(self) -> Decimal:
        return self._pay(*ALLOWANCE_TYPES)

    @property
    def overtime_pay(self) -> Decimal:
        return self._pay(ComponentType.OVERTIME)

    @property
    def night_pay(self) -> Decimal:
        return self._pay(ComponentType.NIGHT_ALLOWANCE)

    @property
    def weekend_pay(self) -> Decimal:
        return self._pay(ComponentType.WEEKEND_ALLOWANCE)

    @property
    def holiday_pay(self) -> Decimal:
        return self._pay(ComponentType.HOLIDAY_ALLOWANCE)

    @property
    def special_allowance(self) -> Decimal:
        return self._pay(ComponentType.SPECIAL_ALLOWANCE)

    @property
    def pension_employer(self) -> Decimal:
        return self._pay(ComponentType.PENSION_EMPLOYER)

    @property
    def pension_employee(self) -> Decimal:
        return self._pay(ComponentType.PENSION_EMPLOYEE)

    @property
    def vacation_pay(self) -> Decimal:
        return self._pay(ComponentType.VACATION)

    @property
    def vacation_eligible_pay(self) -> Decimal:
        """Pay base for special allowance, pension and vacation."""
        return self.base_pay + self.overtime_pay

    @property
    def total_gross_pay(self) -> Decimal:
        return self._pay(*GROSS_TYPES)

    def to_dict(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "agreement": self.agreement_name,
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "calculation_id": str(self.calculation_id),
            "status": self.status.value,
            "effective_hourly_wage": str(self.effective_hourly_wage),
            "hours": {
                "total": str(self.total_hours),
                "regular": str(self.regular_hours),
                "overtime_tier1": str(self.overtime_tier1_hours),
                "overtime_tier2": str(self.overtime_tier2_hours),
                "night": str(self.night_hours),
                "weekend": str(self.weekend_hours),
                "holiday": str(self.holiday_hours),
            },
            "pay": {
                "base": str(self.base_pay),
                "overtime": str(self.overtime_pay),
                "night": str(self.night_pay),
                "weekend": str(self.weekend_pay),
                "holiday": str(self.holiday_pay),
                "special_allowance": str(self.special_allowance),
                "total_gross": str(self.total_gross_pay),
                "pension_employer": str(self.pension_employer),
                "pension_employee": str(self.pension_employee),
                "vacation": str(self.vacation_pay),
            },
            "components": [c.to_dict() for c in self.components],
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class PayrollJob:
    """Inputs for one employee in a batch run."""

    employee: EmployeeSnapshot
    entries: tuple[TimeEntryRecord, ...]
    period_start: date
    period_end: date


@dataclass
class BatchResult:
    """Result of calculating many employees for one period."""

    results: dict[str, PayrollResult] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def total_gross(self) -> Decimal:
        return sum((r.total_gross_pay for r in self.results.values()), ZERO)

    @property
    def error_count(self) -> int:
        return len(self.errors)


class PayrollAggregator:
    """Main payroll calculation engine.

    Calculation pipeline (stable order per employee):
    1) Compose hourly allowances and the youth percentage
    2) Categorize each day's approved entries into hour buckets
    3) Per-day overtime, night, weekend and holiday components
    4) Period base salary and one component per allowance
    5) Percentage components on vacation-eligible pay
       (special allowance, pension employer/employee, vacation)
    """

    def __init__(self, settings: Settings | None = None, tz: tzinfo | None = None):
        self.settings = settings or get_settings()
        self.categorizer = TimeCategorizer(tz or self.settings.tzinfo)
        self.special_allowance_calculator = SpecialAllowanceCalculator()

    def calculate(
        self,
        employee: EmployeeSnapshot,
        agreement: AgreementSnapshot,
        entries: Iterable[TimeEntryRecord],
        period_start: date,
        period_end: date,
    ) -> PayrollResult:
        """Calculate payroll for one employee and period.

        Raises:
            InvalidDateRangeError: If period_start is after period_end
            AgreementNotFoundError: If the agreement does not apply to the period
        """
        require_valid_range(period_start, period_end)
        if (
            agreement.agreement_type != employee.agreement_type
            or not agreement.is_valid_on(period_start)
        ):
            raise AgreementNotFoundError(employee.agreement_type, period_start)

        warnings: list[str] = []
        eligible = self._select_entries(employee, entries, period_start, period_end, warnings)

        allowances = AllowanceComposer.compose(employee, period_end)
        warnings.extend(allowances.warnings)
        if employee.base_hourly_rate < agreement.base_hourly_rate:
            warnings.append(
                f"Base rate {employee.base_hourly_rate} is below agreement minimum "
                f"{agreement.base_hourly_rate}"
            )

        days = list(
            self.categorizer.categorize(eligible, agreement.weekly_hours).values()
        )

        components = self._base_components(days, allowances)
        for day in days:
            components.extend(self._day_components(day, agreement, allowances))

        vacation_eligible = ComponentBuilder.sum_amounts(
            components, BASE_PAY_TYPES | {ComponentType.OVERTIME}
        )
        components.extend(
            self._percentage_components(vacation_eligible, employee, agreement, period_end)
        )
        warnings.extend(ComponentBuilder.validate_amounts(components))

        inputs_fingerprint = self._compute_inputs_fingerprint(
            [entry.to_canonical_dict() for entry in eligible]
        )
        calculation_id = self._generate_calculation_id(
            employee.employee_id,
            period_start,
            period_end,
            agreement.name,
            inputs_fingerprint,
        )

        result = PayrollResult(
            employee_id=employee.employee_id,
            agreement_name=agreement.name,
            period_start=period_start,
            period_end=period_end,
            calculation_id=calculation_id,
            inputs_fingerprint=inputs_fingerprint,
            allowances=allowances,
            days=days,
            components=components,
            warnings=warnings,
        )
        logger.debug(
            "Calculated payroll for employee %s %s..%s: gross=%s",
            employee.employee_id,
            period_start,
            period_end,
            result.total_gross_pay,
        )
        return result

    def calculate_batch(
        self,
        jobs: Sequence[PayrollJob],
        agreements: Iterable[AgreementSnapshot],
        max_workers: int | None = None,
    ) -> BatchResult:
        """Calculate many employees in parallel.

        Employees are independent: a fatal error for one employee is recorded
        in the batch errors and does not stop the others.
        """
        resolver = AgreementResolver(agreements)
        batch = BatchResult()

        def run(job: PayrollJob) -> PayrollResult:
            agreement = resolver.resolve(job.employee.agreement_type, job.period_start)
            return self.calculate(
                job.employee, agreement, job.entries, job.period_start, job.period_end
            )

        workers = max_workers or self.settings.batch_workers
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(run, job): job for job in jobs}
            for future in as_completed(futures):
                employee_id = futures[future].employee.employee_id
                try:
                    batch.results[employee_id] = future.result()
                except CalculationError as e:
                    logger.exception("Payroll calculation failed for employee %s", employee_id)
                    batch.errors[employee_id] = str(e)

        return batch

    # === Component Building ===

    def _select_entries(
        self,
        employee: EmployeeSnapshot,
        entries: Iterable[TimeEntryRecord],
        period_start: date,
        period_end: date,
        warnings: list[str],
    ) -> list[TimeEntryRecord]:
        """Keep approved entries for this employee inside the period."""
        selected = []
        for entry in entries:
            if entry.employee_id != employee.employee_id:
                warnings.append(f"Entry {entry.entry_id} belongs to another employee; skipped")
            elif not period_start <= entry.work_date <= period_end:
                warnings.append(f"Entry {entry.entry_id} is outside the period; skipped")
            elif not entry.is_payroll_eligible:
                warnings.append(
                    f"Entry {entry.entry_id} has status {entry.status.value}; skipped"
                )
            else:
                selected.append(entry)
        return sorted(selected, key=lambda e: (e.work_date, e.start_time, e.entry_id))

    def _day_components(
        self,
        day: DayHours,
        agreement: AgreementSnapshot,
        allowances: AllowanceBreakdown,
    ) -> list[PayrollComponent]:
        """Overtime and premium components for one day."""
        components = []
        wage = allowances.effective_hourly_wage

        if day.overtime_tier1_hours > 0:
            components.append(
                ComponentBuilder.create_hourly_component(
                    ComponentType.OVERTIME,
                    "Overarbejde (1-3 timer)",
                    day.overtime_tier1_hours,
                    agreement.overtime_tier1_rate,
                    LegalReference.OVERTIME,
                    work_date=day.work_date,
                )
            )
        if day.overtime_tier2_hours > 0:
            components.append(
                ComponentBuilder.create_hourly_component(
                    ComponentType.OVERTIME,
                    "Overarbejde (over 3 timer)",
                    day.overtime_tier2_hours,
                    agreement.overtime_tier2_rate,
                    LegalReference.OVERTIME,
                    work_date=day.work_date,
                )
            )
        if day.night_hours > 0:
            components.append(
                ComponentBuilder.create_hourly_component(
                    ComponentType.NIGHT_ALLOWANCE,
                    "Forskudt tid / nattillæg",
                    day.night_hours,
                    agreement.night_rate,
                    LegalReference.NIGHT,
                    work_date=day.work_date,
                )
            )
        if day.weekend_hours > 0:
            components.append(
                ComponentBuilder.create_premium_component(
                    ComponentType.WEEKEND_ALLOWANCE,
                    "Weekendtillæg",
                    day.weekend_hours,
                    wage,
                    agreement.weekend_premium_percent,
                    LegalReference.WEEKEND_HOLIDAY,
                    work_date=day.work_date,
                )
            )
        if day.holiday_hours > 0:
            components.append(
                ComponentBuilder.create_premium_component(
                    ComponentType.HOLIDAY_ALLOWANCE,
                    "Helligdagstillæg",
                    day.holiday_hours,
                    wage,
                    agreement.holiday_premium_percent,
                    LegalReference.WEEKEND_HOLIDAY,
                    work_date=day.work_date,
                )
            )
        return components

    def _base_components(
        self,
        days: list[DayHours],
        allowances: AllowanceBreakdown,
    ) -> list[PayrollComponent]:
        """Base salary and allowance components over the period's regular hours."""
        regular = sum((day.regular_hours for day in days), ZERO)
        if regular <= 0:
            return []

        components = [
            ComponentBuilder.create_hourly_component(
                ComponentType.BASE_SALARY,
                "Grundløn",
                regular,
                allowances.effective_base_rate,
                LegalReference.BASE_SALARY,
            )
        ]
        for line in allowances.lines:
            components.append(
                ComponentBuilder.create_hourly_component(
                    line.component_type,
                    line.description,
                    regular,
                    line.rate,
                    line.legal_reference,
                )
            )
        return components

    def _percentage_components(
        self,
        vacation_eligible: Decimal,
        employee: EmployeeSnapshot,
        agreement: AgreementSnapshot,
        as_of: date,
    ) -> list[PayrollComponent]:
        """Components derived from vacation-eligible pay.

        Hourly workers accrue the agreement's free-choice percentage, salaried
        workers the special allowance in force on as_of.
        """
        if vacation_eligible <= 0:
            return []

        special = self.special_allowance_calculator.calculate(
            employee,
            vacation_eligible,
            as_of,
            hourly_percent=agreement.special_allowance_percent,
        )
        special_description = "Fritvalgskonto" if special.is_savings else "Særligt løntillæg"

        specs = (
            (ComponentType.SPECIAL_ALLOWANCE, special_description,
             special.percentage, LegalReference.SPECIAL_ALLOWANCE),
            (ComponentType.PENSION_EMPLOYER, "Pension (arbejdsgiver)",
             agreement.pension_employer_percent, LegalReference.PENSION),
            (ComponentType.PENSION_EMPLOYEE, "Pension (medarbejder)",
             agreement.pension_employee_percent, LegalReference.PENSION),
            (ComponentType.VACATION, "Feriepenge",
             agreement.vacation_percent, LegalReference.VACATION),
        )
        return [
            ComponentBuilder.create_percentage_component(
                component_type, description, vacation_eligible, percent, reference
            )
            for component_type, description, percent, reference in specs
            if percent > 0
        ]

    # === Fingerprints ===

    def _generate_calculation_id(
        self,
        employee_id: str,
        period_start: date,
        period_end: date,
        agreement_name: str,
        inputs_fingerprint: str,
    ) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "employee_id": str(employee_id),
            "period_start": str(period_start),
            "period_end": str(period_end),
            "agreement": agreement_name,
            "engine_version": self.settings.engine_version,
            "inputs_fingerprint": inputs_fingerprint,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])

    def _compute_inputs_fingerprint(self, inputs_data: list[dict[str, Any]]) -> str:
        """Compute fingerprint of all inputs used in calculation."""
        json_str = json.dumps(inputs_data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]
