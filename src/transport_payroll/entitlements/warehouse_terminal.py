"""Warehouse and terminal differential pay."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from decimal import Decimal
from enum import Enum
from zoneinfo import ZoneInfo

from transport_payroll.calculators.dates import elapsed_seconds, localize
from transport_payroll.calculators.types import EmployeeSnapshot
from transport_payroll.calculators.validation import ValidationResult
from transport_payroll.entitlements.base import EntitlementCalculator, UsageLookup

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
SECONDS_PER_HOUR = Decimal("3600")
MINUTES_PER_HOUR = Decimal("60")
NIGHT_START_HOUR = 22
NIGHT_END_HOUR = 6
LONG_SHIFT_HOURS = Decimal("12")


class TemperatureZone(str, Enum):
    NORMAL = "NORMAL"
    REFRIGERATED = "REFRIGERATED"
    FREEZER = "FREEZER"
    DEEP_FREEZE = "DEEP_FREEZE"


class GeographicZone(str, Enum):
    COPENHAGEN = "COPENHAGEN"
    AARHUS = "AARHUS"
    ODENSE = "ODENSE"
    AALBORG = "AALBORG"
    OTHER_CITIES = "OTHER_CITIES"
    RURAL = "RURAL"


class TerminalType(str, Enum):
    STANDARD = "STANDARD"
    CROSS_DOCK = "CROSS_DOCK"
    SORTING = "SORTING"
    DISTRIBUTION = "DISTRIBUTION"


class LoadingUnit(str, Enum):
    STANDARD_PALLET = "STANDARD_PALLET"
    HEAVY_PALLET = "HEAVY_PALLET"
    CONTAINER_20FT = "CONTAINER_20FT"
    CONTAINER_40FT = "CONTAINER_40FT"


TEMPERATURE_RATES: dict[TemperatureZone, Decimal] = {
    TemperatureZone.NORMAL: ZERO,
    TemperatureZone.REFRIGERATED: Decimal("8.50"),
    TemperatureZone.FREEZER: Decimal("15.00"),
    TemperatureZone.DEEP_FREEZE: Decimal("20.00"),
}

GEOGRAPHIC_RATES: dict[GeographicZone, Decimal] = {
    GeographicZone.COPENHAGEN: Decimal("12.00"),
    GeographicZone.AARHUS: Decimal("8.00"),
    GeographicZone.ODENSE: Decimal("6.50"),
    GeographicZone.AALBORG: Decimal("6.00"),
    GeographicZone.OTHER_CITIES: Decimal("4.00"),
    GeographicZone.RURAL: ZERO,
}

TERMINAL_BASE_RATE = Decimal("5.00")
TERMINAL_ADD_ONS: dict[TerminalType, Decimal] = {
    TerminalType.CROSS_DOCK: Decimal("3.50"),
    TerminalType.SORTING: Decimal("4.00"),
}
NIGHT_TERMINAL_BONUS = Decimal("8.00")

LOADING_RATES: dict[LoadingUnit, Decimal] = {
    LoadingUnit.STANDARD_PALLET: Decimal("8.50"),
    LoadingUnit.HEAVY_PALLET: Decimal("12.00"),
    LoadingUnit.CONTAINER_20FT: Decimal("150.00"),
    LoadingUnit.CONTAINER_40FT: Decimal("250.00"),
}
HEAVY_PALLET_MIN_KG = Decimal("500")
MANUAL_HANDLING_RATE = Decimal("15.00")


@dataclass(frozen=True)
class WarehouseShift:
    """Itemized pay for one warehouse or terminal shift."""

    employee_id: str
    work_date: date
    start_time: datetime
    end_time: datetime
    break_minutes: int
    hours_worked: Decimal
    temperature_zone: TemperatureZone
    geographic_zone: GeographicZone
    terminal_type: TerminalType
    is_night_shift: bool
    hourly_rate: Decimal
    base_payment: Decimal
    temperature_supplement: Decimal
    geographic_allowance: Decimal
    terminal_supplement: Decimal

    @property
    def total_payment(self) -> Decimal:
        return (
            self.base_payment
            + self.temperature_supplement
            + self.geographic_allowance
            + self.terminal_supplement
        )


@dataclass(frozen=True)
class LoadingActivity:
    """Piece-rate pay for loading or unloading."""

    employee_id: str
    work_date: date
    loading_unit: LoadingUnit
    quantity: int
    rate_per_unit: Decimal
    weight_kg: Decimal | None = None
    manual_handling_hours: Decimal = ZERO
    total_payment: Decimal = ZERO


@dataclass(frozen=True)
class MonthlyWarehouseSummary:
    employee_id: str
    year: int
    month: int
    total_hours: Decimal
    refrigerated_hours: Decimal
    freezer_hours: Decimal
    night_shift_hours: Decimal
    total_base_payment: Decimal
    total_temperature_supplements: Decimal
    total_geographic_allowances: Decimal
    total_terminal_supplements: Decimal
    total_loading_payment: Decimal

    @property
    def total_earnings(self) -> Decimal:
        return (
            self.total_base_payment
            + self.total_temperature_supplements
            + self.total_geographic_allowances
            + self.total_terminal_supplements
            + self.total_loading_payment
        )


def terminal_rate(terminal_type: TerminalType, night_shift: bool) -> Decimal:
    """Hourly terminal supplement: base, type add-on and night bonus."""
    rate = TERMINAL_BASE_RATE + TERMINAL_ADD_ONS.get(terminal_type, ZERO)
    if night_shift:
        rate += NIGHT_TERMINAL_BONUS
    return rate


def loading_rate(unit: LoadingUnit, weight_kg: Decimal | None = None) -> Decimal:
    """Rate per loading unit; standard pallets of 500 kg or more pay the heavy rate."""
    if (
        unit == LoadingUnit.STANDARD_PALLET
        and weight_kg is not None
        and weight_kg >= HEAVY_PALLET_MIN_KG
    ):
        return LOADING_RATES[LoadingUnit.HEAVY_PALLET]
    return LOADING_RATES[unit]


class WarehouseTerminalCalculator(EntitlementCalculator[WarehouseShift]):
    """Calculates warehouse and terminal shift pay.

    Three independent differentials are added to the base hourly rate, each
    paid for every hour of the shift: temperature zone, geographic zone and
    the terminal supplement. A shift starting between 22:00 and 06:00 earns
    the night terminal bonus.
    """

    legal_reference = "Lager- og Terminaloverenskomst"

    def __init__(self, usage: UsageLookup | None = None, tz: tzinfo | None = None):
        super().__init__(usage)
        self.tz = tz or ZoneInfo("Europe/Copenhagen")

    def is_night_start(self, start_time: datetime) -> bool:
        hour = localize(start_time, self.tz).astimezone(self.tz).hour
        return hour >= NIGHT_START_HOUR or hour < NIGHT_END_HOUR

    def hours_between(self, start_time: datetime, end_time: datetime, break_minutes: int = 0) -> Decimal:
        """Net shift hours, never negative."""
        seconds = Decimal(elapsed_seconds(start_time, end_time, self.tz))
        hours = seconds / SECONDS_PER_HOUR - Decimal(break_minutes) / MINUTES_PER_HOUR
        return max(hours, ZERO)

    def calculate(
        self,
        employee: EmployeeSnapshot,
        work_date: date,
        start_time: datetime,
        end_time: datetime,
        temperature_zone: TemperatureZone = TemperatureZone.NORMAL,
        geographic_zone: GeographicZone = GeographicZone.RURAL,
        terminal_type: TerminalType = TerminalType.STANDARD,
        hourly_rate: Decimal | None = None,
        break_minutes: int = 0,
        night_shift: bool | None = None,
    ) -> WarehouseShift:
        """Calculate pay for one shift.

        night_shift overrides the start-time rule when the roster marks the
        shift explicitly; validate() reports a disagreement.
        """
        hours = self.hours_between(start_time, end_time, break_minutes)
        night = self.is_night_start(start_time) if night_shift is None else night_shift
        rate = employee.base_hourly_rate if hourly_rate is None else hourly_rate

        shift = WarehouseShift(
            employee_id=employee.employee_id,
            work_date=work_date,
            start_time=start_time,
            end_time=end_time,
            break_minutes=break_minutes,
            hours_worked=hours,
            temperature_zone=temperature_zone,
            geographic_zone=geographic_zone,
            terminal_type=terminal_type,
            is_night_shift=night,
            hourly_rate=rate,
            base_payment=self.money(rate * hours),
            temperature_supplement=self.money(TEMPERATURE_RATES[temperature_zone] * hours),
            geographic_allowance=self.money(GEOGRAPHIC_RATES[geographic_zone] * hours),
            terminal_supplement=self.money(terminal_rate(terminal_type, night) * hours),
        )
        logger.info(
            "Calculated warehouse shift for employee %s on %s: %s hours, total %s",
            employee.employee_id,
            work_date,
            hours,
            shift.total_payment,
        )
        return shift

    def validate(self, employee: EmployeeSnapshot, calculation: WarehouseShift) -> ValidationResult:
        result = ValidationResult()

        if calculation.hours_worked <= 0:
            result.add_error("Hours worked must be positive")
        if calculation.hours_worked > LONG_SHIFT_HOURS:
            result.add_warning(
                f"Unusually long shift ({calculation.hours_worked:.1f} hours)"
            )
        if localize(calculation.start_time, self.tz) >= localize(calculation.end_time, self.tz):
            result.add_error("Shift start must be before shift end")
        if self.is_night_start(calculation.start_time) != calculation.is_night_shift:
            result.add_warning("Night shift flag does not match the shift start time")

        return result

    def calculate_loading(
        self,
        employee: EmployeeSnapshot,
        work_date: date,
        loading_unit: LoadingUnit,
        quantity: int,
        weight_kg: Decimal | None = None,
        manual_handling_hours: Decimal = ZERO,
    ) -> LoadingActivity:
        """Calculate piece-rate pay for loading work plus manual handling hours."""
        rate = loading_rate(loading_unit, weight_kg)
        total = rate * quantity
        if manual_handling_hours > 0:
            total += MANUAL_HANDLING_RATE * manual_handling_hours
        return LoadingActivity(
            employee_id=employee.employee_id,
            work_date=work_date,
            loading_unit=loading_unit,
            quantity=quantity,
            rate_per_unit=rate,
            weight_kg=weight_kg,
            manual_handling_hours=manual_handling_hours,
            total_payment=self.money(total),
        )

    @staticmethod
    def monthly_summary(
        employee_id: str,
        year: int,
        month: int,
        shifts: Iterable[WarehouseShift],
        loading: Iterable[LoadingActivity] = (),
    ) -> MonthlyWarehouseSummary:
        """Aggregate one employee's shifts and loading work for a month."""
        shifts = [
            s for s in shifts
            if s.employee_id == employee_id
            and s.work_date.year == year
            and s.work_date.month == month
        ]
        loading = [
            a for a in loading
            if a.employee_id == employee_id
            and a.work_date.year == year
            and a.work_date.month == month
        ]

        def total(values: Iterable[Decimal]) -> Decimal:
            return sum(values, ZERO)

        return MonthlyWarehouseSummary(
            employee_id=employee_id,
            year=year,
            month=month,
            total_hours=total(s.hours_worked for s in shifts),
            refrigerated_hours=total(
                s.hours_worked for s in shifts
                if s.temperature_zone == TemperatureZone.REFRIGERATED
            ),
            freezer_hours=total(
                s.hours_worked for s in shifts
                if s.temperature_zone in (TemperatureZone.FREEZER, TemperatureZone.DEEP_FREEZE)
            ),
            night_shift_hours=total(s.hours_worked for s in shifts if s.is_night_shift),
            total_base_payment=total(s.base_payment for s in shifts),
            total_temperature_supplements=total(s.temperature_supplement for s in shifts),
            total_geographic_allowances=total(s.geographic_allowance for s in shifts),
            total_terminal_supplements=total(s.terminal_supplement for s in shifts),
            total_loading_payment=total(a.total_payment for a in loading),
        )
