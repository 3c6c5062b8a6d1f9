"""Waste collection piecework with a daily guarantee."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from transport_payroll.calculators.component_builder import ComponentBuilder
from transport_payroll.calculators.types import EmployeeSnapshot
from transport_payroll.calculators.validation import ValidationResult
from transport_payroll.entitlements.base import EntitlementCalculator, apply_guarantee_floor

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
MINUTES_PER_HOUR = Decimal("60")
DAILY_GUARANTEE = Decimal("850")
MAX_REASONABLE_CONTAINERS = 1000
GUARANTEE_SUSPICIOUS_CONTAINERS = 100
MAX_WEATHER_SHARE = Decimal("0.30")


class ContainerType(str, Enum):
    MINI = "MINI"
    STANDARD = "STANDARD"
    LARGE = "LARGE"
    EXTRA_LARGE = "EXTRA_LARGE"
    PAPER_RECYCLING = "PAPER_RECYCLING"
    GLASS_RECYCLING = "GLASS_RECYCLING"


class RouteDifficulty(str, Enum):
    EASY = "EASY"
    NORMAL = "NORMAL"
    DIFFICULT = "DIFFICULT"
    VERY_DIFFICULT = "VERY_DIFFICULT"


class WeatherCondition(str, Enum):
    NORMAL = "NORMAL"
    RAIN = "RAIN"
    SNOW = "SNOW"
    ICE = "ICE"
    EXTREME_HEAT = "EXTREME_HEAT"


PIECE_RATES: dict[ContainerType, Decimal] = {
    ContainerType.MINI: Decimal("2.50"),
    ContainerType.STANDARD: Decimal("4.00"),
    ContainerType.LARGE: Decimal("6.50"),
    ContainerType.EXTRA_LARGE: Decimal("9.00"),
    ContainerType.PAPER_RECYCLING: Decimal("3.00"),
    ContainerType.GLASS_RECYCLING: Decimal("3.50"),
}

DIFFICULTY_FACTORS: dict[RouteDifficulty, Decimal] = {
    RouteDifficulty.EASY: Decimal("1.0"),
    RouteDifficulty.NORMAL: Decimal("1.15"),
    RouteDifficulty.DIFFICULT: Decimal("1.3"),
    RouteDifficulty.VERY_DIFFICULT: Decimal("1.5"),
}

WEATHER_PERCENT: dict[WeatherCondition, Decimal] = {
    WeatherCondition.NORMAL: ZERO,
    WeatherCondition.RAIN: Decimal("10"),
    WeatherCondition.SNOW: Decimal("15"),
    WeatherCondition.ICE: Decimal("20"),
    WeatherCondition.EXTREME_HEAT: Decimal("12"),
}

UNDERGROUND_SURCHARGE = Decimal("5.00")
LOCKED_SURCHARGE = Decimal("2.00")
HEAVY_SURCHARGE = Decimal("3.50")
DIFFICULT_ACCESS_SURCHARGE = Decimal("4.00")

# Standard handling minutes per container
TIME_STANDARDS: dict[ContainerType, Decimal] = {
    ContainerType.MINI: Decimal("1.5"),
    ContainerType.STANDARD: Decimal("2.0"),
    ContainerType.LARGE: Decimal("2.5"),
    ContainerType.EXTRA_LARGE: Decimal("3.5"),
}
DEFAULT_TIME_STANDARD = Decimal("2.0")
UNDERGROUND_EXTRA_MINUTES = Decimal("0.5")
LOCKED_EXTRA_MINUTES = Decimal("0.3")
ACCESS_EXTRA_MINUTES = Decimal("0.7")


@dataclass(frozen=True)
class ContainerCollection:
    """A batch of identical containers emptied during a shift."""

    container_type: ContainerType
    count: int
    is_underground: bool = False
    is_locked: bool = False
    is_heavy: bool = False
    has_difficult_access: bool = False

    @property
    def surcharge_per_container(self) -> Decimal:
        surcharge = ZERO
        if self.is_underground:
            surcharge += UNDERGROUND_SURCHARGE
        if self.is_locked:
            surcharge += LOCKED_SURCHARGE
        if self.is_heavy:
            surcharge += HEAVY_SURCHARGE
        if self.has_difficult_access:
            surcharge += DIFFICULT_ACCESS_SURCHARGE
        return surcharge

    @property
    def minutes_per_container(self) -> Decimal:
        minutes = TIME_STANDARDS.get(self.container_type, DEFAULT_TIME_STANDARD)
        if self.is_underground:
            minutes += UNDERGROUND_EXTRA_MINUTES
        if self.is_locked:
            minutes += LOCKED_EXTRA_MINUTES
        if self.has_difficult_access:
            minutes += ACCESS_EXTRA_MINUTES
        return minutes


@dataclass(frozen=True)
class WasteCollectionShift:
    """Itemized piecework pay for one collection shift."""

    employee_id: str
    work_date: date
    collections: tuple[ContainerCollection, ...]
    route_difficulty: RouteDifficulty
    weather_condition: WeatherCondition
    total_containers: int
    base_payment: Decimal
    difficulty_adjustment: Decimal
    weather_compensation: Decimal
    special_allowances: Decimal
    total_payment: Decimal
    guaranteed_minimum: Decimal
    actual_payment: Decimal
    estimated_hours: Decimal

    @property
    def guarantee_applied(self) -> bool:
        return self.actual_payment > self.total_payment


@dataclass(frozen=True)
class DailyCollectionSummary:
    """Container counts and earnings for one employee and day."""

    employee_id: str
    work_date: date
    total_containers: int
    container_breakdown: dict[ContainerType, int]
    total_earnings: Decimal
    average_per_container: Decimal
    guarantee_applied: bool
    hours_worked: Decimal


class WasteCollectionCalculator(EntitlementCalculator[WasteCollectionShift]):
    """Calculates piecework pay for waste collection shifts.

    Piece rates per container are scaled by a route difficulty factor, then
    raised by a weather compensation percentage. Flat per-container
    surcharges are added for underground, locked, heavy and hard-to-reach
    bins. The daily guarantee floors the final payment.
    """

    legal_reference = "Renovationsoverenskomst - Akkord"

    def calculate(
        self,
        employee: EmployeeSnapshot,
        work_date: date,
        collections: Sequence[ContainerCollection],
        route_difficulty: RouteDifficulty = RouteDifficulty.NORMAL,
        weather_condition: WeatherCondition = WeatherCondition.NORMAL,
    ) -> WasteCollectionShift:
        base = sum(
            (PIECE_RATES[c.container_type] * c.count for c in collections), ZERO
        )
        containers = sum(c.count for c in collections)

        factor = DIFFICULTY_FACTORS[route_difficulty]
        adjusted = base * factor
        weather = ComponentBuilder.percent_of(adjusted, WEATHER_PERCENT[weather_condition])
        surcharges = sum((c.surcharge_per_container * c.count for c in collections), ZERO)

        total = self.money(adjusted + weather + surcharges)
        actual = apply_guarantee_floor(total, DAILY_GUARANTEE)

        shift = WasteCollectionShift(
            employee_id=employee.employee_id,
            work_date=work_date,
            collections=tuple(collections),
            route_difficulty=route_difficulty,
            weather_condition=weather_condition,
            total_containers=containers,
            base_payment=self.money(base),
            difficulty_adjustment=self.money(adjusted - base),
            weather_compensation=self.money(weather),
            special_allowances=self.money(surcharges),
            total_payment=total,
            guaranteed_minimum=DAILY_GUARANTEE,
            actual_payment=actual,
            estimated_hours=self.estimate_hours(collections),
        )
        logger.info(
            "Calculated waste collection shift for employee %s on %s: %s containers, "
            "total %s, paid %s",
            employee.employee_id,
            work_date,
            containers,
            total,
            actual,
        )
        return shift

    @staticmethod
    def estimate_hours(collections: Iterable[ContainerCollection]) -> Decimal:
        """Standard handling time, rounded up to the next tenth of an hour."""
        minutes = sum((c.minutes_per_container * c.count for c in collections), ZERO)
        return ComponentBuilder.ceil_to_tenth(minutes / MINUTES_PER_HOUR)

    def validate(
        self, employee: EmployeeSnapshot, calculation: WasteCollectionShift
    ) -> ValidationResult:
        result = ValidationResult()

        if not calculation.collections:
            result.add_error("A shift needs at least one container collection")
        elif calculation.total_containers == 0:
            result.add_error("No containers were collected")

        for collection in calculation.collections:
            if collection.count <= 0:
                result.add_error(
                    f"Container count for {collection.container_type.value} must be positive"
                )
            if collection.container_type == ContainerType.MINI and collection.is_heavy:
                result.add_warning("Mini containers are rarely heavy; check the registration")
            if collection.is_underground and collection.has_difficult_access:
                result.add_warning(
                    "Underground container registered with difficult access; check the registration"
                )

        if calculation.total_containers > MAX_REASONABLE_CONTAINERS:
            result.add_warning(
                f"{calculation.total_containers} containers in one shift is unusually high"
            )

        if (
            calculation.guarantee_applied
            and calculation.total_containers > GUARANTEE_SUSPICIOUS_CONTAINERS
        ):
            result.add_warning(
                f"Daily guarantee applied despite {calculation.total_containers} containers"
            )

        if calculation.weather_compensation > calculation.base_payment * MAX_WEATHER_SHARE:
            result.add_warning("Weather compensation exceeds 30% of the base payment")

        return result

    @staticmethod
    def daily_summary(shifts: Iterable[WasteCollectionShift]) -> list[DailyCollectionSummary]:
        """Summarize shifts per employee and day."""
        grouped: dict[tuple[str, date], list[WasteCollectionShift]] = {}
        for shift in shifts:
            grouped.setdefault((shift.employee_id, shift.work_date), []).append(shift)

        summaries = []
        for (employee_id, work_date), day_shifts in sorted(grouped.items()):
            breakdown: dict[ContainerType, int] = {}
            for shift in day_shifts:
                for collection in shift.collections:
                    breakdown[collection.container_type] = (
                        breakdown.get(collection.container_type, 0) + collection.count
                    )
            containers = sum(shift.total_containers for shift in day_shifts)
            earnings = sum((shift.actual_payment for shift in day_shifts), ZERO)
            summaries.append(
                DailyCollectionSummary(
                    employee_id=employee_id,
                    work_date=work_date,
                    total_containers=containers,
                    container_breakdown=breakdown,
                    total_earnings=earnings,
                    average_per_container=(
                        EntitlementCalculator.money(earnings / containers) if containers else ZERO
                    ),
                    guarantee_applied=any(s.guarantee_applied for s in day_shifts),
                    hours_worked=sum((s.estimated_hours for s in day_shifts), ZERO),
                )
            )
        return summaries
