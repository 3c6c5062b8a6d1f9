"""Cross-border trip pay and the weekly guarantee."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from transport_payroll.calculators.dates import calendar_days, is_weekend, iter_days
from transport_payroll.calculators.holidays import is_holiday
from transport_payroll.calculators.types import EmployeeSnapshot
from transport_payroll.calculators.validation import ValidationResult, require_valid_range
from transport_payroll.entitlements.base import EntitlementCalculator

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

STANDARD_DAY_RATE = Decimal("850")
WEEKEND_DAY_RATE = Decimal("1050")
RATE_PER_KM = Decimal("3.50")
MINIMUM_KM_PER_TRIP = Decimal("500")
MAXIMUM_KM_PER_DAY = Decimal("800")
FOREIGN_DAILY_ALLOWANCE = Decimal("450")
WEEKLY_GUARANTEE = Decimal("6500")


class TripType(str, Enum):
    """Cross-border trip types."""

    FIXED_ROUTE = "FIXED_ROUTE"
    VARIABLE = "VARIABLE"
    LONG_HAUL = "LONG_HAUL"
    SHORT_HAUL = "SHORT_HAUL"


@dataclass(frozen=True)
class CrossBorderTrip:
    """Itemized pay for one cross-border trip."""

    employee_id: str
    trip_type: TripType
    start_date: date
    end_date: date
    start_country: str
    destination_country: str
    total_kilometers: Decimal
    days_count: int
    weekend_days: int
    holiday_days: int
    paid_kilometers: Decimal
    daily_payment: Decimal
    kilometer_payment: Decimal
    foreign_allowance: Decimal
    parking_expenses: Decimal
    toll_expenses: Decimal

    @property
    def expenses(self) -> Decimal:
        return self.parking_expenses + self.toll_expenses

    @property
    def total_payment(self) -> Decimal:
        return (
            self.daily_payment
            + self.kilometer_payment
            + self.foreign_allowance
            + self.expenses
        )


@dataclass(frozen=True)
class WeeklyGuarantee:
    """Weekly guaranteed minimum for cross-border earnings."""

    employee_id: str
    year: int
    week_number: int
    actual_earnings: Decimal
    guaranteed_minimum: Decimal
    top_up: Decimal
    trips_count: int
    total_kilometers: Decimal

    @property
    def guaranteed_earnings(self) -> Decimal:
        return self.actual_earnings + self.top_up


@dataclass(frozen=True)
class CrossBorderMonthlySummary:
    """Aggregated cross-border earnings over a set of trips."""

    total_trips: int
    total_days: int
    total_kilometers: Decimal
    total_daily_payment: Decimal
    total_kilometer_payment: Decimal
    total_allowances: Decimal
    total_expenses: Decimal
    total_earnings: Decimal
    average_per_trip: Decimal
    average_per_day: Decimal


class CrossBorderCalculator(EntitlementCalculator[CrossBorderTrip]):
    """Calculates pay for cross-border trips.

    Payment per trip:
    - A day rate for every calendar day, higher on weekends and public holidays
    - A kilometer rate, only for trips of at least 500 km, capped at 800 km/day
    - A flat foreign allowance per day
    - Parking and toll expenses passed through

    Fixed-route drivers are guaranteed a weekly minimum; variable drivers
    are paid per trip with no guarantee.
    """

    legal_reference = "Grænseoverskridende Overenskomst"

    def calculate(
        self,
        employee: EmployeeSnapshot,
        trip_type: TripType,
        start_date: date,
        end_date: date,
        total_kilometers: Decimal,
        destination_country: str,
        start_country: str = "DK",
        parking_expenses: Decimal = ZERO,
        toll_expenses: Decimal = ZERO,
    ) -> CrossBorderTrip:
        """Calculate pay for one trip.

        Raises:
            InvalidDateRangeError: If the trip starts after it ends
        """
        require_valid_range(start_date, end_date)
        days = calendar_days(start_date, end_date)

        weekend_days = holiday_days = 0
        for day in iter_days(start_date, end_date):
            if is_weekend(day):
                weekend_days += 1
            elif is_holiday(day):
                holiday_days += 1
        premium_days = weekend_days + holiday_days
        daily_payment = (
            STANDARD_DAY_RATE * (days - premium_days) + WEEKEND_DAY_RATE * premium_days
        )

        paid_km = ZERO
        if total_kilometers >= MINIMUM_KM_PER_TRIP:
            paid_km = min(total_kilometers, MAXIMUM_KM_PER_DAY * days)

        trip = CrossBorderTrip(
            employee_id=employee.employee_id,
            trip_type=trip_type,
            start_date=start_date,
            end_date=end_date,
            start_country=start_country,
            destination_country=destination_country,
            total_kilometers=total_kilometers,
            days_count=days,
            weekend_days=weekend_days,
            holiday_days=holiday_days,
            paid_kilometers=paid_km,
            daily_payment=self.money(daily_payment),
            kilometer_payment=self.money(paid_km * RATE_PER_KM),
            foreign_allowance=self.money(FOREIGN_DAILY_ALLOWANCE * days),
            parking_expenses=self.money(max(parking_expenses, ZERO)),
            toll_expenses=self.money(max(toll_expenses, ZERO)),
        )
        logger.info(
            "Calculated cross-border trip for employee %s: %s days, %s km, total %s",
            employee.employee_id,
            days,
            total_kilometers,
            trip.total_payment,
        )
        return trip

    def validate(self, employee: EmployeeSnapshot, calculation: CrossBorderTrip) -> ValidationResult:
        result = ValidationResult()

        if calculation.total_kilometers < 0:
            result.add_error("Kilometers cannot be negative")
        elif 0 < calculation.total_kilometers < MINIMUM_KM_PER_TRIP:
            result.add_warning(
                f"Trip is below the {MINIMUM_KM_PER_TRIP} km minimum; no kilometer allowance is paid"
            )

        if calculation.start_country.upper() == calculation.destination_country.upper():
            result.add_warning("Start and destination are the same country")

        average = calculation.total_kilometers / calculation.days_count
        if average > MAXIMUM_KM_PER_DAY:
            result.add_warning(
                f"Average distance {average:.0f} km/day exceeds the maximum of "
                f"{MAXIMUM_KM_PER_DAY} km/day"
            )

        return result

    @staticmethod
    def weekly_guarantee(
        employee: EmployeeSnapshot,
        trips: Iterable[CrossBorderTrip],
        year: int,
        week_number: int,
    ) -> WeeklyGuarantee:
        """Compute the weekly guarantee top-up for a fixed-route driver.

        Variable drivers have no guarantee, so minimum and top-up are zero.
        """
        trips = list(trips)
        actual = sum((trip.total_payment for trip in trips), ZERO)
        kilometers = sum((trip.total_kilometers for trip in trips), ZERO)

        if employee.is_fixed_cross_border:
            minimum = WEEKLY_GUARANTEE
            top_up = max(minimum - actual, ZERO)
        else:
            minimum = top_up = ZERO

        if top_up > 0:
            logger.info(
                "Weekly guarantee top-up of %s for employee %s (week %s/%s)",
                top_up,
                employee.employee_id,
                week_number,
                year,
            )

        return WeeklyGuarantee(
            employee_id=employee.employee_id,
            year=year,
            week_number=week_number,
            actual_earnings=actual,
            guaranteed_minimum=minimum,
            top_up=top_up,
            trips_count=len(trips),
            total_kilometers=kilometers,
        )

    @staticmethod
    def monthly_summary(trips: Iterable[CrossBorderTrip]) -> CrossBorderMonthlySummary:
        trips = list(trips)
        total_days = sum(trip.days_count for trip in trips)
        total_earnings = sum((trip.total_payment for trip in trips), ZERO)
        return CrossBorderMonthlySummary(
            total_trips=len(trips),
            total_days=total_days,
            total_kilometers=sum((trip.total_kilometers for trip in trips), ZERO),
            total_daily_payment=sum((trip.daily_payment for trip in trips), ZERO),
            total_kilometer_payment=sum((trip.kilometer_payment for trip in trips), ZERO),
            total_allowances=sum((trip.foreign_allowance for trip in trips), ZERO),
            total_expenses=sum((trip.expenses for trip in trips), ZERO),
            total_earnings=total_earnings,
            average_per_trip=(
                EntitlementCalculator.money(total_earnings / len(trips)) if trips else ZERO
            ),
            average_per_day=(
                EntitlementCalculator.money(total_earnings / total_days) if total_days else ZERO
            ),
        )
