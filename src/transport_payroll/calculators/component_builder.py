"""Payroll component builder with deterministic rounding."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal

from transport_payroll.calculators.types import ComponentType, PayrollComponent

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class ComponentBuilder:
    """Builds payroll components with consistent rounding.

    Rounding:
    - Internal compute at full Decimal precision
    - Amounts to 2 decimals (ROUND_HALF_UP) when a component is built
    - Totals are always sums of already-rounded component amounts
    """

    PRECISION = Decimal("0.0001")  # 4 decimal places for hour quantities
    OUTPUT_PRECISION = Decimal("0.01")  # 2 decimal places for money
    HOUR_STEP = Decimal("0.1")

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places."""
        return amount.quantize(ComponentBuilder.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def round_hours(hours: Decimal) -> Decimal:
        """Round an hour quantity to 4 decimal places."""
        return hours.quantize(ComponentBuilder.PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def ceil_to_tenth(hours: Decimal) -> Decimal:
        """Round hours up to the next tenth of an hour."""
        return hours.quantize(ComponentBuilder.HOUR_STEP, rounding=ROUND_CEILING)

    @staticmethod
    def percent_of(base: Decimal, percent: Decimal) -> Decimal:
        """Apply a percentage expressed as e.g. 12.5 for 12.5%."""
        return base * percent / HUNDRED

    @staticmethod
    def create_hourly_component(
        component_type: ComponentType,
        description: str,
        hours: Decimal,
        rate: Decimal,
        legal_reference: str,
        work_date: date | None = None,
    ) -> PayrollComponent:
        """Create a component paid as hours times a rate."""
        return PayrollComponent(
            component_type=component_type,
            description=description,
            hours=ComponentBuilder.round_hours(hours),
            rate=rate,
            amount=ComponentBuilder.round_to_cents(hours * rate),
            legal_reference=legal_reference,
            work_date=work_date,
        )

    @staticmethod
    def create_premium_component(
        component_type: ComponentType,
        description: str,
        hours: Decimal,
        hourly_wage: Decimal,
        percent: Decimal,
        legal_reference: str,
        work_date: date | None = None,
    ) -> PayrollComponent:
        """Create a premium paid as a percentage of the hourly wage."""
        rate = ComponentBuilder.percent_of(hourly_wage, percent)
        return PayrollComponent(
            component_type=component_type,
            description=description,
            hours=ComponentBuilder.round_hours(hours),
            rate=ComponentBuilder.round_hours(rate),
            amount=ComponentBuilder.round_to_cents(hours * rate),
            legal_reference=legal_reference,
            work_date=work_date,
            metadata={"percent": str(percent)},
        )

    @staticmethod
    def create_percentage_component(
        component_type: ComponentType,
        description: str,
        base: Decimal,
        percent: Decimal,
        legal_reference: str,
    ) -> PayrollComponent:
        """Create a component computed as a percentage of a pay base."""
        return PayrollComponent(
            component_type=component_type,
            description=description,
            rate=percent,
            amount=ComponentBuilder.round_to_cents(
                ComponentBuilder.percent_of(base, percent)
            ),
            legal_reference=legal_reference,
            metadata={"base": str(base)},
        )

    @staticmethod
    def sum_amounts(
        components: Iterable[PayrollComponent],
        types: Iterable[ComponentType] | None = None,
    ) -> Decimal:
        """Sum component amounts, optionally restricted to some types."""
        wanted = set(types) if types is not None else None
        return sum(
            (
                c.amount
                for c in components
                if wanted is None or c.component_type in wanted
            ),
            ZERO,
        )

    @staticmethod
    def validate_amounts(components: Iterable[PayrollComponent]) -> list[str]:
        """Validate components are non-negative and rounded to cents."""
        errors = []
        for component in components:
            if component.amount < 0:
                errors.append(
                    f"{component.component_type.value} has negative amount {component.amount}"
                )
            if component.amount != ComponentBuilder.round_to_cents(component.amount):
                errors.append(
                    f"{component.component_type.value} amount {component.amount} is not rounded"
                )
        return errors
