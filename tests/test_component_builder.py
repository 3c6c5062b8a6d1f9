"""Tests for payroll component building and rounding."""

from decimal import Decimal

from transport_payroll.calculators.component_builder import ComponentBuilder
from transport_payroll.calculators.types import ComponentType, PayrollComponent


class TestRounding:
    def test_round_to_cents_half_up(self):
        assert ComponentBuilder.round_to_cents(Decimal("1.005")) == Decimal("1.01")
        assert ComponentBuilder.round_to_cents(Decimal("1.004")) == Decimal("1.00")
        assert ComponentBuilder.round_to_cents(Decimal("157.125")) == Decimal("157.13")

    def test_round_hours_to_four_places(self):
        assert ComponentBuilder.round_hours(Decimal("1") / Decimal("3")) == Decimal("0.3333")

    def test_ceil_to_tenth(self):
        assert ComponentBuilder.ceil_to_tenth(Decimal("8.3333")) == Decimal("8.4")
        assert ComponentBuilder.ceil_to_tenth(Decimal("8.4")) == Decimal("8.4")

    def test_percent_of(self):
        assert ComponentBuilder.percent_of(Decimal("200"), Decimal("12.5")) == Decimal("25")


class TestCreateComponents:
    """Component constructors."""

    def test_hourly_component(self):
        component = ComponentBuilder.create_hourly_component(
            ComponentType.BASE_SALARY,
            "Grundløn",
            Decimal("7.4"),
            Decimal("153.333"),
            "§ 6 Løn",
        )
        assert component.hours == Decimal("7.4000")
        assert component.rate == Decimal("153.333")
        # 7.4 * 153.333 = 1134.6642
        assert component.amount == Decimal("1134.66")

    def test_premium_component_keeps_percent(self):
        component = ComponentBuilder.create_premium_component(
            ComponentType.WEEKEND_ALLOWANCE,
            "Weekendtillæg",
            Decimal("3"),
            Decimal("165"),
            Decimal("50"),
            "§ 11",
        )
        assert component.rate == Decimal("82.5000")
        assert component.amount == Decimal("247.50")
        assert component.metadata == {"percent": "50"}

    def test_percentage_component(self):
        component = ComponentBuilder.create_percentage_component(
            ComponentType.PENSION_EMPLOYER,
            "Pension (arbejdsgiver)",
            Decimal("1257.00"),
            Decimal("8"),
            "§ 9 Pension",
        )
        assert component.hours is None
        assert component.rate == Decimal("8")
        assert component.amount == Decimal("100.56")
        assert component.metadata == {"base": "1257.00"}


class TestAmounts:
    def _component(self, component_type, amount):
        return PayrollComponent(component_type, "x", Decimal(amount), "ref")

    def test_sum_all(self):
        components = [
            self._component(ComponentType.BASE_SALARY, "100.00"),
            self._component(ComponentType.OVERTIME, "25.50"),
        ]
        assert ComponentBuilder.sum_amounts(components) == Decimal("125.50")

    def test_sum_by_type(self):
        components = [
            self._component(ComponentType.BASE_SALARY, "100.00"),
            self._component(ComponentType.OVERTIME, "25.50"),
            self._component(ComponentType.OVERTIME, "10.00"),
        ]
        assert ComponentBuilder.sum_amounts(components, [ComponentType.OVERTIME]) == Decimal("35.50")

    def test_sum_empty(self):
        assert ComponentBuilder.sum_amounts([]) == Decimal("0")

    def test_validate_amounts(self):
        components = [
            self._component(ComponentType.BASE_SALARY, "100.00"),
            self._component(ComponentType.OVERTIME, "-1.00"),
            self._component(ComponentType.VACATION, "1.005"),
        ]
        errors = ComponentBuilder.validate_amounts(components)

        assert len(errors) == 2
        assert "negative" in errors[0]
        assert "not rounded" in errors[1]
