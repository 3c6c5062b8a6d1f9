"""Tests for warehouse and terminal differentials."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from transport_payroll.entitlements.warehouse_terminal import (
    GeographicZone,
    LoadingUnit,
    TemperatureZone,
    TerminalType,
    WarehouseTerminalCalculator,
    loading_rate,
    terminal_rate,
)

WORK_DATE = date(2025, 6, 2)


@pytest.fixture
def calculator():
    return WarehouseTerminalCalculator()


@pytest.fixture
def freezer_shift(calculator, employee):
    return calculator.calculate(
        employee,
        WORK_DATE,
        datetime(2025, 6, 2, 7, 0),
        datetime(2025, 6, 2, 15, 0),
        temperature_zone=TemperatureZone.FREEZER,
        geographic_zone=GeographicZone.COPENHAGEN,
        terminal_type=TerminalType.CROSS_DOCK,
        break_minutes=30,
    )


@pytest.fixture
def night_shift(calculator, employee):
    return calculator.calculate(
        employee,
        WORK_DATE,
        datetime(2025, 6, 2, 22, 0),
        datetime(2025, 6, 3, 6, 0),
    )


class TestShiftPay:
    def test_differentials_per_hour(self, freezer_shift):
        assert freezer_shift.hours_worked == Decimal("7.5")
        assert freezer_shift.is_night_shift is False
        assert freezer_shift.base_payment == Decimal("1125.00")
        assert freezer_shift.temperature_supplement == Decimal("112.50")
        assert freezer_shift.geographic_allowance == Decimal("90.00")
        assert freezer_shift.terminal_supplement == Decimal("63.75")
        assert freezer_shift.total_payment == Decimal("1391.25")

    def test_night_terminal_bonus(self, night_shift):
        assert night_shift.hours_worked == Decimal("8")
        assert night_shift.is_night_shift is True
        assert night_shift.terminal_supplement == Decimal("104.00")
        assert night_shift.geographic_allowance == Decimal("0.00")

    def test_explicit_hourly_rate(self, calculator, employee):
        shift = calculator.calculate(
            employee,
            WORK_DATE,
            datetime(2025, 6, 2, 8, 0),
            datetime(2025, 6, 2, 10, 0),
            hourly_rate=Decimal("180.00"),
        )
        assert shift.base_payment == Decimal("360.00")

    def test_terminal_rates(self):
        assert terminal_rate(TerminalType.STANDARD, False) == Decimal("5.00")
        assert terminal_rate(TerminalType.SORTING, False) == Decimal("9.00")
        assert terminal_rate(TerminalType.CROSS_DOCK, True) == Decimal("16.50")
        assert terminal_rate(TerminalType.DISTRIBUTION, True) == Decimal("13.00")


class TestValidation:
    def test_valid_shift(self, calculator, employee, freezer_shift):
        result = calculator.validate(employee, freezer_shift)
        assert result.errors == []
        assert result.warnings == []

    def test_reversed_shift(self, calculator, employee):
        shift = calculator.calculate(
            employee, WORK_DATE, datetime(2025, 6, 2, 15, 0), datetime(2025, 6, 2, 7, 0)
        )

        assert shift.hours_worked == 0
        result = calculator.validate(employee, shift)
        assert "Hours worked must be positive" in result.errors
        assert "Shift start must be before shift end" in result.errors

    def test_night_flag_disagreement_warns(self, calculator, employee):
        shift = calculator.calculate(
            employee,
            WORK_DATE,
            datetime(2025, 6, 2, 7, 0),
            datetime(2025, 6, 2, 15, 0),
            night_shift=True,
        )

        assert shift.is_night_shift is True
        assert shift.terminal_supplement == Decimal("104.00")
        warnings = calculator.validate(employee, shift).warnings
        assert warnings == ["Night shift flag does not match the shift start time"]

    def test_long_shift_warns(self, calculator, employee):
        shift = calculator.calculate(
            employee, WORK_DATE, datetime(2025, 6, 2, 6, 0), datetime(2025, 6, 2, 19, 0)
        )
        assert "Unusually long shift (13.0 hours)" in calculator.validate(employee, shift).warnings


class TestLoading:
    def test_heavy_standard_pallets_with_manual_handling(self, calculator, employee):
        activity = calculator.calculate_loading(
            employee,
            WORK_DATE,
            LoadingUnit.STANDARD_PALLET,
            20,
            weight_kg=Decimal("600"),
            manual_handling_hours=Decimal("2"),
        )

        assert activity.rate_per_unit == Decimal("12.00")
        assert activity.total_payment == Decimal("270.00")

    def test_light_pallet_rate(self):
        assert loading_rate(LoadingUnit.STANDARD_PALLET, Decimal("499")) == Decimal("8.50")
        assert loading_rate(LoadingUnit.STANDARD_PALLET) == Decimal("8.50")

    def test_container_rate(self, calculator, employee):
        activity = calculator.calculate_loading(employee, WORK_DATE, LoadingUnit.CONTAINER_40FT, 2)
        assert activity.total_payment == Decimal("500.00")


class TestMonthlySummary:
    def test_summary(self, calculator, employee, freezer_shift, night_shift):
        loading = calculator.calculate_loading(
            employee,
            WORK_DATE,
            LoadingUnit.STANDARD_PALLET,
            20,
            weight_kg=Decimal("600"),
            manual_handling_hours=Decimal("2"),
        )
        other_month = calculator.calculate(
            employee, date(2025, 7, 1), datetime(2025, 7, 1, 7, 0), datetime(2025, 7, 1, 15, 0)
        )

        summary = WarehouseTerminalCalculator.monthly_summary(
            "E1", 2025, 6, [freezer_shift, night_shift, other_month], [loading]
        )

        assert summary.total_hours == Decimal("15.5")
        assert summary.freezer_hours == Decimal("7.5")
        assert summary.refrigerated_hours == 0
        assert summary.night_shift_hours == Decimal("8")
        assert summary.total_loading_payment == Decimal("270.00")
        assert summary.total_earnings == Decimal("2965.25")
