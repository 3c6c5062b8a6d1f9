"""Tests for sickness pay."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from transport_payroll.calculators.types import AbsenceType
from transport_payroll.calculators.validation import InvalidDateRangeError
from transport_payroll.entitlements.base import AbsenceRecord, AbsenceUsageLedger
from transport_payroll.entitlements.sickness import SicknessCalculator


def sickness_record(start, end, days, employee_id="E1"):
    return AbsenceRecord(
        employee_id=employee_id,
        absence_type=AbsenceType.SICKNESS,
        start_date=start,
        end_date=end,
        days_count=days,
        is_paid=True,
        payment_amount=Decimal("0"),
        legal_reference="§ 14 Sygeløn",
    )


class TestSicknessPay:
    """Paid days and amounts."""

    def test_one_week(self, employee):
        calc = SicknessCalculator().calculate(employee, date(2025, 6, 2), date(2025, 6, 8))

        assert calc.calendar_days == 7
        assert calc.work_days == 5
        assert calc.weeks == 1
        assert calc.payable_days == 5
        assert calc.daily_pay == Decimal("1221.00")
        assert calc.total_pay == Decimal("6105.00")
        assert calc.pension_contribution == Decimal("671.55")
        assert calc.vacation_pay == Decimal("763.13")
        assert calc.requires_doctors_note is True
        assert calc.remaining_weeks == 10

    def test_short_absence_is_self_certified(self, employee):
        calc = SicknessCalculator().calculate(employee, date(2025, 6, 2), date(2025, 6, 4))

        assert calc.work_days == 3
        assert calc.requires_doctors_note is False
        assert "Self-certification" in SicknessCalculator.documentation_message(calc.work_days)

    def test_weekend_only_absence_pays_nothing(self, employee):
        calc = SicknessCalculator().calculate(employee, date(2025, 6, 7), date(2025, 6, 8))
        assert calc.payable_days == 0
        assert calc.total_pay == Decimal("0.00")

    def test_open_period_counts_until_as_of(self, employee):
        calc = SicknessCalculator().calculate(employee, date(2025, 6, 2), as_of=date(2025, 6, 4))

        assert calc.is_open
        assert calc.counted_until == date(2025, 6, 4)
        assert calc.work_days == 3

    def test_start_after_end_is_fatal(self, employee):
        with pytest.raises(InvalidDateRangeError):
            SicknessCalculator().calculate(employee, date(2025, 6, 9), date(2025, 6, 2))


class TestMaximumWeeks:
    """The paid maximum depends on the start date."""

    def test_nine_weeks_before_may_2025(self, employee):
        calc = SicknessCalculator().calculate(employee, date(2025, 4, 30), date(2025, 5, 2))
        assert calc.max_weeks == 9

    def test_eleven_weeks_from_may_2025(self, employee):
        calc = SicknessCalculator().calculate(employee, date(2025, 5, 1), date(2025, 5, 2))

        assert calc.max_weeks == 11
        assert calc.rule_effective_from == date(2025, 5, 1)

    def test_eleven_weeks_is_not_exceeded(self, employee):
        calc = SicknessCalculator().calculate(employee, date(2025, 5, 5), date(2025, 7, 18))

        assert calc.weeks == 11
        assert calc.has_exceeded_limit is False
        assert calc.payable_days == 55

    def test_days_beyond_maximum_are_not_paid_within_twelfth_week(self, employee):
        calculator = SicknessCalculator()
        calc = calculator.calculate(employee, date(2025, 5, 5), date(2025, 7, 22))

        assert calc.work_days == 57
        assert calc.weeks == 11
        assert calc.has_exceeded_limit is False
        assert calc.payable_days == 55
        assert calc.total_pay == Decimal("67155.00")

        warnings = calculator.validate(employee, calc).warnings
        assert "Only 55 of 57 work days are paid within the maximum of 11 weeks" in warnings

    def test_twelve_weeks_is_capped(self, employee):
        calculator = SicknessCalculator()
        calc = calculator.calculate(employee, date(2025, 5, 5), date(2025, 7, 25))

        assert calc.work_days == 60
        assert calc.has_exceeded_limit is True
        assert calc.payable_days == 55
        assert calc.total_pay == Decimal("67155.00")
        assert calc.remaining_weeks == 0

        result = calculator.validate(employee, calc)
        assert result.is_valid
        assert any("exceeds the maximum" in w for w in result.warnings)


class TestRollingDuration:
    """Sickness already taken in the previous 12 months."""

    def test_no_history(self, employee):
        check = SicknessCalculator().check_rolling_duration("E1", date(2025, 6, 2))

        assert check.weeks_used == 0
        assert check.weeks_remaining == 11
        assert check.warning is None

    def test_low_remaining_weeks_warns(self, employee):
        ledger = AbsenceUsageLedger([sickness_record(date(2025, 1, 6), date(2025, 3, 7), 45)])
        calculator = SicknessCalculator(usage=ledger)

        check = calculator.check_rolling_duration("E1", date(2025, 6, 2))
        assert check.weeks_used == 9
        assert check.weeks_remaining == 2
        assert check.warning == "Only 2 weeks of sick pay remain in the last 12 months"

        calc = calculator.calculate(employee, date(2025, 6, 2), date(2025, 6, 3))
        assert check.warning in calculator.validate(employee, calc).warnings

    def test_old_and_foreign_records_are_ignored(self):
        ledger = AbsenceUsageLedger(
            [
                sickness_record(date(2024, 1, 8), date(2024, 3, 8), 45),
                sickness_record(date(2025, 1, 6), date(2025, 3, 7), 45, employee_id="E2"),
            ]
        )
        check = SicknessCalculator(usage=ledger).check_rolling_duration("E1", date(2025, 6, 2))
        assert check.weeks_used == 0

    def test_open_record_counts_overlapping_days(self):
        ledger = AbsenceUsageLedger([sickness_record(date(2025, 5, 26), None, 0)])
        used = ledger.days_used("E1", [AbsenceType.SICKNESS], date(2025, 5, 1), date(2025, 5, 31))
        assert used == 6


class TestValidation:
    def test_validate_is_pure(self, employee):
        calculator = SicknessCalculator()
        calc = calculator.calculate(employee, date(2025, 6, 2), date(2025, 6, 13))
        snapshot = replace(calc)

        first = calculator.validate(employee, calc)
        second = calculator.validate(employee, calc)

        assert first == second
        assert calc == snapshot

    def test_to_absence(self, employee):
        calculator = SicknessCalculator()
        calc = calculator.calculate(employee, date(2025, 6, 2), date(2025, 6, 6))

        record = calculator.to_absence(employee, calc)

        assert record.absence_type == AbsenceType.SICKNESS
        assert record.days_count == 5
        assert record.payment_amount == Decimal("6105.00")
        assert record.note == "Sygdom (5 dage, 1 uger)"
        assert record.legal_reference == "§ 14 Sygeløn"


class TestHistory:
    def test_summarize_history(self):
        records = [
            sickness_record(date(2025, 2, 3), date(2025, 2, 7), 5),
            sickness_record(date(2025, 3, 3), date(2025, 3, 14), 10),
            sickness_record(date(2025, 6, 2), None, 3),
            sickness_record(date(2025, 6, 2), None, 3, employee_id="E2"),
        ]
        history = SicknessCalculator.summarize_history("E1", records, as_of=date(2025, 6, 4))

        assert history.total_days == 18
        assert history.total_weeks == 3
        assert history.period_count == 3
        assert history.average_days_per_period == Decimal("6.0")
        assert history.longest_period == 10
        assert history.current_streak == 3

    def test_empty_history(self):
        history = SicknessCalculator.summarize_history("E1", [], as_of=date(2025, 6, 4))
        assert history.period_count == 0
        assert history.average_days_per_period == Decimal("0")
        assert history.current_streak == 0
