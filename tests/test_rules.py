"""Tests for date-versioned rule schedules."""

from datetime import date

import pytest

from transport_payroll.calculators.rules import EffectiveRule, RuleNotEffectiveError, RuleSchedule


@pytest.fixture
def schedule() -> RuleSchedule[int]:
    return RuleSchedule(
        "max_weeks",
        [
            EffectiveRule(date(2025, 5, 1), 11),
            EffectiveRule(date(2020, 1, 1), 9),
        ],
    )


class TestRuleSchedule:
    def test_resolves_rule_in_effect(self, schedule):
        assert schedule.resolve(date(2025, 4, 30)) == 9
        assert schedule.resolve(date(2025, 5, 1)) == 11
        assert schedule.resolve(date(2030, 1, 1)) == 11

    def test_effective_from(self, schedule):
        assert schedule.effective_from(date(2025, 4, 30)) == date(2020, 1, 1)
        assert schedule.effective_from(date(2025, 6, 1)) == date(2025, 5, 1)

    def test_before_first_rule_raises(self, schedule):
        with pytest.raises(RuleNotEffectiveError) as exc_info:
            schedule.resolve(date(2019, 12, 31))

        assert exc_info.value.name == "max_weeks"
        assert exc_info.value.on == date(2019, 12, 31)

    def test_duplicate_dates_rejected(self):
        with pytest.raises(ValueError):
            RuleSchedule("dup", [EffectiveRule(date(2025, 1, 1), 1), EffectiveRule(date(2025, 1, 1), 2)])

    def test_rules_are_sorted(self, schedule):
        assert [rule.value for rule in schedule.rules] == [9, 11]
