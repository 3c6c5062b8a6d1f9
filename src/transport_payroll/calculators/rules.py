"""Date-versioned rule resolution.

Agreement rules that change over time are modelled as an ordered list of
(effective_from, value) pairs. A rule applies from its effective date
until the next rule takes over, so adding a future change is a matter of
appending one entry.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Generic, TypeVar

T = TypeVar("T")


class RuleNotEffectiveError(Exception):
    """Raised when no rule is in effect on the requested date."""

    def __init__(self, name: str, on: date):
        self.name = name
        self.on = on
        super().__init__(f"No '{name}' rule in effect on {on}")


@dataclass(frozen=True)
class EffectiveRule(Generic[T]):
    """A rule value and the date it takes effect."""

    effective_from: date
    value: T


class RuleSchedule(Generic[T]):
    """Ordered set of effective-dated rule values."""

    def __init__(self, name: str, rules: Iterable[EffectiveRule[T]]):
        self.name = name
        self.rules: list[EffectiveRule[T]] = sorted(
            rules, key=lambda rule: rule.effective_from
        )
        dates = [rule.effective_from for rule in self.rules]
        if len(set(dates)) != len(dates):
            raise ValueError(f"Duplicate effective dates in rule '{name}'")
        self._dates = dates

    def resolve(self, on: date) -> T:
        """Return the rule value in effect on the given date."""
        index = bisect_right(self._dates, on) - 1
        if index < 0:
            raise RuleNotEffectiveError(self.name, on)
        return self.rules[index].value

    def effective_from(self, on: date) -> date:
        """Return the start date of the rule in effect on the given date."""
        index = bisect_right(self._dates, on) - 1
        if index < 0:
            raise RuleNotEffectiveError(self.name, on)
        return self._dates[index]
