"""Tests for agreement resolution."""

from datetime import date

import pytest

from transport_payroll.calculators.agreement_resolver import (
    AgreementNotFoundError,
    AgreementResolver,
    AmbiguousAgreementError,
)
from transport_payroll.calculators.types import AgreementType


class TestAgreementResolver:
    """Selecting the single agreement in effect."""

    def test_resolves_by_type_and_window(self, make_agreement):
        old = make_agreement(name="2022-2025", valid_from=date(2022, 3, 1), valid_to=date(2025, 2, 28))
        new = make_agreement(name="2025-2028")
        resolver = AgreementResolver([old, new])

        assert resolver.resolve(AgreementType.DRIVER_AGREEMENT, date(2025, 2, 28)) is old
        assert resolver.resolve(AgreementType.DRIVER_AGREEMENT, date(2025, 3, 1)) is new

    def test_valid_to_is_inclusive(self, agreement):
        resolver = AgreementResolver([agreement])
        assert resolver.resolve(AgreementType.DRIVER_AGREEMENT, date(2028, 2, 29)) is agreement

        with pytest.raises(AgreementNotFoundError):
            resolver.resolve(AgreementType.DRIVER_AGREEMENT, date(2028, 3, 1))

    def test_open_ended_agreement(self, make_agreement):
        agreement = make_agreement(valid_to=None)
        resolver = AgreementResolver([agreement])
        assert resolver.resolve(AgreementType.DRIVER_AGREEMENT, date(2040, 1, 1)) is agreement

    def test_inactive_is_ignored(self, make_agreement):
        resolver = AgreementResolver([make_agreement(is_active=False)])

        with pytest.raises(AgreementNotFoundError) as exc_info:
            resolver.resolve(AgreementType.DRIVER_AGREEMENT, date(2025, 6, 1))

        assert exc_info.value.agreement_type == AgreementType.DRIVER_AGREEMENT
        assert exc_info.value.as_of_date == date(2025, 6, 1)

    def test_other_type_is_not_found(self, agreement):
        resolver = AgreementResolver([agreement])
        with pytest.raises(AgreementNotFoundError):
            resolver.resolve(AgreementType.WAREHOUSE_AGREEMENT, date(2025, 6, 1))

    def test_overlapping_agreements_are_ambiguous(self, make_agreement):
        first = make_agreement(name="A")
        second = make_agreement(name="B", valid_from=date(2025, 6, 1))
        resolver = AgreementResolver([first, second])

        with pytest.raises(AmbiguousAgreementError) as exc_info:
            resolver.resolve(AgreementType.DRIVER_AGREEMENT, date(2025, 6, 15))

        assert exc_info.value.names == ["A", "B"]

    def test_find_overlaps(self, make_agreement):
        a = make_agreement(name="A", valid_to=date(2025, 12, 31))
        b = make_agreement(name="B", valid_from=date(2025, 12, 1))
        c = make_agreement(name="C", agreement_type=AgreementType.MOVER_AGREEMENT)
        resolver = AgreementResolver([a, b, c])

        assert resolver.find_overlaps() == [(a, b)]

    def test_no_overlap_for_adjacent_windows(self, make_agreement):
        a = make_agreement(name="A", valid_to=date(2025, 12, 31))
        b = make_agreement(name="B", valid_from=date(2026, 1, 1))
        assert AgreementResolver([a, b]).find_overlaps() == []
