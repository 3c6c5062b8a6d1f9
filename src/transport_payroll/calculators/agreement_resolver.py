"""Agreement resolution by type and validity window."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from transport_payroll.calculators.types import AgreementSnapshot, AgreementType
from transport_payroll.calculators.validation import CalculationError


class AgreementNotFoundError(CalculationError):
    """Raised when no active agreement covers the requested date."""

    def __init__(self, agreement_type: AgreementType, as_of_date: date):
        self.agreement_type = agreement_type
        self.as_of_date = as_of_date
        super().__init__(
            f"No active {agreement_type.value} agreement found for {as_of_date}"
        )


class AmbiguousAgreementError(CalculationError):
    """Raised when more than one active agreement covers the same date."""

    def __init__(
        self,
        agreement_type: AgreementType,
        as_of_date: date,
        names: list[str],
    ):
        self.agreement_type = agreement_type
        self.as_of_date = as_of_date
        self.names = names
        super().__init__(
            f"{len(names)} active {agreement_type.value} agreements overlap on "
            f"{as_of_date}: {', '.join(names)}"
        )


class AgreementResolver:
    """Selects the agreement that applies to an employee on a date.

    Selection rules:
    1. Agreement type must match the employee's agreement type
    2. Agreement must be active
    3. Validity window (valid_from, optional valid_to) must include the date

    Exactly one agreement may match. Zero or several matches are fatal.
    """

    def __init__(self, agreements: Iterable[AgreementSnapshot]):
        self.agreements = list(agreements)

    def resolve(self, agreement_type: AgreementType, as_of_date: date) -> AgreementSnapshot:
        """Resolve the single agreement in effect.

        Raises:
            AgreementNotFoundError: If no agreement covers the date
            AmbiguousAgreementError: If several agreements cover the date
        """
        matches = [
            agreement
            for agreement in self.agreements
            if agreement.agreement_type == agreement_type
            and agreement.is_valid_on(as_of_date)
        ]

        if not matches:
            raise AgreementNotFoundError(agreement_type, as_of_date)
        if len(matches) > 1:
            raise AmbiguousAgreementError(
                agreement_type, as_of_date, [a.name for a in matches]
            )
        return matches[0]

    def find_overlaps(self) -> list[tuple[AgreementSnapshot, AgreementSnapshot]]:
        """Find pairs of active agreements of the same type with overlapping windows."""
        overlaps = []
        active = [a for a in self.agreements if a.is_active]
        for i, first in enumerate(active):
            for second in active[i + 1:]:
                if first.agreement_type != second.agreement_type:
                    continue
                first_end = first.valid_to or date.max
                second_end = second.valid_to or date.max
                if first.valid_from <= second_end and second.valid_from <= first_end:
                    overlaps.append((first, second))
        return overlaps
