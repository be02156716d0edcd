"""Domain service: Tax Calculator.

Splits consumption tax into its dual-rate components. When seller and
buyer share a jurisdiction the tax is divided evenly between two parallel
components; otherwise a single cross-jurisdiction component carries all
of it.

Pure functions only. Nothing here rounds: each invoice line is rounded
once, when the invoice is issued and persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from invoicing.domain.exceptions import FieldViolation, ValidationError
from invoicing.domain.model.value_objects import HUNDRED, round_half_up, to_decimal

_TWO = Decimal("2")
_ZERO = Decimal("0")


@dataclass(frozen=True)
class TaxSplit:
    """Tax on one amount. ``first + second + cross_border == total``."""

    first_split: Decimal
    second_split: Decimal
    cross_border: Decimal
    total: Decimal

    @property
    def is_intra_jurisdiction(self) -> bool:
        return self.cross_border == _ZERO

    def __add__(self, other: TaxSplit) -> TaxSplit:
        return TaxSplit(
            first_split=self.first_split + other.first_split,
            second_split=self.second_split + other.second_split,
            cross_border=self.cross_border + other.cross_border,
            total=self.total + other.total,
        )

    def rounded(self) -> TaxSplit:
        """Round each component half-up; the total stays their exact sum."""
        first = round_half_up(self.first_split)
        second = round_half_up(self.second_split)
        cross = round_half_up(self.cross_border)
        return TaxSplit(first, second, cross, first + second + cross)

    @staticmethod
    def zero() -> TaxSplit:
        return TaxSplit(_ZERO, _ZERO, _ZERO, _ZERO)


def compute_tax(
    amount: Decimal | int | str,
    rate_percent: Decimal | int | str,
    origin_jurisdiction: str,
    destination_jurisdiction: str,
) -> TaxSplit:
    """Compute the split tax on *amount* at *rate_percent*.

    Jurisdictions are compared exactly (case-sensitive, no trimming).

    Raises ValidationError for a negative amount or a rate outside
    [0, 100].
    """
    amount = to_decimal(amount, "amount")
    rate = to_decimal(rate_percent, "tax_rate")

    violations: list[FieldViolation] = []
    if amount < _ZERO:
        violations.append(FieldViolation("amount", "Amount cannot be negative"))
    if not _ZERO <= rate <= HUNDRED:
        violations.append(FieldViolation("tax_rate", "Tax rate must be between 0 and 100"))
    if violations:
        raise ValidationError("; ".join(v.message for v in violations), violations)

    tax = amount * rate / HUNDRED

    if origin_jurisdiction == destination_jurisdiction:
        half = tax / _TWO
        return TaxSplit(first_split=half, second_split=half, cross_border=_ZERO, total=tax)
    return TaxSplit(first_split=_ZERO, second_split=_ZERO, cross_border=tax, total=tax)
