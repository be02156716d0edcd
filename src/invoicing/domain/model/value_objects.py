"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from invoicing.domain.exceptions import ValidationError

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value: str | int | Decimal, field: str = "amount") -> Decimal:
    """Coerce user input to Decimal without passing through float."""
    if isinstance(value, bool):
        raise ValidationError.for_field(field, f"Invalid {field}: {value!r}")
    try:
        result = Decimal(str(value)) if not isinstance(value, Decimal) else value
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError.for_field(field, f"Invalid {field}: {value!r}") from exc
    if not result.is_finite():
        raise ValidationError.for_field(field, f"Invalid {field}: {value!r}")
    return result


def round_half_up(value: Decimal) -> Decimal:
    """Round to two fraction digits. Used only when values are persisted."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:
    """Non-negative monetary amount.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations. Arithmetic keeps full
    precision; only ``str()`` rounds.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + other.amount)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int) or isinstance(factor, bool):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor)

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return str(round_half_up(self.amount))

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        return Money(to_decimal(amount))

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot sell zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TaxRate:
    """Tax rate as a percentage between 0 and 100 inclusive."""

    percent: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.percent, Decimal):
            raise ValidationError(
                f"Tax rate must be a Decimal, got {type(self.percent).__name__}"
            )
        if not Decimal("0") <= self.percent <= HUNDRED:
            raise ValidationError(
                f"Tax rate must be between 0 and 100, got {self.percent}"
            )

    @staticmethod
    def of(percent: str | int | Decimal) -> TaxRate:
        return TaxRate(to_decimal(percent, "tax rate"))

    def __str__(self) -> str:
        return f"{self.percent.normalize():f}%"
