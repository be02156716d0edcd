"""StockMovement — an immutable entry in the stock ledger.

A product's current stock is the running sum of the ``quantity`` of all
its movements; ``quantity`` always holds the *effective* signed delta
that was applied, whatever sign the caller passed in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from invoicing.domain.exceptions import ValidationError


class MovementKind(Enum):
    IN = "IN"
    OUT = "OUT"
    ADJUSTMENT = "ADJUSTMENT"

    def effective_delta(self, quantity: int) -> int:
        """IN always adds, OUT always removes, ADJUSTMENT applies as given."""
        if self is MovementKind.IN:
            return abs(quantity)
        if self is MovementKind.OUT:
            return -abs(quantity)
        return quantity

    @staticmethod
    def parse(raw: str | MovementKind) -> MovementKind:
        if isinstance(raw, MovementKind):
            return raw
        try:
            return MovementKind(str(raw).upper())
        except ValueError as exc:
            raise ValidationError.for_field(
                "type", f"Unknown movement type {raw!r}; expected IN, OUT or ADJUSTMENT"
            ) from exc


@dataclass(frozen=True)
class StockMovement:
    """Append-only ledger record. ``id`` is assigned by the repository."""

    id: str | None
    product_id: str
    kind: MovementKind
    quantity: int
    reference: str | None = None
    note: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
