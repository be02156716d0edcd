"""Domain service: Stock Ledger.

Every change to a product's on-hand quantity goes through
``apply_movement``, which appends an immutable movement and updates the
product's denormalized stock counter inside the caller's unit of work.
The product row is locked before the check so concurrent movements on
the same product cannot lose updates.

The ledger does not deduplicate: callers that retry must check
``movements.list_by_reference`` themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from invoicing.domain.exceptions import ProductNotFoundError, ValidationError
from invoicing.domain.model.stock_movement import MovementKind, StockMovement
from invoicing.domain.repository.product_repository import ProductRepository
from invoicing.domain.repository.stock_movement_repository import (
    StockMovementRepository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MovementResult:
    movement: StockMovement
    new_stock: int


class StockLedger:

    def __init__(
        self,
        products: ProductRepository,
        movements: StockMovementRepository,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._products = products
        self._movements = movements
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def apply_movement(
        self,
        product_id: str,
        kind: MovementKind | str,
        quantity: int,
        reference: str | None = None,
        note: str | None = None,
    ) -> MovementResult:
        """Record one movement and return it with the resulting stock.

        Raises InsufficientStockError, leaving stock and ledger untouched,
        when the movement would make stock negative.
        """
        kind = MovementKind.parse(kind)
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise ValidationError.for_field("quantity", "Quantity must be an integer")

        product = self._products.get_for_update(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        delta = kind.effective_delta(quantity)
        new_stock = product.stock_after(delta)

        movement = self._movements.add(
            StockMovement(
                id=None,
                product_id=product_id,
                kind=kind,
                quantity=delta,
                reference=reference,
                note=note,
                created_at=self._clock(),
            )
        )
        product.stock = new_stock
        self._products.save(product)

        logger.info(
            "stock_movement_recorded",
            extra={
                "product_id": product_id,
                "kind": kind.value,
                "delta": delta,
                "new_stock": new_stock,
                "reference": reference,
            },
        )
        return MovementResult(movement=movement, new_stock=new_stock)

    def retract(self, result: MovementResult) -> None:
        """Remove a movement and restore the stock it changed.

        Only for compensating a movement written by an operation that
        failed on a store without transactions.
        """
        movement = result.movement
        product = self._products.get_for_update(movement.product_id)
        if product is None:
            raise ProductNotFoundError(movement.product_id)

        self._movements.remove(movement.id)  # type: ignore[arg-type]
        product.adjust_stock(-movement.quantity)
        self._products.save(product)
        logger.warning(
            "stock_movement_retracted",
            extra={
                "product_id": movement.product_id,
                "movement_id": movement.id,
                "delta": movement.quantity,
                "reference": movement.reference,
            },
        )
