"""Application service: Record Stock Movement use case.

Manual stock changes: purchases (IN), write-offs (OUT) and corrections
(ADJUSTMENT). Sales are booked by the invoice assembler instead.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from invoicing.application.dto import StockMovementDTO, movement_to_dto
from invoicing.domain.model.stock_movement import MovementKind
from invoicing.domain.repository.unit_of_work import UnitOfWork
from invoicing.domain.service.stock_ledger import StockLedger


class RecordStockMovementHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        product_id: str,
        kind: MovementKind | str,
        quantity: int,
        reference: str | None = None,
        note: str | None = None,
    ) -> StockMovementDTO:
        """Apply one movement; raises InsufficientStockError if stock would go negative."""
        with self._uow as uow:
            ledger = StockLedger(uow.products, uow.movements, self._clock)
            result = ledger.apply_movement(product_id, kind, quantity, reference, note)
        return movement_to_dto(result.movement, resulting_stock=result.new_stock)
