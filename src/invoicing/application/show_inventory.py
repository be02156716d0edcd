"""Application services: inventory queries (stock levels and ledger history)."""

from __future__ import annotations

from invoicing.application.dto import (
    InventoryLineDTO,
    InventorySummaryDTO,
    StockMovementDTO,
    movement_to_dto,
)
from invoicing.domain.exceptions import ProductNotFoundError
from invoicing.domain.model.value_objects import Money
from invoicing.domain.repository.unit_of_work import UnitOfWork

RECENT_MOVEMENTS_LIMIT = 50


class ShowInventoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, category: str | None = None) -> InventorySummaryDTO:
        with self._uow as uow:
            products = uow.products.list_all()

        if category is not None:
            products = [p for p in products if p.category == category]

        lines = [
            InventoryLineDTO(
                product_id=p.id,
                sku=p.sku,
                name=p.name,
                category=p.category,
                stock=p.stock,
                min_stock=p.min_stock,
                unit=p.unit,
                stock_value=str(p.stock_value),
                low_stock=p.is_low_stock,
                out_of_stock=p.is_out_of_stock,
            )
            for p in products
        ]
        total = sum((p.stock_value for p in products), Money.zero())
        return InventorySummaryDTO(lines=lines, total_value=str(total))


class ListStockMovementsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        product_id: str | None = None,
        limit: int = RECENT_MOVEMENTS_LIMIT,
    ) -> list[StockMovementDTO]:
        """Return the most recent movements, newest first."""
        with self._uow as uow:
            if product_id is not None and uow.products.get_by_id(product_id) is None:
                raise ProductNotFoundError(product_id)
            movements = uow.movements.list_recent(product_id=product_id, limit=limit)
        return [movement_to_dto(m) for m in movements]
