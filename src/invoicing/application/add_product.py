"""Application service: Add Product use case.

Opening stock is booked through the stock ledger, so a product's stock
always equals the sum of its movements.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable
from uuid import uuid4

from invoicing.application.dto import ProductDTO, product_to_dto
from invoicing.domain.exceptions import ValidationError
from invoicing.domain.model.product import Product
from invoicing.domain.model.stock_movement import MovementKind
from invoicing.domain.model.value_objects import Money, TaxRate
from invoicing.domain.repository.unit_of_work import UnitOfWork
from invoicing.domain.service.stock_ledger import StockLedger

OPENING_STOCK_REFERENCE = "OPENING"


class AddProductHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        sku: str,
        name: str,
        price: str,
        tax_rate: str = "18",
        opening_stock: int = 0,
        min_stock: int = 0,
        hsn: str | None = None,
        unit: str = "PCS",
        category: str = "General",
        description: str | None = None,
    ) -> ProductDTO:
        """Add a new product to the catalog."""
        money = Money.of(price)
        if money.amount <= 0:
            raise ValidationError.for_field("price", "Product price must be greater than zero")
        if opening_stock < 0:
            raise ValidationError.for_field("opening_stock", "Opening stock cannot be negative")

        product = Product(
            id=uuid4().hex,
            sku=sku.strip(),
            name=name.strip(),
            price=money,
            tax_rate=TaxRate.of(tax_rate),
            min_stock=min_stock,
            hsn=hsn,
            unit=unit,
            category=category,
            description=description,
        )

        with self._uow as uow:
            if uow.products.get_by_sku(product.sku) is not None:
                raise ValidationError.for_field(
                    "sku", f"Product with SKU '{product.sku}' already exists"
                )
            uow.products.save(product)
            if opening_stock > 0:
                ledger = StockLedger(uow.products, uow.movements, self._clock)
                result = ledger.apply_movement(
                    product.id,
                    MovementKind.IN,
                    opening_stock,
                    reference=OPENING_STOCK_REFERENCE,
                    note="Opening stock",
                )
                product.stock = result.new_stock

        return product_to_dto(product)
