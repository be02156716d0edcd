"""Product aggregate.

Products live independently of invoices. Prices and tax rates change
over time; invoices capture the rate in force at the time of sale.
Stock is only ever changed through the stock ledger.
"""

from __future__ import annotations

from dataclasses import dataclass

from invoicing.domain.exceptions import InsufficientStockError, ValidationError
from invoicing.domain.model.value_objects import Money, TaxRate


@dataclass
class Product:
    """A product in the catalog.

    Invariants:
    - ``stock`` is never negative in a committed state
    - ``min_stock`` is never negative
    """

    id: str
    sku: str
    name: str
    price: Money
    tax_rate: TaxRate
    stock: int = 0
    min_stock: int = 0
    hsn: str | None = None
    unit: str = "PCS"
    category: str = "General"
    description: str | None = None

    def __post_init__(self) -> None:
        if not self.sku or not self.sku.strip():
            raise ValidationError.for_field("sku", "SKU is required")
        if not self.name or not self.name.strip():
            raise ValidationError.for_field("name", "Product name is required")
        if self.stock < 0:
            raise ValidationError.for_field("stock", "Stock cannot be negative")
        if self.min_stock < 0:
            raise ValidationError.for_field("min_stock", "Minimum stock cannot be negative")

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock == 0

    @property
    def stock_value(self) -> Money:
        return self.price * self.stock

    def update_price(self, new_price: Money) -> None:
        """Change the catalog price.

        This does NOT affect any issued invoices because invoice lines
        capture the rate at the time of sale.
        """
        if new_price.amount <= 0:
            raise ValidationError.for_field("price", "Product price must be greater than zero")
        self.price = new_price

    def update_min_stock(self, min_stock: int) -> None:
        if min_stock < 0:
            raise ValidationError.for_field("min_stock", "Minimum stock cannot be negative")
        self.min_stock = min_stock

    def stock_after(self, delta: int) -> int:
        """Return the stock level *delta* would produce, or raise."""
        new_stock = self.stock + delta
        if new_stock < 0:
            raise InsufficientStockError(self.id, abs(delta), self.stock)
        return new_stock

    def adjust_stock(self, delta: int) -> int:
        self.stock = self.stock_after(delta)
        return self.stock
