"""Application service: Update Product use case.

Catalog fields only. Stock changes go through the stock ledger.
"""

from __future__ import annotations

from invoicing.application.dto import ProductDTO, product_to_dto
from invoicing.domain.exceptions import ProductNotFoundError, ValidationError
from invoicing.domain.model.value_objects import Money, TaxRate
from invoicing.domain.repository.unit_of_work import UnitOfWork


class UpdateProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        product_id: str,
        *,
        name: str | None = None,
        price: str | None = None,
        tax_rate: str | None = None,
        min_stock: int | None = None,
        hsn: str | None = None,
        unit: str | None = None,
        category: str | None = None,
        description: str | None = None,
    ) -> ProductDTO:
        """Update a product's catalog data.

        This does NOT affect any issued invoices — their lines captured
        the rate and tax rate at the time of sale.
        """
        with self._uow as uow:
            product = uow.products.get_for_update(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)

            if name is not None:
                if not name.strip():
                    raise ValidationError.for_field("name", "Product name is required")
                product.name = name.strip()
            if price is not None:
                product.update_price(Money.of(price))
            if tax_rate is not None:
                product.tax_rate = TaxRate.of(tax_rate)
            if min_stock is not None:
                product.update_min_stock(min_stock)
            if hsn is not None:
                product.hsn = hsn
            if unit is not None:
                product.unit = unit
            if category is not None:
                product.category = category
            if description is not None:
                product.description = description

            uow.products.save(product)

        return product_to_dto(product)
