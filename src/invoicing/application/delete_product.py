"""Application service: Delete Product use case.

A product leaves the catalog only while nothing refers to it: no stock
movement in the ledger and no line on any invoice.
"""

from __future__ import annotations

import logging

from invoicing.domain.exceptions import ProductNotFoundError, ValidationError
from invoicing.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class DeleteProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: str) -> None:
        with self._uow as uow:
            product = uow.products.get_for_update(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            if uow.movements.list_recent(product_id, limit=1):
                raise ValidationError.for_field(
                    "product_id",
                    f"Product {product.sku} has stock movements and cannot be deleted",
                )
            if uow.invoices.references_product(product_id):
                raise ValidationError.for_field(
                    "product_id",
                    f"Product {product.sku} appears on invoices and cannot be deleted",
                )
            uow.products.delete(product_id)

        logger.info("product_deleted", extra={"product_id": product_id, "sku": product.sku})
