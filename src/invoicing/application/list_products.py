"""Application service: catalog queries."""

from __future__ import annotations

from invoicing.application.dto import ProductDTO, product_to_dto
from invoicing.domain.exceptions import ProductNotFoundError
from invoicing.domain.repository.unit_of_work import UnitOfWork


class ListProductsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, category: str | None = None) -> list[ProductDTO]:
        with self._uow as uow:
            products = uow.products.list_all()
        return [
            product_to_dto(p)
            for p in products
            if category is None or p.category == category
        ]


class FindProductBySkuHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, sku: str) -> ProductDTO:
        with self._uow as uow:
            product = uow.products.get_by_sku(sku)
        if product is None:
            raise ProductNotFoundError(sku)
        return product_to_dto(product)
