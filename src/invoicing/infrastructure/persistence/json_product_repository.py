"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from invoicing.domain.model.product import Product
from invoicing.domain.model.value_objects import Money, TaxRate
from invoicing.domain.repository.product_repository import ProductRepository
from invoicing.infrastructure.persistence.json_file import JsonFile


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, [])

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        return self._load().get(product_id)

    def get_for_update(self, product_id: str) -> Product | None:
        # The unit of work already holds the store lock.
        return self.get_by_id(product_id)

    def get_by_sku(self, sku: str) -> Product | None:
        for product in self._load().values():
            if product.sku == sku:
                return product
        return None

    def list_all(self) -> list[Product]:
        return sorted(self._load().values(), key=lambda p: p.name.lower())

    def save(self, product: Product) -> None:
        products = self._load()
        products[product.id] = product
        self._persist(products)

    def delete(self, product_id: str) -> None:
        products = self._load()
        if products.pop(product_id, None) is not None:
            self._persist(products)

    # --- Serialization helpers ------------------------------------------------

    def _load(self) -> dict[str, Product]:
        return {
            item["id"]: Product(
                id=item["id"],
                sku=item["sku"],
                name=item["name"],
                price=Money(Decimal(item["price"])),
                tax_rate=TaxRate(Decimal(item["tax_rate"])),
                stock=item["stock"],
                min_stock=item.get("min_stock", 0),
                hsn=item.get("hsn"),
                unit=item.get("unit", "PCS"),
                category=item.get("category", "General"),
                description=item.get("description"),
            )
            for item in self._file.load()
        }

    def _persist(self, products: dict[str, Product]) -> None:
        self._file.persist(
            [
                {
                    "id": p.id,
                    "sku": p.sku,
                    "name": p.name,
                    "price": str(p.price.amount),
                    "tax_rate": str(p.tax_rate.percent),
                    "stock": p.stock,
                    "min_stock": p.min_stock,
                    "hsn": p.hsn,
                    "unit": p.unit,
                    "category": p.category,
                    "description": p.description,
                }
                for p in products.values()
            ]
        )
