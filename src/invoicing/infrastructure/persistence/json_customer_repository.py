"""JSON-file-backed implementations of CustomerRepository and CompanyRepository."""

from __future__ import annotations

from pathlib import Path

from invoicing.domain.model.party import Company, Customer
from invoicing.domain.repository.customer_repository import (
    CompanyRepository,
    CustomerRepository,
)
from invoicing.infrastructure.persistence.json_file import JsonFile


class JsonCustomerRepository(CustomerRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, [])

    def get_by_id(self, customer_id: str) -> Customer | None:
        return self._load().get(customer_id)

    def list_all(self) -> list[Customer]:
        return sorted(self._load().values(), key=lambda c: c.name.lower())

    def save(self, customer: Customer) -> None:
        customers = self._load()
        customers[customer.id] = customer
        self._persist(customers)

    def delete(self, customer_id: str) -> None:
        customers = self._load()
        if customers.pop(customer_id, None) is not None:
            self._persist(customers)

    def _persist(self, customers: dict[str, Customer]) -> None:
        self._file.persist(
            [
                {
                    "id": c.id,
                    "name": c.name,
                    "jurisdiction": c.jurisdiction,
                    "tax_id": c.tax_id,
                    "address": c.address,
                    "phone": c.phone,
                    "email": c.email,
                }
                for c in customers.values()
            ]
        )

    def _load(self) -> dict[str, Customer]:
        return {
            item["id"]: Customer(
                id=item["id"],
                name=item["name"],
                jurisdiction=item["jurisdiction"],
                tax_id=item.get("tax_id"),
                address=item.get("address"),
                phone=item.get("phone"),
                email=item.get("email"),
            )
            for item in self._file.load()
        }


class JsonCompanyRepository(CompanyRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, None)

    def get(self) -> Company | None:
        raw = self._file.load()
        if raw is None:
            return None
        return Company(
            name=raw["name"],
            jurisdiction=raw["jurisdiction"],
            invoice_prefix=raw.get("invoice_prefix", "INV"),
            tax_id=raw.get("tax_id"),
            address=raw.get("address"),
        )

    def save(self, company: Company) -> None:
        self._file.persist(
            {
                "name": company.name,
                "jurisdiction": company.jurisdiction,
                "invoice_prefix": company.invoice_prefix,
                "tax_id": company.tax_id,
                "address": company.address,
            }
        )
