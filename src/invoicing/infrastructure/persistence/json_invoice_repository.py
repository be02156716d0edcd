"""JSON-file-backed implementation of InvoiceRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from invoicing.domain.model.invoice import Invoice, InvoiceLine, InvoiceStatus
from invoicing.domain.repository.invoice_repository import InvoiceRepository
from invoicing.domain.service.tax_calculator import TaxSplit
from invoicing.infrastructure.persistence.json_file import JsonFile


def _dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _tax_to_raw(tax: TaxSplit) -> dict:
    return {
        "first_split": str(tax.first_split),
        "second_split": str(tax.second_split),
        "cross_border": str(tax.cross_border),
        "total": str(tax.total),
    }


def _tax_to_domain(raw: dict) -> TaxSplit:
    return TaxSplit(
        first_split=Decimal(raw["first_split"]),
        second_split=Decimal(raw["second_split"]),
        cross_border=Decimal(raw["cross_border"]),
        total=Decimal(raw["total"]),
    )


class JsonInvoiceRepository(InvoiceRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, [])

    # --- InvoiceRepository interface ------------------------------------------

    def get_by_number(self, number: str) -> Invoice | None:
        for raw in self._file.load():
            if raw["number"] == number:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Invoice]:
        invoices = [self._to_domain(raw) for raw in reversed(self._file.load())]
        invoices.sort(key=lambda i: i.created_at, reverse=True)
        return invoices

    def list_by_customer(self, customer_id: str, limit: int | None = None) -> list[Invoice]:
        invoices = [i for i in self.list_all() if i.customer_id == customer_id]
        return invoices if limit is None else invoices[:limit]

    def references_product(self, product_id: str) -> bool:
        return any(
            item["product_id"] == product_id
            for raw in self._file.load()
            for item in raw["items"]
        )

    def add(self, invoice: Invoice) -> None:
        invoices = self._file.load()
        if any(raw["number"] == invoice.number for raw in invoices):
            raise ValueError(f"Invoice {invoice.number} already exists")
        invoices.append(self._to_raw(invoice))
        self._file.persist(invoices)

    def update_status(self, invoice: Invoice) -> None:
        invoices = self._file.load()
        for raw in invoices:
            if raw["number"] == invoice.number:
                raw["status"] = invoice.status.value
                raw["cancelled_at"] = (
                    invoice.cancelled_at.isoformat() if invoice.cancelled_at else None
                )
                raw["cancellation_reason"] = invoice.cancellation_reason
                break
        else:
            raise ValueError(f"Invoice {invoice.number} does not exist")
        self._file.persist(invoices)

    def remove(self, number: str) -> None:
        invoices = [raw for raw in self._file.load() if raw["number"] != number]
        self._file.persist(invoices)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(invoice: Invoice) -> dict:
        return {
            "number": invoice.number,
            "status": invoice.status.value,
            "invoice_date": invoice.invoice_date.isoformat(),
            "due_date": invoice.due_date.isoformat() if invoice.due_date else None,
            "customer_id": invoice.customer_id,
            "customer_name": invoice.customer_name,
            "customer_jurisdiction": invoice.customer_jurisdiction,
            "seller_jurisdiction": invoice.seller_jurisdiction,
            "subtotal": str(invoice.subtotal),
            "discount": str(invoice.discount),
            "tax": _tax_to_raw(invoice.tax),
            "total": str(invoice.total),
            "notes": invoice.notes,
            "created_at": invoice.created_at.isoformat(),
            "cancelled_at": invoice.cancelled_at.isoformat() if invoice.cancelled_at else None,
            "cancellation_reason": invoice.cancellation_reason,
            "items": [
                {
                    "product_id": line.product_id,
                    "product_name": line.product_name,
                    "quantity": line.quantity,
                    "rate": str(line.rate),
                    "discount": str(line.discount),
                    "tax_rate": str(line.tax_rate),
                    "amount": str(line.amount),
                    "tax": _tax_to_raw(line.tax),
                }
                for line in invoice.lines
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Invoice:
        lines = tuple(
            InvoiceLine(
                product_id=i["product_id"],
                product_name=i["product_name"],
                quantity=i["quantity"],
                rate=Decimal(i["rate"]),
                discount=Decimal(i["discount"]),
                tax_rate=Decimal(i["tax_rate"]),
                amount=Decimal(i["amount"]),
                tax=_tax_to_domain(i["tax"]),
            )
            for i in raw["items"]
        )
        return Invoice(
            number=raw["number"],
            invoice_date=datetime.fromisoformat(raw["invoice_date"]),
            customer_id=raw.get("customer_id"),
            customer_name=raw["customer_name"],
            customer_jurisdiction=raw["customer_jurisdiction"],
            seller_jurisdiction=raw["seller_jurisdiction"],
            lines=lines,
            subtotal=Decimal(raw["subtotal"]),
            discount=Decimal(raw["discount"]),
            tax=_tax_to_domain(raw["tax"]),
            total=Decimal(raw["total"]),
            status=InvoiceStatus(raw["status"]),
            notes=raw.get("notes"),
            due_date=_dt(raw.get("due_date")),
            created_at=datetime.fromisoformat(raw["created_at"]),
            cancelled_at=_dt(raw.get("cancelled_at")),
            cancellation_reason=raw.get("cancellation_reason"),
        )
