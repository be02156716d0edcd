"""Data Transfer Objects — plain containers that cross layer boundaries.

Commands carry caller input into the handlers; the output DTOs carry
results back out without exposing domain internals. Amounts leave as
strings so they print and serialize without float conversion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from invoicing.domain.model.invoice import Invoice
from invoicing.domain.model.party import Company, Customer
from invoicing.domain.model.product import Product
from invoicing.domain.model.stock_movement import StockMovement
from invoicing.domain.service.amount_in_words import amount_in_words
from invoicing.domain.service.tax_calculator import TaxSplit

# --- Input -------------------------------------------------------------------


@dataclass(frozen=True)
class InvoiceLineSpec:
    """Input: one requested line (product, quantity, unit rate, line discount)."""

    product_id: str
    quantity: int
    rate: Decimal | str
    discount: Decimal | str = Decimal("0")


@dataclass(frozen=True)
class IssueInvoiceCommand:
    """Input: everything needed to issue one invoice.

    Exactly one of ``customer_id`` / ``customer_name`` must be set.
    ``customer_jurisdiction`` is only meaningful for ad-hoc customers.
    """

    lines: list[InvoiceLineSpec]
    customer_id: str | None = None
    customer_name: str | None = None
    customer_jurisdiction: str | None = None
    discount: Decimal | str = Decimal("0")
    notes: str | None = None
    invoice_date: datetime | None = None
    due_date: datetime | None = None


# --- Output ------------------------------------------------------------------


@dataclass(frozen=True)
class TaxBreakdownDTO:
    first_split: str
    second_split: str
    cross_border: str
    total: str
    intra_jurisdiction: bool


@dataclass(frozen=True)
class InvoiceLineDTO:
    product_id: str
    product_name: str
    quantity: int
    rate: str
    discount: str
    tax_rate: str
    amount: str
    tax: TaxBreakdownDTO
    total: str


@dataclass(frozen=True)
class InvoiceDTO:
    """Output: a complete invoice as displayed to the user."""

    number: str
    status: str
    invoice_date: str
    customer_id: str | None
    customer_name: str
    customer_jurisdiction: str
    seller_jurisdiction: str
    items: list[InvoiceLineDTO]
    subtotal: str
    discount: str
    taxable_value: str
    tax: TaxBreakdownDTO
    total: str
    total_in_words: str
    due_date: str | None = None
    notes: str | None = None
    cancelled_at: str | None = None
    cancellation_reason: str | None = None


@dataclass(frozen=True)
class StockMovementDTO:
    id: str
    product_id: str
    type: str
    quantity: int
    reference: str | None
    note: str | None
    created_at: str
    resulting_stock: int | None = None


@dataclass(frozen=True)
class ProductDTO:
    id: str
    sku: str
    name: str
    price: str
    tax_rate: str
    stock: int
    min_stock: int
    unit: str
    category: str
    hsn: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class CustomerDTO:
    id: str
    name: str
    jurisdiction: str
    tax_id: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class CustomerDetailDTO:
    customer: CustomerDTO
    recent_invoices: list[InvoiceDTO] = field(default_factory=list)


@dataclass(frozen=True)
class CompanyDTO:
    name: str
    jurisdiction: str
    invoice_prefix: str
    tax_id: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class InventoryLineDTO:
    product_id: str
    sku: str
    name: str
    category: str
    stock: int
    min_stock: int
    unit: str
    stock_value: str
    low_stock: bool
    out_of_stock: bool


@dataclass(frozen=True)
class InventorySummaryDTO:
    lines: list[InventoryLineDTO] = field(default_factory=list)
    total_value: str = "0.00"

    @property
    def low_stock_count(self) -> int:
        return sum(1 for line in self.lines if line.low_stock)

    @property
    def out_of_stock_count(self) -> int:
        return sum(1 for line in self.lines if line.out_of_stock)


# --- Mapping -----------------------------------------------------------------


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _tax_to_dto(tax: TaxSplit) -> TaxBreakdownDTO:
    return TaxBreakdownDTO(
        first_split=str(tax.first_split),
        second_split=str(tax.second_split),
        cross_border=str(tax.cross_border),
        total=str(tax.total),
        intra_jurisdiction=tax.is_intra_jurisdiction,
    )


def invoice_to_dto(invoice: Invoice) -> InvoiceDTO:
    return InvoiceDTO(
        number=invoice.number,  # type: ignore[arg-type]
        status=invoice.status.value,
        invoice_date=invoice.invoice_date.isoformat(),
        customer_id=invoice.customer_id,
        customer_name=invoice.customer_name,
        customer_jurisdiction=invoice.customer_jurisdiction,
        seller_jurisdiction=invoice.seller_jurisdiction,
        items=[
            InvoiceLineDTO(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                rate=str(line.rate),
                discount=str(line.discount),
                tax_rate=str(line.tax_rate),
                amount=str(line.amount),
                tax=_tax_to_dto(line.tax),
                total=str(line.total),
            )
            for line in invoice.lines
        ],
        subtotal=str(invoice.subtotal),
        discount=str(invoice.discount),
        taxable_value=str(invoice.taxable_value),
        tax=_tax_to_dto(invoice.tax),
        total=str(invoice.total),
        total_in_words=amount_in_words(invoice.total),
        due_date=_iso(invoice.due_date),
        notes=invoice.notes,
        cancelled_at=_iso(invoice.cancelled_at),
        cancellation_reason=invoice.cancellation_reason,
    )


def movement_to_dto(
    movement: StockMovement, resulting_stock: int | None = None
) -> StockMovementDTO:
    return StockMovementDTO(
        id=movement.id,  # type: ignore[arg-type]
        product_id=movement.product_id,
        type=movement.kind.value,
        quantity=movement.quantity,
        reference=movement.reference,
        note=movement.note,
        created_at=movement.created_at.isoformat(),
        resulting_stock=resulting_stock,
    )


def product_to_dto(product: Product) -> ProductDTO:
    return ProductDTO(
        id=product.id,
        sku=product.sku,
        name=product.name,
        price=str(product.price),
        tax_rate=str(product.tax_rate.percent),
        stock=product.stock,
        min_stock=product.min_stock,
        unit=product.unit,
        category=product.category,
        hsn=product.hsn,
        description=product.description,
    )


def customer_to_dto(customer: Customer) -> CustomerDTO:
    return CustomerDTO(
        id=customer.id,
        name=customer.name,
        jurisdiction=customer.jurisdiction,
        tax_id=customer.tax_id,
        address=customer.address,
        phone=customer.phone,
        email=customer.email,
    )


def company_to_dto(company: Company) -> CompanyDTO:
    return CompanyDTO(
        name=company.name,
        jurisdiction=company.jurisdiction,
        invoice_prefix=company.invoice_prefix,
        tax_id=company.tax_id,
        address=company.address,
    )
