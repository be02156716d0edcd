"""Invoice aggregate — the core of the domain.

The Invoice is an aggregate root that owns its lines. Totals are derived
once, when the draft is built, and frozen (rounded) when it is issued.
After that only the lifecycle status may change.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from invoicing.domain.exceptions import InvalidInvoiceInputError, ValidationError
from invoicing.domain.model.value_objects import Quantity, round_half_up
from invoicing.domain.service.tax_calculator import TaxSplit, compute_tax

_ZERO = Decimal("0")


class InvoiceStatus(Enum):
    DRAFT = "DRAFT"
    ISSUED = "ISSUED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class InvoiceLine:
    """One sold product, priced at the time of sale.

    ``rate`` may differ from the catalog price. ``amount`` is the taxable
    value of the line (``quantity * rate - discount``); ``total`` adds
    the line's tax.
    """

    product_id: str
    product_name: str
    quantity: int
    rate: Decimal
    discount: Decimal
    tax_rate: Decimal
    amount: Decimal
    tax: TaxSplit

    @property
    def total(self) -> Decimal:
        return self.amount + self.tax.total

    @staticmethod
    def price(
        *,
        product_id: str,
        product_name: str,
        quantity: int,
        rate: Decimal,
        discount: Decimal,
        tax_rate: Decimal,
        seller_jurisdiction: str,
        buyer_jurisdiction: str,
    ) -> InvoiceLine:
        """Build a line and compute its tax split."""
        qty = Quantity(quantity).value
        if rate < _ZERO:
            raise ValidationError.for_field("rate", "Rate cannot be negative")
        if discount < _ZERO:
            raise ValidationError.for_field("discount", "Discount cannot be negative")

        gross = rate * qty
        if discount > gross:
            raise ValidationError.for_field(
                "discount",
                f"Line discount {discount} exceeds line value {gross} for {product_name}",
            )
        amount = gross - discount
        tax = compute_tax(amount, tax_rate, seller_jurisdiction, buyer_jurisdiction)
        return InvoiceLine(
            product_id=product_id,
            product_name=product_name,
            quantity=qty,
            rate=rate,
            discount=discount,
            tax_rate=tax_rate,
            amount=amount,
            tax=tax,
        )

    def rounded(self) -> InvoiceLine:
        return replace(self, amount=round_half_up(self.amount), tax=self.tax.rounded())


@dataclass
class Invoice:
    """Aggregate root for sales invoices.

    Use ``Invoice.draft()`` for new invoices — it derives every total.
    The ``__init__`` is intentionally simple so repositories can
    reconstitute persisted invoices without re-deriving anything.
    """

    number: str | None
    invoice_date: datetime
    customer_id: str | None
    customer_name: str
    customer_jurisdiction: str
    seller_jurisdiction: str
    lines: tuple[InvoiceLine, ...]
    subtotal: Decimal
    discount: Decimal
    tax: TaxSplit
    total: Decimal
    status: InvoiceStatus = InvoiceStatus.DRAFT
    notes: str | None = None
    due_date: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None

    # --- Factory (used for NEW invoices only) ---------------------------------

    @staticmethod
    def draft(
        *,
        customer_id: str | None,
        customer_name: str,
        customer_jurisdiction: str,
        seller_jurisdiction: str,
        lines: list[InvoiceLine],
        discount: Decimal,
        invoice_date: datetime,
        notes: str | None = None,
        due_date: datetime | None = None,
    ) -> Invoice:
        """Assemble an in-memory DRAFT and derive its totals.

        The invoice-level discount is subtracted from the subtotal only;
        line taxes were computed on the undiscounted line amounts and are
        not re-derived.
        """
        if not lines:
            raise InvalidInvoiceInputError.for_field(
                "items", "Invoice must contain at least one item"
            )
        if discount < _ZERO:
            raise InvalidInvoiceInputError.for_field("discount", "Discount cannot be negative")

        subtotal = sum((line.amount for line in lines), _ZERO)
        if discount > subtotal:
            raise InvalidInvoiceInputError.for_field(
                "discount", f"Invoice discount {discount} exceeds subtotal {subtotal}"
            )

        tax = sum((line.tax for line in lines), TaxSplit.zero())
        total = (subtotal - discount) + tax.first_split + tax.second_split + tax.cross_border

        return Invoice(
            number=None,
            invoice_date=invoice_date,
            customer_id=customer_id,
            customer_name=customer_name,
            customer_jurisdiction=customer_jurisdiction,
            seller_jurisdiction=seller_jurisdiction,
            lines=tuple(lines),
            subtotal=subtotal,
            discount=discount,
            tax=tax,
            total=total,
            notes=notes,
            due_date=due_date,
        )

    # --- State transitions ----------------------------------------------------

    def issue(self, number: str) -> None:
        """Transition DRAFT -> ISSUED, assigning the number and freezing totals.

        Each line is rounded half-up here, once. Subtotal and tax are the
        sums of the rounded lines and the grand total is the sum of those,
        so a printed invoice always reconciles with its own lines. The
        discount is capped at the rounded subtotal.
        """
        if self.status != InvoiceStatus.DRAFT:
            raise ValidationError(
                f"Cannot issue invoice — current status is {self.status.value}, "
                f"expected DRAFT"
            )
        self.lines = tuple(line.rounded() for line in self.lines)
        self.subtotal = sum((line.amount for line in self.lines), _ZERO)
        self.discount = min(round_half_up(self.discount), self.subtotal)
        self.tax = sum((line.tax for line in self.lines), TaxSplit.zero())
        self.total = self.taxable_value + self.tax.total
        self.number = number
        self.status = InvoiceStatus.ISSUED

    def cancel(self, reason: str | None = None, when: datetime | None = None) -> None:
        """Transition ISSUED -> CANCELLED. Lines and totals stay untouched."""
        if self.status == InvoiceStatus.CANCELLED:
            raise ValidationError(f"Invoice {self.number} is already cancelled")
        if self.status != InvoiceStatus.ISSUED:
            raise ValidationError(
                f"Cannot cancel invoice in {self.status.value} status"
            )
        self.status = InvoiceStatus.CANCELLED
        self.cancelled_at = when or datetime.now(timezone.utc)
        self.cancellation_reason = reason

    # --- Computed properties --------------------------------------------------

    @property
    def taxable_value(self) -> Decimal:
        return self.subtotal - self.discount
