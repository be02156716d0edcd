"""Application service: Issue Invoice use case (the invoice assembler).

Validates the request, prices every line, allocates the invoice number,
persists the invoice and books one OUT stock movement per line, all
inside one unit of work. Either everything is committed or nothing is:
a transactional store rolls back on any error; for a store without
transactions every write is undone through the compensation log.

Tax is computed per line on the line amount (after the line discount).
The invoice-level discount only reduces the subtotal; line taxes are not
re-derived from the discounted base.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import partial
from typing import Callable

from invoicing.application.compensation import Compensation
from invoicing.application.dto import InvoiceDTO, IssueInvoiceCommand, invoice_to_dto
from invoicing.domain.exceptions import (
    CompanyNotConfiguredError,
    CustomerNotFoundError,
    FieldViolation,
    InvalidInvoiceInputError,
    ProductNotFoundError,
    ValidationError,
)
from invoicing.domain.model.invoice import Invoice, InvoiceLine
from invoicing.domain.model.party import Company
from invoicing.domain.model.stock_movement import MovementKind
from invoicing.domain.model.value_objects import to_decimal
from invoicing.domain.repository.unit_of_work import UnitOfWork
from invoicing.domain.service.sequence_allocator import SequenceAllocator
from invoicing.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


class IssueInvoiceHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        default_jurisdiction: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow = uow
        self._default_jurisdiction = default_jurisdiction
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def handle(self, command: IssueInvoiceCommand) -> InvoiceDTO:
        """Issue a new invoice.

        Steps:
        1. Validate the request (no side effects on failure).
        2. Resolve buyer and seller jurisdictions.
        3. Price each line and compute its tax split.
        4. Derive invoice totals (invoice discount applied once).
        5. Allocate the next number for (current year, company prefix).
        6. Persist the invoice as ISSUED.
        7. Book an OUT movement per line, referencing the invoice number.
        """
        self._validate(command)

        with self._uow as uow:
            compensation = Compensation(enabled=not uow.supports_transactions)
            try:
                invoice = self._issue(uow, command, compensation)
            except Exception:
                compensation.run()
                raise

        logger.info(
            "invoice_issued",
            extra={
                "invoice_number": invoice.number,
                "customer": invoice.customer_name,
                "lines": len(invoice.lines),
                "total": str(invoice.total),
            },
        )
        return invoice_to_dto(invoice)

    # --- Steps ----------------------------------------------------------------

    def _issue(
        self,
        uow: UnitOfWork,
        command: IssueInvoiceCommand,
        compensation: Compensation,
    ) -> Invoice:
        now = self._clock()

        company = uow.company.get()
        if company is None:
            raise CompanyNotConfiguredError("Company profile is not configured")
        customer_id, customer_name, buyer_jurisdiction = self._resolve_customer(
            uow, command, company
        )

        lines: list[InvoiceLine] = []
        for spec in command.lines:
            product = uow.products.get_by_id(spec.product_id)
            if product is None:
                raise ProductNotFoundError(spec.product_id)
            lines.append(
                InvoiceLine.price(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=spec.quantity,
                    rate=to_decimal(spec.rate, "rate"),
                    discount=to_decimal(spec.discount, "discount"),
                    tax_rate=product.tax_rate.percent,
                    seller_jurisdiction=company.jurisdiction,
                    buyer_jurisdiction=buyer_jurisdiction,
                )
            )

        invoice = Invoice.draft(
            customer_id=customer_id,
            customer_name=customer_name,
            customer_jurisdiction=buyer_jurisdiction,
            seller_jurisdiction=company.jurisdiction,
            lines=lines,
            discount=to_decimal(command.discount, "discount"),
            invoice_date=command.invoice_date or now,
            notes=command.notes,
            due_date=command.due_date,
        )

        allocator = SequenceAllocator(uow.counters)
        number = allocator.allocate(now.year, company.invoice_prefix)
        compensation.add("release invoice number", partial(allocator.release, number))

        invoice.issue(str(number))
        uow.invoices.add(invoice)
        compensation.add("remove invoice", partial(uow.invoices.remove, str(number)))

        ledger = StockLedger(uow.products, uow.movements, self._clock)
        for line in invoice.lines:
            result = ledger.apply_movement(
                line.product_id,
                MovementKind.OUT,
                -line.quantity,
                reference=str(number),
                note=f"Sale via invoice {number}",
            )
            compensation.add("retract stock movement", partial(ledger.retract, result))

        return invoice

    def _resolve_customer(
        self,
        uow: UnitOfWork,
        command: IssueInvoiceCommand,
        company: Company,
    ) -> tuple[str | None, str, str]:
        """Return (customer_id, display name, buyer jurisdiction)."""
        customer_id = (command.customer_id or "").strip()
        if customer_id:
            customer = uow.customers.get_by_id(customer_id)
            if customer is None:
                raise CustomerNotFoundError(customer_id)
            return customer.id, customer.name, customer.jurisdiction

        name = (command.customer_name or "").strip()
        jurisdiction = command.customer_jurisdiction or self._default_jurisdiction
        if not jurisdiction:
            # Ad-hoc buyer with no known location: treated as local.
            logger.warning(
                "adhoc_customer_jurisdiction_assumed",
                extra={"customer": name, "jurisdiction": company.jurisdiction},
            )
            jurisdiction = company.jurisdiction
        return None, name, jurisdiction

    # --- Validation -----------------------------------------------------------

    @staticmethod
    def _validate(command: IssueInvoiceCommand) -> None:
        """Reject malformed input before any storage is touched."""
        violations: list[FieldViolation] = []

        has_id = bool(command.customer_id and command.customer_id.strip())
        has_name = bool(command.customer_name and command.customer_name.strip())
        if has_id == has_name:
            violations.append(
                FieldViolation(
                    "customer_id",
                    "Exactly one of customer_id or customer_name must be provided",
                )
            )
        if has_id and command.customer_jurisdiction:
            violations.append(
                FieldViolation(
                    "customer_jurisdiction",
                    "customer_jurisdiction applies only to ad-hoc customers",
                )
            )

        if not command.lines:
            violations.append(FieldViolation("items", "Invoice must contain at least one item"))

        for index, spec in enumerate(command.lines):
            prefix = f"items[{index}]"
            if not spec.product_id:
                violations.append(FieldViolation(f"{prefix}.product_id", "Product is required"))
            if (
                not isinstance(spec.quantity, int)
                or isinstance(spec.quantity, bool)
                or spec.quantity <= 0
            ):
                violations.append(
                    FieldViolation(f"{prefix}.quantity", "Quantity must be a positive integer")
                )
                continue
            try:
                rate = to_decimal(spec.rate, "rate")
                discount = to_decimal(spec.discount, "discount")
            except ValidationError as exc:
                violations.append(FieldViolation(prefix, str(exc)))
                continue
            if rate < 0:
                violations.append(FieldViolation(f"{prefix}.rate", "Rate cannot be negative"))
            if discount < 0:
                violations.append(
                    FieldViolation(f"{prefix}.discount", "Discount cannot be negative")
                )
            elif rate >= 0 and discount > rate * spec.quantity:
                violations.append(
                    FieldViolation(f"{prefix}.discount", "Discount exceeds the line value")
                )

        try:
            if to_decimal(command.discount, "discount") < 0:
                violations.append(FieldViolation("discount", "Discount cannot be negative"))
        except ValidationError as exc:
            violations.append(FieldViolation("discount", str(exc)))

        if violations:
            raise InvalidInvoiceInputError(
                "Invalid invoice: " + "; ".join(f"{v.field}: {v.message}" for v in violations),
                violations,
            )
