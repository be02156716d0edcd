"""SQLAlchemy implementations of the repositories.

All repositories share the unit of work's session; nothing here commits.
Rows that other transactions may be changing concurrently (product stock,
invoice counters) are read with ``SELECT ... FOR UPDATE`` and
``populate_existing`` so the lock and the values come from the same read.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from invoicing.domain.model.invoice import Invoice, InvoiceLine, InvoiceStatus
from invoicing.domain.model.party import Company, Customer
from invoicing.domain.model.product import Product
from invoicing.domain.model.stock_movement import MovementKind, StockMovement
from invoicing.domain.model.value_objects import Money, TaxRate
from invoicing.domain.repository.customer_repository import (
    CompanyRepository,
    CustomerRepository,
)
from invoicing.domain.repository.invoice_repository import InvoiceRepository
from invoicing.domain.repository.product_repository import ProductRepository
from invoicing.domain.repository.sequence_counter_repository import (
    SequenceCounterRepository,
)
from invoicing.domain.repository.stock_movement_repository import (
    StockMovementRepository,
)
from invoicing.domain.service.tax_calculator import TaxSplit
from invoicing.infrastructure.persistence.sql_tables import (
    CompanyRow,
    CustomerRow,
    InvoiceCounterRow,
    InvoiceLineRow,
    InvoiceRow,
    ProductRow,
    StockMovementRow,
)

logger = logging.getLogger(__name__)

_COMPANY_ROW_ID = 1


# --- Products ------------------------------------------------------------------


class SqlAlchemyProductRepository(ProductRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, product_id: str) -> Product | None:
        row = self._session.get(ProductRow, product_id)
        return self._to_domain(row) if row is not None else None

    def get_for_update(self, product_id: str) -> Product | None:
        row = self._session.execute(
            select(ProductRow)
            .where(ProductRow.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def get_by_sku(self, sku: str) -> Product | None:
        row = self._session.execute(
            select(ProductRow).where(ProductRow.sku == sku)
        ).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Product]:
        rows = self._session.execute(select(ProductRow).order_by(ProductRow.name)).scalars()
        return [self._to_domain(row) for row in rows]

    def save(self, product: Product) -> None:
        row = self._session.get(ProductRow, product.id)
        if row is None:
            row = ProductRow(id=product.id)
            self._session.add(row)
        row.sku = product.sku
        row.name = product.name
        row.price = product.price.amount
        row.tax_rate = product.tax_rate.percent
        row.stock = product.stock
        row.min_stock = product.min_stock
        row.hsn = product.hsn
        row.unit = product.unit
        row.category = product.category
        row.description = product.description
        self._session.flush()

    def delete(self, product_id: str) -> None:
        row = self._session.get(ProductRow, product_id)
        if row is not None:
            self._session.delete(row)
            self._session.flush()

    @staticmethod
    def _to_domain(row: ProductRow) -> Product:
        return Product(
            id=row.id,
            sku=row.sku,
            name=row.name,
            price=Money(row.price),
            tax_rate=TaxRate(row.tax_rate),
            stock=row.stock,
            min_stock=row.min_stock,
            hsn=row.hsn,
            unit=row.unit,
            category=row.category,
            description=row.description,
        )


# --- Parties -------------------------------------------------------------------


class SqlAlchemyCustomerRepository(CustomerRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, customer_id: str) -> Customer | None:
        row = self._session.get(CustomerRow, customer_id)
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Customer]:
        rows = self._session.execute(select(CustomerRow).order_by(CustomerRow.name)).scalars()
        return [self._to_domain(row) for row in rows]

    def save(self, customer: Customer) -> None:
        row = self._session.get(CustomerRow, customer.id)
        if row is None:
            row = CustomerRow(id=customer.id)
            self._session.add(row)
        row.name = customer.name
        row.jurisdiction = customer.jurisdiction
        row.tax_id = customer.tax_id
        row.address = customer.address
        row.phone = customer.phone
        row.email = customer.email
        self._session.flush()

    def delete(self, customer_id: str) -> None:
        row = self._session.get(CustomerRow, customer_id)
        if row is not None:
            self._session.delete(row)
            self._session.flush()

    @staticmethod
    def _to_domain(row: CustomerRow) -> Customer:
        return Customer(
            id=row.id,
            name=row.name,
            jurisdiction=row.jurisdiction,
            tax_id=row.tax_id,
            address=row.address,
            phone=row.phone,
            email=row.email,
        )


class SqlAlchemyCompanyRepository(CompanyRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self) -> Company | None:
        row = self._session.get(CompanyRow, _COMPANY_ROW_ID)
        if row is None:
            return None
        return Company(
            name=row.name,
            jurisdiction=row.jurisdiction,
            invoice_prefix=row.invoice_prefix,
            tax_id=row.tax_id,
            address=row.address,
        )

    def save(self, company: Company) -> None:
        row = self._session.get(CompanyRow, _COMPANY_ROW_ID)
        if row is None:
            row = CompanyRow(id=_COMPANY_ROW_ID)
            self._session.add(row)
        row.name = company.name
        row.jurisdiction = company.jurisdiction
        row.invoice_prefix = company.invoice_prefix
        row.tax_id = company.tax_id
        row.address = company.address
        self._session.flush()


# --- Invoices ------------------------------------------------------------------


class SqlAlchemyInvoiceRepository(InvoiceRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_number(self, number: str) -> Invoice | None:
        row = self._session.get(InvoiceRow, number)
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Invoice]:
        rows = self._session.execute(
            select(InvoiceRow).order_by(InvoiceRow.created_at.desc(), InvoiceRow.number.desc())
        ).scalars()
        return [self._to_domain(row) for row in rows]

    def list_by_customer(self, customer_id: str, limit: int | None = None) -> list[Invoice]:
        stmt = (
            select(InvoiceRow)
            .where(InvoiceRow.customer_id == customer_id)
            .order_by(InvoiceRow.created_at.desc(), InvoiceRow.number.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return [self._to_domain(row) for row in self._session.execute(stmt).scalars()]

    def references_product(self, product_id: str) -> bool:
        line_id = self._session.execute(
            select(InvoiceLineRow.id).where(InvoiceLineRow.product_id == product_id).limit(1)
        ).scalar_one_or_none()
        return line_id is not None

    def add(self, invoice: Invoice) -> None:
        row = InvoiceRow(
            number=invoice.number,
            status=invoice.status.value,
            invoice_date=invoice.invoice_date,
            due_date=invoice.due_date,
            customer_id=invoice.customer_id,
            customer_name=invoice.customer_name,
            customer_jurisdiction=invoice.customer_jurisdiction,
            seller_jurisdiction=invoice.seller_jurisdiction,
            subtotal=invoice.subtotal,
            discount=invoice.discount,
            tax_first_split=invoice.tax.first_split,
            tax_second_split=invoice.tax.second_split,
            tax_cross_border=invoice.tax.cross_border,
            tax_total=invoice.tax.total,
            total=invoice.total,
            notes=invoice.notes,
            created_at=invoice.created_at,
            cancelled_at=invoice.cancelled_at,
            cancellation_reason=invoice.cancellation_reason,
            lines=[
                InvoiceLineRow(
                    position=position,
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    rate=line.rate,
                    discount=line.discount,
                    tax_rate=line.tax_rate,
                    amount=line.amount,
                    tax_first_split=line.tax.first_split,
                    tax_second_split=line.tax.second_split,
                    tax_cross_border=line.tax.cross_border,
                    tax_total=line.tax.total,
                )
                for position, line in enumerate(invoice.lines)
            ],
        )
        self._session.add(row)
        self._session.flush()

    def update_status(self, invoice: Invoice) -> None:
        row = self._session.get(InvoiceRow, invoice.number)
        if row is None:
            raise ValueError(f"Invoice {invoice.number} does not exist")
        row.status = invoice.status.value
        row.cancelled_at = invoice.cancelled_at
        row.cancellation_reason = invoice.cancellation_reason
        self._session.flush()

    def remove(self, number: str) -> None:
        row = self._session.get(InvoiceRow, number)
        if row is not None:
            self._session.delete(row)
            self._session.flush()

    @staticmethod
    def _to_domain(row: InvoiceRow) -> Invoice:
        lines = tuple(
            InvoiceLine(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                rate=line.rate,
                discount=line.discount,
                tax_rate=line.tax_rate,
                amount=line.amount,
                tax=TaxSplit(
                    line.tax_first_split,
                    line.tax_second_split,
                    line.tax_cross_border,
                    line.tax_total,
                ),
            )
            for line in row.lines
        )
        return Invoice(
            number=row.number,
            invoice_date=row.invoice_date,
            customer_id=row.customer_id,
            customer_name=row.customer_name,
            customer_jurisdiction=row.customer_jurisdiction,
            seller_jurisdiction=row.seller_jurisdiction,
            lines=lines,
            subtotal=row.subtotal,
            discount=row.discount,
            tax=TaxSplit(
                row.tax_first_split,
                row.tax_second_split,
                row.tax_cross_border,
                row.tax_total,
            ),
            total=row.total,
            status=InvoiceStatus(row.status),
            notes=row.notes,
            due_date=row.due_date,
            created_at=row.created_at,
            cancelled_at=row.cancelled_at,
            cancellation_reason=row.cancellation_reason,
        )


# --- Stock ledger --------------------------------------------------------------


class SqlAlchemyStockMovementRepository(StockMovementRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, movement: StockMovement) -> StockMovement:
        row = StockMovementRow(
            product_id=movement.product_id,
            type=movement.kind.value,
            quantity=movement.quantity,
            reference=movement.reference,
            note=movement.note,
            created_at=movement.created_at,
        )
        self._session.add(row)
        self._session.flush()
        return replace(movement, id=str(row.id))

    def list_recent(
        self, product_id: str | None = None, limit: int | None = None
    ) -> list[StockMovement]:
        stmt = select(StockMovementRow).order_by(
            StockMovementRow.created_at.desc(), StockMovementRow.id.desc()
        )
        if product_id is not None:
            stmt = stmt.where(StockMovementRow.product_id == product_id)
        if limit is not None:
            stmt = stmt.limit(limit)
        return [self._to_domain(row) for row in self._session.execute(stmt).scalars()]

    def list_by_reference(self, reference: str) -> list[StockMovement]:
        rows = self._session.execute(
            select(StockMovementRow)
            .where(StockMovementRow.reference == reference)
            .order_by(StockMovementRow.id)
        ).scalars()
        return [self._to_domain(row) for row in rows]

    def remove(self, movement_id: str) -> None:
        row = self._session.get(StockMovementRow, int(movement_id))
        if row is not None:
            self._session.delete(row)
            self._session.flush()

    @staticmethod
    def _to_domain(row: StockMovementRow) -> StockMovement:
        return StockMovement(
            id=str(row.id),
            product_id=row.product_id,
            kind=MovementKind(row.type),
            quantity=row.quantity,
            reference=row.reference,
            note=row.note,
            created_at=row.created_at,
        )


# --- Invoice counters ----------------------------------------------------------


class SqlAlchemySequenceCounterRepository(SequenceCounterRepository):
    """Counter rows keyed by (year, prefix); never MAX(number)+1."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def increment(self, year: int, prefix: str) -> int:
        counter = self._locked(year, prefix)

        if counter is None:
            # First number for this key. Another transaction may be creating
            # the same row; the savepoint keeps the rest of our work intact.
            savepoint = self._session.begin_nested()
            try:
                self._session.add(InvoiceCounterRow(year=year, prefix=prefix, value=1))
                self._session.flush()
                savepoint.commit()
                return 1
            except IntegrityError:
                logger.debug(
                    "invoice_counter_race_retry",
                    extra={"year": year, "prefix": prefix},
                )
                savepoint.rollback()
                counter = self._locked(year, prefix)
                if counter is None:
                    raise

        counter.value += 1
        self._session.flush()
        return counter.value

    def current(self, year: int, prefix: str) -> int:
        value = self._session.execute(
            select(InvoiceCounterRow.value).where(
                InvoiceCounterRow.year == year, InvoiceCounterRow.prefix == prefix
            )
        ).scalar_one_or_none()
        return value or 0

    def release(self, year: int, prefix: str, value: int) -> bool:
        counter = self._locked(year, prefix)
        if counter is None or counter.value != value:
            return False
        counter.value -= 1
        self._session.flush()
        return True

    def _locked(self, year: int, prefix: str) -> InvoiceCounterRow | None:
        return self._session.execute(
            select(InvoiceCounterRow)
            .where(InvoiceCounterRow.year == year, InvoiceCounterRow.prefix == prefix)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
