"""SQLAlchemy ORM tables for the transactional store.

Money and rates are stored as exact decimal strings, and timestamps as
ISO-8601 text, so SQLite and PostgreSQL round-trip them identically.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator


class DecimalString(TypeDecorator):
    """Decimal stored as its exact string form."""

    impl = String(40)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return Decimal(value)
        return None


class IsoDateTime(TypeDecorator):
    """Timezone-aware datetime stored as ISO-8601 text."""

    impl = String(40)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return value.isoformat()
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return datetime.fromisoformat(value)
        return None


class Base(DeclarativeBase):
    pass


class ProductRow(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    sku: Mapped[str] = mapped_column(String(100), unique=True)
    name: Mapped[str] = mapped_column(String(255))
    price: Mapped[Decimal] = mapped_column(DecimalString())
    tax_rate: Mapped[Decimal] = mapped_column(DecimalString())
    stock: Mapped[int] = mapped_column(Integer, default=0)
    min_stock: Mapped[int] = mapped_column(Integer, default=0)
    hsn: Mapped[str | None] = mapped_column(String(20))
    unit: Mapped[str] = mapped_column(String(20), default="PCS")
    category: Mapped[str] = mapped_column(String(100), default="General")
    description: Mapped[str | None] = mapped_column(Text)


class CustomerRow(Base):
    __tablename__ = "customers"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    jurisdiction: Mapped[str] = mapped_column(String(100))
    tax_id: Mapped[str | None] = mapped_column(String(20))
    address: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(String(40))
    email: Mapped[str | None] = mapped_column(String(255))


class CompanyRow(Base):
    __tablename__ = "company"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    jurisdiction: Mapped[str] = mapped_column(String(100))
    invoice_prefix: Mapped[str] = mapped_column(String(20), default="INV")
    tax_id: Mapped[str | None] = mapped_column(String(20))
    address: Mapped[str | None] = mapped_column(Text)


class InvoiceRow(Base):
    __tablename__ = "invoices"

    number: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(String(20))
    invoice_date: Mapped[datetime] = mapped_column(IsoDateTime())
    due_date: Mapped[datetime | None] = mapped_column(IsoDateTime())
    customer_id: Mapped[str | None] = mapped_column(ForeignKey("customers.id"))
    customer_name: Mapped[str] = mapped_column(String(255))
    customer_jurisdiction: Mapped[str] = mapped_column(String(100))
    seller_jurisdiction: Mapped[str] = mapped_column(String(100))
    subtotal: Mapped[Decimal] = mapped_column(DecimalString())
    discount: Mapped[Decimal] = mapped_column(DecimalString())
    tax_first_split: Mapped[Decimal] = mapped_column(DecimalString())
    tax_second_split: Mapped[Decimal] = mapped_column(DecimalString())
    tax_cross_border: Mapped[Decimal] = mapped_column(DecimalString())
    tax_total: Mapped[Decimal] = mapped_column(DecimalString())
    total: Mapped[Decimal] = mapped_column(DecimalString())
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(IsoDateTime())
    cancelled_at: Mapped[datetime | None] = mapped_column(IsoDateTime())
    cancellation_reason: Mapped[str | None] = mapped_column(Text)

    lines: Mapped[list[InvoiceLineRow]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineRow.position",
    )


class InvoiceLineRow(Base):
    __tablename__ = "invoice_lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invoice_number: Mapped[str] = mapped_column(ForeignKey("invoices.number"))
    position: Mapped[int] = mapped_column(Integer)
    product_id: Mapped[str] = mapped_column(ForeignKey("products.id"))
    product_name: Mapped[str] = mapped_column(String(255))
    quantity: Mapped[int] = mapped_column(Integer)
    rate: Mapped[Decimal] = mapped_column(DecimalString())
    discount: Mapped[Decimal] = mapped_column(DecimalString())
    tax_rate: Mapped[Decimal] = mapped_column(DecimalString())
    amount: Mapped[Decimal] = mapped_column(DecimalString())
    tax_first_split: Mapped[Decimal] = mapped_column(DecimalString())
    tax_second_split: Mapped[Decimal] = mapped_column(DecimalString())
    tax_cross_border: Mapped[Decimal] = mapped_column(DecimalString())
    tax_total: Mapped[Decimal] = mapped_column(DecimalString())

    invoice: Mapped[InvoiceRow] = relationship(back_populates="lines")


class StockMovementRow(Base):
    __tablename__ = "stock_movements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(ForeignKey("products.id"), index=True)
    type: Mapped[str] = mapped_column(String(20))
    quantity: Mapped[int] = mapped_column(Integer)
    reference: Mapped[str | None] = mapped_column(String(64), index=True)
    note: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(IsoDateTime())


class InvoiceCounterRow(Base):
    __tablename__ = "invoice_counters"
    __table_args__ = (UniqueConstraint("year", "prefix", name="uq_invoice_counter_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    year: Mapped[int] = mapped_column(Integer)
    prefix: Mapped[str] = mapped_column(String(20))
    value: Mapped[int] = mapped_column(Integer, default=0)
