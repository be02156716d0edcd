"""Abstract Unit of Work.

One ``with uow:`` block is one atomic unit: on normal exit everything
written through the repositories is committed, on an exception it is
rolled back. Stores that cannot roll back declare
``supports_transactions = False`` and callers must compensate instead.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

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


class UnitOfWork(ABC):

    products: ProductRepository
    customers: CustomerRepository
    company: CompanyRepository
    invoices: InvoiceRepository
    movements: StockMovementRepository
    counters: SequenceCounterRepository

    supports_transactions: bool = True

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every write of this unit of work durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every write of this unit of work, where the store can."""
