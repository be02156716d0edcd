"""Abstract repository for Invoice aggregate.

Issued invoices are immutable apart from their status, so there is no
general-purpose ``save``: invoices are added once and only their status
can be updated afterwards.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from invoicing.domain.model.invoice import Invoice


class InvoiceRepository(ABC):

    @abstractmethod
    def get_by_number(self, number: str) -> Invoice | None:
        """Return an invoice by its number, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Invoice]:
        """Return every invoice, newest first."""

    @abstractmethod
    def list_by_customer(self, customer_id: str, limit: int | None = None) -> list[Invoice]:
        """Return the invoices of one registered customer, newest first."""

    @abstractmethod
    def references_product(self, product_id: str) -> bool:
        """True if any invoice line was sold from *product_id*."""

    @abstractmethod
    def add(self, invoice: Invoice) -> None:
        """Persist a newly issued invoice with all of its lines."""

    @abstractmethod
    def update_status(self, invoice: Invoice) -> None:
        """Persist the lifecycle fields (status, cancellation) of an invoice."""

    @abstractmethod
    def remove(self, number: str) -> None:
        """Delete an invoice written by a failed issuance (compensation only)."""
