"""Abstract repositories for the parties: Customer and Company."""

from __future__ import annotations

from abc import ABC, abstractmethod

from invoicing.domain.model.party import Company, Customer


class CustomerRepository(ABC):

    @abstractmethod
    def get_by_id(self, customer_id: str) -> Customer | None:
        """Return a customer by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Customer]:
        """Return every customer."""

    @abstractmethod
    def save(self, customer: Customer) -> None:
        """Persist a new or updated customer."""

    @abstractmethod
    def delete(self, customer_id: str) -> None:
        """Remove a customer. Callers check that no invoice references it."""


class CompanyRepository(ABC):

    @abstractmethod
    def get(self) -> Company | None:
        """Return the single company profile, or None if not configured."""

    @abstractmethod
    def save(self, company: Company) -> None:
        """Create or replace the company profile."""
