"""Application services: customer master data."""

from __future__ import annotations

import logging
from uuid import uuid4

from invoicing.application.dto import (
    CustomerDetailDTO,
    CustomerDTO,
    customer_to_dto,
    invoice_to_dto,
)
from invoicing.domain.exceptions import CustomerNotFoundError, ValidationError
from invoicing.domain.model.jurisdiction import jurisdiction_from_tax_id
from invoicing.domain.model.party import Customer
from invoicing.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

RECENT_INVOICES = 10


def _resolve_jurisdiction(jurisdiction: str | None, tax_id: str | None) -> str:
    """Explicit jurisdiction wins; otherwise derive it from the GSTIN."""
    if jurisdiction and jurisdiction.strip():
        return jurisdiction.strip()
    derived = jurisdiction_from_tax_id(tax_id)
    if derived is None:
        raise ValidationError.for_field(
            "jurisdiction",
            "Jurisdiction is required when it cannot be derived from the tax ID",
        )
    return derived


class AddCustomerHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        name: str,
        jurisdiction: str | None = None,
        tax_id: str | None = None,
        address: str | None = None,
        phone: str | None = None,
        email: str | None = None,
    ) -> CustomerDTO:
        customer = Customer(
            id=uuid4().hex,
            name=name.strip(),
            jurisdiction=_resolve_jurisdiction(jurisdiction, tax_id),
            tax_id=tax_id,
            address=address,
            phone=phone,
            email=email,
        )
        with self._uow as uow:
            uow.customers.save(customer)
        return customer_to_dto(customer)


class UpdateCustomerHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        customer_id: str,
        *,
        name: str | None = None,
        jurisdiction: str | None = None,
        tax_id: str | None = None,
        address: str | None = None,
        phone: str | None = None,
        email: str | None = None,
    ) -> CustomerDTO:
        """Update customer master data.

        A new tax ID re-derives the jurisdiction unless one is given.
        Issued invoices keep the jurisdiction they were taxed with.
        """
        with self._uow as uow:
            customer = uow.customers.get_by_id(customer_id)
            if customer is None:
                raise CustomerNotFoundError(customer_id)

            if name is not None:
                if not name.strip():
                    raise ValidationError.for_field("name", "Customer name is required")
                customer.name = name.strip()
            if tax_id is not None:
                customer.tax_id = tax_id
            if jurisdiction is not None or tax_id is not None:
                customer.jurisdiction = _resolve_jurisdiction(jurisdiction, customer.tax_id)
            if address is not None:
                customer.address = address
            if phone is not None:
                customer.phone = phone
            if email is not None:
                customer.email = email

            uow.customers.save(customer)

        return customer_to_dto(customer)


class ListCustomersHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[CustomerDTO]:
        with self._uow as uow:
            customers = uow.customers.list_all()
        return [customer_to_dto(c) for c in customers]


class ShowCustomerHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, customer_id: str) -> CustomerDetailDTO:
        """Return the customer with its most recent invoices."""
        with self._uow as uow:
            customer = uow.customers.get_by_id(customer_id)
            if customer is None:
                raise CustomerNotFoundError(customer_id)
            invoices = uow.invoices.list_by_customer(customer_id, limit=RECENT_INVOICES)
        return CustomerDetailDTO(
            customer=customer_to_dto(customer),
            recent_invoices=[invoice_to_dto(i) for i in invoices],
        )


class DeleteCustomerHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, customer_id: str) -> None:
        """Delete a customer that no invoice references.

        Invoices are never deleted along with their customer; a customer
        that has been billed stays on file.
        """
        with self._uow as uow:
            customer = uow.customers.get_by_id(customer_id)
            if customer is None:
                raise CustomerNotFoundError(customer_id)
            if uow.invoices.list_by_customer(customer_id, limit=1):
                raise ValidationError.for_field(
                    "customer_id",
                    f"Customer '{customer.name}' has invoices and cannot be deleted",
                )
            uow.customers.delete(customer_id)

        logger.info("customer_deleted", extra={"customer_id": customer_id})
