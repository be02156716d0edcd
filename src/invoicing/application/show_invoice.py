"""Application services: Show Invoice / List Invoices use cases (queries)."""

from __future__ import annotations

from invoicing.application.dto import InvoiceDTO, invoice_to_dto
from invoicing.domain.exceptions import InvoiceNotFoundError
from invoicing.domain.repository.unit_of_work import UnitOfWork


class ShowInvoiceHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, number: str) -> InvoiceDTO:
        with self._uow as uow:
            invoice = uow.invoices.get_by_number(number)
        if invoice is None:
            raise InvoiceNotFoundError(number)
        return invoice_to_dto(invoice)


class ListInvoicesHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> list[InvoiceDTO]:
        with self._uow as uow:
            invoices = uow.invoices.list_all()
        return [invoice_to_dto(invoice) for invoice in invoices]
