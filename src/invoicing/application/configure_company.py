"""Application services: the seller's company profile (single record)."""

from __future__ import annotations

from invoicing.application.dto import CompanyDTO, company_to_dto
from invoicing.domain.exceptions import CompanyNotConfiguredError
from invoicing.domain.model.party import Company
from invoicing.domain.repository.unit_of_work import UnitOfWork


class ConfigureCompanyHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        name: str,
        jurisdiction: str,
        invoice_prefix: str = "INV",
        tax_id: str | None = None,
        address: str | None = None,
    ) -> CompanyDTO:
        """Create or replace the company profile.

        Changing the prefix starts a new invoice number sequence; numbers
        already issued under the old prefix are unaffected.
        """
        company = Company(
            name=name.strip(),
            jurisdiction=jurisdiction.strip(),
            invoice_prefix=invoice_prefix.strip(),
            tax_id=tax_id,
            address=address,
        )
        with self._uow as uow:
            uow.company.save(company)
        return company_to_dto(company)


class ShowCompanyHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self) -> CompanyDTO:
        with self._uow as uow:
            company = uow.company.get()
        if company is None:
            raise CompanyNotConfiguredError("Company profile is not configured")
        return company_to_dto(company)
