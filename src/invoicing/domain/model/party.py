"""Parties to an invoice: the seller (Company) and the buyer (Customer)."""

from __future__ import annotations

from dataclasses import dataclass

from invoicing.domain.exceptions import ValidationError


@dataclass
class Customer:
    """A persisted buyer. Its jurisdiction drives the tax split."""

    id: str
    name: str
    jurisdiction: str
    tax_id: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError.for_field("name", "Customer name is required")
        if not self.jurisdiction or not self.jurisdiction.strip():
            raise ValidationError.for_field("jurisdiction", "Customer jurisdiction is required")


@dataclass
class Company:
    """The seller's own profile. Exactly one record is expected."""

    name: str
    jurisdiction: str
    invoice_prefix: str = "INV"
    tax_id: str | None = None
    address: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError.for_field("name", "Company name is required")
        if not self.jurisdiction or not self.jurisdiction.strip():
            raise ValidationError.for_field("jurisdiction", "Company jurisdiction is required")
        if not self.invoice_prefix or "/" in self.invoice_prefix:
            raise ValidationError.for_field(
                "invoice_prefix", "Invoice prefix must be non-empty and must not contain '/'"
            )
