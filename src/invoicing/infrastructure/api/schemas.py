"""Request models for the invoicing request boundary.

Field names are camelCase on the wire; snake_case names are accepted too.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel


class _Request(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )


class InvoiceItemRequest(_Request):
    product_id: str = Field(min_length=1)
    quantity: StrictInt = Field(gt=0)
    rate: Decimal = Field(gt=0, allow_inf_nan=False)
    discount: Decimal = Field(default=Decimal("0"), ge=0, allow_inf_nan=False)


class CreateInvoiceRequest(_Request):
    """Exactly one of ``customer_id`` / ``customer_name`` is checked by the assembler."""

    customer_id: str | None = None
    customer_name: str | None = None
    customer_jurisdiction: str | None = None
    invoice_date: datetime | None = None
    due_date: datetime | None = None
    discount: Decimal = Field(default=Decimal("0"), ge=0, allow_inf_nan=False)
    notes: str | None = None
    items: list[InvoiceItemRequest] = Field(min_length=1)


class StockMovementRequest(_Request):
    product_id: str = Field(min_length=1)
    type: Literal["IN", "OUT", "ADJUSTMENT"]
    quantity: StrictInt
    reference: str | None = None
    notes: str | None = None


class CancelInvoiceRequest(_Request):
    reason: str | None = None
