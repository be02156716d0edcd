"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and request layers can catch them uniformly and translate them
into user-facing messages or response statuses.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldViolation:
    """A single caller-fixable problem with one input field."""

    field: str
    message: str


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated.

    ``violations`` carries field-level detail when the error can be
    attributed to specific input fields.
    """

    def __init__(
        self,
        message: str,
        violations: list[FieldViolation] | None = None,
    ) -> None:
        super().__init__(message)
        self.violations = list(violations or [])

    @classmethod
    def for_field(cls, field: str, message: str) -> ValidationError:
        return cls(message, [FieldViolation(field, message)])


class InvalidInvoiceInputError(ValidationError):
    """The invoice request is malformed; nothing has been written."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ProductNotFoundError(EntityNotFoundError):

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product not found: '{product_id}'")
        self.product_id = product_id


class CustomerNotFoundError(EntityNotFoundError):

    def __init__(self, customer_id: str) -> None:
        super().__init__(f"Customer not found: '{customer_id}'")
        self.customer_id = customer_id


class InvoiceNotFoundError(EntityNotFoundError):

    def __init__(self, number: str) -> None:
        super().__init__(f"Invoice {number} not found")
        self.number = number


class InsufficientStockError(DomainException):
    """A movement would drive a product's stock below zero."""

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient stock for product '{product_id}' "
            f"(requested {requested}, have {available} in stock)"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class ConcurrencyConflictError(DomainException):
    """The store detected contention on a counter or stock row.

    The whole operation may be retried from the start.
    """


class InternalError(DomainException):
    """Unexpected storage failure. The message is safe to show to callers."""


class CompanyNotConfiguredError(DomainException):
    """No company profile exists, so seller jurisdiction is unknown."""
