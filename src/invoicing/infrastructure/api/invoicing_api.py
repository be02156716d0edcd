"""Request boundary: validates request bodies and maps results to HTTP statuses.

Transport-agnostic. A web framework adapter only has to turn its request
into a ``dict`` and an ``ApiResponse`` back into a response.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from datetime import datetime
from http import HTTPStatus
from typing import Any, Callable

import pydantic
from pydantic.alias_generators import to_camel

from invoicing.application.cancel_invoice import CancelInvoiceHandler
from invoicing.application.dto import InvoiceLineSpec, IssueInvoiceCommand
from invoicing.application.issue_invoice import IssueInvoiceHandler
from invoicing.application.record_stock_movement import RecordStockMovementHandler
from invoicing.application.retry import run_with_retry
from invoicing.application.show_inventory import (
    RECENT_MOVEMENTS_LIMIT,
    ListStockMovementsHandler,
)
from invoicing.application.show_invoice import ListInvoicesHandler, ShowInvoiceHandler
from invoicing.domain.exceptions import (
    CompanyNotConfiguredError,
    ConcurrencyConflictError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from invoicing.domain.repository.unit_of_work import UnitOfWork
from invoicing.infrastructure.api.schemas import (
    CancelInvoiceRequest,
    CreateInvoiceRequest,
    StockMovementRequest,
)

logger = logging.getLogger(__name__)

_SEGMENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclasses.dataclass(frozen=True)
class ApiResponse:
    status: HTTPStatus
    body: Any


def _camel_path(field: str) -> str:
    """``items[0].product_id`` -> ``items[0].productId``."""
    return _SEGMENT.sub(lambda m: to_camel(m.group(0)), field)


def _camelize(value: Any) -> Any:
    if isinstance(value, dict):
        return {to_camel(k): _camelize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_camelize(v) for v in value]
    return value


def _body(dto: Any) -> Any:
    if isinstance(dto, list):
        return [_body(item) for item in dto]
    return _camelize(dataclasses.asdict(dto))


def _schema_error(exc: pydantic.ValidationError) -> ApiResponse:
    details = []
    for error in exc.errors():
        path = ""
        for part in error["loc"]:
            path += f"[{part}]" if isinstance(part, int) else (f".{part}" if path else str(part))
        details.append({"field": path, "message": error["msg"]})
    return ApiResponse(
        HTTPStatus.BAD_REQUEST, {"error": "Validation failed", "details": details}
    )


def _domain_validation_error(exc: ValidationError) -> ApiResponse:
    details = [
        {"field": _camel_path(v.field), "message": v.message} for v in exc.violations
    ] or [{"field": "", "message": str(exc)}]
    return ApiResponse(
        HTTPStatus.BAD_REQUEST, {"error": "Validation failed", "details": details}
    )


class InvoicingApi:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        default_jurisdiction: str | None = None,
        clock: Callable[[], datetime] | None = None,
        retry_attempts: int = 3,
    ) -> None:
        self._uow_factory = uow_factory
        self._default_jurisdiction = default_jurisdiction
        self._clock = clock
        self._retry_attempts = retry_attempts

    # --- Invoices -------------------------------------------------------------

    def create_invoice(self, payload: dict) -> ApiResponse:
        def operation() -> Any:
            request = CreateInvoiceRequest.model_validate(payload)
            command = IssueInvoiceCommand(
                lines=[
                    InvoiceLineSpec(
                        product_id=item.product_id,
                        quantity=item.quantity,
                        rate=item.rate,
                        discount=item.discount,
                    )
                    for item in request.items
                ],
                customer_id=request.customer_id,
                customer_name=request.customer_name,
                customer_jurisdiction=request.customer_jurisdiction,
                discount=request.discount,
                notes=request.notes,
                invoice_date=request.invoice_date,
                due_date=request.due_date,
            )
            handler = IssueInvoiceHandler(
                self._uow_factory(), self._default_jurisdiction, self._clock
            )
            return run_with_retry(lambda: handler.handle(command), self._retry_attempts)

        return self._respond(operation, HTTPStatus.CREATED, HTTPStatus.CONFLICT)

    def get_invoice(self, number: str) -> ApiResponse:
        return self._respond(
            lambda: ShowInvoiceHandler(self._uow_factory()).handle(number),
            HTTPStatus.OK,
            HTTPStatus.CONFLICT,
        )

    def list_invoices(self) -> ApiResponse:
        return self._respond(
            lambda: ListInvoicesHandler(self._uow_factory()).handle(),
            HTTPStatus.OK,
            HTTPStatus.CONFLICT,
        )

    def cancel_invoice(self, number: str, payload: dict | None = None) -> ApiResponse:
        def operation() -> Any:
            request = CancelInvoiceRequest.model_validate(payload or {})
            handler = CancelInvoiceHandler(self._uow_factory(), self._clock)
            return run_with_retry(
                lambda: handler.handle(number, request.reason), self._retry_attempts
            )

        return self._respond(operation, HTTPStatus.OK, HTTPStatus.CONFLICT)

    # --- Stock ----------------------------------------------------------------

    def record_stock_movement(self, payload: dict) -> ApiResponse:
        def operation() -> Any:
            request = StockMovementRequest.model_validate(payload)
            handler = RecordStockMovementHandler(self._uow_factory(), self._clock)
            return run_with_retry(
                lambda: handler.handle(
                    request.product_id,
                    request.type,
                    request.quantity,
                    reference=request.reference,
                    note=request.notes,
                ),
                self._retry_attempts,
            )

        return self._respond(operation, HTTPStatus.CREATED, HTTPStatus.BAD_REQUEST)

    def list_stock_movements(
        self, product_id: str | None = None, limit: int = RECENT_MOVEMENTS_LIMIT
    ) -> ApiResponse:
        return self._respond(
            lambda: ListStockMovementsHandler(self._uow_factory()).handle(product_id, limit),
            HTTPStatus.OK,
            HTTPStatus.CONFLICT,
        )

    # --- Error mapping --------------------------------------------------------

    def _respond(
        self,
        operation: Callable[[], Any],
        success: HTTPStatus,
        insufficient_stock: HTTPStatus,
    ) -> ApiResponse:
        try:
            return ApiResponse(success, _body(operation()))
        except pydantic.ValidationError as exc:
            return _schema_error(exc)
        except ValidationError as exc:
            return _domain_validation_error(exc)
        except EntityNotFoundError as exc:
            return ApiResponse(HTTPStatus.NOT_FOUND, {"error": str(exc)})
        except InsufficientStockError as exc:
            return ApiResponse(
                insufficient_stock,
                {
                    "error": str(exc),
                    "productId": exc.product_id,
                    "requested": exc.requested,
                    "available": exc.available,
                },
            )
        except (ConcurrencyConflictError, CompanyNotConfiguredError) as exc:
            return ApiResponse(HTTPStatus.CONFLICT, {"error": str(exc)})
        except Exception:
            logger.exception("request_failed")
            return ApiResponse(
                HTTPStatus.INTERNAL_SERVER_ERROR, {"error": "Internal server error"}
            )
