"""Application service: Cancel Invoice use case.

An ISSUED invoice is never edited. Cancelling it flips the status and
returns the sold quantities to stock with one IN movement per line,
referencing the invoice number, inside one unit of work.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import partial
from typing import Callable

from invoicing.application.compensation import Compensation
from invoicing.application.dto import InvoiceDTO, invoice_to_dto
from invoicing.domain.exceptions import InvoiceNotFoundError
from invoicing.domain.model.stock_movement import MovementKind
from invoicing.domain.repository.unit_of_work import UnitOfWork
from invoicing.domain.service.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


class CancelInvoiceHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow = uow
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def handle(self, number: str, reason: str | None = None) -> InvoiceDTO:
        with self._uow as uow:
            compensation = Compensation(enabled=not uow.supports_transactions)
            try:
                invoice = uow.invoices.get_by_number(number)
                if invoice is None:
                    raise InvoiceNotFoundError(number)

                invoice.cancel(reason=reason, when=self._clock())

                ledger = StockLedger(uow.products, uow.movements, self._clock)
                for line in invoice.lines:
                    result = ledger.apply_movement(
                        line.product_id,
                        MovementKind.IN,
                        line.quantity,
                        reference=number,
                        note=f"Cancellation of invoice {number}",
                    )
                    compensation.add("retract stock movement", partial(ledger.retract, result))

                uow.invoices.update_status(invoice)
            except Exception:
                compensation.run()
                raise

        logger.info("invoice_cancelled", extra={"invoice_number": number, "reason": reason})
        return invoice_to_dto(invoice)
