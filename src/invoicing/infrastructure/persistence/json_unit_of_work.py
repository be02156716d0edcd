"""Unit of work over the JSON-file store.

Every repository write reaches disk immediately, so this store cannot
roll back: ``supports_transactions`` is False and handlers compensate
instead. Units of work on the same data directory are serialized by a
process-level lock; the store is single-instance.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from invoicing.domain.exceptions import InternalError
from invoicing.domain.repository.unit_of_work import UnitOfWork
from invoicing.infrastructure.persistence.json_customer_repository import (
    JsonCompanyRepository,
    JsonCustomerRepository,
)
from invoicing.infrastructure.persistence.json_invoice_repository import (
    JsonInvoiceRepository,
)
from invoicing.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from invoicing.infrastructure.persistence.json_sequence_counter_repository import (
    JsonSequenceCounterRepository,
)
from invoicing.infrastructure.persistence.json_stock_movement_repository import (
    JsonStockMovementRepository,
)

logger = logging.getLogger(__name__)

_locks: dict[Path, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(data_dir: Path) -> threading.RLock:
    key = data_dir.resolve()
    with _locks_guard:
        if key not in _locks:
            _locks[key] = threading.RLock()
        return _locks[key]


class JsonUnitOfWork(UnitOfWork):

    supports_transactions = False

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._lock = _lock_for(data_dir)
        self.products = JsonProductRepository(data_dir / "products.json")
        self.customers = JsonCustomerRepository(data_dir / "customers.json")
        self.company = JsonCompanyRepository(data_dir / "company.json")
        self.invoices = JsonInvoiceRepository(data_dir / "invoices.json")
        self.movements = JsonStockMovementRepository(data_dir / "stock_movements.json")
        self.counters = JsonSequenceCounterRepository(data_dir / "invoice_counters.json")

    def __enter__(self) -> JsonUnitOfWork:
        self._lock.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            self._lock.release()
        if isinstance(exc, (OSError, json.JSONDecodeError)):
            logger.error(
                "json_store_failure",
                exc_info=(exc_type, exc, tb),
                extra={"data_dir": str(self._data_dir)},
            )
            raise InternalError("Invoice store is unavailable") from exc

    def commit(self) -> None:
        """Writes are already on disk."""

    def rollback(self) -> None:
        logger.debug("json_store_rollback_noop", extra={"data_dir": str(self._data_dir)})
