"""Unit of work over one SQLAlchemy session (one database transaction)."""

from __future__ import annotations

import logging

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from invoicing.domain.exceptions import ConcurrencyConflictError, InternalError
from invoicing.domain.repository.unit_of_work import UnitOfWork
from invoicing.infrastructure.persistence.sql_repositories import (
    SqlAlchemyCompanyRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyProductRepository,
    SqlAlchemySequenceCounterRepository,
    SqlAlchemyStockMovementRepository,
)

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected, lock_not_available
_CONFLICT_PGCODES = frozenset({"40001", "40P01", "55P03"})


def _is_conflict(exc: SQLAlchemyError) -> bool:
    if not isinstance(exc, OperationalError):
        return False
    if getattr(exc.orig, "pgcode", None) in _CONFLICT_PGCODES:
        return True
    return "database is locked" in str(exc.orig)


def translate_error(exc: SQLAlchemyError) -> Exception:
    """Map a storage error onto the domain taxonomy."""
    if _is_conflict(exc):
        logger.warning("storage_conflict", extra={"error": type(exc).__name__})
        return ConcurrencyConflictError("The store is busy; retry the operation")
    logger.error("storage_failure", exc_info=exc)
    return InternalError("Unexpected storage failure")


class SqlAlchemyUnitOfWork(UnitOfWork):

    supports_transactions = True

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        session = self._session_factory()
        self._session = session
        self.products = SqlAlchemyProductRepository(session)
        self.customers = SqlAlchemyCustomerRepository(session)
        self.company = SqlAlchemyCompanyRepository(session)
        self.invoices = SqlAlchemyInvoiceRepository(session)
        self.movements = SqlAlchemyStockMovementRepository(session)
        self.counters = SqlAlchemySequenceCounterRepository(session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        except SQLAlchemyError as commit_exc:
            self.rollback()
            raise translate_error(commit_exc) from commit_exc
        finally:
            self._close()
        if isinstance(exc, SQLAlchemyError):
            raise translate_error(exc) from exc

    def commit(self) -> None:
        self._require_session().commit()

    def rollback(self) -> None:
        self._require_session().rollback()

    def _require_session(self) -> Session:
        if self._session is None:
            raise RuntimeError("Unit of work is not active; use it as a context manager")
        return self._session

    def _close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
