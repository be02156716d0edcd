"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import threading

from sqlalchemy.orm import Session, sessionmaker

from invoicing.domain.repository.unit_of_work import UnitOfWork
from invoicing.infrastructure.config import Settings
from invoicing.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork
from invoicing.infrastructure.persistence.sql_engine import (
    create_engine_from_url,
    create_schema,
    create_session_factory,
)
from invoicing.infrastructure.persistence.sql_unit_of_work import SqlAlchemyUnitOfWork

_session_factories: dict[str, sessionmaker[Session]] = {}
_factories_lock = threading.Lock()


def session_factory(database_url: str) -> sessionmaker[Session]:
    """One engine per database URL, with the schema created on first use."""
    with _factories_lock:
        factory = _session_factories.get(database_url)
        if factory is None:
            engine = create_engine_from_url(database_url)
            create_schema(engine)
            factory = create_session_factory(engine)
            _session_factories[database_url] = factory
        return factory


def unit_of_work(settings: Settings) -> UnitOfWork:
    """A fresh unit of work for the configured backend.

    Units of work are not shared between threads; create one per request.
    """
    if settings.backend == "sql":
        if settings.database_url is None:
            settings.data_dir.mkdir(parents=True, exist_ok=True)
        return SqlAlchemyUnitOfWork(session_factory(settings.resolved_database_url))
    return JsonUnitOfWork(settings.data_dir)


def dispose_engines() -> None:
    """Close every pooled connection. Used by tests between databases."""
    with _factories_lock:
        for factory in _session_factories.values():
            engine = factory.kw.get("bind")
            if engine is not None:
                engine.dispose()
        _session_factories.clear()
