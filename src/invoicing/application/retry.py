"""Retry a whole use case after a storage-level concurrency conflict.

Only ``ConcurrencyConflictError`` is retried; the operation is re-run
from the start (validation included) because stock and prices may have
changed in between. Every other error is raised immediately.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from invoicing.domain.exceptions import ConcurrencyConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_with_retry(
    operation: Callable[[], T],
    attempts: int = 3,
    backoff: float = 0.05,
) -> T:
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except ConcurrencyConflictError:
            if attempt == attempts:
                raise
            logger.warning("concurrency_conflict_retry", extra={"attempt": attempt})
            time.sleep(backoff * attempt)
    raise AssertionError("unreachable")
