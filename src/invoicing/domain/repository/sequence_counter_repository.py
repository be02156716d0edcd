"""Abstract repository for invoice number counters keyed by (year, prefix)."""

from __future__ import annotations

from abc import ABC, abstractmethod


class SequenceCounterRepository(ABC):

    @abstractmethod
    def increment(self, year: int, prefix: str) -> int:
        """Lock the (year, prefix) counter, creating it at 0 if missing,
        add exactly one and return the new value.

        The increment belongs to the caller's unit of work.
        """

    @abstractmethod
    def current(self, year: int, prefix: str) -> int:
        """Return the last issued value, or 0 if the counter does not exist."""

    @abstractmethod
    def release(self, year: int, prefix: str, value: int) -> bool:
        """Undo an increment that returned *value* (compensation only).

        Returns False, leaving the counter alone, when another increment
        has happened since.
        """
