"""Abstract repository for the stock ledger's movement log."""

from __future__ import annotations

from abc import ABC, abstractmethod

from invoicing.domain.model.stock_movement import StockMovement


class StockMovementRepository(ABC):

    @abstractmethod
    def add(self, movement: StockMovement) -> StockMovement:
        """Append a movement and return it with its assigned ID."""

    @abstractmethod
    def list_recent(
        self, product_id: str | None = None, limit: int | None = None
    ) -> list[StockMovement]:
        """Return movements newest first, optionally for one product."""

    @abstractmethod
    def list_by_reference(self, reference: str) -> list[StockMovement]:
        """Return every movement carrying *reference*, oldest first."""

    @abstractmethod
    def remove(self, movement_id: str) -> None:
        """Delete a movement written by a failed operation (compensation only)."""
