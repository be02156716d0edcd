"""JSON-file-backed implementation of StockMovementRepository."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from uuid import uuid4

from invoicing.domain.model.stock_movement import MovementKind, StockMovement
from invoicing.domain.repository.stock_movement_repository import (
    StockMovementRepository,
)
from invoicing.infrastructure.persistence.json_file import JsonFile


class JsonStockMovementRepository(StockMovementRepository):
    """Movements are stored in append order."""

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, [])

    def add(self, movement: StockMovement) -> StockMovement:
        stored = replace(movement, id=uuid4().hex)
        raw = self._file.load()
        raw.append(self._to_raw(stored))
        self._file.persist(raw)
        return stored

    def list_recent(
        self, product_id: str | None = None, limit: int | None = None
    ) -> list[StockMovement]:
        movements = [
            self._to_domain(item)
            for item in reversed(self._file.load())
            if product_id is None or item["product_id"] == product_id
        ]
        # Stable sort: later appends stay first among equal timestamps.
        movements.sort(key=lambda m: m.created_at, reverse=True)
        return movements if limit is None else movements[:limit]

    def list_by_reference(self, reference: str) -> list[StockMovement]:
        return [
            self._to_domain(item)
            for item in self._file.load()
            if item["reference"] == reference
        ]

    def remove(self, movement_id: str) -> None:
        raw = [item for item in self._file.load() if item["id"] != movement_id]
        self._file.persist(raw)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(movement: StockMovement) -> dict:
        return {
            "id": movement.id,
            "product_id": movement.product_id,
            "type": movement.kind.value,
            "quantity": movement.quantity,
            "reference": movement.reference,
            "note": movement.note,
            "created_at": movement.created_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> StockMovement:
        return StockMovement(
            id=raw["id"],
            product_id=raw["product_id"],
            kind=MovementKind(raw["type"]),
            quantity=raw["quantity"],
            reference=raw.get("reference"),
            note=raw.get("note"),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )
