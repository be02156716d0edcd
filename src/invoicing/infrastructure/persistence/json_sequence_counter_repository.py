"""JSON-file-backed implementation of SequenceCounterRepository."""

from __future__ import annotations

from pathlib import Path

from invoicing.domain.repository.sequence_counter_repository import (
    SequenceCounterRepository,
)
from invoicing.infrastructure.persistence.json_file import JsonFile


class JsonSequenceCounterRepository(SequenceCounterRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, [])

    def increment(self, year: int, prefix: str) -> int:
        counters = self._file.load()
        row = self._find(counters, year, prefix)
        if row is None:
            row = {"year": year, "prefix": prefix, "value": 0}
            counters.append(row)
        row["value"] += 1
        self._file.persist(counters)
        return row["value"]

    def current(self, year: int, prefix: str) -> int:
        row = self._find(self._file.load(), year, prefix)
        return row["value"] if row is not None else 0

    def release(self, year: int, prefix: str, value: int) -> bool:
        counters = self._file.load()
        row = self._find(counters, year, prefix)
        if row is None or row["value"] != value:
            return False
        row["value"] -= 1
        self._file.persist(counters)
        return True

    @staticmethod
    def _find(counters: list[dict], year: int, prefix: str) -> dict | None:
        for row in counters:
            if row["year"] == year and row["prefix"] == prefix:
                return row
        return None
