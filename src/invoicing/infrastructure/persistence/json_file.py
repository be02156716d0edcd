"""Shared file handling for the JSON-file-backed repositories."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any


class JsonFile:
    """One JSON document on disk, rewritten in full on every save."""

    def __init__(self, file_path: Path, empty: Any) -> None:
        self._file_path = file_path
        self._empty = empty
        self._ensure_file()

    @property
    def path(self) -> Path:
        return self._file_path

    def load(self) -> Any:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def persist(self, data: Any) -> None:
        # Write beside the target and swap it in, so readers never see half a file.
        tmp = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(self._empty), encoding="utf-8")
