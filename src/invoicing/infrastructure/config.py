"""Runtime settings read from ``INVOICING_*`` environment variables.

Company data (seller jurisdiction, invoice prefix) is not configuration:
it lives in the company record and is managed through ``company set``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

BACKENDS = ("json", "sql")

# Resolve the default data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@dataclass(frozen=True)
class Settings:
    backend: str = "json"
    data_dir: Path = _DEFAULT_DATA_DIR
    database_url: str | None = None
    default_jurisdiction: str | None = None
    log_level: int = logging.INFO

    @property
    def resolved_database_url(self) -> str:
        """The SQL store URL; defaults to an SQLite file in the data directory."""
        return self.database_url or f"sqlite:///{self.data_dir / 'invoicing.db'}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        backend = env.get("INVOICING_BACKEND", "json").strip().lower()
        if backend not in BACKENDS:
            raise ValueError(
                f"INVOICING_BACKEND must be one of {', '.join(BACKENDS)}, got {backend!r}"
            )

        level_name = env.get("INVOICING_LOG_LEVEL", "INFO").strip().upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown INVOICING_LOG_LEVEL {level_name!r}")

        data_dir = env.get("INVOICING_DATA_DIR")
        return cls(
            backend=backend,
            data_dir=Path(data_dir) if data_dir else _DEFAULT_DATA_DIR,
            database_url=env.get("INVOICING_DATABASE_URL") or None,
            default_jurisdiction=env.get("INVOICING_DEFAULT_JURISDICTION") or None,
            log_level=level,
        )
