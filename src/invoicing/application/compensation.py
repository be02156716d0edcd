"""Undo log for units of work whose store cannot roll back.

Handlers register an undo action right after each write. If the use
case fails, ``run()`` replays the actions newest first. With a
transactional store the log is disabled and the rollback does the work.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class Compensation:

    def __init__(self, enabled: bool) -> None:
        self._enabled = enabled
        self._actions: list[tuple[str, Callable[[], object]]] = []

    def add(self, description: str, action: Callable[[], object]) -> None:
        if self._enabled:
            self._actions.append((description, action))

    def run(self) -> None:
        """Undo every registered write, newest first.

        A failing step is logged and the remaining steps still run; the
        caller re-raises the original error afterwards.
        """
        while self._actions:
            description, action = self._actions.pop()
            try:
                action()
            except Exception:
                logger.exception("compensation_step_failed", extra={"step": description})
            else:
                logger.info("compensation_step_applied", extra={"step": description})
