# Copyright (c) Syntropy Systems
"""Holder for the current reconciled run."""
from __future__ import annotations

import logging
from threading import Lock
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from forecastview.models.result import ReconciledRun

logger = logging.getLogger(__name__)


class RunStore:
    """Keeps one immutable ReconciledRun and replaces it wholesale.

    Each run calls ``begin`` to get a generation number and hands it back
    inside the result it publishes. Results from a generation older than the
    latest ``begin`` are dropped, so a slow superseded run can never overwrite
    a newer one.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._current: ReconciledRun | None = None
        self._generation = 0
        self._subscribers: list[Callable[[ReconciledRun], None]] = []

    @property
    def current(self) -> ReconciledRun | None:
        """The latest published run, or None before the first run."""
        return self._current

    @property
    def generation(self) -> int:
        """Generation number handed out by the latest ``begin``."""
        return self._generation

    def begin(self) -> int:
        """Start a new run generation and return its number."""
        with self._lock:
            self._generation += 1
            return self._generation

    def subscribe(self, callback: Callable[[ReconciledRun], None]) -> Callable[[], None]:
        """Register a callback for whole-value updates.

        Returns a function that removes the subscription.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, result: ReconciledRun) -> bool:
        """Replace the current run if result belongs to the latest generation.

        Returns:
            True if the result was stored, False if it was stale

        """
        with self._lock:
            if result.generation != self._generation:
                logger.warning(
                    "Discarding result of superseded run %d (latest is %d)",
                    result.generation,
                    self._generation,
                )
                return False
            self._current = result
            subscribers = list(self._subscribers)

        for callback in subscribers:
            callback(result)
        return True
