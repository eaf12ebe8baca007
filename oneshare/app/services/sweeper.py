"""Periodic removal of expired messages."""
from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from oneshare.app.core.logging import get_logger
from oneshare.app.exceptions import StorageError
from oneshare.app.services.lifecycle import MessageLifecycle

logger = get_logger(__name__)


class PeriodicSweeper:
    """Runs ``MessageLifecycle.sweep`` on a background thread.

    One sweep runs synchronously in ``start()``, so messages that expired
    while the service was down are gone before traffic is served. The loop
    ends on ``stop()`` or once the store has been disconnected.

    Example:
        sweeper = PeriodicSweeper(lifecycle, interval=60)
        sweeper.start()
        ...
        sweeper.stop()
    """

    def __init__(
        self,
        lifecycle: MessageLifecycle,
        interval: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        self.lifecycle = lifecycle
        self.interval = interval
        self.clock = clock
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self.sweep_once()
        self._thread = threading.Thread(
            target=self._run, name="oneshare-sweeper", daemon=True
        )
        self._thread.start()
        logger.debug(f"Sweeper started (interval={self.interval}s)")

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.debug("Sweeper stopped")

    def sweep_once(self) -> int:
        """Run one sweep, logging instead of raising storage failures."""
        try:
            return self.lifecycle.sweep(int(self.clock()))
        except StorageError:
            logger.exception("Expired message sweep failed")
            return 0

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            if not self.lifecycle.store.is_connection_opened():
                break
            self.sweep_once()
