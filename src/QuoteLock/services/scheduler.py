"""Background scheduler for periodic quote refreshes."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from QuoteLock.utils.log import log

if TYPE_CHECKING:
    from QuoteLock.services.refresh import RefreshOrchestrator


class RefreshScheduler:
    """Run a non-forced refresh now and then every ``check_every`` seconds.

    The orchestrator's interval gate decides whether a tick actually fetches,
    so ticks can be much more frequent than the provider's minimum interval.
    """

    def __init__(self, orchestrator: RefreshOrchestrator, *, check_every: float) -> None:
        self.orchestrator = orchestrator
        self.check_every = check_every
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="quotelock-refresh", daemon=True)
        self._thread.start()
        log.debug("Refresh scheduler started: every=%ss", self.check_every)

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        log.debug("Refresh scheduler stopped")

    def tick(self) -> None:
        """Run one scheduled refresh; errors are logged, never raised."""
        try:
            result = self.orchestrator.refresh()
        except Exception as e:  # noqa: BLE001 - keep the schedule alive
            log.error("Scheduled refresh failed: %s", e)
            return
        log.debug("Scheduled refresh finished: %s", result)

    def _loop(self) -> None:
        self.tick()
        while not self._stop.wait(self.check_every):
            self.tick()
