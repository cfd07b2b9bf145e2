"""
Module: pipeline.cleanup

Purpose:
    Periodic expiry of stored texts, finished job records and
    artifacts. Runs on a daemon thread so it never blocks shutdown.

Key Classes:
    - CleanupScheduler: Interval runner with a manual trigger

Used By:
    - pipeline.service: Started and stopped with the service
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """
    Call `sweep()` every `interval` seconds until stopped.

    Example:
        >>> scheduler = CleanupScheduler(service.sweep_expired, interval=300)
        >>> scheduler.start()
        >>> ...
        >>> scheduler.stop()
    """

    def __init__(self, sweep: Callable[[], int], interval: float = 300.0):
        if interval <= 0:
            raise ValueError(f"interval must be positive: {interval}")
        self._sweep = sweep
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> int:
        """Run one sweep now. Returns the number of items removed."""
        removed = self._sweep()
        if removed:
            logger.info(f"Cleanup removed {removed} expired items")
        else:
            logger.debug("Cleanup found nothing to remove")
        return removed

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()

        def _loop():
            while not self._stop_event.wait(self.interval):
                try:
                    self.run_once()
                except OSError as e:
                    logger.error(f"Cleanup sweep failed: {e}")

        self._thread = threading.Thread(target=_loop, name="handwriting-cleanup", daemon=True)
        self._thread.start()
        logger.info(f"Cleanup scheduler started (every {self.interval:.0f}s)")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout)
        self._thread = None
        logger.info("Cleanup scheduler stopped")
