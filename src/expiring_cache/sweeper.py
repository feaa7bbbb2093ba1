"""Cancellable background task that periodically sweeps a cache."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from .errors import check_ttl

logger = logging.getLogger("expiring-cache")


class PeriodicSweeper:
    def __init__(
        self,
        callback: Callable[[], Any],
        interval_seconds: float,
        *,
        name: str = "expiring-cache-sweeper",
    ) -> None:
        self._callback = callback
        self._interval_seconds = check_ttl(interval_seconds)
        self._name = name
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name=self._name,
                daemon=True,
            )
            self._thread.start()
        logger.info("Started %s (every %.1fs)", self._name, self._interval_seconds)

    def stop(self, timeout: float | None = None) -> None:
        with self._lock:
            thread = self._thread
            self._stop_event.set()
            self._thread = None
        if thread is None:
            return
        if thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("Stopped %s", self._name)

    def run_once(self) -> bool:
        """Invoke the callback once; failures are logged, never raised."""
        try:
            self._callback()
        except Exception:
            logger.exception("%s: sweep failed", self._name)
            return False
        return True

    def _run(self, stop_event: threading.Event) -> None:
        # wait() returns True once stop() sets the event
        while not stop_event.wait(self._interval_seconds):
            self.run_once()
