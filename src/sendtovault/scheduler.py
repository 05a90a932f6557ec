"""Single-threaded poll loop with a dynamically re-armed delay."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from sendtovault.engine import PollResult, SyncEngine


class PollScheduler:
    """Runs :meth:`SyncEngine.poll` on a background thread.

    After every attempt the loop sleeps for ``engine.backoff.current_delay``
    seconds, so failures stretch the interval and a success shrinks it back.
    :meth:`poll_now` triggers an extra attempt from the calling thread and
    leaves the loop's own deadline untouched.
    """

    def __init__(self, engine: "SyncEngine", *, name: str = "sendtovault-poller") -> None:
        self.engine = engine
        self.name = name
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, *, immediate: bool = True) -> None:
        """Start the loop, stopping any previous one first."""
        self.stop()
        self._stop = threading.Event()
        first_delay = 0.0 if immediate else self.engine.backoff.current_delay
        self._thread = threading.Thread(target=self._run, args=(first_delay,), name=self.name, daemon=True)
        self._thread.start()
        logger.info("Polling started (first poll in {}s)", first_delay)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the loop; an in-flight request is allowed to finish."""
        thread = self._thread
        if thread is None:
            return
        self._stop.set()
        if thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
        logger.info("Polling stopped")

    def poll_now(self) -> "PollResult":
        """Poll immediately; a request overlapping a running poll is skipped by the engine."""
        return self.engine.poll()

    def _run(self, delay: float) -> None:
        stop = self._stop
        while not stop.wait(delay):
            try:
                self.engine.poll()
            except Exception:  # noqa: BLE001
                # keep ticking; the next attempt may succeed
                logger.exception("Unexpected error during poll")
            delay = self.engine.backoff.current_delay
