from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RepeatingTask:
    """Run ``func`` on a daemon thread every ``interval`` seconds.

    Runs never overlap: a run requested while another is in progress is
    skipped, whether it comes from the timer or from ``run_once``.
    """

    def __init__(
        self,
        func: Callable[[], object],
        *,
        interval: float,
        name: str = "repeating-task",
        run_immediately: bool = True,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._func = func
        self._interval = float(interval)
        self._name = name
        self._run_immediately = run_immediately
        self._run_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        # One event per thread; a thread outliving stop() keeps its own, already set.
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._loop, args=(self._stop_event,), name=self._name, daemon=True)
        self._thread.start()
        logger.info("%s started (interval=%ss)", self._name, self._interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("%s still finishing its current run after stop", self._name)
        self._thread = None
        logger.info("%s stopped", self._name)

    def run_once(self) -> bool:
        """Run now unless a run is already in progress. Returns whether it ran."""
        if not self._run_lock.acquire(blocking=False):
            logger.warning("%s still running, skipping tick", self._name)
            return False
        try:
            self._func()
        except Exception:
            logger.exception("%s run failed", self._name)
        finally:
            self._run_lock.release()
        return True

    def _loop(self, stop_event: threading.Event) -> None:
        if self._run_immediately and not stop_event.is_set():
            self.run_once()
        while not stop_event.wait(self._interval):
            self.run_once()
