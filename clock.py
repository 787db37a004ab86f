from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class GameClock:
    """
    Whole-second counter that only advances while running.
    """

    def __init__(self) -> None:
        self._elapsed = 0
        self._running = False

    @property
    def elapsed(self) -> int:
        return self._elapsed

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        self._running = True

    def pause(self) -> None:
        self._running = False

    def reset(self) -> None:
        self._elapsed = 0
        self._running = False

    def tick(self) -> int:
        if self._running:
            self._elapsed += 1
        return self._elapsed


class Ticker:
    """Cancelable recurring task.

    Calls ``callback`` every ``interval`` seconds on a daemon thread until
    ``cancel()``. A ticker runs at most once; create a new one to resume.
    """

    def __init__(self, callback: Callable[[], object], interval: float, name: str = "maze-ticker"):
        self._callback = callback
        self._interval = interval
        self._name = name
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def active(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def cancel(self, wait: bool = True) -> None:
        self._stop.set()
        thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._interval + 1.0)

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self._callback()
            except Exception:
                logger.exception("Ticker callback failed; stopping %s", self._name)
                self._stop.set()
