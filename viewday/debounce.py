"""Leading-edge debounce for vault change notifications."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 1.0


class Debouncer:
    """Run ``callback`` at most once per ``cooldown`` seconds.

    The first ``notify()`` after a quiet period runs the callback right
    away. Further notifications inside the window are coalesced; ``flush()``
    runs the callback once for them after the window has passed, so the
    last edit of a burst is still picked up.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        cooldown: float = DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.callback = callback
        self.cooldown = cooldown
        self.clock = clock
        self._last_run: float | None = None
        self._pending = False
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._pending

    def _window_open(self, now: float) -> bool:
        return self._last_run is None or now - self._last_run >= self.cooldown

    def notify(self) -> bool:
        """Record a change. Returns True if the callback ran."""
        with self._lock:
            now = self.clock()
            if not self._window_open(now):
                self._pending = True
                return False
            self._last_run = now
            self._pending = False
        self._run()
        return True

    def flush(self) -> bool:
        """Run once for coalesced notifications whose window has elapsed."""
        with self._lock:
            now = self.clock()
            if not self._pending or not self._window_open(now):
                return False
            self._last_run = now
            self._pending = False
        self._run()
        return True

    def _run(self) -> None:
        try:
            self.callback()
        except Exception:
            logger.exception("Debounced refresh failed")
