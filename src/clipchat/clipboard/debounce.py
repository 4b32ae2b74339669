"""Debounced writes: only the last value scheduled in a window is written."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

log = logging.getLogger(__name__)

# Default debounce in seconds
DEFAULT_DELAY = 0.5

_UNSET = object()


class DebouncedWriter:
    """Hold the last pending value and write it once the delay elapses.

    Each ``schedule()`` replaces the pending value and restarts the timer.
    ``flush_now()`` writes immediately and drops whatever was pending.
    """

    def __init__(self, write: Callable[[Any], None], delay: float = DEFAULT_DELAY) -> None:
        self._write = write
        self.delay = delay
        self._pending: Any = _UNSET
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        """True while a scheduled value has not been written yet."""
        with self._lock:
            return self._pending is not _UNSET

    def schedule(self, value: Any) -> None:
        """Queue value for writing after the delay, replacing any pending value."""
        if self.delay <= 0:
            self.flush_now(value)
            return
        with self._lock:
            self._cancel_timer()
            self._pending = value
            self._timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def flush_now(self, value: Any = _UNSET) -> None:
        """Write immediately.

        Args:
            value: Value to write. Defaults to the pending value, if any.
        """
        with self._lock:
            self._cancel_timer()
            if value is _UNSET:
                value = self._pending
            self._pending = _UNSET
        if value is _UNSET:
            return
        self._write(value)

    def cancel(self) -> None:
        """Drop the pending value without writing it."""
        with self._lock:
            self._cancel_timer()
            self._pending = _UNSET

    def _cancel_timer(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            value, self._pending = self._pending, _UNSET
            self._timer = None
        if value is _UNSET:
            return
        try:
            self._write(value)
        except Exception:
            log.warning("Debounced write failed", exc_info=True)
