"""
Debounced persistence writes.
"""

import threading
from collections.abc import Callable
from typing import Any

from loguru import logger


class DebouncedWriter:
    """Collapses bursts of saves into one write of the latest payload.

    Every `schedule` call restarts the debounce window. Writes are
    fire-and-forget: a failing write is logged and dropped.
    """

    def __init__(self, write: Callable[[Any], Any], delay: float, name: str = "journal"):
        if delay < 0:
            raise ValueError("Debounce delay must be non-negative")
        self._write = write
        self.delay = delay
        self.name = name
        self._lock = threading.RLock()
        self._write_lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._payload: Any = None
        self._has_pending = False
        self.write_count = 0

    @property
    def has_pending(self) -> bool:
        """Check if a payload is waiting to be written."""
        with self._lock:
            return self._has_pending

    def schedule(self, payload: Any) -> None:
        """Queue a payload, replacing any payload not yet written."""
        with self._lock:
            self._payload = payload
            self._has_pending = True
            self._cancel_timer()
            if self.delay == 0:
                immediate = True
            else:
                immediate = False
                self._timer = threading.Timer(self.delay, self.flush)
                self._timer.daemon = True
                self._timer.start()
        if immediate:
            self.flush()

    def flush(self) -> bool:
        """Write the pending payload now, returning whether anything was written."""
        with self._lock:
            self._cancel_timer()
            if not self._has_pending:
                return False
            payload = self._payload
            self._payload = None
            self._has_pending = False

        with self._write_lock:
            try:
                self._write(payload)
            except Exception as e:
                logger.error(f"Debounced {self.name} write failed: {e}")
                return False
            self.write_count += 1
        logger.debug(f"Flushed debounced {self.name} write")
        return True

    def cancel(self) -> None:
        """Drop the pending payload without writing it."""
        with self._lock:
            self._cancel_timer()
            self._payload = None
            self._has_pending = False

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
