"""Cancellable one-shot timers that drive protocol time events."""

from __future__ import annotations

import random
import threading
from typing import Callable, Optional


def jittered_delay(base: float, max_jitter_ms: int) -> float:
    """Return ``base`` seconds plus a random jitter of 0 to ``max_jitter_ms`` - 1 ms."""
    if max_jitter_ms <= 0:
        return base
    return base + random.randrange(max_jitter_ms) / 1000


class Timer:
    """A re-armable one-shot timer.

    ``mod`` (re)arms the timer, ``delete`` disarms it, and ``delete_sync``
    additionally waits for an expiry callback that is already running.
    """

    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._modifying = threading.Lock()
        self._running = threading.Lock()
        self._pending = False
        self._generation = 0
        self._thread: Optional[threading.Timer] = None

    def _fire(self, generation: int) -> None:
        with self._running:
            with self._modifying:
                if not self._pending or generation != self._generation:
                    return
                self._pending = False
                self._thread = None
            self._callback()

    def mod(self, delay: float) -> None:
        """Arm the timer to expire ``delay`` seconds from now."""
        with self._modifying:
            self._pending = True
            self._generation += 1
            if self._thread is not None:
                self._thread.cancel()
            thread = threading.Timer(max(delay, 0.0), self._fire, args=(self._generation,))
            thread.daemon = True
            self._thread = thread
            thread.start()

    def delete(self) -> None:
        """Disarm the timer without waiting for a running callback."""
        with self._modifying:
            self._pending = False
            self._generation += 1
            if self._thread is not None:
                self._thread.cancel()
                self._thread = None

    def delete_sync(self) -> None:
        """Disarm the timer and wait until no callback is running."""
        self.delete()
        with self._running:
            self.delete()

    def is_pending(self) -> bool:
        """Return True while the timer is armed and has not yet expired."""
        with self._modifying:
            return self._pending