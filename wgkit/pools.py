"""Object pools that optionally bound the number of items checked out."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any, Callable

QUEUE_OUTBOUND_SIZE = 1024
QUEUE_INBOUND_SIZE = 1024
QUEUE_HANDSHAKE_SIZE = 1024
MAX_SEGMENT_SIZE = (1 << 16) - 1  # largest possible UDP datagram
PREALLOCATED_BUFFERS_PER_POOL = 0  # no limit: memory may grow without bound


class WaitPool:
    """A reuse pool whose ``get`` blocks while ``max`` items are checked out.

    A ``max`` of zero disables the limit.
    """

    def __init__(self, max: int, new: Callable[[], Any]) -> None:
        self.max = max
        self._new = new
        self._free: deque[Any] = deque()
        self._count = 0
        self._cond = threading.Condition()

    def count(self) -> int:
        """Number of items currently checked out (tracked only when bounded)."""
        with self._cond:
            return self._count

    def get(self) -> Any:
        """Take an item, waiting for one to be returned if the limit is reached."""
        if self.max:
            with self._cond:
                while self._count >= self.max:
                    self._cond.wait()
                self._count += 1
        try:
            return self._free.pop()
        except IndexError:
            return self._new()

    def put(self, x: Any) -> None:
        """Return an item to the pool, waking one waiter if bounded."""
        self._free.append(x)
        if not self.max:
            return
        with self._cond:
            self._count -= 1
            self._cond.notify()