"""Per-address token-bucket rate limiter with background garbage collection."""

from __future__ import annotations

import ipaddress
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

PACKETS_PER_SECOND = 20
PACKETS_BURSTABLE = 5
GARBAGE_COLLECT_TIME = 1_000_000_000  # nanoseconds
PACKET_COST = 1_000_000_000 // PACKETS_PER_SECOND
MAX_TOKENS = PACKET_COST * PACKETS_BURSTABLE

Address = Union[str, bytes, int, ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass
class _Entry:
    last_time: int
    tokens: int


class _Collector:
    """Background thread that periodically purges stale entries."""

    def __init__(self, cleanup: Callable[[], bool]) -> None:
        self._cleanup = cleanup
        self._cond = threading.Condition()
        self._active = False
        self._reset = False
        self._stopped = False
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def kick(self) -> None:
        with self._cond:
            self._active = True
            self._reset = True
            self._cond.notify()

    def stop(self) -> None:
        with self._cond:
            self._stopped = True
            self._cond.notify()

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._active and not self._stopped:
                    self._cond.wait()
                if self._stopped:
                    return
                self._reset = False
                self._cond.wait(timeout=GARBAGE_COLLECT_TIME / 1e9)
                if self._stopped:
                    return
                if self._reset:
                    continue
            if self._cleanup():
                with self._cond:
                    if not self._reset:
                        self._active = False


class Ratelimiter:
    """Allows a burst of handshake packets per source address, then a steady rate."""

    def __init__(self, time_now: Optional[Callable[[], int]] = None) -> None:
        self.time_now: Callable[[], int] = time_now or time.monotonic_ns
        self._lock = threading.Lock()
        self._table: dict[ipaddress._BaseAddress, _Entry] = {}
        self._collector: Optional[_Collector] = None

    def __enter__(self) -> Ratelimiter:
        self.init()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def init(self) -> None:
        """Clear the table and start a fresh garbage-collection routine."""
        with self._lock:
            if self._collector is not None:
                self._collector.stop()
            self._table = {}
            self._collector = _Collector(self.cleanup)

    def close(self) -> None:
        """Stop the garbage-collection routine."""
        with self._lock:
            if self._collector is not None:
                self._collector.stop()
                self._collector = None

    def cleanup(self) -> bool:
        """Drop entries idle for longer than the collection time; report emptiness."""
        with self._lock:
            now = self.time_now()
            stale = [
                key
                for key, entry in self._table.items()
                if now - entry.last_time > GARBAGE_COLLECT_TIME
            ]
            for key in stale:
                del self._table[key]
            return not self._table

    def allow(self, ip: Address) -> bool:
        """Return True if a packet from ``ip`` may be processed now."""
        key = ipaddress.ip_address(ip)
        collector = None
        with self._lock:
            entry = self._table.get(key)
            if entry is None:
                self._table[key] = _Entry(
                    last_time=self.time_now(), tokens=MAX_TOKENS - PACKET_COST
                )
                if len(self._table) == 1:
                    collector = self._collector
                allowed = True
            else:
                now = self.time_now()
                entry.tokens = min(entry.tokens + (now - entry.last_time), MAX_TOKENS)
                entry.last_time = now
                allowed = entry.tokens > PACKET_COST
                if allowed:
                    entry.tokens -= PACKET_COST
        if collector is not None:
            collector.kick()
        return allowed

    def __len__(self) -> int:
        with self._lock:
            return len(self._table)