"""TAI64N timestamps with whitened sub-second precision."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

TIMESTAMP_SIZE = 12
BASE = 0x400000000000000A
WHITENER_MASK = 0x1000000 - 1

_NANOS_PER_SECOND = 1_000_000_000
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Timestamp:
    """A 12-byte TAI64N label: 8 bytes of seconds, 4 bytes of nanoseconds."""

    data: bytes

    def __post_init__(self) -> None:
        if len(self.data) != TIMESTAMP_SIZE:
            raise ValueError(f"timestamp must be {TIMESTAMP_SIZE} bytes, got {len(self.data)}")

    def __bytes__(self) -> bytes:
        return self.data

    def after(self, other: Timestamp) -> bool:
        """Return True if this timestamp is strictly later than ``other``."""
        return self.data > other.data

    def __str__(self) -> str:
        secs = int.from_bytes(self.data[:8], "big") - BASE
        nanos = int.from_bytes(self.data[8:], "big")
        secs += nanos // _NANOS_PER_SECOND
        nanos %= _NANOS_PER_SECOND
        moment = _EPOCH + timedelta(seconds=secs)
        text = moment.strftime("%Y-%m-%d %H:%M:%S")
        if nanos:
            text += "." + f"{nanos:09d}".rstrip("0")
        return text + " +0000 UTC"


def stamp(unix_nanos: int) -> Timestamp:
    """Build a timestamp from nanoseconds since the Unix epoch."""
    secs, nanos = divmod(unix_nanos, _NANOS_PER_SECOND)
    secs = (BASE + secs) & 0xFFFFFFFFFFFFFFFF
    nanos &= ~WHITENER_MASK & 0xFFFFFFFF
    return Timestamp(secs.to_bytes(8, "big") + nanos.to_bytes(4, "big"))


def now() -> Timestamp:
    """Return the timestamp for the current wall-clock time."""
    return stamp(time.time_ns())