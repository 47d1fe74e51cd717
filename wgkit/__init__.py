"""Replay filtering, TAI64N timestamps, rate limiting, pools, timers, padding and the UAPI control socket."""

__version__ = "0.1.0"