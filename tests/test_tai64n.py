import pytest

from wgkit.tai64n import Timestamp, now, stamp

START = 123456789  # a nontrivial bit pattern
NS = 1
US = 1_000
MS = 1_000_000


@pytest.mark.parametrize(
    "delta, want_after",
    [
        (10 * NS, False),
        (10 * US, False),
        (1 * MS, False),
        (10 * MS, False),
        (20 * MS, True),
    ],
    ids=["after_10_ns", "after_10_us", "after_1_ms", "after_10_ms", "after_20_ms"],
)
def test_monotonic(delta, want_after):
    ts1 = stamp(START)
    ts2 = stamp(START + delta)
    assert ts2.after(ts1) is want_after


def test_epoch_encoding():
    ts = stamp(0)
    assert bytes(ts) == bytes.fromhex("400000000000000a") + b"\x00\x00\x00\x00"
    assert str(ts) == "1970-01-01 00:00:00 +0000 UTC"


def test_whitening_clears_low_bits():
    ts = stamp(START)
    nanos = int.from_bytes(bytes(ts)[8:], "big")
    assert nanos & 0xFFFFFF == 0
    assert nanos <= START


def test_now_is_not_before_earlier_stamp():
    earlier = stamp(0)
    assert now().after(earlier)
    assert not earlier.after(now())


def test_wrong_length_rejected():
    with pytest.raises(ValueError):
        Timestamp(b"\x00" * 11)