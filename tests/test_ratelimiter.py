from wgkit.ratelimiter import PACKETS_BURSTABLE, PACKETS_PER_SECOND, Ratelimiter

SECOND = 1_000_000_000

IPS = [
    "127.0.0.1",
    "192.168.1.1",
    "172.167.2.3",
    "97.231.252.215",
    "248.97.91.167",
    "188.208.233.47",
    "104.2.183.179",
    "72.129.46.120",
    "2001:0db8:0a0b:12f0:0000:0000:0000:0001",
    "f5c2:818f:c052:655a:9860:b136:6894:25f0",
    "b2d7:15ab:48a7:b07c:a541:f144:a9fe:54fc",
    "a47b:786e:1671:a22b:d6f9:4ab0:abc7:c918",
    "ea1e:d155:7f7a:98fb:2bf5:9483:80f6:5445",
    "3f0e:54a2:f5b4:cd19:a21d:58e1:3746:84c4",
]


class FakeClock:
    def __init__(self, start=10**12):
        self.now = start

    def __call__(self):
        return self.now


def test_ratelimiter_sequence():
    expected = [(True, 0, "initial burst")] * PACKETS_BURSTABLE
    expected += [
        (False, 0, "after burst"),
        (True, SECOND // PACKETS_PER_SECOND, "filling tokens for single packet"),
        (False, 0, "not having refilled enough"),
        (True, 2 * (SECOND // PACKETS_PER_SECOND), "filling tokens for two packet burst"),
        (True, 0, "second packet in 2 packet burst"),
        (False, 0, "packet following 2 packet burst"),
    ]
    clock = FakeClock()
    rate = Ratelimiter(clock)
    rate.init()
    try:
        for i, (allowed, wait, text) in enumerate(expected):
            clock.now += wait + 1
            rate.cleanup()
            for ip in IPS:
                assert rate.allow(ip) is allowed, (i, text, ip)
    finally:
        rate.close()


def test_cleanup_removes_idle_entries():
    clock = FakeClock()
    with Ratelimiter(clock) as rate:
        assert rate.allow("10.0.0.1") is True
        assert rate.cleanup() is False
        assert len(rate) == 1
        clock.now += 2 * SECOND
        assert rate.cleanup() is True
        assert len(rate) == 0


def test_init_clears_table():
    clock = FakeClock()
    rate = Ratelimiter(clock)
    rate.init()
    try:
        rate.allow("10.0.0.3")
        assert len(rate) == 1
        rate.init()
        assert len(rate) == 0
    finally:
        rate.close()


def test_equivalent_address_forms_share_entry():
    clock = FakeClock()
    with Ratelimiter(clock) as rate:
        rate.allow("2001:db8::1")
        rate.allow("2001:0db8:0000:0000:0000:0000:0000:0001")
        assert len(rate) == 1