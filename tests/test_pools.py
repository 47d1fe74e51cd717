import random
import threading
import time

from wgkit.pools import WaitPool


def test_wait_pool_never_exceeds_max():
    workers = 6
    limit = 2
    pool = WaitPool(limit, lambda: bytearray(16))
    trials = [2000]
    trials_lock = threading.Lock()
    observed = [0]
    errors = []

    def update_max():
        count = pool.count()
        if count > pool.max:
            errors.append(count)
        with trials_lock:
            observed[0] = max(observed[0], count)

    def worker():
        while True:
            with trials_lock:
                trials[0] -= 1
                if trials[0] <= 0:
                    return
            update_max()
            item = pool.get()
            update_max()
            time.sleep(random.randrange(100) / 1_000_000)
            update_max()
            pool.put(item)
            update_max()

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []
    assert observed[0] == pool.max
    assert pool.count() == 0


def test_unbounded_pool_reuses_returned_item():
    created = []

    def make():
        obj = object()
        created.append(obj)
        return obj

    pool = WaitPool(0, make)
    first = pool.get()
    assert created == [first]
    pool.put(first)
    assert pool.get() is first
    second = pool.get()
    assert second is not first
    assert len(created) == 2


def test_bounded_pool_blocks_until_put():
    pool = WaitPool(1, list)
    held = pool.get()
    assert pool.count() == 1
    got = threading.Event()
    result = []

    def taker():
        result.append(pool.get())
        got.set()

    thread = threading.Thread(target=taker, daemon=True)
    thread.start()
    assert got.wait(0.1) is False
    pool.put(held)
    assert got.wait(2.0) is True
    thread.join(2.0)
    assert result == [held]
    assert pool.count() == 1


def test_unbounded_pool_does_not_count():
    pool = WaitPool(0, list)
    items = [pool.get() for _ in range(5)]
    assert pool.count() == 0
    for item in items:
        pool.put(item)
    assert pool.count() == 0