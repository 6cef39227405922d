import threading
import time

from rate_limiter import RateLimiter


def test_first_call_passes_immediately():
    limiter = RateLimiter(interval=5.0)
    started = time.monotonic()
    limiter.wait()
    assert time.monotonic() - started < 1.0


def test_concurrent_waiters_are_spaced_by_interval():
    interval = 0.05
    limiter = RateLimiter(interval=interval)
    starts = []
    lock = threading.Lock()

    def call():
        granted = limiter.wait()
        with lock:
            starts.append(granted)

    threads = [threading.Thread(target=call) for _ in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    starts.sort()
    assert len(starts) == 6
    gaps = [b - a for a, b in zip(starts, starts[1:])]
    assert all(gap >= interval - 1e-9 for gap in gaps)


def test_waiters_are_served_in_arrival_order():
    limiter = RateLimiter(interval=0.05)
    limiter.wait()  # occupy the first slot so everyone else has to queue
    granted = {}

    def call(n):
        granted[n] = limiter.wait()

    threads = []
    for n in range(4):
        t = threading.Thread(target=call, args=(n,))
        t.start()
        threads.append(t)
        # make sure thread n has its ticket before n+1 arrives
        deadline = time.monotonic() + 2
        while limiter.queued < n + 1 and n not in granted and time.monotonic() < deadline:
            time.sleep(0.001)
    for t in threads:
        t.join(timeout=5)

    order = sorted(granted, key=granted.get)
    assert order == [0, 1, 2, 3]
