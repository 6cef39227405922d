import threading
import time


class RateLimiter:
    """Serialises callers across threads at least `interval` seconds apart.

    Waiters take a ticket and are let through strictly in ticket order, so
    two threads arriving together can never both pass the time check.
    """

    def __init__(self, interval: float = 0.21, clock=time.monotonic):
        self.interval = interval
        self._clock = clock
        self._cond = threading.Condition()
        self._next_ticket = 0
        self._now_serving = 0
        self._last = None

    def wait(self) -> float:
        """Block until it is this caller's turn. Returns the granted start time."""
        with self._cond:
            ticket = self._next_ticket
            self._next_ticket += 1

            while ticket != self._now_serving:
                self._cond.wait()

            if self._last is not None:
                while True:
                    delay = self._last + self.interval - self._clock()
                    if delay <= 0:
                        break
                    # Releases the lock while sleeping so others can queue up
                    self._cond.wait(delay)

            self._last = self._clock()
            self._now_serving += 1
            self._cond.notify_all()
            return self._last

    @property
    def queued(self) -> int:
        """Number of callers currently waiting for a turn."""
        with self._cond:
            return self._next_ticket - self._now_serving
