"""
In-memory price cache shared by every request in the process.

Two stores, each behind its own lock:
  prices:  successful prices, TTL 5 min
  no-feed: contracts with no CoinGecko listing, TTL 24 hr
            (avoids wasting API quota on spam/unknown tokens)

Expired entries are dropped lazily on read and on stats().
"""

import threading
import time
from dataclasses import dataclass, field

from config import NO_FEED_TTL_SECONDS, PRICE_TTL_SECONDS


@dataclass
class PriceEntry:
    usd: float
    expiry: float


@dataclass
class Partition:
    cached: dict[str, float] = field(default_factory=dict)
    to_fetch: list[str] = field(default_factory=list)
    skipped_no_feed: list[str] = field(default_factory=list)


class PriceCache:
    def __init__(
        self,
        price_ttl: float = PRICE_TTL_SECONDS,
        no_feed_ttl: float = NO_FEED_TTL_SECONDS,
        clock=time.time,
    ):
        self.price_ttl = price_ttl
        self.no_feed_ttl = no_feed_ttl
        self._clock = clock
        self._prices: dict[str, PriceEntry] = {}
        self._no_feed: dict[str, float] = {}  # addr → expiry
        self._prices_lock = threading.Lock()
        self._no_feed_lock = threading.Lock()

    # ── price store ───────────────────────────────────────────────────────

    def get_price(self, addr: str) -> float | None:
        key = addr.lower()
        with self._prices_lock:
            entry = self._prices.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expiry:
                del self._prices[key]
                return None
            return entry.usd

    def record_price(self, addr: str, usd: float) -> None:
        with self._prices_lock:
            self._prices[addr.lower()] = PriceEntry(usd=usd, expiry=self._clock() + self.price_ttl)

    # ── no-feed store ─────────────────────────────────────────────────────

    def is_no_feed(self, addr: str) -> bool:
        key = addr.lower()
        with self._no_feed_lock:
            expiry = self._no_feed.get(key)
            if expiry is None:
                return False
            if self._clock() > expiry:
                del self._no_feed[key]
                return False
            return True

    def record_no_feed(self, addr: str) -> None:
        with self._no_feed_lock:
            self._no_feed[addr.lower()] = self._clock() + self.no_feed_ttl

    # ── bulk helpers ──────────────────────────────────────────────────────

    def partition(self, addrs: list[str]) -> Partition:
        """Split addresses into cached prices, ones needing a CoinGecko
        call, and known no-feed ones to skip entirely. No network I/O."""
        result = Partition()
        for addr in addrs:
            key = addr.lower()
            if self.is_no_feed(key):
                result.skipped_no_feed.append(key)
                continue
            price = self.get_price(key)
            if price is not None:
                result.cached[key] = price
            else:
                result.to_fetch.append(key)
        return result

    def stats(self) -> dict:
        now = self._clock()
        with self._prices_lock:
            for key in [k for k, v in self._prices.items() if now > v.expiry]:
                del self._prices[key]
            prices = len(self._prices)
        with self._no_feed_lock:
            for key in [k for k, exp in self._no_feed.items() if now > exp]:
                del self._no_feed[key]
            no_feed = len(self._no_feed)
        return {"prices": prices, "noFeed": no_feed}
