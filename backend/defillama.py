"""
Daily historical prices from DeFiLlama's free chart endpoint.

https://coins.llama.fi/chart/{coin}?start={ts}&span={days}&period=1d

Historical prices never change once published, so each series (even an
empty one) is cached for 24 hours.
"""

import itertools
import logging
import math
import threading
import time

import requests

from chains import DEFILLAMA_PREFIXES
from config import DEFILLAMA_URL, HISTORY_CONCURRENCY, HISTORY_TTL_SECONDS, HTTP_TIMEOUT_SECONDS
from models import PricePoint

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400
DEFAULT_MAX_DELTA_HOURS = 36


class HistoryCache:
    def __init__(self, ttl: float = HISTORY_TTL_SECONDS, clock=time.time):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[list[PricePoint], float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> list[PricePoint] | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            series, expiry = entry
            if self._clock() > expiry:
                del self._entries[key]
                return None
            return series

    def set(self, key: str, series: list[PricePoint]) -> None:
        with self._lock:
            self._entries[key] = (series, self._clock() + self.ttl)

    def stats(self) -> dict:
        now = self._clock()
        with self._lock:
            for key in [k for k, (_, exp) in self._entries.items() if now > exp]:
                del self._entries[key]
            return {"series": len(self._entries)}


def coin_id(contract_address: str, chain: str) -> str:
    return f"{DEFILLAMA_PREFIXES[chain]}:{contract_address.lower()}"


def span_days(start_ts: int, end_ts: int) -> int:
    return math.ceil((end_ts - start_ts) / SECONDS_PER_DAY) + 2


def _parse_points(raw) -> list[PricePoint]:
    points = []
    for p in raw:
        if not isinstance(p, dict):
            continue
        try:
            points.append(PricePoint(timestamp=int(p["timestamp"]), price=float(p["price"])))
        except (KeyError, TypeError, ValueError):
            continue
    return points


def fetch_price_history(
    contract_address: str,
    chain: str,
    start_ts: int,
    end_ts: int,
    cache: HistoryCache,
    *,
    session=None,
) -> list[PricePoint]:
    """Daily price series for one contract; empty list when unavailable."""
    session = session or requests
    coin = coin_id(contract_address, chain)
    days = span_days(start_ts, end_ts)
    cache_key = f"{coin}:{start_ts // SECONDS_PER_DAY}:{days}"

    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    try:
        response = session.get(
            f"{DEFILLAMA_URL}/chart/{coin}",
            params={"start": start_ts, "span": days, "period": "1d"},
            headers={"Accept": "application/json"},
            timeout=HTTP_TIMEOUT_SECONDS,
        )
        if not response.ok:
            logger.debug("[defillama] HTTP %s for %s", response.status_code, coin)
            cache.set(cache_key, [])
            return []
        data = response.json()
    except (requests.RequestException, ValueError) as exc:
        # Transient failure: not cached, retried on the next request
        logger.warning("[defillama] %s failed: %s", coin, exc)
        return []

    coin_data = (data.get("coins") or {}).get(coin) if isinstance(data, dict) else None
    raw_points = coin_data.get("prices") if isinstance(coin_data, dict) else None
    if not isinstance(raw_points, list) or not raw_points:
        cache.set(cache_key, [])
        return []

    series = _parse_points(raw_points)
    cache.set(cache_key, series)
    return series


def get_price_at(
    history: list[PricePoint],
    target_ts: int,
    max_delta_hours: float = DEFAULT_MAX_DELTA_HOURS,
) -> float | None:
    """Price of the point closest to `target_ts` (nearest neighbour, no
    interpolation). None if nothing lies within `max_delta_hours`."""
    if not history:
        return None

    best = history[0]
    for point in history:
        if abs(point.timestamp - target_ts) < abs(best.timestamp - target_ts):
            best = point

    if abs(best.timestamp - target_ts) > max_delta_hours * 3600:
        return None
    return best.price


def fetch_all_price_histories(
    contracts: list[str],
    chain: str,
    start_ts: int,
    end_ts: int,
    cache: HistoryCache,
    *,
    session=None,
    concurrency: int = HISTORY_CONCURRENCY,
) -> dict[str, list[PricePoint]]:
    """Fetch series for many contracts over a bounded pool of worker threads.

    Workers pull indices from a shared counter and write into a pre-sized
    list, so order is kept without locking the results. Contracts with an
    empty series are left out of the returned map.
    """
    if not contracts:
        return {}

    entries: list[tuple[str, list[PricePoint]] | None] = [None] * len(contracts)
    counter = itertools.count()
    counter_lock = threading.Lock()

    def worker():
        while True:
            with counter_lock:
                i = next(counter)
            if i >= len(contracts):
                return
            contract = contracts[i]
            try:
                history = fetch_price_history(contract, chain, start_ts, end_ts, cache, session=session)
            except Exception as exc:  # per-contract failures stay isolated
                logger.warning("[defillama] %s: unexpected error: %s", contract, exc)
                history = []
            entries[i] = (contract.lower(), history)

    workers = [
        threading.Thread(target=worker, name=f"llama-{n}", daemon=True)
        for n in range(min(concurrency, len(contracts)))
    ]
    for t in workers:
        t.start()
    for t in workers:
        t.join()

    histories = {}
    for entry in entries:
        if entry and entry[1]:
            histories[entry[0]] = entry[1]
    logger.debug("[defillama] %d/%d contracts with history", len(histories), len(contracts))
    return histories
