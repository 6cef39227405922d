"""
Current USD prices from CoinGecko's `/simple/token_price/{platform}`.

Requests only what the price cache can't answer, 50 contracts per call.
Any requested contract missing from a successful response is recorded
as no-feed so it isn't asked for again within the no-feed TTL.
"""

import logging
import time

import requests

from chains import COINGECKO_PLATFORMS
from config import (
    COINGECKO_API_KEY,
    COINGECKO_CHUNK_DELAY_SECONDS,
    COINGECKO_CHUNK_SIZE,
    COINGECKO_RETRY_DELAY_SECONDS,
    COINGECKO_URL,
    HTTP_TIMEOUT_SECONDS,
)
from price_cache import PriceCache

logger = logging.getLogger(__name__)


def _headers(api_key: str) -> dict:
    headers = {"Accept": "application/json"}
    if api_key:
        headers["x-cg-demo-apikey"] = api_key
    return headers


def _get_json(session, url: str, params: dict, headers: dict, sleep=time.sleep):
    """GET with one retry after a fixed backoff on 429. None on any failure."""
    response = session.get(url, params=params, headers=headers, timeout=HTTP_TIMEOUT_SECONDS)
    if response.status_code == 429:
        logger.info("[coingecko] rate limited, waiting %.0fs...", COINGECKO_RETRY_DELAY_SECONDS)
        sleep(COINGECKO_RETRY_DELAY_SECONDS)
        response = session.get(url, params=params, headers=headers, timeout=HTTP_TIMEOUT_SECONDS)
    if not response.ok:
        logger.warning("[coingecko] HTTP %s for %s", response.status_code, url)
        return None
    return response.json()


def _usable_price(entry) -> float | None:
    if not isinstance(entry, dict):
        return None
    usd = entry.get("usd")
    if isinstance(usd, bool) or not isinstance(usd, (int, float)):
        return None
    return float(usd)


def fetch_token_prices(
    contract_addresses: list[str],
    chain: str,
    cache: PriceCache,
    *,
    session=None,
    api_key: str | None = None,
    sleep=time.sleep,
) -> dict[str, float]:
    """Return {contract: usd} merging cache hits with freshly fetched prices.

    Contracts with no known price are simply absent from the result.
    A failed chunk is skipped; the remaining chunks still run.
    """
    if not contract_addresses:
        return {}

    session = session or requests
    api_key = COINGECKO_API_KEY if api_key is None else api_key

    part = cache.partition(contract_addresses)
    prices = dict(part.cached)
    if not part.to_fetch:
        return prices

    url = f"{COINGECKO_URL}/simple/token_price/{COINGECKO_PLATFORMS[chain]}"
    to_fetch = part.to_fetch

    for i in range(0, len(to_fetch), COINGECKO_CHUNK_SIZE):
        chunk = to_fetch[i:i + COINGECKO_CHUNK_SIZE]
        params = {"contract_addresses": ",".join(chunk), "vs_currencies": "usd"}
        if api_key:
            params["x_cg_demo_api_key"] = api_key

        try:
            data = _get_json(session, url, params, _headers(api_key), sleep=sleep)
        except (requests.RequestException, ValueError) as exc:
            logger.warning("[coingecko] chunk %d failed: %s", i // COINGECKO_CHUNK_SIZE + 1, exc)
            data = None

        if isinstance(data, dict):
            responded = {addr.lower() for addr in data}
            hits = 0
            for addr, entry in data.items():
                usd = _usable_price(entry)
                if usd is None:
                    continue
                key = addr.lower()
                prices[key] = usd
                cache.record_price(key, usd)
                hits += 1

            # Contracts absent from the response have no listing
            missing = [addr for addr in chunk if addr not in responded]
            for addr in missing:
                cache.record_no_feed(addr)
            logger.debug(
                "[coingecko] chunk %d: %d priced, %d no-feed",
                i // COINGECKO_CHUNK_SIZE + 1, hits, len(missing),
            )

        if i + COINGECKO_CHUNK_SIZE < len(to_fetch):
            sleep(COINGECKO_CHUNK_DELAY_SECONDS)

    return prices
