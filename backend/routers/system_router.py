from fastapi import APIRouter

from config import (
    COINGECKO_API_KEY,
    ETHERSCAN_API_KEY,
    ETHERSCAN_MAX_PAGES,
    ETHERSCAN_MIN_INTERVAL_MS,
    ETHERSCAN_PAGE_SIZE,
    HISTORY_CONCURRENCY,
    HISTORY_TTL_SECONDS,
    NO_FEED_TTL_SECONDS,
    PRICE_TTL_SECONDS,
)
from defillama import HistoryCache
from price_cache import PriceCache


def create_system_router(
    *,
    price_cache: PriceCache,
    history_cache: HistoryCache,
) -> APIRouter:
    router = APIRouter()

    @router.get("/api/settings")
    def get_settings():
        """Get non-secret runtime settings."""
        return {
            "etherscan_configured": bool(ETHERSCAN_API_KEY),
            "coingecko_configured": bool(COINGECKO_API_KEY),
            "etherscan_page_size": ETHERSCAN_PAGE_SIZE,
            "etherscan_max_pages": ETHERSCAN_MAX_PAGES,
            "etherscan_min_interval_ms": ETHERSCAN_MIN_INTERVAL_MS,
            "history_concurrency": HISTORY_CONCURRENCY,
            "price_ttl_seconds": PRICE_TTL_SECONDS,
            "no_feed_ttl_seconds": NO_FEED_TTL_SECONDS,
            "history_ttl_seconds": HISTORY_TTL_SECONDS,
        }

    @router.get("/api/cache/stats")
    def cache_stats():
        """Live entry counts of the in-memory caches (expired ones purged)."""
        return {**price_cache.stats(), **history_cache.stats()}

    return router
