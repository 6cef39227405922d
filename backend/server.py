import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, ETHERSCAN_API_KEY, ETHERSCAN_MIN_INTERVAL_MS
from defillama import HistoryCache
from log_config import setup_logging
from price_cache import PriceCache
from rate_limiter import RateLimiter
from routers.system_router import create_system_router
from routers.wallet_router import create_wallet_router

setup_logging()
logger = logging.getLogger(__name__)

# Process-wide state shared by all requests (in-memory only)
limiter = RateLimiter(interval=ETHERSCAN_MIN_INTERVAL_MS / 1000)
price_cache = PriceCache()
history_cache = HistoryCache()


def create_app() -> FastAPI:
    app = FastAPI(title="Wallet PnL")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_wallet_router(
        limiter=limiter,
        price_cache=price_cache,
        history_cache=history_cache,
    ))
    app.include_router(create_system_router(
        price_cache=price_cache,
        history_cache=history_cache,
    ))

    if not ETHERSCAN_API_KEY:
        logger.warning("[Init] ETHERSCAN_API_KEY is not set, wallet requests will fail")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
