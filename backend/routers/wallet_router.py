import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from analyze import analyze_wallet
from chains import DEFAULT_CHAIN, SUPPORTED_CHAINS
from defillama import HistoryCache
from errors import (
    InvalidCredentials,
    InvalidInput,
    RateLimited,
    TransportError,
    UpstreamError,
    WalletPnlError,
)
from price_cache import PriceCache
from rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    InvalidInput: 400,
    RateLimited: 429,
    InvalidCredentials: 500,
    UpstreamError: 502,
    TransportError: 504,
}


class WalletRequest(BaseModel):
    address: str
    chain: str = DEFAULT_CHAIN


def status_for(exc: WalletPnlError) -> int:
    for cls, status in ERROR_STATUS.items():
        if isinstance(exc, cls):
            return status
    return 500


def create_wallet_router(
    *,
    limiter: RateLimiter,
    price_cache: PriceCache,
    history_cache: HistoryCache,
    session=None,
) -> APIRouter:
    router = APIRouter()

    @router.post("/api/wallet")
    def wallet_pnl(body: WalletRequest):
        """FIFO PnL for every ERC-20 the wallet touched on the chain."""
        try:
            report = analyze_wallet(
                body.address,
                body.chain,
                limiter=limiter,
                price_cache=price_cache,
                history_cache=history_cache,
                session=session,
            )
        except WalletPnlError as e:
            status = status_for(e)
            if status >= 500:
                logger.error("[wallet] ERROR: %s", e)
            raise HTTPException(status_code=status, detail=str(e)) from e
        return report.to_dict()

    @router.get("/api/chains")
    def list_chains():
        """Supported chains."""
        return {"chains": list(SUPPORTED_CHAINS), "default": DEFAULT_CHAIN}

    return router
