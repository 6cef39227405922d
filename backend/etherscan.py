"""
Etherscan V2 token-transfer (ERC-20 `tokentx`) history fetcher.
"""

import logging
from dataclasses import dataclass, field

import requests

from chains import CHAIN_IDS
from config import (
    ETHERSCAN_API_KEY,
    ETHERSCAN_MAX_PAGES,
    ETHERSCAN_PAGE_SIZE,
    ETHERSCAN_URL,
    HTTP_TIMEOUT_SECONDS,
)
from errors import InvalidCredentials, RateLimited, TransportError, UpstreamError
from models import TokenTransfer
from rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

NO_TRANSACTIONS_MESSAGE = "No transactions found"


@dataclass
class TransferFetchResult:
    transfers: list[TokenTransfer] = field(default_factory=list)
    pages: int = 0
    truncated: bool = False


def _classify_error(data: dict) -> Exception:
    result = data.get("result")
    detail = (result if isinstance(result, str) else "") or data.get("message", "") or "unknown error"
    lower = detail.lower()

    if "rate limit" in lower or "max rate" in lower:
        return RateLimited("Etherscan rate limit reached; wait a moment and retry")
    if "invalid api key" in lower or "missing apikey" in lower:
        return InvalidCredentials("Invalid Etherscan API key; check ETHERSCAN_API_KEY in .env")
    return UpstreamError(detail)


def _parse_rows(rows: list) -> list[TokenTransfer]:
    try:
        return [TokenTransfer.from_explorer(row) for row in rows]
    except (AttributeError, TypeError, ValueError) as exc:
        raise UpstreamError(f"malformed transfer row: {exc}") from exc


def _request_page(session, params: dict) -> dict:
    try:
        response = session.get(
            ETHERSCAN_URL,
            params=params,
            headers={"Accept": "application/json"},
            timeout=HTTP_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        raise TransportError(f"Etherscan request failed: {exc}") from exc

    if not response.ok:
        raise TransportError(f"Etherscan API HTTP error: {response.status_code} {response.reason}")

    try:
        data = response.json()
    except ValueError as exc:
        raise UpstreamError("invalid JSON response") from exc
    if not isinstance(data, dict):
        raise UpstreamError("unexpected response shape")
    return data


def fetch_token_transfers(
    address: str,
    chain: str,
    limiter: RateLimiter,
    *,
    session=None,
    api_key: str | None = None,
    page_size: int = ETHERSCAN_PAGE_SIZE,
    max_pages: int = ETHERSCAN_MAX_PAGES,
) -> TransferFetchResult:
    """Fetch every ERC-20 transfer touching `address`, oldest first.

    Pages through the explorer at `page_size` rows per request, taking a
    rate-limiter turn before each page. Stops on a short page, on the
    explorer's "no transactions" answer, or after `max_pages` pages (the
    result is then marked truncated rather than failing).
    """
    session = session or requests
    api_key = ETHERSCAN_API_KEY if api_key is None else api_key
    if not api_key:
        raise InvalidCredentials("Missing Etherscan API key; set ETHERSCAN_API_KEY in .env")

    chainid = CHAIN_IDS[chain]
    result = TransferFetchResult()
    page = 1

    while True:
        limiter.wait()

        params = {
            "chainid": str(chainid),
            "module": "account",
            "action": "tokentx",
            "address": address,
            "page": str(page),
            "offset": str(page_size),
            "sort": "asc",
            "apikey": api_key,
        }
        data = _request_page(session, params)
        result.pages = page

        # Valid empty state
        if data.get("message", "") == NO_TRANSACTIONS_MESSAGE:
            break

        rows = data.get("result")
        if str(data.get("status")) != "1" or not isinstance(rows, list):
            raise _classify_error(data)

        result.transfers.extend(_parse_rows(rows))
        logger.debug("[etherscan] %s page %d: %d transfers", chain, page, len(rows))

        if len(rows) < page_size:
            break

        if page >= max_pages:
            logger.warning(
                "[etherscan] hit page cap (%d pages, %d transfers), truncating",
                max_pages, len(result.transfers),
            )
            result.truncated = True
            break

        page += 1

    return result
