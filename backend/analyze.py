"""
Wallet PnL pipeline: validated (address, chain) → transfers → held
contracts → current + historical prices (in parallel) → price inference
→ FIFO cost basis → {tokens, summary}.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from chains import DEFAULT_CHAIN, explorer_tx_url, is_supported_chain, stablecoins, wrapped_native
from coingecko import fetch_token_prices
from defillama import HistoryCache, fetch_all_price_histories
from errors import InvalidInput
from etherscan import fetch_token_transfers
from holdings import scan_held_contracts
from models import Summary, TokenPnL
from portfolio import calculate_pnl
from price_cache import PriceCache
from price_inference import build_tx_price_map
from rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


# ── Helpers ────────────────────────────────────────────────────────────────
def fmt_amount(amount: float) -> str:
    if abs(amount) >= 1_000_000:
        return f"{amount / 1_000_000:.2f}M"
    if abs(amount) >= 1_000:
        return f"{amount / 1_000:.2f}K"
    if abs(amount) >= 1:
        return f"{amount:.2f}"
    return f"{amount:.6f}"


def fmt_usd(usd: float) -> str:
    sign = "-" if usd < 0 else ""
    return f"{sign}${fmt_amount(abs(usd))}"


# ── Validation ─────────────────────────────────────────────────────────────
def validate_address(address: str) -> str:
    if not address or not ADDRESS_RE.match(address):
        raise InvalidInput("Invalid wallet address. Please provide a valid 0x... address.")
    return address.lower()


def validate_chain(chain: str | None) -> str:
    chain = (chain or DEFAULT_CHAIN).lower()
    if not is_supported_chain(chain):
        raise InvalidInput("Invalid chain")
    return chain


# ── Report ─────────────────────────────────────────────────────────────────
@dataclass
class WalletReport:
    address: str
    chain: str
    tokens: list[TokenPnL] = field(default_factory=list)
    summary: Summary = field(default_factory=Summary)
    transfer_count: int = 0
    truncated: bool = False
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "tokens": [t.to_dict() for t in self.tokens],
            "summary": self.summary.to_dict(),
            "meta": {
                "address": self.address,
                "chain": self.chain,
                "transferCount": self.transfer_count,
                "truncated": self.truncated,
                "warnings": self.warnings,
                # link template, `{txHash}` is filled in by the client
                "explorerTxUrl": explorer_tx_url(self.chain, "{txHash}"),
            },
        }


# ── Pipeline ───────────────────────────────────────────────────────────────
def analyze_wallet(
    address: str,
    chain: str,
    *,
    limiter: RateLimiter,
    price_cache: PriceCache,
    history_cache: HistoryCache,
    session=None,
) -> WalletReport:
    """Compute FIFO PnL for every ERC-20 the wallet touched on `chain`.

    Transfer-fetch failures propagate (no result is possible without the
    history); price failures only lower the confidence of the output.
    """
    address = validate_address(address)
    chain = validate_chain(chain)

    # 1. Fetch token transfers
    fetched = fetch_token_transfers(address, chain, limiter, session=session)
    transfers = fetched.transfers
    report = WalletReport(
        address=address,
        chain=chain,
        transfer_count=len(transfers),
        truncated=fetched.truncated,
    )
    if fetched.truncated:
        report.warnings.append(
            f"Transfer history truncated after {fetched.pages} pages ({len(transfers)} transfers)"
        )
    if not transfers:
        return report

    # 2. Pre-filter: only price contracts the wallet still holds
    all_contracts = list(dict.fromkeys(t.contract_address for t in transfers))
    held = scan_held_contracts(transfers, address, chain)
    price_targets = [c for c in all_contracts if c in held]

    # 3. History only for held, non-stable tokens
    stables = stablecoins(chain)
    weth = wrapped_native(chain)
    history_targets = [c for c in price_targets if c not in stables and c != weth]
    timestamps = [t.timestamp for t in transfers if t.timestamp]
    min_ts = min(timestamps) if timestamps else 0
    max_ts = max(timestamps) if timestamps else 0

    # 4. Current + historical prices in parallel
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="prices") as pool:
        prices_future = pool.submit(fetch_token_prices, price_targets, chain, price_cache, session=session)
        history_future = pool.submit(
            fetch_all_price_histories,
            history_targets, chain, min_ts, max_ts, history_cache,
            session=session,
        )
        prices = prices_future.result()
        histories = history_future.result()

    # 5. Infer per-tx prices, then FIFO
    tx_prices = build_tx_price_map(transfers, address, chain, prices.get(weth, 0.0))
    result = calculate_pnl(transfers, address, prices, histories, tx_prices)

    report.tokens = result.tokens
    report.summary = result.summary
    report.warnings.extend(result.warnings)

    logger.info(
        "[wallet] %s on %s: %d transfers, %d contracts, %d held, %d priced, %d with history, "
        "%d tokens tracked | cache %s",
        address, chain, len(transfers), len(all_contracts), len(price_targets),
        len(prices), len(histories), len(report.tokens), price_cache.stats(),
    )
    return report
