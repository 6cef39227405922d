import sys

from analyze import analyze_wallet, fmt_amount, fmt_usd
from chains import DEFAULT_CHAIN, SUPPORTED_CHAINS
from config import ETHERSCAN_MIN_INTERVAL_MS
from defillama import HistoryCache
from errors import WalletPnlError
from log_config import setup_logging
from models import TokenPnL
from price_cache import PriceCache
from rate_limiter import RateLimiter


def format_token_row(i: int, token: TokenPnL) -> str:
    marker = "" if token.has_historical_price else " ~"
    avg_buy = fmt_usd(token.avg_buy_price) if token.avg_buy_price > 0 else "-"
    current = fmt_usd(token.current_price) if token.current_price > 0 else "-"
    return (
        f"  [{i:>3}] {token.symbol[:12]:12s} | held {fmt_amount(token.quantity_held):>10s} "
        f"| avg {avg_buy:>10s} | now {current:>10s} "
        f"| realized {fmt_usd(token.realized_pnl):>10s} "
        f"| unrealized {fmt_usd(token.unrealized_pnl):>10s} "
        f"| total {fmt_usd(token.total_pnl):>10s}{marker}"
    )


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(f"Usage: python main.py <wallet_address> [chain]  (chains: {', '.join(SUPPORTED_CHAINS)})")
        return 1

    setup_logging()
    address = argv[0].strip()
    chain = argv[1].strip() if len(argv) > 1 else DEFAULT_CHAIN

    print(f"Analyzing {address} on {chain}...")
    try:
        report = analyze_wallet(
            address,
            chain,
            limiter=RateLimiter(interval=ETHERSCAN_MIN_INTERVAL_MS / 1000),
            price_cache=PriceCache(),
            history_cache=HistoryCache(),
        )
    except WalletPnlError as e:
        print(f"Error: {e}")
        return 1

    if not report.tokens:
        print("No token activity found.")
        return 0

    print(f"\n{len(report.tokens)} tokens ({report.transfer_count} transfers):\n")
    for i, token in enumerate(report.tokens, 1):
        print(format_token_row(i, token))

    s = report.summary
    print(
        f"\nPortfolio value: {fmt_usd(s.total_value)} | Total PnL: {fmt_usd(s.total_pnl)} "
        f"({s.total_pnl_percent:.2f}%) | Realized: {fmt_usd(s.realized_pnl)} "
        f"| Unrealized: {fmt_usd(s.unrealized_pnl)} | Win rate: {s.win_rate:.1f}%"
    )
    if any(not t.has_historical_price for t in report.tokens):
        print("~ priced at current value (no historical price found)")
    for warning in report.warnings:
        print(f"⚠️  {warning}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
