"""
FIFO cost-basis engine. Replays every ERC-20 transfer of a wallet per
contract in time order, maintaining a queue of cost lots, and turns the
result into per-token and portfolio-level PnL.
"""

from collections import defaultdict, deque
from dataclasses import dataclass, field

from defillama import get_price_at
from models import CostLot, PricePoint, Summary, TokenPnL, TokenTransfer
from price_inference import TxPriceMap

QUANTITY_EPSILON = 1e-12
USD_NOISE_THRESHOLD = 1e-3


# ── Data classes ──────────────────────────────────────────────────────────

@dataclass
class TokenPosition:
    contract: str
    symbol: str
    name: str
    lots: deque = field(default_factory=deque)
    quantity_held: float = 0.0
    realized_pnl: float = 0.0
    total_bought: float = 0.0
    total_sold: float = 0.0
    has_historical_price: bool = False
    uncovered_outflows: int = 0

    @property
    def remaining_cost_basis(self) -> float:
        return sum(lot.quantity * lot.price_per_token for lot in self.lots)

    @property
    def lot_quantity(self) -> float:
        return sum(lot.quantity for lot in self.lots)


# ── Core helpers ──────────────────────────────────────────────────────────

def add_lot(pos: TokenPosition, quantity: float, price: float) -> None:
    if quantity <= 0:
        return
    pos.lots.append(CostLot(quantity=quantity, price_per_token=price))
    pos.quantity_held += quantity
    pos.total_bought += quantity * price


def consume_lots_fifo(lots: deque, amount: float) -> tuple[float, float]:
    """
    Remove `amount` tokens from the oldest lots first.
    Returns (cost_basis_usd, amount_consumed). Any part of `amount` not
    covered by lots carries zero cost basis.
    """
    if amount <= 0:
        return 0.0, 0.0

    remaining = amount
    cost_basis = 0.0

    while remaining > QUANTITY_EPSILON and lots:
        lot = lots[0]
        if lot.quantity <= remaining + QUANTITY_EPSILON:
            cost_basis += lot.quantity * lot.price_per_token
            remaining -= lot.quantity
            lots.popleft()
        else:
            cost_basis += remaining * lot.price_per_token
            lot.quantity -= remaining
            remaining = 0.0

    return cost_basis, amount - max(remaining, 0.0)


def select_price(
    tx: TokenTransfer,
    tx_prices: dict[str, float],
    history: list[PricePoint],
    current_price: float,
) -> tuple[float, bool]:
    """
    Price priority for one transfer:
      1. inferred from a stablecoin / wrapped-native leg of the same tx
      2. nearest DeFiLlama daily price within 36h
      3. current price (least reliable)
    Returns (price, is_historical).
    """
    inferred = tx_prices.get(tx.tx_hash)
    if inferred is not None:
        return inferred, True
    llama_price = get_price_at(history, tx.timestamp)
    if llama_price is not None:
        return llama_price, True
    return current_price, False


# ── Replay ────────────────────────────────────────────────────────────────

def replay_contract(
    transfers: list[TokenTransfer],
    wallet: str,
    current_price: float,
    tx_prices: dict[str, float],
    history: list[PricePoint],
) -> TokenPosition:
    first = transfers[0]
    symbol = first.token_symbol or "???"
    pos = TokenPosition(
        contract=first.contract_address,
        symbol=symbol,
        name=first.token_name or symbol,
    )

    # sorted() is stable: same-second transfers keep log order
    for tx in sorted(transfers, key=lambda t: t.timestamp):
        quantity = tx.quantity
        if quantity == 0:
            continue

        is_inflow = tx.to_address == wallet
        is_outflow = tx.from_address == wallet
        if not is_inflow and not is_outflow:
            continue

        price, is_historical = select_price(tx, tx_prices, history, current_price)
        if is_historical:
            pos.has_historical_price = True

        if is_inflow:
            add_lot(pos, quantity, price)
        else:
            cost_basis, consumed = consume_lots_fifo(pos.lots, quantity)
            if quantity - consumed > QUANTITY_EPSILON * max(1.0, quantity):
                pos.uncovered_outflows += 1
            proceeds = quantity * price
            pos.total_sold += proceeds
            pos.realized_pnl += proceeds - cost_basis
            pos.quantity_held = max(0.0, pos.quantity_held - quantity)

    # Clamp residual float drift
    pos.quantity_held = max(0.0, pos.quantity_held)
    return pos


def build_token_pnl(pos: TokenPosition, current_price: float) -> TokenPnL | None:
    """Final per-token figures, or None for dust / zero-value spam."""
    remaining_cost = pos.remaining_cost_basis
    unrealized = (pos.quantity_held * current_price - remaining_cost) if current_price > 0 else 0.0
    total_pnl = pos.realized_pnl + unrealized

    has_holdings = pos.quantity_held > QUANTITY_EPSILON
    has_activity = (
        abs(pos.realized_pnl) > USD_NOISE_THRESHOLD
        or abs(pos.total_bought) > USD_NOISE_THRESHOLD
    )
    if not has_holdings and not has_activity:
        return None

    avg_buy = remaining_cost / pos.quantity_held if pos.quantity_held > 0 and remaining_cost > 0 else 0.0

    if remaining_cost > 0:
        pnl_percent = unrealized / remaining_cost * 100
    elif pos.total_bought > 0:
        pnl_percent = total_pnl / pos.total_bought * 100
    else:
        pnl_percent = 0.0

    return TokenPnL(
        symbol=pos.symbol,
        name=pos.name,
        contract_address=pos.contract,
        quantity_held=pos.quantity_held,
        avg_buy_price=avg_buy,
        current_price=current_price,
        total_bought=pos.total_bought,
        total_sold=pos.total_sold,
        realized_pnl=pos.realized_pnl,
        unrealized_pnl=unrealized,
        total_pnl=total_pnl,
        pnl_percent=pnl_percent,
        has_historical_price=pos.has_historical_price,
    )


# ── Metrics computation ──────────────────────────────────────────────────

def rank_tokens(tokens: list[TokenPnL]) -> list[TokenPnL]:
    """Held USD value desc, then |total PnL| desc."""
    return sorted(tokens, key=lambda t: (t.held_value, abs(t.total_pnl)), reverse=True)


def compute_summary(tokens: list[TokenPnL]) -> Summary:
    total_value = sum(t.held_value for t in tokens)
    total_pnl = sum(t.total_pnl for t in tokens)
    cost_basis = sum(t.quantity_held * t.avg_buy_price for t in tokens if t.avg_buy_price > 0)
    winners = sum(1 for t in tokens if t.total_pnl > 0)

    return Summary(
        total_value=total_value,
        total_pnl=total_pnl,
        total_pnl_percent=(total_pnl / cost_basis * 100) if cost_basis > 0 else 0.0,
        realized_pnl=sum(t.realized_pnl for t in tokens),
        unrealized_pnl=sum(t.unrealized_pnl for t in tokens),
        win_rate=(winners / len(tokens) * 100) if tokens else 0.0,
        tokens_tracked=len(tokens),
    )


# ── Main pipeline ────────────────────────────────────────────────────────

def group_by_contract(transfers: list[TokenTransfer]) -> dict[str, list[TokenTransfer]]:
    by_contract = defaultdict(list)
    for tx in transfers:
        by_contract[tx.contract_address].append(tx)
    return by_contract


@dataclass
class PnlResult:
    tokens: list[TokenPnL]
    summary: Summary
    warnings: list[str] = field(default_factory=list)


def calculate_pnl(
    transfers: list[TokenTransfer],
    wallet: str,
    prices: dict[str, float],
    histories: dict[str, list[PricePoint]] | None = None,
    tx_prices: TxPriceMap | None = None,
) -> PnlResult:
    wallet = wallet.lower()
    histories = histories or {}
    tx_prices = tx_prices or {}

    tokens = []
    uncovered = 0
    for contract, txs in group_by_contract(transfers).items():
        current_price = prices.get(contract, 0.0)
        pos = replay_contract(
            txs,
            wallet,
            current_price,
            tx_prices.get(contract, {}),
            histories.get(contract, []),
        )
        uncovered += pos.uncovered_outflows
        token = build_token_pnl(pos, current_price)
        if token is not None:
            tokens.append(token)

    warnings = []
    if uncovered > 0:
        warnings.append(
            f"{uncovered} outflows exceeded known holdings "
            "(possible transfers before the history window)"
        )

    tokens = rank_tokens(tokens)
    return PnlResult(tokens=tokens, summary=compute_summary(tokens), warnings=warnings)
