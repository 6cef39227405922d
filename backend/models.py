"""
Data records shared by the fetchers and the PnL engines.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

DEFAULT_DECIMALS = 18


def parse_raw_value(raw_value: str) -> int | None:
    """Parse an integer string of raw token units. None when unparseable."""
    try:
        return int(str(raw_value).strip())
    except (TypeError, ValueError):
        return None


def parse_token_amount(raw_value: str, decimals: int) -> float:
    """Raw integer amount → token quantity, without float precision loss
    on the integer side (the division is done in Decimal)."""
    raw = parse_raw_value(raw_value)
    if not raw:
        return 0.0
    if decimals == 0:
        return float(raw)
    try:
        return float(Decimal(raw).scaleb(-decimals))
    except InvalidOperation:
        return 0.0


def _parse_decimals(value) -> int:
    try:
        decimals = int(str(value).strip())
    except (TypeError, ValueError):
        return DEFAULT_DECIMALS
    return decimals if decimals > 0 else DEFAULT_DECIMALS


@dataclass(frozen=True)
class TokenTransfer:
    block_number: int
    timestamp: int
    tx_hash: str
    from_address: str
    to_address: str
    contract_address: str
    token_name: str
    token_symbol: str
    token_decimals: int
    raw_value: str

    @classmethod
    def from_explorer(cls, row: dict) -> "TokenTransfer":
        """Build from an Etherscan `tokentx` row. Addresses are lowercased."""
        return cls(
            block_number=int(row.get("blockNumber") or 0),
            timestamp=int(row.get("timeStamp") or 0),
            tx_hash=row.get("hash", "") or "",
            from_address=(row.get("from", "") or "").lower(),
            to_address=(row.get("to", "") or "").lower(),
            contract_address=(row.get("contractAddress", "") or "").lower(),
            token_name=row.get("tokenName", "") or "",
            token_symbol=row.get("tokenSymbol", "") or "",
            token_decimals=_parse_decimals(row.get("tokenDecimal")),
            raw_value=str(row.get("value", "0") or "0"),
        )

    @property
    def raw_amount(self) -> int | None:
        return parse_raw_value(self.raw_value)

    @property
    def quantity(self) -> float:
        return parse_token_amount(self.raw_value, self.token_decimals)


@dataclass
class CostLot:
    quantity: float
    price_per_token: float  # USD


@dataclass(frozen=True)
class PricePoint:
    timestamp: int
    price: float


@dataclass
class TokenPnL:
    symbol: str
    name: str
    contract_address: str
    quantity_held: float
    avg_buy_price: float
    current_price: float
    total_bought: float
    total_sold: float
    realized_pnl: float
    unrealized_pnl: float
    total_pnl: float
    pnl_percent: float
    has_historical_price: bool

    @property
    def held_value(self) -> float:
        return self.quantity_held * self.current_price

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "contractAddress": self.contract_address,
            "quantityHeld": self.quantity_held,
            "avgBuyPrice": self.avg_buy_price,
            "currentPrice": self.current_price,
            "totalBought": self.total_bought,
            "totalSold": self.total_sold,
            "realizedPnl": self.realized_pnl,
            "unrealizedPnl": self.unrealized_pnl,
            "totalPnl": self.total_pnl,
            "pnlPercent": self.pnl_percent,
            "hasHistoricalPrice": self.has_historical_price,
        }


@dataclass
class Summary:
    total_value: float = 0.0
    total_pnl: float = 0.0
    total_pnl_percent: float = 0.0
    realized_pnl: float = 0.0
    unrealized_pnl: float = 0.0
    win_rate: float = 0.0
    tokens_tracked: int = 0

    def to_dict(self) -> dict:
        return {
            "totalValue": self.total_value,
            "totalPnl": self.total_pnl,
            "totalPnlPercent": self.total_pnl_percent,
            "realizedPnl": self.realized_pnl,
            "unrealizedPnl": self.unrealized_pnl,
            "winRate": self.win_rate,
            "tokensTracked": self.tokens_tracked,
        }
