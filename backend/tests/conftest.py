import pathlib
import sys
import threading

import pytest

BACKEND = pathlib.Path(__file__).resolve().parents[1]
if str(BACKEND) not in sys.path:
    sys.path.insert(0, str(BACKEND))

from models import TokenTransfer  # noqa: E402

WALLET = "0x1111111111111111111111111111111111111111"
OTHER = "0x2222222222222222222222222222222222222222"
ROUTER = "0x3333333333333333333333333333333333333333"
TKN = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"


class StubResponse:
    def __init__(self, payload=None, status_code: int = 200, json_error: bool = False):
        self._payload = payload
        self.status_code = status_code
        self.reason = "OK" if status_code < 400 else "Error"
        self._json_error = json_error

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._json_error:
            raise ValueError("not json")
        return self._payload


class StubSession:
    """Records calls and answers each with `handler(url, params)`."""

    def __init__(self, handler):
        self.handler = handler
        self.calls: list[tuple[str, dict]] = []
        self._lock = threading.Lock()

    def get(self, url, params=None, headers=None, timeout=None):
        with self._lock:
            self.calls.append((url, dict(params or {})))
        result = self.handler(url, params or {})
        if isinstance(result, Exception):
            raise result
        return result


def make_transfer(
    *,
    contract: str = TKN,
    frm: str = OTHER,
    to: str = WALLET,
    amount: int | str = 1,
    decimals: int = 18,
    tx_hash: str = "0xh1",
    timestamp: int = 1_700_000_000,
    symbol: str = "TKN",
    name: str = "Token",
    block: int = 1,
) -> TokenTransfer:
    """Build a transfer; integer `amount` is in whole tokens."""
    raw = str(amount * 10 ** decimals) if isinstance(amount, int) else amount
    return TokenTransfer(
        block_number=block,
        timestamp=timestamp,
        tx_hash=tx_hash,
        from_address=frm,
        to_address=to,
        contract_address=contract,
        token_name=name,
        token_symbol=symbol,
        token_decimals=decimals,
        raw_value=raw,
    )


@pytest.fixture
def transfer():
    return make_transfer
