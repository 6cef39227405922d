"""
Failure classes surfaced by the wallet PnL pipeline.

Only transfer-history failures are raised to callers; missing prices
degrade the result quietly (see TokenPnL.has_historical_price).
"""


class WalletPnlError(Exception):
    """Base class for all pipeline failures."""


class InvalidInput(WalletPnlError):
    """Bad wallet address or unsupported chain."""


class RateLimited(WalletPnlError):
    """Upstream explorer is throttling us; retry later."""


class InvalidCredentials(WalletPnlError):
    """Explorer API key is missing or rejected."""


class UpstreamError(WalletPnlError):
    """Explorer answered with an unexpected payload or status."""

    def __init__(self, detail: str):
        super().__init__(f"Etherscan error: {detail}")
        self.detail = detail


class TransportError(WalletPnlError):
    """Network failure, timeout or non-2xx HTTP status."""
