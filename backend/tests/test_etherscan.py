import pytest
import requests

from conftest import OTHER, TKN, WALLET, StubResponse, StubSession
from errors import InvalidCredentials, RateLimited, TransportError, UpstreamError
from etherscan import fetch_token_transfers
from rate_limiter import RateLimiter


class CountingLimiter(RateLimiter):
    def __init__(self):
        super().__init__(interval=0)
        self.calls = 0

    def wait(self):
        self.calls += 1
        return super().wait()


def explorer_row(n: int) -> dict:
    return {
        "blockNumber": str(100 + n),
        "timeStamp": str(1_700_000_000 + n),
        "hash": f"0xhash{n}",
        "from": OTHER,
        "to": WALLET.upper().replace("0X", "0x"),
        "contractAddress": TKN.upper().replace("0X", "0x"),
        "tokenName": "Token",
        "tokenSymbol": "TKN",
        "tokenDecimal": "6",
        "value": "123456789012345678901234567890",
    }


def paged_handler(total_rows: int, page_size: int):
    def handler(url, params):
        page = int(params["page"])
        start = (page - 1) * page_size
        rows = [explorer_row(n) for n in range(start, min(start + page_size, total_rows))]
        return StubResponse({"status": "1", "message": "OK", "result": rows})
    return handler


def test_stops_on_short_page_and_parses_rows():
    session = StubSession(paged_handler(total_rows=5, page_size=3))
    limiter = CountingLimiter()

    result = fetch_token_transfers(WALLET, "base", limiter, session=session, api_key="k", page_size=3)

    assert len(result.transfers) == 5
    assert result.pages == 2
    assert result.truncated is False
    assert limiter.calls == 2
    first = result.transfers[0]
    assert first.to_address == WALLET
    assert first.contract_address == TKN
    assert first.token_decimals == 6
    assert first.raw_value == "123456789012345678901234567890"
    _, params = session.calls[0]
    assert params["chainid"] == "8453"
    assert params["action"] == "tokentx"
    assert params["sort"] == "asc"


def test_page_cap_truncates_instead_of_failing():
    # 11 full pages worth of data, cap at 10
    session = StubSession(paged_handler(total_rows=11 * 2, page_size=2))

    result = fetch_token_transfers(
        WALLET, "ethereum", CountingLimiter(), session=session, api_key="k", page_size=2, max_pages=10,
    )

    assert result.truncated is True
    assert result.pages == 10
    assert len(result.transfers) == 20
    assert len(session.calls) == 10


def test_no_transactions_is_empty_result():
    session = StubSession(lambda url, params: StubResponse(
        {"status": "0", "message": "No transactions found", "result": []}
    ))
    result = fetch_token_transfers(WALLET, "ethereum", CountingLimiter(), session=session, api_key="k")
    assert result.transfers == []
    assert result.truncated is False


@pytest.mark.parametrize(
    "payload, error",
    [
        ({"status": "0", "message": "NOTOK", "result": "Max rate limit reached"}, RateLimited),
        ({"status": "0", "message": "NOTOK", "result": "Invalid API Key"}, InvalidCredentials),
        ({"status": "0", "message": "NOTOK", "result": "Missing/Invalid API Key"}, InvalidCredentials),
        ({"status": "0", "message": "NOTOK", "result": "Query Timeout occured"}, UpstreamError),
        ({"status": "1", "message": "OK", "result": "not a list"}, UpstreamError),
    ],
)
def test_classifies_explorer_errors(payload, error):
    session = StubSession(lambda url, params: StubResponse(payload))
    with pytest.raises(error):
        fetch_token_transfers(WALLET, "ethereum", CountingLimiter(), session=session, api_key="k")


def test_upstream_error_keeps_detail():
    session = StubSession(lambda url, params: StubResponse(
        {"status": "0", "message": "NOTOK", "result": "Error! Invalid address format"}
    ))
    with pytest.raises(UpstreamError) as exc_info:
        fetch_token_transfers(WALLET, "ethereum", CountingLimiter(), session=session, api_key="k")
    assert exc_info.value.detail == "Error! Invalid address format"


def test_http_failure_is_transport_error():
    session = StubSession(lambda url, params: StubResponse({}, status_code=503))
    with pytest.raises(TransportError):
        fetch_token_transfers(WALLET, "ethereum", CountingLimiter(), session=session, api_key="k")


def test_timeout_is_transport_error():
    session = StubSession(lambda url, params: requests.Timeout("slow"))
    with pytest.raises(TransportError):
        fetch_token_transfers(WALLET, "ethereum", CountingLimiter(), session=session, api_key="k")


def test_missing_key_fails_before_any_request():
    session = StubSession(lambda url, params: StubResponse({}))
    with pytest.raises(InvalidCredentials):
        fetch_token_transfers(WALLET, "ethereum", CountingLimiter(), session=session, api_key="")
    assert session.calls == []


@pytest.mark.parametrize(
    "row",
    [
        "garbage",
        {**explorer_row(0), "timeStamp": "0x6553f100"},
        {**explorer_row(0), "blockNumber": "latest"},
        {**explorer_row(0), "timeStamp": {"unexpected": 1}},
    ],
)
def test_malformed_row_is_upstream_error(row):
    session = StubSession(lambda url, params: StubResponse({"status": "1", "message": "OK", "result": [row]}))
    with pytest.raises(UpstreamError, match="malformed transfer row"):
        fetch_token_transfers(WALLET, "ethereum", CountingLimiter(), session=session, api_key="k")
