import pytest
import requests
from fastapi import FastAPI
from fastapi.testclient import TestClient

import config
from conftest import OTHER, TKN, WALLET, StubResponse, StubSession
from defillama import HistoryCache
from price_cache import PriceCache
from rate_limiter import RateLimiter
from routers.system_router import create_system_router
from routers.wallet_router import create_wallet_router

ROW = {
    "blockNumber": "1",
    "timeStamp": "1700006400",
    "hash": "0x1",
    "from": OTHER,
    "to": WALLET,
    "contractAddress": TKN,
    "tokenName": "Token",
    "tokenSymbol": "TKN",
    "tokenDecimal": "18",
    "value": str(3 * 10 ** 18),
}


def make_client(explorer):
    """App wired to a stub upstream; `explorer` answers Etherscan calls."""

    def handler(url, params):
        if url == config.ETHERSCAN_URL:
            return explorer()
        if url.startswith(config.COINGECKO_URL):
            return StubResponse({TKN: {"usd": 2.0}})
        return StubResponse({"coins": {}})

    price_cache, history_cache = PriceCache(), HistoryCache()
    app = FastAPI()
    app.include_router(create_wallet_router(
        limiter=RateLimiter(interval=0),
        price_cache=price_cache,
        history_cache=history_cache,
        session=StubSession(handler),
    ))
    app.include_router(create_system_router(price_cache=price_cache, history_cache=history_cache))
    return TestClient(app)


@pytest.fixture(autouse=True)
def api_key(monkeypatch):
    monkeypatch.setattr("etherscan.ETHERSCAN_API_KEY", "test-key")


def ok_explorer():
    return StubResponse({"status": "1", "message": "OK", "result": [ROW]})


def test_wallet_pnl_success():
    client = make_client(ok_explorer)

    r = client.post("/api/wallet", json={"address": WALLET})

    assert r.status_code == 200
    body = r.json()
    assert body["meta"]["chain"] == "ethereum"
    assert body["meta"]["transferCount"] == 1
    assert body["meta"]["explorerTxUrl"].startswith("https://etherscan.io/tx/")
    (token,) = body["tokens"]
    assert token["contractAddress"] == TKN
    assert token["quantityHeld"] == pytest.approx(3.0)
    assert token["currentPrice"] == pytest.approx(2.0)
    assert body["summary"]["totalValue"] == pytest.approx(6.0)


def test_bad_address_is_400():
    client = make_client(ok_explorer)
    r = client.post("/api/wallet", json={"address": "0x123"})
    assert r.status_code == 400
    assert "Invalid wallet address" in r.json()["detail"]


def test_unknown_chain_is_400():
    client = make_client(ok_explorer)
    r = client.post("/api/wallet", json={"address": WALLET, "chain": "solana"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid chain"


def test_missing_address_fails_validation():
    client = make_client(ok_explorer)
    assert client.post("/api/wallet", json={}).status_code == 422


@pytest.mark.parametrize("explorer, status", [
    (lambda: StubResponse({"status": "0", "message": "NOTOK", "result": "Max rate limit reached"}), 429),
    (lambda: StubResponse({"status": "0", "message": "NOTOK", "result": "Invalid API Key"}), 500),
    (lambda: StubResponse({"status": "0", "message": "NOTOK", "result": "Query Timeout occured"}), 502),
    (lambda: StubResponse({}, status_code=503), 504),
])
def test_explorer_errors_map_to_status(explorer, status):
    client = make_client(explorer)
    r = client.post("/api/wallet", json={"address": WALLET})
    assert r.status_code == status


def test_network_failure_is_504():
    def explorer():
        raise requests.ConnectionError("down")

    client = make_client(explorer)
    assert client.post("/api/wallet", json={"address": WALLET}).status_code == 504


def test_upstream_detail_is_passed_through():
    client = make_client(lambda: StubResponse({"status": "0", "message": "NOTOK", "result": "Error! Invalid address format"}))
    r = client.post("/api/wallet", json={"address": WALLET})
    assert r.json()["detail"] == "Etherscan error: Error! Invalid address format"


def test_list_chains():
    r = make_client(ok_explorer).get("/api/chains")
    assert r.status_code == 200
    body = r.json()
    assert body["default"] == "ethereum"
    assert "arbitrum" in body["chains"]
    assert len(body["chains"]) == 9


def test_cache_stats_track_requests():
    client = make_client(ok_explorer)
    assert client.get("/api/cache/stats").json() == {"prices": 0, "noFeed": 0, "series": 0}

    client.post("/api/wallet", json={"address": WALLET})

    # TKN price plus its (empty) history series
    stats = client.get("/api/cache/stats").json()
    assert stats == {"prices": 1, "noFeed": 0, "series": 1}


def test_settings_hide_secrets():
    body = make_client(ok_explorer).get("/api/settings").json()
    assert "etherscan_configured" in body
    assert "test-key" not in str(body)
    assert body["etherscan_page_size"] == config.ETHERSCAN_PAGE_SIZE
