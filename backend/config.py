import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).parent.parent / ".env")

# ── API keys ───────────────────────────────────────────────────────────────
# Single Etherscan V2 key covers every supported chain
ETHERSCAN_API_KEY = (os.getenv("ETHERSCAN_API_KEY") or "").strip()
# CoinGecko demo key; without it the token price endpoint may answer 401
COINGECKO_API_KEY = (os.getenv("COINGECKO_API_KEY") or "").strip()

# ── Upstream endpoints ─────────────────────────────────────────────────────
ETHERSCAN_URL = os.getenv("ETHERSCAN_URL", "https://api.etherscan.io/v2/api")
COINGECKO_URL = os.getenv("COINGECKO_URL", "https://api.coingecko.com/api/v3")
DEFILLAMA_URL = os.getenv("DEFILLAMA_URL", "https://coins.llama.fi")

# ── Limits ─────────────────────────────────────────────────────────────────
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", 15))
ETHERSCAN_MIN_INTERVAL_MS = int(os.getenv("ETHERSCAN_MIN_INTERVAL_MS", 210))  # ≤5 req/sec
ETHERSCAN_PAGE_SIZE = int(os.getenv("ETHERSCAN_PAGE_SIZE", 10000))
ETHERSCAN_MAX_PAGES = int(os.getenv("ETHERSCAN_MAX_PAGES", 10))  # 100k transfers max
COINGECKO_CHUNK_SIZE = 50  # CoinGecko max per request
COINGECKO_CHUNK_DELAY_SECONDS = 0.5
COINGECKO_RETRY_DELAY_SECONDS = 5.0
HISTORY_CONCURRENCY = max(1, int(os.getenv("HISTORY_CONCURRENCY", 8)))

# ── Cache TTLs ─────────────────────────────────────────────────────────────
PRICE_TTL_SECONDS = 5 * 60
NO_FEED_TTL_SECONDS = 24 * 60 * 60
HISTORY_TTL_SECONDS = 24 * 60 * 60

# ── Server ─────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if origin.strip()
]
