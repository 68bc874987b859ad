"""Shared constants for the swap pipeline."""

SUPPORTED_ASSETS = frozenset(
    {"SOL", "USDC", "USDT", "BONK", "JUP", "RAY", "MSOL", "WIF"}
)

DEFAULT_SLIPPAGE_PERCENT = 0.5

MAX_ATTEMPTS = 3
BACKOFF_BASE_SECONDS = 0.5
WORKER_CONCURRENCY = 10

BUILD_DELAY_SECONDS = 0.2
QUOTE_DELAY_SECONDS = 0.2
SETTLEMENT_FAILURE_RATE = 0.05
