"""Venue protocols defining the quoting and settlement boundaries.

These protocols let the routing engine and pipeline run against mock
venues in tests and real venue clients in production.
"""

from typing import Protocol, runtime_checkable

from dexflow.domain.models import Order, Quote, Settlement, Venue


@runtime_checkable
class QuoteSource(Protocol):
    """Protocol for a single liquidity venue's quoting API."""

    venue: Venue

    async def fetch_quote(
        self, token_in: str, token_out: str, amount: float
    ) -> Quote:
        """Return a fresh quote, raising QuoteUnavailable on failure."""
        ...


@runtime_checkable
class SwapExecutor(Protocol):
    """Protocol for swap settlement."""

    async def execute(
        self, venue: Venue, order: Order, slippage: float
    ) -> Settlement:
        """Settle the order on the venue, raising SettlementRevertedError on revert."""
        ...
