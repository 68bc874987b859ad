"""Simulated venues used for paper execution and tests"""

import asyncio
import random

from loguru import logger

from dexflow.domain.models import Order, Quote, Settlement, Venue
from dexflow.shared.constants import QUOTE_DELAY_SECONDS, SETTLEMENT_FAILURE_RATE
from dexflow.shared.exceptions import QuoteUnavailable, SettlementRevertedError


class MockQuoteSource:
    """Quote source producing prices in a band around a biased base price

    price = base_price * bias * (1 + U(-spread, spread))
    """

    def __init__(
        self,
        venue: Venue,
        base_price: float = 1.0,
        bias: float = 1.0,
        spread: float = 0.02,
        fee: float = 0.003,
        delay: float = QUOTE_DELAY_SECONDS,
        failure_rate: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        self.venue = venue
        self.base_price = base_price
        self.bias = bias
        self.spread = spread
        self.fee = fee
        self.delay = delay
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()

    async def fetch_quote(
        self, token_in: str, token_out: str, amount: float
    ) -> Quote:
        await asyncio.sleep(self.delay)

        if self.failure_rate > 0 and self._rng.random() < self.failure_rate:
            raise QuoteUnavailable(
                f"{self.venue.value}: no liquidity for {token_in}/{token_out}"
            )

        variance = self._rng.uniform(-self.spread, self.spread) if self.spread else 0.0
        price = self.base_price * self.bias * (1 + variance)
        logger.debug(
            f"{self.venue.value} quote {token_in}->{token_out} x {amount}: {price:.6f}"
        )
        return Quote(price=price, fee=self.fee, venue=self.venue)


class MockSwapExecutor:
    """Settlement simulator with an injectable revert probability"""

    def __init__(
        self,
        failure_rate: float = SETTLEMENT_FAILURE_RATE,
        delay_range: tuple[float, float] = (2.0, 3.0),
        rng: random.Random | None = None,
    ) -> None:
        if not 0 <= failure_rate <= 1:
            raise ValueError(f"failure_rate must be in [0, 1], got {failure_rate}")
        self.failure_rate = failure_rate
        self.delay_range = delay_range
        self._rng = rng or random.Random()

    async def execute(
        self, venue: Venue, order: Order, slippage: float
    ) -> Settlement:
        """Simulate settlement of the order's chosen quote

        Args:
            venue: Venue selected by routing
            order: Order carrying the chosen quote in its metadata
            slippage: Slippage tolerance in percent

        Returns:
            Settlement with a synthetic transaction reference

        Raises:
            SettlementRevertedError: On a simulated revert
        """
        await asyncio.sleep(self._rng.uniform(*self.delay_range))

        if self.failure_rate > 0 and self._rng.random() < self.failure_rate:
            raise SettlementRevertedError("mock-execution-reverted")

        chosen = order.meta.chosen
        if chosen is None or chosen.venue != venue:
            raise SettlementRevertedError(
                f"No routed quote for {venue.value} on order {order.id}"
            )

        executed_price = chosen.price * (
            1 + (self._rng.random() - 0.5) * slippage / 100
        )
        settlement_ref = "0x" + format(self._rng.getrandbits(64), "016x")
        logger.debug(
            f"Order {order.id} settled on {venue.value}: "
            f"{settlement_ref} @ {executed_price:.6f}"
        )
        return Settlement(settlement_ref=settlement_ref, executed_price=executed_price)
