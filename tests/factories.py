"""Test data factories for orders, quotes and pipeline components"""

import asyncio
import random

from dexflow.application.events.broadcaster import EventBroadcaster
from dexflow.application.persistence.handler import OrderPersistenceHandler
from dexflow.application.pipeline.execution import ExecutionPipeline
from dexflow.application.routing.router import RoutingEngine
from dexflow.domain.models import Order, OrderSide, Quote, Settlement, Venue
from dexflow.infrastructure.venues import MockQuoteSource, MockSwapExecutor
from dexflow.shared.exceptions import SettlementRevertedError


class OrderFactory:
    """Factory for creating test orders"""

    @staticmethod
    def order(
        side: OrderSide = OrderSide.BUY,
        token_in: str = "USDC",
        token_out: str = "SOL",
        amount: float = 100.0,
        slippage: float = 0.5,
    ) -> Order:
        return Order(
            side=side,
            token_in=token_in,
            token_out=token_out,
            amount=amount,
            slippage=slippage,
        )

    @staticmethod
    def payload(**overrides) -> dict:
        payload = {
            "side": "buy",
            "tokenIn": "USDC",
            "tokenOut": "SOL",
            "amount": 100,
            "slippage": 0.5,
        }
        payload.update(overrides)
        return payload


class QuoteFactory:
    """Factory for creating test quotes"""

    @staticmethod
    def quote(
        price: float = 1.0, venue: Venue = Venue.VENUE_A, fee: float = 0.003
    ) -> Quote:
        return Quote(price=price, fee=fee, venue=venue)

    @staticmethod
    def source(
        venue: Venue,
        price: float,
        delay: float = 0.0,
        failure_rate: float = 0.0,
    ) -> MockQuoteSource:
        """Deterministic quote source returning exactly price"""
        return MockQuoteSource(
            venue, base_price=price, spread=0.0, delay=delay, failure_rate=failure_rate
        )


class FlakyExecutor:
    """Executor that reverts a fixed number of times before settling"""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def execute(self, venue: Venue, order: Order, slippage: float) -> Settlement:
        self.calls += 1
        if self.calls <= self.failures:
            raise SettlementRevertedError("mock-execution-reverted")
        return Settlement(
            settlement_ref=f"0xflaky{self.calls}",
            executed_price=order.meta.chosen.price,
        )


class GatedExecutor:
    """Executor that waits for release() before settling"""

    def __init__(self) -> None:
        self.entered = asyncio.Event()
        self._release = asyncio.Event()

    def release(self) -> None:
        self._release.set()

    async def execute(self, venue: Venue, order: Order, slippage: float) -> Settlement:
        self.entered.set()
        await self._release.wait()
        return Settlement(
            settlement_ref="0xgated", executed_price=order.meta.chosen.price
        )


def build_pipeline(
    price_a: float = 1.05,
    price_b: float = 1.04,
    executor=None,
    repository=None,
    broadcaster: EventBroadcaster | None = None,
    failure_rate: float = 0.0,
) -> ExecutionPipeline:
    """Pipeline with zero delays and deterministic venues"""
    router = RoutingEngine(
        QuoteFactory.source(Venue.VENUE_A, price_a),
        QuoteFactory.source(Venue.VENUE_B, price_b),
    )
    executor = executor or MockSwapExecutor(
        failure_rate=failure_rate, delay_range=(0.0, 0.0), rng=random.Random(7)
    )
    return ExecutionPipeline(
        router,
        executor,
        broadcaster or EventBroadcaster(),
        OrderPersistenceHandler(repository),
        build_delay=0.0,
    )


def statuses(payloads: list[dict]) -> list[str]:
    """Status values from a list of published payloads"""
    return [p["status"] for p in payloads]
