"""Tests for the execution pipeline state machine"""

from unittest.mock import Mock

import pytest

from dexflow.application.events.broadcaster import EventBroadcaster, QueueSubscriber
from dexflow.domain.models import OrderSide, OrderStatus, Venue
from dexflow.shared.exceptions import (
    PersistenceError,
    QuoteUnavailable,
    SettlementRevertedError,
)
from tests.factories import FlakyExecutor, OrderFactory, build_pipeline, statuses

SUCCESS_SEQUENCE = [
    "queued",
    "routing",
    "routing",
    "building",
    "submitted",
    "confirmed",
]


def _subscribed(order_id: str) -> tuple[EventBroadcaster, QueueSubscriber]:
    broadcaster = EventBroadcaster()
    subscriber = QueueSubscriber()
    broadcaster.bind(order_id, subscriber)
    return broadcaster, subscriber


@pytest.mark.asyncio
class TestExecutionPipeline:
    async def test_success_sequence(self):
        order = OrderFactory.order()
        broadcaster, subscriber = _subscribed(order.id)
        pipeline = build_pipeline(broadcaster=broadcaster)

        result = await pipeline.run(order)

        assert result.status == OrderStatus.CONFIRMED
        assert statuses(subscriber.drain()) == SUCCESS_SEQUENCE

    async def test_routing_is_two_phase(self):
        order = OrderFactory.order()
        broadcaster, subscriber = _subscribed(order.id)
        await build_pipeline(broadcaster=broadcaster).run(order)

        payloads = subscriber.drain()
        assert payloads[0]["meta"] == {}
        assert payloads[1]["meta"] == {}
        assert payloads[2]["meta"]["chosen"]["venue"] == "venue_b"
        assert payloads[2]["meta"]["quoteA"]["price"] == 1.05
        assert payloads[2]["meta"]["quoteB"]["price"] == 1.04

    async def test_no_event_has_chosen_without_both_quotes(self):
        order = OrderFactory.order()
        broadcaster, subscriber = _subscribed(order.id)
        await build_pipeline(broadcaster=broadcaster).run(order)

        for payload in subscriber.drain():
            if "chosen" in payload["meta"]:
                assert payload["meta"]["quoteA"] is not None
                assert payload["meta"]["quoteB"] is not None

    async def test_confirmed_carries_settlement(self):
        order = OrderFactory.order(slippage=0.0)
        broadcaster, subscriber = _subscribed(order.id)
        await build_pipeline(broadcaster=broadcaster).run(order)

        confirmed = subscriber.drain()[-1]
        assert confirmed["meta"]["executedPrice"] == 1.04
        assert confirmed["meta"]["settlementRef"].startswith("0x")
        assert order.meta.executed_price == 1.04

    async def test_sell_order_routes_to_higher_price(self):
        order = OrderFactory.order(
            side=OrderSide.SELL, token_in="SOL", token_out="USDC"
        )
        pipeline = build_pipeline(price_a=0.95, price_b=0.96)
        await pipeline.run(order)
        assert order.meta.chosen.venue == Venue.VENUE_B

    async def test_settlement_failure(self):
        order = OrderFactory.order()
        broadcaster, subscriber = _subscribed(order.id)
        pipeline = build_pipeline(broadcaster=broadcaster, failure_rate=1.0)

        with pytest.raises(SettlementRevertedError):
            await pipeline.run(order)

        payloads = subscriber.drain()
        assert statuses(payloads) == SUCCESS_SEQUENCE[:-1] + ["failed"]
        assert payloads[-1]["meta"]["error"] == "mock-execution-reverted"
        assert order.status == OrderStatus.FAILED

    async def test_routing_failure(self):
        from dexflow.application.routing.router import RoutingEngine
        from tests.factories import QuoteFactory

        order = OrderFactory.order()
        broadcaster, subscriber = _subscribed(order.id)
        pipeline = build_pipeline(broadcaster=broadcaster)
        pipeline.router = RoutingEngine(
            QuoteFactory.source(Venue.VENUE_A, 1.0, failure_rate=1.0),
            QuoteFactory.source(Venue.VENUE_B, 1.0),
        )

        with pytest.raises(QuoteUnavailable):
            await pipeline.run(order)

        payloads = subscriber.drain()
        assert statuses(payloads) == ["queued", "routing", "failed"]
        assert "chosen" not in payloads[-1]["meta"]
        assert payloads[-1]["meta"]["error"]

    async def test_error_without_message_uses_class_name(self):
        class SilentExecutor:
            async def execute(self, venue, order, slippage):
                raise SettlementRevertedError()

        order = OrderFactory.order()
        pipeline = build_pipeline(executor=SilentExecutor())
        with pytest.raises(SettlementRevertedError):
            await pipeline.run(order)
        assert order.meta.error == "SettlementRevertedError"

    async def test_settlement_timeout(self):
        from tests.factories import GatedExecutor

        order = OrderFactory.order()
        pipeline = build_pipeline(executor=GatedExecutor())
        pipeline.settlement_timeout = 0.05

        with pytest.raises(SettlementRevertedError, match="timed out"):
            await pipeline.run(order)
        assert order.status == OrderStatus.FAILED

    async def test_retry_restarts_full_pipeline(self):
        order = OrderFactory.order()
        broadcaster, subscriber = _subscribed(order.id)
        pipeline = build_pipeline(broadcaster=broadcaster, executor=FlakyExecutor(1))

        with pytest.raises(SettlementRevertedError):
            await pipeline.run(order)
        await pipeline.run(order)

        payloads = subscriber.drain()
        expected = SUCCESS_SEQUENCE[:-1] + ["failed"] + SUCCESS_SEQUENCE
        assert statuses(payloads) == expected
        assert [p["attempt"] for p in payloads] == [1] * 6 + [2] * 6
        assert order.attempt == 2

    async def test_status_never_regresses_within_attempt(self):
        order = OrderFactory.order()
        broadcaster, subscriber = _subscribed(order.id)
        await build_pipeline(broadcaster=broadcaster).run(order)

        rank = {s: i for i, s in enumerate(SUCCESS_SEQUENCE)}
        seen = [rank[s] for s in statuses(subscriber.drain())]
        assert seen == sorted(seen)

    async def test_persists_every_transition(self, order_repository):
        order = OrderFactory.order()
        pipeline = build_pipeline(repository=order_repository)

        await pipeline.run(order)

        stored = order_repository.get_order(order.id)
        assert stored.status == OrderStatus.CONFIRMED
        assert stored.meta.settlement_ref == order.meta.settlement_ref

    async def test_persists_failure_reason(self, order_repository):
        order = OrderFactory.order()
        pipeline = build_pipeline(repository=order_repository, failure_rate=1.0)

        with pytest.raises(SettlementRevertedError):
            await pipeline.run(order)

        stored = order_repository.get_order(order.id)
        assert stored.status == OrderStatus.FAILED
        assert stored.meta.error == "mock-execution-reverted"

    async def test_persistence_errors_do_not_abort(self):
        repo = Mock()
        repo.upsert_order.side_effect = PersistenceError("disk full")
        repo.mark_confirmed.side_effect = PersistenceError("disk full")
        order = OrderFactory.order()
        pipeline = build_pipeline(repository=repo)

        result = await pipeline.run(order)

        assert result.status == OrderStatus.CONFIRMED
        assert pipeline.persistence.error_count == 5
