"""Execution pipeline - drives one order through its lifecycle"""

import asyncio

from loguru import logger

from dexflow.application.events.broadcaster import EventBroadcaster
from dexflow.application.persistence.handler import OrderPersistenceHandler
from dexflow.application.routing.router import RoutingEngine
from dexflow.domain.models import Order, OrderEvent, OrderStatus, Settlement, Venue
from dexflow.infrastructure.venues.protocols import SwapExecutor
from dexflow.shared.constants import BUILD_DELAY_SECONDS
from dexflow.shared.exceptions import SettlementRevertedError


class ExecutionPipeline:
    """Order state machine

    One run emits, in order: queued, routing, routing (with quotes),
    building, submitted, confirmed. Any error moves the order to failed,
    emits it, and is re-raised so the dispatcher can retry. A retry restarts
    the whole pipeline, so early states are emitted again with a higher
    attempt number.
    """

    def __init__(
        self,
        router: RoutingEngine,
        executor: SwapExecutor,
        broadcaster: EventBroadcaster,
        persistence: OrderPersistenceHandler,
        build_delay: float = BUILD_DELAY_SECONDS,
        settlement_timeout: float | None = None,
    ) -> None:
        self.router = router
        self.executor = executor
        self.broadcaster = broadcaster
        self.persistence = persistence
        self.build_delay = build_delay
        self.settlement_timeout = settlement_timeout

    async def run(self, order: Order) -> Order:
        """Execute the pipeline for order

        Args:
            order: Queued order, or a failed order being retried

        Returns:
            The confirmed order

        Raises:
            Exception: Whatever failed routing or execution, after the
                failed state has been persisted and published
        """
        if order.status == OrderStatus.FAILED:
            order.restart()
        logger.info(f"Order {order.id}: pipeline start (attempt {order.attempt})")

        self.persistence.record_status(order)
        await self._emit(order)

        try:
            await self._transition(order, OrderStatus.ROUTING)
            route = await self.router.route(order, order.side)
            order.attach_route(route)
            await self._emit(order)

            await self._transition(order, OrderStatus.BUILDING)
            await asyncio.sleep(self.build_delay)

            await self._transition(order, OrderStatus.SUBMITTED)
            settlement = await self._settle(order, route.chosen.venue)

            order.confirm(settlement)
            self.persistence.record_confirmed(order)
            await self._emit(order)
        except Exception as e:
            reason = str(e) or type(e).__name__
            order.fail(reason)
            self.persistence.record_failed(order)
            await self._emit(order)
            logger.warning(
                f"Order {order.id}: failed on attempt {order.attempt}: {reason}"
            )
            raise

        logger.info(
            f"Order {order.id}: confirmed {order.meta.settlement_ref} "
            f"@ {order.meta.executed_price:.6f}"
        )
        return order

    async def _transition(self, order: Order, target: OrderStatus) -> None:
        order.advance(target)
        self.persistence.record_status(order)
        await self._emit(order)

    async def _settle(self, order: Order, venue: Venue) -> Settlement:
        try:
            return await asyncio.wait_for(
                self.executor.execute(venue, order, order.slippage),
                timeout=self.settlement_timeout,
            )
        except TimeoutError as e:
            raise SettlementRevertedError(
                f"Settlement timed out after {self.settlement_timeout}s"
            ) from e

    async def _emit(self, order: Order) -> None:
        event = OrderEvent.from_order(order)
        logger.debug(f"Emitting {event!r}")
        await self.broadcaster.publish(order.id, event)
