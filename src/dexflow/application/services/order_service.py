"""Order service - wires routing, execution, dispatch and delivery"""

from typing import Any

from loguru import logger

from dexflow.application.dispatch.dispatcher import JobDispatcher
from dexflow.application.events.broadcaster import EventBroadcaster, Subscriber
from dexflow.application.persistence.handler import OrderPersistenceHandler
from dexflow.application.pipeline.execution import ExecutionPipeline
from dexflow.application.routing.router import RoutingEngine
from dexflow.core.config import Config, PipelineConfig, VenueConfig
from dexflow.domain.models import Order, Venue
from dexflow.infrastructure.database.orders import OrderRepository
from dexflow.infrastructure.venues import (
    HttpQuoteSource,
    MockQuoteSource,
    MockSwapExecutor,
    QuoteSource,
)
from dexflow.validation.orders import OrderRequest


def build_quote_source(
    venue: Venue, venue_config: VenueConfig, pipeline_config: PipelineConfig
) -> QuoteSource:
    """Create an HTTP source when a quote URL is configured, else a simulated one"""
    if venue_config.quote_api_url:
        return HttpQuoteSource(venue, venue_config.quote_api_url)
    return MockQuoteSource(
        venue,
        base_price=venue_config.base_price,
        bias=venue_config.bias,
        spread=venue_config.spread,
        fee=venue_config.fee,
        delay=pipeline_config.quote_delay,
    )


class OrderService:
    """Submission boundary for the transport layer

    Owns one instance of every pipeline component for the process.
    """

    def __init__(
        self,
        config: Config,
        repository: OrderRepository | None = None,
        executor=None,
        source_a: QuoteSource | None = None,
        source_b: QuoteSource | None = None,
    ) -> None:
        """
        Args:
            config: Loaded configuration
            repository: Order store (defaults to SQLite at config.db_path)
            executor: Swap executor (defaults to the simulated executor)
            source_a: Venue A quote source override
            source_b: Venue B quote source override
        """
        self.config = config
        self.repository = repository or OrderRepository(config.db_path)
        self.persistence = OrderPersistenceHandler(self.repository)
        self.broadcaster = EventBroadcaster()

        pipeline_config = config.pipeline
        self.router = RoutingEngine(
            source_a
            or build_quote_source(Venue.VENUE_A, config.venue_a, pipeline_config),
            source_b
            or build_quote_source(Venue.VENUE_B, config.venue_b, pipeline_config),
            timeout=pipeline_config.quote_timeout,
        )
        self.executor = executor or MockSwapExecutor(
            failure_rate=pipeline_config.settlement_failure_rate,
            delay_range=(
                pipeline_config.settlement_delay_min,
                pipeline_config.settlement_delay_max,
            ),
        )
        self.pipeline = ExecutionPipeline(
            self.router,
            self.executor,
            self.broadcaster,
            self.persistence,
            build_delay=pipeline_config.build_delay,
            settlement_timeout=pipeline_config.settlement_timeout,
        )
        self.dispatcher = JobDispatcher(
            self.pipeline,
            self.broadcaster,
            self.persistence,
            concurrency=config.dispatcher.concurrency,
            max_attempts=config.dispatcher.max_attempts,
            backoff_base=config.dispatcher.backoff_base,
            supported_assets=config.supported_assets,
        )

    async def start(self) -> None:
        await self.dispatcher.start()
        logger.info("Order service started")

    async def stop(self) -> None:
        if self.dispatcher.is_running:
            await self.dispatcher.stop()
        for source in (self.router.source_a, self.router.source_b):
            if isinstance(source, HttpQuoteSource):
                await source.aclose()
        self.repository.close()
        logger.info("Order service stopped")

    def submit(
        self,
        payload: dict[str, Any] | OrderRequest,
        subscriber: Subscriber | None = None,
    ) -> str:
        """Validate, enqueue and return the new order id

        Raises:
            ValidationError: If the payload is rejected
        """
        return self.dispatcher.submit(payload, subscriber)

    def subscribe(self, order_id: str, subscriber: Subscriber) -> None:
        """Attach a live subscriber to an existing order"""
        self.broadcaster.bind(order_id, subscriber)

    def get_order(self, order_id: str) -> Order | None:
        return self.repository.get_order(order_id)

    async def drain(self) -> None:
        await self.dispatcher.drain()
