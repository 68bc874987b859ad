"""Pytest fixtures for dexflow tests"""

import pytest

from dexflow.application.events.broadcaster import EventBroadcaster, QueueSubscriber
from dexflow.core.config import Config, DispatcherConfig, PipelineConfig
from dexflow.infrastructure.database.orders import OrderRepository


@pytest.fixture
def order_repository():
    """In-memory SQLite order store"""
    repo = OrderRepository(":memory:")
    yield repo
    repo.close()


@pytest.fixture
def broadcaster() -> EventBroadcaster:
    return EventBroadcaster()


@pytest.fixture
def subscriber() -> QueueSubscriber:
    return QueueSubscriber()


@pytest.fixture
def fast_config() -> Config:
    """Config with no artificial delays, no random reverts and quick retries"""
    return Config(
        db_path=":memory:",
        pipeline=PipelineConfig(
            build_delay=0.0,
            quote_delay=0.0,
            quote_timeout=2.0,
            settlement_timeout=2.0,
            settlement_delay_min=0.0,
            settlement_delay_max=0.0,
            settlement_failure_rate=0.0,
        ),
        dispatcher=DispatcherConfig(concurrency=4, max_attempts=3, backoff_base=0.01),
    )
