"""Job dispatcher - queues orders and runs their pipelines on a worker pool"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from dexflow.application.events.broadcaster import EventBroadcaster, Subscriber
from dexflow.application.persistence.handler import OrderPersistenceHandler
from dexflow.application.pipeline.execution import ExecutionPipeline
from dexflow.domain.models import Order, OrderEvent
from dexflow.shared.constants import (
    BACKOFF_BASE_SECONDS,
    MAX_ATTEMPTS,
    WORKER_CONCURRENCY,
)
from dexflow.validation.orders import OrderRequest, validate_order_request


class JobState(str, Enum):
    WAITING = "waiting"
    ACTIVE = "active"
    DELAYED = "delayed"
    FAILED = "failed"


@dataclass
class JobRecord:
    """Retry bookkeeping for one order

    Attributes:
        order: Order the job executes
        attempts: Pipeline runs started so far
        state: Current job state
        backoff_delays: Delay applied before each retry, in seconds
        last_error: Error text of the most recent failed attempt
    """

    order: Order
    attempts: int = 0
    state: JobState = JobState.WAITING
    backoff_delays: list[float] = field(default_factory=list)
    last_error: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.state != JobState.FAILED


class JobDispatcher:
    """Bounded worker pool over a FIFO queue with exponential-backoff retry

    Completed jobs are dropped from tracking. Jobs that exhaust their
    attempts stay tracked as permanently failed.
    """

    def __init__(
        self,
        pipeline: ExecutionPipeline,
        broadcaster: EventBroadcaster,
        persistence: OrderPersistenceHandler,
        concurrency: int = WORKER_CONCURRENCY,
        max_attempts: int = MAX_ATTEMPTS,
        backoff_base: float = BACKOFF_BASE_SECONDS,
        supported_assets: frozenset[str] | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if backoff_base <= 0:
            raise ValueError("backoff_base must be positive")

        self.pipeline = pipeline
        self.broadcaster = broadcaster
        self.persistence = persistence
        self.concurrency = concurrency
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.supported_assets = supported_assets

        self._queue: asyncio.Queue[JobRecord | None] = asyncio.Queue()
        self._jobs: dict[str, JobRecord] = {}
        self._workers: list[asyncio.Task] = []
        self._timers: set[asyncio.Task] = set()
        self._idle = asyncio.Event()
        self._idle.set()
        self._active = 0
        self._running = False

    @property
    def active_count(self) -> int:
        """Pipelines currently executing"""
        return self._active

    @property
    def is_running(self) -> bool:
        return self._running

    def submit(
        self,
        payload: dict[str, Any] | OrderRequest,
        subscriber: Subscriber | None = None,
    ) -> str:
        """Validate and enqueue an order, returning its id immediately

        Args:
            payload: Order request in wire format
            subscriber: Optional live subscriber bound before enqueue

        Returns:
            New order id

        Raises:
            ValidationError: If the payload is rejected (nothing is enqueued)
        """
        request = validate_order_request(payload, self.supported_assets)
        order = Order.from_request(request)

        if subscriber is not None:
            self.broadcaster.bind(order.id, subscriber)

        self.persistence.record_status(order)
        record = JobRecord(order=order)
        self._jobs[order.id] = record
        self._queue.put_nowait(record)
        self._idle.clear()

        logger.info(
            f"Order {order.id} queued: {order.side.value} {order.amount} "
            f"{order.token_in}->{order.token_out}"
        )
        return order.id

    def job(self, order_id: str) -> JobRecord | None:
        return self._jobs.get(order_id)

    def failed_jobs(self) -> list[JobRecord]:
        """Jobs that exhausted their retries"""
        return [r for r in self._jobs.values() if r.state == JobState.FAILED]

    def backoff_delay(self, attempt: int) -> float:
        """Delay before the retry that follows failed attempt number attempt"""
        return self.backoff_base * 2 ** (attempt - 1)

    async def start(self) -> None:
        """Start the worker pool"""
        if self._running:
            logger.warning("Dispatcher already running")
            return

        self._running = True
        self._workers = [
            asyncio.create_task(self._worker(i)) for i in range(self.concurrency)
        ]
        logger.info(f"Dispatcher started with {self.concurrency} workers")

    async def stop(self) -> None:
        """Stop workers after their current job

        Jobs still waiting in the queue or scheduled for retry are marked
        permanently failed. A job that fails while the pool is stopping is
        not retried.
        """
        if not self._running:
            logger.warning("Dispatcher not running")
            return

        self._running = False
        for timer in list(self._timers):
            timer.cancel()
        self._timers.clear()

        abandoned = []
        while not self._queue.empty():
            record = self._queue.get_nowait()
            self._queue.task_done()
            if record is not None:
                abandoned.append(record)
        abandoned.extend(
            r for r in self._jobs.values() if r.state == JobState.DELAYED
        )

        for _ in self._workers:
            await self._queue.put(None)
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

        for record in abandoned:
            await self._abandon(record)
        self._refresh_idle()
        logger.info(f"Dispatcher stopped, {len(abandoned)} pending job(s) failed")

    async def drain(self) -> None:
        """Wait until no job is waiting, running or scheduled for retry"""
        await self._idle.wait()

    async def _worker(self, index: int) -> None:
        logger.debug(f"Worker {index} started")

        while True:
            record = await self._queue.get()
            try:
                if record is None:
                    break
                await self._run_job(record)
            finally:
                self._queue.task_done()

        logger.debug(f"Worker {index} stopped")

    async def _run_job(self, record: JobRecord) -> None:
        order = record.order
        record.state = JobState.ACTIVE
        record.attempts += 1
        self._active += 1

        try:
            await self.pipeline.run(order)
        except Exception as e:
            record.last_error = str(e) or type(e).__name__
            if self._running and record.attempts < self.max_attempts:
                delay = self.backoff_delay(record.attempts)
                record.backoff_delays.append(delay)
                record.state = JobState.DELAYED
                logger.warning(
                    f"Order {order.id}: attempt "
                    f"{record.attempts}/{self.max_attempts} failed, "
                    f"retrying in {delay:.2f}s"
                )
                timer = asyncio.create_task(self._retry_later(record, delay))
                self._timers.add(timer)
                timer.add_done_callback(self._timers.discard)
            else:
                record.state = JobState.FAILED
                self.broadcaster.unbind(order.id)
                logger.error(
                    f"Order {order.id}: permanently failed after "
                    f"{record.attempts} attempts: {record.last_error}"
                )
        else:
            self._jobs.pop(order.id, None)
            self.broadcaster.unbind(order.id)
            logger.info(f"Order {order.id}: job complete")
        finally:
            self._active -= 1
            self._refresh_idle()

    async def _retry_later(self, record: JobRecord, delay: float) -> None:
        await asyncio.sleep(delay)
        record.state = JobState.WAITING
        await self._queue.put(record)

    async def _abandon(self, record: JobRecord) -> None:
        order = record.order
        record.state = JobState.FAILED
        record.last_error = record.last_error or "dispatcher stopped"

        if not order.status.is_terminal:
            order.fail("dispatcher stopped")
            self.persistence.record_failed(order)
            await self.broadcaster.publish(order.id, OrderEvent.from_order(order))
        self.broadcaster.unbind(order.id)
        logger.warning(f"Order {order.id}: dropped by dispatcher stop")

    def _refresh_idle(self) -> None:
        if any(r.is_pending for r in self._jobs.values()):
            self._idle.clear()
        else:
            self._idle.set()
