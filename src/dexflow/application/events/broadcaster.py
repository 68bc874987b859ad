"""Per-order event delivery to live subscribers"""

import asyncio
import threading
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from dexflow.domain.models import OrderEvent


@runtime_checkable
class Subscriber(Protocol):
    """Live connection that receives order events (e.g. a WebSocket)."""

    @property
    def is_connected(self) -> bool: ...

    async def send(self, payload: dict[str, Any]) -> None: ...

    def on_close(self, callback: Callable[[], None]) -> None: ...


class EventBroadcaster:
    """Maps each order id to at most one live subscriber

    Delivery is fire-and-forget and at-most-once: events published while no
    subscriber is bound, or while it is disconnected, are dropped. Binding a
    new subscriber supersedes the previous one. There is no replay.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, Subscriber] = {}
        self._lock = threading.Lock()

    def bind(self, order_id: str, subscriber: Subscriber) -> None:
        """Attach subscriber to order_id, replacing any prior binding

        The subscriber's close hook unbinds it automatically. A subscriber
        that is already disconnected is not bound.
        """
        if not subscriber.is_connected:
            logger.debug(f"Order {order_id}: ignoring closed subscriber")
            return

        with self._lock:
            previous = self._subscribers.get(order_id)
            self._subscribers[order_id] = subscriber

        if previous is not None and previous is not subscriber:
            logger.debug(f"Order {order_id}: subscriber superseded")

        subscriber.on_close(lambda: self.unbind(order_id, subscriber))
        logger.debug(f"Order {order_id}: subscriber bound")

    def unbind(self, order_id: str, subscriber: Subscriber | None = None) -> bool:
        """Remove the binding for order_id

        Args:
            order_id: Order identifier
            subscriber: If given, only unbind when it is the current binding

        Returns:
            True if a binding was removed
        """
        with self._lock:
            current = self._subscribers.get(order_id)
            if current is None:
                return False
            if subscriber is not None and current is not subscriber:
                return False
            del self._subscribers[order_id]

        logger.debug(f"Order {order_id}: subscriber unbound")
        return True

    def subscriber_for(self, order_id: str) -> Subscriber | None:
        with self._lock:
            return self._subscribers.get(order_id)

    async def publish(self, order_id: str, event: OrderEvent) -> None:
        """Deliver event to the bound subscriber, if any

        Never raises: send failures are logged and dropped.
        """
        subscriber = self.subscriber_for(order_id)
        if subscriber is None or not subscriber.is_connected:
            return

        try:
            await subscriber.send(event.to_dict())
        except Exception as e:
            logger.error(f"Failed to send event for order {order_id}: {e}")


class QueueSubscriber:
    """In-process subscriber buffering payloads on an asyncio.Queue"""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._connected = True
        self._close_callbacks: list[Callable[[], None]] = []

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def send(self, payload: dict[str, Any]) -> None:
        if not self._connected:
            raise ConnectionError("Subscriber is closed")
        await self._queue.put(payload)

    def on_close(self, callback: Callable[[], None]) -> None:
        self._close_callbacks.append(callback)

    def close(self) -> None:
        """Disconnect and fire close hooks once"""
        if not self._connected:
            return
        self._connected = False
        for callback in self._close_callbacks:
            callback()
        self._close_callbacks.clear()

    async def receive(self, timeout: float | None = None) -> dict[str, Any]:
        """Wait for the next payload"""
        return await asyncio.wait_for(self._queue.get(), timeout=timeout)

    def drain(self) -> list[dict[str, Any]]:
        """Return every buffered payload without waiting"""
        payloads = []
        while not self._queue.empty():
            payloads.append(self._queue.get_nowait())
        return payloads
