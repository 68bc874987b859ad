"""Order state event snapshot"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .order import Order, OrderStatus


@dataclass(frozen=True)
class OrderEvent:
    """Immutable snapshot of an order published after a transition

    Attributes:
        order_id: Order identifier
        status: Status at the time of the snapshot
        timestamp: Time of the most recent transition
        attempt: Pipeline attempt the snapshot belongs to
        meta: Wire-format metadata (see OrderMeta.to_dict)
    """

    order_id: str
    status: OrderStatus
    timestamp: datetime
    attempt: int = 1
    meta: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_order(cls, order: Order) -> "OrderEvent":
        return cls(
            order_id=order.id,
            status=order.status,
            timestamp=order.updated_at,
            attempt=order.attempt,
            meta=order.meta.to_dict(),
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable record for the transport layer"""
        return {
            "orderId": self.order_id,
            "status": self.status.value,
            "timestamp": int(self.timestamp.timestamp() * 1000),
            "attempt": self.attempt,
            "meta": dict(self.meta),
        }

    def __repr__(self) -> str:
        return (
            f"OrderEvent(order_id={self.order_id}, status={self.status.value}, "
            f"attempt={self.attempt})"
        )
