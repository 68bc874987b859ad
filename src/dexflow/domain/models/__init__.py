"""Domain models"""

from .event import OrderEvent
from .order import STATUS_SEQUENCE, Order, OrderMeta, OrderSide, OrderStatus
from .quote import Quote, RouteResult, Settlement, Venue

__all__ = [
    "Order",
    "OrderMeta",
    "OrderSide",
    "OrderStatus",
    "STATUS_SEQUENCE",
    "OrderEvent",
    "Quote",
    "RouteResult",
    "Settlement",
    "Venue",
]
