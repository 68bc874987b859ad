"""Order domain model and lifecycle state machine"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from dexflow.shared.exceptions import InvalidTransitionError

from .quote import Quote, RouteResult, Settlement

if TYPE_CHECKING:
    from dexflow.validation.orders import OrderRequest


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderStatus(str, Enum):
    """Order lifecycle states

    Forward order: QUEUED -> ROUTING -> BUILDING -> SUBMITTED -> CONFIRMED.
    FAILED is reachable from any non-terminal state.
    """

    QUEUED = "queued"
    ROUTING = "routing"
    BUILDING = "building"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.CONFIRMED, OrderStatus.FAILED)


STATUS_SEQUENCE = (
    OrderStatus.QUEUED,
    OrderStatus.ROUTING,
    OrderStatus.BUILDING,
    OrderStatus.SUBMITTED,
    OrderStatus.CONFIRMED,
)


@dataclass
class OrderMeta:
    """Additive metadata collected while the pipeline advances"""

    quote_a: Quote | None = None
    quote_b: Quote | None = None
    chosen: Quote | None = None
    settlement_ref: str | None = None
    executed_price: float | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize populated fields using the event wire names"""
        data: dict[str, Any] = {}
        if self.chosen is not None:
            data["quoteA"] = self.quote_a.to_dict() if self.quote_a else None
            data["quoteB"] = self.quote_b.to_dict() if self.quote_b else None
            data["chosen"] = self.chosen.to_dict()
        if self.settlement_ref is not None:
            data["settlementRef"] = self.settlement_ref
        if self.executed_price is not None:
            data["executedPrice"] = self.executed_price
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class Order:
    """Swap order (domain model)

    Status and metadata are mutated only through the transition methods
    below, which enforce forward-only movement.
    """

    side: OrderSide
    token_in: str
    token_out: str
    amount: float
    slippage: float
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: OrderStatus = OrderStatus.QUEUED
    updated_at: datetime = field(default_factory=datetime.now)
    attempt: int = 1
    meta: OrderMeta = field(default_factory=OrderMeta)

    @classmethod
    def from_request(cls, request: "OrderRequest") -> "Order":
        return cls(
            side=OrderSide(request.side),
            token_in=request.token_in,
            token_out=request.token_out,
            amount=request.amount,
            slippage=request.slippage,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def advance(self, target: OrderStatus) -> None:
        """Move to the next status in the forward sequence

        Raises:
            InvalidTransitionError: If target is not the immediate successor
        """
        if self.status not in STATUS_SEQUENCE or target not in STATUS_SEQUENCE:
            raise InvalidTransitionError(
                f"Order {self.id}: cannot move {self.status.value} -> {target.value}"
            )
        current = STATUS_SEQUENCE.index(self.status)
        if STATUS_SEQUENCE.index(target) != current + 1:
            raise InvalidTransitionError(
                f"Order {self.id}: cannot move {self.status.value} -> {target.value}"
            )
        self.status = target
        self.updated_at = datetime.now()

    def attach_route(self, route: RouteResult) -> None:
        if self.status != OrderStatus.ROUTING:
            raise InvalidTransitionError(
                f"Order {self.id}: quotes can only be attached while routing"
            )
        self.meta.quote_a = route.quote_a
        self.meta.quote_b = route.quote_b
        self.meta.chosen = route.chosen
        self.updated_at = datetime.now()

    def confirm(self, settlement: Settlement) -> None:
        self.meta.settlement_ref = settlement.settlement_ref
        self.meta.executed_price = settlement.executed_price
        self.advance(OrderStatus.CONFIRMED)

    def fail(self, error: str) -> None:
        """Jump to FAILED from any non-terminal state"""
        if self.is_terminal:
            raise InvalidTransitionError(
                f"Order {self.id}: already terminal ({self.status.value})"
            )
        self.meta.error = error
        self.status = OrderStatus.FAILED
        self.updated_at = datetime.now()

    def restart(self) -> None:
        """Reset a failed order for a full pipeline retry"""
        if self.status != OrderStatus.FAILED:
            raise InvalidTransitionError(
                f"Order {self.id}: only failed orders can be restarted"
            )
        self.status = OrderStatus.QUEUED
        self.meta = OrderMeta()
        self.attempt += 1
        self.updated_at = datetime.now()
