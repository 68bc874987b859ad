"""Mappers for converting between domain and persistence models"""

from datetime import datetime

from dexflow.domain.models import Order, OrderMeta, OrderSide, OrderStatus
from dexflow.infrastructure.database.orders.models import OrderTable


def map_order_to_table(order: Order) -> OrderTable:
    """Map domain Order to database table

    Args:
        order: Domain Order

    Returns:
        OrderTable row (quotes are not persisted)
    """
    return OrderTable(
        id=order.id,
        side=order.side.value,
        token_in=order.token_in,
        token_out=order.token_out,
        amount=order.amount,
        slippage=order.slippage,
        status=order.status.value,
        attempt=order.attempt,
        last_error=order.meta.error,
        settlement_ref=order.meta.settlement_ref,
        executed_price=order.meta.executed_price,
        updated_at=order.updated_at.isoformat(),
    )


def map_table_to_order(table: OrderTable) -> Order:
    """Map database table to domain Order

    Args:
        table: Order database table

    Returns:
        Domain Order carrying the persisted terminal metadata
    """
    return Order(
        id=table.id,
        side=OrderSide(table.side),
        token_in=table.token_in,
        token_out=table.token_out,
        amount=table.amount,
        slippage=table.slippage,
        status=OrderStatus(table.status),
        updated_at=datetime.fromisoformat(table.updated_at),
        attempt=table.attempt,
        meta=OrderMeta(
            settlement_ref=table.settlement_ref,
            executed_price=table.executed_price,
            error=table.last_error,
        ),
    )
