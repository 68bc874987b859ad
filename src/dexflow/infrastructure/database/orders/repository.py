"""Order repository using SQLModel.

Inherits from BaseDatabase for common connection logic.
"""

from datetime import datetime

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select

from dexflow.domain.models import Order, OrderStatus
from dexflow.infrastructure.database.base import BaseDatabase
from dexflow.infrastructure.database.orders.mappers import (
    map_order_to_table,
    map_table_to_order,
)
from dexflow.infrastructure.database.orders.models import OrderTable
from dexflow.shared.exceptions import PersistenceError


class OrderRepository(BaseDatabase):
    """SQLite order store keyed by order id"""

    def upsert_order(self, order: Order) -> None:
        """Insert the order or update its status

        Idempotent: repeated calls with the same order leave one row.

        Raises:
            PersistenceError: If the write fails
        """
        try:
            with self.get_session() as session:
                row = session.get(OrderTable, order.id)
                if row is None:
                    session.add(map_order_to_table(order))
                else:
                    row.status = order.status.value
                    row.attempt = order.attempt
                    row.updated_at = order.updated_at.isoformat()
                    session.add(row)
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to upsert order {order.id}: {e}") from e

    def mark_confirmed(
        self, order_id: str, settlement_ref: str, executed_price: float
    ) -> None:
        """Record a successful settlement

        Raises:
            PersistenceError: If the order is unknown or the write fails
        """
        self._update_terminal(
            order_id,
            status=OrderStatus.CONFIRMED,
            settlement_ref=settlement_ref,
            executed_price=executed_price,
        )

    def mark_failed(self, order_id: str, reason: str) -> None:
        """Record a failure reason

        Raises:
            PersistenceError: If the order is unknown or the write fails
        """
        self._update_terminal(order_id, status=OrderStatus.FAILED, last_error=reason)

    def _update_terminal(self, order_id: str, status: OrderStatus, **fields) -> None:
        try:
            with self.get_session() as session:
                row = session.get(OrderTable, order_id)
                if row is None:
                    raise PersistenceError(f"Order not found: {order_id}")
                row.status = status.value
                for name, value in fields.items():
                    setattr(row, name, value)
                row.updated_at = datetime.now().isoformat()
                session.add(row)
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to mark order {order_id} {status.value}: {e}"
            ) from e
        logger.debug(f"Order {order_id} marked {status.value}")

    def get_order(self, order_id: str) -> Order | None:
        """Get order by ID

        Returns:
            Order or None if not found
        """
        try:
            with self.get_session() as session:
                row = session.get(OrderTable, order_id)
                return map_table_to_order(row) if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load order {order_id}: {e}") from e

    def list_orders(self, status: OrderStatus | None = None) -> list[Order]:
        """List orders, newest first, optionally filtered by status"""
        try:
            with self.get_session() as session:
                stmt = select(OrderTable)
                if status is not None:
                    stmt = stmt.where(OrderTable.status == status.value)
                stmt = stmt.order_by(col(OrderTable.created_at).desc())
                return [map_table_to_order(row) for row in session.exec(stmt).all()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list orders: {e}") from e
