"""Persistence handler for order lifecycle changes"""

from loguru import logger

from dexflow.domain.models import Order
from dexflow.infrastructure.database.orders import OrderRepository


class OrderPersistenceHandler:
    """Writes order state to the repository without ever failing the caller

    Persistence errors are logged and counted; order progress continues.
    """

    def __init__(self, repository: OrderRepository | None):
        """Initialize persistence handler

        Args:
            repository: Order store, or None to run without persistence
        """
        self.repo = repository
        self.error_count = 0

    def record_status(self, order: Order) -> None:
        """Upsert the order's current status"""
        if self.repo is None:
            return
        try:
            self.repo.upsert_order(order)
        except Exception as e:
            self._report(e)

    def record_confirmed(self, order: Order) -> None:
        if self.repo is None:
            return
        try:
            self.repo.mark_confirmed(
                order.id,
                order.meta.settlement_ref or "",
                order.meta.executed_price or 0.0,
            )
        except Exception as e:
            self._report(e)

    def record_failed(self, order: Order) -> None:
        if self.repo is None:
            return
        try:
            self.repo.mark_failed(order.id, order.meta.error or "")
        except Exception as e:
            self._report(e)

    def _report(self, error: Exception) -> None:
        self.error_count += 1
        logger.error(f"Persistence failed: {error}")
