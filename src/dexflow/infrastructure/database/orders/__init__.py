"""Order persistence"""

from .models import OrderTable
from .repository import OrderRepository

__all__ = ["OrderTable", "OrderRepository"]
