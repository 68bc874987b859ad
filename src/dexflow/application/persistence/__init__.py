"""Order persistence boundary"""

from .handler import OrderPersistenceHandler

__all__ = ["OrderPersistenceHandler"]
