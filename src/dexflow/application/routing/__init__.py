"""Quote routing"""

from .router import RoutingEngine, select_quote

__all__ = ["RoutingEngine", "select_quote"]
