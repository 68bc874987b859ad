"""Validation models for order submission"""

from .orders import OrderRequest, validate_order_request

__all__ = ["OrderRequest", "validate_order_request"]
