"""Shared utilities and exceptions"""

from .exceptions import (
    ConfigurationError,
    DexflowError,
    ExecutionError,
    InvalidTransitionError,
    PersistenceError,
    QuoteUnavailable,
    RoutingError,
    SettlementRevertedError,
    ValidationError,
)

__all__ = [
    "DexflowError",
    "ValidationError",
    "RoutingError",
    "QuoteUnavailable",
    "ExecutionError",
    "SettlementRevertedError",
    "InvalidTransitionError",
    "PersistenceError",
    "ConfigurationError",
]
