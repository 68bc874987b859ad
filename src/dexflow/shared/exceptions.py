"""Consolidated exceptions for the dexflow order pipeline.

All custom exceptions are defined here to provide a single source of truth
for error handling across the application.
"""


class DexflowError(Exception):
    """Base exception for dexflow errors"""

    pass


class ValidationError(DexflowError):
    """Raised when an order payload is rejected before enqueue"""

    pass


class RoutingError(DexflowError):
    """Base routing error"""

    pass


class QuoteUnavailable(RoutingError):
    """Raised when a venue cannot produce a quote"""

    pass


class ExecutionError(DexflowError):
    """Base execution error"""

    pass


class SettlementRevertedError(ExecutionError):
    """Raised when the swap settlement reverts"""

    pass


class InvalidTransitionError(DexflowError):
    """Raised when an order status change would move backwards"""

    pass


class PersistenceError(DexflowError):
    """Raised when the order store cannot be read or written"""

    pass


class ConfigurationError(DexflowError):
    """Raised when configuration is invalid or missing"""

    pass
