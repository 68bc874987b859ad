"""Venue adapters for quoting and settlement"""

from .http_source import HttpQuoteSource
from .mock import MockQuoteSource, MockSwapExecutor
from .protocols import QuoteSource, SwapExecutor

__all__ = [
    "QuoteSource",
    "SwapExecutor",
    "MockQuoteSource",
    "MockSwapExecutor",
    "HttpQuoteSource",
]
