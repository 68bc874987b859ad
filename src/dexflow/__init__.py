"""dexflow - asynchronous swap order execution pipeline"""

__version__ = "0.1.0"
