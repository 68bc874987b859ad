"""Order execution pipeline"""

from .execution import ExecutionPipeline

__all__ = ["ExecutionPipeline"]
