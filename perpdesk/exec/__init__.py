"""Trading engine and execution result types."""

from .engine import TradingEngine
from .results import (
    OrderValidationResult,
    ExecutionSuccess,
    ExecutionFailure,
    OrderExecutionResult,
    RiskCheckResult
)

__all__ = [
    "TradingEngine",
    "OrderValidationResult",
    "ExecutionSuccess",
    "ExecutionFailure",
    "OrderExecutionResult",
    "RiskCheckResult",
]
