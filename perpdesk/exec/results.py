"""Result types returned by the trading engine."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..market.orders import Trade


@dataclass(frozen=True)
class OrderValidationResult:
    """Outcome of order validation. Errors block execution, warnings do not."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExecutionSuccess:
    """
    Order accepted by the engine.
    
    A resting limit order is a success with ``executed_quantity == 0``,
    no ``executed_price`` and no trade.
    """
    order_id: str
    executed_quantity: float
    executed_price: Optional[float] = None
    trade: Optional[Trade] = None
    
    @property
    def success(self) -> bool:
        return True
    
    @property
    def is_resting(self) -> bool:
        return self.executed_quantity == 0
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "order_id": self.order_id,
            "executed_price": self.executed_price,
            "executed_quantity": self.executed_quantity,
            "trade": self.trade.to_dict() if self.trade else None,
        }


@dataclass(frozen=True)
class ExecutionFailure:
    """Order not executed. ``order_id`` is set only if the order was booked."""
    error: str
    order_id: Optional[str] = None
    
    @property
    def success(self) -> bool:
        return False
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "order_id": self.order_id,
            "error": self.error,
        }


OrderExecutionResult = Union[ExecutionSuccess, ExecutionFailure]


@dataclass(frozen=True)
class RiskCheckResult:
    """Outcome of the engine's pre-trade capacity check."""
    allowed: bool
    reason: Optional[str] = None
    suggested_max_size: Optional[float] = None
