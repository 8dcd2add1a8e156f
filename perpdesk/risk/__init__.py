"""
Risk management package.

This package provides position accounting, risk limits, and the risk
manager that scores account snapshots.
"""

from .positions import Position, PositionBook, PositionSide
from .limits import RiskLimits
from .manager import (
    RiskManager,
    RiskMetrics,
    OrderRiskDecision,
    Recommendation,
    LiquidationRisk,
    Urgency
)

__all__ = [
    "Position",
    "PositionBook",
    "PositionSide",
    "RiskLimits",
    "RiskManager",
    "RiskMetrics",
    "OrderRiskDecision",
    "Recommendation",
    "LiquidationRisk",
    "Urgency",
]
