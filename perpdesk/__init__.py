"""
perpdesk: Simulated perpetual futures trading desk

An in-memory trading engine for leveraged perpetual contracts with
simulated fills, position accounting and a pre-trade risk manager.
"""

__version__ = "0.1.0"
__author__ = "perpdesk Team"

from .exec.engine import TradingEngine
from .risk.manager import RiskManager
from .risk.limits import RiskLimits
from .market.schema import OrderRequest
from .core.clock import ManualClock

__all__ = [
    "TradingEngine",
    "RiskManager",
    "RiskLimits",
    "OrderRequest",
    "ManualClock",
]
