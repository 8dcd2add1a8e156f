"""Core components shared by the trading engine and risk manager."""

from .clock import Clock, WallClock, ManualClock
from .ids import IdGenerator

__all__ = [
    "Clock",
    "WallClock",
    "ManualClock",
    "IdGenerator",
]
