"""Millisecond clocks used to stamp orders, trades and positions."""

from abc import ABC, abstractmethod
from typing import Optional
import pandas as pd


class Clock(ABC):
    """Source of epoch timestamps in milliseconds."""
    
    @abstractmethod
    def now(self) -> int:
        """Get current time in milliseconds since epoch."""
        pass
    
    def now_pd(self) -> pd.Timestamp:
        """
        Get current time as pandas Timestamp.
        
        Returns:
            Current timestamp as UTC pandas Timestamp
        """
        return pd.Timestamp(self.now(), unit='ms', tz='UTC')


class WallClock(Clock):
    """Clock backed by the system time."""
    
    def now(self) -> int:
        return pd.Timestamp.now(tz='UTC').value // 1_000_000


class ManualClock(Clock):
    """Clock that only moves when told to."""
    
    def __init__(self, start_time: Optional[int] = None):
        """
        Initialize manual clock.
        
        Args:
            start_time: Initial timestamp in milliseconds (default: current time)
        """
        self._current_time = start_time if start_time is not None else WallClock().now()
    
    def now(self) -> int:
        return self._current_time
    
    def advance(self, duration_ms: int) -> None:
        """
        Advance clock by specified duration.
        
        Args:
            duration_ms: Duration to advance in milliseconds
        """
        if duration_ms < 0:
            raise ValueError(f"Cannot advance by negative duration: {duration_ms}")
        self._current_time += duration_ms
    
    def advance_to(self, timestamp: int) -> None:
        """
        Advance clock to specific timestamp.
        
        Args:
            timestamp: Target timestamp in milliseconds
        """
        if timestamp < self._current_time:
            raise ValueError(f"Cannot advance to past timestamp: {timestamp} < {self._current_time}")
        self._current_time = timestamp
