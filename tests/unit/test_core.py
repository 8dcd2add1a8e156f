"""
Unit tests for clocks and identifier generation.
"""

import re

import pandas as pd
import pytest

from perpdesk.core.clock import ManualClock, WallClock
from perpdesk.core.ids import IdGenerator


class TestManualClock:
    """Test ManualClock class."""
    
    def test_start_time(self):
        """Test clock starts at the given timestamp."""
        clock = ManualClock(start_time=1000)
        assert clock.now() == 1000
    
    def test_advance(self):
        """Test advancing by a duration."""
        clock = ManualClock(start_time=1000)
        clock.advance(250)
        assert clock.now() == 1250
    
    def test_advance_negative_raises(self):
        """Test negative durations are refused."""
        clock = ManualClock(start_time=1000)
        with pytest.raises(ValueError, match="negative duration"):
            clock.advance(-1)
    
    def test_advance_to(self):
        """Test advancing to an absolute timestamp."""
        clock = ManualClock(start_time=1000)
        clock.advance_to(5000)
        assert clock.now() == 5000
        
        with pytest.raises(ValueError, match="past timestamp"):
            clock.advance_to(4000)
    
    def test_now_pd(self):
        """Test conversion to a UTC pandas Timestamp."""
        clock = ManualClock(start_time=1_700_000_000_000)
        ts = clock.now_pd()
        assert ts == pd.Timestamp("2023-11-14 22:13:20", tz="UTC")


class TestWallClock:
    """Test WallClock class."""
    
    def test_now_is_milliseconds(self):
        """Test wall clock returns epoch milliseconds."""
        now = WallClock().now()
        # Between 2020 and 2100 in milliseconds
        assert 1_577_836_800_000 < now < 4_102_444_800_000


class TestIdGenerator:
    """Test IdGenerator class."""
    
    def test_order_ids_unique_within_millisecond(self):
        """Test counter keeps ids unique when the clock does not move."""
        ids = IdGenerator(ManualClock(start_time=42))
        first = ids.next_order_id()
        second = ids.next_order_id()
        
        assert first == "order-42-1"
        assert second == "order-42-2"
    
    def test_position_ids(self):
        """Test position id format."""
        ids = IdGenerator(ManualClock(start_time=42))
        assert ids.next_position_id() == "pos-42-1"
    
    def test_trade_id_format(self):
        """Test trade ids carry nine base36 characters."""
        ids = IdGenerator(ManualClock(start_time=42), seed=1)
        trade_id = ids.next_trade_id()
        assert re.fullmatch(r"trade-42-[0-9a-z]{9}", trade_id)
    
    def test_trade_ids_reproducible_with_seed(self):
        """Test seeded generators produce the same trade ids."""
        first = IdGenerator(ManualClock(start_time=42), seed=3)
        second = IdGenerator(ManualClock(start_time=42), seed=3)
        assert first.next_trade_id() == second.next_trade_id()
    
    def test_reset(self):
        """Test reset restarts counters."""
        ids = IdGenerator(ManualClock(start_time=42))
        ids.next_order_id()
        ids.next_position_id()
        ids.reset()
        
        assert ids.next_order_id() == "order-42-1"
        assert ids.next_position_id() == "pos-42-1"
