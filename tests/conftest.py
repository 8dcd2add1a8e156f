"""Pytest configuration and fixtures."""

import pytest

from perpdesk.config import EngineConfig
from perpdesk.core.clock import ManualClock
from perpdesk.exec.engine import TradingEngine
from perpdesk.market.slippage import NoSlippageModel
from perpdesk.risk.limits import RiskLimits
from perpdesk.risk.manager import RiskManager
from perpdesk.risk.positions import Position

START_TIME = 1_700_000_000_000


@pytest.fixture
def clock():
    """Manual clock fixed at a known millisecond timestamp."""
    return ManualClock(start_time=START_TIME)


@pytest.fixture
def engine(clock):
    """Engine that fills market orders exactly at the reference price."""
    return TradingEngine(clock=clock, slippage_model=NoSlippageModel())


@pytest.fixture
def seeded_engine(clock):
    """Engine with uniform slippage from a fixed seed."""
    return TradingEngine(EngineConfig(seed=7), clock=clock)


@pytest.fixture
def risk_manager():
    """Risk manager with default limits."""
    return RiskManager(RiskLimits())


def make_position(
    symbol="BTC",
    size=1.0,
    entry_price=50000.0,
    mark_price=None,
    leverage=2.0,
    margin=None,
    unrealized_pnl=0.0,
    realized_pnl=0.0,
    position_id="pos-1",
):
    """Build a position snapshot for risk tests."""
    if mark_price is None:
        mark_price = entry_price
    if margin is None:
        margin = abs(size) * entry_price / leverage
    return Position(
        position_id=position_id,
        symbol=symbol,
        leverage=leverage,
        size=size,
        entry_price=entry_price,
        mark_price=mark_price,
        margin=margin,
        timestamp=START_TIME,
        realized_pnl=realized_pnl,
        unrealized_pnl=unrealized_pnl,
    )


@pytest.fixture
def sample_positions():
    """Two open positions, one winning and one losing."""
    return [
        make_position(symbol="BTC", size=1.0, entry_price=50000.0, mark_price=51000.0,
                      leverage=2.0, unrealized_pnl=2000.0, position_id="pos-1"),
        make_position(symbol="ETH", size=-10.0, entry_price=3000.0, mark_price=3100.0,
                      leverage=5.0, unrealized_pnl=-5000.0, position_id="pos-2"),
    ]


@pytest.fixture
def position_factory():
    """Factory for position snapshots."""
    return make_position
