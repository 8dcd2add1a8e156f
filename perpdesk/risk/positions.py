"""
Position accounting for leveraged perpetual positions.

A position is the net exposure in one symbol at one leverage tier: the same
symbol traded at two leverages forms two independent positions. Same-side
fills grow the position at a volume-weighted entry price; opposite-side
fills realize P&L on the closed portion and shrink it. A position that
reaches zero size is closed and moved to history; a later fill on the same
key opens a fresh position.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..core.ids import IdGenerator
from ..market.orders import OrderSide, Trade
from ..utils.logger import get_logger

# Residual sizes below this are treated as flat
SIZE_EPSILON = 1e-9

PositionKey = Tuple[str, float]


class PositionSide(Enum):
    """Direction of a position, derived from the sign of its size."""
    LONG = "long"
    SHORT = "short"
    FLAT = "flat"


@dataclass
class Position:
    """Net exposure in a single (symbol, leverage) pair."""
    position_id: str
    symbol: str
    leverage: float
    size: float  # positive = net long, negative = net short
    entry_price: float
    mark_price: float
    margin: float
    timestamp: int  # creation time, milliseconds since epoch
    realized_pnl: float = 0.0
    unrealized_pnl: float = 0.0
    total_fees: float = 0.0
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    closed_at: Optional[int] = None
    
    @property
    def key(self) -> PositionKey:
        return (self.symbol, self.leverage)
    
    @property
    def side(self) -> PositionSide:
        if self.size > 0:
            return PositionSide.LONG
        if self.size < 0:
            return PositionSide.SHORT
        return PositionSide.FLAT
    
    @property
    def is_flat(self) -> bool:
        """Check if position is flat (zero size)."""
        return self.size == 0
    
    @property
    def is_long(self) -> bool:
        return self.size > 0
    
    @property
    def is_short(self) -> bool:
        return self.size < 0
    
    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None
    
    @property
    def pnl(self) -> float:
        """Mark-to-market P&L, same as ``unrealized_pnl``."""
        return self.unrealized_pnl
    
    @property
    def pnl_percent(self) -> float:
        """Unrealized P&L as a percentage of margin."""
        if self.margin <= 0:
            return 0.0
        return self.unrealized_pnl / self.margin * 100
    
    @property
    def net_realized_pnl(self) -> float:
        """Realized P&L after fees."""
        return self.realized_pnl - self.total_fees
    
    @property
    def exposure(self) -> float:
        """Absolute notional at the mark price."""
        return abs(self.size * self.mark_price)
    
    def calculate_unrealized_pnl(self) -> float:
        """Calculate leverage-scaled unrealized PnL at the current mark price."""
        if self.size == 0:
            return 0.0
        return (self.mark_price - self.entry_price) * self.size * self.leverage
    
    def update_mark_price(self, price: float) -> None:
        """Set the mark price and refresh unrealized PnL."""
        self.mark_price = price
        self.unrealized_pnl = self.calculate_unrealized_pnl()
    
    def apply_trade(self, trade: Trade) -> float:
        """
        Book a trade against this position.
        
        Args:
            trade: Trade in this position's symbol and leverage
            
        Returns:
            PnL realized by this trade
        """
        if (trade.symbol, float(trade.leverage)) != self.key:
            raise ValueError(
                f"Trade {trade.trade_id} ({trade.symbol} {trade.leverage}x) "
                f"does not belong to position {self.position_id}"
            )
        if self.is_closed:
            raise ValueError(f"Position {self.position_id} is closed")
        
        current_size = self.size
        trade_size = trade.signed_quantity
        new_size = current_size + trade_size
        realized = 0.0
        
        if current_size == 0 or (current_size > 0) == (trade_size > 0):
            # Same direction or opening
            total_value = abs(current_size) * self.entry_price + trade.quantity * trade.price
            total_quantity = abs(current_size) + trade.quantity
            self.entry_price = total_value / total_quantity
            self.size = new_size
            self.margin += trade.notional / self.leverage
        else:
            # Opposite direction, closing or reducing
            closing_quantity = min(abs(current_size), trade.quantity)
            if trade.side == OrderSide.BUY:
                pnl_per_unit = self.entry_price - trade.price
            else:
                pnl_per_unit = trade.price - self.entry_price
            realized = pnl_per_unit * closing_quantity * self.leverage
            self.realized_pnl += realized
            
            if abs(new_size) < SIZE_EPSILON:
                self.size = 0.0
                self.margin = 0.0
            elif (new_size > 0) == (current_size > 0):
                # Reduced, entry price unchanged
                self.size = new_size
                self.margin = abs(new_size) * self.entry_price / self.leverage
            else:
                # Flipped, the remainder opens at the fill price
                self.size = new_size
                self.entry_price = trade.price
                self.margin = abs(new_size) * trade.price / self.leverage
        
        # The fill is the latest observed price
        self.mark_price = trade.price
        self.total_fees += trade.fee
        self.unrealized_pnl = self.calculate_unrealized_pnl()
        return realized
    
    def to_dict(self) -> dict:
        """Convert position to dictionary."""
        return {
            "position_id": self.position_id,
            "symbol": self.symbol,
            "side": self.side.value,
            "size": self.size,
            "entry_price": self.entry_price,
            "mark_price": self.mark_price,
            "margin": self.margin,
            "leverage": self.leverage,
            "realized_pnl": self.realized_pnl,
            "unrealized_pnl": self.unrealized_pnl,
            "pnl": self.pnl,
            "pnl_percent": self.pnl_percent,
            "total_fees": self.total_fees,
            "timestamp": self.timestamp,
            "stop_loss": self.stop_loss,
            "take_profit": self.take_profit,
            "closed_at": self.closed_at,
        }


class PositionBook:
    """
    Ledger of open and closed positions.
    
    Open positions are keyed by ``(symbol, leverage)`` and always carry
    non-zero size. Positions that reach zero are kept in closing order in
    the closed history.
    """
    
    def __init__(self, id_generator: IdGenerator):
        self.ids = id_generator
        self.logger = get_logger(__name__)
        self._open: Dict[PositionKey, Position] = {}
        self._closed: List[Position] = []
    
    def apply_trade(
        self,
        trade: Trade,
        stop_loss: Optional[float] = None,
        take_profit: Optional[float] = None
    ) -> Position:
        """
        Update or create the position a trade belongs to.
        
        Args:
            trade: Executed trade
            stop_loss: Stop loss carried onto a newly opened position
            take_profit: Take profit carried onto a newly opened position
            
        Returns:
            The position after the trade
        """
        key = (trade.symbol, float(trade.leverage))
        position = self._open.get(key)
        
        if position is None:
            position = Position(
                position_id=self.ids.next_position_id(),
                symbol=trade.symbol,
                leverage=float(trade.leverage),
                size=float(trade.signed_quantity),
                entry_price=trade.price,
                mark_price=trade.price,
                margin=trade.notional / trade.leverage,
                timestamp=trade.timestamp,
                total_fees=trade.fee,
                stop_loss=stop_loss,
                take_profit=take_profit
            )
            self._open[key] = position
            self.logger.debug(f"Opened position {position.position_id} {trade.symbol} {trade.leverage}x")
            return position
        
        realized = position.apply_trade(trade)
        if realized:
            self.logger.debug(f"Position {position.position_id} realized {realized:.2f}")
        
        if position.is_flat:
            position.unrealized_pnl = 0.0
            position.closed_at = trade.timestamp
            del self._open[key]
            self._closed.append(position)
            self.logger.info(
                f"Closed position {position.position_id} {position.symbol} "
                f"realized PnL {position.realized_pnl:.2f}"
            )
        
        return position
    
    def get(self, position_id: str) -> Optional[Position]:
        """Find an open or closed position by id."""
        for position in self._open.values():
            if position.position_id == position_id:
                return position
        for position in self._closed:
            if position.position_id == position_id:
                return position
        return None
    
    def get_open(self, symbol: str, leverage: float = 1.0) -> Optional[Position]:
        """Get the open position for a (symbol, leverage) key."""
        return self._open.get((symbol, float(leverage)))
    
    def open_positions(self) -> List[Position]:
        return list(self._open.values())
    
    def closed_positions(self) -> List[Position]:
        return list(self._closed)
    
    def update_mark_prices(self, prices: Dict[str, float]) -> int:
        """
        Refresh mark prices for open positions.
        
        Args:
            prices: Dictionary of symbol -> current price
            
        Returns:
            Number of positions updated
        """
        updated = 0
        for position in self._open.values():
            if position.symbol in prices:
                position.update_mark_price(prices[position.symbol])
                updated += 1
        return updated
    
    def reset(self) -> None:
        self._open.clear()
        self._closed.clear()
