"""Order and trade dataclasses for the simulated perpetuals desk."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OrderSide(Enum):
    """Order side enumeration."""
    BUY = "buy"
    SELL = "sell"
    
    @property
    def opposite(self) -> 'OrderSide':
        return OrderSide.SELL if self is OrderSide.BUY else OrderSide.BUY
    
    @property
    def sign(self) -> int:
        """+1 for buys, -1 for sells."""
        return 1 if self is OrderSide.BUY else -1


class OrderType(Enum):
    """Order type enumeration."""
    MARKET = "market"
    LIMIT = "limit"


class OrderStatus(Enum):
    """Order status enumeration."""
    PENDING = "pending"
    FILLED = "filled"
    PARTIAL = "partial"  # reserved, never produced by the engine
    CANCELLED = "cancelled"
    REJECTED = "rejected"


class TimeInForce(Enum):
    """Time in force enumeration."""
    GTC = "GTC"      # Good till cancelled
    IOC = "IOC"      # Immediate or Cancel
    FOK = "FOK"      # Fill or Kill


TERMINAL_STATUSES = (OrderStatus.FILLED, OrderStatus.CANCELLED, OrderStatus.REJECTED)


@dataclass
class Order:
    """Order booked by the trading engine."""
    order_id: str
    symbol: str
    side: OrderSide
    order_type: OrderType
    quantity: float
    price: float
    timestamp: int  # milliseconds since epoch
    status: OrderStatus = OrderStatus.PENDING
    leverage: float = 1.0
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    time_in_force: TimeInForce = TimeInForce.GTC
    filled_quantity: Optional[float] = None
    average_price: Optional[float] = None
    filled_at: Optional[int] = None
    cancelled_at: Optional[int] = None
    rejected_reason: Optional[str] = None
    
    def is_buy(self) -> bool:
        """Check if order is a buy order."""
        return self.side == OrderSide.BUY
    
    def is_sell(self) -> bool:
        """Check if order is a sell order."""
        return self.side == OrderSide.SELL
    
    def is_limit(self) -> bool:
        """Check if order is a limit order."""
        return self.order_type == OrderType.LIMIT
    
    def is_market(self) -> bool:
        """Check if order is a market order."""
        return self.order_type == OrderType.MARKET
    
    def is_pending(self) -> bool:
        return self.status == OrderStatus.PENDING
    
    def is_filled(self) -> bool:
        return self.status == OrderStatus.FILLED
    
    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED
    
    def is_rejected(self) -> bool:
        return self.status == OrderStatus.REJECTED
    
    @property
    def notional(self) -> float:
        """Order value at its reference price."""
        return self.quantity * self.price
    
    def is_marketable(self, current_price: float) -> bool:
        """Check if a limit at this order's price would execute now."""
        if self.is_buy():
            return self.price >= current_price
        return self.price <= current_price
    
    def fill(self, quantity: float, price: float, timestamp: int) -> None:
        """Mark the order filled in full."""
        if self.status in TERMINAL_STATUSES:
            raise ValueError(f"Cannot fill order with status {self.status.value}")
        
        self.status = OrderStatus.FILLED
        self.filled_quantity = quantity
        self.average_price = price
        self.filled_at = timestamp
    
    def cancel(self, timestamp: int) -> None:
        """Cancel the order."""
        if not self.is_pending():
            raise ValueError(f"Cannot cancel order with status {self.status.value}")
        
        self.status = OrderStatus.CANCELLED
        self.cancelled_at = timestamp
    
    def reject(self, reason: str = "Unknown") -> None:
        """Reject the order."""
        if self.status in TERMINAL_STATUSES:
            raise ValueError(f"Cannot reject order with status {self.status.value}")
        
        self.status = OrderStatus.REJECTED
        self.rejected_reason = reason
    
    def to_dict(self) -> dict:
        """Convert order to dictionary."""
        return {
            "order_id": self.order_id,
            "symbol": self.symbol,
            "side": self.side.value,
            "type": self.order_type.value,
            "quantity": self.quantity,
            "price": self.price,
            "status": self.status.value,
            "timestamp": self.timestamp,
            "leverage": self.leverage,
            "stop_loss": self.stop_loss,
            "take_profit": self.take_profit,
            "time_in_force": self.time_in_force.value,
            "filled_quantity": self.filled_quantity,
            "average_price": self.average_price,
            "filled_at": self.filled_at,
            "cancelled_at": self.cancelled_at,
            "rejected_reason": self.rejected_reason,
        }


@dataclass(frozen=True)
class Trade:
    """Immutable execution record."""
    trade_id: str
    order_id: str
    symbol: str
    side: OrderSide
    quantity: float
    price: float
    timestamp: int  # milliseconds since epoch
    fee: float
    leverage: float = 1.0
    
    @property
    def notional(self) -> float:
        """Get the notional value of the trade."""
        return self.quantity * self.price
    
    @property
    def signed_quantity(self) -> float:
        """Quantity signed by side, positive for buys."""
        return self.side.sign * self.quantity
    
    def to_dict(self) -> dict:
        """Convert trade to dictionary."""
        return {
            "trade_id": self.trade_id,
            "order_id": self.order_id,
            "symbol": self.symbol,
            "side": self.side.value,
            "quantity": self.quantity,
            "price": self.price,
            "timestamp": self.timestamp,
            "fee": self.fee,
            "leverage": self.leverage,
        }
