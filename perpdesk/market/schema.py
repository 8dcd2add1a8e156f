"""Pydantic schema for inbound order requests."""

from typing import Optional
from pydantic import BaseModel, Field, field_validator
import numpy as np

from .orders import OrderSide, OrderType, TimeInForce


class OrderRequest(BaseModel):
    """
    Order intent as submitted by a caller.
    
    Every business field is optional: missing or non-positive values are
    reported by the engine's validation as errors rather than rejected here.
    Only malformed values (unknown enum members, non-finite numbers, unknown
    keys) fail at construction.
    """
    
    symbol: Optional[str] = Field(None, description="Trading symbol, e.g. BTC-PERP")
    side: Optional[OrderSide] = Field(None, description="'buy' or 'sell'")
    order_type: Optional[OrderType] = Field(None, alias="type", description="'market' or 'limit'")
    quantity: Optional[float] = Field(None, description="Order quantity in base units")
    price: Optional[float] = Field(None, description="Limit price; market orders default to the current price")
    leverage: Optional[float] = Field(None, ge=1, description="Leverage multiplier, default 1")
    stop_loss: Optional[float] = Field(None, description="Optional stop loss price")
    take_profit: Optional[float] = Field(None, description="Optional take profit price")
    time_in_force: Optional[TimeInForce] = Field(None, description="Default GTC")
    
    @field_validator('quantity', 'price', 'leverage', 'stop_loss', 'take_profit')
    @classmethod
    def validate_finite(cls, v):
        """Validate numbers are finite."""
        if v is not None and not np.isfinite(v):
            raise ValueError("Value must be finite")
        return v
    
    @field_validator('symbol')
    @classmethod
    def strip_symbol(cls, v):
        if v is not None:
            v = v.strip()
        return v or None
    
    model_config = {"validate_assignment": True, "extra": "forbid", "populate_by_name": True}
    
    @property
    def effective_leverage(self) -> float:
        return self.leverage or 1.0
    
    @property
    def effective_time_in_force(self) -> TimeInForce:
        return self.time_in_force or TimeInForce.GTC
    
    @property
    def notional(self) -> Optional[float]:
        """Quantity times price, when both are present."""
        if self.quantity and self.price:
            return self.quantity * self.price
        return None
