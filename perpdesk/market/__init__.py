"""Market data model, execution costs and inbound order schema."""

from .orders import Order, Trade, OrderSide, OrderType, OrderStatus, TimeInForce
from .schema import OrderRequest
from .fees import FeeModel, FlatRateFeeModel, create_fee_model
from .slippage import (
    SlippageModel,
    NoSlippageModel,
    FixedSlippageModel,
    UniformSlippageModel,
    create_slippage_model
)

__all__ = [
    "Order",
    "Trade",
    "OrderSide",
    "OrderType",
    "OrderStatus",
    "TimeInForce",
    "OrderRequest",
    "FeeModel",
    "FlatRateFeeModel",
    "create_fee_model",
    # Slippage
    "SlippageModel", "NoSlippageModel", "FixedSlippageModel", "UniformSlippageModel",
    "create_slippage_model",
]
