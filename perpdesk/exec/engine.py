"""
Simulated trading engine.

The engine is the single authority for order intake, validation, simulated
execution and position/trade bookkeeping. Prices and balances are supplied
by the caller on every call; the engine does no I/O and never refreshes
mark prices on its own.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
import pandas as pd

from .results import (
    ExecutionFailure,
    ExecutionSuccess,
    OrderExecutionResult,
    OrderValidationResult,
    RiskCheckResult
)
from ..config.config import EngineConfig
from ..core.clock import Clock, WallClock
from ..core.ids import IdGenerator
from ..market.fees import FeeModel, create_fee_model
from ..market.orders import Order, OrderSide, OrderStatus, OrderType, TimeInForce, Trade
from ..market.schema import OrderRequest
from ..market.slippage import SlippageModel, create_slippage_model
from ..risk.positions import Position, PositionBook
from ..utils.logger import get_logger

OrderInput = Union[OrderRequest, Mapping[str, Any]]


class TradingEngine:
    """
    In-memory order, position and trade ledger with simulated fills.

    Market orders fill in full at the current price moved against the taker
    by the slippage model. Limit orders fill in full at their limit price
    when marketable; otherwise GTC orders rest as ``pending`` until
    ``process_pending_orders`` finds them marketable or they are cancelled,
    and IOC/FOK orders are rejected.

    Mutations and queries hold one re-entrant lock, so each call's
    read-modify-write of the ledger is atomic and queries see a consistent
    snapshot.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Optional[Clock] = None,
        slippage_model: Optional[SlippageModel] = None,
        fee_model: Optional[FeeModel] = None
    ) -> None:
        """
        Initialize trading engine.

        Args:
            config: Engine configuration (defaults when None)
            clock: Timestamp source (wall clock when None)
            slippage_model: Overrides the model named in the configuration
            fee_model: Overrides the flat fee rate in the configuration
        """
        self.config = config or EngineConfig()
        self.clock = clock or WallClock()
        self.logger = get_logger(__name__)

        self.slippage_model = slippage_model or create_slippage_model(
            self.config.slippage_model,
            max_slippage=self.config.max_slippage,
            seed=self.config.seed
        )
        self.fee_model = fee_model or create_fee_model(self.config.fee_rate)

        self.ids = IdGenerator(self.clock, seed=self.config.seed)
        self.positions = PositionBook(self.ids)
        self._orders: Dict[str, Order] = {}
        self._trades: List[Trade] = []
        self._lock = threading.RLock()

    def validate_order(
        self,
        order: OrderRequest,
        user_balance: float,
        current_price: float
    ) -> OrderValidationResult:
        """
        Validate an order request. Pure check, no side effects.

        Notional checks (balance, minimum size, large order) apply only when
        the request carries a price. The balance check applies to buys only.

        Args:
            order: Order request
            user_balance: Caller's available balance
            current_price: Current market price for the symbol

        Returns:
            Validation result with blocking errors and advisory warnings
        """
        errors = []
        warnings = []

        # Required fields
        if not order.symbol:
            errors.append("Symbol is required")
        if order.side is None:
            errors.append("Order side is required")
        if not order.quantity or order.quantity <= 0:
            errors.append("Quantity must be greater than 0")
        if order.order_type is None:
            errors.append("Order type is required")

        if order.order_type == OrderType.LIMIT and (not order.price or order.price <= 0):
            errors.append("Price is required for limit orders")

        if order.order_type == OrderType.MARKET and not order.price and (not current_price or current_price <= 0):
            errors.append("Current market price is unavailable")

        notional = order.notional
        if notional is not None:
            if order.side == OrderSide.BUY and notional > user_balance:
                errors.append(
                    f"Insufficient balance. Required: ${notional:.2f}, Available: ${user_balance:.2f}"
                )

            if notional < self.config.min_order_value:
                errors.append(f"Order size must be at least ${self.config.min_order_value:g}")

            if notional > user_balance * self.config.large_order_fraction:
                warnings.append("Large order size. Consider splitting into smaller orders.")

        if order.order_type == OrderType.MARKET:
            warnings.append("Market orders execute at current market price and may have slippage")

        if order.order_type == OrderType.LIMIT and order.price and current_price:
            deviation = abs(order.price - current_price) / current_price
            if deviation > self.config.limit_deviation_warning:
                warnings.append(
                    f"Limit price deviates significantly from current market price ({deviation * 100:.1f}%)"
                )

        return OrderValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    def execute_order(
        self,
        order_data: OrderInput,
        user_balance: float,
        current_price: float
    ) -> OrderExecutionResult:
        """
        Validate, book and simulate execution of an order.

        Never raises: invalid requests and unexpected errors come back as
        ``ExecutionFailure``.

        Args:
            order_data: Order request or mapping of request fields
            user_balance: Caller's available balance
            current_price: Current market price for the symbol

        Returns:
            ExecutionSuccess or ExecutionFailure
        """
        with self._lock:
            order = None
            try:
                request = self._coerce_request(order_data)

                validation = self.validate_order(request, user_balance, current_price)
                if not validation.is_valid:
                    error = ", ".join(validation.errors)
                    self.logger.warning(f"Order for {request.symbol} failed validation: {error}")
                    return ExecutionFailure(error=error)

                order = Order(
                    order_id=self.ids.next_order_id(),
                    symbol=request.symbol,
                    side=request.side,
                    order_type=request.order_type,
                    quantity=request.quantity,
                    price=request.price or current_price,
                    timestamp=self.clock.now(),
                    leverage=request.effective_leverage,
                    stop_loss=request.stop_loss,
                    take_profit=request.take_profit,
                    time_in_force=request.effective_time_in_force
                )
                self._orders[order.order_id] = order
                self.logger.info(
                    f"Order {order.order_id} accepted: {order.side.value} {order.quantity} "
                    f"{order.symbol} {order.order_type.value} @ {order.price} ({order.leverage:g}x)"
                )

                if order.is_market():
                    result = self._execute_market_order(order, current_price)
                else:
                    result = self._execute_limit_order(order, current_price)

                if isinstance(result, ExecutionSuccess):
                    if result.executed_quantity > 0:
                        order.fill(result.executed_quantity, result.executed_price, self.clock.now())
                else:
                    order.reject(result.error)
                    self.logger.warning(f"Order {order.order_id} rejected: {result.error}")

                return result

            except Exception as e:
                self.logger.error(f"Error executing order: {e}")
                error = str(e) or "Unknown execution error"
                if order is None:
                    return ExecutionFailure(error=error)
                if order.is_pending():
                    order.reject(error)
                return ExecutionFailure(error=error, order_id=order.order_id)

    def _coerce_request(self, order_data: OrderInput) -> OrderRequest:
        if isinstance(order_data, OrderRequest):
            return order_data
        return OrderRequest(**order_data)

    def _execute_market_order(self, order: Order, current_price: float) -> OrderExecutionResult:
        """Fill a market order in full at the current price plus adverse slippage."""
        executed_price = self.slippage_model.execution_price(order.side, current_price)
        trade = self._book_fill(order, executed_price)

        return ExecutionSuccess(
            order_id=order.order_id,
            executed_quantity=order.quantity,
            executed_price=executed_price,
            trade=trade
        )

    def _execute_limit_order(self, order: Order, current_price: float) -> OrderExecutionResult:
        """Fill a marketable limit at its limit price, otherwise rest or reject it."""
        if not order.is_marketable(current_price):
            if order.time_in_force in (TimeInForce.IOC, TimeInForce.FOK):
                return ExecutionFailure(
                    error=f"Limit order not marketable ({order.time_in_force.value})",
                    order_id=order.order_id
                )
            self.logger.info(f"Order {order.order_id} resting at {order.price}")
            return ExecutionSuccess(order_id=order.order_id, executed_quantity=0)

        trade = self._book_fill(order, order.price)

        return ExecutionSuccess(
            order_id=order.order_id,
            executed_quantity=order.quantity,
            executed_price=order.price,
            trade=trade
        )

    def _book_fill(self, order: Order, price: float) -> Trade:
        """Record a full fill of an order and apply it to its position."""
        trade = Trade(
            trade_id=self.ids.next_trade_id(),
            order_id=order.order_id,
            symbol=order.symbol,
            side=order.side,
            quantity=order.quantity,
            price=price,
            timestamp=self.clock.now(),
            fee=self.fee_model.calculate_fee(order.quantity, price),
            leverage=order.leverage
        )
        self._trades.append(trade)
        self.positions.apply_trade(trade, stop_loss=order.stop_loss, take_profit=order.take_profit)

        self.logger.info(
            f"Filled {order.order_id}: {trade.side.value} {trade.quantity} {trade.symbol} "
            f"@ {trade.price:.6f} fee {trade.fee:.4f}"
        )
        return trade

    def process_pending_orders(self, symbol: str, current_price: float) -> List[ExecutionSuccess]:
        """
        Fill resting limit orders that have become marketable.

        Orders are matched oldest first, each in full at its limit price.

        Args:
            symbol: Symbol whose price moved
            current_price: Current market price for the symbol

        Returns:
            Execution results for the orders filled
        """
        filled = []
        with self._lock:
            resting = [
                order for order in self._orders.values()
                if order.symbol == symbol and order.is_pending() and order.is_limit()
            ]
            for order in sorted(resting, key=lambda o: o.timestamp):
                if not order.is_marketable(current_price):
                    continue
                trade = self._book_fill(order, order.price)
                order.fill(order.quantity, order.price, self.clock.now())
                filled.append(ExecutionSuccess(
                    order_id=order.order_id,
                    executed_quantity=order.quantity,
                    executed_price=order.price,
                    trade=trade
                ))
        return filled

    def cancel_order(self, order_id: str) -> bool:
        """
        Cancel a pending order.

        Args:
            order_id: ID of order to cancel

        Returns:
            True if order was cancelled, False if missing or not pending
        """
        with self._lock:
            order = self._orders.get(order_id)
            if order is None or not order.is_pending():
                return False

            order.cancel(self.clock.now())
            self.logger.info(f"Order {order_id} cancelled")
            return True

    def close_position(self, position_id: str, current_price: float) -> OrderExecutionResult:
        """
        Close a position in full with an opposite-side market order.

        The closing order is never blocked by the balance check.

        Args:
            position_id: ID of the position to close
            current_price: Current market price for the symbol

        Returns:
            Result of the closing market order
        """
        with self._lock:
            position = self.positions.get(position_id)
            if position is None:
                return ExecutionFailure(error="Position not found")
            if position.is_flat:
                return ExecutionFailure(error="Position already closed")

            closing_order = OrderRequest(
                symbol=position.symbol,
                side=OrderSide.SELL if position.is_long else OrderSide.BUY,
                order_type=OrderType.MARKET,
                quantity=abs(position.size),
                leverage=position.leverage
            )
            return self.execute_order(closing_order, float("inf"), current_price)

    def check_risk(
        self,
        order: OrderRequest,
        user_balance: float,
        current_positions: Sequence[Position]
    ) -> RiskCheckResult:
        """
        Pre-trade capacity check on margin and total exposure.

        Args:
            order: Order request with quantity and price
            user_balance: Caller's available balance
            current_positions: Positions counted towards total exposure

        Returns:
            Risk check result, with a suggested size when margin is short
        """
        if not order.quantity or not order.price:
            return RiskCheckResult(allowed=False, reason="Invalid order parameters")

        order_value = order.quantity * order.price
        leverage = order.effective_leverage
        margin = order_value / leverage
        max_margin = user_balance * self.config.max_margin_fraction

        if margin > max_margin:
            return RiskCheckResult(
                allowed=False,
                reason="Insufficient margin",
                suggested_max_size=(max_margin * leverage) / order.price
            )

        total_exposure = sum(abs(pos.size * pos.mark_price) for pos in current_positions)
        if total_exposure + order_value > user_balance * self.config.max_exposure_multiple:
            return RiskCheckResult(allowed=False, reason="Maximum exposure limit reached")

        return RiskCheckResult(allowed=True)

    def update_mark_prices(self, prices: Dict[str, float]) -> int:
        """
        Refresh mark price and unrealized PnL of open positions.

        Args:
            prices: Dictionary of symbol -> current price

        Returns:
            Number of positions updated
        """
        with self._lock:
            return self.positions.update_mark_prices(prices)

    def get_order(self, order_id: str) -> Optional[Order]:
        with self._lock:
            return self._orders.get(order_id)

    def get_orders(self, status: Optional[OrderStatus] = None) -> List[Order]:
        """Get orders in submission order, optionally filtered by status."""
        with self._lock:
            orders = list(self._orders.values())
        if status is not None:
            orders = [order for order in orders if order.status == status]
        return orders

    def get_position(self, position_id: str) -> Optional[Position]:
        with self._lock:
            return self.positions.get(position_id)

    def get_positions(self, include_closed: bool = False) -> List[Position]:
        """Get open positions, plus closed history when requested."""
        with self._lock:
            positions = self.positions.open_positions()
            if include_closed:
                positions = self.positions.closed_positions() + positions
        return positions

    def get_trades(self) -> List[Trade]:
        """Get trades most recent first."""
        with self._lock:
            trades = list(self._trades)
        return sorted(reversed(trades), key=lambda t: t.timestamp, reverse=True)

    def get_trade_blotter(self) -> pd.DataFrame:
        """Get trade blotter in execution order."""
        with self._lock:
            records = [trade.to_dict() for trade in self._trades]
        if not records:
            return pd.DataFrame()

        df = pd.DataFrame(records)
        df["datetime"] = pd.to_datetime(df["timestamp"], unit="ms", utc=True)
        df["notional"] = df["quantity"] * df["price"]
        df.set_index("datetime", inplace=True)
        return df

    def get_order_blotter(self) -> pd.DataFrame:
        """Get order blotter in submission order."""
        with self._lock:
            records = [order.to_dict() for order in self._orders.values()]
        if not records:
            return pd.DataFrame()

        df = pd.DataFrame(records)
        df["datetime"] = pd.to_datetime(df["timestamp"], unit="ms", utc=True)
        df.set_index("datetime", inplace=True)
        return df

    def reset(self) -> None:
        """Reset engine state."""
        with self._lock:
            self._orders.clear()
            self._trades.clear()
            self.positions.reset()
            self.ids.reset()
