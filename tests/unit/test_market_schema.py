"""
Unit tests for the inbound order request schema.
"""

import pytest
from pydantic import ValidationError

from perpdesk.market.orders import OrderSide, OrderType, TimeInForce
from perpdesk.market.schema import OrderRequest


class TestOrderRequest:
    """Test OrderRequest model."""
    
    def test_parse_wire_fields(self):
        """Test enum strings and the 'type' alias are accepted."""
        request = OrderRequest(symbol="BTC", side="buy", type="limit", quantity=1, price=50000)
        
        assert request.side is OrderSide.BUY
        assert request.order_type is OrderType.LIMIT
        assert request.notional == 50000
    
    def test_populate_by_field_name(self):
        """Test order_type can be passed by field name."""
        request = OrderRequest(symbol="BTC", side=OrderSide.SELL, order_type=OrderType.MARKET, quantity=1)
        assert request.order_type is OrderType.MARKET
    
    def test_defaults(self):
        """Test effective leverage and time in force defaults."""
        request = OrderRequest(symbol="BTC")
        
        assert request.effective_leverage == 1.0
        assert request.effective_time_in_force is TimeInForce.GTC
        assert request.notional is None
    
    def test_missing_fields_allowed(self):
        """Test missing fields are left for engine validation."""
        request = OrderRequest()
        assert request.symbol is None
        assert request.quantity is None
    
    def test_symbol_stripped(self):
        """Test blank symbols become None."""
        assert OrderRequest(symbol="  ETH ").symbol == "ETH"
        assert OrderRequest(symbol="   ").symbol is None
    
    def test_unknown_side_rejected(self):
        """Test unknown enum values fail at construction."""
        with pytest.raises(ValidationError):
            OrderRequest(symbol="BTC", side="hold")
    
    def test_unknown_field_rejected(self):
        """Test extra keys are forbidden."""
        with pytest.raises(ValidationError):
            OrderRequest(symbol="BTC", reduce_only=True)
    
    def test_non_finite_rejected(self):
        """Test infinite and NaN numbers are refused."""
        with pytest.raises(ValidationError):
            OrderRequest(symbol="BTC", quantity=float("inf"))
        with pytest.raises(ValidationError):
            OrderRequest(symbol="BTC", price=float("nan"))
    
    def test_leverage_below_one_rejected(self):
        """Test leverage must be at least 1."""
        with pytest.raises(ValidationError):
            OrderRequest(symbol="BTC", leverage=0.5)
