"""
Unit tests for slippage models.
"""

import pytest

from perpdesk.market.orders import OrderSide
from perpdesk.market.slippage import (
    NoSlippageModel,
    FixedSlippageModel,
    UniformSlippageModel,
    create_slippage_model
)


class TestNoSlippageModel:
    """Test NoSlippageModel class."""
    
    def test_execution_price_unchanged(self):
        """Test price is passed through."""
        model = NoSlippageModel()
        assert model.execution_price(OrderSide.BUY, 100.0) == 100.0
        assert model.execution_price(OrderSide.SELL, 100.0) == 100.0


class TestFixedSlippageModel:
    """Test FixedSlippageModel class."""
    
    def test_adverse_direction(self):
        """Test buys pay up and sells receive less."""
        model = FixedSlippageModel(0.001)
        
        assert model.execution_price(OrderSide.BUY, 100.0) == pytest.approx(100.1)
        assert model.execution_price(OrderSide.SELL, 100.0) == pytest.approx(99.9)
    
    def test_calculate_slippage_signed(self):
        """Test signed slippage amount."""
        model = FixedSlippageModel(0.002)
        
        assert model.calculate_slippage(OrderSide.BUY, 50.0) == pytest.approx(0.1)
        assert model.calculate_slippage(OrderSide.SELL, 50.0) == pytest.approx(-0.1)
    
    def test_negative_rejected(self):
        """Test negative slippage is refused."""
        with pytest.raises(ValueError):
            FixedSlippageModel(-0.1)


class TestUniformSlippageModel:
    """Test UniformSlippageModel class."""
    
    def test_buy_bounds(self):
        """Test buy execution stays within [price, price * 1.001]."""
        model = UniformSlippageModel(0.001, seed=11)
        for _ in range(500):
            price = model.execution_price(OrderSide.BUY, 100.0)
            assert 100.0 <= price <= 100.1
    
    def test_sell_bounds(self):
        """Test sell execution stays within [price * 0.999, price]."""
        model = UniformSlippageModel(0.001, seed=11)
        for _ in range(500):
            price = model.execution_price(OrderSide.SELL, 100.0)
            assert 99.9 <= price <= 100.0
    
    def test_seed_reproducible(self):
        """Test identical seeds give identical draws."""
        first = UniformSlippageModel(0.001, seed=5)
        second = UniformSlippageModel(0.001, seed=5)
        
        assert [first.sample_fraction() for _ in range(10)] == [second.sample_fraction() for _ in range(10)]


class TestCreateSlippageModel:
    """Test slippage model factory."""
    
    def test_model_types(self):
        """Test each model type."""
        assert isinstance(create_slippage_model("uniform"), UniformSlippageModel)
        assert isinstance(create_slippage_model("fixed", 0.0005), FixedSlippageModel)
        assert isinstance(create_slippage_model("none"), NoSlippageModel)
    
    def test_unknown_type(self):
        """Test unknown model type raises."""
        with pytest.raises(ValueError, match="Unknown slippage model type"):
            create_slippage_model("gaussian")
