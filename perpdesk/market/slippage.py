"""
Slippage modeling for simulated order execution.

Slippage is always adverse to the taker: buys execute at or above the
reference price, sells at or below it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
import numpy as np

from .orders import OrderSide


class SlippageModel(ABC):
    """Abstract base class for slippage models."""
    
    @abstractmethod
    def sample_fraction(self) -> float:
        """Draw the slippage fraction for one execution (0.001 = 0.1%)."""
        pass
    
    def calculate_slippage(self, order_side: OrderSide, price: float) -> float:
        """
        Calculate signed slippage for an order.
        
        Args:
            order_side: Side of the order (BUY/SELL)
            price: Reference price
            
        Returns:
            Slippage amount in price units, positive for buys, negative for sells
        """
        return price * self.sample_fraction() * order_side.sign
    
    def execution_price(self, order_side: OrderSide, price: float) -> float:
        """Reference price moved against the taker by the sampled slippage."""
        return price * (1 + self.sample_fraction() * order_side.sign)


class NoSlippageModel(SlippageModel):
    """Executes exactly at the reference price."""
    
    def sample_fraction(self) -> float:
        return 0.0


class FixedSlippageModel(SlippageModel):
    """Fixed slippage model with constant slippage."""
    
    def __init__(self, slippage_fraction: float = 0.0005):
        """
        Initialize fixed slippage model.
        
        Args:
            slippage_fraction: Fixed slippage as a fraction of price
        """
        if slippage_fraction < 0:
            raise ValueError("slippage_fraction cannot be negative")
        self.slippage_fraction = slippage_fraction
    
    def sample_fraction(self) -> float:
        return self.slippage_fraction


class UniformSlippageModel(SlippageModel):
    """Slippage drawn uniformly from ``[0, max_slippage]``."""
    
    def __init__(self, max_slippage: float = 0.001, seed: Optional[int] = None):
        """
        Initialize uniform slippage model.
        
        Args:
            max_slippage: Upper bound of the slippage fraction
            seed: Seed for the random generator (None for entropy)
        """
        if max_slippage < 0:
            raise ValueError("max_slippage cannot be negative")
        self.max_slippage = max_slippage
        self._rng = np.random.default_rng(seed)
    
    def sample_fraction(self) -> float:
        return float(self._rng.uniform(0.0, self.max_slippage))


def create_slippage_model(
    model_type: str = "uniform",
    max_slippage: float = 0.001,
    seed: Optional[int] = None
) -> SlippageModel:
    """
    Factory function to create slippage models.
    
    Args:
        model_type: Type of slippage model ("uniform", "fixed", "none")
        max_slippage: Slippage bound (uniform) or constant (fixed)
        seed: Random seed for the uniform model
        
    Returns:
        Slippage model instance
    """
    if model_type == "uniform":
        return UniformSlippageModel(max_slippage, seed=seed)
    elif model_type == "fixed":
        return FixedSlippageModel(max_slippage)
    elif model_type == "none":
        return NoSlippageModel()
    else:
        raise ValueError(f"Unknown slippage model type: {model_type}")
