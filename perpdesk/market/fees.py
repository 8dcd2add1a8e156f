"""Fee models for trading costs."""

from abc import ABC, abstractmethod
from typing import Dict


class FeeModel(ABC):
    """Abstract base class for fee models."""
    
    @abstractmethod
    def calculate_fee(self, quantity: float, price: float) -> float:
        """
        Calculate the fee for an execution.
        
        Args:
            quantity: Executed quantity
            price: Execution price
            
        Returns:
            Fee amount
        """
        pass


class FlatRateFeeModel(FeeModel):
    """Fee charged as a flat fraction of notional."""
    
    def __init__(self, rate: float = 0.001, round_to_cents: bool = False):
        """
        Initialize flat rate fee model.
        
        Args:
            rate: Fee as a fraction of notional (0.001 = 0.1%)
            round_to_cents: Round fees to the nearest cent
        """
        if rate < 0:
            raise ValueError("Fee rate cannot be negative")
        self.rate = rate
        self.round_to_cents = round_to_cents
    
    def calculate_fee(self, quantity: float, price: float) -> float:
        fee = quantity * price * self.rate
        if self.round_to_cents:
            fee = round(fee, 2)
        return fee
    
    def get_fee_breakdown(self, quantity: float, price: float) -> Dict[str, float]:
        """Get detailed fee breakdown."""
        return {
            "notional": quantity * price,
            "rate": self.rate,
            "total": self.calculate_fee(quantity, price),
        }


def create_fee_model(rate: float = 0.001, round_to_cents: bool = False) -> FlatRateFeeModel:
    """Create the standard flat rate fee model."""
    return FlatRateFeeModel(rate=rate, round_to_cents=round_to_cents)
