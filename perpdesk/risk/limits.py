"""Risk limit configuration."""

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict


@dataclass(frozen=True)
class RiskLimits:
    """Account-level risk limits used by the risk manager."""
    max_margin_utilization: float = 0.8  # fraction of account balance
    max_position_size: float = 10000.0  # notional, account currency
    max_daily_loss: float = 1000.0  # aggregate unrealized loss, account currency
    max_concurrent_positions: int = 5
    max_leverage_per_position: float = 20.0
    
    def merged(self, **overrides: Any) -> "RiskLimits":
        """
        Return a copy with the given fields replaced.
        
        Values are taken as-is; unknown field names raise ``TypeError``.
        """
        return replace(self, **overrides)
    
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RiskLimits":
        return cls(**data)
