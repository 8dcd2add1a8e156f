"""Configuration dataclasses for perpdesk."""

from dataclasses import asdict, dataclass, field
from typing import Dict, Any, Optional, List

from ..risk.limits import RiskLimits

STEP_ACTIONS = ["order", "cancel", "close", "mark"]


@dataclass
class EngineConfig:
    """Trading engine configuration."""
    min_order_value: float = 10.0  # minimum notional
    large_order_fraction: float = 0.5  # warn above this share of balance
    limit_deviation_warning: float = 0.05  # warn when a limit is this far from market
    slippage_model: str = "uniform"  # "uniform", "fixed" or "none"
    max_slippage: float = 0.001
    fee_rate: float = 0.001
    max_margin_fraction: float = 0.8  # pre-trade margin cap as share of balance
    max_exposure_multiple: float = 10.0  # total exposure cap as multiple of balance
    seed: Optional[int] = None
    
    def __post_init__(self):
        """Validate engine configuration."""
        if self.slippage_model not in ["uniform", "fixed", "none"]:
            raise ValueError(f"Unknown slippage model: {self.slippage_model}")
        if self.min_order_value < 0:
            raise ValueError("min_order_value cannot be negative")
        if self.max_slippage < 0:
            raise ValueError("max_slippage cannot be negative")
        if self.fee_rate < 0:
            raise ValueError("fee_rate cannot be negative")
        if self.max_margin_fraction <= 0:
            raise ValueError("max_margin_fraction must be positive")
        if self.max_exposure_multiple <= 0:
            raise ValueError("max_exposure_multiple must be positive")


@dataclass
class RiskConfig:
    """Risk limit configuration."""
    max_margin_utilization: float = 0.8
    max_position_size: float = 10000.0
    max_daily_loss: float = 1000.0
    max_concurrent_positions: int = 5
    max_leverage_per_position: float = 20.0
    
    def __post_init__(self):
        """Validate risk configuration."""
        if self.max_margin_utilization <= 0:
            raise ValueError("max_margin_utilization must be positive")
        if self.max_position_size <= 0:
            raise ValueError("max_position_size must be positive")
        if self.max_daily_loss < 0:
            raise ValueError("max_daily_loss cannot be negative")
        if self.max_concurrent_positions < 1:
            raise ValueError("max_concurrent_positions must be at least 1")
        if self.max_leverage_per_position < 1:
            raise ValueError("max_leverage_per_position must be at least 1")
    
    def to_limits(self) -> RiskLimits:
        return RiskLimits(**asdict(self))


@dataclass
class AccountConfig:
    """Simulated account configuration."""
    balance: float
    
    def __post_init__(self):
        if self.balance < 0:
            raise ValueError("Account balance cannot be negative")


@dataclass
class StepConfig:
    """One scenario step replayed through the engine."""
    action: str
    price: Optional[float] = None
    order: Optional[Dict[str, Any]] = None
    balance: Optional[float] = None
    order_id: Optional[str] = None
    order_ref: Optional[int] = None
    symbol: Optional[str] = None
    leverage: float = 1.0
    prices: Optional[Dict[str, float]] = None
    
    def __post_init__(self):
        """Validate step configuration."""
        if self.action not in STEP_ACTIONS:
            raise ValueError(f"Step action must be one of {STEP_ACTIONS}, got '{self.action}'")
        
        if self.action == "order":
            if self.order is None:
                raise ValueError("Order step requires an 'order' mapping")
            if self.price is None or self.price <= 0:
                raise ValueError("Order step requires a positive market 'price'")
        elif self.action == "cancel":
            if self.order_id is None and self.order_ref is None:
                raise ValueError("Cancel step requires 'order_id' or 'order_ref'")
        elif self.action == "close":
            if not self.symbol:
                raise ValueError("Close step requires a 'symbol'")
            if self.price is None or self.price <= 0:
                raise ValueError("Close step requires a positive market 'price'")
        elif self.action == "mark":
            if not self.prices:
                raise ValueError("Mark step requires a non-empty 'prices' mapping")
    
    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class ReportConfig:
    """Reporting configuration."""
    output_dir: str = "runs/latest"
    format: str = "json"  # "json", "csv", "both"
    
    def __post_init__(self):
        """Validate report configuration."""
        if self.format not in ["json", "csv", "both"]:
            raise ValueError(f"Report format must be 'json', 'csv', or 'both', got '{self.format}'")


@dataclass
class SimulationConfig:
    """Complete scenario configuration."""
    account: AccountConfig
    steps: List[StepConfig] = field(default_factory=list)
    engine: EngineConfig = field(default_factory=EngineConfig)
    risk: RiskConfig = field(default_factory=RiskConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    enforce_risk_limits: bool = False  # skip orders the risk manager disallows
    name: Optional[str] = None
    description: Optional[str] = None
    
    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "SimulationConfig":
        """Create SimulationConfig from dictionary."""
        return cls(
            account=AccountConfig(**config_dict["account"]),
            steps=[StepConfig(**step) for step in config_dict.get("steps") or []],
            engine=EngineConfig(**(config_dict.get("engine") or {})),
            risk=RiskConfig(**(config_dict.get("risk") or {})),
            report=ReportConfig(**(config_dict.get("report") or {})),
            enforce_risk_limits=bool(config_dict.get("enforce_risk_limits", False)),
            name=config_dict.get("name"),
            description=config_dict.get("description")
        )
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert SimulationConfig to dictionary."""
        return {
            "account": asdict(self.account),
            "steps": [step.to_dict() for step in self.steps],
            "engine": asdict(self.engine),
            "risk": asdict(self.risk),
            "report": asdict(self.report),
            "enforce_risk_limits": self.enforce_risk_limits,
            "name": self.name,
            "description": self.description
        }
