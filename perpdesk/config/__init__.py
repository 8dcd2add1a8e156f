"""Configuration management for perpdesk."""

from .config import SimulationConfig, AccountConfig, EngineConfig, RiskConfig, ReportConfig, StepConfig
from .parser import ConfigParser, load_config, validate_config

__all__ = [
    "SimulationConfig",
    "AccountConfig",
    "EngineConfig",
    "RiskConfig",
    "ReportConfig",
    "StepConfig",
    "ConfigParser",
    "load_config",
    "validate_config"
]
