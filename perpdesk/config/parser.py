"""Configuration parser for YAML scenario files."""

import yaml
from pathlib import Path
from typing import Dict, Any, Union
from pydantic import ValidationError

from .config import SimulationConfig, AccountConfig, EngineConfig, RiskConfig, ReportConfig, StepConfig
from ..market.schema import OrderRequest
from ..utils.logger import get_logger


class ConfigParser:
    """Parser for YAML configuration files."""
    
    def __init__(self):
        """Initialize the configuration parser."""
        self.logger = get_logger(__name__)
    
    def load_yaml(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load YAML configuration file."""
        config_path = Path(config_path)
        
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        
        if config_path.suffix.lower() not in ['.yaml', '.yml']:
            raise ValueError(f"Configuration file must be YAML format, got: {config_path.suffix}")
        
        try:
            with open(config_path, 'r') as f:
                config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML syntax in {config_path}: {e}") from e
        
        if not isinstance(config_dict, dict):
            raise ValueError("Configuration file must contain a dictionary")
        
        self.logger.info(f"Successfully loaded configuration from {config_path}")
        return config_dict
    
    def parse_config(self, config_dict: Dict[str, Any]) -> SimulationConfig:
        """Parse configuration dictionary into SimulationConfig."""
        try:
            if "account" not in config_dict:
                raise ValueError("Missing required configuration section: account")
            
            steps = config_dict.get("steps") or []
            if not isinstance(steps, list):
                raise ValueError("'steps' must be a list")
            
            config = SimulationConfig(
                account=AccountConfig(**config_dict["account"]),
                steps=[self._parse_step(index, step) for index, step in enumerate(steps, start=1)],
                engine=EngineConfig(**(config_dict.get("engine") or {})),
                risk=RiskConfig(**(config_dict.get("risk") or {})),
                report=ReportConfig(**(config_dict.get("report") or {})),
                enforce_risk_limits=bool(config_dict.get("enforce_risk_limits", False)),
                name=config_dict.get("name"),
                description=config_dict.get("description")
            )
        except (TypeError, ValueError, KeyError) as e:
            raise ValueError(f"Error parsing configuration: {e}") from e
        
        self.logger.info(f"Successfully parsed configuration with {len(config.steps)} steps")
        return config
    
    def _parse_step(self, index: int, step_dict: Any) -> StepConfig:
        """Parse one entry of the steps list."""
        if not isinstance(step_dict, dict):
            raise ValueError(f"Step {index} must be a mapping")
        try:
            return StepConfig(**step_dict)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Step {index}: {e}") from e
    
    def validate_config(self, config: SimulationConfig) -> bool:
        """Validate configuration for completeness and consistency."""
        try:
            order_steps = 0
            for index, step in enumerate(config.steps, start=1):
                if step.action == "order":
                    order_steps += 1
                    try:
                        OrderRequest(**step.order)
                    except ValidationError as e:
                        raise ValueError(f"Step {index} has an invalid order: {e}") from e
                elif step.action == "cancel" and step.order_ref is not None:
                    if not 1 <= step.order_ref <= order_steps:
                        raise ValueError(
                            f"Step {index} cancels order_ref {step.order_ref}, "
                            f"but only {order_steps} order step(s) precede it"
                        )
            
            self.logger.info("Configuration validation passed")
            return True
            
        except Exception as e:
            self.logger.error(f"Configuration validation failed: {e}")
            raise


def load_config(config_path: Union[str, Path]) -> SimulationConfig:
    """Load and parse configuration from YAML file."""
    parser = ConfigParser()
    config_dict = parser.load_yaml(config_path)
    config = parser.parse_config(config_dict)
    parser.validate_config(config)
    return config


def validate_config(config: SimulationConfig) -> bool:
    """Validate a SimulationConfig object."""
    parser = ConfigParser()
    return parser.validate_config(config)
