"""
Unit tests for configuration parser.
"""

import pytest
import yaml
from pathlib import Path

from perpdesk.config.parser import ConfigParser, load_config, validate_config
from perpdesk.config.config import SimulationConfig, StepConfig, AccountConfig


def scenario_dict():
    return {
        "name": "unit",
        "account": {"balance": 10000},
        "engine": {"slippage_model": "none"},
        "risk": {"max_position_size": 50000},
        "steps": [
            {"action": "order", "price": 100,
             "order": {"symbol": "BTC", "side": "buy", "type": "limit", "quantity": 1, "price": 90}},
            {"action": "cancel", "order_ref": 1},
            {"action": "mark", "prices": {"BTC": 95}},
        ],
        "report": {"output_dir": "runs/unit", "format": "json"},
    }


class TestConfigParser:
    """Test ConfigParser class."""
    
    def test_load_yaml_valid_file(self, tmp_path):
        """Test loading valid YAML file."""
        path = tmp_path / "scenario.yaml"
        path.write_text(yaml.safe_dump(scenario_dict()))
        
        assert ConfigParser().load_yaml(path) == scenario_dict()
    
    def test_load_yaml_nonexistent_file(self):
        """Test loading non-existent YAML file."""
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            ConfigParser().load_yaml("nonexistent.yaml")
    
    def test_load_yaml_invalid_extension(self, tmp_path):
        """Test loading file with invalid extension."""
        path = tmp_path / "scenario.txt"
        path.write_text("account: {}")
        
        with pytest.raises(ValueError, match="Configuration file must be YAML format"):
            ConfigParser().load_yaml(path)
    
    def test_load_yaml_invalid_yaml(self, tmp_path):
        """Test loading invalid YAML file."""
        path = tmp_path / "scenario.yml"
        path.write_text("invalid: yaml: content: [")
        
        with pytest.raises(ValueError, match="Invalid YAML syntax"):
            ConfigParser().load_yaml(path)
    
    def test_load_yaml_not_a_mapping(self, tmp_path):
        """Test top level must be a mapping."""
        path = tmp_path / "scenario.yaml"
        path.write_text("- 1\n- 2\n")
        
        with pytest.raises(ValueError, match="must contain a dictionary"):
            ConfigParser().load_yaml(path)
    
    def test_parse_config(self):
        """Test parsing a complete dictionary."""
        config = ConfigParser().parse_config(scenario_dict())
        
        assert isinstance(config, SimulationConfig)
        assert config.name == "unit"
        assert config.engine.slippage_model == "none"
        assert config.risk.max_position_size == 50000
        assert [step.action for step in config.steps] == ["order", "cancel", "mark"]
    
    def test_parse_missing_account(self):
        """Test account section is required."""
        data = scenario_dict()
        del data["account"]
        
        with pytest.raises(ValueError, match="Missing required configuration section: account"):
            ConfigParser().parse_config(data)
    
    def test_parse_steps_not_list(self):
        """Test steps must be a list."""
        data = scenario_dict()
        data["steps"] = {"action": "mark"}
        
        with pytest.raises(ValueError, match="'steps' must be a list"):
            ConfigParser().parse_config(data)
    
    def test_parse_bad_step(self):
        """Test step errors name the step."""
        data = scenario_dict()
        data["steps"].append({"action": "close", "price": 100})
        
        with pytest.raises(ValueError, match="Step 4"):
            ConfigParser().parse_config(data)
    
    def test_parse_unknown_key(self):
        """Test unknown keys in a section are errors."""
        data = scenario_dict()
        data["engine"]["latency"] = 5
        
        with pytest.raises(ValueError, match="Error parsing configuration"):
            ConfigParser().parse_config(data)
    
    def test_validate_invalid_order(self):
        """Test malformed orders are caught by validation."""
        config = SimulationConfig(
            account=AccountConfig(balance=100),
            steps=[StepConfig(action="order", price=100, order={"symbol": "BTC", "side": "hold"})]
        )
        with pytest.raises(ValueError, match="Step 1 has an invalid order"):
            validate_config(config)
    
    def test_validate_order_ref_out_of_range(self):
        """Test cancel references must point at an earlier order step."""
        config = SimulationConfig(
            account=AccountConfig(balance=100),
            steps=[StepConfig(action="cancel", order_ref=1)]
        )
        with pytest.raises(ValueError, match="only 0 order step"):
            validate_config(config)


class TestLoadConfig:
    """Test load_config function."""
    
    def test_load_config(self, tmp_path):
        """Test load, parse and validate in one call."""
        path = tmp_path / "scenario.yaml"
        path.write_text(yaml.safe_dump(scenario_dict()))
        
        config = load_config(path)
        assert config.account.balance == 10000
        assert validate_config(config)
    
    def test_load_example_scenario(self):
        """Test the bundled example scenario is valid."""
        path = Path(__file__).resolve().parents[2] / "examples" / "scenarios" / "btc_round_trip.yaml"
        config = load_config(path)
        
        assert config.name == "btc_round_trip"
        assert config.report.format == "both"
