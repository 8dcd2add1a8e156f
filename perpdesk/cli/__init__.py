"""Command-line interface for the perpdesk trading simulator."""

from .main import main, run_command, validate_command
from .runner import ScenarioRunner

__all__ = ["main", "run_command", "validate_command", "ScenarioRunner"]
