"""Main CLI entry point for the perpdesk trading simulator."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from ..config import load_config
from ..utils.logger import get_logger, setup_logging
from .runner import ScenarioRunner

logger = get_logger(__name__)


def run_command(args) -> int:
    """Replay a scenario through a fresh engine."""
    try:
        # Load configuration
        config = load_config(args.config)

        # Output directory: command line wins over the config file
        output_dir = Path(args.output or config.report.output_dir)

        # Run scenario
        runner = ScenarioRunner(config)
        report = runner.run()

        # Save results
        runner.save_results(report, output_dir)

        failed = [step for step in report["steps"] if not step.get("success")]
        logger.info(
            f"Scenario completed: {len(report['steps'])} steps, {len(failed)} failed, "
            f"final balance {report['final_balance']:.2f}"
        )
        return 0

    except Exception as e:
        logger.error(f"Scenario failed: {e}")
        if args.verbose:
            logger.exception("Full traceback:")
        return 1


def validate_command(args) -> int:
    """Load and validate a scenario without running it."""
    try:
        config = load_config(args.config)
        logger.info(f"Configuration is valid: {len(config.steps)} steps")
        return 0

    except Exception as e:
        logger.error(f"Invalid configuration: {e}")
        if args.verbose:
            logger.exception("Full traceback:")
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="perpdesk",
        description="Simulated perpetual futures trading engine and risk manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  perpdesk run --config examples/scenarios/btc_round_trip.yaml
  perpdesk run --config examples/scenarios/btc_round_trip.yaml --output runs/btc
  perpdesk validate --config examples/scenarios/btc_round_trip.yaml
  perpdesk --verbose run --config examples/scenarios/btc_round_trip.yaml
        """
    )

    # Global arguments
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    # Subcommands
    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True
    )

    # Run command
    run_parser = subparsers.add_parser(
        "run",
        help="Replay a scenario and write a report"
    )
    run_parser.add_argument(
        "--config", "-c",
        type=str,
        required=True,
        help="Path to YAML scenario file"
    )
    run_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output directory (default: report.output_dir from the config)"
    )
    run_parser.set_defaults(func=run_command)

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a scenario file without running it"
    )
    validate_parser.add_argument(
        "--config", "-c",
        type=str,
        required=True,
        help="Path to YAML scenario file"
    )
    validate_parser.set_defaults(func=validate_command)

    # Parse arguments
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    # Run the appropriate command
    return args.func(args)


def cli():
    """CLI entry point for the perpdesk command."""
    return main()


if __name__ == "__main__":
    sys.exit(main())
