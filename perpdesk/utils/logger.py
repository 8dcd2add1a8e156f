"""Logging helpers."""

import logging
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""
    return logging.getLogger(name)


def setup_logging(verbose: bool = False, level: Optional[int] = None) -> None:
    """
    Setup logging configuration.
    
    Args:
        verbose: Enable debug output
        level: Explicit level, overrides ``verbose``
    """
    if level is None:
        level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        force=True
    )
