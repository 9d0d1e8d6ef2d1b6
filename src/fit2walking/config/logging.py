"""
Centralized logging configuration for fit2walking.

Call setup_logging() from entry points (cli.py) before processing starts.
Log output goes to stderr because stdout carries the JSON map documents.
"""

import logging
import sys
from typing import Union


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Configure the root logger for the application.

    Parameters
    ----------
    level : int or str
        Logging level (default: logging.INFO). Names such as "DEBUG" are accepted.
    """
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
