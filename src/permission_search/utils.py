"""Utility functions for permission search."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Configure loguru sinks.

    Args:
        level: Minimum level for every sink.
        log_file: Optional file sink, rotated at 10 MB.
    """
    logger.remove()
    logger.add(sys.stderr, level=level, colorize=True)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_file, level=level, rotation="10 MB", retention="7 days")
