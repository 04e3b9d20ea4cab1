"""
logging.py
Loguru setup for luksbak.

setup_logging() is called once by the CLI with the level from Config
(default INFO). Library modules only call get_logger(); nothing here reads
or writes the process environment.
"""
from __future__ import annotations

import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loguru import Logger

from loguru import logger

DEFAULT_LEVEL = "INFO"
VALID_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

logger.configure(extra={"source": "luksbak"})


def setup_logging(level: str = DEFAULT_LEVEL) -> Logger:
    """
    Replace loguru's default sink with a single stderr sink.

    Args:
        level: Minimum level to emit; one of VALID_LEVELS.
    """
    level = level.upper()
    if level not in VALID_LEVELS:
        raise ValueError(f"Unknown log level: {level}")
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        backtrace=False,
        diagnose=False,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[source]: <12}</cyan> | "
            "{message}"
        ),
    )
    return logger


def get_logger(*, source: str | None = None) -> Logger:
    """Logger bound to a source component (e.g. "discover", "replicator")."""
    if source is None:
        return logger
    return logger.bind(source=source)
