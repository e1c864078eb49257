"""
Logging configuration for the shop API.

A single project logger configured from LOG_LEVEL; modules ask for children.
"""
import logging
import sys

from core.config import LOG_LEVEL

logger = logging.getLogger("fabricshop")
logger.setLevel(LOG_LEVEL)

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

# Prevent propagation to root logger (avoid duplicate logs)
logger.propagate = False


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Optional name for the logger (will be appended to 'fabricshop')

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"fabricshop.{name}")
    return logger
