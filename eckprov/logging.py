"""Logging configuration for the eckprov package."""
import logging
import sys
from typing import Optional

from eckprov.config import Config


def setup_logger(name: str = "eckprov", level: Optional[int] = None, debug: bool = False) -> logging.Logger:
    """
    Set up a logger with the specified name and log level.

    Args:
        name: The name of the logger
        level: The logging level (default: $LOG_LEVEL, else INFO)
        debug: Force DEBUG level and keep noisy HTTP libraries verbose

    Returns:
        Configured logger instance
    """
    if debug:
        level = logging.DEBUG
    elif level is None:
        level = getattr(logging, Config.LOG_LEVEL, logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Don't add handlers if they're already configured
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)

        formatter = logging.Formatter(Config.LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
        handler.setFormatter(formatter)

        logger.addHandler(handler)
    else:
        for handler in logger.handlers:
            handler.setLevel(level)

    # Disable debug logging for noisy libraries
    if not debug:
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('kubernetes').setLevel(logging.WARNING)

    return logger
