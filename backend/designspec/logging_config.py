"""Unified logging configuration for designspec."""
from __future__ import annotations

import logging

from .config import DESIGNSPEC_DEBUG, LOG_DIR

# Prevent duplicate handlers
_configured_loggers: set[str] = set()


def setup_logger(name: str, filename: str) -> logging.Logger:
    """Setup a logger with file and console handlers.

    Args:
        name: Logger name (e.g., 'designspec.integrations.figma')
        filename: Log file name (e.g., 'figma.log')

    Returns:
        Configured logger instance
    """
    if name in _configured_loggers:
        return logging.getLogger(name)

    level = logging.DEBUG if DESIGNSPEC_DEBUG else logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False  # Prevent duplicate logs

    LOG_DIR.mkdir(parents=True, exist_ok=True)

    # File handler
    fh = logging.FileHandler(LOG_DIR / filename, encoding='utf-8')
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"
    ))

    # Console handler
    sh = logging.StreamHandler()
    sh.setLevel(level)
    sh.setFormatter(logging.Formatter(
        "%(asctime)s [%(name)s] %(message)s"
    ))

    logger.addHandler(fh)
    logger.addHandler(sh)

    _configured_loggers.add(name)
    return logger


# Pre-configured loggers
def get_figma_logger() -> logging.Logger:
    """Logger for Figma API traffic and integration runs."""
    return setup_logger("designspec.integrations.figma", "figma.log")


def get_compiler_logger() -> logging.Logger:
    """Logger for tree analysis and formatters."""
    return setup_logger("designspec", "designspec.log")
