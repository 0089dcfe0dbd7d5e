"""
cachestore-redis — Logging Setup

Applies the configured log level to the standard logging module. Library
modules only ever call logging.getLogger(__name__); hosts that manage logging
themselves never need to call configure_logging().
"""

import logging

from .config import get_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging for standalone use.

    Args:
        level: Log level name (defaults to LOG_LEVEL from the loaded configuration)
    """
    if level is None:
        level = get_config().log_level
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
