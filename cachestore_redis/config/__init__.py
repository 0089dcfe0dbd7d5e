"""
cachestore-redis — Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import get_config, load_config, reload_config
from .schemas import (
    PREFIX_MAX_LENGTH,
    AddressingStrategy,
    Environment,
    LogLevel,
    Settings,
    StoreConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    # Main config
    "Settings",
    "StoreConfig",
    # Enums
    "Environment",
    "LogLevel",
    "AddressingStrategy",
    # Constants
    "PREFIX_MAX_LENGTH",
]
