"""
cachestore-redis — Redis Cache Store Adapter

Key/value cache store with namespaced key spaces and advisory locks
on a shared Redis server.
"""

__version__ = "1.0.0"

from .cache import (
    NOT_FOUND,
    CacheDefinition,
    CacheMode,
    LockState,
    RedisCacheStore,
    create_store,
)
from .logging_setup import configure_logging

__all__ = [
    "NOT_FOUND",
    "CacheDefinition",
    "CacheMode",
    "LockState",
    "RedisCacheStore",
    "configure_logging",
    "create_store",
]
