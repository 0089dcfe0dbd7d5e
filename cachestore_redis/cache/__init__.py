"""
cachestore-redis — Cache Module

Provides the Redis cache store adapter, its addressing strategies and locks.

Canonical exports:
- factory.py: creation and registry of store instances
- store.py: the RedisCacheStore adapter
- interface.py: abstract store contract and the NOT_FOUND sentinel
- backends/: flat and hashed-container addressing strategies

Usage:
    from cachestore_redis.cache import CacheDefinition, CacheMode, create_store

    definition = CacheDefinition.adhoc(CacheMode.APPLICATION, "core", "config")
    store = await create_store("main", {"server": "localhost"}, definition)
    await store.set("key", "value")
    value = await store.get("key")
"""

from .connection import RedisConnection
from .definition import CacheDefinition, CacheMode
from .factory import (
    close_all_stores,
    create_store,
    delete_store,
    get_store,
    list_store_instances,
    reset_store_factory,
)
from .interface import NOT_FOUND, CacheStoreInterface, LockState
from .lock import LockManager
from .store import RedisCacheStore, StoreFeature, StoreState

__all__ = [
    # Factory functions
    "create_store",
    "get_store",
    "delete_store",
    "close_all_stores",
    "list_store_instances",
    "reset_store_factory",
    # Interface
    "CacheStoreInterface",
    "NOT_FOUND",
    "LockState",
    # Implementation
    "RedisCacheStore",
    "RedisConnection",
    "LockManager",
    "StoreFeature",
    "StoreState",
    # Definitions
    "CacheDefinition",
    "CacheMode",
]
