"""
cachestore-redis — Store Factory

Canonical factory for creating store instances from configuration and keeping
track of them by instance name, the way a host keeps its configured instances.

Examples:
    from cachestore_redis.cache import create_store, close_all_stores

    store = await create_store("main", {"server": "localhost:6379", "prefix": "app"}, definition)
    await store.set("key", "value")
    ...
    await close_all_stores()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..config import StoreConfig, get_config
from .connection import ClientFactory
from .definition import CacheDefinition
from .store import RedisCacheStore

logger = logging.getLogger(__name__)

# Global store instances registry
_store_instances: dict[str, RedisCacheStore] = {}


async def create_store(
    name: str = "default",
    config: StoreConfig | Mapping[str, Any] | None = None,
    definition: CacheDefinition | None = None,
    client_factory: ClientFactory | None = None,
) -> RedisCacheStore:
    """
    Create, open and register a store instance.

    The returned store may be unconfigured or not ready; inspect
    `is_ready()`, `configuration_error` and `connection_error`.

    Args:
        name: Instance name (registry key and part of the namespace)
        config: Store configuration (uses the global config if not provided)
        definition: Cache definition to initialise the store against
        client_factory: Callable building the redis client

    Returns:
        Store instance

    Raises:
        ConfigurationError: If definition needs a capability the strategy lacks
    """
    if name in _store_instances:
        logger.debug("Returning existing store instance: %s", name)
        return _store_instances[name]

    if config is None:
        config = get_config().store

    store = RedisCacheStore(name, config, client_factory=client_factory)
    await store.open()
    if definition is not None:
        store.initialise(definition)

    _store_instances[name] = store
    logger.info(
        "Store instance '%s' created (state: %s, ready: %s)",
        name,
        store.state.value,
        store.is_ready(),
        extra={"store": name, "state": store.state.value},
    )
    return store


def get_store(name: str = "default") -> RedisCacheStore | None:
    """Get a registered store instance by name."""
    return _store_instances.get(name)


async def delete_store(name: str) -> bool:
    """
    Unregister a store, purging its entries and closing its connection.

    Returns:
        True if a store with that name was registered
    """
    store = _store_instances.pop(name, None)
    if store is None:
        return False
    await store.instance_deleted()
    logger.info("Deleted store instance: %s", name)
    return True


async def close_all_stores() -> None:
    """
    Close all store instances and release their connections.

    Entries stay on the server; use delete_store() to purge.
    """
    if not _store_instances:
        logger.debug("No store instances to close")
        return

    logger.info("Closing %d store instance(s)...", len(_store_instances))

    for name, store in list(_store_instances.items()):
        try:
            await store.close()
            logger.info("Closed store instance: %s", name)
        except Exception as e:
            logger.error(
                "Error closing store instance '%s': %s",
                name,
                e,
                extra={"store": name, "error": str(e)},
                exc_info=True,
            )

    _store_instances.clear()
    logger.info("All store instances closed")


def reset_store_factory() -> None:
    """
    Clear all instance references without closing them.

    Warning: Only use this in testing contexts.
    """
    count = len(_store_instances)
    _store_instances.clear()
    logger.debug("Reset store factory, cleared %d instance reference(s)", count)


def list_store_instances() -> list[str]:
    """List all registered store instance names."""
    return list(_store_instances.keys())
