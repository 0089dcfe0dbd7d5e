"""
cachestore-redis — Redis Cache Store

The cache store adapter: a uniform get/set/delete/has/purge contract (with
bulk variants, key enumeration and advisory locks) over one Redis server.

Lifecycle:
    UNCONFIGURED  no usable configuration; every operation is a no-op
    CONSTRUCTED   configuration accepted, connection manager built
    INITIALISED   bound to a cache definition; namespace fixed

`await open()` connects and health-checks; is_ready() is True only for an
initialised store whose server answered. A store that is not ready answers
every operation with its neutral value (NOT_FOUND, False, 0, []) and never
raises. Once ready, transport failures propagate as StoreError.

Example:
    store = RedisCacheStore("main", {"server": "localhost:6379", "prefix": "app"})
    await store.open()
    store.initialise(CacheDefinition.adhoc(CacheMode.APPLICATION, "core", "config", ttl=60))
    await store.set("greeting", {"msg": "hello"})
    value = await store.get("greeting")
"""

from __future__ import annotations

import logging
import pickle
from collections.abc import Iterable, Mapping
from enum import Enum
from importlib import metadata
from typing import Any

from ..config import AddressingStrategy, StoreConfig, get_config
from ..errors import CacheConnectionError, ConfigurationError
from . import namespace as namer
from .backends import ADDRESSING, KeyAddressing
from .connection import ClientFactory, RedisConnection, store_errors
from .definition import CacheDefinition, CacheMode
from .interface import NOT_FOUND, CacheStoreInterface, LockState
from .lock import LockManager

logger = logging.getLogger(__name__)

TEST_INSTANCE_NAME = "Redis test"

SUPPORTED_MODES = frozenset({CacheMode.APPLICATION, CacheMode.SESSION})

# Redis.aclose() on the asyncio client arrived in redis-py 5
REDIS_MIN_MAJOR_VERSION = 5


class StoreState(str, Enum):
    """Lifecycle state of a store instance."""

    UNCONFIGURED = "unconfigured"
    CONSTRUCTED = "constructed"
    INITIALISED = "initialised"


class StoreFeature(str, Enum):
    """Capabilities a store type can declare to the host."""

    DATA_GUARANTEE = "data_guarantee"  # what is set stays until deleted or expired
    NATIVE_TTL = "native_ttl"  # the server expires entries itself


class RedisCacheStore(CacheStoreInterface):
    """
    Redis-backed cache store.

    Notes:
    - Namespace is prefix + instance name + definition hash, captured at initialise().
    - Addressing is FLAT (one Redis key per entry) or HASHED (one hash per namespace).
    - Values are pickled; any picklable value round-trips.
    - Locks use raw keys on the same connection.
    """

    def __init__(
        self,
        name: str,
        configuration: StoreConfig | Mapping[str, Any] | None = None,
        client_factory: ClientFactory | None = None,
        connection: RedisConnection | None = None,
    ) -> None:
        """
        Construct a store instance. Never raises for bad configuration.

        Args:
            name: Instance name, unique within the host configuration
            configuration: StoreConfig or host mapping {server, prefix, password, strategy}
            client_factory: Callable building the redis client (tests inject a fake)
            connection: Pre-built connection manager (used by clone())
        """
        self._name = name
        self._state = StoreState.UNCONFIGURED
        self._config: StoreConfig | None = None
        self._connection: RedisConnection | None = None
        self._locks: LockManager | None = None
        self._addressing: KeyAddressing | None = None
        self._definition: CacheDefinition | None = None
        self._client_factory = client_factory
        self._ready = False
        self.configuration_error: ConfigurationError | None = None
        self.connection_error: CacheConnectionError | None = None

        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

        try:
            config = configuration if isinstance(configuration, StoreConfig) else StoreConfig.from_mapping(configuration)
            if not config.is_configured:
                raise ConfigurationError("A Redis server address is required", details={"field": "server"})
        except ConfigurationError as e:
            self.configuration_error = e
            logger.warning(
                f"Redis store '{name}' left unconfigured: {e.message}",
                extra={"store": name, "details": e.details},
            )
            return

        self._config = config
        self._connection = connection or RedisConnection.from_config(config, client_factory)
        self._locks = LockManager(self._connection)
        self._state = StoreState.CONSTRUCTED

    # ------------ Capabilities ------------

    @staticmethod
    def are_requirements_met() -> bool:
        """True when the installed redis-py release ships the asyncio client API used here."""
        try:
            installed = metadata.version("redis")
        except metadata.PackageNotFoundError:
            return False
        return int(installed.split(".")[0]) >= REDIS_MIN_MAJOR_VERSION

    @staticmethod
    def get_supported_modes(configuration: StoreConfig | Mapping[str, Any] | None = None) -> frozenset[CacheMode]:
        return SUPPORTED_MODES

    @staticmethod
    def is_supported_mode(mode: CacheMode | str) -> bool:
        try:
            return CacheMode(mode) in SUPPORTED_MODES
        except ValueError:
            return False

    @staticmethod
    def get_supported_features(
        configuration: StoreConfig | Mapping[str, Any] | None = None,
    ) -> frozenset[StoreFeature]:
        """
        Features of a store built from configuration.

        NATIVE_TTL is only declared for the flat strategy: the hashed strategy
        cannot expire individual entries.

        Raises:
            ConfigurationError: If a configuration mapping fails validation
        """
        if configuration is not None and not isinstance(configuration, StoreConfig):
            configuration = StoreConfig.from_mapping(configuration)
        strategy = configuration.strategy if configuration else AddressingStrategy.FLAT
        if ADDRESSING[strategy].supports_native_ttl:
            return frozenset({StoreFeature.DATA_GUARANTEE, StoreFeature.NATIVE_TTL})
        return frozenset({StoreFeature.DATA_GUARANTEE})

    # ------------ Lifecycle ------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def config(self) -> StoreConfig | None:
        return self._config

    @property
    def definition(self) -> CacheDefinition | None:
        return self._definition

    @property
    def namespace(self) -> str | None:
        return self._addressing.namespace if self._addressing else None

    async def open(self) -> bool:
        """
        Connect, authenticate when a password is configured, and health-check.

        Connection failures are recorded on `connection_error`; the store
        simply stays not ready.

        Returns:
            True if the server answered the health check
        """
        if self._connection is None:
            return False
        if self._connection.is_connected:
            await self._connection.close()

        try:
            await self._connection.connect()
            if self._connection.has_credential:
                await self._connection.authenticate()
        except CacheConnectionError as e:
            self.connection_error = e
            self._ready = False
            logger.error(
                f"Redis store '{self._name}' is not ready: {e.message}",
                extra={"store": self._name, "details": e.details},
            )
            await self._connection.close()
            return False

        self.connection_error = None
        self._ready = await self._connection.health_check()
        logger.info(
            f"Redis store '{self._name}' opened (ready={self._ready})",
            extra={"store": self._name, "server": self._connection.server},
        )
        return self._ready

    def initialise(self, definition: CacheDefinition) -> bool:
        """
        Bind the store to a cache definition, fixing its namespace.

        Raises:
            ConfigurationError: If the definition needs TTL and the strategy cannot expire entries
        """
        if self._config is None or self._connection is None:
            logger.debug(f"Ignoring initialise() on unconfigured store '{self._name}'")
            return False

        addressing_cls = ADDRESSING[self._config.strategy]
        if definition.ttl > 0 and not addressing_cls.supports_native_ttl:
            raise ConfigurationError(
                f"The {self._config.strategy.value} strategy cannot expire entries; "
                f"definition '{definition.id}' requests a TTL of {definition.ttl}s",
                details={"strategy": self._config.strategy.value, "definition": definition.id, "ttl": definition.ttl},
            )

        ns = namer.derive_namespace(self._config.prefix, self._name, definition.generate_definition_hash())
        self._addressing = addressing_cls(self._connection, ns)
        self._definition = definition
        self._state = StoreState.INITIALISED
        logger.debug(f"Store '{self._name}' initialised for {definition.id}", extra={"namespace": ns})
        return True

    def is_initialised(self) -> bool:
        return self._definition is not None

    def is_ready(self) -> bool:
        return self._ready and self.is_initialised()

    async def clone(self) -> RedisCacheStore:
        """
        Duplicate this store with a brand-new connection.

        The copy is opened and, if this store is initialised, bound to the same
        definition. Nothing is shared with the original.
        """
        connection = self._connection.reopen() if self._connection else None
        copy = RedisCacheStore(
            self._name,
            self._config if self._config is not None else {},
            client_factory=self._client_factory,
            connection=connection,
        )
        if copy.state is StoreState.UNCONFIGURED:
            copy.configuration_error = self.configuration_error
            return copy
        await copy.open()
        if self._definition is not None:
            copy.initialise(self._definition)
        return copy

    async def close(self) -> None:
        """Close the connection; the store is no longer ready."""
        self._ready = False
        if self._connection is not None:
            await self._connection.close()

    async def instance_deleted(self) -> None:
        """Host removed this instance: purge its entries and close the connection."""
        try:
            await self.purge()
        finally:
            await self.close()

    @classmethod
    async def initialise_test_instance(
        cls,
        definition: CacheDefinition,
        client_factory: ClientFactory | None = None,
    ) -> RedisCacheStore | None:
        """
        Build a store against the configured test server.

        Returns:
            An opened, initialised store, or None when no test server is configured
        """
        if not cls.are_requirements_met():
            return None
        test_server = get_config().test_server
        if not test_server:
            return None
        store = cls(TEST_INSTANCE_NAME, {"server": test_server}, client_factory=client_factory)
        await store.open()
        store.initialise(definition)
        return store

    # ------------ Helpers ------------

    def _ttl(self) -> int | None:
        ttl = self._definition.ttl if self._definition else 0
        return ttl if ttl > 0 else None

    def _serialize(self, key: str, value: Any) -> bytes | None:
        try:
            return RedisConnection.dumps(value)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            logger.error(
                f"Failed to serialize value for key '{key}': {e}",
                extra={"key": key, "value_type": type(value).__name__, "error": str(e)},
                exc_info=True,
            )
            return None

    def _deserialize(self, key: str, payload: bytes) -> Any:
        try:
            return RedisConnection.loads(payload)
        except Exception as e:
            logger.warning(
                f"Undecodable payload for key '{key}', treating as missing: {e}",
                extra={"key": key, "namespace": self.namespace, "error": str(e)},
            )
            return NOT_FOUND

    def _details(self, **extra: Any) -> dict[str, Any]:
        return {"store": self._name, "namespace": self.namespace, **extra}

    # ------------ Core Interface ------------

    async def get(self, key: str) -> Any:
        """Retrieve a value by key, or NOT_FOUND."""
        if not self.is_ready() or self._addressing is None:
            return NOT_FOUND

        with store_errors("get", **self._details(key=key)):
            payload = await self._addressing.get(key)

        if payload is None:
            self._misses += 1
            return NOT_FOUND
        value = self._deserialize(key, payload)
        if value is NOT_FOUND:
            self._misses += 1
        else:
            self._hits += 1
        return value

    async def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        """Retrieve several values in one MGET/HMGET round trip."""
        keys = list(keys)
        if not self.is_ready() or self._addressing is None:
            return dict.fromkeys(keys, NOT_FOUND)

        with store_errors("get_many", **self._details(key_count=len(keys))):
            payloads = await self._addressing.get_many(keys)

        result: dict[str, Any] = {}
        for key, payload in zip(keys, payloads, strict=True):
            value = NOT_FOUND if payload is None else self._deserialize(key, payload)
            if value is NOT_FOUND:
                self._misses += 1
            else:
                self._hits += 1
            result[key] = value
        return result

    async def set(self, key: str, value: Any) -> bool:
        """Store a value; the definition's TTL travels with the write."""
        if not self.is_ready() or self._addressing is None:
            return False

        payload = self._serialize(key, value)
        if payload is None:
            return False

        ttl = self._ttl()
        with store_errors("set", **self._details(key=key, ttl=ttl)):
            success = await self._addressing.set(key, payload, ttl)
        if success:
            self._sets += 1
        return success

    async def set_many(self, items: Mapping[str, Any]) -> int:
        """
        Store several values. Returns the number stored.

        With a TTL every key is written with its own expiry in one pipeline;
        values that cannot be serialized are skipped.
        """
        if not self.is_ready() or self._addressing is None or not items:
            return 0

        payloads: dict[str, bytes] = {}
        for key, value in items.items():
            payload = self._serialize(key, value)
            if payload is not None:
                payloads[key] = payload

        ttl = self._ttl()
        with store_errors("set_many", **self._details(key_count=len(payloads), ttl=ttl)):
            stored = await self._addressing.set_many(payloads, ttl)
        self._sets += stored
        return stored

    async def delete(self, key: str) -> bool:
        if not self.is_ready() or self._addressing is None:
            return False

        with store_errors("delete", **self._details(key=key)):
            deleted = await self._addressing.delete(key)
        if deleted:
            self._deletes += 1
        return deleted

    async def delete_many(self, keys: Iterable[str]) -> int:
        keys = list(keys)
        if not self.is_ready() or self._addressing is None or not keys:
            return 0

        with store_errors("delete_many", **self._details(key_count=len(keys))):
            deleted = await self._addressing.delete_many(keys)
        self._deletes += deleted
        return deleted

    async def has(self, key: str) -> bool:
        if not self.is_ready() or self._addressing is None:
            return False

        with store_errors("has", **self._details(key=key)):
            return await self._addressing.exists(key)

    async def has_any(self, keys: Iterable[str]) -> bool:
        if not self.is_ready():
            return False
        return await super().has_any(keys)

    async def has_all(self, keys: Iterable[str]) -> bool:
        if not self.is_ready():
            return False
        return await super().has_all(keys)

    async def purge(self) -> bool:
        """
        Remove every entry in this store's namespace.

        Other namespaces on the same server are untouched. Purging an empty
        namespace succeeds.
        """
        if not self.is_ready() or self._addressing is None:
            return False

        with store_errors("purge", **self._details()):
            removed = await self._addressing.purge()
        self._deletes += removed
        logger.info(f"Purged {removed} entries from namespace '{self.namespace}'")
        return True

    async def find_all(self) -> list[str]:
        if not self.is_ready() or self._addressing is None:
            return []

        with store_errors("find_all", **self._details()):
            return await self._addressing.keys()

    async def find_by_prefix(self, prefix: str) -> list[str]:
        if not self.is_ready() or self._addressing is None:
            return []

        with store_errors("find_by_prefix", **self._details(prefix=prefix)):
            return await self._addressing.keys(prefix)

    # ------------ Locks ------------

    async def acquire_lock(self, key: str, owner: str) -> bool:
        if not self.is_ready() or self._locks is None:
            return False
        return await self._locks.acquire(key, owner)

    async def check_lock_state(self, key: str, owner: str) -> LockState:
        if not self.is_ready() or self._locks is None:
            return LockState.ABSENT
        return await self._locks.check(key, owner)

    async def release_lock(self, key: str, owner: str) -> bool:
        if not self.is_ready() or self._locks is None:
            return False
        return await self._locks.release(key, owner)

    # ------------ Stats ------------

    def get_stats(self) -> dict[str, Any]:
        """Return operation counters and lifecycle information."""
        total_requests = self._hits + self._misses
        return {
            "backend": "redis",
            "name": self._name,
            "state": self._state.value,
            "ready": self.is_ready(),
            "strategy": self._config.strategy.value if self._config else None,
            "namespace": self.namespace,
            "ttl": self._ttl(),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
        }
