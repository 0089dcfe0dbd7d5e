"""
cachestore-redis — Cache Store Interface

Defines the abstract interface a cache store must implement, plus the
NOT_FOUND sentinel returned for absent keys.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Final

from .definition import CacheDefinition


class _NotFound:
    """Sentinel type for absent keys. Falsy, and distinct from every storable value."""

    _instance = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __reduce__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND: Final = _NotFound()


class LockState(str, Enum):
    """Result of checking a lock against an owner token."""

    HELD_BY_ME = "held_by_me"
    HELD_BY_OTHER = "held_by_other"
    ABSENT = "absent"


class CacheStoreInterface(ABC):
    """
    Abstract base class for cache stores.

    Stores are initialised against one cache definition; every key passed to
    the methods below is a logical key within that definition.
    """

    @abstractmethod
    def initialise(self, definition: CacheDefinition) -> bool:
        """Bind the store to a cache definition."""

    @abstractmethod
    def is_initialised(self) -> bool:
        """True once initialise() has been called."""

    @abstractmethod
    def is_ready(self) -> bool:
        """True when the store is initialised and its server answered the health check."""

    @abstractmethod
    async def get(self, key: str) -> Any:
        """
        Retrieve a value from the cache.

        Args:
            key: Logical key

        Returns:
            Cached value, or NOT_FOUND
        """

    @abstractmethod
    async def set(self, key: str, value: Any) -> bool:
        """
        Store a value, applying the definition's TTL when it has one.

        Args:
            key: Logical key
            value: Any picklable value

        Returns:
            True if stored successfully, False otherwise
        """

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete a key from the cache.

        Returns:
            True if the key was deleted, False if it didn't exist
        """

    @abstractmethod
    async def has(self, key: str) -> bool:
        """Check if a key exists in the cache."""

    @abstractmethod
    async def purge(self) -> bool:
        """Remove every entry belonging to this store's namespace."""

    @abstractmethod
    async def find_all(self) -> list[str]:
        """List every logical key in the namespace."""

    @abstractmethod
    async def find_by_prefix(self, prefix: str) -> list[str]:
        """List the logical keys in the namespace starting with prefix."""

    @abstractmethod
    async def acquire_lock(self, key: str, owner: str) -> bool:
        """Try to take the lock named key for owner."""

    @abstractmethod
    async def check_lock_state(self, key: str, owner: str) -> LockState:
        """Report whether owner holds the lock named key."""

    @abstractmethod
    async def release_lock(self, key: str, owner: str) -> bool:
        """Release the lock named key if owner holds it."""

    async def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        """
        Retrieve multiple values from the cache.

        Default implementation calls get() for each key.
        Backends can override for better performance.

        Returns:
            Dictionary with an entry for every requested key (NOT_FOUND when absent)
        """
        return {key: await self.get(key) for key in keys}

    async def set_many(self, items: Mapping[str, Any]) -> int:
        """
        Store multiple values in the cache.

        Default implementation calls set() for each item.

        Returns:
            Number of items successfully stored
        """
        count = 0
        for key, value in items.items():
            if await self.set(key, value):
                count += 1
        return count

    async def delete_many(self, keys: Iterable[str]) -> int:
        """
        Delete multiple keys from the cache.

        Default implementation calls delete() for each key.

        Returns:
            Number of keys actually deleted
        """
        count = 0
        for key in keys:
            if await self.delete(key):
                count += 1
        return count

    async def has_any(self, keys: Iterable[str]) -> bool:
        """True if at least one key exists; stops at the first hit."""
        for key in keys:
            if await self.has(key):
                return True
        return False

    async def has_all(self, keys: Iterable[str]) -> bool:
        """True if every key exists; stops at the first miss."""
        for key in keys:
            if not await self.has(key):
                return False
        return True
