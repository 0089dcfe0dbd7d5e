"""
cachestore-redis — Addressing Strategy Interface

An addressing strategy owns the mapping from logical keys to Redis storage
for one namespace, and performs the raw Redis commands on serialized payloads.
The namespace is fixed when the strategy is built, so nothing on the shared
connection is ever rebound.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence

from redis.asyncio import Redis

from ..connection import RedisConnection

# Max keys per variadic DEL/HDEL command
CHUNK_SIZE = 1000


class KeyAddressing(ABC):
    """Raw Redis operations for one namespace."""

    supports_native_ttl: bool = False

    def __init__(self, connection: RedisConnection, namespace: str) -> None:
        self._connection = connection
        self.namespace = namespace

    @property
    def client(self) -> Redis:
        return self._connection.client

    @abstractmethod
    async def get(self, key: str) -> bytes | None: ...

    @abstractmethod
    async def get_many(self, keys: Sequence[str]) -> list[bytes | None]: ...

    @abstractmethod
    async def set(self, key: str, payload: bytes, ttl: int | None = None) -> bool: ...

    @abstractmethod
    async def set_many(self, payloads: Mapping[str, bytes], ttl: int | None = None) -> int: ...

    @abstractmethod
    async def delete(self, key: str) -> bool: ...

    @abstractmethod
    async def delete_many(self, keys: Sequence[str]) -> int: ...

    @abstractmethod
    async def exists(self, key: str) -> bool: ...

    @abstractmethod
    async def keys(self, prefix: str = "") -> list[str]:
        """Logical keys in the namespace starting with prefix."""

    @abstractmethod
    async def purge(self) -> int:
        """Remove every entry in the namespace and return how many were removed."""

    @staticmethod
    def _decode(raw: bytes | str) -> str:
        return raw.decode("utf-8") if isinstance(raw, bytes) else raw
