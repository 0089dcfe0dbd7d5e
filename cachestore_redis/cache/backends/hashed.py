"""
cachestore-redis — Hashed Container Addressing

One Redis hash per namespace; each cache entry is a field of that hash.
Logical keys are used verbatim as field names, so there is no prefix to
strip and no chance of one namespace's keys matching another's pattern.

Redis cannot portably expire individual hash fields, so this strategy does
not support native TTL.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from .base import CHUNK_SIZE, KeyAddressing


class HashedContainerAddressing(KeyAddressing):
    """A single hash keyed by the namespace holds every entry."""

    supports_native_ttl = False

    @property
    def container(self) -> str:
        return self.namespace

    async def get(self, key: str) -> bytes | None:
        return await self.client.hget(self.container, key)

    async def get_many(self, keys: Sequence[str]) -> list[bytes | None]:
        if not keys:
            return []
        return await self.client.hmget(self.container, list(keys))

    async def set(self, key: str, payload: bytes, ttl: int | None = None) -> bool:
        # HSET answers with the number of new fields; overwriting yields 0
        await self.client.hset(self.container, key, payload)
        return True

    async def set_many(self, payloads: Mapping[str, bytes], ttl: int | None = None) -> int:
        if not payloads:
            return 0
        await self.client.hset(self.container, mapping=dict(payloads))
        return len(payloads)

    async def delete(self, key: str) -> bool:
        return bool(await self.client.hdel(self.container, key))

    async def delete_many(self, keys: Sequence[str]) -> int:
        deleted = 0
        for i in range(0, len(keys), CHUNK_SIZE):
            chunk = keys[i : i + CHUNK_SIZE]
            if chunk:
                deleted += int(await self.client.hdel(self.container, *chunk))
        return deleted

    async def exists(self, key: str) -> bool:
        return bool(await self.client.hexists(self.container, key))

    async def keys(self, prefix: str = "") -> list[str]:
        fields = [self._decode(f) for f in await self.client.hkeys(self.container)]
        return [f for f in fields if f.startswith(prefix)]

    async def purge(self) -> int:
        pipe = self.client.pipeline(transaction=True)
        pipe.hlen(self.container)
        pipe.delete(self.container)
        count, _ = await pipe.execute()
        return int(count)
