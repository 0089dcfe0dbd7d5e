"""
cachestore-redis — Flat Key Addressing

One Redis key per cache entry: "<namespace>-<logical key>".

- Native per-key TTL via SET EX
- Bulk TTL writes pipelined, one SET EX per key
- Enumeration and purge via SCAN over the escaped namespace pattern
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from .. import namespace as namer
from .base import CHUNK_SIZE, KeyAddressing

logger = logging.getLogger(__name__)


class FlatKeyAddressing(KeyAddressing):
    """Namespace-prefixed Redis keys, one per entry."""

    supports_native_ttl = True

    def _physical(self, key: str) -> str:
        return namer.to_physical(self.namespace, key)

    async def get(self, key: str) -> bytes | None:
        return await self.client.get(self._physical(key))

    async def get_many(self, keys: Sequence[str]) -> list[bytes | None]:
        if not keys:
            return []
        # mget preserves order
        return await self.client.mget([self._physical(k) for k in keys])

    async def set(self, key: str, payload: bytes, ttl: int | None = None) -> bool:
        return bool(await self.client.set(self._physical(key), payload, ex=ttl))

    async def set_many(self, payloads: Mapping[str, bytes], ttl: int | None = None) -> int:
        if not payloads:
            return 0

        if ttl:
            # Each SET carries its own EX so no entry is ever visible without expiry
            pipe = self.client.pipeline(transaction=False)
            for key, payload in payloads.items():
                pipe.set(self._physical(key), payload, ex=ttl)
            results = await pipe.execute()
            return sum(1 for r in results if r)

        mapping = {self._physical(k): v for k, v in payloads.items()}
        if await self.client.mset(mapping):
            return len(mapping)
        return 0

    async def delete(self, key: str) -> bool:
        return bool(await self.client.delete(self._physical(key)))

    async def delete_many(self, keys: Sequence[str]) -> int:
        return await self._delete_physical([self._physical(k) for k in keys])

    async def exists(self, key: str) -> bool:
        return bool(await self.client.exists(self._physical(key)))

    async def keys(self, prefix: str = "") -> list[str]:
        return [namer.from_physical(self.namespace, k) for k in await self._scan(prefix)]

    async def purge(self) -> int:
        physical = await self._scan()
        deleted = await self._delete_physical(physical)
        logger.debug(f"Purged {deleted} of {len(physical)} keys from namespace '{self.namespace}'")
        return deleted

    async def _scan(self, prefix: str = "") -> list[str]:
        pattern = namer.match_pattern(self.namespace, prefix)
        # SCAN may return a key more than once while the keyspace is rehashing
        found = [self._decode(raw) async for raw in self.client.scan_iter(match=pattern, count=CHUNK_SIZE)]
        return list(dict.fromkeys(found))

    async def _delete_physical(self, physical: Sequence[str]) -> int:
        deleted = 0
        for i in range(0, len(physical), CHUNK_SIZE):
            deleted += int(await self.client.delete(*physical[i : i + CHUNK_SIZE]))
        return deleted
