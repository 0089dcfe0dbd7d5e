"""
cachestore-redis — Lock Manager

Advisory mutual exclusion across every process sharing a Redis server.

Lock keys are used verbatim (no namespace): locks are global per store
instance, not per cache definition. The value stored under a lock key is the
owner token.

- acquire: SET key owner NX
- check: GET key compared with the owner token
- release: WATCH/MULTI compare-and-delete, so a lock re-acquired by someone
  else between the check and the delete is left alone

Locks are not re-entrant and never expire on their own; a holder that dies
without releasing strands its lock.
"""

from __future__ import annotations

import logging

from redis.exceptions import WatchError

from .connection import RedisConnection, store_errors
from .interface import LockState

logger = logging.getLogger(__name__)


class LockManager:
    """Acquire, check and release owner-tagged locks on a store's connection."""

    def __init__(self, connection: RedisConnection) -> None:
        self._connection = connection

    @staticmethod
    def _token(owner: str) -> bytes:
        return str(owner).encode("utf-8")

    async def acquire(self, key: str, owner: str) -> bool:
        """Take the lock if nobody holds it. Contention returns False."""
        with store_errors("acquire_lock", lock=key):
            acquired = bool(await self._connection.client.set(key, self._token(owner), nx=True))
        logger.debug(f"Lock '{key}' {'acquired' if acquired else 'busy'} for owner {owner}")
        return acquired

    async def check(self, key: str, owner: str) -> LockState:
        with store_errors("check_lock_state", lock=key):
            current = await self._connection.client.get(key)
        if current is None:
            return LockState.ABSENT
        if current == self._token(owner):
            return LockState.HELD_BY_ME
        return LockState.HELD_BY_OTHER

    async def release(self, key: str, owner: str) -> bool:
        """Delete the lock only while owner holds it."""
        token = self._token(owner)
        with store_errors("release_lock", lock=key):
            async with self._connection.client.pipeline(transaction=True) as pipe:
                await pipe.watch(key)
                if await pipe.get(key) != token:
                    return False
                pipe.multi()
                pipe.delete(key)
                try:
                    (deleted,) = await pipe.execute()
                except WatchError:
                    logger.info(f"Lock '{key}' changed hands during release by {owner}")
                    return False
        return bool(deleted)
