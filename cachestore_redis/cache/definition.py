"""
cachestore-redis — Cache Definitions

A cache definition identifies one logical cache (its mode, owning component and
area) and carries the requested time-to-live. The definition hash is the
fingerprint used to keep differently-shaped caches that share an instance name
from colliding on the server.
"""

import hashlib
from dataclasses import dataclass
from enum import Enum


class CacheMode(str, Enum):
    """Scope of a cache definition."""

    APPLICATION = "application"
    SESSION = "session"
    REQUEST = "request"


@dataclass(frozen=True)
class CacheDefinition:
    """Descriptor of a logical cache supplied by the host."""

    mode: CacheMode
    component: str
    area: str
    ttl: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", CacheMode(self.mode))
        if self.ttl < 0:
            raise ValueError("ttl must be zero (no expiry) or a positive number of seconds")

    @property
    def id(self) -> str:
        return f"{self.mode.value}/{self.component}/{self.area}"

    def generate_definition_hash(self) -> str:
        """Deterministic fingerprint of the definition's identity (MD5 hex of its id)."""
        return hashlib.md5(self.id.encode("utf-8")).hexdigest()

    @classmethod
    def adhoc(cls, mode: CacheMode | str, component: str, area: str, ttl: int = 0) -> "CacheDefinition":
        """Build a definition on the fly, as hosts do for unregistered caches."""
        return cls(mode=CacheMode(mode), component=component, area=area, ttl=ttl)
