"""
cachestore-redis — Hashed Container Strategy Store Tests

The same contract as the flat strategy, with every entry living as a field
of one Redis hash keyed by the namespace.
"""

from typing import Any

import pytest

from cachestore_redis.cache import NOT_FOUND, CacheDefinition, CacheMode, RedisCacheStore, StoreFeature
from cachestore_redis.config import AddressingStrategy, StoreConfig
from cachestore_redis.errors import ConfigurationError


class TestHashedStore:
    """Test suite for RedisCacheStore with the hashed-container strategy."""

    async def test_entries_are_fields_of_one_container(
        self, hashed_store: RedisCacheStore, client_factory: Any
    ) -> None:
        """Test that entries live as fields of the namespace hash."""
        await hashed_store.set_many({"foo": "bar", "bat": "baz"})

        raw = client_factory()
        assert await raw.type(hashed_store.namespace) == b"hash"
        assert sorted(await raw.hkeys(hashed_store.namespace)) == [b"bat", b"foo"]
        await raw.aclose()

    async def test_set_and_get(self, hashed_store: RedisCacheStore) -> None:
        """Test basic set and get operations."""
        assert await hashed_store.get("phpunit") is NOT_FOUND
        assert await hashed_store.set("phpunit", "expected") is True
        assert await hashed_store.set("phpunit", "expected") is True
        assert await hashed_store.get("phpunit") == "expected"

    async def test_get_values(self, hashed_store: RedisCacheStore, sample_values: list[Any]) -> None:
        """Test storing different data types."""
        for value in sample_values:
            assert await hashed_store.set("phpunit", value) is True
            assert await hashed_store.get("phpunit") == value

    async def test_get_many(self, hashed_store: RedisCacheStore) -> None:
        """Test batch get operation."""
        await hashed_store.set_many({"foo": "bar", "bat": "baz", "this": "that"})

        result = await hashed_store.get_many(["foo", "this", "nope"])

        assert result == {"foo": "bar", "this": "that", "nope": NOT_FOUND}

    async def test_set_many(self, hashed_store: RedisCacheStore) -> None:
        """Test batch set operation."""
        assert await hashed_store.set_many({"a": 1, "b": 2, "c": 3}) == 3
        assert [await hashed_store.get(k) for k in ("a", "b", "c")] == [1, 2, 3]

    async def test_delete_and_delete_many(self, hashed_store: RedisCacheStore) -> None:
        """Test single and batch deletes."""
        await hashed_store.set_many({"foo": "bar", "bat": "baz", "this": "that"})

        assert await hashed_store.delete("foo") is True
        assert await hashed_store.delete("foo") is False
        assert await hashed_store.delete_many(["bat", "this", "nope"]) == 2
        assert await hashed_store.find_all() == []

    async def test_has_variants(self, hashed_store: RedisCacheStore) -> None:
        """Test has, has_any and has_all."""
        await hashed_store.set("foo", "bar")

        assert await hashed_store.has("foo") is True
        assert await hashed_store.has("bat") is False
        assert await hashed_store.has_any(["bat", "foo"]) is True
        assert await hashed_store.has_all(["foo", "bat"]) is False

    async def test_purge(self, hashed_store: RedisCacheStore, make_store: Any) -> None:
        """Test that purge drops the container only."""
        other = await make_store("test2", prefix="phpu", strategy="hashed")
        await other.set("nopurge", "value")

        assert await hashed_store.purge() is True

        await hashed_store.set_many({"foo": "bar", "bat": "baz"})
        assert await hashed_store.purge() is True
        assert await hashed_store.find_all() == []
        assert await other.get("nopurge") == "value"

    async def test_find_by_prefix_lists_fields(self, hashed_store: RedisCacheStore) -> None:
        """Test listing fields by prefix."""
        await hashed_store.set_many({"user1": 1, "user2": 2, "group1": 3, "user*": 4})

        assert sorted(await hashed_store.find_by_prefix("user")) == ["user*", "user1", "user2"]
        assert await hashed_store.find_by_prefix("user*") == ["user*"]
        assert sorted(await hashed_store.find_all()) == ["group1", "user*", "user1", "user2"]

    async def test_strategies_share_a_server_without_colliding(
        self, hashed_store: RedisCacheStore, store: RedisCacheStore
    ) -> None:
        """Test that flat and hashed stores coexist on one server."""
        await store.set("k", "flat")
        await hashed_store.set("k", "hashed")

        assert await store.get("k") == "flat"
        assert await hashed_store.get("k") == "hashed"


class TestHashedStoreTTL:
    def test_does_not_declare_native_ttl(self) -> None:
        """Test that the hashed strategy does not claim native TTL."""
        features = RedisCacheStore.get_supported_features(StoreConfig(strategy=AddressingStrategy.HASHED))
        assert StoreFeature.NATIVE_TTL not in features
        assert StoreFeature.DATA_GUARANTEE in features

    async def test_ttl_definition_rejected(self, client_factory: Any) -> None:
        """Test that a TTL definition is refused at initialise."""
        store = RedisCacheStore("test", {"server": "localhost", "strategy": "hashed"}, client_factory=client_factory)
        await store.open()

        with pytest.raises(ConfigurationError):
            store.initialise(CacheDefinition.adhoc(CacheMode.APPLICATION, "foo_bar", "expiring", ttl=10))

        assert not store.is_initialised()
        assert store.initialise(CacheDefinition.adhoc(CacheMode.APPLICATION, "foo_bar", "forever")) is True
        await store.close()
