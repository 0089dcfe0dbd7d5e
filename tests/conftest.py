"""
cachestore-redis — Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
The Redis server is replaced by a fakeredis FakeServer injected through the
connection manager's client factory; every store built in one test shares it.
"""

import functools
import os
from collections.abc import AsyncGenerator, Generator
from typing import Any

import fakeredis
import pytest
import pytest_asyncio

from cachestore_redis.cache import factory
from cachestore_redis.cache.definition import CacheDefinition, CacheMode
from cachestore_redis.cache.store import RedisCacheStore
from cachestore_redis.config import loader

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"

FAKE_SERVER_ADDRESS = "redis.test:6379"


@pytest.fixture
def fake_server() -> fakeredis.FakeServer:
    """A fresh in-process Redis server per test."""
    return fakeredis.FakeServer()


@pytest.fixture
def client_factory(fake_server: fakeredis.FakeServer) -> Any:
    """Client factory building fakeredis clients bound to the shared fake server."""
    return functools.partial(fakeredis.FakeAsyncRedis, server=fake_server)


@pytest.fixture
def definition() -> CacheDefinition:
    return CacheDefinition.adhoc(CacheMode.APPLICATION, "foo_bar", "baz")


@pytest.fixture
def ttl_definition() -> CacheDefinition:
    return CacheDefinition.adhoc(CacheMode.APPLICATION, "foo_bar", "expiring", ttl=1)


@pytest_asyncio.fixture
async def make_store(client_factory: Any) -> AsyncGenerator[Any, None]:
    """Build, open and initialise stores against the fake server."""
    opened: list[RedisCacheStore] = []

    async def _make(
        name: str = "test",
        definition: CacheDefinition | None = None,
        **configuration: Any,
    ) -> RedisCacheStore:
        configuration.setdefault("server", FAKE_SERVER_ADDRESS)
        store = RedisCacheStore(name, configuration, client_factory=client_factory)
        await store.open()
        store.initialise(definition or CacheDefinition.adhoc(CacheMode.APPLICATION, "foo_bar", "baz"))
        opened.append(store)
        return store

    yield _make

    for store in opened:
        await store.close()


@pytest_asyncio.fixture
async def store(make_store: Any) -> AsyncGenerator[RedisCacheStore, None]:
    """A ready flat-strategy store with prefix 'phpu'."""
    store = await make_store("test", prefix="phpu")
    yield store
    await store.close()


@pytest_asyncio.fixture
async def hashed_store(make_store: Any) -> AsyncGenerator[RedisCacheStore, None]:
    """A ready hashed-container store."""
    store = await make_store("test", prefix="phpu", strategy="hashed")
    yield store
    await store.close()


@pytest.fixture(autouse=True)
def reset_config(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop the configuration singleton so each test loads its own environment."""
    monkeypatch.setattr(loader, "_config_instance", None)
    yield


@pytest.fixture(autouse=True)
def reset_store_factory() -> Generator[None, None, None]:
    """Reset store registry after each test to prevent state leakage."""
    yield
    factory.reset_store_factory()


@pytest.fixture
def sample_values() -> list[Any]:
    """Values that must survive a set/get round trip unchanged."""
    return [
        1,
        0,
        True,
        False,
        3.14,
        "hello",
        {"foo": "bar", "bat": "baz"},
        {"foo": "bar", "bat": {"bazzy": "baz"}},
        ["foo", "bar", {"bat": ["baz"]}],
        Record(foo="bar", bat="baz"),
    ]


class Record:
    """Composite record used in round-trip tests (module level so it pickles)."""

    def __init__(self, **fields: Any) -> None:
        self.__dict__.update(fields)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Record) and self.__dict__ == other.__dict__

    def __repr__(self) -> str:
        return f"Record({self.__dict__!r})"
