"""
cachestore-redis — Connection Manager

Owns the live session between one store instance and the Redis server:
connect, authenticate, health-check, reopen and close. Every store instance
gets its own client and connection pool so that nothing bound to one instance
can leak into another (see RedisConnection.reopen).

Values are serialized with pickle so that nested containers, booleans,
numbers and composite objects round-trip exactly; the store never looks
inside a payload.

Requires: redis>=5.0 with asyncio support
"""

from __future__ import annotations

import logging
import pickle
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from redis import exceptions as redis_exceptions
from redis.asyncio import Redis

from ..config import StoreConfig
from ..errors import AuthenticationError, CacheConnectionError, StoreError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 6379

ClientFactory = Callable[..., Redis]

# Errors raised by redis-py (and the socket layer underneath it) for a failed round trip
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (redis_exceptions.RedisError, OSError)


def parse_server(server: str) -> dict[str, Any]:
    """
    Turn a server address into redis client keyword arguments.

    Accepted forms: "host", "host:port", "host:port/db", "[ipv6]:port"
    and an absolute unix socket path ("/var/run/redis.sock").
    """
    server = server.strip()
    if server.startswith("/"):
        return {"unix_socket_path": server}

    address, _, db = server.partition("/")
    host, port = address, DEFAULT_PORT
    if address.startswith("["):
        end = address.find("]")
        host = address[1:end]
        rest = address[end + 1 :]
        if rest.startswith(":"):
            port = int(rest[1:])
    elif address.count(":") == 1:
        host, _, port_text = address.partition(":")
        port = int(port_text)

    kwargs: dict[str, Any] = {"host": host, "port": port}
    if db:
        kwargs["db"] = int(db)
    return kwargs


@contextmanager
def store_errors(operation: str, **details: Any) -> Iterator[None]:
    """Translate transport failures raised inside the block into StoreError."""
    try:
        yield
    except TRANSPORT_ERRORS as e:
        logger.error(
            f"Redis {operation} failed: {e}",
            extra={"operation": operation, "error": str(e), **details},
            exc_info=True,
        )
        raise StoreError(operation, str(e), details={"error": str(e), **details}) from e


class RedisConnection:
    """
    A single store instance's session with the Redis server.

    The client is created lazily by connect(); until then `client` raises
    CacheConnectionError.
    """

    def __init__(
        self,
        server: str,
        password: str | None = None,
        socket_timeout: int = 5,
        max_connections: int = 10,
        client_factory: ClientFactory | None = None,
    ) -> None:
        """
        Initialize the connection manager.

        Args:
            server: Address of the Redis server (see parse_server)
            password: Credential sent with AUTH, if the server requires one
            socket_timeout: Socket timeout in seconds
            max_connections: Connection pool size
            client_factory: Callable building the client (defaults to redis.asyncio.Redis)
        """
        if not server:
            raise ValueError("server is required")

        self.server = server
        self._password = password
        self._socket_timeout = socket_timeout
        self._max_connections = max_connections
        self._client_factory: ClientFactory = client_factory or Redis
        self._client: Redis | None = None

    @classmethod
    def from_config(cls, config: StoreConfig, client_factory: ClientFactory | None = None) -> RedisConnection:
        if not config.server:
            raise ValueError("server is required")
        return cls(
            server=config.server,
            password=config.password,
            socket_timeout=config.socket_timeout,
            max_connections=config.max_connections,
            client_factory=client_factory,
        )

    @property
    def has_credential(self) -> bool:
        return self._password is not None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> Redis:
        if self._client is None:
            raise CacheConnectionError(self.server, reason="not connected")
        return self._client

    # ------------ Lifecycle ------------

    async def connect(self) -> Redis:
        """
        Create the client and verify the server answers.

        Returns:
            The connected redis client

        Raises:
            AuthenticationError: If the server refuses the credential
            CacheConnectionError: If the server cannot be reached
        """
        try:
            kwargs = parse_server(self.server)
        except ValueError as e:
            raise CacheConnectionError(self.server, reason=f"invalid address: {e}") from e

        client = self._client_factory(
            **kwargs,
            password=self._password,
            socket_timeout=self._socket_timeout,
            max_connections=self._max_connections,
            decode_responses=False,
        )
        try:
            await client.ping()
        except redis_exceptions.AuthenticationError as e:
            await self._discard(client)
            logger.error(f"Redis rejected credentials for {self.server}", extra={"server": self.server})
            raise AuthenticationError(self.server, reason="authentication failed") from e
        except TRANSPORT_ERRORS as e:
            await self._discard(client)
            logger.error(
                f"Failed to connect to Redis at {self.server}: {e}",
                extra={"server": self.server, "error": str(e)},
            )
            raise CacheConnectionError(self.server, details={"error": str(e)}, reason=str(e)) from e

        self._client = client
        logger.debug(f"Connected to Redis at {self.server}")
        return client

    async def authenticate(self) -> None:
        """
        Send AUTH with the configured credential.

        Only meaningful when a password is configured; a no-op otherwise.

        Raises:
            AuthenticationError: If the server refuses the credential
        """
        if self._password is None:
            return
        try:
            await self.client.auth(self._password)
        except TRANSPORT_ERRORS as e:
            logger.error(
                f"Redis AUTH failed for {self.server}: {e}",
                extra={"server": self.server, "error": str(e)},
            )
            raise AuthenticationError(self.server, details={"error": str(e)}, reason="authentication failed") from e

    async def health_check(self) -> bool:
        """PING the server. Never raises; any failure is reported as False."""
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except Exception as e:
            logger.warning(f"Redis health check failed for {self.server}: {e}", extra={"error": str(e)})
            return False

    def reopen(self) -> RedisConnection:
        """Return a new, unconnected manager with the same settings."""
        return RedisConnection(
            server=self.server,
            password=self._password,
            socket_timeout=self._socket_timeout,
            max_connections=self._max_connections,
            client_factory=self._client_factory,
        )

    async def close(self) -> None:
        """Close the client and release its pool."""
        client, self._client = self._client, None
        if client is not None:
            await self._discard(client)
            logger.debug(f"Closed Redis connection to {self.server}")

    @staticmethod
    async def _discard(client: Redis) -> None:
        try:
            await client.aclose()
        except Exception as e:
            logger.warning(f"Error closing Redis client: {e}", extra={"error": str(e)})
        try:
            await client.connection_pool.disconnect()
        except Exception as e:
            logger.warning(f"Error disconnecting Redis connection pool: {e}", extra={"error": str(e)})

    # ------------ Serialization ------------

    @staticmethod
    def dumps(value: Any) -> bytes:
        """Serialize a value into an opaque payload."""
        return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    @staticmethod
    def loads(payload: bytes) -> Any:
        """Deserialize a payload produced by dumps()."""
        return pickle.loads(payload)
