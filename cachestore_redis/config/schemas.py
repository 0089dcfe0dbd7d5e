"""
cachestore-redis — Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
Invalid values (notably the key prefix) are rejected when the model is built,
never at first use.
"""

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigurationError

PREFIX_MAX_LENGTH = 5
PREFIX_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


class Environment(str, Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AddressingStrategy(str, Enum):
    """How logical keys are laid out on the Redis server."""

    FLAT = "flat"  # one Redis key per entry, namespace-prefixed
    HASHED = "hashed"  # one Redis hash per definition, entries are fields


class StoreConfig(BaseModel):
    """Configuration of a single Redis store instance."""

    server: str | None = Field(default=None, description="host, host:port, host:port/db or unix socket path")
    prefix: str = Field(default="", description="Operator-chosen key prefix")
    password: str | None = Field(default=None, description="Password sent with AUTH")
    strategy: AddressingStrategy = Field(default=AddressingStrategy.FLAT, description="Key addressing strategy")
    socket_timeout: int = Field(default=5, ge=1, description="Socket timeout in seconds")
    max_connections: int = Field(default=10, ge=1, description="Connection pool size per store instance")

    @field_validator("server", "password")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat empty strings from forms and env files as unset."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("prefix", mode="before")
    @classmethod
    def missing_prefix_to_empty(cls, v: Any) -> Any:
        """Host forms send an unset prefix as None."""
        return "" if v is None else v

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Restrict the prefix to a short alphanumeric/dash/underscore string."""
        v = v.strip()
        if not v:
            return ""
        if len(v) > PREFIX_MAX_LENGTH:
            raise ValueError(f"prefix must be at most {PREFIX_MAX_LENGTH} characters")
        if not PREFIX_PATTERN.match(v):
            raise ValueError("prefix may only contain letters, digits, '-' and '_'")
        return v

    @property
    def is_configured(self) -> bool:
        return self.server is not None

    @classmethod
    def from_mapping(cls, configuration: Mapping[str, Any] | None) -> "StoreConfig":
        """
        Build a StoreConfig from a host-supplied configuration mapping.

        Raises:
            ConfigurationError: If any value fails validation
        """
        try:
            return cls(**dict(configuration or {}))
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid Redis store configuration",
                details={"validation_errors": e.errors(include_url=False, include_context=False)},
            ) from e

    model_config = ConfigDict(validate_assignment=True)


class Settings(BaseModel):
    """Root configuration for cachestore-redis."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    store: StoreConfig = Field(default_factory=StoreConfig)
    test_server: str | None = Field(default=None, description="Redis server used by initialise_test_instance")

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)
