"""
cachestore-redis — Core Error Types

Defines the exception hierarchy for the Redis cache store adapter.
All exceptions inherit from CacheStoreError for consistent error handling.

Taxonomy:
- ConfigurationError: missing/invalid server or prefix
- CacheConnectionError: connect or authentication failure
- StoreError: transport failure in the middle of an operation

Logical absence ("key not found", "lock not held") is never an error and is
reported through normal return values.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes attached to serialized errors."""

    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    CONNECTION_FAILED = "CONNECTION_FAILED"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    STORE_FAILURE = "STORE_FAILURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class CacheStoreError(Exception):
    """Base exception for all cache store errors."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for logs and host error pages."""
        return {
            "error": self.__class__.__name__,
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(CacheStoreError):
    """Raised when configuration is invalid or missing."""

    error_code = ErrorCode.INVALID_CONFIGURATION


class CacheConnectionError(CacheStoreError):
    """Raised when the Redis server cannot be reached or rejects our credentials."""

    error_code = ErrorCode.CONNECTION_FAILED

    def __init__(self, server: str, details: dict[str, Any] | None = None, reason: str | None = None):
        message = f"Failed to connect to Redis server: {server}"
        if reason:
            message += f" ({reason})"
        error_details = details or {}
        error_details.setdefault("server", server)
        super().__init__(message, error_details)
        self.server = server


class AuthenticationError(CacheConnectionError):
    """Raised when AUTH is refused by the server."""

    error_code = ErrorCode.AUTHENTICATION_FAILED


class StoreError(CacheStoreError):
    """Raised when a cache or lock operation fails at the transport level."""

    error_code = ErrorCode.STORE_FAILURE

    def __init__(self, operation: str, message: str, details: dict[str, Any] | None = None):
        error_details = details or {}
        error_details.setdefault("operation", operation)
        super().__init__(f"Redis {operation} failed: {message}", error_details)
        self.operation = operation

