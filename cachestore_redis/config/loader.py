"""
cachestore-redis — Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a singleton configuration instance for the runtime.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import Settings

logger = logging.getLogger(__name__)

_config_instance: Settings | None = None


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> Settings:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated Settings instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    if env_file:
        env_path = Path(env_file)
    else:
        env_path = Path.cwd() / ".env"

    if env_path.exists():
        logger.info(f"Loading environment from {env_path}")
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                f"Failed to load .env file from {env_path}: {e}",
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    config_dict = {
        "environment": os.getenv("ENVIRONMENT", "development"),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "store": {
            "server": os.getenv("CACHESTORE_REDIS_SERVER"),
            "prefix": os.getenv("CACHESTORE_REDIS_PREFIX", ""),
            "password": os.getenv("CACHESTORE_REDIS_PASSWORD"),
            "strategy": os.getenv("CACHESTORE_REDIS_STRATEGY", "flat"),
            "socket_timeout": int(os.getenv("CACHESTORE_REDIS_SOCKET_TIMEOUT", "5")),
            "max_connections": int(os.getenv("CACHESTORE_REDIS_MAX_CONNECTIONS", "10")),
        },
        "test_server": os.getenv("CACHESTORE_REDIS_TEST_SERVER") or None,
    }

    try:
        _config_instance = Settings(**config_dict)  # type: ignore[arg-type]
        logger.info(
            f"Configuration loaded successfully (environment: {_config_instance.environment})",
            extra={
                "environment": _config_instance.environment,
                "strategy": _config_instance.store.strategy.value,
                "server_configured": _config_instance.store.is_configured,
            },
        )
        return _config_instance
    except ValidationError as e:
        logger.error(
            f"Configuration validation failed: {e}",
            extra={"validation_errors": e.errors(include_url=False), "config_dict_keys": list(config_dict.keys())},
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables and configuration.",
            details={"validation_errors": e.errors(include_url=False, include_context=False)},
        ) from e


def get_config() -> Settings:
    """
    Get the current configuration instance, loading it on first access.

    Returns:
        Current Settings instance
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> Settings:
    """
    Force reload configuration.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded Settings instance
    """
    return load_config(env_file=env_file, reload=True)
