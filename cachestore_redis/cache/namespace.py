"""
cachestore-redis — Key-Space Namer

Pure functions deriving the namespace that isolates one cache definition's
entries from every other definition and instance sharing a Redis server.

    namespace = prefix + instance_name + definition_hash

Flat strategy: physical key = namespace + KEY_DELIMITER + logical key.
Hashed strategy: the namespace is the container (hash) key and the logical key
is used unchanged as the field name.
"""

import re

KEY_DELIMITER = "-"

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def derive_namespace(prefix: str, instance_name: str, definition_hash: str) -> str:
    """Build the namespace for an instance initialised against a definition."""
    return f"{prefix or ''}{instance_name}{definition_hash}"


def to_physical(namespace: str, key: str) -> str:
    """Map a logical key to the Redis key used by the flat strategy."""
    return f"{namespace}{KEY_DELIMITER}{key}"


def from_physical(namespace: str, physical_key: str) -> str:
    """
    Recover the logical key from a flat-strategy Redis key.

    Raises:
        ValueError: If the key does not belong to the namespace
    """
    head = f"{namespace}{KEY_DELIMITER}"
    if not physical_key.startswith(head):
        raise ValueError(f"Key {physical_key!r} is outside namespace {namespace!r}")
    return physical_key[len(head) :]


def glob_escape(text: str) -> str:
    """Escape Redis glob metacharacters so text matches only itself."""
    return _GLOB_SPECIAL.sub(r"\\\1", text)


def match_pattern(namespace: str, key_prefix: str = "") -> str:
    """SCAN/KEYS pattern matching every flat key in the namespace starting with key_prefix."""
    return glob_escape(to_physical(namespace, key_prefix)) + "*"
