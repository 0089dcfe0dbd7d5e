"""
cachestore-redis — Key-Space Namer Tests

Pure-function tests for namespace derivation and physical key mapping.
"""

import string

import pytest

from cachestore_redis.cache import namespace as namer

PRINTABLE_KEYS = [
    "plain",
    "",
    "key:with:colons",
    "key-with-dashes",
    "key_with_underscores",
    "key.with.dots",
    "key/with/slashes",
    "glob*?[chars]\\",
    "spaces in key",
    string.printable,
    "-leading-delimiter",
    "Ünïcødé 世界",
]


class TestDeriveNamespace:
    def test_concatenates_prefix_name_and_hash(self) -> None:
        """Test namespace composition."""
        assert namer.derive_namespace("app", "main", "abc123") == "appmainabc123"

    def test_empty_prefix(self) -> None:
        """Test namespace without a prefix."""
        assert namer.derive_namespace("", "main", "abc123") == "mainabc123"

    def test_distinct_instance_names_give_distinct_namespaces(self) -> None:
        """Test that instance names separate namespaces."""
        a = namer.derive_namespace("app", "test", "h" * 32)
        b = namer.derive_namespace("app", "test2", "h" * 32)
        assert a != b


class TestPhysicalKeys:
    @pytest.mark.parametrize("key", PRINTABLE_KEYS)
    def test_round_trip(self, key: str) -> None:
        """from_physical(ns, to_physical(ns, key)) == key for printable keys."""
        ns = namer.derive_namespace("pfx", "store", "0123456789abcdef0123456789abcdef")
        assert namer.from_physical(ns, namer.to_physical(ns, key)) == key

    @pytest.mark.parametrize("char", list(string.printable))
    def test_round_trip_single_characters(self, char: str) -> None:
        """Test key mapping for every printable character."""
        assert namer.from_physical("ns", namer.to_physical("ns", char)) == char

    def test_physical_format(self) -> None:
        """Test the physical key format."""
        assert namer.to_physical("ns", "key") == "ns-key"

    def test_foreign_key_rejected(self) -> None:
        """Test that keys outside the namespace are rejected."""
        with pytest.raises(ValueError):
            namer.from_physical("ns", "other-key")


class TestPatterns:
    def test_glob_escape(self) -> None:
        """Test glob escaping."""
        assert namer.glob_escape("a*b?c[d]e\\f") == "a\\*b\\?c\\[d\\]e\\\\f"

    def test_match_pattern_whole_namespace(self) -> None:
        """Test the SCAN pattern for a whole namespace."""
        assert namer.match_pattern("ns") == "ns-*"

    def test_match_pattern_with_key_prefix(self) -> None:
        """Test the SCAN pattern for a key prefix."""
        assert namer.match_pattern("ns", "user") == "ns-user*"

    def test_match_pattern_escapes_instance_name(self) -> None:
        """Test that the SCAN pattern escapes the instance name."""
        pattern = namer.match_pattern("my*store")
        assert pattern == "my\\*store-*"
