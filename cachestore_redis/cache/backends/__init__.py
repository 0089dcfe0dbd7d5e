"""Addressing strategies mapping logical keys onto Redis storage."""

from ...config import AddressingStrategy
from .base import KeyAddressing
from .flat import FlatKeyAddressing
from .hashed import HashedContainerAddressing

ADDRESSING: dict[AddressingStrategy, type[KeyAddressing]] = {
    AddressingStrategy.FLAT: FlatKeyAddressing,
    AddressingStrategy.HASHED: HashedContainerAddressing,
}

__all__ = ["ADDRESSING", "KeyAddressing", "FlatKeyAddressing", "HashedContainerAddressing"]
