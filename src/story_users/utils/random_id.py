"""
Random numeric identifiers.

IDs are cut from a fresh UUID4 on every call, so generators keep no state and can be shared by
concurrent requests. Uniqueness rests on the UUID4 randomness, not on a counter.
"""

import uuid
from typing import Protocol


class IDGenerator(Protocol):
    def uint32(self) -> int: ...

    def uint64(self) -> int: ...


class UUIDGenerator:
    """IDGenerator backed by `uuid.uuid4()`."""

    version = "v4"

    def uint64(self) -> int:
        """Unsigned 64-bit integer from the first 8 bytes (big-endian) of a UUID4."""
        return int.from_bytes(uuid.uuid4().bytes[:8], "big")

    def uint32(self) -> int:
        """Unsigned 32-bit integer from the first 4 bytes (big-endian) of a UUID4."""
        return int.from_bytes(uuid.uuid4().bytes[:4], "big")
