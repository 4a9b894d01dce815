"""The hash capability a sketch consumes.

A sketch never hashes anything itself. Callers hand it an object that
can produce one unsigned 32-bit integer, and the sketch trusts that
integer to be close to uniformly distributed. Any object with a
`sum32()` method qualifies; there is no base class to inherit from.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

HASH32_MAX = (1 << 32) - 1


@runtime_checkable
class Hash32(Protocol):
    """Anything that yields one unsigned 32-bit hash value."""

    def sum32(self) -> int: ...


def check_hash32(value: int) -> int:
    """Return value unchanged if it fits in an unsigned 32-bit integer."""
    if not (0 <= value <= HASH32_MAX):
        raise ValueError(
            f"hash value must be an unsigned 32-bit integer, got {value!r}"
        )
    return value
