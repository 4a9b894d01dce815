"""Concrete Hash32 implementations.

    Sha256Hash32: first 4 bytes of SHA-256, big-endian. Slow but with
        no structure to exploit; the default for string items.
    Fnv1aHash32: 32-bit FNV-1a. Much cheaper per item and good enough
        for non-adversarial input such as log lines.
    PrecomputedHash32: wraps an integer hashed somewhere else (a
        database column, a murmur3 value from another service).

Strings are encoded as UTF-8 before hashing, so the same text always
lands in the same register regardless of platform.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from hll_lite.hashing.protocol import HASH32_MAX, check_hash32

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193


def _as_bytes(data: str | bytes) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def sha256_32(data: str | bytes) -> int:
    digest = hashlib.sha256(_as_bytes(data)).digest()
    return int.from_bytes(digest[:4], "big")


def fnv1a_32(data: str | bytes) -> int:
    h = _FNV32_OFFSET
    for byte in _as_bytes(data):
        h ^= byte
        h = (h * _FNV32_PRIME) & HASH32_MAX
    return h


@dataclass(frozen=True, slots=True)
class Sha256Hash32:
    data: str | bytes

    def sum32(self) -> int:
        return sha256_32(self.data)


@dataclass(frozen=True, slots=True)
class Fnv1aHash32:
    data: str | bytes

    def sum32(self) -> int:
        return fnv1a_32(self.data)


@dataclass(frozen=True, slots=True)
class PrecomputedHash32:
    """A hash value computed elsewhere. Validated on construction."""
    value: int

    def __post_init__(self) -> None:
        check_hash32(self.value)

    def sum32(self) -> int:
        return self.value


_ALGORITHMS = {
    "sha256": sha256_32,
    "fnv1a": fnv1a_32,
}

ALGORITHMS = tuple(sorted(_ALGORITHMS))


def get_hasher(algorithm: str):
    """Look up a `str | bytes -> int` hash function by name."""
    try:
        return _ALGORITHMS[algorithm]
    except KeyError:
        raise ValueError(
            f"unknown hash algorithm {algorithm!r}, expected one of {ALGORITHMS}"
        ) from None


def hash32(item: str | bytes, algorithm: str = "sha256") -> int:
    """Hash an item to an unsigned 32-bit integer with the named algorithm."""
    return get_hasher(algorithm)(item)
