"""Hash capability consumed by the sketches.

Public API:
    Hash32: protocol for "produces one unsigned 32-bit value"
    Sha256Hash32, Fnv1aHash32, PrecomputedHash32: ready-made adapters
    hash32: hash a str/bytes item with a named algorithm
    get_hasher: look up a hash function by name
"""

from hll_lite.hashing.adapters import (
    ALGORITHMS,
    Fnv1aHash32,
    PrecomputedHash32,
    Sha256Hash32,
    fnv1a_32,
    get_hasher,
    hash32,
    sha256_32,
)
from hll_lite.hashing.protocol import HASH32_MAX, Hash32, check_hash32

__all__ = [
    "ALGORITHMS",
    "HASH32_MAX",
    "Fnv1aHash32",
    "Hash32",
    "PrecomputedHash32",
    "Sha256Hash32",
    "check_hash32",
    "fnv1a_32",
    "get_hasher",
    "hash32",
    "sha256_32",
]
