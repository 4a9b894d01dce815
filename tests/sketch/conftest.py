"""Shared helpers for sketch tests."""
from __future__ import annotations

import random

from hll_lite.sketch.hyperloglog import HyperLogLog

SEED = 42

# Multiplicative (golden ratio) hashing: consecutive small integers land
# far apart in the top bits, so the first few never share a register.
GOLDEN32 = 0x9E3779B1

# Hashes that fill registers 1..5 of a p=16 sketch with rank 5.
FIVE_HASHES = [0x00010fff, 0x00020fff, 0x00030fff, 0x00040fff, 0x00050fff]


def golden_hash(i: int) -> int:
    return (i * GOLDEN32) & 0xFFFFFFFF


def random_sketch(p: int, n: int, seed: int = SEED) -> HyperLogLog:
    rng = random.Random(seed)
    h = HyperLogLog(p)
    for _ in range(n):
        h.add_hash(rng.getrandbits(32))
    return h
