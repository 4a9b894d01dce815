"""Distinct-counting helpers built on HyperLogLog.

Public API:
    KeyedDistinctCounter: one sketch per key (distinct items per group)
    ShardedDistinctCounter: per-shard sketches with per-shard locks,
        merged into one estimate on demand
"""

from hll_lite.analytics.keyed import KeyedDistinctCounter
from hll_lite.analytics.sharded import ShardedDistinctCounter

__all__ = [
    "KeyedDistinctCounter",
    "ShardedDistinctCounter",
]
