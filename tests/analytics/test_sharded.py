"""Tests for the sharded distinct counter.

Covers: construction checks, shard routing, concurrent writers, and
that the aggregate equals one sketch fed the whole stream.
"""
from __future__ import annotations

import random
from concurrent.futures import ThreadPoolExecutor, wait

import pytest

from hll_lite.analytics.sharded import ShardedDistinctCounter
from hll_lite.hashing.adapters import sha256_32
from hll_lite.sketch.hyperloglog import HyperLogLog


class TestShardedBasics:
    @pytest.mark.parametrize("n", [0, -4, 3, 12])
    def test_invalid_shard_count(self, n):
        with pytest.raises(ValueError):
            ShardedDistinctCounter(num_shards=n)

    def test_empty(self):
        c = ShardedDistinctCounter(num_shards=4)
        assert c.num_shards == 4
        assert c.precision == 11
        assert c.count() == 0
        assert c.aggregate() == HyperLogLog(11)

    def test_explicit_shard(self):
        c = ShardedDistinctCounter(num_shards=4, p=12)
        c.add_hash(0x00010fff, shard=2)
        assert c.shard_count(2) == 1
        assert c.shard_count(0) == 0
        assert c.count() == 1

    def test_bad_shard_index(self):
        c = ShardedDistinctCounter(num_shards=4)
        with pytest.raises(ValueError):
            c.add("x", shard=4)
        with pytest.raises(ValueError):
            c.shard_count(-1)

    def test_hash_routing(self):
        c = ShardedDistinctCounter(num_shards=4, p=12)
        c.add_hash(0x00010ff2)
        assert c.shard_count(2) == 1

    def test_clear(self):
        c = ShardedDistinctCounter(num_shards=2)
        for i in range(100):
            c.add(f"item-{i}")
        c.clear()
        assert c.count() == 0


class TestShardedUnion:
    def test_aggregate_equals_single_stream(self):
        rng = random.Random(42)
        values = [rng.getrandbits(32) for _ in range(5000)]
        c = ShardedDistinctCounter(num_shards=8, p=12)
        whole = HyperLogLog(12)
        for i, v in enumerate(values):
            c.add_hash(v, shard=i % 8)
            whole.add_hash(v)
        assert c.aggregate() == whole

    def test_routing_does_not_change_union(self):
        pinned = ShardedDistinctCounter(num_shards=4, p=10)
        routed = ShardedDistinctCounter(num_shards=4, p=10)
        for i in range(1000):
            pinned.add(f"item-{i}", shard=0)
            routed.add(f"item-{i}")
        assert pinned.aggregate() == routed.aggregate()

    def test_aggregate_is_a_new_sketch(self):
        c = ShardedDistinctCounter(num_shards=2, p=12)
        c.add_hash(0x00010fff, shard=0)
        total = c.aggregate()
        total.add_hash(0x00020fff)
        assert c.count() == 1


class TestShardedConcurrency:
    def test_concurrent_writers(self):
        """8 threads, each pinned to its own shard, 2000 items each."""
        n_threads = 8
        n_items = 2000
        c = ShardedDistinctCounter(num_shards=n_threads, p=14)

        def writer(tid):
            for i in range(n_items):
                c.add(f"t{tid}-item-{i}", shard=tid)

        with ThreadPoolExecutor(max_workers=n_threads) as pool:
            futs = [pool.submit(writer, tid) for tid in range(n_threads)]
            wait(futs)
            for f in futs:
                f.result()

        expected = HyperLogLog(14)
        for tid in range(n_threads):
            for i in range(n_items):
                expected.add_hash(sha256_32(f"t{tid}-item-{i}"))
        assert c.aggregate() == expected

        est = c.count()
        assert 15_200 <= est <= 16_800, f"Expected ~16000, got {est}"

    def test_concurrent_routed_writers_and_readers(self):
        c = ShardedDistinctCounter(num_shards=4, p=12)
        counts: list[int] = []

        def writer(tid):
            for i in range(1000):
                c.add(f"w{tid}-{i}")

        def reader():
            for _ in range(20):
                counts.append(c.count())

        with ThreadPoolExecutor(max_workers=6) as pool:
            futs = [pool.submit(writer, t) for t in range(4)]
            futs += [pool.submit(reader) for _ in range(2)]
            wait(futs)
            for f in futs:
                f.result()

        assert all(n >= 0 for n in counts)
        est = c.count()
        assert 3_600 <= est <= 4_400, f"Expected ~4000, got {est}"
