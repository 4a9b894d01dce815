"""Distinct counting per key: one HyperLogLog for every key seen.

Answers questions like "how many distinct agents hit domain X?" or
"how many distinct source IPs per endpoint?" in O(1) per item. Each
key costs 2^p bytes no matter how many items flow through it, so the
memory bill is (number of keys) * 2^p rather than the number of
distinct (key, item) pairs.

Snapshots map each key to the sketch's text form, which makes them
plain JSON-serializable dicts. Counters built on different hosts can
be merged key by key as long as they share a precision.
"""

from __future__ import annotations

import logging

from hll_lite.hashing.adapters import get_hasher
from hll_lite.sketch.codec import decode_text, encode_text
from hll_lite.sketch.hyperloglog import HyperLogLog, PrecisionMismatchError

log = logging.getLogger(__name__)


class KeyedDistinctCounter:
    """Approximate COUNT(DISTINCT item) GROUP BY key.

    Parameters:
        p: HyperLogLog precision for every per-key sketch (default 11).
        algorithm: Hash used for items, "sha256" or "fnv1a".
    """

    def __init__(self, p: int = 11, algorithm: str = "sha256") -> None:
        # Validate eagerly so a bad precision fails here, not on first add.
        HyperLogLog(p)
        self._p = p
        self._algorithm = algorithm
        self._hasher = get_hasher(algorithm)
        self._sketches: dict[str, HyperLogLog] = {}
        self._items_processed = 0

    @property
    def precision(self) -> int:
        return self._p

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def items_processed(self) -> int:
        return self._items_processed

    def add(self, key: str, item: str | bytes) -> None:
        """Record that `item` was seen under `key`."""
        self.add_hash(key, self._hasher(item))

    def add_hash(self, key: str, value: int) -> None:
        sketch = self._sketches.get(key)
        if sketch is None:
            log.debug("new sketch for key %r (p=%d)", key, self._p)
            sketch = HyperLogLog(self._p)
            self._sketches[key] = sketch
        sketch.add_hash(value)
        self._items_processed += 1

    def unique(self, key: str) -> int:
        """Estimated distinct items under a key. 0 for unseen keys."""
        sketch = self._sketches.get(key)
        if sketch is None:
            return 0
        return sketch.count()

    def keys(self) -> list[str]:
        return list(self._sketches)

    def sketch(self, key: str) -> HyperLogLog | None:
        """A copy of the key's sketch, or None if the key was never seen."""
        sketch = self._sketches.get(key)
        return sketch.copy() if sketch is not None else None

    def merge(self, other: KeyedDistinctCounter) -> None:
        """Union another counter into this one, key by key."""
        if other._p != self._p:
            raise PrecisionMismatchError(self._p, other._p)
        for key, theirs in other._sketches.items():
            ours = self._sketches.get(key)
            if ours is None:
                self._sketches[key] = theirs.copy()
            else:
                ours.merge(theirs)
        self._items_processed += other._items_processed

    def memory_report(self) -> dict[str, int]:
        """Report approximate register memory."""
        total = sum(s.memory_bytes() for s in self._sketches.values())
        return {
            "keys": len(self._sketches),
            "bytes_per_key": 1 << self._p,
            "total_bytes": total,
        }

    def to_snapshot(self) -> dict[str, str]:
        """Key -> base64 text form of its sketch."""
        return {key: encode_text(s) for key, s in self._sketches.items()}

    @classmethod
    def from_snapshot(
        cls,
        snapshot: dict[str, str],
        algorithm: str = "sha256",
        p: int | None = None,
    ) -> KeyedDistinctCounter:
        """Rebuild a counter from to_snapshot output.

        The precision is derived from the stored sketches. An empty
        snapshot needs `p` (default 11). Mixed precisions raise
        PrecisionMismatchError. The items_processed tally is not part
        of the snapshot and restarts at 0.
        """
        sketches = {key: decode_text(text) for key, text in snapshot.items()}
        precisions = {s.precision for s in sketches.values()}
        if p is not None:
            precisions.add(p)
        if len(precisions) > 1:
            ordered = sorted(precisions)
            raise PrecisionMismatchError(ordered[0], ordered[-1])
        counter = cls(p=precisions.pop() if precisions else 11, algorithm=algorithm)
        counter._sketches = sketches
        return counter
