"""HyperLogLog cardinality estimator over caller-supplied 32-bit hashes.

Answers the question: "How many distinct items went through here?"
without storing the items. A sketch with precision p keeps m = 2^p
one-byte registers, whatever the stream size, at the cost of roughly
1.04 / sqrt(m) relative error.

Each hash is split in two. The top p bits pick a register. The rest
are shifted up to the top of the word with a sentinel bit planted at
position p-1, so the remaining word is never all zero, and the
register keeps the maximum of (leading zeros + 1) it has seen:

    x      = 0x00010fff, p = 16
    index  = 0x0001
    w      = 0x0fff0000 | 0x8000 = 0x0fff8000
    rank   = clz(w) + 1 = 5

Registers only ever grow (or are all reset by clear()), which is what
makes merge a plain element-wise maximum: merging is commutative,
associative and idempotent, so shards can be folded together in any
order.

The sketch is a plain in-memory value and is not locked. Serialize
writers yourself, or keep one sketch per thread and merge them (see
hll_lite.analytics.sharded).

References:
    Flajolet et al., "HyperLogLog: the analysis of a near-optimal
    cardinality estimation algorithm", 2007.
"""

from __future__ import annotations

import array
import math
from collections.abc import Iterable
from typing import TYPE_CHECKING

from hll_lite.hashing.protocol import check_hash32
from hll_lite.sketch.bits import extract_bits, leading_zeros, width_mask
from hll_lite.sketch.estimate import count_zeros, estimate_cardinality

if TYPE_CHECKING:
    from hll_lite.hashing.protocol import Hash32

HASH_WIDTH = 32
MIN_PRECISION = 4
MAX_PRECISION = 16
MIN_REGISTERS = 1 << MIN_PRECISION
MAX_REGISTERS = 1 << MAX_PRECISION

_MASK32 = width_mask(HASH_WIDTH)


class InvalidPrecisionError(ValueError):
    """Raised when a precision outside [4, 16] is requested."""

    def __init__(self, precision: int) -> None:
        self.precision = precision
        super().__init__(
            f"precision must be between {MIN_PRECISION} and {MAX_PRECISION}, "
            f"got {precision}"
        )


class RegisterCountError(ValueError):
    """Raised when a register buffer has an unusable length."""

    def __init__(self, length: int, message: str) -> None:
        self.length = length
        super().__init__(message)


class RegisterCountOutOfRangeError(RegisterCountError):
    def __init__(self, length: int) -> None:
        super().__init__(
            length,
            f"number of registers out of range: {length} "
            f"(must be between {MIN_REGISTERS} and {MAX_REGISTERS})",
        )


class RegisterCountNotPowerOfTwoError(RegisterCountError):
    def __init__(self, length: int) -> None:
        super().__init__(
            length,
            f"invalid number of registers: {length} (must be a power of 2)",
        )


class PrecisionMismatchError(ValueError):
    """Raised when merging sketches built with different precisions."""

    def __init__(self, ours: int, theirs: int) -> None:
        self.ours = ours
        self.theirs = theirs
        super().__init__(
            f"Cannot merge HLLs with different precision: {ours} vs {theirs}"
        )


class EmptySketchError(ValueError):
    """Raised when an operation needs registers but the sketch has none."""


def _precision_for_length(length: int) -> int:
    """Validate a register-buffer length and return log2(length)."""
    if length < MIN_REGISTERS or length > MAX_REGISTERS:
        raise RegisterCountOutOfRangeError(length)
    p = length.bit_length() - 1
    if (1 << p) != length:
        raise RegisterCountNotPowerOfTwoError(length)
    return p


def _to_register_array(buffer: Iterable[int] | bytes) -> array.array:
    try:
        return array.array("B", buffer)
    except OverflowError as exc:
        raise ValueError(f"register values must fit in a byte: {exc}") from exc


class HyperLogLog:
    """HyperLogLog cardinality estimator.

    Parameters:
        p: Precision. Uses 2^p registers, one byte each (default 11 =
           2048 registers = ~2 KB). Must be 4..16.

    Typical precision values:
        p=10: 1024 registers, ~1 KB, ~3.25% error
        p=11: 2048 registers, ~2 KB, ~2.30% error
        p=14: 16384 registers, ~16 KB, ~0.81% error
        p=16: 65536 registers, ~64 KB, ~0.41% error
    """

    __slots__ = ("_p", "_m", "_registers")
    __hash__ = None  # mutable value

    def __init__(self, p: int = 11) -> None:
        if not (MIN_PRECISION <= p <= MAX_PRECISION):
            raise InvalidPrecisionError(p)
        self._p = p
        self._m = 1 << p
        self._registers = array.array("B", bytes(self._m))

    @classmethod
    def from_registers(cls, buffer: Iterable[int] | bytes) -> HyperLogLog:
        """Build a sketch around an existing register buffer.

        The buffer length must be a power of two in [16, 65536]; the
        precision is derived from it. The buffer is copied, so later
        changes to it do not leak into the sketch.
        """
        registers = _to_register_array(buffer)
        p = _precision_for_length(len(registers))
        return cls._from_parts(registers, 1 << p, p)

    @classmethod
    def uninitialized(cls) -> HyperLogLog:
        """A sketch with no registers at all (m = 0, p = 0).

        It counts 0 and round-trips through the binary codec, but
        cannot take hashes or be text-encoded.
        """
        return cls._from_parts(array.array("B"), 0, 0)

    @classmethod
    def _from_parts(cls, registers: array.array, m: int, p: int) -> HyperLogLog:
        h = cls.__new__(cls)
        h._registers = registers
        h._m = m
        h._p = p
        return h

    @property
    def precision(self) -> int:
        return self._p

    @property
    def num_registers(self) -> int:
        return self._m

    @property
    def registers(self) -> bytes:
        """Snapshot of the raw registers, one byte per register."""
        return self._registers.tobytes()

    def is_initialized(self) -> bool:
        return self._m != 0

    def copy(self) -> HyperLogLog:
        """Independent copy; no state is shared with the original."""
        if self._m == 0:
            return HyperLogLog.uninitialized()
        try:
            return HyperLogLog.from_registers(self._registers)
        except RegisterCountError as exc:
            # Only reachable if the instance was corrupted after construction.
            raise RuntimeError(f"corrupted sketch cannot be copied: {exc}") from exc

    def clear(self) -> None:
        """Reset every register to 0, keeping the precision."""
        for i in range(self._m):
            self._registers[i] = 0

    def add(self, item: Hash32) -> None:
        """Add an item through its hash capability."""
        self.add_hash(item.sum32())

    def add_hash(self, value: int) -> None:
        """Add one unsigned 32-bit hash value."""
        if self._m == 0:
            raise EmptySketchError("cannot add to an uninitialized sketch")
        x = check_hash32(value)
        p = self._p
        idx = extract_bits(x, HASH_WIDTH, HASH_WIDTH - p)  # {x31,...,x32-p}
        w = ((x << p) & _MASK32) | (1 << (p - 1))
        rank = leading_zeros(w, HASH_WIDTH) + 1
        if rank > self._registers[idx]:
            self._registers[idx] = rank

    def update(self, values: Iterable[int]) -> None:
        """Add many raw hash values."""
        for value in values:
            self.add_hash(value)

    def merge(self, other: HyperLogLog) -> None:
        """Fold another sketch into this one (union).

        Afterwards this sketch estimates the cardinality of the union
        of both streams.
        """
        if self._p != other._p:
            raise PrecisionMismatchError(self._p, other._p)
        mine = self._registers
        for i, v in enumerate(other._registers):
            if v > mine[i]:
                mine[i] = v

    def count(self) -> int:
        """Estimate the number of distinct hashes added."""
        return estimate_cardinality(self._registers)

    def zero_registers(self) -> int:
        return count_zeros(self._registers)

    def memory_bytes(self) -> int:
        """Approximate memory used by the registers."""
        return self._m  # 1 byte per register

    def standard_error(self) -> float:
        """Theoretical standard error for this precision."""
        if self._m == 0:
            raise EmptySketchError("an uninitialized sketch has no error bound")
        return 1.04 / math.sqrt(self._m)

    # --- serialization, see hll_lite.sketch.codec ---

    def to_bytes(self) -> bytes:
        from hll_lite.sketch.codec import encode_binary

        return encode_binary(self)

    @classmethod
    def from_bytes(cls, data: bytes) -> HyperLogLog:
        from hll_lite.sketch.codec import decode_binary

        return decode_binary(data)

    def to_text(self) -> str:
        from hll_lite.sketch.codec import encode_text

        return encode_text(self)

    @classmethod
    def from_text(cls, text: str | bytes) -> HyperLogLog:
        from hll_lite.sketch.codec import decode_text

        return decode_text(text)

    def to_json(self) -> str:
        from hll_lite.sketch.codec import encode_json

        return encode_json(self)

    @classmethod
    def from_json(cls, document: str | bytes) -> HyperLogLog:
        from hll_lite.sketch.codec import decode_json

        return decode_json(document)

    def __reduce__(self):
        from hll_lite.sketch.codec import decode_binary

        return (decode_binary, (self.to_bytes(),))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HyperLogLog):
            return NotImplemented
        return (
            self._p == other._p
            and self._m == other._m
            and self._registers == other._registers
        )

    def __repr__(self) -> str:
        return f"HyperLogLog(p={self._p}, m={self._m})"
