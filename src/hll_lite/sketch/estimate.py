"""Cardinality formula for a 32-bit HyperLogLog register vector.

The raw estimate is a bias-corrected harmonic mean of 2^register:

    raw = alpha(m) * m^2 / sum(2^-r for r in registers)

It is only trusted in the middle of the range, so the final estimate
picks one of three regimes, evaluated in this order:

    1. raw <= 2.5 * m and some register is still 0:
       linear counting, m * ln(m / zeros)
    2. raw < 2^32 / 30:
       raw unchanged
    3. otherwise:
       large-range correction, -2^32 * ln(1 - raw / 2^32)

The correction in regime 3 diverges as raw approaches 2^32 and is
undefined past it. In that case the estimate saturates at MAX_ESTIMATE
(2^64 - 1), which is also the cap for any corrected value.

References:
    Flajolet et al., "HyperLogLog: the analysis of a near-optimal
    cardinality estimation algorithm", 2007.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

TWO_32 = float(1 << 32)
MAX_ESTIMATE = (1 << 64) - 1


def alpha(m: int) -> float:
    """Bias correction constant for m registers."""
    if m == 16:
        return 0.673
    if m == 32:
        return 0.697
    if m == 64:
        return 0.709
    return 0.7213 / (1.0 + 1.079 / m)


def count_zeros(registers: Sequence[int]) -> int:
    return sum(1 for r in registers if r == 0)


def linear_counting(m: int, zeros: int) -> float:
    """Small-range estimate from the number of still-empty registers."""
    return m * math.log(m / zeros)


def raw_estimate(registers: Sequence[int]) -> float:
    """Harmonic-mean estimate before any range correction.

    An empty register vector estimates 0.
    """
    m = len(registers)
    if m == 0:
        return 0.0
    indicator = sum(2.0 ** (-r) for r in registers)
    return alpha(m) * m * m / indicator


def _saturate(value: float) -> int:
    if value >= MAX_ESTIMATE:
        return MAX_ESTIMATE
    return int(value)


def estimate_cardinality(registers: Sequence[int]) -> int:
    """Pick the regime for this register vector and return an integer estimate."""
    m = len(registers)
    if m == 0:
        return 0

    est = raw_estimate(registers)
    if est <= 2.5 * m:
        zeros = count_zeros(registers)
        if zeros:
            return int(linear_counting(m, zeros))
        return int(est)
    if est < TWO_32 / 30.0:
        return int(est)
    if est >= TWO_32:
        return MAX_ESTIMATE
    return _saturate(-TWO_32 * math.log(1.0 - est / TWO_32))
