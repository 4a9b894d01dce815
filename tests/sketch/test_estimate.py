"""Tests for the three-regime cardinality formula."""
from __future__ import annotations

import math

from hll_lite.sketch.estimate import (
    MAX_ESTIMATE,
    TWO_32,
    alpha,
    count_zeros,
    estimate_cardinality,
    linear_counting,
    raw_estimate,
)


class TestAlpha:
    def test_special_cases(self):
        assert alpha(16) == 0.673
        assert alpha(32) == 0.697
        assert alpha(64) == 0.709

    def test_general_formula(self):
        assert alpha(2048) == 0.7213 / (1.0 + 1.079 / 2048)
        assert 0.72 < alpha(65536) < 0.7213


class TestRegimes:
    def test_empty_vector_is_zero(self):
        assert raw_estimate([]) == 0.0
        assert estimate_cardinality([]) == 0

    def test_all_zero_registers(self):
        assert estimate_cardinality(bytes(2048)) == 0

    def test_linear_counting(self):
        registers = [0] * 4096
        registers[10] = 3
        registers[20] = 1
        assert count_zeros(registers) == 4094
        assert estimate_cardinality(registers) == int(linear_counting(4096, 4094))
        assert estimate_cardinality(registers) == 2

    def test_small_range_without_zeros_falls_through_to_raw(self):
        registers = [1] * 16
        # raw = 0.673 * 256 / 8 = 21.5 <= 2.5 * 16, but no register is zero
        assert estimate_cardinality(registers) == 21

    def test_mid_range_returns_raw(self):
        m = 1 << 16
        registers = [5] * m
        raw = alpha(m) * m * m / (m * 2.0 ** -5)
        assert 2.5 * m < raw < TWO_32 / 30
        assert estimate_cardinality(registers) == int(raw)

    def test_large_range_correction(self):
        m = 1 << 16
        registers = [12] * m
        raw = raw_estimate(registers)
        assert TWO_32 / 30 <= raw < TWO_32
        expected = int(-TWO_32 * math.log(1.0 - raw / TWO_32))
        assert estimate_cardinality(registers) == expected
        assert expected > raw

    def test_saturates_past_hash_space(self):
        registers = [29] * 16
        assert raw_estimate(registers) >= TWO_32
        assert estimate_cardinality(registers) == MAX_ESTIMATE
