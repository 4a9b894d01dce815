"""Tests for the Hash32 protocol and its adapters."""
from __future__ import annotations

import hashlib

import pytest

from hll_lite.hashing import (
    ALGORITHMS,
    Fnv1aHash32,
    Hash32,
    PrecomputedHash32,
    Sha256Hash32,
    check_hash32,
    fnv1a_32,
    get_hasher,
    hash32,
    sha256_32,
)


class TestFnv1a:
    @pytest.mark.parametrize(
        "data, expected",
        [
            (b"", 0x811C9DC5),
            (b"a", 0xE40C292C),
            (b"foobar", 0xBF9CF968),
        ],
    )
    def test_reference_vectors(self, data, expected):
        assert fnv1a_32(data) == expected

    def test_str_is_utf8(self):
        assert fnv1a_32("foobar") == fnv1a_32(b"foobar")
        assert fnv1a_32("é") == fnv1a_32("é".encode("utf-8"))


class TestSha256:
    def test_first_four_bytes_big_endian(self):
        assert sha256_32("abc") == 0xBA7816BF
        digest = hashlib.sha256(b"agent-001").digest()
        assert sha256_32(b"agent-001") == int.from_bytes(digest[:4], "big")

    def test_fits_in_32_bits(self):
        for i in range(100):
            assert 0 <= sha256_32(f"item-{i}") <= 0xFFFFFFFF


class TestProtocol:
    def test_adapters_satisfy_protocol(self):
        assert isinstance(Sha256Hash32("x"), Hash32)
        assert isinstance(Fnv1aHash32("x"), Hash32)
        assert isinstance(PrecomputedHash32(7), Hash32)

    def test_duck_typed_object_satisfies_protocol(self):
        class Constant:
            def sum32(self) -> int:
                return 42

        assert isinstance(Constant(), Hash32)
        assert not isinstance("plain string", Hash32)

    def test_adapter_values(self):
        assert Sha256Hash32("abc").sum32() == sha256_32("abc")
        assert Fnv1aHash32(b"a").sum32() == 0xE40C292C
        assert PrecomputedHash32(0x00010FFF).sum32() == 0x00010FFF

    @pytest.mark.parametrize("value", [-1, 1 << 32])
    def test_precomputed_rejects_out_of_range(self, value):
        with pytest.raises(ValueError):
            PrecomputedHash32(value)
        with pytest.raises(ValueError):
            check_hash32(value)


class TestLookup:
    def test_algorithms(self):
        assert ALGORITHMS == ("fnv1a", "sha256")
        assert get_hasher("sha256") is sha256_32
        assert get_hasher("fnv1a") is fnv1a_32
        assert hash32("abc") == sha256_32("abc")
        assert hash32("abc", "fnv1a") == fnv1a_32("abc")

    def test_unknown_algorithm(self):
        with pytest.raises(ValueError):
            hash32("abc", "md5")
