"""Bit-range extraction and leading-zero counting for fixed-width hashes.

Python integers are unbounded, so every operation here is told the
width it should pretend to have. Bit positions use LSB-0 numbering and
ranges are half-open: extract_bits(x, hi, lo) returns bits lo..hi-1,
shifted down so bit lo lands at position 0.

    extract_bits(0xff037000, 32, 16) == 0xff03   # top 16 bits
    extract_bits(0xff037000, 16, 0)  == 0x7000   # bottom 16 bits

A span equal to the full width would be an undefined shift in C-like
languages. Here it is spelled out explicitly: the mask is all ones and
the value comes back unchanged (masked to width). An empty span
(hi == lo) always yields 0.
"""

from __future__ import annotations

SUPPORTED_WIDTHS = (32, 64)


def _check_width(width: int) -> None:
    if width not in SUPPORTED_WIDTHS:
        raise ValueError(f"width must be one of {SUPPORTED_WIDTHS}, got {width}")


def width_mask(width: int) -> int:
    """All-ones mask for the given integer width."""
    _check_width(width)
    return (1 << width) - 1


def extract_bits(value: int, hi: int, lo: int, width: int = 32) -> int:
    """Return bits [lo, hi) of value, shifted down to start at bit 0."""
    _check_width(width)
    if not (0 <= lo <= hi <= width):
        raise ValueError(
            f"bit range must satisfy 0 <= lo <= hi <= {width}, got hi={hi}, lo={lo}"
        )
    span = hi - lo
    if span == 0:
        return 0
    if span == width:
        # lo is necessarily 0 here
        return value & width_mask(width)
    mask = ((1 << span) - 1) << lo
    return (value & mask) >> lo


def leading_zeros(value: int, width: int = 32) -> int:
    """Number of zero bits above the highest set bit, within `width` bits.

    leading_zeros(0, w) == w. Bits above the width are ignored.
    """
    return width - (value & width_mask(width)).bit_length()
