"""Helpers for splitting 64-bit values and normalising ranges."""

from __future__ import annotations

U32_MAX = 0xFFFF_FFFF
U64_MAX = 0xFFFF_FFFF_FFFF_FFFF


def split(value: int) -> tuple[int, int]:
    """Split a 64-bit value into its high and low 32-bit halves."""
    return (value >> 32) & U32_MAX, value & U32_MAX


def join(high: int, low: int) -> int:
    """Join two 32-bit halves into one 64-bit value."""
    return ((high & U32_MAX) << 32) | (low & U32_MAX)


def convert_range_to_inclusive(start: int | None, stop: int | None) -> tuple[int, int] | None:
    """Turn a half-open range ``[start, stop)`` into inclusive bounds.

    ``None`` for ``start`` means 0 and ``None`` for ``stop`` means up to the
    largest 64-bit value. Returns ``None`` when the range is empty.
    """
    first = 0 if start is None else start
    if first < 0 or first > U64_MAX:
        raise ValueError(f"range start {first} is outside the 64-bit range")
    if stop is None:
        last = U64_MAX
    else:
        if stop < 0 or stop > U64_MAX + 1:
            raise ValueError(f"range stop {stop} is outside the 64-bit range")
        if stop == 0:
            return None
        last = stop - 1
    if last < first:
        return None
    return first, last