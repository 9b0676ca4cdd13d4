"""Compressed set of 64-bit unsigned integers built from 32-bit bitmaps."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from sortedcontainers import SortedDict

from . import partitions
from .bitmap import NonSortedIntegersError, RoaringBitmap
from .util import U32_MAX, U64_MAX, convert_range_to_inclusive, join, split

_PARTITIONS = U32_MAX + 1


def _check_value(value: int) -> int:
    if not 0 <= value <= U64_MAX:
        raise ValueError(f"{value} is not a 64-bit unsigned integer")
    return value


class RoaringTreemap:
    """A compressed set of 64-bit unsigned integers.

    Values are partitioned by their high 32 bits; each partition keeps the
    low 32 bits in a ``RoaringBitmap``.
    """

    def __init__(self, values: Iterable[int] = ()):
        self._map: SortedDict = SortedDict()
        self.extend(values)

    @classmethod
    def full(cls) -> RoaringTreemap:
        """A treemap holding every 64-bit value."""
        treemap = cls()
        treemap._map = SortedDict((key, RoaringBitmap.full()) for key in range(_PARTITIONS))
        return treemap

    @classmethod
    def from_sorted_iter(cls, values: Iterable[int]) -> RoaringTreemap:
        """Build from strictly increasing values; raises NonSortedIntegersError otherwise."""
        treemap = cls()
        treemap.append(values)
        return treemap

    @classmethod
    def from_bitmaps(cls, pairs: Iterable[tuple[int, RoaringBitmap]]) -> RoaringTreemap:
        """Build from ``(partition, bitmap)`` pairs; later partitions replace earlier ones."""
        treemap = cls()
        for key, bitmap in pairs:
            if not 0 <= key <= U32_MAX:
                raise ValueError(f"{key} is not a 32-bit partition number")
            treemap._map[key] = bitmap
        return treemap

    def bitmaps(self) -> Iterator[tuple[int, RoaringBitmap]]:
        """Iterate over ``(partition, bitmap)`` pairs in partition order."""
        return iter(self._map.items())

    def insert(self, value: int) -> bool:
        """Add a value; True if it was not present."""
        hi, lo = split(_check_value(value))
        bitmap = self._map.get(hi)
        if bitmap is None:
            bitmap = self._map[hi] = RoaringBitmap()
        return bitmap.insert(lo)

    def insert_range(self, start: int | None = None, stop: int | None = None) -> int:
        """Add every value in ``[start, stop)``; returns how many were new."""
        bounds = convert_range_to_inclusive(start, stop)
        if bounds is None:
            return 0
        start_hi, start_lo = split(bounds[0])
        end_hi, end_lo = split(bounds[1])
        counter = 0
        for hi in range(start_hi, end_hi + 1):
            if hi == start_hi or hi == end_hi:
                low = start_lo if hi == start_hi else 0
                high = end_lo if hi == end_hi else U32_MAX
                bitmap = self._map.get(hi)
                if bitmap is None:
                    bitmap = self._map[hi] = RoaringBitmap()
                counter += bitmap.insert_range(low, high + 1)
            else:
                previous = self._map.get(hi)
                self._map[hi] = RoaringBitmap.full()
                counter += _PARTITIONS - (0 if previous is None else len(previous))
        return counter

    def push(self, value: int) -> bool:
        """Add a value only if it is greater than the maximum of its partition."""
        hi, lo = split(_check_value(value))
        bitmap = self._map.get(hi)
        if bitmap is None:
            bitmap = self._map[hi] = RoaringBitmap()
        return bitmap.push(lo)

    def _push_unchecked(self, value: int) -> None:
        hi, lo = split(value)
        if self._map:
            key, bitmap = self._map.peekitem(-1)
            if key == hi:
                bitmap.insert(lo)
                return
            if key > hi:
                raise AssertionError("last bitmap key > key of value")
        bitmap = RoaringBitmap()
        bitmap.insert(lo)
        self._map[hi] = bitmap

    def append(self, values: Iterable[int]) -> int:
        """Add strictly increasing values greater than the maximum; returns the count.

        Raises NonSortedIntegersError carrying how many values were appended
        before the first out-of-order one.
        """
        previous = self.max()
        count = 0
        for value in values:
            _check_value(value)
            if previous is not None and value <= previous:
                raise NonSortedIntegersError(count)
            self._push_unchecked(value)
            previous = value
            count += 1
        return count

    def extend(self, values: Iterable[int]) -> None:
        """Insert every value of an iterable."""
        for value in values:
            self.insert(value)

    def remove(self, value: int) -> bool:
        """Remove a value; True if it was present."""
        if not 0 <= value <= U64_MAX:
            return False
        hi, lo = split(value)
        bitmap = self._map.get(hi)
        if bitmap is None or not bitmap.remove(lo):
            return False
        if bitmap.is_empty():
            del self._map[hi]
        return True

    def remove_range(self, start: int | None = None, stop: int | None = None) -> int:
        """Remove every value in ``[start, stop)``; returns how many were removed."""
        bounds = convert_range_to_inclusive(start, stop)
        if bounds is None:
            return 0
        start_hi, start_lo = split(bounds[0])
        end_hi, end_lo = split(bounds[1])
        removed = 0
        for key in list(self._map.irange(start_hi, end_hi)):
            bitmap = self._map[key]
            low = start_lo if key == start_hi else 0
            high = end_lo if key == end_hi else U32_MAX
            removed += bitmap.remove_range(low, high + 1)
            if bitmap.is_empty():
                del self._map[key]
        return removed

    def contains(self, value: int) -> bool:
        if not 0 <= value <= U64_MAX:
            return False
        hi, lo = split(value)
        bitmap = self._map.get(hi)
        return bitmap is not None and bitmap.contains(lo)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, int) and self.contains(value)

    def __len__(self) -> int:
        return sum(len(bitmap) for bitmap in self._map.values())

    def __iter__(self) -> Iterator[int]:
        for hi, bitmap in self._map.items():
            for lo in bitmap:
                yield join(hi, lo)

    def __reversed__(self) -> Iterator[int]:
        for hi in reversed(self._map):
            for lo in reversed(self._map[hi]):
                yield join(hi, lo)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RoaringTreemap):
            return NotImplemented
        return dict(self._map) == dict(other._map)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        size = len(self)
        if size < 16:
            return f"RoaringTreemap<{list(self)}>"
        return f"RoaringTreemap<{size} values between {self.min()} and {self.max()}>"

    def copy(self) -> RoaringTreemap:
        clone = RoaringTreemap()
        clone._map = SortedDict((key, bitmap.copy()) for key, bitmap in self._map.items())
        return clone

    __copy__ = copy

    def clear(self) -> None:
        self._map.clear()

    def is_empty(self) -> bool:
        return all(bitmap.is_empty() for bitmap in self._map.values())

    def is_full(self) -> bool:
        return len(self._map) == _PARTITIONS and all(
            bitmap.is_full() for bitmap in self._map.values()
        )

    def min(self) -> int | None:
        for hi, bitmap in self._map.items():
            low = bitmap.min()
            if low is not None:
                return join(hi, low)
        return None

    def max(self) -> int | None:
        for hi in reversed(self._map):
            high = self._map[hi].max()
            if high is not None:
                return join(hi, high)
        return None

    def rank(self, value: int) -> int:
        """Number of values less than or equal to ``value``."""
        if value < 0:
            return 0
        hi, lo = split(min(value, U64_MAX))
        total = 0
        for key in self._map.irange(maximum=hi):
            bitmap = self._map[key]
            total += bitmap.rank(lo) if key == hi else len(bitmap)
        return total

    def select(self, n: int) -> int | None:
        """The ``n``-th smallest value, or None if there are not that many."""
        if n < 0:
            return None
        for hi, bitmap in self._map.items():
            size = len(bitmap)
            if n < size:
                return join(hi, bitmap.select(n))
            n -= size
        return None

    def is_subset(self, other: RoaringTreemap) -> bool:
        return partitions.is_subset(self._map, other._map)

    def is_superset(self, other: RoaringTreemap) -> bool:
        return other.is_subset(self)

    def is_disjoint(self, other: RoaringTreemap) -> bool:
        return partitions.is_disjoint(self._map, other._map)

    def intersection_len(self, other: RoaringTreemap) -> int:
        return partitions.intersection_len(self._map, other._map)

    def union_len(self, other: RoaringTreemap) -> int:
        return len(self) + len(other) - self.intersection_len(other)

    def difference_len(self, other: RoaringTreemap) -> int:
        return len(self) - self.intersection_len(other)

    def symmetric_difference_len(self, other: RoaringTreemap) -> int:
        return len(self) + len(other) - 2 * self.intersection_len(other)

    def __or__(self, other):
        if not isinstance(other, RoaringTreemap):
            return NotImplemented
        result = self.copy()
        result |= other
        return result

    def __and__(self, other):
        if not isinstance(other, RoaringTreemap):
            return NotImplemented
        result = self.copy()
        result &= other
        return result

    def __sub__(self, other):
        if not isinstance(other, RoaringTreemap):
            return NotImplemented
        result = self.copy()
        result -= other
        return result

    def __xor__(self, other):
        if not isinstance(other, RoaringTreemap):
            return NotImplemented
        result = self.copy()
        result ^= other
        return result

    def __ior__(self, other):
        if not isinstance(other, RoaringTreemap):
            return NotImplemented
        partitions.union_update(self._map, other._map)
        return self

    def __iand__(self, other):
        if not isinstance(other, RoaringTreemap):
            return NotImplemented
        partitions.intersection_update(self._map, other._map)
        return self

    def __isub__(self, other):
        if not isinstance(other, RoaringTreemap):
            return NotImplemented
        partitions.difference_update(self._map, other._map)
        return self

    def __ixor__(self, other):
        if not isinstance(other, RoaringTreemap):
            return NotImplemented
        partitions.symmetric_difference_update(self._map, other._map)
        return self