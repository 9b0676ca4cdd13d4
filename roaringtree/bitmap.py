"""Compressed bitmap of 32-bit unsigned integers in the Roaring layout."""

from __future__ import annotations

import io
import operator
import struct
from bisect import bisect_left, bisect_right
from collections.abc import Iterable, Iterator
from typing import BinaryIO

from sortedcontainers import SortedDict

ARRAY_LIMIT = 4096
CONTAINER_SPAN = 1 << 16
BITMAP_BYTES = CONTAINER_SPAN // 8
SERIAL_COOKIE_NO_RUNCONTAINER = 12346
SERIAL_COOKIE = 12347
NO_OFFSET_THRESHOLD = 4

_U32_LIMIT = 1 << 32
_FULL_BITS = b"\xff" * BITMAP_BYTES
_BYTE_BITS = tuple(tuple(j for j in range(8) if byte >> j & 1) for byte in range(256))

_SET_OPS = {"or": operator.or_, "and": operator.and_, "sub": operator.sub, "xor": operator.xor}
_INT_OPS = {
    "or": operator.or_,
    "and": operator.and_,
    "sub": lambda a, b: a & ~b,
    "xor": operator.xor,
}


class NonSortedIntegersError(ValueError):
    """Raised when values handed to ``append`` are not strictly increasing."""

    def __init__(self, valid_until: int):
        super().__init__(f"values are not sorted, valid until index {valid_until}")
        self.valid_until = valid_until


def _bits_from_values(values: Iterable[int]) -> bytearray:
    bits = bytearray(BITMAP_BYTES)
    for value in values:
        bits[value >> 3] |= 1 << (value & 7)
    return bits


def _positions(bits) -> Iterator[int]:
    for index, byte in enumerate(bits):
        if byte:
            base = index << 3
            for offset in _BYTE_BITS[byte]:
                yield base + offset


def _positions_reversed(bits) -> Iterator[int]:
    for index in range(len(bits) - 1, -1, -1):
        byte = bits[index]
        if byte:
            base = index << 3
            for offset in reversed(_BYTE_BITS[byte]):
                yield base + offset


def _range_mask(low: int, high: int) -> int:
    return ((1 << (high - low + 1)) - 1) << low


def _read_exact(reader: BinaryIO, size: int) -> bytes:
    data = reader.read(size)
    if len(data) != size:
        raise ValueError("unexpected end of serialized data")
    return data


class _Container:
    """The values sharing one 16-bit high key: a sorted list or a bitset."""

    __slots__ = ("array", "bits", "card")

    def __init__(self, array=None, bits=None, card=0):
        self.array = array
        self.bits = bits
        self.card = card

    @classmethod
    def from_sorted(cls, values: list[int]) -> _Container:
        if len(values) > ARRAY_LIMIT:
            return cls(bits=_bits_from_values(values), card=len(values))
        return cls(array=values, card=len(values))

    @classmethod
    def from_int(cls, number: int) -> _Container:
        card = number.bit_count()
        if card == CONTAINER_SPAN:
            return cls(bits=_FULL_BITS, card=card)
        raw = number.to_bytes(BITMAP_BYTES, "little")
        if card > ARRAY_LIMIT:
            return cls(bits=raw, card=card)
        return cls(array=list(_positions(raw)), card=card)

    @classmethod
    def from_range(cls, low: int, high: int) -> _Container:
        if high - low + 1 > ARRAY_LIMIT:
            return cls.from_int(_range_mask(low, high))
        return cls(array=list(range(low, high + 1)), card=high - low + 1)

    def as_int(self) -> int:
        if self.array is not None:
            return int.from_bytes(_bits_from_values(self.array), "little")
        return int.from_bytes(self.bits, "little")

    def _adopt(self, other: _Container) -> None:
        self.array, self.bits, self.card = other.array, other.bits, other.card

    def _writable(self) -> bytearray:
        if not isinstance(self.bits, bytearray):
            self.bits = bytearray(self.bits)
        return self.bits

    def contains(self, low: int) -> bool:
        if self.array is not None:
            index = bisect_left(self.array, low)
            return index < len(self.array) and self.array[index] == low
        return bool(self.bits[low >> 3] >> (low & 7) & 1)

    def insert(self, low: int) -> bool:
        if self.array is not None:
            values = self.array
            index = bisect_left(values, low)
            if index < len(values) and values[index] == low:
                return False
            values.insert(index, low)
            self.card += 1
            if self.card > ARRAY_LIMIT:
                self.bits = _bits_from_values(values)
                self.array = None
            return True
        byte, bit = low >> 3, 1 << (low & 7)
        if self.bits[byte] & bit:
            return False
        self._writable()[byte] |= bit
        self.card += 1
        return True

    def remove(self, low: int) -> bool:
        if self.array is not None:
            values = self.array
            index = bisect_left(values, low)
            if index == len(values) or values[index] != low:
                return False
            del values[index]
            self.card -= 1
            return True
        byte, bit = low >> 3, 1 << (low & 7)
        if not self.bits[byte] & bit:
            return False
        self._writable()[byte] &= ~bit & 0xFF
        self.card -= 1
        if self.card <= ARRAY_LIMIT:
            self.array = list(_positions(self.bits))
            self.bits = None
        return True

    def insert_range(self, low: int, high: int) -> int:
        before = self.card
        self._adopt(_Container.from_int(self.as_int() | _range_mask(low, high)))
        return self.card - before

    def remove_range(self, low: int, high: int) -> int:
        if self.array is not None:
            first = bisect_left(self.array, low)
            last = bisect_right(self.array, high)
            del self.array[first:last]
            self.card -= last - first
            return last - first
        before = self.card
        self._adopt(_Container.from_int(self.as_int() & ~_range_mask(low, high)))
        return before - self.card

    def rank(self, low: int) -> int:
        if self.array is not None:
            return bisect_right(self.array, low)
        prefix = int.from_bytes(self.bits[: (low >> 3) + 1], "little")
        return (prefix & ((1 << (low + 1)) - 1)).bit_count()

    def select(self, n: int) -> int:
        if self.array is not None:
            return self.array[n]
        for index, byte in enumerate(self.bits):
            offsets = _BYTE_BITS[byte]
            if n < len(offsets):
                return (index << 3) + offsets[n]
            n -= len(offsets)
        raise IndexError(n)

    def min(self) -> int:
        return self.array[0] if self.array is not None else next(_positions(self.bits))

    def max(self) -> int:
        if self.array is not None:
            return self.array[-1]
        return next(_positions_reversed(self.bits))

    def __iter__(self) -> Iterator[int]:
        if self.array is not None:
            return iter(self.array)
        return _positions(self.bits)

    def __reversed__(self) -> Iterator[int]:
        if self.array is not None:
            return reversed(self.array)
        return _positions_reversed(self.bits)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _Container) or self.card != other.card:
            return False
        if self.array is not None and other.array is not None:
            return self.array == other.array
        return self.as_int() == other.as_int()

    __hash__ = None  # type: ignore[assignment]

    def copy(self) -> _Container:
        if self.array is not None:
            return _Container(array=list(self.array), card=self.card)
        return _Container(bits=bytes(self.bits), card=self.card)

    def intersection_len(self, other: _Container) -> int:
        if self.array is not None and other.array is not None:
            return len(set(self.array) & set(other.array))
        return (self.as_int() & other.as_int()).bit_count()

    def serialized_size(self) -> int:
        return 2 * self.card if self.card <= ARRAY_LIMIT else BITMAP_BYTES

    def payload(self) -> bytes:
        if self.card <= ARRAY_LIMIT:
            return struct.pack(f"<{self.card}H", *self)
        if self.bits is not None:
            return bytes(self.bits)
        return bytes(_bits_from_values(self.array))


def _combine(left: _Container, right: _Container, op: str) -> _Container:
    if left.array is not None and right.array is not None:
        return _Container.from_sorted(sorted(_SET_OPS[op](set(left.array), set(right.array))))
    return _Container.from_int(_INT_OPS[op](left.as_int(), right.as_int()))


def _check_value(value: int) -> int:
    if not 0 <= value < _U32_LIMIT:
        raise ValueError(f"{value} is not a 32-bit unsigned integer")
    return value


def _inclusive_bounds(start: int | None, stop: int | None) -> tuple[int, int] | None:
    first = 0 if start is None else start
    last = _U32_LIMIT - 1 if stop is None else min(stop, _U32_LIMIT) - 1
    if first < 0 or (stop is not None and stop < 0):
        raise ValueError("range bounds must not be negative")
    if last < first:
        return None
    return first, last


class RoaringBitmap:
    """A compressed set of 32-bit unsigned integers."""

    def __init__(self, values: Iterable[int] = ()):
        self._containers: SortedDict = SortedDict()
        for value in values:
            self.insert(value)

    @classmethod
    def full(cls) -> RoaringBitmap:
        """A bitmap holding every 32-bit value."""
        bitmap = cls()
        bitmap._containers = SortedDict(
            (key, _Container(bits=_FULL_BITS, card=CONTAINER_SPAN)) for key in range(CONTAINER_SPAN)
        )
        return bitmap

    @classmethod
    def from_sorted_iter(cls, values: Iterable[int]) -> RoaringBitmap:
        """Build from strictly increasing values; raises NonSortedIntegersError otherwise."""
        bitmap = cls()
        bitmap.append(values)
        return bitmap

    def insert(self, value: int) -> bool:
        """Add a value; True if it was not present."""
        _check_value(value)
        key, low = value >> 16, value & 0xFFFF
        container = self._containers.get(key)
        if container is None:
            self._containers[key] = _Container(array=[low], card=1)
            return True
        return container.insert(low)

    def insert_range(self, start: int | None = None, stop: int | None = None) -> int:
        """Add every value in ``[start, stop)``; returns how many were new."""
        bounds = _inclusive_bounds(start, stop)
        if bounds is None:
            return 0
        first, last = bounds
        first_key, last_key = first >> 16, last >> 16
        added = 0
        for key in range(first_key, last_key + 1):
            low = first & 0xFFFF if key == first_key else 0
            high = last & 0xFFFF if key == last_key else 0xFFFF
            container = self._containers.get(key)
            if container is None:
                container = _Container.from_range(low, high)
                self._containers[key] = container
                added += container.card
            else:
                added += container.insert_range(low, high)
        return added

    def push(self, value: int) -> bool:
        """Add a value only if it is greater than the current maximum."""
        current = self.max()
        if current is not None and value <= current:
            return False
        return self.insert(value)

    def append(self, values: Iterable[int]) -> int:
        """Add strictly increasing values greater than the maximum; returns the count."""
        previous = self.max()
        count = 0
        for value in values:
            if previous is not None and value <= previous:
                raise NonSortedIntegersError(count)
            self.insert(value)
            previous = value
            count += 1
        return count

    def remove(self, value: int) -> bool:
        """Remove a value; True if it was present."""
        if not 0 <= value < _U32_LIMIT:
            return False
        key = value >> 16
        container = self._containers.get(key)
        if container is None or not container.remove(value & 0xFFFF):
            return False
        if not container.card:
            del self._containers[key]
        return True

    def remove_range(self, start: int | None = None, stop: int | None = None) -> int:
        """Remove every value in ``[start, stop)``; returns how many were removed."""
        bounds = _inclusive_bounds(start, stop)
        if bounds is None:
            return 0
        first, last = bounds
        first_key, last_key = first >> 16, last >> 16
        removed = 0
        for key in list(self._containers.irange(first_key, last_key)):
            container = self._containers[key]
            low = first & 0xFFFF if key == first_key else 0
            high = last & 0xFFFF if key == last_key else 0xFFFF
            removed += container.remove_range(low, high)
            if not container.card:
                del self._containers[key]
        return removed

    def contains(self, value: int) -> bool:
        if not 0 <= value < _U32_LIMIT:
            return False
        container = self._containers.get(value >> 16)
        return container is not None and container.contains(value & 0xFFFF)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, int) and self.contains(value)

    def __len__(self) -> int:
        return sum(container.card for container in self._containers.values())

    def __iter__(self) -> Iterator[int]:
        for key, container in self._containers.items():
            base = key << 16
            for low in container:
                yield base | low

    def __reversed__(self) -> Iterator[int]:
        for key in reversed(self._containers):
            base = key << 16
            for low in reversed(self._containers[key]):
                yield base | low

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RoaringBitmap):
            return NotImplemented
        return list(self._containers.keys()) == list(other._containers.keys()) and all(
            self._containers[key] == other._containers[key] for key in self._containers
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        size = len(self)
        if size < 16:
            return f"RoaringBitmap<{list(self)}>"
        return f"RoaringBitmap<{size} values between {self.min()} and {self.max()}>"

    def copy(self) -> RoaringBitmap:
        clone = RoaringBitmap()
        clone._containers = SortedDict(
            (key, container.copy()) for key, container in self._containers.items()
        )
        return clone

    __copy__ = copy

    def clear(self) -> None:
        self._containers.clear()

    def is_empty(self) -> bool:
        return not self._containers

    def is_full(self) -> bool:
        return len(self._containers) == CONTAINER_SPAN and all(
            container.card == CONTAINER_SPAN for container in self._containers.values()
        )

    def min(self) -> int | None:
        if not self._containers:
            return None
        key, container = self._containers.peekitem(0)
        return (key << 16) | container.min()

    def max(self) -> int | None:
        if not self._containers:
            return None
        key, container = self._containers.peekitem(-1)
        return (key << 16) | container.max()

    def rank(self, value: int) -> int:
        """Number of values less than or equal to ``value``."""
        key = value >> 16
        total = sum(
            self._containers[k].card
            for k in self._containers.irange(maximum=key, inclusive=(True, False))
        )
        container = self._containers.get(key)
        if container is not None:
            total += container.rank(value & 0xFFFF)
        return total

    def select(self, n: int) -> int | None:
        """The ``n``-th smallest value, or None if there are not that many."""
        if n < 0:
            return None
        for key, container in self._containers.items():
            if n < container.card:
                return (key << 16) | container.select(n)
            n -= container.card
        return None

    def is_subset(self, other: RoaringBitmap) -> bool:
        for key, container in self._containers.items():
            theirs = other._containers.get(key)
            if theirs is None or container.intersection_len(theirs) != container.card:
                return False
        return True

    def is_superset(self, other: RoaringBitmap) -> bool:
        return other.is_subset(self)

    def is_disjoint(self, other: RoaringBitmap) -> bool:
        return self.intersection_len(other) == 0

    def intersection_len(self, other: RoaringBitmap) -> int:
        return sum(
            container.intersection_len(other._containers[key])
            for key, container in self._containers.items()
            if key in other._containers
        )

    def union_len(self, other: RoaringBitmap) -> int:
        return len(self) + len(other) - self.intersection_len(other)

    def difference_len(self, other: RoaringBitmap) -> int:
        return len(self) - self.intersection_len(other)

    def symmetric_difference_len(self, other: RoaringBitmap) -> int:
        return len(self) + len(other) - 2 * self.intersection_len(other)

    def __or__(self, other):
        if not isinstance(other, RoaringBitmap):
            return NotImplemented
        result = self.copy()
        result |= other
        return result

    def __and__(self, other):
        if not isinstance(other, RoaringBitmap):
            return NotImplemented
        result = self.copy()
        result &= other
        return result

    def __sub__(self, other):
        if not isinstance(other, RoaringBitmap):
            return NotImplemented
        result = self.copy()
        result -= other
        return result

    def __xor__(self, other):
        if not isinstance(other, RoaringBitmap):
            return NotImplemented
        result = self.copy()
        result ^= other
        return result

    def __ior__(self, other):
        if not isinstance(other, RoaringBitmap):
            return NotImplemented
        for key, theirs in other._containers.items():
            mine = self._containers.get(key)
            self._containers[key] = theirs.copy() if mine is None else _combine(mine, theirs, "or")
        return self

    def __iand__(self, other):
        if not isinstance(other, RoaringBitmap):
            return NotImplemented
        for key in list(self._containers):
            theirs = other._containers.get(key)
            result = None if theirs is None else _combine(self._containers[key], theirs, "and")
            if result is None or not result.card:
                del self._containers[key]
            else:
                self._containers[key] = result
        return self

    def __isub__(self, other):
        if not isinstance(other, RoaringBitmap):
            return NotImplemented
        for key, theirs in list(other._containers.items()):
            mine = self._containers.get(key)
            if mine is None:
                continue
            result = _combine(mine, theirs, "sub")
            if result.card:
                self._containers[key] = result
            else:
                del self._containers[key]
        return self

    def __ixor__(self, other):
        if not isinstance(other, RoaringBitmap):
            return NotImplemented
        for key, theirs in list(other._containers.items()):
            mine = self._containers.get(key)
            if mine is None:
                self._containers[key] = theirs.copy()
                continue
            result = _combine(mine, theirs, "xor")
            if result.card:
                self._containers[key] = result
            else:
                del self._containers[key]
        return self

    def serialized_size(self) -> int:
        """Size in bytes of the portable serialized form."""
        return 8 + sum(8 + c.serialized_size() for c in self._containers.values())

    def serialize_into(self, writer: BinaryIO) -> None:
        """Write the portable serialized form to a binary stream."""
        writer.write(self.to_bytes())

    def to_bytes(self) -> bytes:
        count = len(self._containers)
        parts = [struct.pack("<II", SERIAL_COOKIE_NO_RUNCONTAINER, count)]
        parts.extend(
            struct.pack("<HH", key, container.card - 1)
            for key, container in self._containers.items()
        )
        offset = 8 + 8 * count
        for container in self._containers.values():
            parts.append(struct.pack("<I", offset))
            offset += container.serialized_size()
        parts.extend(container.payload() for container in self._containers.values())
        return b"".join(parts)

    @classmethod
    def deserialize_from(cls, reader: BinaryIO) -> RoaringBitmap:
        """Read a bitmap from a binary stream, validating its contents."""
        return cls._deserialize(reader, checked=True)

    @classmethod
    def deserialize_unchecked_from(cls, reader: BinaryIO) -> RoaringBitmap:
        """Read a bitmap from a binary stream without validating its contents."""
        return cls._deserialize(reader, checked=False)

    @classmethod
    def from_bytes(cls, data: bytes) -> RoaringBitmap:
        return cls.deserialize_from(io.BytesIO(data))

    @classmethod
    def _deserialize(cls, reader: BinaryIO, checked: bool) -> RoaringBitmap:
        (cookie,) = struct.unpack("<I", _read_exact(reader, 4))
        if cookie == SERIAL_COOKIE_NO_RUNCONTAINER:
            (size,) = struct.unpack("<I", _read_exact(reader, 4))
            run_flags = b""
        elif cookie & 0xFFFF == SERIAL_COOKIE:
            size = (cookie >> 16) + 1
            run_flags = _read_exact(reader, (size + 7) // 8)
        else:
            raise ValueError("unknown cookie value")
        if size > CONTAINER_SPAN:
            raise ValueError("size is greater than supported")
        header = struct.unpack(f"<{2 * size}H", _read_exact(reader, 4 * size))
        if not run_flags or size >= NO_OFFSET_THRESHOLD:
            _read_exact(reader, 4 * size)

        bitmap = cls()
        previous = -1
        for index in range(size):
            key, card = header[2 * index], header[2 * index + 1] + 1
            if checked and key <= previous:
                raise ValueError("container keys are not sorted")
            previous = key
            if run_flags and run_flags[index >> 3] >> (index & 7) & 1:
                (n_runs,) = struct.unpack("<H", _read_exact(reader, 2))
                runs = struct.unpack(f"<{2 * n_runs}H", _read_exact(reader, 4 * n_runs))
                number = 0
                for start, length in zip(runs[::2], runs[1::2]):
                    if checked and start + length > 0xFFFF:
                        raise ValueError("run container overflows its key")
                    number |= _range_mask(start, min(start + length, 0xFFFF))
                container = _Container.from_int(number)
            elif card <= ARRAY_LIMIT:
                values = list(struct.unpack(f"<{card}H", _read_exact(reader, 2 * card)))
                if checked and any(a >= b for a, b in zip(values, values[1:])):
                    raise ValueError("array container values are not sorted")
                container = _Container(array=values, card=card)
            else:
                raw = _read_exact(reader, BITMAP_BYTES)
                if checked and int.from_bytes(raw, "little").bit_count() != card:
                    raise ValueError("bitmap container cardinality mismatch")
                container = _Container(bits=raw, card=card)
            if container.card:
                bitmap._containers[key] = container
        return bitmap