"""Set algebra over partition maps: 32-bit partition keys mapped to bitmaps.

A partition map holds, for each high 32-bit key, the ``RoaringBitmap`` of the
low 32-bit halves of the values in that partition. Maps never keep empty
bitmaps, and the update functions here preserve that.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping

from .bitmap import RoaringBitmap

PartitionMap = Mapping[int, RoaringBitmap]
MutablePartitionMap = MutableMapping[int, RoaringBitmap]


def pairs(
    left: PartitionMap, right: PartitionMap
) -> Iterator[tuple[RoaringBitmap | None, RoaringBitmap | None]]:
    """Walk both maps in key order, pairing bitmaps that share a key.

    A key present on one side only gives ``None`` for the other side.
    """
    for key in sorted(left.keys() | right.keys()):
        yield left.get(key), right.get(key)


def is_disjoint(left: PartitionMap, right: PartitionMap) -> bool:
    """True if the two maps have no value in common."""
    return all(
        mine.is_disjoint(theirs)
        for mine, theirs in pairs(left, right)
        if mine is not None and theirs is not None
    )


def is_subset(left: PartitionMap, right: PartitionMap) -> bool:
    """True if every value of ``left`` is also in ``right``."""
    for mine, theirs in pairs(left, right):
        if mine is None:
            continue
        if theirs is None or not mine.is_subset(theirs):
            return False
    return True


def intersection_len(left: PartitionMap, right: PartitionMap) -> int:
    """Number of values held by both maps, without building the intersection."""
    return sum(
        mine.intersection_len(theirs)
        for mine, theirs in pairs(left, right)
        if mine is not None and theirs is not None
    )


def union_update(target: MutablePartitionMap, other: PartitionMap) -> None:
    """Add every value of ``other`` to ``target``."""
    for key, theirs in other.items():
        mine = target.get(key)
        if mine is None:
            target[key] = theirs.copy()
        else:
            mine |= theirs


def intersection_update(target: MutablePartitionMap, other: PartitionMap) -> None:
    """Keep in ``target`` only the values also found in ``other``."""
    for key in list(target.keys()):
        theirs = other.get(key)
        if theirs is None:
            del target[key]
            continue
        mine = target[key]
        mine &= theirs
        if mine.is_empty():
            del target[key]


def difference_update(target: MutablePartitionMap, other: PartitionMap) -> None:
    """Remove from ``target`` every value found in ``other``."""
    for key, theirs in other.items():
        mine = target.get(key)
        if mine is None:
            continue
        mine -= theirs
        if mine.is_empty():
            del target[key]


def symmetric_difference_update(target: MutablePartitionMap, other: PartitionMap) -> None:
    """Keep in ``target`` the values found in exactly one of the two maps."""
    for key, theirs in other.items():
        mine = target.get(key)
        if mine is None:
            target[key] = theirs.copy()
            continue
        mine ^= theirs
        if mine.is_empty():
            del target[key]