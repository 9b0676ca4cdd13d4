"""Operations that combine many treemaps at once."""

from __future__ import annotations

import heapq
import operator
from collections.abc import Callable, Iterable
from functools import reduce
from itertools import groupby

from .bitmap import RoaringBitmap
from .treemap import RoaringTreemap

_Combine = Callable[[RoaringBitmap, RoaringBitmap], RoaringBitmap]
_by_key = operator.itemgetter(0)


def _fold(bitmaps: list[RoaringBitmap], combine: _Combine) -> RoaringBitmap:
    return reduce(combine, bitmaps[1:], bitmaps[0].copy())


def _simple_multi_op(treemaps: Iterable[RoaringTreemap], combine: _Combine) -> RoaringTreemap:
    """Combine every partition seen in any treemap, in key order."""
    streams = [treemap.bitmaps() for treemap in treemaps]
    merged = heapq.merge(*streams, key=_by_key)
    result = []
    for key, group in groupby(merged, key=_by_key):
        combined = _fold([bitmap for _, bitmap in group], combine)
        if not combined.is_empty():
            result.append((key, combined))
    return RoaringTreemap.from_bitmaps(result)


def _ordered_multi_op(treemaps: Iterable[RoaringTreemap], combine: _Combine) -> RoaringTreemap:
    """Combine, for each partition of the first treemap, the matching partitions of the rest."""
    iterator = iter(treemaps)
    first = next(iterator, None)
    if first is None:
        return RoaringTreemap()
    others = [dict(treemap.bitmaps()) for treemap in iterator]
    result = []
    for key, bitmap in first.bitmaps():
        bitmaps = [bitmap]
        bitmaps.extend(other.get(key) or RoaringBitmap() for other in others)
        combined = _fold(bitmaps, combine)
        if not combined.is_empty():
            result.append((key, combined))
    return RoaringTreemap.from_bitmaps(result)


def union(treemaps: Iterable[RoaringTreemap]) -> RoaringTreemap:
    """Values found in any of the treemaps."""
    return _simple_multi_op(treemaps, operator.ior)


def intersection(treemaps: Iterable[RoaringTreemap]) -> RoaringTreemap:
    """Values found in every one of the treemaps."""
    return _ordered_multi_op(treemaps, operator.iand)


def difference(treemaps: Iterable[RoaringTreemap]) -> RoaringTreemap:
    """Values of the first treemap found in none of the others."""
    return _ordered_multi_op(treemaps, operator.isub)


def symmetric_difference(treemaps: Iterable[RoaringTreemap]) -> RoaringTreemap:
    """Values found in an odd number of the treemaps."""
    return _simple_multi_op(treemaps, operator.ixor)