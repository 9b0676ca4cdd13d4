# roaringtree

Compressed sets of unsigned integers.

- `roaringtree.bitmap.RoaringBitmap` holds 32-bit values (0 to 2**32 - 1). Values sharing
  their high 16 bits are kept together, either as a sorted list or as a bitset.
- `roaringtree.treemap.RoaringTreemap` holds 64-bit values (0 to 2**64 - 1). Each value is split
  into its high 32 bits, which pick a partition, and its low 32 bits, which go into that
  partition's `RoaringBitmap`.

Both types iterate in sorted order (and in reverse with `reversed()`), support `in`, `len()`,
`min()`, `max()`, `rank()` and `select()`, and set algebra through operators. Inserting a value
outside the type's range raises `ValueError`.

## Installing

```
pip install .
```

With the test dependencies:

```
pip install ".[test]"
```

## Usage

```python
from roaringtree.treemap import RoaringTreemap

rb = RoaringTreemap([2, 3, 5, 7])
rb.insert(1 << 40)               # True if the value was new
assert 5 in rb
assert len(rb) == 5
assert rb.min() == 2 and rb.max() == 1 << 40

rb.insert_range(10, 20)          # inserts 10..19, returns how many were new
rb.remove_range(10, 15)          # removes 10..14, returns how many were removed

assert rb.rank(7) == 4           # how many values are <= 7
assert rb.select(0) == 2         # the value at position 0, or None
```

`insert_range` and `remove_range` take a half-open range `[start, stop)`; either bound may be
`None` for "from 0" or "to the end". `RoaringBitmap` has the same methods for 32-bit values.

`push(value)` adds a value only if it is greater than the current maximum (for a treemap, the
maximum of the value's partition) and returns whether it was added.

### Sorted input

```python
from roaringtree.bitmap import NonSortedIntegersError
from roaringtree.treemap import RoaringTreemap

rt = RoaringTreemap.from_sorted_iter(range(10))
try:
    rt.append([5])
except NonSortedIntegersError as err:
    print(err.valid_until)       # how many values were appended before the error: 0
```

`append` takes strictly increasing values greater than the current maximum and returns how many
it added. `NonSortedIntegersError` is a subclass of `ValueError`.

### Set algebra

```python
a = RoaringTreemap(range(1, 4))
b = RoaringTreemap(range(3, 5))

a | b, a & b, a - b, a ^ b       # new treemaps
a.union_len(b)                   # cardinality only; also intersection_len, difference_len,
                                 # symmetric_difference_len
a.is_subset(b), a.is_superset(b), a.is_disjoint(b)
a |= b                           # in place; also &=, -=, ^=
```

Operations over many treemaps at once:

```python
from roaringtree.multiops import union, intersection, difference, symmetric_difference

merged = union([a, b, RoaringTreemap([100])])
rest = difference([a, b])        # values of the first found in none of the others
```

The functions in `roaringtree.partitions` do the same set algebra on plain mappings of 32-bit
partition keys to `RoaringBitmap`s; they are what the treemap operators use.

### Partitions

```python
rt = RoaringTreemap(range(6000))
for key, bitmap in rt.bitmaps():
    ...
clone = RoaringTreemap.from_bitmaps((k, bm.copy()) for k, bm in rt.bitmaps())
assert clone == rt
```

In `from_bitmaps`, a repeated partition key replaces the earlier one.

### Serialization

```python
from roaringtree.serialization import to_bytes, from_bytes, serialized_size

data = to_bytes(rt)
assert len(data) == serialized_size(rt)
assert from_bytes(data) == rt
```

A treemap is written as a little-endian 64-bit count of partitions, then for each partition its
32-bit key and its bitmap in the standard roaring format. `serialize_into` and
`deserialize_from` work on binary file objects; `deserialize_unchecked_from` skips the checks on
the bitmap contents. Malformed or truncated data raises `ValueError`.

`RoaringBitmap` has the same methods: `serialized_size()`, `serialize_into(writer)`,
`to_bytes()`, and the class methods `deserialize_from(reader)`,
`deserialize_unchecked_from(reader)` and `from_bytes(data)`.

`roaringtree.util` has the helpers `split`, `join` and `convert_range_to_inclusive` for
64-bit values and ranges.

## What it does not do

- There is no command-line tool; this is a library only.
- Bitmaps are always written without run containers. Reading accepts data with run containers,
  but they are stored as list or bitset containers in memory.
- `RoaringTreemap.full()` builds all 2**32 partitions in memory, which is not practical on
  ordinary machines.

## Running the tests

```
pytest
```