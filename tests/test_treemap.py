import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from roaringtree.bitmap import NonSortedIntegersError, RoaringBitmap
from roaringtree.treemap import RoaringTreemap

HIGH = 1 << 32

values_strategy = st.sets(
    st.builds(lambda hi, lo: hi * HIGH + lo, st.integers(0, 4), st.integers(0, 70_000)),
    max_size=200,
)


def check_from_sorted_iter(values):
    rb1 = RoaringTreemap(values)
    rb2 = RoaringTreemap.from_sorted_iter(values)
    assert list(rb1) == list(rb2)
    assert len(rb1) == len(rb2)
    assert rb1.min() == rb2.min()
    assert rb1.max() == rb2.max()
    assert rb1.is_empty() == rb2.is_empty()
    assert rb1 == rb2


def test_append_tree_large():
    check_from_sorted_iter([13 * x for x in range(1_000_000)])


def test_append_tree_small():
    check_from_sorted_iter([1, 2, 4, 5, 7, 8, 9])


def test_append_empty():
    assert RoaringTreemap().append([]) == 0


def test_append_error_first_element():
    treemap = RoaringTreemap([100])
    with pytest.raises(NonSortedIntegersError) as info:
        treemap.append([10, 20, 0])
    assert info.value.valid_until == 0


def test_append_error_later_element():
    treemap = RoaringTreemap([100])
    with pytest.raises(NonSortedIntegersError) as info:
        treemap.append([200, 201, 201])
    assert info.value.valid_until == 2
    assert list(treemap) == [100, 200, 201]


def test_append_across_partitions():
    treemap = RoaringTreemap()
    assert treemap.append(range(10)) == 10
    assert list(treemap) == list(range(10))
    assert treemap.append([HIGH + 5, 3 * HIGH]) == 2
    assert list(treemap)[-2:] == [HIGH + 5, 3 * HIGH]


def test_insert_and_contains():
    treemap = RoaringTreemap()
    assert treemap.insert(3) is True
    assert treemap.insert(3) is False
    assert treemap.contains(3)
    assert 3 in treemap
    assert -1 not in treemap


def test_insert_rejects_out_of_range():
    with pytest.raises(ValueError):
        RoaringTreemap().insert(1 << 64)


def test_insert_range():
    treemap = RoaringTreemap()
    assert treemap.insert_range(2, 4) == 2
    assert treemap.contains(2)
    assert treemap.contains(3)
    assert not treemap.contains(4)


def test_insert_range_across_partition_boundary():
    treemap = RoaringTreemap([HIGH - 1])
    assert treemap.insert_range(HIGH - 2, HIGH + 2) == 3
    assert list(treemap) == [HIGH - 2, HIGH - 1, HIGH, HIGH + 1]


def test_insert_range_empty():
    assert RoaringTreemap().insert_range(5, 5) == 0


def test_push():
    treemap = RoaringTreemap()
    assert treemap.push(1)
    assert treemap.push(3)
    assert treemap.push(3) is False
    assert treemap.push(5)
    assert list(treemap) == [1, 3, 5]


def test_remove():
    treemap = RoaringTreemap([3])
    assert treemap.remove(3) is True
    assert treemap.remove(3) is False
    assert treemap.contains(3) is False
    assert list(treemap.bitmaps()) == []


def test_remove_range():
    treemap = RoaringTreemap([2, 3])
    assert treemap.remove_range(2, 4) == 2
    assert treemap.is_empty()


def test_remove_range_across_partitions():
    treemap = RoaringTreemap([1, HIGH - 1, HIGH, HIGH + 7, 2 * HIGH])
    assert treemap.remove_range(2, 2 * HIGH) == 3
    assert list(treemap) == [1, 2 * HIGH]


def test_clear_and_is_empty():
    treemap = RoaringTreemap()
    assert treemap.is_empty()
    treemap.insert(1)
    assert not treemap.is_empty()
    treemap.clear()
    assert not treemap.contains(1)
    assert treemap.is_empty()


def test_len():
    treemap = RoaringTreemap()
    assert len(treemap) == 0
    treemap.insert(3)
    assert len(treemap) == 1
    treemap.insert(3)
    treemap.insert(4)
    assert len(treemap) == 2


def test_min_max():
    treemap = RoaringTreemap()
    assert treemap.min() is None
    assert treemap.max() is None
    treemap.insert(3)
    treemap.insert(4)
    treemap.insert(2 * HIGH + 9)
    assert treemap.min() == 3
    assert treemap.max() == 2 * HIGH + 9


def test_rank():
    treemap = RoaringTreemap()
    assert treemap.rank(0) == 0
    treemap.insert(3)
    treemap.insert(4)
    assert treemap.rank(3) == 1
    assert treemap.rank(10) == 2
    treemap.insert(HIGH + 1)
    assert treemap.rank(HIGH) == 2
    assert treemap.rank((1 << 64) - 1) == len(treemap)


def test_select():
    treemap = RoaringTreemap()
    assert treemap.select(0) is None
    treemap.append([0, 10, 100])
    assert treemap.select(0) == 0
    assert treemap.select(1) == 10
    assert treemap.select(2) == 100
    assert treemap.select(3) is None


def test_iter_and_reversed():
    treemap = RoaringTreemap(range(1, 3))
    assert list(treemap) == [1, 2]
    treemap.insert(HIGH)
    assert list(reversed(treemap)) == [HIGH, 2, 1]


def test_bitmaps_and_from_bitmaps():
    original = RoaringTreemap(range(6000))
    parts = list(original.bitmaps())
    assert len(parts) == 1
    assert parts[0][0] == 0
    assert parts[0][1] == RoaringBitmap(range(6000))
    clone = RoaringTreemap.from_bitmaps((key, bitmap.copy()) for key, bitmap in parts)
    assert clone == original


def test_from_bitmaps_replaces_repeated_partitions():
    treemap = RoaringTreemap.from_bitmaps([(1, RoaringBitmap([1])), (1, RoaringBitmap([2]))])
    assert list(treemap) == [HIGH + 2]


def test_repr_small_and_large():
    assert repr(RoaringTreemap([1, 2])) == "RoaringTreemap<[1, 2]>"
    assert repr(RoaringTreemap(range(20))) == "RoaringTreemap<20 values between 0 and 19>"


def test_copy_is_independent():
    original = RoaringTreemap([1, HIGH])
    clone = original.copy()
    clone.insert(5)
    assert clone != original
    assert list(original) == [1, HIGH]


def test_subset_superset_disjoint():
    rb1 = RoaringTreemap()
    rb2 = RoaringTreemap()
    rb1.insert(1)
    assert rb1.is_disjoint(rb2)
    assert rb1.is_subset(rb2) is False
    assert rb2.is_superset(rb1) is False
    rb2.insert(1)
    assert rb1.is_disjoint(rb2) is False
    assert rb1.is_subset(rb2)
    assert rb2.is_superset(rb1)
    rb1.insert(2)
    assert rb1.is_subset(rb2) is False


def test_len_operations_examples():
    rb1 = RoaringTreemap(range(1, 4))
    rb2 = RoaringTreemap(range(3, 5))
    assert rb1.union_len(rb2) == 4
    assert rb1.intersection_len(rb2) == 1
    assert rb1.difference_len(rb2) == 2
    assert rb1.symmetric_difference_len(rb2) == 3


def test_operators_examples():
    rb1 = RoaringTreemap(range(1, 4))
    rb2 = RoaringTreemap(range(3, 5))
    assert list(rb1 | rb2) == [1, 2, 3, 4]
    assert list(rb1 & rb2) == [3]
    assert list(rb1 - rb2) == [1, 2]
    assert list(rb1 ^ rb2) == [1, 2, 4]
    assert list(rb1) == [1, 2, 3]


@settings(max_examples=50)
@given(values_strategy, values_strategy)
def test_operators_match_set_model(left, right):
    a, b = RoaringTreemap(left), RoaringTreemap(right)
    assert list(a | b) == sorted(left | right)
    assert list(a & b) == sorted(left & right)
    assert list(a - b) == sorted(left - right)
    assert list(a ^ b) == sorted(left ^ right)
    assert a.union_len(b) == len(a | b)
    assert a.intersection_len(b) == len(a & b)
    assert a.difference_len(b) == len(a - b)
    assert a.symmetric_difference_len(b) == len(a ^ b)


@settings(max_examples=50)
@given(values_strategy, values_strategy)
def test_inplace_operators_agree_with_binary(left, right):
    a, b = RoaringTreemap(left), RoaringTreemap(right)
    for op, iop in (
        (lambda x, y: x | y, "__ior__"),
        (lambda x, y: x & y, "__iand__"),
        (lambda x, y: x - y, "__isub__"),
        (lambda x, y: x ^ y, "__ixor__"),
    ):
        target = a.copy()
        getattr(target, iop)(b)
        assert target == op(a, b)
        assert all(not bitmap.is_empty() for _, bitmap in target.bitmaps())


@settings(max_examples=50)
@given(values_strategy)
def test_rank_select_round_trip(values):
    treemap = RoaringTreemap(values)
    for index, value in enumerate(sorted(values)):
        assert treemap.select(index) == value
        assert treemap.rank(value) == index + 1
    assert treemap.select(len(values)) is None