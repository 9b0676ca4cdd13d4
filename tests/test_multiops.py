from hypothesis import given, settings
from hypothesis import strategies as st

from roaringtree.bitmap import RoaringBitmap
from roaringtree.multiops import difference, intersection, symmetric_difference, union
from roaringtree.treemap import RoaringTreemap

_low_values = st.lists(
    st.one_of(st.integers(0, 300), st.integers(0, 2**32 - 1)), max_size=40
)


@st.composite
def treemaps(draw):
    partitions = draw(st.dictionaries(st.integers(0, 16), _low_values, max_size=16))
    return RoaringTreemap.from_bitmaps(
        (key, RoaringBitmap(values)) for key, values in partitions.items() if values
    )


def _tm(*values):
    return RoaringTreemap(values)


@settings(max_examples=50, deadline=None)
@given(treemaps(), treemaps(), treemaps())
def test_all_union_give_the_same_result(a, b, c):
    ref_assign = a.copy()
    ref_assign |= b
    ref_assign |= c
    assert a | b | c == ref_assign
    assert union([a, b, c]) == ref_assign
    assert union(iter([a, b, c])) == ref_assign


@settings(max_examples=50, deadline=None)
@given(treemaps(), treemaps(), treemaps())
def test_all_intersection_give_the_same_result(a, b, c):
    ref_assign = a.copy()
    ref_assign &= b
    ref_assign &= c
    assert a & b & c == ref_assign
    assert intersection([a, b, c]) == ref_assign


@settings(max_examples=50, deadline=None)
@given(treemaps(), treemaps(), treemaps())
def test_all_difference_give_the_same_result(a, b, c):
    ref_assign = a.copy()
    ref_assign -= b
    ref_assign -= c
    assert a - b - c == ref_assign
    assert difference([a, b, c]) == ref_assign


@settings(max_examples=50, deadline=None)
@given(treemaps(), treemaps(), treemaps())
def test_all_symmetric_difference_give_the_same_result(a, b, c):
    ref_assign = a.copy()
    ref_assign ^= b
    ref_assign ^= c
    assert a ^ b ^ c == ref_assign
    assert symmetric_difference([a, b, c]) == ref_assign


@settings(max_examples=50, deadline=None)
@given(treemaps(), treemaps())
def test_len_helpers_match_materialized_results(a, b):
    assert a.union_len(b) == len(union([a, b]))
    assert a.intersection_len(b) == len(intersection([a, b]))
    assert a.difference_len(b) == len(difference([a, b]))
    assert a.symmetric_difference_len(b) == len(symmetric_difference([a, b]))


def test_empty_input_gives_empty_treemap():
    assert union([]) == RoaringTreemap()
    assert intersection([]) == RoaringTreemap()
    assert difference([]) == RoaringTreemap()
    assert symmetric_difference([]) == RoaringTreemap()


def test_union_values():
    big = 1 << 32
    result = union([_tm(1, 2, big), _tm(2, 3), _tm(big + 7)])
    assert list(result) == [1, 2, 3, big, big + 7]


def test_intersection_drops_missing_partitions():
    big = 5 << 32
    result = intersection([_tm(1, 2, big), _tm(2, 3, big), _tm(2, big)])
    assert list(result) == [2, big]
    result = intersection([_tm(1, big), _tm(1)])
    assert list(result) == [1]
    assert [key for key, _ in result.bitmaps()] == [0]


def test_difference_removes_emptied_partitions():
    big = 3 << 32
    result = difference([_tm(1, 2, big), _tm(1, 2), _tm(9)])
    assert list(result) == [big]
    assert [key for key, _ in result.bitmaps()] == [3]


def test_symmetric_difference_values():
    result = symmetric_difference([_tm(1, 2), _tm(2, 3), _tm(3, 4)])
    assert list(result) == [1, 4]
    assert list(symmetric_difference([_tm(1), _tm(1)])) == []
    assert list(symmetric_difference([_tm(1), _tm(1)]).bitmaps()) == []


def test_inputs_are_not_modified():
    a, b = _tm(1, 2), _tm(2, 3)
    union([a, b])
    intersection([a, b])
    difference([a, b])
    symmetric_difference([a, b])
    assert list(a) == [1, 2]
    assert list(b) == [2, 3]


def test_single_input_is_copied():
    a = _tm(4, 5)
    result = union([a])
    result.insert(6)
    assert list(a) == [4, 5]
    assert list(result) == [4, 5, 6]