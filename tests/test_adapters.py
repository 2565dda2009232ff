import pytest

from lazyweave import (
    Capability,
    CapabilityError,
    ConstructionError,
    OutOfBoundsError,
    as_range,
    count_from,
    cycle,
    drop,
    empty_range,
    is_range_like,
    once,
    repeat,
    restrict,
    skip,
    tabulate,
    take,
    tfilter,
    tmap,
)
from lazyweave.adapters import IterRange, SequenceRange


class TestAsRange:
    """Test adaptation of Python values"""

    def test_list_becomes_sequence_range(self):
        r = as_range([1, 2, 3])
        assert isinstance(r, SequenceRange)
        assert Capability.MUTABLE in r.capabilities

    def test_generator_becomes_iter_range(self):
        r = as_range(x for x in range(3))
        assert isinstance(r, IterRange)
        assert list(r) == [0, 1, 2]
        assert r.empty, "Iterating a single-pass range consumes it"

    def test_range_returned_unchanged(self):
        r = as_range([1])
        assert as_range(r) is r

    def test_non_iterable_rejected(self):
        with pytest.raises(CapabilityError):
            as_range(3.5)

    def test_strings_are_atoms(self):
        assert not is_range_like("abc")
        assert not is_range_like(b"abc")
        assert is_range_like([1])
        assert is_range_like(as_range([1]))
        assert not is_range_like(7)


class TestSequenceRange:
    """Test the random-access list view"""

    def test_write_through(self):
        data = [1, 2, 3, 4]
        r = as_range(data)
        r.front = 10
        r.back = 40
        r[1] = 20
        assert data == [10, 20, 3, 40], f"Writes should reach the list, got {data}"

    def test_both_ends(self):
        r = as_range([1, 2, 3, 4])
        r.pop_front()
        r.pop_back()
        assert (r.front, r.back, len(r)) == (2, 3, 2)

    def test_negative_index(self):
        r = as_range([1, 2, 3])
        assert r[-1] == 3
        with pytest.raises(OutOfBoundsError):
            r[-4]
        with pytest.raises(OutOfBoundsError):
            r[3]

    def test_slicing(self):
        r = as_range([0, 1, 2, 3, 4])
        assert list(r[1:3]) == [1, 2]
        assert list(r[:2]) == [0, 1]
        assert list(r[-2:]) == [3, 4]
        with pytest.raises(OutOfBoundsError):
            r[2:9]
        with pytest.raises(ConstructionError):
            r[::2]

    def test_save_is_independent(self):
        r = as_range([1, 2, 3])
        copy = r.save()
        copy.pop_front()
        assert r.front == 1 and copy.front == 2

    def test_reversed(self):
        assert list(reversed(as_range([1, 2, 3]))) == [3, 2, 1]

    def test_pop_front_n(self):
        r = as_range([1, 2, 3])
        assert r.pop_front_n(2) == 2
        assert r.pop_front_n(5) == 1
        assert r.empty


class TestSources:
    """Test the small built-in sources"""

    def test_repeat_finite(self):
        r = repeat("x", 3)
        assert list(r) == ["x", "x", "x"]
        assert len(r) == 3
        assert list(reversed(r)) == ["x", "x", "x"]

    def test_repeat_infinite(self):
        r = repeat(7)
        assert Capability.INFINITE in r.capabilities
        assert not r.empty
        assert list(take(r, 3)) == [7, 7, 7]
        assert r[1000] == 7

    def test_repeat_negative(self):
        with pytest.raises(ConstructionError):
            repeat(1, -1)

    def test_cycle(self):
        r = cycle([1, 2, 3])
        assert list(take(r, 7)) == [1, 2, 3, 1, 2, 3, 1]
        assert r[4] == 2
        assert Capability.REVERSIBLE not in r.capabilities
        assert list(r[2:5]) == [3, 1, 2]

    def test_cycle_empty_rejected(self):
        with pytest.raises(ConstructionError):
            cycle([])

    def test_tabulate(self):
        squares = tabulate(lambda i: i * i)
        assert squares[12] == 144
        squares.pop_front()
        assert squares.front == 1
        assert list(squares[0:3]) == [1, 4, 9]

    def test_count_from(self):
        assert list(take(count_from(5), 3)) == [5, 6, 7]

    def test_empty_and_once(self):
        assert empty_range().empty
        assert list(once("a")) == ["a"]


class TestRestrict:
    """Test capability restriction"""

    def test_restrict_hides_capabilities(self):
        r = restrict([1, 2, 3], Capability.REPLAYABLE)
        assert r.capabilities == Capability.SINGLE_PASS | Capability.REPLAYABLE
        with pytest.raises(CapabilityError):
            len(r)
        assert list(r) == [1, 2, 3]

    def test_restrict_cannot_add(self):
        r = restrict(iter([1]), Capability.SIZED)
        assert Capability.SIZED not in r.capabilities

    def test_restricted_write_through(self):
        data = [1, 2]
        r = restrict(data, Capability.MUTABLE | Capability.REPLAYABLE)
        r.front = 9
        assert data == [9, 2]


class TestElementaryTransformations:
    """Test map, filter, take and drop"""

    def test_map_keeps_random_access(self):
        r = tmap(lambda x: x * 10, [1, 2, 3])
        assert r[2] == 30
        assert len(r) == 3
        assert list(reversed(r)) == [30, 20, 10]
        assert Capability.MUTABLE not in r.capabilities

    def test_filter_both_ends(self):
        r = tfilter(lambda x: x % 2 == 0, range(10))
        assert list(r) == [0, 2, 4, 6, 8]
        assert r.back == 8
        r.pop_back()
        assert r.back == 6
        assert Capability.SIZED not in r.capabilities

    def test_take(self):
        r = take([1, 2, 3, 4], 2)
        assert list(r) == [1, 2]
        assert len(r) == 2
        assert r.back == 2

    def test_take_beyond_length(self):
        assert len(take([1, 2], 5)) == 2

    def test_take_of_single_pass(self):
        r = take(iter(range(100)), 3)
        assert list(r) == [0, 1, 2]

    def test_skip_is_lazy(self):
        r = skip([1, 2, 3, 4], 2)
        assert list(r) == [3, 4]
        assert len(r) == 2 and r[0] == 3 and r.back == 4
        with pytest.raises(ConstructionError):
            skip([1], -1)

    def test_skip_waits_for_first_read(self, counted):
        source = counted(range(10))
        r = skip(source, 3)
        assert source.pulls == 0
        assert r.front == 3
        assert skip([1, 2], 5).empty

    def test_drop(self):
        assert list(drop([1, 2, 3], 2)) == [3]
        with pytest.raises(ConstructionError):
            drop([1], -1)
