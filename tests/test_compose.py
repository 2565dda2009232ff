import pytest

from lazyweave import (
    ArityError,
    Capability,
    CapabilityError,
    ConstructionError,
    as_range,
    chunks,
    concat,
    cycle,
    flatten,
    heads,
    indexed,
    interleave,
    knit,
    memoize,
    min_length,
    repeat,
    restrict,
    tails,
    take,
    tfilter,
    transverse,
)


class TestKnit:
    """Test lock-step zipping of ranges"""

    def test_tuples_of_fronts(self):
        r = knit([1, 2, 3], "abcd")
        assert list(r) == [(1, "a"), (2, "b"), (3, "c")]
        assert len(r) == 3

    def test_reverse_after_trim(self):
        """Longer inputs are trimmed so both ends line up"""
        r = knit([1, 2, 3], "abcd")
        assert Capability.REVERSIBLE in r.capabilities
        assert list(reversed(r)) == [(3, "c"), (2, "b"), (1, "a")]

    def test_finite_with_infinite(self):
        r = knit([1, 2, 3], repeat(0))
        assert len(r) == 3
        assert Capability.INFINITE not in r.capabilities
        assert Capability.REVERSIBLE not in r.capabilities
        assert list(r) == [(1, 0), (2, 0), (3, 0)]
        assert r[2] == (3, 0)

    def test_all_infinite(self):
        r = knit(repeat(1), cycle([1, 2]))
        assert Capability.INFINITE in r.capabilities
        assert Capability.SIZED not in r.capabilities
        assert list(take(r, 3)) == [(1, 1), (1, 2), (1, 1)]

    def test_single_pass_input(self):
        r = knit(iter([1, 2]), [3, 4, 5])
        assert r.capabilities == Capability.SINGLE_PASS
        assert list(r) == [(1, 3), (2, 4)]

    def test_write_through(self):
        a, b = [1, 2, 3], [4, 5, 6]
        r = knit(a, b)
        r[1] = (20, 50)
        r.front = (10, 40)
        assert a == [10, 20, 3] and b == [40, 50, 6]

    def test_inputs_not_trimmed(self):
        """Trimming for the back end leaves the caller's ranges alone"""
        a = as_range([1, 2, 3, 4])
        r = knit(a, [10, 20])
        assert len(a) == 4, f"Caller's range shortened to {len(a)}"
        assert list(reversed(r)) == [(2, 20), (1, 10)]
        assert a.back == 4

    def test_single_pass_input_not_trimmed(self):
        a = restrict([1, 2, 3], Capability.REVERSIBLE | Capability.SIZED)
        r = knit(a, [10, 20])
        assert Capability.REVERSIBLE not in r.capabilities
        assert len(a) == 3
        assert list(r) == [(1, 10), (2, 20)]

    def test_write_wrong_arity(self):
        r = knit([1], [2])
        with pytest.raises(ArityError):
            r.front = (1, 2, 3)

    def test_mutable_only_if_all_are(self):
        assert Capability.MUTABLE not in knit([1], (2,)).capabilities

    def test_slicing(self):
        r = knit(range(10), "abcdefghij")
        assert list(r[2:4]) == [(2, "c"), (3, "d")]

    def test_no_ranges(self):
        with pytest.raises(ConstructionError):
            knit()

    def test_min_length(self):
        assert min_length(["a", "b", "c"], [0, 1], repeat(5)) == 2
        with pytest.raises(ConstructionError):
            min_length(repeat(1))
        with pytest.raises(CapabilityError):
            min_length(iter([1]))

    def test_indexed(self):
        assert list(indexed("abc")) == [(0, "a"), (1, "b"), (2, "c")]
        assert list(indexed(iter("ab"), start=1)) == [(1, "a"), (2, "b")]
        assert list(reversed(indexed("ab"))) == [(1, "b"), (0, "a")]


class TestConcat:
    """Test one-level flattening"""

    def test_skips_empty_inner_ranges(self):
        with_gaps = concat([[1, 2], [], [3], [], [], [4, 5]])
        without = concat([[1, 2], [3], [4, 5]])
        assert list(with_gaps) == list(without) == [1, 2, 3, 4, 5]

    def test_leading_and_trailing_empties(self):
        assert list(concat([[], [], [1], []])) == [1]
        assert list(concat([[], []])) == []

    def test_reverse(self):
        r = concat([[1, 2], [], [3, 4]])
        assert list(reversed(r)) == [4, 3, 2, 1]

    def test_both_ends_meet(self):
        """Front and back share the last inner range once the outer one drains"""
        r = concat([[1, 2], [3], [4, 5]])
        assert (r.front, r.back) == (1, 5)
        r.pop_front()
        r.pop_back()
        assert list(r) == [2, 3, 4]
        assert list(reversed(r)) == [4, 3, 2]

    def test_single_inner_from_both_ends(self):
        r = concat([[1, 2, 3]])
        r.pop_back()
        r.pop_front()
        assert (r.front, r.back) == (2, 2)
        r.pop_back()
        assert r.empty

    def test_not_nested_returned_unchanged(self):
        r = as_range([1, 2, 3])
        assert concat(r) is r

    def test_strings_are_not_split(self):
        assert list(concat(["ab", "cd"])) == ["ab", "cd"]

    def test_single_pass_outer(self):
        r = concat(iter([[1], [2, 3]]))
        assert list(r) == [1, 2, 3]
        assert Capability.REPLAYABLE not in r.capabilities

    def test_replayable(self):
        r = concat([[1], [2]])
        assert list(r) == list(r) == [1, 2]

    def test_inner_ranges_left_intact(self):
        """Inner elements that are ranges are walked through copies"""
        first, second = as_range([1, 2]), as_range([3])
        r = concat([first, second])
        assert list(r) == [1, 2, 3]
        assert list(r) == [1, 2, 3], "A second pass should see the same elements"
        assert list(reversed(r)) == [3, 2, 1]
        assert first.front == 1 and len(first) == 2

    def test_single_pass_inner_ranges_not_replayable(self):
        r = concat([(x for x in [1, 2]), (x for x in [3])])
        assert Capability.REPLAYABLE not in r.capabilities
        assert Capability.REVERSIBLE not in r.capabilities
        with pytest.raises(CapabilityError):
            r.save()
        assert list(r) == [1, 2, 3]
        assert r.empty

    def test_memoized_inner_cursors_released(self):
        inner = memoize(iter([1, 2]))
        r = concat([inner])
        assert list(r) == list(r) == [1, 2]
        assert inner.buffer.live_cursors == 1


class TestFlatten:
    """Test repeated flattening"""

    def test_full_depth(self):
        assert list(flatten([[[1, 2], [3]], [[4]]])) == [1, 2, 3, 4]

    def test_limited_depth(self):
        assert list(flatten([[[1, 2], [3]], [[4]]], depth=1)) == [[1, 2], [3], [4]]

    def test_depth_zero(self):
        assert list(flatten([[1], [2]], depth=0)) == [[1], [2]]

    def test_invalid_depth(self):
        with pytest.raises(ConstructionError):
            flatten([[1]], depth=-1)

    def test_regrouping_restores_nesting(self):
        """Flattening then regrouping by the known width gives the tuples back"""
        nested = [(0, 1, 2), (3, 4, 5), (6, 7, 8)]
        flat = flatten(nested)
        assert list(flat) == list(range(9))
        assert list(chunks(3, flat)) == nested

    def test_nested_ranges_replay(self):
        r = flatten([[as_range([1]), as_range([2])]])
        assert list(r) == list(r) == [1, 2]


class TestRoundRobin:
    """Test transverse and interleave"""

    def test_transverse_stops_at_first_exhausted(self):
        r = transverse([0, 1, 2, 3, 4], repeat(5), [-2.0, -1.0, 0.0, 1.0])
        assert list(r) == [0, 5, -2.0, 1, 5, -1.0, 2, 5, 0.0, 3, 5, 1.0, 4, 5]

    def test_transverse_with_empty(self):
        assert list(transverse([0, 1, 2], [], [])) == [0]

    def test_interleave(self):
        assert "".join(interleave("abcdef", ",")) == "a,b,c,d,e,f,"
        assert "".join(interleave("abcdef", ",;.")) == "a,b;c.d,e;f."
        assert list(interleave([0, 1, 2], [0, 1, 2])) == [0, 0, 1, 1, 2, 2]


class TestTailsAndHeads:
    """Test suffixes and prefixes"""

    def test_tails(self):
        t = tails([0, 1, 2, 3])
        assert [list(x) for x in t] == [[1, 2, 3], [2, 3], [3], []]
        assert len(t) == 4

    def test_tails_edge_cases(self):
        assert [list(x) for x in tails([0])] == [[]]
        assert tails([]).empty

    def test_tails_needs_replayable(self):
        with pytest.raises(CapabilityError):
            tails(iter([1]))

    def test_heads(self):
        h = heads([0, 1, 2, 3])
        assert [list(x) for x in h] == [[], [0], [0, 1], [0, 1, 2], [0, 1, 2, 3]]
        assert len(h) == 5

    def test_heads_without_length(self):
        sized = [list(x) for x in heads([0, 1, 2, 3])]
        unsized = [list(x) for x in heads(tfilter(lambda x: x < 10, [0, 1, 2, 3]))]
        assert unsized == sized


class TestChunks:
    """Test splitting into consecutive groups"""

    def test_groups_and_remainder(self):
        r = chunks(2, range(5))
        assert list(r) == [(0, 1), (2, 3), (4,)]
        assert len(r) == 3

    def test_length_while_walking(self):
        r = chunks(3, [1, 2, 3, 4])
        assert r.front == (1, 2, 3)
        assert len(r) == 2
        r.pop_front()
        assert len(r) == 1
        assert list(r) == [(4,)]

    def test_single_pass_is_lazy(self, counted):
        source = counted(range(100))
        r = chunks(4, source)
        assert source.pulls == 0
        assert r.front == (0, 1, 2, 3)
        assert source.pulls == 4

    def test_infinite(self):
        r = chunks(2, repeat("x"))
        assert Capability.INFINITE in r.capabilities
        assert list(take(r, 2)) == [("x", "x"), ("x", "x")]

    def test_empty_and_invalid(self):
        assert chunks(3, []).empty
        with pytest.raises(ConstructionError):
            chunks(0, [1])
