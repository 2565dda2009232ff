import logging

import pytest

from lazyweave import (
    Capability,
    CapabilityError,
    ConstructionError,
    as_range,
    repeat,
    replicate_range,
    restrict,
    stutter,
    take,
    tfilter,
)
from lazyweave.replicate import ForwardReplicate, ForwardStutter, IndexedReplicate, IndexedStutter

FORWARD = Capability.REPLAYABLE | Capability.SIZED


class TestStutter:
    """Test repeating each element in place"""

    def test_indexed(self):
        s = stutter(3, [0, 1, 2])
        assert isinstance(s, IndexedStutter)
        assert list(s) == [0, 0, 0, 1, 1, 1, 2, 2, 2]
        assert len(s) == 9
        assert s[4] == 1

    def test_reverse_and_slice(self):
        s = stutter(3, [0, 1, 2])
        assert list(reversed(s)) == [2, 2, 2, 1, 1, 1, 0, 0, 0]
        assert list(s[2:5]) == [0, 1, 1]

    def test_zero_and_one(self):
        assert stutter(0, [1, 2]).empty
        source = as_range([1, 2])
        assert stutter(1, source) is source

    def test_forward(self):
        s = stutter(2, restrict([0, 1, 2], FORWARD))
        assert isinstance(s, ForwardStutter)
        assert len(s) == 6
        s.pop_front()
        assert len(s) == 5
        assert list(s) == [0, 1, 1, 2, 2]

    def test_single_pass(self):
        assert list(stutter(2, iter("ab"))) == ["a", "a", "b", "b"]

    def test_negative(self):
        with pytest.raises(ConstructionError):
            stutter(-1, [1])


class TestReplicateRange:
    """Test repeating the whole range"""

    def test_indexed(self):
        r = replicate_range([0, 1, 2, 3], 3)
        assert isinstance(r, IndexedReplicate)
        assert len(r) == 12
        r.pop_front()
        r.pop_back()
        assert len(r) == 10
        assert (r.front, r.back) == (1, 2)
        assert r[3] == 0

    def test_slice(self):
        r = replicate_range([0, 1, 2], 2)
        assert list(r[2:5]) == [2, 0, 1]

    def test_defaults_to_once(self):
        assert list(replicate_range([1, 2])) == [1, 2]

    def test_empty_cases(self):
        assert replicate_range([1], 0).empty
        assert replicate_range([], 5).empty

    def test_needs_replayable(self):
        with pytest.raises(CapabilityError):
            replicate_range(iter([1, 2]), 2)

    def test_forward(self):
        r = replicate_range(tfilter(lambda x: x > 0, [0, 1, 2]), 2)
        assert isinstance(r, ForwardReplicate)
        assert list(r) == [1, 2, 1, 2]
        assert list(r) == [1, 2, 1, 2], "Replicated ranges replay"

    def test_forward_length(self):
        r = replicate_range(restrict([1, 2, 3], FORWARD), 2)
        assert len(r) == 6
        r.pop_front()
        assert len(r) == 5

    def test_take_prefix(self):
        r = replicate_range(restrict([1, 2], Capability.REPLAYABLE), 100)
        assert list(take(r, 5)) == [1, 2, 1, 2, 1]

    def test_infinite_source_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="lazyweave.replicate"):
            r = replicate_range(repeat(1), 3)
        assert "never reaches" in caplog.text
        assert list(take(r, 2)) == [1, 1]
