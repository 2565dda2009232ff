import pytest

from lazyweave import Capability, ConstructionError, delay, parallel, tabulate, take


class TestDelay:
    """Test tuples of elements at fixed offsets"""

    def test_mixed_offsets(self):
        r = delay([4, 1, 3, 2], list(range(6)))
        assert r.front == (4, 1, 3, 2)
        assert len(r) == 2
        assert list(r) == [(4, 1, 3, 2), (5, 2, 4, 3)]

    def test_pairs_with_lookahead(self):
        assert list(delay([0, 2], range(5))) == [(0, 2), (1, 3), (2, 4)]

    def test_uniform_offsets(self):
        """Equal offsets skip ahead and broadcast"""
        r = delay([2, 2], range(5))
        assert list(r) == [(2, 2), (3, 3), (4, 4)]

    def test_uniform_offsets_stay_lazy(self, counted):
        """Nothing is pulled until the first tuple is read"""
        source = counted(range(5))
        r = delay([2, 2], source)
        assert source.pulls == 0, f"Pulled {source.pulls} elements at construction"
        assert r.front == (2, 2)
        assert list(r) == [(2, 2), (3, 3), (4, 4)]

    def test_uniform_offsets_past_the_end(self):
        assert delay([9, 9], [1, 2, 3]).empty

    def test_single_pass_source(self):
        r = delay([0, 2], iter(range(5)))
        assert list(r) == [(0, 2), (1, 3), (2, 4)]

    def test_infinite_source(self):
        r = delay([1, 0], tabulate(lambda i: i))
        assert list(take(r, 2)) == [(1, 0), (2, 1)]

    def test_too_short(self):
        assert delay([0, 5], [1, 2, 3]).empty

    def test_reverse(self):
        r = delay([1, 0], [1, 2, 3])
        assert list(reversed(r)) == [(3, 2), (2, 1)]

    @pytest.mark.parametrize("offsets", [[], [-1], [0, -2]])
    def test_invalid_offsets(self, offsets):
        with pytest.raises(ConstructionError):
            delay(offsets, [1, 2, 3])


class TestParallel:
    """Test broadcasting each element into a tuple"""

    def test_broadcast(self):
        assert list(parallel(3, [1, 2])) == [(1, 1, 1), (2, 2, 2)]

    def test_keeps_capabilities_but_write(self):
        r = parallel(2, [1, 2, 3])
        assert Capability.MUTABLE not in r.capabilities
        assert r[1] == (2, 2)
        assert len(r) == 3

    def test_invalid_count(self):
        with pytest.raises(ConstructionError):
            parallel(0, [1])
