"""
Replication: repeating each element (stutter) or the whole range (replicate_range).

Both come in two flavours. Over an indexed source with a length the
position arithmetic is done on integers, which gives O(1) indexing, both
ends and slicing. Anything else gets a forward-only walker.
"""

import logging
from typing import Any

from .adapters import as_range, empty_range
from .base import Range
from .capabilities import RANDOM_ACCESS, Capability
from .errors import CapabilityError
from .models import ReplicateSpec, validate_spec

logger = logging.getLogger(__name__)

_FORWARD = Capability.REPLAYABLE | Capability.SIZED | Capability.INFINITE


def _random_access(source: Range) -> bool:
    return Capability.INDEXED in source.capabilities and Capability.SIZED in source.capabilities


class IndexedStutter(Range):
    """Each element of an indexed source repeated ``times`` times."""

    supports = RANDOM_ACCESS

    def __init__(self, source: Range, times: int, lo: int = 0, hi: int = None):
        super().__init__(RANDOM_ACCESS)
        self._source = source
        self._times = times
        self._lo = lo
        self._hi = len(source) * times if hi is None else hi

    def _is_empty(self):
        return self._lo >= self._hi

    def _get_front(self):
        return self._source[self._lo // self._times]

    def _pop_front(self):
        self._lo += 1

    def _save(self):
        return IndexedStutter(self._source, self._times, self._lo, self._hi)

    def _get_back(self):
        return self._source[(self._hi - 1) // self._times]

    def _pop_back(self):
        self._hi -= 1

    def _get_index(self, index):
        return self._source[(self._lo + index) // self._times]

    def _length(self):
        return self._hi - self._lo

    def _get_slice(self, start, stop):
        return IndexedStutter(self._source, self._times, self._lo + start, self._lo + stop)


class ForwardStutter(Range):
    """Each element of a forward source repeated ``times`` times."""

    supports = _FORWARD

    def __init__(self, source: Range, times: int, remaining: int = None):
        super().__init__(source.capabilities & _FORWARD)
        self._source = source
        self._times = times
        self._remaining = times if remaining is None else remaining

    def _is_empty(self):
        return self._source.empty

    def _get_front(self):
        return self._source.front

    def _pop_front(self):
        self._remaining -= 1
        if self._remaining == 0:
            self._source.pop_front()
            self._remaining = self._times

    def _save(self):
        return ForwardStutter(self._source.save(), self._times, self._remaining)

    def _length(self):
        length = len(self._source)
        if length == 0:
            return 0
        return (length - 1) * self._times + self._remaining


def stutter(n: int, r: Any) -> Range:
    """Repeat every element of ``r`` ``n`` times in a row."""
    times = validate_spec(ReplicateSpec, times=n).times
    source = as_range(r)
    if times == 0:
        return empty_range()
    if times == 1:
        return source
    if _random_access(source):
        return IndexedStutter(source, times)
    return ForwardStutter(source, times)


class IndexedReplicate(Range):
    """An indexed source laid end to end ``times`` times."""

    supports = RANDOM_ACCESS

    def __init__(self, source: Range, times: int, lo: int = 0, hi: int = None):
        super().__init__(RANDOM_ACCESS)
        self._source = source
        self._period = len(source)
        self._lo = lo
        self._hi = self._period * times if hi is None else hi

    def _is_empty(self):
        return self._lo >= self._hi

    def _get_front(self):
        return self._source[self._lo % self._period]

    def _pop_front(self):
        self._lo += 1

    def _save(self):
        return IndexedReplicate(self._source, 0, self._lo, self._hi)

    def _get_back(self):
        return self._source[(self._hi - 1) % self._period]

    def _pop_back(self):
        self._hi -= 1

    def _get_index(self, index):
        return self._source[(self._lo + index) % self._period]

    def _length(self):
        return self._hi - self._lo

    def _get_slice(self, start, stop):
        return IndexedReplicate(self._source, 0, self._lo + start, self._lo + stop)


class ForwardReplicate(Range):
    """A replayable source walked ``times`` times from a pristine saved copy."""

    supports = _FORWARD

    def __init__(self, source: Range, times: int, cursor: Range = None):
        super().__init__(source.capabilities & _FORWARD)
        self._source = source
        self._times = times
        self._cursor = source.save() if cursor is None else cursor

    def _is_empty(self):
        return self._times == 0 or self._cursor.empty

    def _get_front(self):
        return self._cursor.front

    def _pop_front(self):
        self._cursor.pop_front()
        if self._cursor.empty:
            self._times -= 1
            if self._times > 0:
                self._cursor.close()
                self._cursor = self._source.save()

    def _save(self):
        return ForwardReplicate(self._source, self._times, self._cursor.save())

    def _length(self):
        if self._times == 0:
            return 0
        return len(self._cursor) + (self._times - 1) * len(self._source)

    def close(self):
        self._cursor.close()


def replicate_range(r: Any, n: int = 1) -> Range:
    """The whole of ``r`` repeated ``n`` times; ``r`` must be replayable."""
    times = validate_spec(ReplicateSpec, times=n).times
    source = as_range(r)
    if Capability.REPLAYABLE not in source.capabilities:
        raise CapabilityError("replicate_range needs a replayable range")
    if times == 0:
        return empty_range()
    if times > 1 and Capability.INFINITE in source.capabilities:
        logger.warning(f"replicate_range({times}) of an infinite range never reaches the second copy")
    if _random_access(source):
        if len(source) == 0:
            return empty_range()
        return IndexedReplicate(source, times)
    logger.debug(f"replicate_range falls back to a forward walk over {type(source).__name__}")
    return ForwardReplicate(source, times)
