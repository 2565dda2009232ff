"""
Adapters turning Python values into ranges, plus a few tiny sources.

``as_range`` is the entry point every combinator uses on its arguments:
lists become writable random-access views, other sequences read-only ones,
and any other iterable a single-pass range with one element of look-ahead.
"""

import logging
from collections.abc import Iterable, MutableSequence, Sequence
from typing import Any, Callable, Optional

from .base import Range, TakeRange
from .capabilities import RANDOM_ACCESS, Capability, describe
from .errors import CapabilityError, ConstructionError

logger = logging.getLogger(__name__)

ATOMIC_TYPES = (str, bytes, bytearray)

_INFINITE_INDEXED = (
    Capability.REPLAYABLE
    | Capability.INDEXED
    | Capability.SLICEABLE
    | Capability.INFINITE
)


class SequenceRange(Range):
    """Half-open ``[lo, hi)`` view over a Python sequence, writing through to it."""

    supports = RANDOM_ACCESS | Capability.MUTABLE

    def __init__(self, seq: Sequence, lo: int = 0, hi: Optional[int] = None):
        caps = RANDOM_ACCESS
        if isinstance(seq, MutableSequence):
            caps |= Capability.MUTABLE
        super().__init__(caps)
        self._seq = seq
        self._lo = lo
        self._hi = len(seq) if hi is None else hi

    def _is_empty(self):
        return self._lo >= self._hi

    def _get_front(self):
        return self._seq[self._lo]

    def _set_front(self, value):
        self._seq[self._lo] = value

    def _pop_front(self):
        self._lo += 1

    def _save(self):
        return SequenceRange(self._seq, self._lo, self._hi)

    def _get_back(self):
        return self._seq[self._hi - 1]

    def _set_back(self, value):
        self._seq[self._hi - 1] = value

    def _pop_back(self):
        self._hi -= 1

    def _get_index(self, index):
        return self._seq[self._lo + index]

    def _set_index(self, index, value):
        self._seq[self._lo + index] = value

    def _length(self):
        return max(0, self._hi - self._lo)

    def _get_slice(self, start, stop):
        return SequenceRange(self._seq, self._lo + start, self._lo + stop)


class IterRange(Range):
    """Single-pass range over any Python iterable."""

    _MISSING = object()

    def __init__(self, iterable: Iterable):
        super().__init__(Capability.SINGLE_PASS)
        self._it = iter(iterable)
        self._head = self._MISSING
        self._done = False

    def _fill(self):
        if self._head is self._MISSING and not self._done:
            try:
                self._head = next(self._it)
            except StopIteration:
                self._done = True

    def _is_empty(self):
        self._fill()
        return self._head is self._MISSING

    def _get_front(self):
        return self._head

    def _pop_front(self):
        self._head = self._MISSING


class RestrictedRange(Range):
    """View of ``source`` advertising only a subset of its capabilities."""

    supports = RANDOM_ACCESS | Capability.MUTABLE | Capability.INFINITE

    def __init__(self, source: Range, keep: Capability):
        super().__init__(source.capabilities & keep)
        self._source = source
        self._keep = keep

    def _is_empty(self):
        return self._source.empty

    def _get_front(self):
        return self._source.front

    def _set_front(self, value):
        self._source.front = value

    def _pop_front(self):
        self._source.pop_front()

    def _save(self):
        return RestrictedRange(self._source.save(), self._keep)

    def _get_back(self):
        return self._source.back

    def _set_back(self, value):
        self._source.back = value

    def _pop_back(self):
        self._source.pop_back()

    def _get_index(self, index):
        return self._source[index]

    def _set_index(self, index, value):
        self._source[index] = value

    def _length(self):
        return len(self._source)

    def _get_slice(self, start, stop):
        return RestrictedRange(self._source[start:stop], self._keep)

    def close(self):
        self._source.close()


class RepeatRange(Range):
    """``value`` repeated ``count`` times, or forever when ``count`` is None."""

    supports = RANDOM_ACCESS | Capability.INFINITE

    def __init__(self, value: Any, count: Optional[int] = None):
        super().__init__(_INFINITE_INDEXED if count is None else RANDOM_ACCESS)
        self._value = value
        self._count = count

    def _is_empty(self):
        return self._count is not None and self._count <= 0

    def _get_front(self):
        return self._value

    def _pop_front(self):
        if self._count is not None:
            self._count -= 1

    def _save(self):
        return RepeatRange(self._value, self._count)

    def _get_back(self):
        return self._value

    def _pop_back(self):
        self._count -= 1

    def _get_index(self, index):
        return self._value

    def _length(self):
        return self._count

    def _get_slice(self, start, stop):
        return RepeatRange(self._value, stop - start)


class CycleRange(Range):
    """Endless repetition of a non-empty sequence; indexed but without a back end."""

    supports = _INFINITE_INDEXED

    def __init__(self, seq: Sequence, offset: int = 0):
        if len(seq) == 0:
            raise ConstructionError("cannot cycle over an empty sequence")
        super().__init__(_INFINITE_INDEXED)
        self._seq = seq
        self._offset = offset % len(seq)

    def _is_empty(self):
        return False

    def _get_front(self):
        return self._seq[self._offset]

    def _pop_front(self):
        self._offset = (self._offset + 1) % len(self._seq)

    def _save(self):
        return CycleRange(self._seq, self._offset)

    def _get_index(self, index):
        return self._seq[(self._offset + index) % len(self._seq)]

    def _get_slice(self, start, stop):
        return TakeRange(CycleRange(self._seq, self._offset + start), stop - start)


class TabulateRange(Range):
    """Infinite indexed range whose i-th element is ``fn(start + i)``."""

    supports = _INFINITE_INDEXED

    def __init__(self, fn: Callable[[int], Any], start: int = 0):
        super().__init__(_INFINITE_INDEXED)
        self._fn = fn
        self._start = start

    def _is_empty(self):
        return False

    def _get_front(self):
        return self._fn(self._start)

    def _pop_front(self):
        self._start += 1

    def _save(self):
        return TabulateRange(self._fn, self._start)

    def _get_index(self, index):
        return self._fn(self._start + index)

    def _get_slice(self, start, stop):
        return TakeRange(TabulateRange(self._fn, self._start + start), stop - start)


# ---------- public constructors ----------

def as_range(obj: Any) -> Range:
    """Adapt ``obj`` to the range protocol (ranges are returned unchanged)."""
    if isinstance(obj, Range):
        return obj
    if isinstance(obj, Sequence):
        return SequenceRange(obj)
    if isinstance(obj, Iterable):
        return IterRange(obj)
    raise CapabilityError(f"{type(obj).__name__} object is not iterable and cannot be used as a range")


def is_range_like(obj: Any) -> bool:
    """True when ``obj`` would be walked as a nested range rather than kept as an element."""
    if isinstance(obj, ATOMIC_TYPES):
        return False
    return isinstance(obj, (Range, Iterable))


def restrict(source: Any, keep: Capability) -> RestrictedRange:
    """Hide every capability of ``source`` that is not in ``keep``."""
    source = as_range(source)
    view = RestrictedRange(source, keep)
    logger.debug(f"Restricted {type(source).__name__} to {describe(view.capabilities)}")
    return view


def repeat(value: Any, times: Optional[int] = None) -> RepeatRange:
    if times is not None and times < 0:
        raise ConstructionError(f"repeat count must be non-negative, got {times}")
    return RepeatRange(value, times)


def cycle(seq: Any) -> CycleRange:
    if isinstance(seq, Range):
        seq = tuple(seq)
    elif not isinstance(seq, Sequence):
        seq = tuple(seq)
    return CycleRange(seq)


def tabulate(fn: Callable[[int], Any], start: int = 0) -> TabulateRange:
    return TabulateRange(fn, start)


def count_from(start: int = 0) -> TabulateRange:
    """0, 1, 2, ... (or start, start + 1, ...) as an infinite indexed range."""
    return TabulateRange(int, start)


def empty_range() -> SequenceRange:
    return SequenceRange(())


def once(value: Any) -> SequenceRange:
    return SequenceRange((value,))
