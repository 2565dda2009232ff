"""
Segmentation engine: all width-``n`` contiguous windows of a range.

``segment(n, r)`` picks one of four strategies from the capabilities of
``r``:

* ``IndexedSegment`` keeps a pair of indices into a random-access source.
* ``InfiniteIndexedSegment`` keeps only a front index into an infinite
  indexed source.
* ``BidirectionalSegment`` keeps a rolling window at each end plus the
  middle of the source, consumed from both sides until the windows meet.
* ``RollingSegment`` keeps a single rolling window over anything else.

Windows are plain tuples, rebuilt on every read. Assigning a window writes
its members back into the source and then refreshes the rolling buffers.
"""

import copy
import logging
from collections import deque
from typing import Any, Optional

from .adapters import as_range
from .base import Range, check_arity
from .capabilities import ALL, RANDOM_ACCESS, Capability, describe
from .models import WindowSpec, validate_spec

logger = logging.getLogger(__name__)


def _read_window(source: Range, start: int, width: int) -> tuple:
    return tuple(source[start + k] for k in range(width))


def _write_window(source: Range, start: int, values: tuple) -> None:
    for k, value in enumerate(values):
        source[start + k] = value


def _write_forward(cursor: Range, values: tuple) -> None:
    for value in values:
        cursor.front = value
        cursor.pop_front()


class UnarySegment(Range):
    """Width-1 windows: every element wrapped in a 1-tuple, capabilities untouched."""

    supports = ALL

    def __init__(self, source: Range):
        super().__init__(source.capabilities)
        self._source = source

    def _is_empty(self):
        return self._source.empty

    def _get_front(self):
        return (self._source.front,)

    def _set_front(self, value):
        self._source.front = check_arity(value, 1)[0]

    def _pop_front(self):
        self._source.pop_front()

    def _save(self):
        return UnarySegment(self._source.save())

    def _get_back(self):
        return (self._source.back,)

    def _set_back(self, value):
        self._source.back = check_arity(value, 1)[0]

    def _pop_back(self):
        self._source.pop_back()

    def _get_index(self, index):
        return (self._source[index],)

    def _set_index(self, index, value):
        self._source[index] = check_arity(value, 1)[0]

    def _length(self):
        return len(self._source)

    def _get_slice(self, start, stop):
        return UnarySegment(self._source[start:stop])

    def close(self):
        self._source.close()


class IndexedSegment(Range):
    """Windows over a finite random-access source, addressed by two indices."""

    supports = RANDOM_ACCESS | Capability.MUTABLE

    def __init__(self, source: Range, width: int, front_index: int = 0, back_index: Optional[int] = None):
        super().__init__(RANDOM_ACCESS | (source.capabilities & Capability.MUTABLE))
        self._source = source
        self._width = width
        self._front_index = front_index
        if back_index is None:
            back_index = max(0, len(source) - width + 1)
        self._back_index = back_index

    def _is_empty(self):
        return self._front_index >= self._back_index

    def _get_front(self):
        return _read_window(self._source, self._front_index, self._width)

    def _set_front(self, value):
        _write_window(self._source, self._front_index, check_arity(value, self._width))

    def _pop_front(self):
        self._front_index += 1

    def _save(self):
        return IndexedSegment(self._source, self._width, self._front_index, self._back_index)

    def _get_back(self):
        return _read_window(self._source, self._back_index - 1, self._width)

    def _set_back(self, value):
        _write_window(self._source, self._back_index - 1, check_arity(value, self._width))

    def _pop_back(self):
        self._back_index -= 1

    def _get_index(self, index):
        return _read_window(self._source, self._front_index + index, self._width)

    def _set_index(self, index, value):
        _write_window(self._source, self._front_index + index, check_arity(value, self._width))

    def _length(self):
        return max(0, self._back_index - self._front_index)

    def _get_slice(self, start, stop):
        return IndexedSegment(
            self._source, self._width, self._front_index + start, self._front_index + stop
        )


class InfiniteIndexedSegment(Range):
    """Windows over an infinite indexed source; only a front index is kept."""

    supports = (
        Capability.REPLAYABLE
        | Capability.INDEXED
        | Capability.INFINITE
        | Capability.SLICEABLE
        | Capability.MUTABLE
    )

    def __init__(self, source: Range, width: int, front_index: int = 0):
        caps = Capability.REPLAYABLE | Capability.INDEXED | Capability.INFINITE
        caps |= source.capabilities & (Capability.SLICEABLE | Capability.MUTABLE)
        super().__init__(caps)
        self._source = source
        self._width = width
        self._front_index = front_index

    def _is_empty(self):
        return False

    def _get_front(self):
        return _read_window(self._source, self._front_index, self._width)

    def _set_front(self, value):
        _write_window(self._source, self._front_index, check_arity(value, self._width))

    def _pop_front(self):
        self._front_index += 1

    def _save(self):
        return InfiniteIndexedSegment(self._source, self._width, self._front_index)

    def _get_index(self, index):
        return _read_window(self._source, self._front_index + index, self._width)

    def _set_index(self, index, value):
        _write_window(self._source, self._front_index + index, check_arity(value, self._width))

    def _get_slice(self, start, stop):
        first = self._front_index + start
        span = self._source[first:first + (stop - start) + self._width - 1]
        return segment(self._width, span)


class RollingSegment(Range):
    """One rolling window over a forward (or single-pass) source.

    The window is filled on first use. When the source is replayable a
    saved copy positioned at the current window start is kept in
    ``_assign``; slicing and write-through go through it.
    """

    supports = (
        Capability.REPLAYABLE
        | Capability.SIZED
        | Capability.INFINITE
        | Capability.SLICEABLE
        | Capability.MUTABLE
    )

    def __init__(self, source: Range, width: int):
        caps = source.capabilities
        granted = caps & (Capability.REPLAYABLE | Capability.SIZED | Capability.INFINITE)
        if Capability.REPLAYABLE in caps:
            granted |= caps & (Capability.SLICEABLE | Capability.MUTABLE)
        super().__init__(granted)
        self._width = width
        self._source = source
        self._window = deque(maxlen=width)
        self._assign = source.save() if Capability.REPLAYABLE in caps else None
        self._primed = False
        self._exhausted = False
        self._owned = False

    def _prime(self):
        if self._primed:
            return
        self._primed = True
        source = self._source
        while len(self._window) < self._width and not source.empty:
            self._window.append(source.front)
            source.pop_front()
        if len(self._window) < self._width:
            self._exhausted = True

    def _is_empty(self):
        self._prime()
        return self._exhausted

    def _get_front(self):
        return tuple(self._window)

    def _set_front(self, value):
        values = check_arity(value, self._width)
        _write_forward(self._assign.save(), values)
        self._window = deque(values, maxlen=self._width)

    def _pop_front(self):
        if self._source.empty:
            self._exhausted = True
            self._window.clear()
        else:
            self._window.append(self._source.front)
            self._source.pop_front()
        if self._assign is not None:
            self._assign.pop_front()

    def _save(self):
        clone = copy.copy(self)
        clone._window = deque(self._window, maxlen=self._width)
        clone._source = self._source.save()
        clone._assign = self._assign.save()
        clone._owned = True
        return clone

    def _length(self):
        if self._is_empty():
            return 0
        return len(self._source) + 1

    def _get_slice(self, start, stop):
        return segment(self._width, self._assign[start:stop + self._width - 1])

    def close(self):
        if self._assign is not None:
            self._assign.close()
        if self._owned:
            self._source.close()


class BidirectionalSegment(Range):
    """Windows over a finite reversible source, walked from both ends.

    ``_front_window`` and ``_back_window`` roll over the source while the
    elements between them (``_mid``) last. Once ``_mid`` is drained the
    remaining windows overlap both buffers, and ``_gap`` (distance between
    the two window starts) drives the hand-off: the incoming element is
    taken from the opposite buffer and ``_gap`` shrinks by one per step.
    """

    supports = (
        Capability.REVERSIBLE
        | Capability.REPLAYABLE
        | Capability.SIZED
        | Capability.SLICEABLE
        | Capability.MUTABLE
    )

    def __init__(self, source: Range, width: int):
        caps = source.capabilities
        granted = Capability.REVERSIBLE | (caps & (Capability.REPLAYABLE | Capability.SIZED))
        if Capability.REPLAYABLE in caps:
            granted |= caps & (Capability.SLICEABLE | Capability.MUTABLE)
        super().__init__(granted)
        self._width = width
        self._mid = source
        self._assign = source.save() if Capability.REPLAYABLE in caps else None
        self._front_window = deque(maxlen=width)
        self._back_window = deque(maxlen=width)
        self._gap = None
        self._primed = False
        self._owned = False

    def _prime(self):
        if self._primed:
            return
        self._primed = True
        self._fill(self._mid)

    def _fill(self, mid: Range):
        width = self._width
        front = deque(maxlen=width)
        back = deque(maxlen=width)
        self._gap = None
        while len(front) < width and not mid.empty:
            front.append(mid.front)
            mid.pop_front()
        if len(front) < width:
            self._gap = -1
        else:
            pulled = 0
            while pulled < width and not mid.empty:
                back.appendleft(mid.back)
                mid.pop_back()
                pulled += 1
            if pulled < width:
                # Short source: the back window reuses the tail of the front one
                for value in reversed(list(front)[pulled:]):
                    back.appendleft(value)
                self._gap = pulled
            elif mid.empty:
                self._gap = width
        self._mid = mid
        self._front_window = front
        self._back_window = back

    def _is_empty(self):
        self._prime()
        return self._gap is not None and self._gap < 0

    def _get_front(self):
        return tuple(self._front_window)

    def _get_back(self):
        return tuple(self._back_window)

    def _pop_front(self):
        gap = self._gap
        if gap is None:
            self._front_window.append(self._mid.front)
            self._mid.pop_front()
            if self._mid.empty:
                self._gap = self._width
        else:
            if gap > 0:
                self._front_window.append(self._back_window[self._width - gap])
            self._gap = gap - 1
        if self._assign is not None and (self._gap is None or self._gap >= 0):
            self._assign.pop_front()

    def _pop_back(self):
        gap = self._gap
        if gap is None:
            self._back_window.appendleft(self._mid.back)
            self._mid.pop_back()
            if self._mid.empty:
                self._gap = self._width
        else:
            if gap > 0:
                self._back_window.appendleft(self._front_window[gap - 1])
            self._gap = gap - 1
        if self._assign is not None and (self._gap is None or self._gap >= 0):
            self._assign.pop_back()

    def _save(self):
        clone = copy.copy(self)
        clone._front_window = deque(self._front_window, maxlen=self._width)
        clone._back_window = deque(self._back_window, maxlen=self._width)
        clone._mid = self._mid.save()
        clone._assign = self._assign.save()
        clone._owned = True
        return clone

    def _length(self):
        if self._is_empty():
            return 0
        if self._gap is not None:
            return self._gap + 1
        return len(self._mid) + self._width + 1

    def _resync(self):
        # Rebuild both buffers from the written source span
        if self._owned:
            self._mid.close()
        self._fill(self._assign.save())
        self._owned = True

    def _set_front(self, value):
        _write_forward(self._assign.save(), check_arity(value, self._width))
        self._resync()

    def _set_back(self, value):
        cursor = self._assign.save()
        for item in reversed(check_arity(value, self._width)):
            cursor.back = item
            cursor.pop_back()
        self._resync()

    def _get_slice(self, start, stop):
        return segment(self._width, self._assign[start:stop + self._width - 1])

    def close(self):
        if self._assign is not None:
            self._assign.close()
        if self._owned:
            self._mid.close()


def _choose(width: int, source: Range) -> Range:
    caps = source.capabilities
    if width == 1:
        return UnarySegment(source)
    if Capability.INDEXED in caps and Capability.REVERSIBLE in caps and Capability.SIZED in caps:
        return IndexedSegment(source, width)
    if Capability.INDEXED in caps and Capability.INFINITE in caps:
        return InfiniteIndexedSegment(source, width)
    if Capability.REVERSIBLE in caps:
        return BidirectionalSegment(source, width)
    return RollingSegment(source, width)


def segment(n: int, r: Any) -> Range:
    """All contiguous windows of width ``n`` over ``r``, as tuples."""
    width = validate_spec(WindowSpec, width=n).width
    source = as_range(r)
    result = _choose(width, source)
    logger.debug(
        f"segment({width}) over {type(source).__name__} [{describe(source.capabilities)}] "
        f"-> {type(result).__name__} [{describe(result.capabilities)}]"
    )
    return result
