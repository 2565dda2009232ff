"""
Composition combinators: knit, concat, flatten and friends.

``knit`` walks several ranges in lock step and yields tuples of their
fronts. ``concat`` flattens one level of nesting, handing the last inner
range over between its front and back cursors. The remaining helpers
(``transverse``, ``interleave``, ``indexed``, ``chunks``, ``tails``,
``heads``) are small compositions built on the same pieces.
"""

import logging
from typing import Any, List, Optional, Sequence

from .adapters import as_range, count_from, cycle, is_range_like
from .base import Range, TakeRange, check_arity
from .capabilities import ALL, Capability, capabilities_of, describe
from .errors import CapabilityError, ConstructionError
from .models import ChunkSpec, FlattenSpec, validate_spec

logger = logging.getLogger(__name__)


# ============================================================================
# knit
# ============================================================================

def _knit_capabilities(ranges: Sequence[Range]) -> Capability:
    caps = [r.capabilities for r in ranges]
    common = ALL
    for c in caps:
        common &= c
    granted = common & (
        Capability.REPLAYABLE
        | Capability.INDEXED
        | Capability.SLICEABLE
        | Capability.MUTABLE
        | Capability.INFINITE
    )
    if Capability.INFINITE not in common and all(
        c & (Capability.SIZED | Capability.INFINITE) for c in caps
    ):
        granted |= Capability.SIZED
    if all(Capability.REVERSIBLE in c and Capability.SIZED in c for c in caps):
        granted |= Capability.REVERSIBLE
    return granted


def _finite_lengths(ranges: Sequence[Range]) -> List[int]:
    return [len(r) for r in ranges if Capability.INFINITE not in r.capabilities]


class Knit(Range):
    """Tuples of the simultaneous fronts of several ranges."""

    supports = ALL

    def __init__(self, ranges: Sequence[Range], capabilities: Capability, owned: bool = False,
                 copies: Sequence[Range] = ()):
        super().__init__(capabilities)
        self._ranges = list(ranges)
        self._owned = owned
        self._copies = list(copies)

    def _is_empty(self):
        return any(r.empty for r in self._ranges)

    def _get_front(self):
        return tuple(r.front for r in self._ranges)

    def _set_front(self, value):
        for r, item in zip(self._ranges, check_arity(value, len(self._ranges))):
            r.front = item

    def _pop_front(self):
        for r in self._ranges:
            r.pop_front()

    def _save(self):
        return Knit([r.save() for r in self._ranges], self.capabilities, owned=True)

    def _get_back(self):
        return tuple(r.back for r in self._ranges)

    def _set_back(self, value):
        for r, item in zip(self._ranges, check_arity(value, len(self._ranges))):
            r.back = item

    def _pop_back(self):
        for r in self._ranges:
            r.pop_back()

    def _get_index(self, index):
        return tuple(r[index] for r in self._ranges)

    def _set_index(self, index, value):
        for r, item in zip(self._ranges, check_arity(value, len(self._ranges))):
            r[index] = item

    def _length(self):
        return min(_finite_lengths(self._ranges))

    def _get_slice(self, start, stop):
        return knit(*[r[start:stop] for r in self._ranges])

    @property
    def arity(self) -> int:
        return len(self._ranges)

    def close(self):
        if self._owned:
            for r in self._ranges:
                r.close()
        else:
            for r in self._copies:
                r.close()


def knit(*ranges: Any) -> Knit:
    """Zip ``ranges`` into a range of tuples, stopping with the shortest."""
    if not ranges:
        raise ConstructionError("knit needs at least one range")
    sources = [as_range(r) for r in ranges]
    caps = _knit_capabilities(sources)
    copies = []
    if Capability.REVERSIBLE in caps:
        # Back ends must line up, so longer inputs are trimmed to the common length
        common = min(_finite_lengths(sources))
        excess = [len(source) - common for source in sources]
        given = [source is r for source, r in zip(sources, ranges)]
        if any(extra and own and Capability.REPLAYABLE not in source.capabilities
               for source, extra, own in zip(sources, excess, given)):
            caps &= ~Capability.REVERSIBLE
            logger.debug("knit drops REVERSIBLE: trimming would consume a single-pass input")
        else:
            for i, source in enumerate(sources):
                if not excess[i]:
                    continue
                if given[i]:
                    source = source.save()
                    copies.append(source)
                    sources[i] = source
                for _ in range(excess[i]):
                    source.pop_back()
    result = Knit(sources, caps, copies=copies)
    logger.debug(f"knit of {len(sources)} ranges -> [{describe(caps)}]")
    return result


def min_length(*ranges: Any) -> int:
    """Shortest length among the finite ranges; infinite ones are ignored."""
    sources = [as_range(r) for r in ranges]
    for source in sources:
        if not source.capabilities & (Capability.SIZED | Capability.INFINITE):
            raise CapabilityError(f"{type(source).__name__} has no known length")
    lengths = _finite_lengths(sources)
    if not lengths:
        raise ConstructionError("min_length needs at least one finite range")
    return min(lengths)


def indexed(r: Any, start: int = 0) -> Knit:
    """Pairs ``(index, element)``, counting from ``start``."""
    source = as_range(r)
    if Capability.SIZED in source.capabilities:
        return knit(range(start, start + len(source)), source)
    return knit(count_from(start), source)


# ============================================================================
# concat / flatten
# ============================================================================

class Concat(Range):
    """One level of flattening over a range of ranges.

    ``_front`` and ``_back`` are the inner ranges currently walked by each
    end. While ``_outer`` still holds elements they are distinct; once it
    drains, the end that runs dry takes over the other end's inner range,
    so both ends share it until it is exhausted. Inner elements that are
    replayable ranges are walked through saved copies, which are closed
    once exhausted.
    """

    supports = Capability.REPLAYABLE | Capability.REVERSIBLE

    def __init__(self, outer: Range, capabilities: Capability, front: Optional[Range] = None,
                 back: Optional[Range] = None, owned: bool = False):
        super().__init__(capabilities)
        self._outer = outer
        self._front = front
        self._back = back
        self._owned = owned

    @staticmethod
    def _adopt(element: Any) -> Range:
        inner = as_range(element)
        if inner is element and Capability.REPLAYABLE in inner.capabilities:
            inner = inner.save()
        return inner

    @staticmethod
    def _retire(inner: Range) -> None:
        # Single-pass inner ranges may be the caller's own objects
        if Capability.REPLAYABLE in inner.capabilities:
            inner.close()

    def _normalize_front(self):
        while self._front is None or self._front.empty:
            if self._front is not None and self._front is not self._back:
                self._retire(self._front)
                self._front = None
            if not self._outer.empty:
                self._front = self._adopt(self._outer.front)
                self._outer.pop_front()
            elif self._back is not None and self._back is not self._front:
                self._front = self._back
            else:
                if self._front is not None:
                    self._retire(self._front)
                self._front = self._back = None
                return

    def _normalize_back(self):
        while self._back is None or self._back.empty:
            if self._back is not None and self._back is not self._front:
                self._retire(self._back)
                self._back = None
            if not self._outer.empty:
                self._back = self._adopt(self._outer.back)
                self._outer.pop_back()
            elif self._front is not None and self._front is not self._back:
                self._back = self._front
            else:
                if self._back is not None:
                    self._retire(self._back)
                self._front = self._back = None
                return

    def _is_empty(self):
        self._normalize_front()
        return self._front is None

    def _get_front(self):
        return self._front.front

    def _pop_front(self):
        self._front.pop_front()

    def _get_back(self):
        self._normalize_back()
        return self._back.back

    def _pop_back(self):
        self._normalize_back()
        self._back.pop_back()

    def _save(self):
        front = self._front.save() if self._front is not None else None
        if self._back is None:
            back = None
        elif self._back is self._front:
            back = front
        else:
            back = self._back.save()
        return Concat(self._outer.save(), self.capabilities, front, back, owned=True)

    def close(self):
        for inner in {id(r): r for r in (self._front, self._back) if r is not None}.values():
            self._retire(inner)
        self._front = self._back = None
        if self._owned:
            self._outer.close()


def _nests(source: Range) -> bool:
    return not source.empty and is_range_like(source.front)


def _concat_capabilities(source: Range) -> Capability:
    """Walk capabilities of a nested ``source``, judged from its first element."""
    first = capabilities_of(source.front)
    caps = source.capabilities & (Capability.REPLAYABLE | Capability.REVERSIBLE)
    if Capability.REPLAYABLE not in first:
        caps &= ~Capability.REPLAYABLE
    if Capability.REVERSIBLE not in first:
        caps &= ~Capability.REVERSIBLE
    return caps


def concat(r: Any) -> Range:
    """Flatten one level of ``r``; a range of plain elements is returned as is."""
    source = as_range(r)
    if not _nests(source):
        return source
    return Concat(source, _concat_capabilities(source))


def flatten(r: Any, depth: Optional[int] = None) -> Range:
    """Apply concat ``depth`` times, or until the elements stop nesting."""
    depth = validate_spec(FlattenSpec, depth=depth).depth
    result = as_range(r)
    levels = 0
    while (depth is None or levels < depth) and _nests(result):
        result = Concat(result, _concat_capabilities(result))
        levels += 1
    logger.debug(f"flatten removed {levels} level(s) of nesting")
    return result


# ============================================================================
# round-robin helpers
# ============================================================================

class Transverse(Range):
    """Elements taken from each range in turn, stopping at the first exhausted one."""

    supports = Capability.REPLAYABLE

    def __init__(self, ranges: Sequence[Range], position: int = 0, owned: bool = False):
        caps = ALL
        for r in ranges:
            caps &= r.capabilities
        super().__init__(caps & Capability.REPLAYABLE)
        self._ranges = list(ranges)
        self._position = position
        self._owned = owned

    def _is_empty(self):
        return self._ranges[self._position].empty

    def _get_front(self):
        return self._ranges[self._position].front

    def _pop_front(self):
        self._ranges[self._position].pop_front()
        self._position = (self._position + 1) % len(self._ranges)

    def _save(self):
        return Transverse([r.save() for r in self._ranges], self._position, owned=True)

    def close(self):
        if self._owned:
            for r in self._ranges:
                r.close()


def transverse(*ranges: Any) -> Transverse:
    if not ranges:
        raise ConstructionError("transverse needs at least one range")
    return Transverse([as_range(r) for r in ranges])


def interleave(big: Any, small: Any) -> Transverse:
    """``big`` with the elements of ``small`` cycled in between, e.g. separators."""
    return transverse(big, cycle(small))


# ============================================================================
# chunks
# ============================================================================

class Chunks(Range):
    """Consecutive non-overlapping groups of ``size`` elements, as tuples.

    The last group holds whatever is left and may be shorter. A group is
    pulled from the source when it is first read.
    """

    supports = Capability.REPLAYABLE | Capability.SIZED | Capability.INFINITE

    def __init__(self, source: Range, size: int, head: Optional[tuple] = None, owned: bool = False):
        super().__init__(source.capabilities & self.supports)
        self._source = source
        self._size = size
        self._head = head
        self._owned = owned

    def _fill(self) -> tuple:
        if self._head is None:
            items = []
            while len(items) < self._size and not self._source.empty:
                items.append(self._source.front)
                self._source.pop_front()
            self._head = tuple(items)
        return self._head

    def _is_empty(self):
        return self._head is None and self._source.empty

    def _get_front(self):
        return self._fill()

    def _pop_front(self):
        self._fill()
        self._head = None

    def _save(self):
        return Chunks(self._source.save(), self._size, self._head, owned=True)

    def _length(self):
        pending = 0 if self._head is None else 1
        return pending + (len(self._source) + self._size - 1) // self._size

    def close(self):
        if self._owned:
            self._source.close()


def chunks(n: int, r: Any) -> Chunks:
    """Split ``r`` into tuples of ``n`` consecutive elements."""
    size = validate_spec(ChunkSpec, size=n).size
    return Chunks(as_range(r), size)


# ============================================================================
# tails / heads
# ============================================================================

class Tails(Range):
    """Successive suffixes of a replayable range, ending with the empty one."""

    supports = Capability.REPLAYABLE | Capability.SIZED

    def __init__(self, cursor: Optional[Range], capabilities: Capability):
        super().__init__(capabilities)
        self._cursor = cursor

    def _is_empty(self):
        return self._cursor is None

    def _get_front(self):
        return self._cursor.save()

    def _pop_front(self):
        if self._cursor.empty:
            self._cursor = None
        else:
            self._cursor.pop_front()

    def _save(self):
        return Tails(self._cursor.save() if self._cursor is not None else None, self.capabilities)

    def _length(self):
        return 0 if self._cursor is None else len(self._cursor) + 1


def tails(r: Any) -> Tails:
    source = as_range(r)
    if Capability.REPLAYABLE not in source.capabilities:
        raise CapabilityError("tails needs a replayable range")
    caps = Capability.REPLAYABLE | (source.capabilities & Capability.SIZED)
    if source.empty:
        return Tails(None, caps)
    cursor = source.save()
    cursor.pop_front()
    return Tails(cursor, caps)


class Heads(Range):
    """Prefixes of a replayable range, from the empty one up to the whole range."""

    supports = Capability.REPLAYABLE | Capability.SIZED

    def __init__(self, source: Range, count: int = 0):
        super().__init__(Capability.REPLAYABLE | (source.capabilities & Capability.SIZED))
        self._source = source
        self._count = count

    def _is_empty(self):
        if Capability.SIZED in self._source.capabilities:
            return self._count > len(self._source)
        if self._count == 0:
            return False
        ahead = self._source.save()
        try:
            return ahead.pop_front_n(self._count) < self._count
        finally:
            ahead.close()

    def _get_front(self):
        return TakeRange(self._source.save(), self._count)

    def _pop_front(self):
        self._count += 1

    def _save(self):
        return Heads(self._source, self._count)

    def _length(self):
        return max(0, len(self._source) - self._count + 1)


def heads(r: Any) -> Heads:
    source = as_range(r)
    if Capability.REPLAYABLE not in source.capabilities:
        raise CapabilityError("heads needs a replayable range")
    return Heads(source.save())
