"""
Forward-conversion memoization buffer.

``MemoBuffer`` turns a single-pass source into any number of independent
cursors. Elements are pulled from the source at most once, kept in a
circular store while some live cursor may still read them, and dropped as
soon as the slowest cursor has moved past them.

Cursors are plain integer handles into the buffer's position table;
``Memoized`` wraps one handle as a replayable range. Retirement is always
explicit (``release()`` or leaving a ``with`` block).
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional

from .adapters import as_range
from .base import Range
from .capabilities import Capability, describe
from .config import get_settings
from .errors import (
    CapabilityError,
    ConstructionError,
    EmptyRangeError,
    OutOfBoundsError,
    ReleasedCursorError,
)

logger = logging.getLogger(__name__)

TraceHook = Callable[[str, Dict[str, Any]], None]


def _round_up_pow2(n: int) -> int:
    capacity = 1
    while capacity < n:
        capacity <<= 1
    return capacity


@dataclass
class BufferStats:
    """Snapshot of a MemoBuffer"""
    pulls: int
    grows: int
    capacity: int
    live_cursors: int
    min_retained: int
    produced_end: int

    @property
    def retained(self) -> int:
        return self.produced_end - self.min_retained

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["retained"] = self.retained
        return data


class MemoBuffer:
    """Shared store of already-produced elements plus the unconsumed source."""

    def __init__(self, source: Any, capacity: Optional[int] = None, trace: Optional[TraceHook] = None):
        if capacity is None:
            capacity = get_settings().memo_capacity
        if capacity < 1:
            raise ConstructionError(f"memo capacity must be positive, got {capacity}")
        self._source = as_range(source)
        self._capacity = _round_up_pow2(capacity)
        self._store: List[Any] = [None] * self._capacity
        self._slots: List[Optional[int]] = []
        self._free: List[int] = []
        self._min = 0
        self._end = 0
        self._pulls = 0
        self._grows = 0
        self._trace = trace

    # --------- introspection ----------
    @property
    def source_capabilities(self) -> Capability:
        return self._source.capabilities

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def live_cursors(self) -> int:
        return len(self._slots) - len(self._free)

    def stats(self) -> BufferStats:
        return BufferStats(
            pulls=self._pulls,
            grows=self._grows,
            capacity=self._capacity,
            live_cursors=self.live_cursors,
            min_retained=self._min,
            produced_end=self._end,
        )

    def _emit(self, event: str, **details) -> None:
        if self._trace is not None:
            self._trace(event, details)

    # --------- cursor lifecycle ----------
    def acquire(self, offset: int = 0) -> int:
        """Register a cursor at ``offset`` and return its handle."""
        if offset < self._min or offset > self._end:
            raise OutOfBoundsError(
                f"offset {offset} outside retained span [{self._min}, {self._end}]"
            )
        if self._free:
            handle = self._free.pop()
            self._slots[handle] = offset
        else:
            handle = len(self._slots)
            self._slots.append(offset)
        self._emit("acquire", handle=handle, offset=offset)
        logger.debug(f"Acquired cursor {handle} at offset {offset}")
        return handle

    def duplicate(self, handle: int) -> int:
        return self.acquire(self.offset(handle))

    def release(self, handle: int) -> None:
        offset = self.offset(handle)
        self._slots[handle] = None
        self._free.append(handle)
        self._emit("release", handle=handle, offset=offset)
        logger.debug(f"Released cursor {handle} at offset {offset}")
        if offset == self._min:
            self._compact()

    def offset(self, handle: int) -> int:
        if handle < 0 or handle >= len(self._slots) or self._slots[handle] is None:
            raise ReleasedCursorError(f"cursor {handle} is not live")
        return self._slots[handle]

    # --------- reading ----------
    def is_empty(self, handle: int) -> bool:
        offset = self.offset(handle)
        if offset < self._end:
            return False
        self._fill(offset + 1)
        return offset >= self._end

    def value(self, handle: int) -> Any:
        offset = self.offset(handle)
        if offset >= self._end:
            self._fill(offset + 1)
            if offset >= self._end:
                raise EmptyRangeError(f"cursor {handle} is past the end of the source")
        return self._read(offset)

    def value_at(self, offset: int) -> Any:
        if offset < self._min or offset >= self._end:
            raise OutOfBoundsError(
                f"offset {offset} outside retained span [{self._min}, {self._end})"
            )
        return self._read(offset)

    def remaining(self, handle: int) -> int:
        offset = self.offset(handle)
        if Capability.SIZED not in self._source.capabilities:
            raise CapabilityError(
                f"remaining() needs a sized source, got {describe(self._source.capabilities)}"
            )
        return self._end - offset + len(self._source)

    def _read(self, offset: int) -> Any:
        return self._store[offset & (self._capacity - 1)]

    # --------- moving ----------
    def advance(self, handle: int, n: int = 1) -> int:
        """Move a cursor ``n`` positions forward; return how far it actually moved."""
        offset = self.offset(handle)
        if n < 0:
            raise ConstructionError(f"cannot advance a cursor by {n}")
        target = offset + n
        if target <= self._end:
            self._slots[handle] = target
            if offset == self._min:
                self._compact()
            return n
        self._slots[handle] = target
        self._compact()
        self._fill(target)
        if self._end < target:
            self._slots[handle] = self._end
            self._compact()
        return self._slots[handle] - offset

    def _fill(self, target: int) -> None:
        source = self._source
        while self._end < target and not source.empty:
            position = self._end
            if position >= self._min:
                if position - self._min >= self._capacity:
                    self._grow()
                self._store[position & (self._capacity - 1)] = source.front
            source.pop_front()
            self._end += 1
            self._pulls += 1
            self._emit("pull", offset=position)

    def _grow(self) -> None:
        old_capacity = self._capacity
        new_capacity = old_capacity * 2
        store = [None] * new_capacity
        for position in range(self._min, self._end):
            store[position & (new_capacity - 1)] = self._store[position & (old_capacity - 1)]
        self._store = store
        self._capacity = new_capacity
        self._grows += 1
        self._emit("grow", capacity=new_capacity)
        logger.debug(f"Memo buffer grown from {old_capacity} to {new_capacity} slots")

    def _compact(self) -> None:
        live = [offset for offset in self._slots if offset is not None]
        new_min = min(live) if live else self._end
        if new_min == self._min:
            return
        # Only a clamped advance lowers the minimum, and nothing below end was dropped then
        for position in range(self._min, min(new_min, self._end)):
            self._store[position & (self._capacity - 1)] = None
        self._emit("compact", old_min=self._min, new_min=new_min)
        self._min = new_min

    def open(self) -> "Memoized":
        """A new cursor view at the oldest retained position."""
        return Memoized(self, self.acquire(self._min))

    def __repr__(self) -> str:
        return (
            f"<MemoBuffer capacity={self._capacity} span=[{self._min}, {self._end}) "
            f"cursors={self.live_cursors}>"
        )


class Memoized(Range):
    """Replayable range over one cursor of a MemoBuffer."""

    supports = Capability.REPLAYABLE | Capability.SIZED | Capability.INFINITE

    def __init__(self, buffer: MemoBuffer, handle: int):
        caps = Capability.REPLAYABLE | (
            buffer.source_capabilities & (Capability.SIZED | Capability.INFINITE)
        )
        super().__init__(caps)
        self._buffer = buffer
        self._handle = handle
        self._released = False

    @property
    def buffer(self) -> MemoBuffer:
        return self._buffer

    @property
    def position(self) -> int:
        return self._buffer.offset(self._live_handle())

    @property
    def released(self) -> bool:
        return self._released

    def _live_handle(self) -> int:
        if self._released:
            raise ReleasedCursorError("memoized cursor has been released")
        return self._handle

    def _is_empty(self):
        return self._buffer.is_empty(self._live_handle())

    def _get_front(self):
        return self._buffer.value(self._live_handle())

    def _pop_front(self):
        self._buffer.advance(self._live_handle(), 1)

    def pop_front_n(self, n: int) -> int:
        return self._buffer.advance(self._live_handle(), n)

    def _save(self):
        return Memoized(self._buffer, self._buffer.duplicate(self._live_handle()))

    def _length(self):
        return self._buffer.remaining(self._live_handle())

    def release(self) -> None:
        """Retire this cursor; releasing twice is a no-op."""
        if not self._released:
            self._buffer.release(self._handle)
            self._released = True

    def close(self):
        self.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False

    def __repr__(self) -> str:
        state = "released" if self._released else f"offset={self.position}"
        return f"<Memoized {state} {describe(self.capabilities)}>"


def memoize(r: Any, capacity: Optional[int] = None, trace: Optional[TraceHook] = None) -> Memoized:
    """Wrap ``r`` in a fresh MemoBuffer and return its first cursor."""
    buffer = MemoBuffer(r, capacity=capacity, trace=trace)
    return buffer.open()


def as_forward(r: Any, capacity: Optional[int] = None, trace: Optional[TraceHook] = None) -> Range:
    """``r`` itself when it is already replayable, otherwise a memoized view of it."""
    source = as_range(r)
    if Capability.REPLAYABLE in source.capabilities:
        return source
    logger.debug(f"Memoizing single-pass {type(source).__name__}")
    return memoize(source, capacity=capacity, trace=trace)
