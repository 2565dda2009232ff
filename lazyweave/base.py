"""
Range protocol and the elementary lazy transformations.

A range is consumed by repeatedly checking ``empty``, reading ``front`` and
calling ``pop_front()``. Everything else (``save``, ``back``, indexing,
``len``, slicing, write-through) is available only when the range's
capability set grants it; asking for anything else raises CapabilityError
at the call site.

Concrete ranges implement protected hooks (``_is_empty``, ``_get_front``,
``_pop_front`` and the hooks listed in ``capabilities.RANGE_CONTRACT``); the
public methods here do the capability and bounds checks once, so the hooks
can assume valid arguments.
"""

import logging
from collections.abc import Iterable
from typing import Any, Callable, Iterator, List, Tuple

from .capabilities import (
    ALL,
    Capability,
    RangeContractMeta,
    describe,
    normalize,
    requires,
)
from .errors import (
    ArityError,
    CapabilityError,
    ConstructionError,
    ContractViolationError,
    EmptyRangeError,
    OutOfBoundsError,
)

logger = logging.getLogger(__name__)


def check_arity(value: Any, width: int) -> tuple:
    """Unpack ``value`` into a tuple of exactly ``width`` items or raise ArityError."""
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ArityError(f"expected {width} values, got {type(value).__name__}")
    values = tuple(value)
    if len(values) != width:
        raise ArityError(f"expected {width} values, got {len(values)}")
    return values


class Range(metaclass=RangeContractMeta):
    """Abstract lazily-evaluated sequence with a fixed capability set."""

    __abstract__ = True
    supports = Capability.NONE

    def __init__(self, capabilities: Capability = Capability.SINGLE_PASS):
        caps = normalize(capabilities)
        extra = caps & ~type(self).supports
        if extra:
            raise ContractViolationError(
                f"{type(self).__name__} cannot grant {describe(extra)}"
            )
        self._capabilities = caps

    # --------- capability queries ----------
    @property
    def capabilities(self) -> Capability:
        return self._capabilities

    def _require(self, capability: Capability, operation: str) -> None:
        if capability not in self._capabilities:
            raise CapabilityError(
                f"{type(self).__name__} does not support {operation} "
                f"(needs {describe(capability)}, has {describe(self._capabilities)})"
            )

    # --------- minimal consumption contract ----------
    @property
    def empty(self) -> bool:
        return self._is_empty()

    def __bool__(self) -> bool:
        return not self._is_empty()

    @property
    def front(self) -> Any:
        if self._is_empty():
            raise EmptyRangeError(f"front of empty {type(self).__name__}")
        return self._get_front()

    @front.setter
    def front(self, value: Any) -> None:
        self._require(Capability.MUTABLE, "front assignment")
        if self._is_empty():
            raise EmptyRangeError(f"front assignment on empty {type(self).__name__}")
        self._set_front(value)

    def pop_front(self) -> None:
        if self._is_empty():
            raise EmptyRangeError(f"pop_front on empty {type(self).__name__}")
        self._pop_front()

    def pop_front_n(self, n: int) -> int:
        """Advance up to ``n`` elements; return how many were actually skipped."""
        count = 0
        while count < n and not self._is_empty():
            self._pop_front()
            count += 1
        return count

    # --------- extended operations ----------
    @requires(Capability.REPLAYABLE)
    def save(self) -> "Range":
        return self._save()

    @property
    @requires(Capability.REVERSIBLE)
    def back(self) -> Any:
        if self._is_empty():
            raise EmptyRangeError(f"back of empty {type(self).__name__}")
        return self._get_back()

    @back.setter
    def back(self, value: Any) -> None:
        self._require(Capability.MUTABLE | Capability.REVERSIBLE, "back assignment")
        if self._is_empty():
            raise EmptyRangeError(f"back assignment on empty {type(self).__name__}")
        self._set_back(value)

    @requires(Capability.REVERSIBLE)
    def pop_back(self) -> None:
        if self._is_empty():
            raise EmptyRangeError(f"pop_back on empty {type(self).__name__}")
        self._pop_back()

    @requires(Capability.SIZED)
    def __len__(self) -> int:
        return self._length()

    def __getitem__(self, key):
        if isinstance(key, slice):
            self._require(Capability.SLICEABLE, "slicing")
            start, stop = self._check_slice(key)
            return self._get_slice(start, stop)
        self._require(Capability.INDEXED, "indexing")
        return self._get_index(self._check_index(key))

    def __setitem__(self, key, value) -> None:
        if isinstance(key, slice):
            raise CapabilityError(f"{type(self).__name__} does not support slice assignment")
        self._require(Capability.MUTABLE | Capability.INDEXED, "index assignment")
        self._set_index(self._check_index(key), value)

    def _check_index(self, index: int) -> int:
        index = int(index)
        sized = Capability.SIZED in self._capabilities
        if index < 0:
            if not sized:
                raise OutOfBoundsError(f"negative index {index} on a range without length")
            index += self._length()
            if index < 0:
                raise OutOfBoundsError(f"index {index - self._length()} out of range")
        elif sized and index >= self._length():
            raise OutOfBoundsError(f"index {index} out of range for length {self._length()}")
        return index

    def _check_slice(self, key: slice) -> Tuple[int, int]:
        if key.step not in (None, 1):
            raise ConstructionError("ranges only support contiguous slices (step 1)")
        sized = Capability.SIZED in self._capabilities
        length = self._length() if sized else None
        bounds = []
        for value, default in ((key.start, 0), (key.stop, length)):
            if value is None:
                if default is None:
                    raise OutOfBoundsError("an open-ended slice needs a range with length")
                value = default
            elif value < 0:
                if length is None:
                    raise OutOfBoundsError("negative slice bound on a range without length")
                value += length
            bounds.append(int(value))
        start, stop = bounds
        if start < 0 or stop < start or (length is not None and stop > length):
            raise OutOfBoundsError(f"slice [{key.start}:{key.stop}] out of range")
        return start, stop

    # --------- Python iteration ----------
    def __iter__(self) -> Iterator[Any]:
        cursor = self._save() if Capability.REPLAYABLE in self._capabilities else self
        try:
            while not cursor._is_empty():
                yield cursor._get_front()
                cursor._pop_front()
        finally:
            if cursor is not self:
                cursor.close()

    def __reversed__(self) -> Iterator[Any]:
        self._require(Capability.REVERSIBLE, "reverse iteration")
        return self._iter_back()

    def _iter_back(self) -> Iterator[Any]:
        cursor = self._save() if Capability.REPLAYABLE in self._capabilities else self
        try:
            while not cursor._is_empty():
                yield cursor._get_back()
                cursor._pop_back()
        finally:
            if cursor is not self:
                cursor.close()

    def to_list(self) -> List[Any]:
        return list(self)

    def close(self) -> None:
        """Release resources held by this view (no-op for most ranges)."""
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {describe(self._capabilities)}>"


# ============================================================================
# Elementary transformations
# ============================================================================

class MapRange(Range):
    """Lazily applies ``fn`` to every element; keeps all capabilities but MUTABLE."""

    supports = ALL & ~Capability.MUTABLE

    def __init__(self, fn: Callable[[Any], Any], source: Range):
        super().__init__(source.capabilities & self.supports)
        self._fn = fn
        self._source = source

    def _is_empty(self):
        return self._source.empty

    def _get_front(self):
        return self._fn(self._source.front)

    def _pop_front(self):
        self._source.pop_front()

    def _save(self):
        return MapRange(self._fn, self._source.save())

    def _get_back(self):
        return self._fn(self._source.back)

    def _pop_back(self):
        self._source.pop_back()

    def _get_index(self, index):
        return self._fn(self._source[index])

    def _length(self):
        return len(self._source)

    def _get_slice(self, start, stop):
        return MapRange(self._fn, self._source[start:stop])

    def close(self):
        self._source.close()


class FilterRange(Range):
    """Keeps the elements satisfying ``pred``, skipping the others lazily."""

    supports = Capability.REPLAYABLE | Capability.REVERSIBLE

    def __init__(self, pred: Callable[[Any], bool], source: Range):
        super().__init__(source.capabilities & self.supports)
        self._pred = pred
        self._source = source

    def _skip_front(self):
        source = self._source
        while not source.empty and not self._pred(source.front):
            source.pop_front()

    def _skip_back(self):
        source = self._source
        while not source.empty and not self._pred(source.back):
            source.pop_back()

    def _is_empty(self):
        self._skip_front()
        return self._source.empty

    def _get_front(self):
        return self._source.front

    def _pop_front(self):
        self._source.pop_front()

    def _save(self):
        return FilterRange(self._pred, self._source.save())

    def _get_back(self):
        self._skip_back()
        return self._source.back

    def _pop_back(self):
        self._skip_back()
        self._source.pop_back()

    def close(self):
        self._source.close()


class TakeRange(Range):
    """At most ``count`` elements of ``source``."""

    supports = ALL & ~Capability.INFINITE

    def __init__(self, source: Range, count: int):
        caps = source.capabilities
        known_length = bool(caps & (Capability.SIZED | Capability.INFINITE))
        granted = Capability.REPLAYABLE & caps
        if known_length:
            granted |= Capability.SIZED
            granted |= caps & (Capability.INDEXED | Capability.SLICEABLE | Capability.MUTABLE)
            if Capability.INDEXED in caps:
                granted |= Capability.REVERSIBLE
        elif Capability.MUTABLE in caps:
            granted |= Capability.MUTABLE
        super().__init__(granted)
        self._source = source
        self._count = max(0, int(count))

    def _is_empty(self):
        return self._count == 0 or self._source.empty

    def _get_front(self):
        return self._source.front

    def _set_front(self, value):
        self._source.front = value

    def _pop_front(self):
        self._source.pop_front()
        self._count -= 1

    def _save(self):
        return TakeRange(self._source.save(), self._count)

    def _length(self):
        if Capability.INFINITE in self._source.capabilities:
            return self._count
        return min(self._count, len(self._source))

    def _get_index(self, index):
        return self._source[index]

    def _set_index(self, index, value):
        self._source[index] = value

    def _get_back(self):
        return self._source[self._length() - 1]

    def _set_back(self, value):
        self._source[self._length() - 1] = value

    def _pop_back(self):
        self._count = self._length() - 1

    def _get_slice(self, start, stop):
        return self._source[start:stop]

    def close(self):
        self._source.close()


class SkipRange(Range):
    """``source`` minus its first ``count`` elements, skipped on first access."""

    supports = ALL

    def __init__(self, source: Range, count: int, owned: bool = False):
        super().__init__(source.capabilities)
        self._source = source
        self._pending = max(0, int(count))
        self._owned = owned

    def _ready(self) -> Range:
        if self._pending:
            skipped = self._source.pop_front_n(self._pending)
            if skipped < self._pending:
                logger.debug(f"skip({self._pending}) exhausted {type(self._source).__name__} "
                             f"after {skipped} elements")
            self._pending = 0
        return self._source

    def _is_empty(self):
        return self._ready().empty

    def _get_front(self):
        return self._ready().front

    def _set_front(self, value):
        self._ready().front = value

    def _pop_front(self):
        self._ready().pop_front()

    def _save(self):
        return SkipRange(self._source.save(), self._pending, owned=True)

    def _get_back(self):
        return self._ready().back

    def _set_back(self, value):
        self._ready().back = value

    def _pop_back(self):
        self._ready().pop_back()

    def _get_index(self, index):
        return self._ready()[index]

    def _set_index(self, index, value):
        self._ready()[index] = value

    def _length(self):
        return len(self._ready())

    def _get_slice(self, start, stop):
        return self._ready()[start:stop]

    def close(self):
        if self._owned:
            self._source.close()


def take(source: Any, count: int) -> TakeRange:
    """First ``count`` elements of ``source`` (fewer if it runs out)."""
    from .adapters import as_range
    return TakeRange(as_range(source), count)


def drop(source: Any, count: int) -> Range:
    """``source`` with its first ``count`` elements skipped, eagerly."""
    from .adapters import as_range
    result = as_range(source)
    if count < 0:
        raise ConstructionError(f"cannot drop a negative number of elements: {count}")
    dropped = result.pop_front_n(count)
    if dropped < count:
        logger.debug(f"drop({count}) exhausted {type(result).__name__} after {dropped} elements")
    return result


def skip(source: Any, count: int) -> SkipRange:
    """``source`` with its first ``count`` elements skipped when it is first read."""
    from .adapters import as_range
    if count < 0:
        raise ConstructionError(f"cannot skip a negative number of elements: {count}")
    return SkipRange(as_range(source), count)


def tmap(fn: Callable[[Any], Any], source: Any) -> MapRange:
    from .adapters import as_range
    return MapRange(fn, as_range(source))


def tfilter(pred: Callable[[Any], bool], source: Any) -> FilterRange:
    from .adapters import as_range
    return FilterRange(pred, as_range(source))
