"""
Fluent front end over the range combinators.

``LazyRange`` records the combinators to apply and builds the actual range
pipeline only when it is iterated or reduced. Each consumption rebuilds the
pipeline from the source, so a re-iterable source (a list, a tuple, a
replayable range) can be consumed any number of times.
"""

from contextlib import contextmanager
from functools import reduce as builtin_reduce
from typing import Any, Callable, Optional, Sequence, Union

from .adapters import as_range
from .base import FilterRange, MapRange, Range, SkipRange, TakeRange
from .capabilities import Capability
from .compose import chunks, concat, flatten, indexed, knit
from .delay import delay, parallel
from .memo import memoize
from .replicate import replicate_range, stutter
from .segment import segment
from .tuples import shred, twist


class LazyRange:
    """
    A chainable, lazy range. Combinators are stored and applied
    only when you iterate.
    """
    def __init__(self, source, ops=None):
        self._source = source
        self._ops = ops or []          # sequence of (op_name, args)

    # --------- chainable operators (lazy) ----------
    def map(self, fn: Callable[[Any], Any]) -> "LazyRange":
        return self._with_op(("map", fn))

    def filter(self, pred: Callable[[Any], bool]) -> "LazyRange":
        return self._with_op(("filter", pred))

    def skip(self, n: int) -> "LazyRange":
        return self._with_op(("skip", int(n)))

    def take(self, n: int) -> "LazyRange":
        return self._with_op(("take", int(n)))

    def segment(self, n: int) -> "LazyRange":
        return self._with_op(("segment", n))

    def delay(self, offsets: Sequence[int]) -> "LazyRange":
        return self._with_op(("delay", list(offsets)))

    def parallel(self, n: int) -> "LazyRange":
        return self._with_op(("parallel", n))

    def knit(self, *others: Any) -> "LazyRange":
        return self._with_op(("knit", others))

    def concat(self) -> "LazyRange":
        return self._with_op(("concat", None))

    def flatten(self, depth: Optional[int] = None) -> "LazyRange":
        return self._with_op(("flatten", depth))

    def stutter(self, n: int) -> "LazyRange":
        return self._with_op(("stutter", n))

    def replicate(self, n: int) -> "LazyRange":
        return self._with_op(("replicate", n))

    def shred(self, indices: Union[int, Sequence[int]]) -> "LazyRange":
        return self._with_op(("shred", indices))

    def twist(self, shift: Optional[int] = None) -> "LazyRange":
        return self._with_op(("twist", shift))

    def indexed(self, start: int = 0) -> "LazyRange":
        return self._with_op(("indexed", start))

    def batch(self, size: int) -> "LazyRange":
        """Group consecutive elements into tuples of `size`; the last may be shorter"""
        return self._with_op(("batch", size))

    def memoize(self, capacity: Optional[int] = None) -> "LazyRange":
        """Make the pipeline so far replayable without re-reading its source"""
        return self._with_op(("memoize", capacity))

    # --------- forcing evaluation ----------
    def build(self) -> Range:
        """Assemble the range pipeline described by this LazyRange; close() it when done"""
        return self._assemble()[0]

    def _assemble(self):
        """The built range plus the saved copies it was built on"""
        result = as_range(self._source)
        extra = []
        if result is self._source and Capability.REPLAYABLE in result.capabilities:
            # Work on a copy so the caller's range keeps its position
            result = result.save()
            extra.append(result)
        for op, arg in self._ops:
            if op == "map":
                result = MapRange(arg, result)
            elif op == "filter":
                result = FilterRange(arg, result)
            elif op == "skip":
                result = SkipRange(result, arg)
            elif op == "take":
                result = TakeRange(result, arg)
            elif op == "segment":
                result = segment(arg, result)
            elif op == "delay":
                result = delay(arg, result)
            elif op == "parallel":
                result = parallel(arg, result)
            elif op == "knit":
                others = []
                for other in arg:
                    if isinstance(other, LazyRange):
                        other_result, other_extra = other._assemble()
                        if other_result is not other._source:
                            extra.append(other_result)
                        extra.extend(other_extra)
                        other = other_result
                    others.append(other)
                result = knit(result, *others)
            elif op == "concat":
                result = concat(result)
            elif op == "flatten":
                result = flatten(result, arg)
            elif op == "stutter":
                result = stutter(arg, result)
            elif op == "replicate":
                result = replicate_range(result, arg)
            elif op == "shred":
                result = shred(arg, result)
            elif op == "twist":
                result = twist(result, arg)
            elif op == "indexed":
                result = indexed(result, arg)
            elif op == "batch":
                result = chunks(arg, result)
            elif op == "memoize":
                result = memoize(result, capacity=arg)
            else:
                raise ValueError(f"Unknown op: {op}")
        return result, extra

    @contextmanager
    def _pipeline(self):
        built, extra = self._assemble()
        try:
            yield built
        finally:
            if built is not self._source:
                built.close()
            for r in extra:
                if r is not built:
                    r.close()

    @property
    def capabilities(self) -> Capability:
        with self._pipeline() as built:
            return built.capabilities

    def to_list(self):
        return list(self)

    # --------- reducing operations (force evaluation) ----------
    def reduce(self, fn, initial=None):
        """Apply a function of two arguments cumulatively to items, from left to right"""
        if initial is not None:
            return builtin_reduce(fn, self, initial)
        return builtin_reduce(fn, self)

    def count(self):
        """Return the count of elements"""
        count = 0
        for _ in self:
            count += 1
        return count

    def first(self, default=None):
        """Return the first element, or default if empty"""
        for item in self:
            return item
        return default

    def last(self, default=None):
        """Return the last element, or default if empty"""
        with self._pipeline() as built:
            if Capability.REVERSIBLE in built.capabilities:
                return default if built.empty else built.back
            last_item = default
            for item in built:
                last_item = item
            return last_item

    # --------- iterator protocol ----------
    def __iter__(self):
        with self._pipeline() as built:
            yield from built

    # --------- helpers ----------
    def _with_op(self, op_tuple):
        return LazyRange(self._source, self._ops + [op_tuple])

    def __repr__(self):
        names = ".".join(op for op, _ in self._ops)
        return f"<LazyRange {names or 'source'}>"


def weave(source: Any) -> LazyRange:
    """Start a fluent pipeline over ``source``."""
    return LazyRange(source)
