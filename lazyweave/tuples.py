"""
Field operations on ranges of tuples.

All of them are projections (MapRange) over their input, so they keep
every capability but write-through.
"""

from typing import Any, Optional, Sequence, Union

from .adapters import as_range
from .base import MapRange
from .compose import knit
from .errors import ArityError
from .models import ShredSpec, TwistSpec, validate_spec


def _fields(value: Any) -> tuple:
    if not isinstance(value, tuple):
        raise ArityError(f"expected a tuple element, got {type(value).__name__}")
    return value


def shred(indices: Union[int, Sequence[int]], r: Any) -> MapRange:
    """Select, reorder or repeat tuple fields; a single index yields bare elements."""
    if not isinstance(indices, int):
        indices = list(indices)
    spec = validate_spec(ShredSpec, indices=indices)
    positions = spec.as_list()
    highest = max(positions)

    def project(value):
        fields = _fields(value)
        if highest >= len(fields):
            raise ArityError(f"field {highest} requested from a {len(fields)}-tuple")
        if spec.scalar:
            return fields[positions[0]]
        return tuple(fields[i] for i in positions)

    return MapRange(project, as_range(r))


def untuple(r: Any) -> MapRange:
    """Unwrap 1-tuples into their single field."""
    def unwrap(value):
        fields = _fields(value)
        if len(fields) != 1:
            raise ArityError(f"untuple expects 1-tuples, got a {len(fields)}-tuple")
        return fields[0]

    return MapRange(unwrap, as_range(r))


def twist(r: Any, shift: Optional[int] = None) -> MapRange:
    """Rotate the fields of every tuple left by ``shift``, or reverse them."""
    shift = validate_spec(TwistSpec, shift=shift).shift

    def rotate(value):
        fields = _fields(value)
        if shift is None:
            return fields[::-1]
        if not fields:
            return fields
        k = shift % len(fields)
        return fields[k:] + fields[:k]

    return MapRange(rotate, as_range(r))


def stitch(*ranges: Any) -> MapRange:
    """Knit ``ranges`` and splice the fields of tuple elements into one flat tuple."""
    def merge(row):
        merged = ()
        for item in row:
            merged += item if isinstance(item, tuple) else (item,)
        return merged

    return MapRange(merge, knit(*ranges))


def splice(n: int, r1: Any, r2: Any) -> MapRange:
    """Insert each element of ``r2`` as field ``n`` of the matching tuple of ``r1``."""
    if n < 0:
        raise ArityError(f"cannot splice at negative field {n}")

    def insert(row):
        fields, item = row
        fields = _fields(fields)
        if n > len(fields):
            raise ArityError(f"cannot splice at field {n} of a {len(fields)}-tuple")
        return fields[:n] + (item,) + fields[n:]

    return MapRange(insert, knit(r1, r2))
