"""Delay and parallel: tuples of elements at fixed offsets from the current position."""

import logging
from typing import Any, Sequence

from .adapters import as_range
from .base import MapRange, Range, SkipRange
from .models import DelaySpec, ParallelSpec, validate_spec
from .segment import segment
from .tuples import shred

logger = logging.getLogger(__name__)


def parallel(n: int, r: Any) -> MapRange:
    """Every element of ``r`` broadcast into an ``n``-tuple."""
    count = validate_spec(ParallelSpec, count=n).count
    return MapRange(lambda element: (element,) * count, as_range(r))


def delay(offsets: Sequence[int], r: Any) -> Range:
    """Tuples whose k-th field is the element ``offsets[k]`` places ahead.

    ``delay([0, 2], r)`` pairs each element with the one two steps later.
    """
    spec = validate_spec(DelaySpec, offsets=list(offsets))
    source = as_range(r)
    if spec.uniform:
        return parallel(len(spec.offsets), SkipRange(source, spec.offsets[0]))
    logger.debug(f"delay {spec.offsets} through a window of {spec.window}")
    return shred(spec.offsets, segment(spec.window, source))
