"""
lazyweave: composable, lazily-evaluated range combinators.

Sliding windows, zipping, flattening, replication and re-iterability
conversion over Python sequences and iterables, with every combinator
advertising exactly the operations its input can support.
"""

from .adapters import (
    as_range,
    count_from,
    cycle,
    empty_range,
    is_range_like,
    once,
    repeat,
    restrict,
    tabulate,
)
from .base import FilterRange, MapRange, Range, SkipRange, TakeRange, drop, skip, take, tfilter, tmap
from .capabilities import (
    Capability,
    capabilities_of,
    common_capabilities,
    is_indexed,
    is_infinite,
    is_mutable,
    is_replayable,
    is_reversible,
    is_sized,
    is_sliceable,
)
from .compose import chunks, concat, flatten, heads, indexed, interleave, knit, min_length, tails, transverse
from .config import Settings, get_settings, load_settings, reset_settings, setup_logging
from .delay import delay, parallel
from .errors import (
    ArityError,
    CapabilityError,
    ConstructionError,
    ContractViolationError,
    EmptyRangeError,
    LazyWeaveError,
    OutOfBoundsError,
    ReleasedCursorError,
)
from .lazy import LazyRange, weave
from .memo import BufferStats, MemoBuffer, Memoized, as_forward, memoize
from .replicate import replicate_range, stutter
from .segment import segment
from .tuples import shred, splice, stitch, twist, untuple

__version__ = "0.1.0"

__all__ = [
    "ArityError",
    "BufferStats",
    "Capability",
    "CapabilityError",
    "ConstructionError",
    "ContractViolationError",
    "EmptyRangeError",
    "FilterRange",
    "LazyRange",
    "LazyWeaveError",
    "MapRange",
    "MemoBuffer",
    "Memoized",
    "OutOfBoundsError",
    "Range",
    "ReleasedCursorError",
    "Settings",
    "SkipRange",
    "TakeRange",
    "as_forward",
    "as_range",
    "capabilities_of",
    "chunks",
    "common_capabilities",
    "concat",
    "count_from",
    "cycle",
    "delay",
    "drop",
    "empty_range",
    "flatten",
    "get_settings",
    "heads",
    "indexed",
    "interleave",
    "is_indexed",
    "is_infinite",
    "is_mutable",
    "is_range_like",
    "is_replayable",
    "is_reversible",
    "is_sized",
    "is_sliceable",
    "knit",
    "load_settings",
    "memoize",
    "min_length",
    "once",
    "parallel",
    "repeat",
    "replicate_range",
    "reset_settings",
    "restrict",
    "segment",
    "setup_logging",
    "shred",
    "skip",
    "splice",
    "stitch",
    "stutter",
    "tabulate",
    "tails",
    "take",
    "tfilter",
    "tmap",
    "transverse",
    "twist",
    "untuple",
    "weave",
]
