"""
Capability model for lazyweave ranges.

Every range carries a fixed set of capability tags, decided once when the
range is constructed. Combinators read the tags of their inputs to pick an
implementation class and to decide which tags they advertise themselves.

The ``RangeContractMeta`` metaclass checks, at class creation time, that a
range class really implements every hook its declared capabilities need.
"""

import enum
import functools
import logging
from collections.abc import Iterable, MutableSequence, Sequence
from dataclasses import dataclass
from typing import Any, Callable, List, Tuple

from .errors import CapabilityError, ContractViolationError

logger = logging.getLogger(__name__)


class Capability(enum.Flag):
    """Operations a range may support beyond single-pass iteration."""
    NONE = 0
    SINGLE_PASS = enum.auto()
    REPLAYABLE = enum.auto()
    REVERSIBLE = enum.auto()
    INDEXED = enum.auto()
    SIZED = enum.auto()
    SLICEABLE = enum.auto()
    INFINITE = enum.auto()
    MUTABLE = enum.auto()


TAGS: Tuple[Capability, ...] = (
    Capability.SINGLE_PASS,
    Capability.REPLAYABLE,
    Capability.REVERSIBLE,
    Capability.INDEXED,
    Capability.SIZED,
    Capability.SLICEABLE,
    Capability.INFINITE,
    Capability.MUTABLE,
)

# Everything a finite, random-access, writable sequence (a list) offers.
RANDOM_ACCESS = (
    Capability.SINGLE_PASS
    | Capability.REPLAYABLE
    | Capability.REVERSIBLE
    | Capability.INDEXED
    | Capability.SIZED
    | Capability.SLICEABLE
)
ALL = RANDOM_ACCESS | Capability.INFINITE | Capability.MUTABLE


def describe(caps: Capability) -> str:
    """Human readable list of tag names, e.g. ``'REPLAYABLE|SIZED'``."""
    names = [tag.name for tag in TAGS if tag in caps]
    return "|".join(names) if names else "NONE"


def normalize(caps: Capability) -> Capability:
    """Enforce the model invariants on a tag set.

    Every range is at least single-pass. An infinite range has no length
    and no back end, so ``SIZED`` and ``REVERSIBLE`` are dropped next to
    ``INFINITE``.
    """
    caps = caps | Capability.SINGLE_PASS
    if Capability.INFINITE in caps:
        caps &= ~(Capability.SIZED | Capability.REVERSIBLE)
    return caps


def capabilities_of(obj: Any) -> Capability:
    """Answer the capability set of a range or of an adaptable Python object."""
    caps = getattr(obj, "capabilities", None)
    if isinstance(caps, Capability):
        return caps
    if isinstance(obj, MutableSequence):
        return RANDOM_ACCESS | Capability.MUTABLE
    if isinstance(obj, Sequence):
        return RANDOM_ACCESS
    if isinstance(obj, Iterable):
        return Capability.SINGLE_PASS
    return Capability.NONE


def common_capabilities(*objs: Any) -> Capability:
    """Intersection of the capability sets of all arguments."""
    caps = ALL
    for obj in objs:
        caps &= capabilities_of(obj)
    return caps


def is_replayable(obj: Any) -> bool:
    return Capability.REPLAYABLE in capabilities_of(obj)


def is_reversible(obj: Any) -> bool:
    return Capability.REVERSIBLE in capabilities_of(obj)


def is_indexed(obj: Any) -> bool:
    return Capability.INDEXED in capabilities_of(obj)


def is_sized(obj: Any) -> bool:
    return Capability.SIZED in capabilities_of(obj)


def is_sliceable(obj: Any) -> bool:
    return Capability.SLICEABLE in capabilities_of(obj)


def is_infinite(obj: Any) -> bool:
    return Capability.INFINITE in capabilities_of(obj)


def is_mutable(obj: Any) -> bool:
    return Capability.MUTABLE in capabilities_of(obj)


def requires(capability: Capability) -> Callable:
    """Guard a Range method so it raises CapabilityError when unsupported."""

    def decorator(method: Callable) -> Callable:
        @functools.wraps(method)
        def guarded(self, *args, **kwargs):
            if capability not in self.capabilities:
                raise CapabilityError(
                    f"{type(self).__name__}.{method.__name__} needs {describe(capability)}; "
                    f"range only supports {describe(self.capabilities)}"
                )
            return method(self, *args, **kwargs)

        guarded.required_capability = capability
        return guarded

    return decorator


# ---------- Class contracts ----------

@dataclass(frozen=True)
class HookContract:
    """A hook a range class must define once it may grant ``capabilities``."""
    name: str
    capabilities: Capability
    description: str


RANGE_CONTRACT: List[HookContract] = [
    HookContract("_is_empty", Capability.SINGLE_PASS, "whether a current element exists"),
    HookContract("_get_front", Capability.SINGLE_PASS, "read the current element"),
    HookContract("_pop_front", Capability.SINGLE_PASS, "advance past the current element"),
    HookContract("_save", Capability.REPLAYABLE, "independent copy of the traversal position"),
    HookContract("_get_back", Capability.REVERSIBLE, "read the last element"),
    HookContract("_pop_back", Capability.REVERSIBLE, "drop the last element"),
    HookContract("_get_index", Capability.INDEXED, "read the element at an offset"),
    HookContract("_length", Capability.SIZED, "number of remaining elements"),
    HookContract("_get_slice", Capability.SLICEABLE, "sub-range between two offsets"),
    HookContract("_set_front", Capability.MUTABLE, "write the current element"),
    HookContract("_set_back", Capability.MUTABLE | Capability.REVERSIBLE, "write the last element"),
    HookContract("_set_index", Capability.MUTABLE | Capability.INDEXED, "write the element at an offset"),
]


class RangeContractMeta(type):
    """Metaclass verifying that a range class implements its declared capabilities."""

    def __new__(mcs, name, bases, namespace, **kwargs):
        new_class = super().__new__(mcs, name, bases, namespace, **kwargs)

        # Abstract bases only describe the protocol
        if namespace.get("__abstract__", False):
            return new_class

        supports = Capability.SINGLE_PASS | getattr(new_class, "supports", Capability.NONE)
        new_class.supports = supports
        mcs._validate_contract(new_class, supports)
        logger.debug(f"Registered range class {name} supporting {describe(supports)}")
        return new_class

    @staticmethod
    def _validate_contract(new_class: type, supports: Capability) -> None:
        for hook in RANGE_CONTRACT:
            if hook.capabilities not in supports:
                continue
            if not callable(getattr(new_class, hook.name, None)):
                raise ContractViolationError(
                    f"Class {new_class.__name__} supports {describe(hook.capabilities)} "
                    f"but is missing hook {hook.name} ({hook.description})"
                )
