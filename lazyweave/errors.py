"""Exception hierarchy for lazyweave ranges and combinators."""


class LazyWeaveError(Exception):
    """Base class for every error raised by lazyweave."""
    pass


class ConstructionError(LazyWeaveError, ValueError):
    """Raised eagerly when a combinator is built with invalid parameters."""
    pass


class ArityError(ConstructionError):
    """Raised when a tuple of the wrong size is written or combined."""
    pass


class CapabilityError(LazyWeaveError, TypeError):
    """Raised when a range is asked for an operation it does not advertise."""
    pass


class ContractViolationError(LazyWeaveError, TypeError):
    """Raised when a Range class declares capabilities it does not implement."""
    pass


class OutOfBoundsError(LazyWeaveError, IndexError):
    """Raised for an index outside the currently valid range."""
    pass


class EmptyRangeError(LazyWeaveError, IndexError):
    """Raised when front/back is read on an exhausted range."""
    pass


class ReleasedCursorError(LazyWeaveError, RuntimeError):
    """Raised when a retired memoization cursor is used again."""
    pass
