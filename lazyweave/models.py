"""
Pydantic Models

Parameter models validating the arguments of the lazyweave combinators.
Combinators call ``validate_spec`` eagerly so bad parameters fail at
construction time rather than on first use.
"""

from typing import List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConstructionError

SpecT = TypeVar("SpecT", bound=BaseModel)


class WindowSpec(BaseModel):
    """Width of the sliding windows produced by segment()"""
    width: int = Field(
        ...,
        description="Number of consecutive elements in every window",
        ge=1,
        strict=True,
    )


class ChunkSpec(BaseModel):
    """Size of the groups produced by chunks()"""
    size: int = Field(..., description="Elements per group; the last group may be shorter", ge=1, strict=True)


class DelaySpec(BaseModel):
    """Per-field offsets for delay()"""
    offsets: List[int] = Field(
        ...,
        description="Offset of each output field from the current position",
        min_length=1,
    )

    @field_validator('offsets')
    @classmethod
    def validate_offsets(cls, v):
        """Offsets look forward only"""
        negative = [offset for offset in v if offset < 0]
        if negative:
            raise ValueError(f"Offsets must be non-negative, got {negative}")
        return v

    @property
    def window(self) -> int:
        return max(self.offsets) + 1

    @property
    def uniform(self) -> bool:
        return len(set(self.offsets)) == 1


class ParallelSpec(BaseModel):
    """Number of copies broadcast by parallel()"""
    count: int = Field(..., description="Arity of the produced tuples", ge=1, strict=True)


class FlattenSpec(BaseModel):
    """Depth for flatten(); None flattens until elements stop nesting"""
    depth: Optional[int] = Field(None, description="Levels of nesting to remove", ge=0)


class ReplicateSpec(BaseModel):
    """Repetition count for stutter() and replicate_range()"""
    times: int = Field(..., description="How many times to repeat", ge=0, strict=True)


class ShredSpec(BaseModel):
    """Field selection for shred()"""
    indices: Union[int, List[int]] = Field(
        ...,
        description="One field index, or the ordered field indices to keep",
    )

    @field_validator('indices')
    @classmethod
    def validate_indices(cls, v):
        """Field indices must be non-negative and at least one must be given"""
        values = [v] if isinstance(v, int) else v
        if not values:
            raise ValueError("At least one field index is required")
        negative = [index for index in values if index < 0]
        if negative:
            raise ValueError(f"Field indices must be non-negative, got {negative}")
        return v

    @property
    def scalar(self) -> bool:
        return isinstance(self.indices, int)

    def as_list(self) -> List[int]:
        return [self.indices] if self.scalar else list(self.indices)


class TwistSpec(BaseModel):
    """Rotation for twist(); None reverses the fields"""
    shift: Optional[int] = Field(None, description="Number of positions to rotate left")


def validate_spec(model: Type[SpecT], **values) -> SpecT:
    """Build ``model`` from ``values``, turning validation failures into ConstructionError."""
    try:
        return model(**values)
    except ValidationError as e:
        raise ConstructionError(f"Invalid {model.__name__}: {e}") from e
