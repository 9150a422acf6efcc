"""Generic component tuples shared by vectors, points and normals.

``Tuple2`` and ``Tuple3`` are frozen dataclasses holding the components and
their component type. They implement everything that does not depend on the
geometric meaning of the tuple:

- axis indexing with a strict ``0 -> x, 1 -> y, 2 -> z`` contract
- scalar multiplication in both operand orders, scalar division, negation
- ``abs``, component extrema, ``max_dimension`` and ``permute``
- explicit numeric conversion between component types

Addition and subtraction are defined by the concrete Vector, Point and Normal
types, since each allows a different set of operand kinds.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, ClassVar, TypeVar

import numpy as np
import numpy.typing as npt

from pbrtcore.core import numeric

TupleT = TypeVar("TupleT", bound="ComponentTuple")


def check_axis(index: Any, size: int) -> int:
    """Validate an axis index.

    Args:
        index: The requested axis.
        size: Number of components of the indexed value.

    Returns:
        The index as a plain int.

    Raises:
        TypeError: If the index is not an integer.
        IndexError: If the index is outside ``[0, size)``. Negative indices
            are rejected rather than wrapped.
    """
    if isinstance(index, (bool, np.bool_)) or not isinstance(index, (int, np.integer)):
        raise TypeError(f"Axis index must be an integer, got {type(index).__name__}")
    if not 0 <= index < size:
        raise IndexError(f"Axis index {index} out of range for {size} components")
    return int(index)


class ComponentTuple:
    """Algebra shared by every fixed-size component tuple.

    Concrete classes are frozen dataclasses whose fields are the names in
    ``axes`` followed by ``dtype``.
    """

    axes: ClassVar[tuple[str, ...]] = ()
    kind: ClassVar[str] = "tuple"
    dtype: numeric.ComponentType

    # Keep NumPy scalars from broadcasting over us in ``np.float32(2) * v``
    __array_ufunc__ = None

    def _init_components(self) -> None:
        values = [getattr(self, axis) for axis in self.axes]
        if self.dtype is None:
            dtype = numeric.infer(values)
        else:
            dtype = numeric.component_type(self.dtype)
        object.__setattr__(self, "dtype", dtype)
        for axis, value in zip(self.axes, values):
            object.__setattr__(self, axis, numeric.coerce(value, dtype))

    def _make(
        self,
        values: Iterable[Any],
        cls: type[TupleT] | None = None,
        dtype: numeric.ComponentType | None = None,
    ) -> Any:
        return (cls or type(self))(*values, dtype=dtype or self.dtype)

    def _require_compatible(self, other: ComponentTuple) -> None:
        if len(other) != len(self):
            raise TypeError(
                f"Cannot combine {type(self).__name__} with {type(other).__name__}"
            )
        if other.dtype is not self.dtype:
            raise TypeError(
                f"Component types differ: {np.dtype(self.dtype).name} "
                f"vs {np.dtype(other.dtype).name}"
            )

    def _combine(self, other: ComponentTuple, op: Any, cls: type | None = None) -> Any:
        self._require_compatible(other)
        dtype = self.dtype
        return self._make((op(a, b, dtype) for a, b in zip(self, other)), cls=cls)

    @property
    def is_float(self) -> bool:
        """Whether the components are floating point."""
        return numeric.is_float(self.dtype)

    def __iter__(self) -> Iterator[Any]:
        return (getattr(self, axis) for axis in self.axes)

    def __len__(self) -> int:
        return len(self.axes)

    def __getitem__(self, index: int) -> Any:
        return getattr(self, self.axes[check_axis(index, len(self.axes))])

    def __repr__(self) -> str:
        cast = float if self.is_float else int
        components = ", ".join(repr(cast(c)) for c in self)
        return f"{type(self).__name__}({components}, dtype={np.dtype(self.dtype).name})"

    def __mul__(self, scalar: Any) -> Any:
        if not numeric.is_scalar(scalar):
            return NotImplemented
        s = numeric.coerce(scalar, self.dtype)
        return self._make(numeric.multiply(c, s, self.dtype) for c in self)

    def __rmul__(self, scalar: Any) -> Any:
        if not numeric.is_scalar(scalar):
            return NotImplemented
        s = numeric.coerce(scalar, self.dtype)
        return self._make(numeric.multiply(s, c, self.dtype) for c in self)

    def __truediv__(self, scalar: Any) -> Any:
        if not numeric.is_scalar(scalar):
            return NotImplemented
        s = numeric.coerce(scalar, self.dtype)
        return self._make(numeric.divide(c, s, self.dtype) for c in self)

    def __neg__(self) -> Any:
        return self._make(numeric.negate(c, self.dtype) for c in self)

    def __abs__(self) -> Any:
        return self._make(numeric.absolute(c, self.dtype) for c in self)

    def astype(self: TupleT, dtype: Any) -> TupleT:
        """Convert to another component type.

        Float to integer conversion truncates toward zero.
        """
        target = numeric.component_type(dtype)
        return self._make((numeric.convert(c, target) for c in self), dtype=target)

    def to_float(self: TupleT) -> TupleT:
        """Promote the components to the floating-point type."""
        return self.astype(numeric.DEFAULT_FLOAT)

    def to_numpy(self) -> npt.NDArray[Any]:
        """Return the components as a 1-D NumPy array of the component type."""
        return np.array(list(self), dtype=self.dtype)

    def has_nans(self) -> bool:
        """Whether any component is NaN (always False for integers)."""
        return self.is_float and any(np.isnan(c) for c in self)

    def min_component(self) -> Any:
        """Smallest component value."""
        result = self[0]
        for c in list(self)[1:]:
            result = numeric.minimum(result, c, self.dtype)
        return result

    def max_component(self) -> Any:
        """Largest component value."""
        result = self[0]
        for c in list(self)[1:]:
            result = numeric.maximum(result, c, self.dtype)
        return result

    def max_dimension(self) -> int:
        """Index of the largest component.

        Uses a strict ``>`` cascade: x is compared with y, then the winner
        with z, so ties go to the later axis of each comparison.
        """
        if len(self) == 2:
            return 0 if self[0] > self[1] else 1
        if self[0] > self[1]:
            return 0 if self[0] > self[2] else 2
        return 1 if self[1] > self[2] else 2

    def permute(self: TupleT, *axes: int) -> TupleT:
        """Reorder the components, e.g. ``v.permute(2, 0, 1)``.

        Raises:
            ValueError: If the number of axes differs from the dimension.
            IndexError: If an axis is out of range.
        """
        if len(axes) != len(self):
            raise ValueError(f"permute needs {len(self)} axes, got {len(axes)}")
        return self._make(self[axis] for axis in axes)


@dataclass(frozen=True, repr=False)
class Tuple2(ComponentTuple):
    """Two-component base tuple."""

    x: Any
    y: Any
    dtype: Any = None

    axes: ClassVar[tuple[str, ...]] = ("x", "y")

    def __post_init__(self) -> None:
        self._init_components()


@dataclass(frozen=True, repr=False)
class Tuple3(ComponentTuple):
    """Three-component base tuple."""

    x: Any
    y: Any
    z: Any
    dtype: Any = None

    axes: ClassVar[tuple[str, ...]] = ("x", "y", "z")

    def __post_init__(self) -> None:
        self._init_components()


def minimum(a: TupleT, b: TupleT) -> TupleT:
    """Componentwise minimum of two tuples of the same kind."""
    _require_same_kind(a, b)
    return a._combine(b, numeric.minimum)


def maximum(a: TupleT, b: TupleT) -> TupleT:
    """Componentwise maximum of two tuples of the same kind."""
    _require_same_kind(a, b)
    return a._combine(b, numeric.maximum)


def _require_same_kind(a: ComponentTuple, b: ComponentTuple) -> None:
    if type(a) is not type(b):
        raise TypeError(f"Expected two {type(a).__name__} values, got {type(b).__name__}")
