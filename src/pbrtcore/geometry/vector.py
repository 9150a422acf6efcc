"""Vectors: free displacement quantities.

Vectors form a closed group under addition, subtraction and negation, and
scale by scalars from either side. Lengths are always computed in single
precision floating point, so integer vectors still report a float length.

Normals share this algebra through ``VectorAlgebra`` but remain a separate
type (see ``pbrtcore.geometry.normal``). ``dot`` and ``abs_dot`` accept a
vector together with a normal; every operation producing a vector-like
result requires both operands to be of the same type.

Example:
    >>> from pbrtcore.geometry.vector import Vector3f, cross, dot, normalize
    >>> a = Vector3f(1.0, 0.0, 0.0)
    >>> b = Vector3f(0.0, 1.0, 0.0)
    >>> cross(a, b)
    Vector3(0.0, 0.0, 1.0, dtype=float32)
    >>> float(dot(a + b, a))
    1.0
"""

from __future__ import annotations

from functools import partial
from typing import Any, TypeVar

import numpy as np

from pbrtcore.core import numeric
from pbrtcore.core.tuples import ComponentTuple, Tuple2, Tuple3, maximum, minimum

VectorT = TypeVar("VectorT", bound="VectorAlgebra")

_DIRECTIONAL_KINDS = ("vector", "normal")


class VectorAlgebra(ComponentTuple):
    """Additive group and length shared by vectors and normals."""

    def __add__(self, other: Any) -> Any:
        if type(other) is not type(self):
            return NotImplemented
        return self._combine(other, numeric.add)

    def __sub__(self, other: Any) -> Any:
        if type(other) is not type(self):
            return NotImplemented
        return self._combine(other, numeric.subtract)

    def length_squared(self) -> np.float32:
        """Squared length, computed in floating point for every component type."""
        total = np.float32(0.0)
        with np.errstate(all="ignore"):
            for c in self:
                f = numeric.to_float(c)
                total = np.float32(total + f * f)
        return total

    def length(self) -> np.float32:
        """Euclidean length in floating point."""
        return numeric.sqrt(self.length_squared())


class Vector2(VectorAlgebra, Tuple2):
    """Two-component vector."""

    kind = "vector"


class Vector3(VectorAlgebra, Tuple3):
    """Three-component vector."""

    kind = "vector"


Vector2f = partial(Vector2, dtype=numeric.DEFAULT_FLOAT)
Vector2i = partial(Vector2, dtype=numeric.DEFAULT_INT)
Vector3f = partial(Vector3, dtype=numeric.DEFAULT_FLOAT)
Vector3i = partial(Vector3, dtype=numeric.DEFAULT_INT)


def _require_directional(a: ComponentTuple, b: ComponentTuple) -> None:
    for v in (a, b):
        if not isinstance(v, ComponentTuple) or v.kind not in _DIRECTIONAL_KINDS:
            raise TypeError(f"Expected a vector or normal, got {type(v).__name__}")
    a._require_compatible(b)


def dot(a: VectorAlgebra, b: VectorAlgebra) -> Any:
    """Dot product, returned in the component type.

    Either operand may be a vector or a normal of the same dimension.

    Raises:
        TypeError: If an operand is a point or the component types differ.
    """
    _require_directional(a, b)
    dtype = a.dtype
    total = numeric.coerce(0, dtype)
    for x, y in zip(a, b):
        total = numeric.add(total, numeric.multiply(x, y, dtype), dtype)
    return total


def abs_dot(a: VectorAlgebra, b: VectorAlgebra) -> Any:
    """Absolute value of the dot product."""
    return numeric.absolute(dot(a, b), a.dtype)


def cross(a: VectorT, b: VectorT) -> VectorT:
    """Cross product of two 3-component vectors (or two normals).

    Anti-commutative: ``cross(a, b) == -cross(b, a)``. Float components are
    expanded in double precision before rounding to avoid cancellation.

    Raises:
        TypeError: If the operands are not both Vector3 or both Normal3.
    """
    if type(a) is not type(b) or len(a) != 3 or a.kind not in _DIRECTIONAL_KINDS:
        raise TypeError(f"cross needs two 3D vectors or normals, got {type(a).__name__} and {type(b).__name__}")
    a._require_compatible(b)
    if a.is_float:
        ax, ay, az = (float(c) for c in a)
        bx, by, bz = (float(c) for c in b)
        return a._make((ay * bz - az * by, az * bx - ax * bz, ax * by - ay * bx))
    ax, ay, az = (int(c) for c in a)
    bx, by, bz = (int(c) for c in b)
    return a._make((ay * bz - az * by, az * bx - ax * bz, ax * by - ay * bx))


def normalize(v: VectorT) -> VectorT:
    """Scale a vector to unit length, promoting it to floating point.

    A zero-length vector produces NaN components; callers must not
    normalize degenerate vectors.
    """
    f = v.to_float()
    return f / f.length()


def coordinate_system(v1: Vector3) -> tuple[Vector3, Vector3]:
    """Build two vectors completing an orthonormal basis with ``v1``.

    ``v1`` must be normalized. The branch on ``|x| > |y|`` keeps the
    normalizing denominator away from zero.

    Returns:
        ``(v2, v3)`` such that ``{v1, v2, v3}`` is orthonormal.
    """
    if not isinstance(v1, Vector3):
        raise TypeError(f"coordinate_system needs a Vector3, got {type(v1).__name__}")
    v1 = v1.to_float()
    if abs(v1.x) > abs(v1.y):
        v2 = Vector3f(-v1.z, 0.0, v1.x) / numeric.sqrt(v1.x * v1.x + v1.z * v1.z)
    else:
        v2 = Vector3f(0.0, v1.z, -v1.y) / numeric.sqrt(v1.y * v1.y + v1.z * v1.z)
    return v2, cross(v1, v2)


__all__ = [
    "VectorAlgebra",
    "Vector2",
    "Vector3",
    "Vector2f",
    "Vector2i",
    "Vector3f",
    "Vector3i",
    "dot",
    "abs_dot",
    "cross",
    "normalize",
    "coordinate_system",
    "minimum",
    "maximum",
]
