"""Points: affine positions.

The legal operations follow affine semantics:

- ``Point - Point -> Vector`` (displacement)
- ``Point + Vector -> Point`` and ``Point - Vector -> Point``
- ``Point + Point`` is not an operator; the explicit ``add_points`` exists
  for weighted sums such as ``lerp``
- ``Vector + Point`` is not an operator either: the point goes on the left,
  so the displacement identity is written ``q + (p - q) == p``

Scaling a point (``p * s``, ``s * p``, ``p / s``) is allowed for convenience
even though it has no affine meaning.

Example:
    >>> from pbrtcore.geometry.point import Point3f, distance, lerp
    >>> from pbrtcore.geometry.vector import Vector3f
    >>> p = Point3f(1.0, 2.0, 3.0)
    >>> p + Vector3f(1.0, 0.0, 0.0)
    Point3(2.0, 2.0, 3.0, dtype=float32)
    >>> float(distance(p, Point3f(1.0, 2.0, 0.0)))
    3.0
    >>> lerp(0.5, Point3f(0.0, 0.0, 0.0), Point3f(2.0, 4.0, 6.0))
    Point3(1.0, 2.0, 3.0, dtype=float32)
"""

from __future__ import annotations

from functools import partial
from typing import Any, ClassVar, TypeVar

import numpy as np

from pbrtcore.core import numeric
from pbrtcore.core.tuples import ComponentTuple, Tuple2, Tuple3, maximum, minimum
from pbrtcore.geometry.vector import Vector2, Vector3

PointT = TypeVar("PointT", bound="AffineAlgebra")


class AffineAlgebra(ComponentTuple):
    """Point/vector arithmetic shared by Point2 and Point3."""

    vector_type: ClassVar[type[ComponentTuple]]

    def __add__(self, other: Any) -> Any:
        if type(other) is not self.vector_type:
            return NotImplemented
        return self._combine(other, numeric.add)

    def __sub__(self, other: Any) -> Any:
        if type(other) is type(self):
            return self._combine(other, numeric.subtract, cls=self.vector_type)
        if type(other) is self.vector_type:
            return self._combine(other, numeric.subtract)
        return NotImplemented

    def to_vector(self) -> Any:
        """The displacement of this point from the origin."""
        return self._make(self, cls=self.vector_type)

    @classmethod
    def from_vector(cls: type[PointT], v: ComponentTuple) -> PointT:
        """The point reached by displacing the origin by ``v``."""
        if type(v) is not cls.vector_type:
            raise TypeError(f"{cls.__name__}.from_vector needs a {cls.vector_type.__name__}")
        return cls(*v, dtype=v.dtype)


class Point2(AffineAlgebra, Tuple2):
    """Two-component point."""

    kind = "point"
    vector_type = Vector2

    @classmethod
    def from_point3(cls, p: Point3) -> Point2:
        """Drop the z component of a 3D point."""
        return cls(p.x, p.y, dtype=p.dtype)


class Point3(AffineAlgebra, Tuple3):
    """Three-component point."""

    kind = "point"
    vector_type = Vector3


Point2f = partial(Point2, dtype=numeric.DEFAULT_FLOAT)
Point2i = partial(Point2, dtype=numeric.DEFAULT_INT)
Point3f = partial(Point3, dtype=numeric.DEFAULT_FLOAT)
Point3i = partial(Point3, dtype=numeric.DEFAULT_INT)


def _require_points(*points: Any) -> None:
    for p in points:
        if not isinstance(p, AffineAlgebra):
            raise TypeError(f"Expected a point, got {type(p).__name__}")
    first = points[0]
    for p in points[1:]:
        if type(p) is not type(first):
            raise TypeError(f"Expected {type(first).__name__}, got {type(p).__name__}")


def add_points(p0: PointT, p1: PointT) -> PointT:
    """Componentwise sum of two points, for weighted point combinations."""
    _require_points(p0, p1)
    return p0._combine(p1, numeric.add)


def distance_squared(p1: PointT, p2: PointT) -> np.float32:
    """Squared distance between two points, in floating point."""
    _require_points(p1, p2)
    return (p1 - p2).length_squared()


def distance(p1: PointT, p2: PointT) -> np.float32:
    """Distance between two points, in floating point."""
    _require_points(p1, p2)
    return (p1 - p2).length()


def lerp(t: float, p0: PointT, p1: PointT) -> PointT:
    """Interpolate ``p0 * (1 - t) + p1 * t`` in floating point.

    Integer points are promoted before interpolating.
    """
    _require_points(p0, p1)
    return add_points(p0.to_float() * (1.0 - t), p1.to_float() * t)


def _rounded(p: PointT, op: Any, name: str) -> PointT:
    _require_points(p)
    if not p.is_float:
        raise TypeError(f"{name} is only defined for floating-point points")
    return p._make(op(c) for c in p)


def ceil(p: PointT) -> PointT:
    """Round every component up (floating-point points only)."""
    return _rounded(p, np.ceil, "ceil")


def floor(p: PointT) -> PointT:
    """Round every component down (floating-point points only)."""
    return _rounded(p, np.floor, "floor")


__all__ = [
    "AffineAlgebra",
    "Point2",
    "Point3",
    "Point2f",
    "Point2i",
    "Point3f",
    "Point3i",
    "add_points",
    "distance",
    "distance_squared",
    "lerp",
    "ceil",
    "floor",
    "minimum",
    "maximum",
]
