"""Axis-aligned bounding boxes.

A bounds is a pair of corner points ``p_min`` and ``p_max``. Validity is a
property of the values rather than a separate flag: a box whose ``p_min``
exceeds ``p_max`` on some axis is empty. ``Bounds3.empty()`` (and
``Bounds2.empty()``) build the canonical empty box, with ``p_min`` at the
highest representable value and ``p_max`` at the lowest, so that ``union``
absorbs it. Inverted boxes built any other way are not normalized, and a
union involving one is well defined but not meaningful.

All operations are pure and return new values.

Example:
    >>> from pbrtcore.geometry.bounds import Bounds3f, union_from_point
    >>> from pbrtcore.geometry.point import Point3f
    >>> b = Bounds3f.from_single_point(Point3f(1.0, 1.0, 1.0))
    >>> union_from_point(b, Point3f(-1.0, 2.0, 0.0)).p_min
    Point3(-1.0, 1.0, 0.0, dtype=float32)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, TypeVar

import numpy as np

from pbrtcore.core import numeric
from pbrtcore.core.tuples import check_axis, maximum, minimum
from pbrtcore.geometry.point import Point2, Point3, distance
from pbrtcore.geometry.vector import Vector2, Vector3

BoundsT = TypeVar("BoundsT", bound="_Bounds")


@dataclass(frozen=True)
class _Bounds:
    """Corner storage and the queries shared by 2D and 3D boxes."""

    p_min: Any
    p_max: Any

    point_type: ClassVar[type] = Point3
    vector_type: ClassVar[type] = Vector3

    def __post_init__(self) -> None:
        for corner in (self.p_min, self.p_max):
            if type(corner) is not self.point_type:
                raise TypeError(
                    f"{type(self).__name__} corners must be {self.point_type.__name__}, "
                    f"got {type(corner).__name__}"
                )
        if self.p_min.dtype is not self.p_max.dtype:
            raise TypeError(f"{type(self).__name__} corners have different component types")

    @classmethod
    def from_single_point(cls: type[BoundsT], p: Any) -> BoundsT:
        """A degenerate box containing exactly ``p``."""
        return cls(p, p)

    @classmethod
    def from_points(cls: type[BoundsT], p1: Any, p2: Any) -> BoundsT:
        """The smallest box containing both points, given in any order."""
        return cls(minimum(p1, p2), maximum(p1, p2))

    @classmethod
    def from_scalars(cls: type[BoundsT], lo: Any, hi: Any, dtype: Any = None) -> BoundsT:
        """A box spanning ``[lo, hi]`` on every axis, taken verbatim."""
        dim = len(cls.point_type.axes)
        if dtype is None:
            dtype = numeric.infer([lo, hi])
        return cls(
            cls.point_type(*([lo] * dim), dtype=dtype),
            cls.point_type(*([hi] * dim), dtype=dtype),
        )

    @classmethod
    def empty(cls: type[BoundsT], dtype: Any = numeric.DEFAULT_FLOAT) -> BoundsT:
        """The canonical empty box, the identity element of ``union``."""
        dtype = numeric.component_type(dtype)
        dim = len(cls.point_type.axes)
        return cls(
            cls.point_type(*([numeric.highest(dtype)] * dim), dtype=dtype),
            cls.point_type(*([numeric.lowest(dtype)] * dim), dtype=dtype),
        )

    @property
    def dtype(self) -> numeric.ComponentType:
        """Component type of the corners."""
        return self.p_min.dtype

    def __getitem__(self, index: int) -> Any:
        """``b[0]`` is ``p_min`` and ``b[1]`` is ``p_max``."""
        return self.p_max if check_axis(index, 2) else self.p_min

    def is_empty(self) -> bool:
        """Whether ``p_min`` exceeds ``p_max`` on any axis."""
        return any(lo > hi for lo, hi in zip(self.p_min, self.p_max))

    def diagonal(self) -> Any:
        """The vector from ``p_min`` to ``p_max``."""
        return self.p_max - self.p_min

    def maximum_extent(self) -> int:
        """Index of the longest axis."""
        return self.diagonal().max_dimension()

    def lerp(self, t: Any) -> Any:
        """Interpolate between the corners with one parameter per axis.

        Args:
            t: A point of the same dimension; ``t[i] == 0`` selects
                ``p_min[i]`` and ``t[i] == 1`` selects ``p_max[i]``.
        """
        if type(t) is not self.point_type:
            raise TypeError(f"lerp parameter must be a {self.point_type.__name__}")
        lo, hi, t = self.p_min.to_float(), self.p_max.to_float(), t.to_float()
        with np.errstate(all="ignore"):
            components = [(1 - u) * a + u * b for u, a, b in zip(t, lo, hi)]
        return self.point_type(*components, dtype=numeric.DEFAULT_FLOAT)

    def offset(self, p: Any) -> Any:
        """Position of ``p`` relative to the box: 0 at ``p_min``, 1 at ``p_max``.

        Axes with zero extent keep the raw displacement.
        """
        o = (p - self.p_min).to_float()
        components = []
        for axis, value in enumerate(o):
            lo = numeric.to_float(self.p_min[axis])
            hi = numeric.to_float(self.p_max[axis])
            if hi > lo:
                value = numeric.divide(value, hi - lo, numeric.DEFAULT_FLOAT)
            components.append(value)
        return o._make(components)


class Bounds2(_Bounds):
    """Axis-aligned rectangle built from two Point2 corners."""

    point_type = Point2
    vector_type = Vector2

    def area(self) -> Any:
        """Width times height, in the component type."""
        d = self.diagonal()
        return numeric.multiply(d.x, d.y, d.dtype)


class Bounds3(_Bounds):
    """Axis-aligned box built from two Point3 corners."""

    point_type = Point3
    vector_type = Vector3

    def corner(self, index: int) -> Point3:
        """One of the eight box corners, selected by a 3-bit index.

        Bit 0 picks ``p_max.x`` when set and ``p_min.x`` when clear. Bits 1
        and 2 are reversed: set selects ``p_min`` and clear selects ``p_max``
        for y and z respectively.

        Raises:
            IndexError: If ``index`` is outside ``[0, 8)``.
        """
        index = check_axis(index, 8)
        x = self[index & 1].x
        y = self.p_max.y if (index & 2) == 0 else self.p_min.y
        z = self.p_max.z if (index & 4) == 0 else self.p_min.z
        return Point3(x, y, z, dtype=self.dtype)

    def surface_area(self) -> Any:
        """Total area of the six faces, in the component type."""
        d = self.diagonal()
        dtype = d.dtype
        xy = numeric.multiply(d.x, d.y, dtype)
        xz = numeric.multiply(d.x, d.z, dtype)
        yz = numeric.multiply(d.y, d.z, dtype)
        faces = numeric.add(numeric.add(xy, xz, dtype), yz, dtype)
        return numeric.multiply(2, faces, dtype)

    def volume(self) -> Any:
        """Product of the extents, in the component type."""
        d = self.diagonal()
        return numeric.multiply(numeric.multiply(d.x, d.y, d.dtype), d.z, d.dtype)

    def bounding_sphere(self) -> tuple[Point3, np.float32]:
        """Center and radius of a sphere enclosing the box."""
        lo, hi = self.p_min.to_float(), self.p_max.to_float()
        center = (lo + hi.to_vector()) / 2
        radius = distance(center, hi) if inside(center, Bounds3(lo, hi)) else np.float32(0.0)
        return center, radius


# The component type follows the corner points, so the float aliases name the
# generic classes; ``empty()`` defaults to float32.
Bounds2f = Bounds2
Bounds3f = Bounds3


def _require_same_bounds(b1: Any, b2: Any) -> None:
    if type(b1) is not type(b2) or not isinstance(b1, _Bounds):
        raise TypeError(f"Expected two bounds of the same type, got {type(b1).__name__} and {type(b2).__name__}")
    if b1.dtype is not b2.dtype:
        raise TypeError("Bounds component types differ")


def _require_point_for(b: Any, p: Any) -> None:
    if not isinstance(b, _Bounds) or type(p) is not b.point_type:
        raise TypeError(f"Expected a {getattr(b, 'point_type', Point3).__name__}, got {type(p).__name__}")
    if p.dtype is not b.dtype:
        raise TypeError("Point and bounds component types differ")


def union(b1: BoundsT, b2: BoundsT) -> BoundsT:
    """Smallest box containing both boxes (componentwise min and max)."""
    _require_same_bounds(b1, b2)
    return type(b1)(minimum(b1.p_min, b2.p_min), maximum(b1.p_max, b2.p_max))


def union_from_point(b: BoundsT, p: Any) -> BoundsT:
    """Smallest box containing ``b`` and the point ``p``."""
    _require_point_for(b, p)
    return type(b)(minimum(b.p_min, p), maximum(b.p_max, p))


def intersect(b1: BoundsT, b2: BoundsT) -> BoundsT:
    """Common part of two boxes.

    Disjoint inputs give an inverted (empty) box; check ``overlaps`` first
    when a valid box is required.
    """
    _require_same_bounds(b1, b2)
    return type(b1)(maximum(b1.p_min, b2.p_min), minimum(b1.p_max, b2.p_max))


def overlaps(b1: BoundsT, b2: BoundsT) -> bool:
    """Whether the boxes share at least one point on every axis."""
    _require_same_bounds(b1, b2)
    return all(
        hi1 >= lo2 and lo1 <= hi2
        for lo1, hi1, lo2, hi2 in zip(b1.p_min, b1.p_max, b2.p_min, b2.p_max)
    )


def inside(p: Any, b: BoundsT) -> bool:
    """Whether ``p`` lies in ``b``, upper bound included."""
    _require_point_for(b, p)
    return all(lo <= c <= hi for c, lo, hi in zip(p, b.p_min, b.p_max))


def inside_exclusive(p: Any, b: BoundsT) -> bool:
    """Whether ``p`` lies in ``b``, upper bound excluded."""
    _require_point_for(b, p)
    return all(lo <= c < hi for c, lo, hi in zip(p, b.p_min, b.p_max))


def expand(b: BoundsT, delta: Any) -> BoundsT:
    """Grow the box by ``delta`` on both sides of every axis."""
    if not isinstance(b, _Bounds):
        raise TypeError(f"Expected bounds, got {type(b).__name__}")
    pad = b.vector_type(*([delta] * len(b.p_min)), dtype=b.dtype)
    return type(b)(b.p_min - pad, b.p_max + pad)


__all__ = [
    "Bounds2",
    "Bounds3",
    "Bounds2f",
    "Bounds3f",
    "union",
    "union_from_point",
    "intersect",
    "overlaps",
    "inside",
    "inside_exclusive",
    "expand",
]
