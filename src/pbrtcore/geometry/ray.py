"""Rays and ray differentials.

A ray is the parametric line ``o + d * t``. ``t_max`` records the end of the
valid parametric range, but ``point(t)`` does not enforce it: intersection
code clamps against ``t_max`` itself. ``d`` need not be unit length.

A ``RayDifferential`` carries two auxiliary rays offset by one pixel in x and
y on the image plane. They are used to estimate texture filtering footprints
and are only meaningful when ``has_differentials`` is set.

Example:
    >>> from pbrtcore.geometry.point import Point3f
    >>> from pbrtcore.geometry.ray import Ray
    >>> from pbrtcore.geometry.vector import Vector3f
    >>> ray = Ray(Point3f(0.0, 0.0, 0.0), Vector3f(1.0, 0.0, 0.0), 1000.0, 0.0, None)
    >>> ray.point(5.0)
    Point3(5.0, 0.0, 0.0, dtype=float32)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from pbrtcore.geometry.point import Point3, Point3f
from pbrtcore.geometry.vector import Vector3, Vector3f


def _float_tuple(value: Any, expected: type, name: str) -> Any:
    if type(value) is not expected:
        raise TypeError(f"Ray {name} must be a {expected.__name__}, got {type(value).__name__}")
    return value if value.is_float else value.to_float()


@dataclass
class Ray:
    """A semi-infinite line with origin and direction.

    Attributes:
        o: Origin point (promoted to float32 components).
        d: Direction vector (promoted to float32 components). Not required
            to be normalized.
        t_max: Upper end of the valid parametric range.
        time: Time value the ray is associated with.
        medium: Opaque reference to the participating medium containing the
            origin, or None.
    """

    o: Point3
    d: Vector3
    t_max: float = math.inf
    time: float = 0.0
    medium: Any = None

    def __post_init__(self) -> None:
        self.o = _float_tuple(self.o, Point3, "origin")
        self.d = _float_tuple(self.d, Vector3, "direction")
        self.t_max = float(self.t_max)
        self.time = float(self.time)

    def point(self, t: float) -> Point3:
        """The point ``o + d * t``. ``t`` is not clamped to ``t_max``."""
        return self.o + self.d * t

    def has_nans(self) -> bool:
        """Whether the origin, direction or ``t_max`` contain NaN."""
        return self.o.has_nans() or self.d.has_nans() or math.isnan(self.t_max)


@dataclass
class RayDifferential(Ray):
    """A ray with two auxiliary rays for footprint estimation.

    Attributes:
        has_differentials: Whether the auxiliary rays are set.
        rx_origin: Origin of the ray offset by one pixel in x.
        ry_origin: Origin of the ray offset by one pixel in y.
        rx_direction: Direction of the ray offset by one pixel in x.
        ry_direction: Direction of the ray offset by one pixel in y.
    """

    has_differentials: bool = False
    rx_origin: Point3 = field(default_factory=lambda: Point3f(0.0, 0.0, 0.0))
    ry_origin: Point3 = field(default_factory=lambda: Point3f(0.0, 0.0, 0.0))
    rx_direction: Vector3 = field(default_factory=lambda: Vector3f(0.0, 0.0, 0.0))
    ry_direction: Vector3 = field(default_factory=lambda: Vector3f(0.0, 0.0, 0.0))

    def __post_init__(self) -> None:
        super().__post_init__()
        self.rx_origin = _float_tuple(self.rx_origin, Point3, "rx_origin")
        self.ry_origin = _float_tuple(self.ry_origin, Point3, "ry_origin")
        self.rx_direction = _float_tuple(self.rx_direction, Vector3, "rx_direction")
        self.ry_direction = _float_tuple(self.ry_direction, Vector3, "ry_direction")

    @classmethod
    def from_ray(cls, ray: Ray) -> RayDifferential:
        """Wrap a ray without auxiliary rays."""
        return cls(ray.o, ray.d, ray.t_max, ray.time, ray.medium)

    @property
    def ray(self) -> Ray:
        """The primary ray on its own."""
        return Ray(self.o, self.d, self.t_max, self.time, self.medium)

    def scale_differentials(self, s: float) -> None:
        """Move the auxiliary rays toward (s < 1) or away from the primary ray.

        Each auxiliary origin and direction becomes
        ``primary + (auxiliary - primary) * s``, in place.
        """
        self.rx_origin = self.o + (self.rx_origin - self.o) * s
        self.ry_origin = self.o + (self.ry_origin - self.o) * s
        self.rx_direction = self.d + (self.rx_direction - self.d) * s
        self.ry_direction = self.d + (self.ry_direction - self.d) * s

    def has_nans(self) -> bool:
        """Whether the primary or, when set, the auxiliary rays contain NaN."""
        if super().has_nans():
            return True
        if not self.has_differentials:
            return False
        return any(
            v.has_nans()
            for v in (self.rx_origin, self.ry_origin, self.rx_direction, self.ry_direction)
        )


__all__ = ["Ray", "RayDifferential"]
