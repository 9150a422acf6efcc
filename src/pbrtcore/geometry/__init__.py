"""Geometric primitive types and their operations.

Components:
    vector: Vector2/Vector3 with dot, cross, normalize and coordinate_system
    point: Point2/Point3 with affine arithmetic, distance and lerp
    normal: Normal3, algebraically a vector but a distinct type
    bounds: Bounds2/Bounds3 axis-aligned boxes and their set algebra
    ray: Ray and RayDifferential

Every type is a small value with no shared state, so values can be used
freely from multiple threads as long as each thread owns its copies.
``RayDifferential.scale_differentials`` is the only mutating operation and it
touches nothing but its receiver.
"""

from .bounds import (
    Bounds2,
    Bounds2f,
    Bounds3,
    Bounds3f,
    expand,
    inside,
    inside_exclusive,
    intersect,
    overlaps,
    union,
    union_from_point,
)
from .normal import Normal3, Normal3f, face_forward
from .point import (
    Point2,
    Point2f,
    Point2i,
    Point3,
    Point3f,
    Point3i,
    add_points,
    ceil,
    distance,
    distance_squared,
    floor,
    lerp,
)
from .ray import Ray, RayDifferential
from .vector import (
    Vector2,
    Vector2f,
    Vector2i,
    Vector3,
    Vector3f,
    Vector3i,
    abs_dot,
    coordinate_system,
    cross,
    dot,
    maximum,
    minimum,
    normalize,
)

__all__ = [
    "Vector2",
    "Vector2f",
    "Vector2i",
    "Vector3",
    "Vector3f",
    "Vector3i",
    "dot",
    "abs_dot",
    "cross",
    "normalize",
    "coordinate_system",
    "minimum",
    "maximum",
    "Point2",
    "Point2f",
    "Point2i",
    "Point3",
    "Point3f",
    "Point3i",
    "add_points",
    "distance",
    "distance_squared",
    "lerp",
    "ceil",
    "floor",
    "Normal3",
    "Normal3f",
    "face_forward",
    "Bounds2",
    "Bounds2f",
    "Bounds3",
    "Bounds3f",
    "union",
    "union_from_point",
    "intersect",
    "overlaps",
    "inside",
    "inside_exclusive",
    "expand",
    "Ray",
    "RayDifferential",
]
