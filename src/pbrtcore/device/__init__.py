"""Taichi counterparts of the geometry types.

Components:
    types: ``@ti.dataclass`` mirrors of rays and boxes plus ``@ti.func`` helpers
    buffers: host-side buffers that run batched bounds and ray queries

Taichi must be initialized with ``ti.init`` before any buffer is created or
any kernel using these functions is launched.
"""

from .buffers import (
    MAX_DEVICE_PRIMITIVES,
    BoundsBuffer,
    RayBuffer,
    points_from_array,
    shading_frames,
    to_array,
)
from .types import (
    DeviceBounds3,
    DeviceRay,
    bounds_corner,
    bounds_diagonal,
    bounds_inside,
    bounds_inside_exclusive,
    bounds_intersect,
    bounds_overlaps,
    bounds_union,
    bounds_union_point,
    coordinate_system,
    fmax,
    fmin,
    is_nan,
    max_dimension,
    ray_point,
    vec3,
)

__all__ = [
    "vec3",
    "DeviceRay",
    "DeviceBounds3",
    "ray_point",
    "bounds_union",
    "bounds_union_point",
    "bounds_intersect",
    "bounds_overlaps",
    "bounds_inside",
    "bounds_inside_exclusive",
    "bounds_diagonal",
    "bounds_corner",
    "max_dimension",
    "coordinate_system",
    "is_nan",
    "fmin",
    "fmax",
    "BoundsBuffer",
    "RayBuffer",
    "shading_frames",
    "to_array",
    "points_from_array",
    "MAX_DEVICE_PRIMITIVES",
]
