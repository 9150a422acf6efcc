"""Batched device queries over host primitives.

The host types in ``pbrtcore.geometry`` are convenient but one Python call per
box is too slow for an acceleration structure build. The buffers here pack
host values into contiguous float32 arrays (Structure of Arrays layout) and
run the ``pbrtcore.device.types`` functions over all of them in one kernel
launch.

Kernels take their data as ``ti.types.ndarray`` arguments, so no Taichi
fields are allocated per buffer: each kernel compiles once, and a buffer's
storage is released with the buffer. Buffers share nothing and may be used
independently.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pbrtcore.device.buffers import BoundsBuffer
    >>> from pbrtcore.geometry import Bounds3, Point3f
    >>> boxes = [Bounds3.from_scalars(0.0, 1.0), Bounds3.from_scalars(5.0, 6.0)]
    >>> buffer = BoundsBuffer(boxes)
    >>> buffer.containing(Point3f(0.5, 0.5, 0.5)).tolist()
    [True, False]
"""

import logging
from collections.abc import Sequence
from typing import Union

import numpy as np
import numpy.typing as npt
import taichi as ti

from pbrtcore.core.tuples import ComponentTuple
from pbrtcore.device.types import (
    DeviceBounds3,
    DeviceRay,
    bounds_inside,
    bounds_overlaps,
    bounds_union,
    coordinate_system,
    ray_point,
    vec3,
)
from pbrtcore.geometry.bounds import Bounds3
from pbrtcore.geometry.normal import Normal3
from pbrtcore.geometry.point import Point3
from pbrtcore.geometry.ray import Ray
from pbrtcore.geometry.vector import Vector3, normalize

logger = logging.getLogger(__name__)

# Maximum number of primitives a single buffer may hold
MAX_DEVICE_PRIMITIVES = 1 << 20

# (N, 3) float32 rows, one vector per row
Rows = ti.types.ndarray(dtype=ti.f32, ndim=2)
Flags = ti.types.ndarray(dtype=ti.i32, ndim=1)
Scalars = ti.types.ndarray(dtype=ti.f32, ndim=1)


# =============================================================================
# NumPy Conversion
# =============================================================================


def to_array(items: Sequence[ComponentTuple]) -> npt.NDArray[np.float32]:
    """Stack vectors, points or normals into a float32 array.

    Args:
        items: Tuples of one dimension; integer components are promoted.

    Returns:
        Array of shape (len(items), dimension).

    Raises:
        ValueError: If items is empty or mixes dimensions.
    """
    if len(items) == 0:
        raise ValueError("Cannot build an array from an empty sequence")
    dim = len(items[0])
    if any(len(item) != dim for item in items):
        raise ValueError("All items must have the same number of components")
    return np.array([[float(c) for c in item] for item in items], dtype=np.float32).reshape(
        len(items), dim
    )


def points_from_array(array: npt.ArrayLike) -> list[Point3]:
    """Convert an (N, 3) array into float Point3 values."""
    data = np.asarray(array, dtype=np.float32)
    if data.ndim != 2 or data.shape[1] != 3:
        raise ValueError(f"Expected an array of shape (N, 3), got {data.shape}")
    return [Point3(*row, dtype=np.float32) for row in data]


def _check_count(count: int, what: str) -> None:
    if count == 0:
        raise ValueError(f"Cannot upload an empty list of {what}")
    if count > MAX_DEVICE_PRIMITIVES:
        raise ValueError(
            f"Number of {what} ({count}) exceeds maximum ({MAX_DEVICE_PRIMITIVES})"
        )


# =============================================================================
# Kernels
# =============================================================================


@ti.kernel
def _overlaps_kernel(p_min: Rows, p_max: Rows, query: Rows, hits: Flags):
    for i in range(p_min.shape[0]):
        q = DeviceBounds3(
            p_min=vec3(query[0, 0], query[0, 1], query[0, 2]),
            p_max=vec3(query[1, 0], query[1, 1], query[1, 2]),
        )
        box = DeviceBounds3(
            p_min=vec3(p_min[i, 0], p_min[i, 1], p_min[i, 2]),
            p_max=vec3(p_max[i, 0], p_max[i, 1], p_max[i, 2]),
        )
        hits[i] = bounds_overlaps(box, q)


@ti.kernel
def _inside_kernel(p_min: Rows, p_max: Rows, query: Rows, hits: Flags):
    for i in range(p_min.shape[0]):
        p = vec3(query[0, 0], query[0, 1], query[0, 2])
        box = DeviceBounds3(
            p_min=vec3(p_min[i, 0], p_min[i, 1], p_min[i, 2]),
            p_max=vec3(p_max[i, 0], p_max[i, 1], p_max[i, 2]),
        )
        hits[i] = bounds_inside(p, box)


@ti.kernel
def _union_kernel(p_min: Rows, p_max: Rows, out: Rows):
    for k in ti.static(range(3)):
        out[0, k] = p_min[0, k]
        out[1, k] = p_max[0, k]
    ti.loop_config(serialize=True)
    for i in range(1, p_min.shape[0]):
        acc = bounds_union(
            DeviceBounds3(
                p_min=vec3(out[0, 0], out[0, 1], out[0, 2]),
                p_max=vec3(out[1, 0], out[1, 1], out[1, 2]),
            ),
            DeviceBounds3(
                p_min=vec3(p_min[i, 0], p_min[i, 1], p_min[i, 2]),
                p_max=vec3(p_max[i, 0], p_max[i, 1], p_max[i, 2]),
            ),
        )
        for k in ti.static(range(3)):
            out[0, k] = acc.p_min[k]
            out[1, k] = acc.p_max[k]


@ti.kernel
def _ray_points_kernel(origins: Rows, directions: Rows, t_max: Scalars, t: ti.f32, out: Rows):
    for i in range(origins.shape[0]):
        ray = DeviceRay(
            o=vec3(origins[i, 0], origins[i, 1], origins[i, 2]),
            d=vec3(directions[i, 0], directions[i, 1], directions[i, 2]),
            t_max=t_max[i],
            time=0.0,
        )
        p = ray_point(ray, t)
        for k in ti.static(range(3)):
            out[i, k] = p[k]


@ti.kernel
def _frames_kernel(normals: Rows, out_s: Rows, out_t: Rows):
    for i in range(normals.shape[0]):
        s, t = coordinate_system(vec3(normals[i, 0], normals[i, 1], normals[i, 2]))
        for k in ti.static(range(3)):
            out_s[i, k] = s[k]
            out_t[i, k] = t[k]


# =============================================================================
# Buffers
# =============================================================================


class BoundsBuffer:
    """Packed copy of a list of Bounds3 with batched set queries.

    Attributes:
        count: Number of boxes held.
    """

    def __init__(self, bounds: Sequence[Bounds3]) -> None:
        """Pack the boxes into corner arrays.

        Args:
            bounds: Boxes to upload; integer boxes are promoted to float32.

        Raises:
            TypeError: If an item is not a Bounds3.
            ValueError: If the list is empty or too long.
        """
        _check_count(len(bounds), "bounds")
        for b in bounds:
            if not isinstance(b, Bounds3):
                raise TypeError(f"Expected Bounds3, got {type(b).__name__}")
        self.count = len(bounds)
        self._p_min = to_array([b.p_min for b in bounds])
        self._p_max = to_array([b.p_max for b in bounds])
        logger.debug("Packed %d bounds for device queries", self.count)

    def __len__(self) -> int:
        return self.count

    def overlapping(self, query: Bounds3) -> npt.NDArray[np.bool_]:
        """Flag every held box that overlaps ``query``.

        Returns:
            Boolean array of length ``count``.
        """
        corners = to_array([query.p_min, query.p_max])
        hits = np.zeros(self.count, dtype=np.int32)
        _overlaps_kernel(self._p_min, self._p_max, corners, hits)
        return hits.astype(bool)

    def containing(self, p: Point3) -> npt.NDArray[np.bool_]:
        """Flag every held box that contains ``p`` (upper bound included)."""
        hits = np.zeros(self.count, dtype=np.int32)
        _inside_kernel(self._p_min, self._p_max, to_array([p]), hits)
        return hits.astype(bool)

    def union_all(self) -> Bounds3:
        """The smallest float box containing every held box."""
        out = np.zeros((2, 3), dtype=np.float32)
        _union_kernel(self._p_min, self._p_max, out)
        lo, hi = points_from_array(out)
        return Bounds3(lo, hi)


class RayBuffer:
    """Packed copy of a list of rays."""

    def __init__(self, rays: Sequence[Ray]) -> None:
        """Pack ray origins, directions and t_max.

        Raises:
            ValueError: If the list is empty or too long.
        """
        _check_count(len(rays), "rays")
        self.count = len(rays)
        self._origins = to_array([r.o for r in rays])
        self._directions = to_array([r.d for r in rays])
        self._t_max = np.array([r.t_max for r in rays], dtype=np.float32)
        logger.debug("Packed %d rays for device queries", self.count)

    def __len__(self) -> int:
        return self.count

    def points_at(self, t: float) -> npt.NDArray[np.float32]:
        """Evaluate every ray at parameter ``t``.

        Returns:
            Array of shape (count, 3).
        """
        out = np.zeros((self.count, 3), dtype=np.float32)
        _ray_points_kernel(self._origins, self._directions, self._t_max, t, out)
        return out


def shading_frames(
    normals: Sequence[Union[Normal3, Vector3]],
) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32]]:
    """Build local shading frames around a batch of normals on the device.

    The normals are normalized on the host first.

    Returns:
        Two (N, 3) arrays holding the tangent and bitangent of each frame.
    """
    _check_count(len(normals), "normals")
    count = len(normals)
    packed = to_array([normalize(n) for n in normals])
    out_s = np.zeros((count, 3), dtype=np.float32)
    out_t = np.zeros((count, 3), dtype=np.float32)
    logger.debug("Building %d shading frames on device", count)
    _frames_kernel(packed, out_s, out_t)
    return out_s, out_t


__all__ = [
    "MAX_DEVICE_PRIMITIVES",
    "BoundsBuffer",
    "RayBuffer",
    "shading_frames",
    "to_array",
    "points_from_array",
]
