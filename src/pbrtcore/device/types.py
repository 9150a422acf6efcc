"""Taichi mirrors of the ray and bounds primitives.

Kernels in the acceleration, camera and shading layers cannot call the host
classes, so this module provides ``@ti.dataclass`` structs and ``@ti.func``
helpers with the same semantics as ``pbrtcore.geometry``:

- ``ray_point`` evaluates ``o + d * t`` without clamping to ``t_max``
- ``bounds_corner`` keeps the host corner bit mapping
- ``coordinate_system`` keeps the ``|x| > |y|`` branch
- ``fmin``/``fmax`` (and so the bounds set operations) ignore NaN components
  like the host ``numpy.fmin``/``numpy.fmax``

All functions are single precision and must be called from Taichi scope.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pbrtcore.device.types import DeviceRay, ray_point, vec3
    >>> out = ti.Vector.field(3, dtype=ti.f32, shape=())
    >>> @ti.kernel
    ... def evaluate():
    ...     ray = DeviceRay(o=vec3(0.0), d=vec3(1.0, 0.0, 0.0), t_max=1000.0, time=0.0)
    ...     out[None] = ray_point(ray, 5.0)
"""

import taichi as ti
import taichi.math as tm

# Single-precision 3-vector shared by every device struct
vec3 = tm.vec3


@ti.dataclass
class DeviceRay:
    """Kernel-side ray.

    Attributes:
        o: Origin point (vec3).
        d: Direction vector (vec3), not necessarily normalized.
        t_max: Upper end of the valid parametric range.
        time: Time value of the ray.
    """

    o: vec3
    d: vec3
    t_max: ti.f32
    time: ti.f32


@ti.dataclass
class DeviceBounds3:
    """Kernel-side axis-aligned box.

    Attributes:
        p_min: Minimum corner (vec3).
        p_max: Maximum corner (vec3).
    """

    p_min: vec3
    p_max: vec3


@ti.func
def ray_point(ray: DeviceRay, t: ti.f32) -> vec3:
    """Point along the ray at parameter t, ignoring t_max."""
    return ray.o + ray.d * t


@ti.func
def is_nan(x: ti.f32) -> ti.i32:
    """1 if x is NaN. Tests the bit pattern so fast-math cannot fold it away."""
    bits = ti.bit_cast(x, ti.u32)
    return (bits & ti.u32(0x7FFFFFFF)) > ti.u32(0x7F800000)


@ti.func
def fmin(a: vec3, b: vec3) -> vec3:
    """Componentwise minimum; a NaN component yields the other operand's."""
    result = vec3(0.0, 0.0, 0.0)
    for k in ti.static(range(3)):
        result[k] = ti.select(is_nan(a[k]), b[k], ti.select(is_nan(b[k]), a[k], ti.min(a[k], b[k])))
    return result


@ti.func
def fmax(a: vec3, b: vec3) -> vec3:
    """Componentwise maximum; a NaN component yields the other operand's."""
    result = vec3(0.0, 0.0, 0.0)
    for k in ti.static(range(3)):
        result[k] = ti.select(is_nan(a[k]), b[k], ti.select(is_nan(b[k]), a[k], ti.max(a[k], b[k])))
    return result


@ti.func
def bounds_union(b0: DeviceBounds3, b1: DeviceBounds3) -> DeviceBounds3:
    """Smallest box containing both boxes. NaN corners are ignored as on the host."""
    return DeviceBounds3(p_min=fmin(b0.p_min, b1.p_min), p_max=fmax(b0.p_max, b1.p_max))


@ti.func
def bounds_union_point(b: DeviceBounds3, p: vec3) -> DeviceBounds3:
    """Smallest box containing the box and the point."""
    return DeviceBounds3(p_min=fmin(b.p_min, p), p_max=fmax(b.p_max, p))


@ti.func
def bounds_intersect(b0: DeviceBounds3, b1: DeviceBounds3) -> DeviceBounds3:
    """Common part of two boxes; inverted when they do not overlap."""
    return DeviceBounds3(p_min=fmax(b0.p_min, b1.p_min), p_max=fmin(b0.p_max, b1.p_max))


@ti.func
def bounds_overlaps(b0: DeviceBounds3, b1: DeviceBounds3) -> ti.i32:
    """1 if the boxes overlap on every axis, 0 otherwise."""
    x = b0.p_max.x >= b1.p_min.x and b0.p_min.x <= b1.p_max.x
    y = b0.p_max.y >= b1.p_min.y and b0.p_min.y <= b1.p_max.y
    z = b0.p_max.z >= b1.p_min.z and b0.p_min.z <= b1.p_max.z
    return x and y and z


@ti.func
def bounds_inside(p: vec3, b: DeviceBounds3) -> ti.i32:
    """1 if p lies in the box, upper bound included."""
    return (
        p.x >= b.p_min.x
        and p.x <= b.p_max.x
        and p.y >= b.p_min.y
        and p.y <= b.p_max.y
        and p.z >= b.p_min.z
        and p.z <= b.p_max.z
    )


@ti.func
def bounds_inside_exclusive(p: vec3, b: DeviceBounds3) -> ti.i32:
    """1 if p lies in the box, upper bound excluded."""
    return (
        p.x >= b.p_min.x
        and p.x < b.p_max.x
        and p.y >= b.p_min.y
        and p.y < b.p_max.y
        and p.z >= b.p_min.z
        and p.z < b.p_max.z
    )


@ti.func
def bounds_diagonal(b: DeviceBounds3) -> vec3:
    """Vector from p_min to p_max."""
    return b.p_max - b.p_min


@ti.func
def bounds_corner(b: DeviceBounds3, corner: ti.i32) -> vec3:
    """Box corner selected by a 3-bit index, same mapping as the host.

    Bit 0 set picks p_max.x; bits 1 and 2 set pick p_min.y and p_min.z.
    """
    x = ti.select((corner & 1) == 0, b.p_min.x, b.p_max.x)
    y = ti.select((corner & 2) == 0, b.p_max.y, b.p_min.y)
    z = ti.select((corner & 4) == 0, b.p_max.z, b.p_min.z)
    return vec3(x, y, z)


@ti.func
def max_dimension(v: vec3) -> ti.i32:
    """Index of the largest component using the host's strict cascade."""
    result = 2
    if v.x > v.y:
        if v.x > v.z:
            result = 0
    elif v.y > v.z:
        result = 1
    return result


@ti.func
def coordinate_system(v1: vec3):
    """Complete an orthonormal basis around the normalized vector v1.

    Returns:
        A tuple (v2, v3) such that {v1, v2, v3} is orthonormal.
    """
    v2 = vec3(0.0, 0.0, 0.0)
    if ti.abs(v1.x) > ti.abs(v1.y):
        v2 = vec3(-v1.z, 0.0, v1.x) / ti.sqrt(v1.x * v1.x + v1.z * v1.z)
    else:
        v2 = vec3(0.0, v1.z, -v1.y) / ti.sqrt(v1.y * v1.y + v1.z * v1.z)
    v3 = tm.cross(v1, v2)
    return v2, v3
