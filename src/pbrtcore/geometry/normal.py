"""Surface normals.

``Normal3`` has the same algebra as ``Vector3`` (addition, scaling, ``dot``,
``cross``, ``length``, ``normalize``) but is a separate type. Under a linear
transform normals map by the inverse transpose while vectors map directly,
so the two never convert implicitly: ``Normal3 + Vector3`` raises
``TypeError`` and the explicit ``Normal3.from_vector`` / ``Normal3.to_vector``
are the only bridges. ``dot`` and ``abs_dot`` may mix the two since their
result is a scalar.
"""

from __future__ import annotations

from functools import partial
from typing import TypeVar

from pbrtcore.core import numeric
from pbrtcore.core.tuples import Tuple3
from pbrtcore.geometry.vector import Vector3, VectorAlgebra, dot

NormalT = TypeVar("NormalT", bound="Normal3")


class Normal3(VectorAlgebra, Tuple3):
    """Three-component surface normal."""

    kind = "normal"

    @classmethod
    def from_vector(cls: type[NormalT], v: Vector3) -> NormalT:
        """Reinterpret a vector as a normal."""
        if type(v) is not Vector3:
            raise TypeError(f"Normal3.from_vector needs a Vector3, got {type(v).__name__}")
        return cls(v.x, v.y, v.z, dtype=v.dtype)

    def to_vector(self) -> Vector3:
        """Reinterpret this normal as a vector."""
        return Vector3(self.x, self.y, self.z, dtype=self.dtype)


Normal3f = partial(Normal3, dtype=numeric.DEFAULT_FLOAT)


def face_forward(n: NormalT, v: VectorAlgebra) -> NormalT:
    """Flip ``n`` so that it lies in the same hemisphere as ``v``."""
    return -n if dot(n, v) < 0 else n


__all__ = ["Normal3", "Normal3f", "face_forward"]
