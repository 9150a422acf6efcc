"""Geometric primitives for a physically based renderer.

This package provides the numeric foundation the rest of a renderer builds
on: vectors, points and normals with integer or floating-point components,
axis-aligned bounding boxes, and rays with optional differentials.

Subpackages:
    core: Component types and the generic tuple algebra
    geometry: Vector, Point, Normal, Bounds and Ray types
    device: Taichi mirrors of the primitives and batched device queries
"""

__version__ = "0.1.0"
