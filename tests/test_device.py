"""Unit tests for the Taichi device bridge.

Tests cover:
- ti.func mirrors of ray and bounds operations
- Agreement between device and host corner mapping
- BoundsBuffer, RayBuffer and shading_frames batch queries
- NaN handling parity with the host set operations
- Repeated batches reuse compiled kernels without allocating fields
- NumPy conversion helpers
"""

import numpy as np
import pytest
import taichi as ti


class TestDeviceFunctions:
    """Tests for the @ti.func mirrors."""

    def test_ray_point(self):
        """Test ray_point computes o + d * t."""
        from pbrtcore.device.types import DeviceRay, ray_point, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = DeviceRay(o=vec3(0.0, 0.0, 0.0), d=vec3(1.0, 0.0, 0.0), t_max=1000.0, time=0.0)
            result[None] = ray_point(ray, 5.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 5.0) < 1e-6
        assert abs(r[1]) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_bounds_union_and_intersect(self):
        """Test union and intersection of two device boxes."""
        from pbrtcore.device.types import DeviceBounds3, bounds_intersect, bounds_union, vec3

        union_min = ti.Vector.field(3, dtype=ti.f32, shape=())
        union_max = ti.Vector.field(3, dtype=ti.f32, shape=())
        inter_min = ti.Vector.field(3, dtype=ti.f32, shape=())
        inter_max = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            a = DeviceBounds3(p_min=vec3(0.0, 0.0, 0.0), p_max=vec3(2.0, 2.0, 2.0))
            b = DeviceBounds3(p_min=vec3(1.0, -1.0, 1.0), p_max=vec3(3.0, 1.0, 3.0))
            u = bounds_union(a, b)
            i = bounds_intersect(a, b)
            union_min[None] = u.p_min
            union_max[None] = u.p_max
            inter_min[None] = i.p_min
            inter_max[None] = i.p_max

        test_kernel()
        assert union_min[None].to_numpy().tolist() == [0.0, -1.0, 0.0]
        assert union_max[None].to_numpy().tolist() == [3.0, 2.0, 3.0]
        assert inter_min[None].to_numpy().tolist() == [1.0, 0.0, 1.0]
        assert inter_max[None].to_numpy().tolist() == [2.0, 1.0, 2.0]

    def test_bounds_set_operations_ignore_nan(self):
        """Test a NaN corner component yields the other box's value, as on the host."""
        from pbrtcore.device.types import DeviceBounds3, bounds_intersect, bounds_union, vec3

        nan = ti.field(ti.f32, shape=())
        union_min = ti.Vector.field(3, dtype=ti.f32, shape=())
        inter_max = ti.Vector.field(3, dtype=ti.f32, shape=())
        nan[None] = float("nan")

        @ti.kernel
        def test_kernel():
            a = DeviceBounds3(p_min=vec3(nan[None], 0.0, 0.0), p_max=vec3(nan[None], 2.0, 2.0))
            b = DeviceBounds3(p_min=vec3(-1.0, -1.0, -1.0), p_max=vec3(1.0, 1.0, 1.0))
            union_min[None] = bounds_union(a, b).p_min
            inter_max[None] = bounds_intersect(a, b).p_max

        test_kernel()
        assert union_min[None].to_numpy().tolist() == [-1.0, -1.0, -1.0]
        assert inter_max[None].to_numpy().tolist() == [1.0, 1.0, 1.0]

    def test_union_point(self):
        """Test growing a degenerate device box by a point."""
        from pbrtcore.device.types import DeviceBounds3, bounds_union_point, vec3

        out_min = ti.Vector.field(3, dtype=ti.f32, shape=())
        out_max = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            b = DeviceBounds3(p_min=vec3(1.0, 1.0, 1.0), p_max=vec3(1.0, 1.0, 1.0))
            g = bounds_union_point(b, vec3(-1.0, 2.0, 0.0))
            out_min[None] = g.p_min
            out_max[None] = g.p_max

        test_kernel()
        assert out_min[None].to_numpy().tolist() == [-1.0, 1.0, 0.0]
        assert out_max[None].to_numpy().tolist() == [1.0, 2.0, 1.0]

    def test_inside_boundaries(self):
        """Test inclusive and exclusive containment at the upper bound."""
        from pbrtcore.device.types import (
            DeviceBounds3,
            bounds_inside,
            bounds_inside_exclusive,
            bounds_overlaps,
            vec3,
        )

        flags = ti.field(dtype=ti.i32, shape=4)

        @ti.kernel
        def test_kernel():
            b = DeviceBounds3(p_min=vec3(0.0, 0.0, 0.0), p_max=vec3(1.0, 1.0, 1.0))
            far = DeviceBounds3(p_min=vec3(1.5, 1.5, 1.5), p_max=vec3(2.0, 2.0, 2.0))
            flags[0] = bounds_inside(vec3(1.0, 1.0, 1.0), b)
            flags[1] = bounds_inside_exclusive(vec3(1.0, 1.0, 1.0), b)
            flags[2] = bounds_overlaps(b, b)
            flags[3] = bounds_overlaps(b, far)

        test_kernel()
        assert flags.to_numpy().tolist() == [1, 0, 1, 0]

    def test_corner_matches_host(self):
        """Test the device corner mapping agrees with Bounds3.corner."""
        from pbrtcore.device.types import DeviceBounds3, bounds_corner, vec3
        from pbrtcore.geometry import Bounds3, Point3f

        corners = ti.Vector.field(3, dtype=ti.f32, shape=8)

        @ti.kernel
        def test_kernel():
            for i in range(8):
                b = DeviceBounds3(p_min=vec3(0.0, 0.0, 0.0), p_max=vec3(1.0, 2.0, 3.0))
                corners[i] = bounds_corner(b, i)

        test_kernel()
        host = Bounds3(Point3f(0.0, 0.0, 0.0), Point3f(1.0, 2.0, 3.0))
        device = corners.to_numpy()
        for i in range(8):
            assert device[i].tolist() == host.corner(i).to_numpy().tolist()

    def test_max_dimension(self):
        """Test the device cascade matches the host for a tie."""
        from pbrtcore.device.types import DeviceBounds3, bounds_diagonal, max_dimension, vec3

        dims = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            dims[0] = max_dimension(vec3(3.0, 1.0, 2.0))
            dims[1] = max_dimension(vec3(1.0, 3.0, 3.0))
            b = DeviceBounds3(p_min=vec3(0.0, 0.0, 0.0), p_max=vec3(1.0, 5.0, 2.0))
            dims[2] = max_dimension(bounds_diagonal(b))

        test_kernel()
        assert dims.to_numpy().tolist() == [0, 2, 1]

    def test_coordinate_system(self):
        """Test the device basis matches the host basis."""
        from pbrtcore.device.types import coordinate_system, vec3
        from pbrtcore.geometry import Vector3f
        from pbrtcore.geometry import coordinate_system as host_coordinate_system

        out_s = ti.Vector.field(3, dtype=ti.f32, shape=())
        out_t = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            s, t = coordinate_system(vec3(0.0, 1.0, 0.0))
            out_s[None] = s
            out_t[None] = t

        test_kernel()
        v2, v3 = host_coordinate_system(Vector3f(0.0, 1.0, 0.0))
        assert np.allclose(out_s[None].to_numpy(), v2.to_numpy())
        assert np.allclose(out_t[None].to_numpy(), v3.to_numpy())


class TestConversion:
    """Tests for NumPy conversion helpers."""

    def test_to_array(self):
        """Test stacking tuples into a float32 array."""
        from pbrtcore.device import to_array
        from pbrtcore.geometry import Point3i, Vector3f

        array = to_array([Vector3f(1.0, 2.0, 3.0), Vector3f(4.0, 5.0, 6.0)])
        assert array.dtype == np.float32
        assert array.shape == (2, 3)
        assert to_array([Point3i(1, 2, 3)]).tolist() == [[1.0, 2.0, 3.0]]

    def test_to_array_rejects_bad_input(self):
        """Test empty and mixed-dimension inputs are rejected."""
        from pbrtcore.device import to_array
        from pbrtcore.geometry import Vector2f, Vector3f

        with pytest.raises(ValueError):
            to_array([])
        with pytest.raises(ValueError):
            to_array([Vector2f(1.0, 2.0), Vector3f(1.0, 2.0, 3.0)])

    def test_points_from_array(self):
        """Test converting an (N, 3) array back into points."""
        from pbrtcore.device import points_from_array
        from pbrtcore.geometry import Point3f

        points = points_from_array(np.array([[1.0, 2.0, 3.0], [0.0, 0.0, 0.0]]))
        assert points == [Point3f(1.0, 2.0, 3.0), Point3f(0.0, 0.0, 0.0)]
        with pytest.raises(ValueError):
            points_from_array(np.zeros((2, 2)))


class TestBoundsBuffer:
    """Tests for batched bounds queries."""

    def _boxes(self):
        from pbrtcore.geometry import Bounds3

        return [
            Bounds3.from_scalars(0.0, 1.0),
            Bounds3.from_scalars(0.5, 2.0),
            Bounds3.from_scalars(5.0, 6.0),
        ]

    def test_overlapping(self):
        """Test overlap flags agree with the host overlaps function."""
        from pbrtcore.device import BoundsBuffer
        from pbrtcore.geometry import Bounds3, overlaps

        boxes = self._boxes()
        query = Bounds3.from_scalars(0.8, 1.2)
        hits = BoundsBuffer(boxes).overlapping(query)
        assert hits.tolist() == [overlaps(b, query) for b in boxes]
        assert hits.tolist() == [True, True, False]

    def test_containing(self):
        """Test containment flags include the upper bound."""
        from pbrtcore.device import BoundsBuffer
        from pbrtcore.geometry import Point3f

        buffer = BoundsBuffer(self._boxes())
        assert buffer.containing(Point3f(1.0, 1.0, 1.0)).tolist() == [True, True, False]
        assert buffer.containing(Point3f(5.5, 5.5, 5.5)).tolist() == [False, False, True]

    def test_union_all(self):
        """Test the device reduction matches the host union."""
        from functools import reduce

        from pbrtcore.device import BoundsBuffer
        from pbrtcore.geometry import union

        boxes = self._boxes()
        assert BoundsBuffer(boxes).union_all() == reduce(union, boxes)

    def test_integer_boxes_promoted(self):
        """Test integer boxes are uploaded as floats."""
        from pbrtcore.device import BoundsBuffer
        from pbrtcore.geometry import Bounds3

        buffer = BoundsBuffer([Bounds3.from_scalars(0, 2)])
        assert buffer.union_all() == Bounds3.from_scalars(0.0, 2.0)

    def test_rejects_bad_input(self):
        """Test empty lists and non-bounds items are rejected."""
        from pbrtcore.device import BoundsBuffer
        from pbrtcore.geometry import Point3f

        with pytest.raises(ValueError):
            BoundsBuffer([])
        with pytest.raises(TypeError):
            BoundsBuffer([Point3f(0.0, 0.0, 0.0)])

    def test_buffers_are_independent(self):
        """Test two buffers do not share device storage."""
        from pbrtcore.device import BoundsBuffer
        from pbrtcore.geometry import Bounds3, Point3f

        first = BoundsBuffer([Bounds3.from_scalars(0.0, 1.0)])
        second = BoundsBuffer([Bounds3.from_scalars(10.0, 11.0)])
        p = Point3f(0.5, 0.5, 0.5)
        assert first.containing(p).tolist() == [True]
        assert second.containing(p).tolist() == [False]

    def test_union_all_ignores_nan_corners(self):
        """Test the device reduction skips NaN components like the host union."""
        from functools import reduce

        from pbrtcore.device import BoundsBuffer
        from pbrtcore.geometry import Bounds3, Point3f, union

        boxes = [
            Bounds3(Point3f(float("nan"), 0.0, 0.0), Point3f(1.0, 1.0, 1.0)),
            Bounds3.from_scalars(-1.0, 0.5),
        ]
        result = BoundsBuffer(boxes).union_all()
        assert result == reduce(union, boxes)
        assert result == Bounds3.from_scalars(-1.0, 1.0)

    def test_every_query_runs(self):
        """Test each buffer query compiles and launches."""
        from pbrtcore.device import BoundsBuffer
        from pbrtcore.geometry import Bounds3, Point3f

        buffer = BoundsBuffer(self._boxes())
        assert len(buffer) == 3
        assert buffer.overlapping(Bounds3.from_scalars(-1.0, 0.0)).tolist() == [True, False, False]
        assert buffer.containing(Point3f(0.0, 0.0, 0.0)).tolist() == [True, False, False]
        assert buffer.union_all() == Bounds3.from_scalars(0.0, 6.0)

    def test_repeated_buffers_allocate_no_fields(self):
        """Test building and querying many buffers leaves the SNode tree count unchanged."""
        from taichi.lang import impl

        from pbrtcore.device import BoundsBuffer
        from pbrtcore.geometry import Bounds3, Point3f

        query = Bounds3.from_scalars(0.8, 1.2)
        p = Point3f(0.5, 0.5, 0.5)
        BoundsBuffer(self._boxes()).overlapping(query)
        before = impl.get_runtime().prog.get_snode_tree_size()
        for _ in range(20):
            buffer = BoundsBuffer(self._boxes())
            buffer.overlapping(query)
            buffer.containing(p)
            buffer.union_all()
        assert impl.get_runtime().prog.get_snode_tree_size() == before


class TestRayBuffer:
    """Tests for batched ray evaluation."""

    def test_points_at(self):
        """Test device evaluation matches Ray.point."""
        from pbrtcore.device import RayBuffer
        from pbrtcore.geometry import Point3f, Ray, Vector3f

        rays = [
            Ray(Point3f(0.0, 0.0, 0.0), Vector3f(1.0, 0.0, 0.0), 1000.0, 0.0, None),
            Ray(Point3f(1.0, 2.0, 3.0), Vector3f(0.0, -1.0, 0.5)),
        ]
        points = RayBuffer(rays).points_at(5.0)
        assert points.shape == (2, 3)
        for ray, row in zip(rays, points):
            assert np.allclose(row, ray.point(5.0).to_numpy())

    def test_rejects_empty(self):
        """Test an empty ray list is rejected."""
        from pbrtcore.device import RayBuffer

        with pytest.raises(ValueError):
            RayBuffer([])


class TestShadingFrames:
    """Tests for batched frame construction."""

    def test_frames_are_orthonormal(self):
        """Test every frame is orthonormal with its normal."""
        from pbrtcore.device import shading_frames
        from pbrtcore.geometry import Normal3f, normalize

        normals = [
            Normal3f(0.0, 0.0, 1.0),
            Normal3f(1.0, 0.0, 0.0),
            Normal3f(1.0, 2.0, -2.0),
        ]
        s, t = shading_frames(normals)
        n = np.array([normalize(x).to_numpy() for x in normals])
        assert s.shape == t.shape == (3, 3)
        assert np.allclose(np.sum(s * n, axis=1), 0.0, atol=1e-5)
        assert np.allclose(np.sum(t * n, axis=1), 0.0, atol=1e-5)
        assert np.allclose(np.sum(s * t, axis=1), 0.0, atol=1e-5)
        assert np.allclose(np.linalg.norm(s, axis=1), 1.0, atol=1e-5)
        assert np.allclose(np.linalg.norm(t, axis=1), 1.0, atol=1e-5)

    def test_repeated_calls_allocate_no_fields(self):
        """Test repeated frame batches leave the SNode tree count unchanged."""
        from taichi.lang import impl

        from pbrtcore.device import shading_frames
        from pbrtcore.geometry import Normal3f

        normals = [Normal3f(0.0, 1.0, 0.0), Normal3f(1.0, 1.0, 1.0)]
        shading_frames(normals)
        before = impl.get_runtime().prog.get_snode_tree_size()
        for _ in range(20):
            shading_frames(normals)
        assert impl.get_runtime().prog.get_snode_tree_size() == before
