"""Unit tests for plane intersection.

Tests cover:
- Rays travelling into the plane from the side its normal faces
- Back-face and parallel rays (no hit)
- Planes behind the ray origin
- Hit record normal is the stored normal
"""

import pytest
import taichi as ti


def _intersect(origin, direction, point, normal):
    """Run plane_intersect in a kernel and return (hit, t, hit_point, hit_normal)."""
    from src.whitted.core.vector import vec3
    from src.whitted.geometry.plane import Plane, plane_intersect

    hit = ti.field(dtype=ti.i32, shape=())
    t = ti.field(dtype=ti.f64, shape=())
    hit_point = ti.Vector.field(3, dtype=ti.f64, shape=())
    hit_normal = ti.Vector.field(3, dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f64, oy: ti.f64, oz: ti.f64,
        dx: ti.f64, dy: ti.f64, dz: ti.f64,
        px: ti.f64, py: ti.f64, pz: ti.f64,
        nx: ti.f64, ny: ti.f64, nz: ti.f64,
    ):
        plane = Plane(point=vec3(px, py, pz), normal=vec3(nx, ny, nz))
        rec = plane_intersect(vec3(ox, oy, oz), vec3(dx, dy, dz), plane)
        hit[None] = rec.hit
        t[None] = rec.t
        hit_point[None] = rec.point
        hit_normal[None] = rec.normal

    test_kernel(*origin, *direction, *point, *normal)
    p = hit_point[None]
    n = hit_normal[None]
    return hit[None], t[None], (p[0], p[1], p[2]), (n[0], n[1], n[2])


class TestPlaneIntersection:
    """Tests for ray-plane intersection."""

    def test_downward_ray_hits_floor(self):
        """Test a ray from above a floor hits it."""
        hit, t, point, normal = _intersect((0, 0, 0), (0, -1, 0), (0, -5, 0), (0, 1, 0))

        assert hit == 1
        assert t == pytest.approx(5.0)
        assert point == pytest.approx((0.0, -5.0, 0.0))
        assert normal == pytest.approx((0.0, 1.0, 0.0))

    def test_oblique_hit(self):
        """Test an oblique ray into the front face."""
        hit, t, point, _ = _intersect((0, 0, 0), (0, -1, 1), (0, -2, 0), (0, 1, 0))

        assert hit == 1
        assert t == pytest.approx(2.0)
        assert point == pytest.approx((0.0, -2.0, 2.0))

    def test_back_face_is_not_hit(self):
        """Test a ray from below the floor, moving along the normal, misses."""
        hit, _, _, _ = _intersect((0, -10, 0), (0, 1, 0), (0, -5, 0), (0, 1, 0))
        assert hit == 0

    def test_parallel_ray_misses(self):
        """Test a ray parallel to the plane misses."""
        hit, _, _, _ = _intersect((0, 0, 0), (1, 0, 0), (0, -5, 0), (0, 1, 0))
        assert hit == 0

    def test_plane_behind_ray_misses(self):
        """Test a plane behind the origin is rejected by t < 0."""
        # Origin below a ceiling-facing-down plane, ray moving away from it
        hit, _, _, _ = _intersect((0, 0, 0), (0, -1, 0), (0, 5, 0), (0, 1, 0))
        assert hit == 0

    def test_origin_on_plane_hits_at_zero(self):
        """Test a ray starting on the plane and moving into it reports t == 0."""
        hit, t, _, _ = _intersect((0, -5, 0), (0, -1, 0), (0, -5, 0), (0, 1, 0))
        assert hit == 1
        assert t == pytest.approx(0.0)
