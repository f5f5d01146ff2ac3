"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting a sphere from outside
- Ray missing a sphere
- Ray starting inside a sphere (far root, outward normal)
- The self-hit guard on the near root
- Tangent rays
- Distance units follow the direction's magnitude
"""

import pytest
import taichi as ti


def _intersect(origin, direction, center, radius, min_distance=0.5):
    """Run sphere_intersect in a kernel and return (hit, t, point, normal)."""
    from src.whitted.geometry.sphere import Sphere, sphere_intersect
    from src.whitted.core.vector import vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t = ti.field(dtype=ti.f64, shape=())
    point = ti.Vector.field(3, dtype=ti.f64, shape=())
    normal = ti.Vector.field(3, dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f64, oy: ti.f64, oz: ti.f64,
        dx: ti.f64, dy: ti.f64, dz: ti.f64,
        cx: ti.f64, cy: ti.f64, cz: ti.f64,
        r: ti.f64, eps: ti.f64,
    ):
        sphere = Sphere(center=vec3(cx, cy, cz), radius=r)
        rec = sphere_intersect(vec3(ox, oy, oz), vec3(dx, dy, dz), sphere, eps)
        hit[None] = rec.hit
        t[None] = rec.t
        point[None] = rec.point
        normal[None] = rec.normal

    test_kernel(*origin, *direction, *center, radius, min_distance)
    p = point[None]
    n = normal[None]
    return hit[None], t[None], (p[0], p[1], p[2]), (n[0], n[1], n[2])


def _intersect_dist(origin, direction, center, radius, min_distance=0.5):
    """Run sphere_intersect_dist in a kernel and return (hit, t)."""
    from src.whitted.geometry.sphere import Sphere, sphere_intersect_dist
    from src.whitted.core.vector import vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t = ti.field(dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f64, oy: ti.f64, oz: ti.f64,
        dx: ti.f64, dy: ti.f64, dz: ti.f64,
        cx: ti.f64, cy: ti.f64, cz: ti.f64,
        r: ti.f64, eps: ti.f64,
    ):
        sphere = Sphere(center=vec3(cx, cy, cz), radius=r)
        did_hit, dist = sphere_intersect_dist(vec3(ox, oy, oz), vec3(dx, dy, dz), sphere, eps)
        hit[None] = did_hit
        t[None] = dist

    test_kernel(*origin, *direction, *center, radius, min_distance)
    return hit[None], t[None]


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_ray_hits_sphere_from_outside(self):
        """Test the near root is chosen for a ray from outside."""
        hit, t, point, normal = _intersect((0, 0, 0), (0, 0, 1), (0, 0, 10), 5.0)

        assert hit == 1
        assert t == pytest.approx(5.0)
        assert point == pytest.approx((0.0, 0.0, 5.0))
        assert normal == pytest.approx((0.0, 0.0, -1.0))

    def test_ray_misses_sphere(self):
        """Test a ray passing beside the sphere."""
        hit, _ = _intersect_dist((0, 0, 0), (0, 0, 1), (10, 0, 10), 5.0)
        assert hit == 0

    def test_sphere_behind_ray(self):
        """Test a sphere entirely behind the ray origin is not hit."""
        hit, _ = _intersect_dist((0, 0, 0), (0, 0, 1), (0, 0, -10), 5.0)
        assert hit == 0

    def test_ray_inside_sphere_uses_far_root(self):
        """Test a ray from the center hits the far side with an outward normal."""
        hit, t, point, normal = _intersect((0, 0, 10), (0, 0, 1), (0, 0, 10), 5.0)

        assert hit == 1
        assert t == pytest.approx(5.0)
        assert point == pytest.approx((0.0, 0.0, 15.0))
        assert normal == pytest.approx((0.0, 0.0, 1.0))

    def test_near_root_within_guard_is_skipped(self):
        """Test a near root at or below the guard falls through to the far root."""
        # Origin on the surface: r0 == 0, r1 == 10
        hit, t = _intersect_dist((0, 0, 5), (0, 0, 1), (0, 0, 10), 5.0)
        assert hit == 1
        assert t == pytest.approx(10.0)

    def test_guard_is_configurable(self):
        """Test a smaller guard admits a near root that 0.5 rejects."""
        # r0 == 0.25, r1 == 10.25
        hit, t = _intersect_dist((0, 0, 4.75), (0, 0, 1), (0, 0, 10), 5.0, min_distance=0.5)
        assert hit == 1
        assert t == pytest.approx(10.25)

        hit, t = _intersect_dist((0, 0, 4.75), (0, 0, 1), (0, 0, 10), 5.0, min_distance=0.1)
        assert hit == 1
        assert t == pytest.approx(0.25)

    def test_both_roots_within_guard_is_miss(self):
        """Test a tiny sphere right at the origin is never hit."""
        hit, _ = _intersect_dist((0, 0, 0), (0, 0, 1), (0, 0, 0.2), 0.1)
        assert hit == 0

    def test_tangent_ray_hits_through_second_branch(self):
        """Test a tangent ray (r0 == r1) reports the double root."""
        hit, t = _intersect_dist((5, 0, 0), (0, 0, 1), (0, 0, 10), 5.0)
        assert hit == 1
        assert t == pytest.approx(10.0)

    def test_distance_in_direction_units(self):
        """Test t scales inversely with the direction's magnitude."""
        hit, t = _intersect_dist((0, 0, 0), (0, 0, 2), (0, 0, 10), 5.0)
        assert hit == 1
        assert t == pytest.approx(2.5)


class TestMissRecord:
    """Tests for the miss record."""

    def test_miss_record_fields(self):
        """Test that miss records have hit 0 and material_id -1."""
        from src.whitted.geometry.sphere import make_miss_record

        result_hit = ti.field(dtype=ti.i32, shape=())
        result_material_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = make_miss_record()
            result_hit[None] = rec.hit
            result_material_id[None] = rec.material_id

        test_kernel()
        assert result_hit[None] == 0
        assert result_material_id[None] == -1
