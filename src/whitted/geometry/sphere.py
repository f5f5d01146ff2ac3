"""Sphere primitive with ray-sphere intersection.

The ray-sphere intersection solves the classic quadratic

    a*t^2 + b*t + c = 0
    a = dot(d, d),  b = 2 * dot(d, o - C),  c = dot(o - C, o - C) - r^2

and keeps the nearest root past a minimum distance. The minimum distance
(0.5 by default) is not a geometric bound: it suppresses self-intersection
of rays leaving a surface they were just reflected or shadow-tested from,
and its right value depends on scene scale.

Distances are in units of the given direction's length, so callers that
compare them against world distances must pass unit directions.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.geometry.sphere import Sphere, sphere_intersect_dist
    >>> sphere = Sphere(center=vec3(0, 0, 10), radius=5)
    >>> # Use sphere_intersect_dist within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.vector import normalize, real, vec3

# Default self-intersection guard for sphere hits
DEFAULT_SELF_HIT_EPSILON = 0.5


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive).
    """

    center: vec3
    radius: real


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: 1 if the ray hit the surface, 0 otherwise.
        t: Parametric distance along the ray. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal used for shading. Only valid if hit == 1.
        material_id: Material of the hit surface, -1 when unknown.
    """

    hit: ti.i32
    t: real
    point: vec3
    normal: vec3
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def sphere_intersect_dist(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    min_distance: real,
):
    """Nearest admissible hit distance along a ray.

    Root selection: with roots r0 <= r1, r0 is chosen if
    r0 > min_distance and r0 < r1; otherwise r1 if r1 > min_distance;
    otherwise there is no hit. A tangent ray (r0 == r1) therefore only
    reports a hit through the second branch.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction (need not be normalized).
        sphere: The sphere to test.
        min_distance: Self-intersection guard, usually 0.5.

    Returns:
        Tuple of (hit, t) where hit is 1 on a hit and 0 otherwise.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    b = 2.0 * tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    delta = b * b - 4.0 * a * c

    did_hit = 0
    t = 0.0

    if delta >= 0.0:
        delta_sqrt = ti.sqrt(delta)
        r0 = (-b - delta_sqrt) / (2.0 * a)
        r1 = (-b + delta_sqrt) / (2.0 * a)
        if r0 > min_distance and r0 < r1:
            did_hit = 1
            t = r0
        elif r1 > min_distance:
            did_hit = 1
            t = r1

    return did_hit, t


@ti.func
def sphere_intersect(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    min_distance: real,
) -> HitRecord:
    """Full hit record for the nearest admissible hit.

    The normal always points away from the center, even when the ray
    starts inside the sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction (need not be normalized).
        sphere: The sphere to test.
        min_distance: Self-intersection guard, usually 0.5.

    Returns:
        A HitRecord; material_id is left at -1 for the caller to fill in.
    """
    result = make_miss_record()
    did_hit, t = sphere_intersect_dist(ray_origin, ray_direction, sphere, min_distance)
    if did_hit == 1:
        point = ray_origin + ray_direction * t
        result = HitRecord(
            hit=1,
            t=t,
            point=point,
            normal=normalize(point - sphere.center),
            material_id=-1,
        )
    return result
