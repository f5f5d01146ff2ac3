"""Infinite one-sided plane primitive.

A plane is a point P and a unit normal N. Rays only hit the plane when they
travel into it from the side N faces:

    denom = dot(-N, d)          hit only if denom > PLANE_EPSILON
    t = dot(P - o, -N) / denom  rejected if t < 0

Rays travelling along N (approaching the back face) and rays parallel to
the plane never hit. The hit point is o + d * t with the direction used as
given, so t is in units of the direction's length.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.geometry.plane import Plane, plane_intersect
    >>> floor = Plane(point=vec3(0, -1, 0), normal=vec3(0, 1, 0))
    >>> # Use plane_intersect within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.vector import vec3
from src.whitted.geometry.sphere import HitRecord, make_miss_record

# Minimum approach cosine for a plane hit
PLANE_EPSILON = 1e-6


@ti.dataclass
class Plane:
    """A plane through a point with a unit normal.

    Attributes:
        point: Any point on the plane (vec3).
        normal: The unit normal; rays hit from the side it faces (vec3).
    """

    point: vec3
    normal: vec3


@ti.func
def plane_intersect_dist(ray_origin: vec3, ray_direction: vec3, plane: Plane):
    """Hit distance along a ray, front face only.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction (need not be normalized).
        plane: The plane to test.

    Returns:
        Tuple of (hit, t) where hit is 1 on a hit and 0 otherwise.
    """
    facing = -plane.normal
    denom = tm.dot(facing, ray_direction)

    did_hit = 0
    t = 0.0

    if denom > PLANE_EPSILON:
        t = tm.dot(plane.point - ray_origin, facing) / denom
        if t >= 0.0:
            did_hit = 1

    return did_hit, t


@ti.func
def plane_intersect(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> HitRecord:
    """Full hit record for a front-face plane hit.

    Returns:
        A HitRecord whose normal is the plane's stored normal; material_id
        is left at -1 for the caller to fill in.
    """
    result = make_miss_record()
    did_hit, t = plane_intersect_dist(ray_origin, ray_direction, plane)
    if did_hit == 1:
        result = HitRecord(
            hit=1,
            t=t,
            point=ray_origin + ray_direction * t,
            normal=plane.normal,
            material_id=-1,
        )
    return result
