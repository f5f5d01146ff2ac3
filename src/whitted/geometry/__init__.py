"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, the shared HitRecord and the self-hit guard
    plane: One-sided infinite plane

Intersection routines are Taichi functions (@ti.func). Each shape offers a
distance-only test and a full hit-record test:

    did_hit, t = sphere_intersect_dist(ray_origin, ray_direction, sphere, min_distance)
"""

from .plane import PLANE_EPSILON, Plane, plane_intersect, plane_intersect_dist
from .sphere import (
    DEFAULT_SELF_HIT_EPSILON,
    HitRecord,
    Sphere,
    make_miss_record,
    sphere_intersect,
    sphere_intersect_dist,
)

__all__ = [
    "Sphere",
    "HitRecord",
    "DEFAULT_SELF_HIT_EPSILON",
    "make_miss_record",
    "sphere_intersect",
    "sphere_intersect_dist",
    "Plane",
    "PLANE_EPSILON",
    "plane_intersect",
    "plane_intersect_dist",
]
