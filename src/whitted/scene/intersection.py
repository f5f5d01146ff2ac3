"""Scene-level shape storage and ray queries.

Shapes form a closed tagged union (see ShapeKind) stored in one ordered
structure-of-arrays table, so a shape's index is its insertion order:

    shape_kinds[i]      SPHERE or PLANE
    shape_positions[i]  sphere center / point on plane
    shape_normals[i]    unit plane normal (unused for spheres)
    shape_radii[i]      sphere radius (unused for planes)

All queries are linear scans. Closest-hit ties go to the first shape in
order; shadow tests stop at the first occluder.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.scene.intersection import add_sphere, closest_hit
    >>> add_sphere((0.0, 0.0, 10.0), 5.0, material_id=0)
    0
    >>> # Use closest_hit within a Taichi kernel
"""

import math
from enum import IntEnum

import taichi as ti

from src.whitted.core.vector import real, vec3
from src.whitted.geometry.plane import Plane, plane_intersect, plane_intersect_dist
from src.whitted.geometry.sphere import (
    DEFAULT_SELF_HIT_EPSILON,
    HitRecord,
    Sphere,
    make_miss_record,
    sphere_intersect,
    sphere_intersect_dist,
)
from src.whitted.scene.lights import light_feeler

Vec = tuple[float, float, float]


class ShapeKind(IntEnum):
    """Tag of the shape union."""

    SPHERE = 0
    PLANE = 1


_SPHERE = int(ShapeKind.SPHERE)
_PLANE = int(ShapeKind.PLANE)


MAX_SHAPES = 1024

shape_kinds = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
shape_positions = ti.Vector.field(3, dtype=real, shape=MAX_SHAPES)
shape_normals = ti.Vector.field(3, dtype=real, shape=MAX_SHAPES)
shape_radii = ti.field(dtype=real, shape=MAX_SHAPES)
shape_material_ids = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
num_shapes = ti.field(dtype=ti.i32, shape=())

# Minimum sphere hit distance, shared by every sphere in the scene
self_hit_epsilon = ti.field(dtype=real, shape=())
self_hit_epsilon[None] = DEFAULT_SELF_HIT_EPSILON


def clear_shapes() -> None:
    """Remove all shapes from the scene."""
    num_shapes[None] = 0


def set_self_hit_epsilon(value: float) -> None:
    """Set the minimum admissible sphere hit distance.

    Raises:
        ValueError: If value is negative.
    """
    if value < 0.0:
        raise ValueError(f"self_hit_epsilon must be >= 0, got {value}")
    self_hit_epsilon[None] = value


def get_self_hit_epsilon() -> float:
    """Get the minimum admissible sphere hit distance."""
    return float(self_hit_epsilon[None])


def _next_shape_index() -> int:
    idx = num_shapes[None]
    if idx >= MAX_SHAPES:
        raise RuntimeError(f"Maximum number of shapes ({MAX_SHAPES}) exceeded")
    return idx


def add_sphere(center: Vec, radius: float, material_id: int = 0) -> int:
    """Append a sphere to the scene.

    Args:
        center: The center of the sphere.
        radius: The radius; must be positive.
        material_id: ID of a registered material.

    Returns:
        The index of the new shape.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of shapes is exceeded.
    """
    if not radius > 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    idx = _next_shape_index()
    shape_kinds[idx] = _SPHERE
    shape_positions[idx] = list(center)
    shape_normals[idx] = [0.0, 0.0, 0.0]
    shape_radii[idx] = radius
    shape_material_ids[idx] = material_id
    num_shapes[None] = idx + 1
    return idx


def add_plane(point: Vec, normal: Vec, material_id: int = 0) -> int:
    """Append a plane to the scene. The normal is stored normalized.

    Args:
        point: Any point on the plane.
        normal: The side of the plane that rays can hit from.
        material_id: ID of a registered material.

    Returns:
        The index of the new shape.

    Raises:
        ValueError: If the normal has zero length.
        RuntimeError: If the maximum number of shapes is exceeded.
    """
    norm = math.sqrt(normal[0] ** 2 + normal[1] ** 2 + normal[2] ** 2)
    if not norm > 0.0:
        raise ValueError(f"Plane normal must be non-zero, got {normal}")
    idx = _next_shape_index()
    shape_kinds[idx] = _PLANE
    shape_positions[idx] = list(point)
    shape_normals[idx] = [normal[0] / norm, normal[1] / norm, normal[2] / norm]
    shape_radii[idx] = 0.0
    shape_material_ids[idx] = material_id
    num_shapes[None] = idx + 1
    return idx


def get_shape_count() -> int:
    """Get the number of shapes in the scene."""
    return int(num_shapes[None])


# =============================================================================
# Per-shape Dispatch
# =============================================================================


@ti.func
def shape_intersect_dist(index: ti.i32, ray_origin: vec3, ray_direction: vec3):
    """Hit distance of one shape, dispatched on its kind.

    Returns:
        Tuple of (hit, t).
    """
    did_hit = 0
    t = 0.0
    if shape_kinds[index] == _SPHERE:
        sphere = Sphere(center=shape_positions[index], radius=shape_radii[index])
        did_hit, t = sphere_intersect_dist(
            ray_origin, ray_direction, sphere, self_hit_epsilon[None]
        )
    else:
        plane = Plane(point=shape_positions[index], normal=shape_normals[index])
        did_hit, t = plane_intersect_dist(ray_origin, ray_direction, plane)
    return did_hit, t


@ti.func
def shape_intersect(index: ti.i32, ray_origin: vec3, ray_direction: vec3) -> HitRecord:
    """Full hit record of one shape, dispatched on its kind."""
    rec = make_miss_record()
    if shape_kinds[index] == _SPHERE:
        sphere = Sphere(center=shape_positions[index], radius=shape_radii[index])
        rec = sphere_intersect(ray_origin, ray_direction, sphere, self_hit_epsilon[None])
    else:
        plane = Plane(point=shape_positions[index], normal=shape_normals[index])
        rec = plane_intersect(ray_origin, ray_direction, plane)
    if rec.hit == 1:
        rec.material_id = shape_material_ids[index]
    return rec


# =============================================================================
# Scene Queries
# =============================================================================


@ti.func
def closest_shape(ray_origin: vec3, ray_direction: vec3):
    """Find the nearest shape along a ray.

    Returns:
        Tuple of (shape index, t); index is -1 when nothing is hit.
    """
    closest_index = -1
    closest_t = 0.0
    for i in range(num_shapes[None]):
        did_hit, t = shape_intersect_dist(i, ray_origin, ray_direction)
        if did_hit == 1:
            if closest_index == -1 or t < closest_t:
                closest_index = i
                closest_t = t
    return closest_index, closest_t


@ti.func
def closest_hit(ray_origin: vec3, ray_direction: vec3) -> HitRecord:
    """Hit record of the nearest shape along a ray, or a miss record."""
    rec = make_miss_record()
    index, _ = closest_shape(ray_origin, ray_direction)
    if index >= 0:
        rec = shape_intersect(index, ray_origin, ray_direction)
    return rec


@ti.func
def is_direct_light(point: vec3, light_index: ti.i32) -> ti.i32:
    """Test whether a point sees a light.

    A shape occludes the light if its hit distance along the unit feeler
    direction is strictly less than the distance to the light.

    Returns:
        1 if no shape occludes the light, 0 otherwise.
    """
    direction, distance = light_feeler(light_index, point)
    visible = 1
    for i in range(num_shapes[None]):
        if visible == 1:
            did_hit, t = shape_intersect_dist(i, point, direction)
            if did_hit == 1 and t < distance:
                visible = 0
    return visible
