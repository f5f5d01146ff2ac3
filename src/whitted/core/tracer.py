"""Recursive Whitted-style trace engine.

For each ray the engine finds the closest hit, shades it with the Phong
model over every light that passes the shadow test, adds the material's
ambient term once, and follows the mirror reflection:

    trace(o, d, depth) = 0                                   if depth >= max
                       = 0                                   if nothing is hit
                       = ambient + sum(visible lights)       otherwise
                         + reflectivity * trace(hit, refl, depth + 1)

Taichi functions cannot recurse, so the recursion is unrolled into a loop
that carries the product of the reflectivities seen so far. Each level is
still a single closest hit followed by one reflected ray, and the loop runs
at most max_reflection_depth - depth times. Colors are never clamped here;
clamping happens once, at the 8-bit export boundary.

Tracing only reads scene fields, so the scanline and frame kernels below
trace all their pixels in parallel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.core.tracer import render_line, trace_ray
    >>> color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
    >>> line = render_line(64, 64, 32)  # (64, 3) float64 array
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.whitted.camera.pinhole import camera_ray_direction, get_camera_position
from src.whitted.core.color import Color
from src.whitted.core.vector import normalize, real, reflect, vec3
from src.whitted.geometry.sphere import HitRecord
from src.whitted.materials.phong import load_material, phong_light
from src.whitted.scene.intersection import closest_hit, is_direct_light
from src.whitted.scene.lights import light_colors, light_positions, num_lights

logger = logging.getLogger(__name__)

Vec = tuple[float, float, float]

# Default bound on the number of traced levels per primary ray
DEFAULT_MAX_REFLECTION_DEPTH = 4

_max_reflection_depth = ti.field(dtype=ti.i32, shape=())
_max_reflection_depth[None] = DEFAULT_MAX_REFLECTION_DEPTH


def set_max_reflection_depth(depth: int) -> None:
    """Set the number of traced levels per primary ray.

    Raises:
        ValueError: If depth is negative.
    """
    if depth < 0:
        raise ValueError(f"max_reflection_depth must be >= 0, got {depth}")
    _max_reflection_depth[None] = depth


def get_max_reflection_depth() -> int:
    """Get the number of traced levels per primary ray."""
    return int(_max_reflection_depth[None])


# =============================================================================
# Shading and Tracing
# =============================================================================


@ti.func
def shade_local(view_point: vec3, rec: HitRecord) -> vec3:
    """Ambient term plus Phong contributions of all unshadowed lights."""
    material = load_material(rec.material_id)
    color = material.ambient
    for i in range(num_lights[None]):
        if is_direct_light(rec.point, i) == 1:
            color += phong_light(
                view_point,
                rec.point,
                rec.normal,
                material,
                light_positions[i],
                light_colors[i],
            )
    return color


@ti.func
def trace(ray_origin: vec3, ray_direction: vec3, depth: ti.i32) -> vec3:
    """Color seen along a ray starting at the given reflection depth.

    Args:
        ray_origin: The starting point of the ray (also the view point used
            for specular highlights at the first hit).
        ray_direction: The ray direction, normally unit length.
        depth: Reflection depth of this ray; primary rays use 0.

    Returns:
        The unclamped color. Black if depth >= max_reflection_depth or if
        the ray escapes the scene.
    """
    color = vec3(0.0, 0.0, 0.0)
    weight = 1.0
    origin = ray_origin
    direction = ray_direction
    active = 1

    for _level in range(depth, _max_reflection_depth[None]):
        if active == 1:
            rec = closest_hit(origin, direction)
            if rec.hit == 0:
                active = 0
            else:
                color += weight * shade_local(origin, rec)
                incoming = normalize(rec.point - origin)
                direction = reflect(incoming, rec.normal)
                origin = rec.point
                weight *= load_material(rec.material_id).reflectivity

    return color


# =============================================================================
# Kernels
# =============================================================================


_trace_result = ti.Vector.field(3, dtype=real, shape=())


@ti.kernel
def _trace_single(
    ox: real, oy: real, oz: real, dx: real, dy: real, dz: real, depth: ti.i32
):
    # One-iteration outer loop keeps the scans inside trace() serial
    for _ in range(1):
        _trace_result[None] = trace(vec3(ox, oy, oz), vec3(dx, dy, dz), depth)


@ti.kernel
def _render_line(
    h_res: ti.i32,
    v_res: ti.i32,
    line: ti.i32,
    out: ti.types.ndarray(dtype=real, ndim=2),
):
    for x in range(h_res):
        color = trace(get_camera_position(), camera_ray_direction(h_res, v_res, x, line), 0)
        for k in ti.static(range(3)):
            out[x, k] = color[k]


@ti.kernel
def _render_frame(
    h_res: ti.i32,
    v_res: ti.i32,
    out: ti.types.ndarray(dtype=real, ndim=3),
):
    for line, x in ti.ndrange(v_res, h_res):
        color = trace(get_camera_position(), camera_ray_direction(h_res, v_res, x, line), 0)
        for k in ti.static(range(3)):
            out[line, x, k] = color[k]


# =============================================================================
# Public Rendering API
# =============================================================================


def _check_resolution(h_res: int, v_res: int) -> None:
    if h_res <= 0 or v_res <= 0:
        raise ValueError(f"Resolution must be positive, got {h_res}x{v_res}")


def trace_ray(origin: Vec, direction: Vec, depth: int = 0) -> Color:
    """Trace one ray from Python.

    Args:
        origin: Ray origin.
        direction: Ray direction; pass a unit vector for camera-like rays.
        depth: Starting reflection depth.

    Returns:
        The unclamped Color seen along the ray.
    """
    _trace_single(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], depth
    )
    c = _trace_result[None]
    return Color(float(c[0]), float(c[1]), float(c[2]))


def render_line(h_res: int, v_res: int, line: int) -> npt.NDArray[np.float64]:
    """Render one scanline of an h_res x v_res frame.

    Args:
        h_res: Horizontal resolution.
        v_res: Vertical resolution.
        line: Scanline index in [0, v_res), 0 = top.

    Returns:
        Array of shape (h_res, 3) with unclamped colors, left to right.

    Raises:
        ValueError: If the resolution or line index is invalid.
    """
    _check_resolution(h_res, v_res)
    if not 0 <= line < v_res:
        raise ValueError(f"Scanline {line} outside [0, {v_res})")
    out = np.zeros((h_res, 3), dtype=np.float64)
    _render_line(h_res, v_res, line, out)
    return out


def render_frame(h_res: int, v_res: int) -> npt.NDArray[np.float64]:
    """Render a full frame.

    Returns:
        Array of shape (v_res, h_res, 3) with unclamped colors, top row first.

    Raises:
        ValueError: If the resolution is invalid.
    """
    _check_resolution(h_res, v_res)
    out = np.zeros((v_res, h_res, 3), dtype=np.float64)
    _render_frame(h_res, v_res, out)
    logger.debug("Rendered %dx%d frame", h_res, v_res)
    return out
