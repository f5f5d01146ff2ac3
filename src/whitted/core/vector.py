"""Double-precision vector type and vector utilities.

All helpers are Taichi functions so they can be used from any kernel. They
are pure: no field access, no side effects.

Directions passed to the intersection routines are expected to be unit
length only where noted; none of these helpers enforce normalization.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.core.vector import vec3, rot_y
    >>> # Within a kernel: d = rot_y(vec3(0.0, 0.0, 1.0), 0.5)
"""

import taichi as ti
import taichi.math as tm

# Scalar and vector types used across the device side
real = ti.f64
vec3 = ti.types.vector(3, real)


@ti.func
def dot(a: vec3, b: vec3) -> real:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def length(v: vec3) -> real:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> real:
    """Compute the squared length of a vector."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    A zero-length input is a caller error; the result is then NaN.
    """
    return v / tm.length(v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident direction about a unit normal.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The unit surface normal.

    Returns:
        incident - 2 * dot(incident, normal) * normal
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


# =============================================================================
# Axis Rotations (right-handed, angle in radians)
# =============================================================================


@ti.func
def rot_x(v: vec3, angle: real) -> vec3:
    """Rotate a vector about the X axis."""
    c = ti.cos(angle)
    s = ti.sin(angle)
    return vec3(v.x, v.y * c - v.z * s, v.y * s + v.z * c)


@ti.func
def rot_y(v: vec3, angle: real) -> vec3:
    """Rotate a vector about the Y axis."""
    c = ti.cos(angle)
    s = ti.sin(angle)
    return vec3(v.x * c + v.z * s, v.y, -v.x * s + v.z * c)


@ti.func
def rot_z(v: vec3, angle: real) -> vec3:
    """Rotate a vector about the Z axis."""
    c = ti.cos(angle)
    s = ti.sin(angle)
    return vec3(v.x * c - v.y * s, v.x * s + v.y * c, v.z)
