"""Core rendering module.

Components:
    vector: f64 vector helpers and rotations used by every device function
    color: Host-side RGB color with saturating addition and 8-bit export
    tracer: Whitted trace loop and scanline/frame render kernels

All compute-intensive operations use Taichi kernels.
"""

from .color import (
    BLACK,
    BLUE,
    GREEN,
    RED,
    WHITE,
    Color,
    colors_to_u8,
    to_u8_triple,
)
from .vector import (
    cross,
    dot,
    length,
    length_squared,
    normalize,
    real,
    reflect,
    rot_x,
    rot_y,
    rot_z,
    vec3,
)

# Note: tracer is NOT imported here to avoid circular imports.
# Import directly from src.whitted.core.tracer when needed.

__all__ = [
    "real",
    "vec3",
    "dot",
    "cross",
    "length",
    "length_squared",
    "normalize",
    "reflect",
    "rot_x",
    "rot_y",
    "rot_z",
    "Color",
    "RED",
    "GREEN",
    "BLUE",
    "WHITE",
    "BLACK",
    "to_u8_triple",
    "colors_to_u8",
]
