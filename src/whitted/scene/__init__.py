"""Scene module: shape table and lights.

Components:
    lights: Point light description and the device light registry
    intersection: Ordered shape table with closest-hit and shadow queries

The trace engine reads these registries directly, so this package only
exports them. The host-side modules built on top of the tracer are imported
from their own modules:
    manager: Scene facade coordinating shapes, materials, lights and camera
    loader: JSON scene files
    demo: Demo scene used by the examples

Scene data is organized for parallel access:
    - Structure-of-Arrays layout for geometric data
    - Materials referenced by ID from the shape table
    - One active scene per Taichi runtime
"""

from .intersection import (
    MAX_SHAPES,
    ShapeKind,
    add_plane,
    add_sphere,
    clear_shapes,
    closest_hit,
    closest_shape,
    get_self_hit_epsilon,
    get_shape_count,
    is_direct_light,
    set_self_hit_epsilon,
    shape_intersect,
    shape_intersect_dist,
)
from .lights import (
    MAX_LIGHTS,
    Light,
    add_light,
    clear_lights,
    get_light_count,
    light_feeler,
    set_light_position,
)

__all__ = [
    # Lights
    "Light",
    "MAX_LIGHTS",
    "add_light",
    "clear_lights",
    "get_light_count",
    "set_light_position",
    "light_feeler",
    # Shape table
    "ShapeKind",
    "MAX_SHAPES",
    "add_sphere",
    "add_plane",
    "clear_shapes",
    "get_shape_count",
    "set_self_hit_epsilon",
    "get_self_hit_epsilon",
    "shape_intersect_dist",
    "shape_intersect",
    "closest_shape",
    "closest_hit",
    "is_direct_light",
]
