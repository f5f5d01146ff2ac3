"""Point lights and the shadow-feeler query.

Lights live in a small structure-of-arrays registry. Each light contributes
independently to local shading, so the shading loop simply walks them all.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.scene.lights import Light, add_light
    >>> add_light(Light(position=(0.0, 5.0, 0.0), color=(1.0, 1.0, 1.0)))
    0
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.whitted.core.vector import real, vec3


@dataclass
class Light:
    """A point light.

    Attributes:
        position: World-space position (x, y, z).
        color: Light color (R, G, B).
    """

    position: tuple[float, float, float]
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)

    def translate(self, offset: tuple[float, float, float]) -> None:
        """Move the light by an offset."""
        self.position = (
            self.position[0] + offset[0],
            self.position[1] + offset[1],
            self.position[2] + offset[2],
        )


MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=real, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=real, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights."""
    num_lights[None] = 0


def add_light(light: Light) -> int:
    """Register a light and return its index.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = list(light.position)
    light_colors[idx] = list(light.color)
    num_lights[None] = idx + 1
    return idx


def set_light_position(index: int, position: tuple[float, float, float]) -> None:
    """Overwrite the position of an existing light.

    Raises:
        IndexError: If no light has that index.
    """
    if not 0 <= index < num_lights[None]:
        raise IndexError(f"No light with index {index}")
    light_positions[index] = list(position)


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def light_feeler(light_index: ti.i32, point: vec3):
    """Direction and distance from a surface point to a light.

    Args:
        light_index: Index of the light.
        point: The surface point.

    Returns:
        Tuple of (unit direction toward the light, distance to the light).
    """
    offset = light_positions[light_index] - point
    distance = tm.length(offset)
    return offset / distance, distance
