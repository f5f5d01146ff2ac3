"""Demo scene: a mirror sphere between colored spheres over a reflective floor.

Layout (camera at the origin looking down +Z):
- Mirror sphere in the middle, red sphere left, blue sphere right
- A small green sphere in front
- Grey floor plane at y = -5, back wall at z = 40
- Two white-ish point lights above and behind the camera

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.scene.demo import create_demo_scene
    >>> scene = create_demo_scene()
    >>> frame = scene.render_frame(256, 256)
"""

import math
from dataclasses import dataclass

from src.whitted.materials.phong import MIRROR, plane_material, sphere_material
from src.whitted.scene.manager import Scene


@dataclass
class DemoSceneParams:
    """Parameters for the demo scene.

    Attributes:
        max_reflection_depth: Traced levels per primary ray.
        light_color: Color of both lights.
        orbit_light: If True, step() moves the first light on a circle.
        orbit_radius: Radius of the light orbit.
        orbit_steps: Frames per full orbit.
    """

    max_reflection_depth: int = 4
    light_color: tuple[float, float, float] = (0.8, 0.8, 0.8)
    orbit_light: bool = False
    orbit_radius: float = 8.0
    orbit_steps: int = 120


def _orbit_offset(radius: float, steps: int, frame: int) -> tuple[float, float, float]:
    a0 = 2.0 * math.pi * frame / steps
    a1 = 2.0 * math.pi * (frame + 1) / steps
    return (
        radius * (math.cos(a1) - math.cos(a0)),
        0.0,
        radius * (math.sin(a1) - math.sin(a0)),
    )


def create_demo_scene(params: DemoSceneParams | None = None) -> Scene:
    """Build the demo scene.

    Args:
        params: Scene parameters; defaults are used when None.

    Returns:
        A populated Scene.
    """
    if params is None:
        params = DemoSceneParams()

    scene = Scene(
        camera_pos=(0.0, 0.0, 0.0),
        camera_dir=(0.0, 0.0, 1.0),
        camera_up=(0.0, 1.0, 0.0),
        max_reflection_depth=params.max_reflection_depth,
    )

    scene.add_sphere((0.0, 0.0, 20.0), 5.0, MIRROR)
    scene.add_sphere((-11.0, 0.0, 22.0), 4.0, sphere_material((1.0, 0.1, 0.1)))
    scene.add_sphere((11.0, 0.0, 22.0), 4.0, sphere_material((0.1, 0.2, 1.0)))
    scene.add_sphere((3.0, -3.0, 12.0), 2.0, sphere_material((0.1, 0.9, 0.2)))

    scene.add_plane((0.0, -5.0, 0.0), (0.0, 1.0, 0.0), plane_material((0.6, 0.6, 0.6)))
    scene.add_plane((0.0, 0.0, 40.0), (0.0, 0.0, -1.0), plane_material((0.3, 0.3, 0.4)))

    scene.add_light((0.0, 15.0, 5.0), params.light_color)
    scene.add_light((-15.0, 10.0, -5.0), params.light_color)

    if params.orbit_light:
        frame = 0

        def orbit(s: Scene) -> None:
            nonlocal frame
            s.translate_light(0, _orbit_offset(params.orbit_radius, params.orbit_steps, frame))
            frame = (frame + 1) % params.orbit_steps

        scene.set_animation(orbit)

    return scene
