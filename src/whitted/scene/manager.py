"""Scene facade coordinating shapes, materials, lights and the camera.

The Scene owns the device registries (shape table, material registry, light
registry, camera fields and trace settings) and offers the host-side API a
driver needs:

- population: add_sphere / add_plane / add_light
- geometric queries: intersect_dist, intersect, closest_hit, is_direct_light
- tracing: trace, render_line, render_frame and the scanline iterators
- camera motion between frames: move_forward, move_back, rotate
- a per-frame step() hook for animation

Registries are module-level Taichi fields, so there is one active scene per
Taichi runtime; constructing a Scene clears whatever was there before and
retires the previous Scene object, which then raises RuntimeError when used.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.scene.manager import Scene
    >>> from src.whitted.materials.phong import Material
    >>> scene = Scene(camera_pos=(0, 0, 0), camera_dir=(0, 0, 1), camera_up=(0, 1, 0))
    >>> scene.add_sphere((0, 0, 10), 5, Material(diffuse=(1, 1, 1)))
    0
    >>> scene.add_light((0, 5, 0), (1, 1, 1))
    0
    >>> frame = scene.render_frame(64, 64)
"""

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.whitted.camera.pinhole import (
    PinholeCamera,
    get_camera,
    move_camera,
    rotate_camera,
    setup_camera,
)
from src.whitted.core.color import Color, colors_to_u8
from src.whitted.core.tracer import (
    DEFAULT_MAX_REFLECTION_DEPTH,
    get_max_reflection_depth,
    render_frame,
    render_line,
    set_max_reflection_depth,
    trace_ray,
)
from src.whitted.core.vector import real, vec3
from src.whitted.geometry.sphere import DEFAULT_SELF_HIT_EPSILON
from src.whitted.materials.phong import (
    Material,
    add_material,
    clear_materials,
)
from src.whitted.scene import intersection
from src.whitted.scene.intersection import (
    ShapeKind,
    clear_shapes,
    closest_shape,
    set_self_hit_epsilon,
    shape_intersect,
    shape_intersect_dist,
)
from src.whitted.scene.lights import (
    Light,
    add_light,
    clear_lights,
    set_light_position,
)

logger = logging.getLogger(__name__)

# Incremented by every Scene(); only the newest Scene may touch the registries
_active_scene_id = 0

Vec = tuple[float, float, float]


def _as_vec(values: Any) -> Vec:
    return (float(values[0]), float(values[1]), float(values[2]))


@dataclass(frozen=True)
class Intersection:
    """Host-side copy of a hit record.

    Attributes:
        t: Distance along the ray, in units of the ray direction's length.
        point: The hit point.
        normal: The unit shading normal.
        material: Copy of the hit surface's material.
        shape_index: Index of the hit shape.
    """

    t: float
    point: Vec
    normal: Vec
    material: Material
    shape_index: int


@dataclass
class SphereInfo:
    """A sphere in the scene."""

    shape_index: int
    center: Vec
    radius: float
    material: Material

    kind = ShapeKind.SPHERE


@dataclass
class PlaneInfo:
    """A plane in the scene. The normal is stored normalized."""

    shape_index: int
    point: Vec
    normal: Vec
    material: Material

    kind = ShapeKind.PLANE


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        shapes: Tagged shape entries, e.g. {"Sphere": {...}} or {"Plane": {...}}.
        lights: Light entries with "pos" and "color".
        camera_pos: Camera position.
        camera_dir: Camera forward direction.
        camera_up: Camera up hint.
        max_reflection: Maximum reflection depth.
    """

    shapes: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    camera_pos: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    camera_dir: list[float] = field(default_factory=lambda: [0.0, 0.0, 1.0])
    camera_up: list[float] = field(default_factory=lambda: [0.0, 1.0, 0.0])
    max_reflection: int = DEFAULT_MAX_REFLECTION_DEPTH


# Scratch fields for single host-side queries
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_index = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=real, shape=())
_query_point = ti.Vector.field(3, dtype=real, shape=())
_query_normal = ti.Vector.field(3, dtype=real, shape=())


@ti.kernel
def _intersect_dist_kernel(
    index: ti.i32, ox: real, oy: real, oz: real, dx: real, dy: real, dz: real
):
    did_hit, t = shape_intersect_dist(index, vec3(ox, oy, oz), vec3(dx, dy, dz))
    _query_hit[None] = did_hit
    _query_t[None] = t


@ti.kernel
def _intersect_kernel(index: ti.i32, ox: real, oy: real, oz: real, dx: real, dy: real, dz: real):
    rec = shape_intersect(index, vec3(ox, oy, oz), vec3(dx, dy, dz))
    _query_hit[None] = rec.hit
    _query_index[None] = index
    _query_t[None] = rec.t
    _query_point[None] = rec.point
    _query_normal[None] = rec.normal


@ti.kernel
def _closest_hit_kernel(ox: real, oy: real, oz: real, dx: real, dy: real, dz: real):
    # One-iteration outer loop keeps the shape scan serial
    for _ in range(1):
        origin = vec3(ox, oy, oz)
        direction = vec3(dx, dy, dz)
        index, _t = closest_shape(origin, direction)
        _query_hit[None] = 0
        _query_index[None] = index
        if index >= 0:
            rec = shape_intersect(index, origin, direction)
            _query_hit[None] = rec.hit
            _query_t[None] = rec.t
            _query_point[None] = rec.point
            _query_normal[None] = rec.normal


@ti.kernel
def _is_direct_light_kernel(light_index: ti.i32, px: real, py: real, pz: real):
    for _ in range(1):
        _query_hit[None] = intersection.is_direct_light(vec3(px, py, pz), light_index)


class Scene:
    """A renderable scene: ordered shapes, point lights and a camera.

    Attributes:
        shapes: SphereInfo/PlaneInfo records in insertion order; the list
            index equals the device shape index.
        lights: Light records; the list index equals the device light index.

    Only the most recently constructed Scene is active. Creating another one
    clears the device registries, after which any method of the older Scene
    that reads or writes device state raises RuntimeError.
    """

    def __init__(
        self,
        camera_pos: Vec = (0.0, 0.0, 0.0),
        camera_dir: Vec = (0.0, 0.0, 1.0),
        camera_up: Vec = (0.0, 1.0, 0.0),
        *,
        max_reflection_depth: int = DEFAULT_MAX_REFLECTION_DEPTH,
        self_hit_epsilon: float = DEFAULT_SELF_HIT_EPSILON,
    ) -> None:
        """Create an empty scene with the given camera pose.

        Args:
            camera_pos: Camera position.
            camera_dir: Camera forward direction (unit length).
            camera_up: Camera up hint.
            max_reflection_depth: Traced levels per primary ray.
            self_hit_epsilon: Minimum admissible sphere hit distance.
        """
        global _active_scene_id
        _active_scene_id += 1
        self._scene_id = _active_scene_id
        self.shapes: list[SphereInfo | PlaneInfo] = []
        self.lights: list[Light] = []
        self._animation: Callable[[Scene], None] | None = None
        self.clear()
        setup_camera(
            PinholeCamera(
                position=_as_vec(camera_pos),
                direction=_as_vec(camera_dir),
                up=_as_vec(camera_up),
            )
        )
        set_max_reflection_depth(max_reflection_depth)
        set_self_hit_epsilon(self_hit_epsilon)

    @property
    def is_active(self) -> bool:
        """Whether this Scene still owns the device registries."""
        return self._scene_id == _active_scene_id

    def _check_active(self) -> None:
        if not self.is_active:
            raise RuntimeError(
                "Scene is no longer active: a newer Scene has replaced its device state"
            )

    def clear(self) -> None:
        """Remove all shapes, materials and lights. The camera is kept."""
        self._check_active()
        clear_shapes()
        clear_materials()
        clear_lights()
        self.shapes.clear()
        self.lights.clear()

    # =========================================================================
    # Population
    # =========================================================================

    def add_material(self, material: Material) -> int:
        """Register a material and return its ID."""
        self._check_active()
        return add_material(material)

    def _check_shape_capacity(self) -> None:
        self._check_active()
        if intersection.get_shape_count() >= intersection.MAX_SHAPES:
            raise RuntimeError(
                f"Maximum number of shapes ({intersection.MAX_SHAPES}) exceeded"
            )

    def add_sphere(self, center: Vec, radius: float, material: Material) -> int:
        """Append a sphere with its own copy of a material.

        Returns:
            The shape index.

        Raises:
            ValueError: If the radius is not positive.
            RuntimeError: If a registry is full.
        """
        if not radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        center = _as_vec(center)
        self._check_shape_capacity()
        material_id = self.add_material(material)
        index = intersection.add_sphere(center, float(radius), material_id)
        self.shapes.append(SphereInfo(index, center, float(radius), material))
        logger.debug("Added sphere %d at %s, r=%s", index, center, radius)
        return index

    def add_plane(self, point: Vec, normal: Vec, material: Material) -> int:
        """Append a plane with its own copy of a material.

        Returns:
            The shape index.

        Raises:
            ValueError: If the normal has zero length.
            RuntimeError: If a registry is full.
        """
        point = _as_vec(point)
        normal = _as_vec(normal)
        norm = float(np.linalg.norm(normal))
        if not norm > 0.0:
            raise ValueError(f"Plane normal must be non-zero, got {normal}")
        self._check_shape_capacity()
        material_id = self.add_material(material)
        index = intersection.add_plane(point, normal, material_id)
        unit = (normal[0] / norm, normal[1] / norm, normal[2] / norm)
        self.shapes.append(PlaneInfo(index, point, unit, material))
        logger.debug("Added plane %d through %s, n=%s", index, point, unit)
        return index

    def add_light(self, position: Vec | Light, color: Vec = (1.0, 1.0, 1.0)) -> int:
        """Append a point light.

        Args:
            position: Light position, or a ready-made Light.
            color: Light color, ignored when a Light is passed.

        Returns:
            The light index.
        """
        self._check_active()
        if isinstance(position, Light):
            light = Light(position=_as_vec(position.position), color=_as_vec(position.color))
        else:
            light = Light(position=_as_vec(position), color=_as_vec(color))
        index = add_light(light)
        self.lights.append(light)
        return index

    def translate_light(self, index: int, offset: Vec) -> None:
        """Move a light by an offset.

        Raises:
            IndexError: If no light has that index.
        """
        self._check_active()
        if not 0 <= index < len(self.lights):
            raise IndexError(f"No light with index {index}")
        light = self.lights[index]
        light.translate(_as_vec(offset))
        set_light_position(index, light.position)

    @property
    def shape_count(self) -> int:
        """Number of shapes in the scene."""
        return len(self.shapes)

    @property
    def light_count(self) -> int:
        """Number of lights in the scene."""
        return len(self.lights)

    # =========================================================================
    # Settings and Camera
    # =========================================================================

    @property
    def max_reflection_depth(self) -> int:
        """Traced levels per primary ray."""
        self._check_active()
        return get_max_reflection_depth()

    @max_reflection_depth.setter
    def max_reflection_depth(self, depth: int) -> None:
        self._check_active()
        set_max_reflection_depth(depth)

    @property
    def self_hit_epsilon(self) -> float:
        """Minimum admissible sphere hit distance."""
        self._check_active()
        return intersection.get_self_hit_epsilon()

    @self_hit_epsilon.setter
    def self_hit_epsilon(self, value: float) -> None:
        self._check_active()
        set_self_hit_epsilon(value)

    @property
    def camera_pos(self) -> Vec:
        """Camera position."""
        self._check_active()
        return get_camera().position

    @property
    def camera_dir(self) -> Vec:
        """Camera forward direction."""
        self._check_active()
        return get_camera().direction

    @property
    def camera_up(self) -> Vec:
        """Camera up hint."""
        self._check_active()
        return get_camera().up

    def move_forward(self) -> None:
        """Move the camera one direction-length forward."""
        self._check_active()
        move_camera(1.0)

    def move_back(self) -> None:
        """Move the camera one direction-length back."""
        self._check_active()
        move_camera(-1.0)

    def rotate(self, x_rot: float, y_rot: float) -> None:
        """Yaw by x_rot and pitch by y_rot (radians)."""
        self._check_active()
        rotate_camera(x_rot, y_rot)

    def set_animation(self, animation: "Callable[[Scene], None] | None") -> None:
        """Register the callback run by step(), or None for no animation."""
        self._animation = animation

    def step(self) -> None:
        """Advance scene animation by one frame (no-op without a callback)."""
        self._check_active()
        if self._animation is not None:
            self._animation(self)

    # =========================================================================
    # Queries
    # =========================================================================

    def _material_of(self, shape_index: int) -> Material:
        return self.shapes[shape_index].material

    def _check_shape_index(self, shape_index: int) -> None:
        if not 0 <= shape_index < len(self.shapes):
            raise IndexError(f"No shape with index {shape_index}")

    def intersect_dist(self, shape_index: int, origin: Vec, direction: Vec) -> float | None:
        """Hit distance of one shape along a ray, or None."""
        self._check_active()
        self._check_shape_index(shape_index)
        _intersect_dist_kernel(shape_index, *_as_vec(origin), *_as_vec(direction))
        if _query_hit[None] == 0:
            return None
        return float(_query_t[None])

    def _read_intersection(self) -> Intersection:
        index = int(_query_index[None])
        return Intersection(
            t=float(_query_t[None]),
            point=_as_vec(_query_point[None]),
            normal=_as_vec(_query_normal[None]),
            material=self._material_of(index),
            shape_index=index,
        )

    def intersect(self, shape_index: int, origin: Vec, direction: Vec) -> Intersection | None:
        """Full hit record of one shape along a ray, or None."""
        self._check_active()
        self._check_shape_index(shape_index)
        _intersect_kernel(shape_index, *_as_vec(origin), *_as_vec(direction))
        if _query_hit[None] == 0:
            return None
        return self._read_intersection()

    def closest_hit(self, origin: Vec, direction: Vec) -> Intersection | None:
        """Nearest hit over all shapes, or None if the ray escapes."""
        self._check_active()
        _closest_hit_kernel(*_as_vec(origin), *_as_vec(direction))
        if _query_hit[None] == 0:
            return None
        return self._read_intersection()

    def is_direct_light(self, point: Vec, light_index: int) -> bool:
        """Whether a point sees a light with no shape in between."""
        self._check_active()
        if not 0 <= light_index < len(self.lights):
            raise IndexError(f"No light with index {light_index}")
        _is_direct_light_kernel(light_index, *_as_vec(point))
        return _query_hit[None] == 1

    def trace(self, origin: Vec, direction: Vec, depth: int = 0) -> Color:
        """Unclamped color seen along a ray."""
        self._check_active()
        return trace_ray(_as_vec(origin), _as_vec(direction), depth)

    # =========================================================================
    # Rendering
    # =========================================================================

    def render_line(self, h_res: int, v_res: int, line: int) -> npt.NDArray[np.float64]:
        """Unclamped colors of one scanline, shape (h_res, 3)."""
        self._check_active()
        return render_line(h_res, v_res, line)

    def render_frame(self, h_res: int, v_res: int) -> npt.NDArray[np.float64]:
        """Unclamped colors of a full frame, shape (v_res, h_res, 3)."""
        self._check_active()
        return render_frame(h_res, v_res)

    def line_iter(self, h_res: int, v_res: int, line: int) -> Iterator[Color]:
        """Colors of one scanline, left to right."""
        for rgb in self.render_line(h_res, v_res, line):
            yield Color(float(rgb[0]), float(rgb[1]), float(rgb[2]))

    def line_iter_u8(self, h_res: int, v_res: int, line: int) -> Iterator[tuple[int, int, int]]:
        """line_iter converted to 8-bit triples."""
        for rgb in colors_to_u8(self.render_line(h_res, v_res, line)):
            yield (int(rgb[0]), int(rgb[1]), int(rgb[2]))

    def draw_iter(self, h_res: int, v_res: int) -> Iterator[Color]:
        """Colors of a full frame in row-major order, one scanline at a time."""
        for line in range(v_res):
            yield from self.line_iter(h_res, v_res, line)

    def draw_iter_u8(self, h_res: int, v_res: int) -> Iterator[tuple[int, int, int]]:
        """draw_iter converted to 8-bit triples."""
        for line in range(v_res):
            yield from self.line_iter_u8(h_res, v_res, line)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        self._check_active()
        config = SceneConfig(
            camera_pos=list(self.camera_pos),
            camera_dir=list(self.camera_dir),
            camera_up=list(self.camera_up),
            max_reflection=self.max_reflection_depth,
        )
        for shape in self.shapes:
            if isinstance(shape, SphereInfo):
                entry = {
                    "Sphere": {
                        "center": list(shape.center),
                        "radius": shape.radius,
                        "material": shape.material.to_dict(),
                    }
                }
            else:
                entry = {
                    "Plane": {
                        "point": list(shape.point),
                        "normal": list(shape.normal),
                        "material": shape.material.to_dict(),
                    }
                }
            config.shapes.append(entry)
        for light in self.lights:
            config.lights.append({"pos": list(light.position), "color": list(light.color)})
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Replace the scene contents with a configuration.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()
        setup_camera(
            PinholeCamera(
                position=_as_vec(config.camera_pos),
                direction=_as_vec(config.camera_dir),
                up=_as_vec(config.camera_up),
            )
        )
        self.max_reflection_depth = int(config.max_reflection)

        for entry in config.shapes:
            if len(entry) != 1:
                raise ValueError(f"Shape entry must have exactly one tag, got {list(entry)}")
            (tag, params), = entry.items()
            material = _material_from_dict(params.get("material", {}))
            if tag == "Sphere":
                self.add_sphere(_as_vec(params["center"]), float(params["radius"]), material)
            elif tag == "Plane":
                self.add_plane(_as_vec(params["point"]), _as_vec(params["normal"]), material)
            else:
                raise ValueError(f"Unknown shape type: {tag}")

        for light_config in config.lights:
            self.add_light(
                _as_vec(light_config["pos"]),
                _as_vec(light_config.get("color", (1.0, 1.0, 1.0))),
            )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "shapes": config.shapes,
            "lights": config.lights,
            "camera_pos": config.camera_pos,
            "camera_dir": config.camera_dir,
            "camera_up": config.camera_up,
            "max_reflection": config.max_reflection,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary produced by to_dict()."""
        defaults = SceneConfig()
        config = SceneConfig(
            shapes=data.get("shapes", []),
            lights=data.get("lights", []),
            camera_pos=data.get("camera_pos", defaults.camera_pos),
            camera_dir=data.get("camera_dir", defaults.camera_dir),
            camera_up=data.get("camera_up", defaults.camera_up),
            max_reflection=data.get("max_reflection", defaults.max_reflection),
        )
        self.from_config(config)


def _material_from_dict(data: dict[str, Any]) -> Material:
    return Material(
        ambient=_as_vec(data.get("ambient_color", (0.0, 0.0, 0.0))),
        diffuse=_as_vec(data.get("diffuse_color", (0.0, 0.0, 0.0))),
        specular=_as_vec(data.get("specular_color", (0.0, 0.0, 0.0))),
        shininess=float(data.get("shininess", 0.0)),
        reflectivity=float(data.get("reflectivity", 0.0)),
    )
