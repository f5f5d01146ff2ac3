"""Phong material parameters and local shading.

A material carries three reflectance colors (ambient, diffuse, specular),
a Phong exponent and a reflectivity that weights the recursively traced
mirror reflection. Materials are immutable once registered.

The local shading for one point light is:
    d = max(0, dot(normalize(Lp - Q), N))
    r = 2 * dot(N, lt) * N - lt            (lt = normalize(Lp - Q))
    s = max(0, dot(r, normalize(V - Q))) ^ shininess
    contribution = Lc * diffuse * d + Lc * specular * s

The ambient term is added once per hit by the trace engine, not per light.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.materials.phong import Material, add_material
    >>> mat_id = add_material(Material(diffuse=(0.8, 0.2, 0.2), reflectivity=0.3))
"""

import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.whitted.core.color import Color
from src.whitted.core.vector import normalize, real, vec3

RGB = tuple[float, float, float]


@dataclass(frozen=True)
class Material:
    """Host-side Phong material description.

    Attributes:
        ambient: Ambient color, added once per hit regardless of lights.
        diffuse: Lambertian reflectance color.
        specular: Specular highlight color.
        shininess: Phong exponent (>= 0).
        reflectivity: Fraction of mirror-reflected light mixed in, in [0, 1].

    Raises:
        ValueError: If any parameter is outside its valid range.
    """

    ambient: RGB = (0.0, 0.0, 0.0)
    diffuse: RGB = (0.0, 0.0, 0.0)
    specular: RGB = (0.0, 0.0, 0.0)
    shininess: float = 0.0
    reflectivity: float = 0.0

    def __post_init__(self) -> None:
        for name in ("ambient", "diffuse", "specular"):
            value = getattr(self, name)
            if isinstance(value, Color):
                value = value.as_tuple()
            if len(value) != 3:
                raise ValueError(f"{name} must have 3 channels, got {len(value)}")
            channels = tuple(float(c) for c in value)
            if any(c < 0.0 or math.isnan(c) for c in channels):
                raise ValueError(f"{name} channels must be non-negative, got {channels}")
            object.__setattr__(self, name, channels)
        if not self.shininess >= 0.0:
            raise ValueError(f"shininess must be >= 0, got {self.shininess}")
        if not 0.0 <= self.reflectivity <= 1.0:
            raise ValueError(f"reflectivity must be in [0, 1], got {self.reflectivity}")

    def to_dict(self) -> dict[str, object]:
        """Serialize using the scene-file key names."""
        return {
            "ambient_color": list(self.ambient),
            "specular_color": list(self.specular),
            "diffuse_color": list(self.diffuse),
            "shininess": self.shininess,
            "reflectivity": self.reflectivity,
        }


# Perfect mirror: no local color, everything comes from the reflection
MIRROR = Material(reflectivity=1.0)


def sphere_material(color: RGB | Color) -> Material:
    """Default material for a colored sphere (shiny, slightly reflective)."""
    return Material(
        ambient=(0.0, 0.0, 0.0),
        diffuse=color,
        specular=(1.0, 1.0, 1.0),
        shininess=15.0,
        reflectivity=0.3,
    )


def plane_material(color: RGB | Color) -> Material:
    """Default material for a colored plane (matte, faintly reflective)."""
    return Material(
        ambient=(0.0, 0.0, 0.0),
        diffuse=color,
        specular=(0.0, 0.0, 0.0),
        shininess=15.0,
        reflectivity=0.1,
    )


# =============================================================================
# Device-side Material Registry
# =============================================================================


@ti.dataclass
class SurfaceMaterial:
    """Device copy of a material, as seen by the shading code."""

    ambient: vec3
    diffuse: vec3
    specular: vec3
    shininess: real
    reflectivity: real


MAX_MATERIALS = 1024

material_ambient = ti.Vector.field(3, dtype=real, shape=MAX_MATERIALS)
material_diffuse = ti.Vector.field(3, dtype=real, shape=MAX_MATERIALS)
material_specular = ti.Vector.field(3, dtype=real, shape=MAX_MATERIALS)
material_shininess = ti.field(dtype=real, shape=MAX_MATERIALS)
material_reflectivity = ti.field(dtype=real, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Forget all registered materials."""
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Register a material and return its ID.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")
    material_ambient[idx] = list(material.ambient)
    material_diffuse[idx] = list(material.diffuse)
    material_specular[idx] = list(material.specular)
    material_shininess[idx] = material.shininess
    material_reflectivity[idx] = material.reflectivity
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of registered materials."""
    return int(num_materials[None])


@ti.func
def load_material(material_id: ti.i32) -> SurfaceMaterial:
    """Fetch a registered material by ID."""
    return SurfaceMaterial(
        ambient=material_ambient[material_id],
        diffuse=material_diffuse[material_id],
        specular=material_specular[material_id],
        shininess=material_shininess[material_id],
        reflectivity=material_reflectivity[material_id],
    )


# =============================================================================
# Phong Shading
# =============================================================================


@ti.func
def phong_light(
    view_point: vec3,
    point: vec3,
    normal: vec3,
    material: SurfaceMaterial,
    light_position: vec3,
    light_color: vec3,
) -> vec3:
    """Diffuse plus specular contribution of one visible point light.

    Args:
        view_point: Where the incoming ray started (the viewer for this hit).
        point: The surface point being shaded.
        normal: The unit surface normal at the point.
        material: The surface material.
        light_position: Position of the light.
        light_color: Color of the light.

    Returns:
        The unclamped diffuse + specular color. Ambient is not included.
    """
    to_light = normalize(light_position - point)
    d = ti.max(0.0, tm.dot(to_light, normal))
    diffuse = light_color * material.diffuse * d

    to_view = normalize(view_point - point)
    r = 2.0 * tm.dot(normal, to_light) * normal - to_light
    s = ti.max(0.0, tm.dot(r, to_view)) ** material.shininess
    specular = light_color * material.specular * s

    return diffuse + specular
