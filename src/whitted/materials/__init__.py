"""Materials module for the Phong surface model.

Components:
    phong: Material description, presets, the device material registry and
        the single-light Phong term
"""

from .phong import (
    MAX_MATERIALS,
    MIRROR,
    Material,
    SurfaceMaterial,
    add_material,
    clear_materials,
    get_material_count,
    load_material,
    phong_light,
    plane_material,
    sphere_material,
)

__all__ = [
    "Material",
    "MIRROR",
    "sphere_material",
    "plane_material",
    "SurfaceMaterial",
    "MAX_MATERIALS",
    "add_material",
    "clear_materials",
    "get_material_count",
    "load_material",
    "phong_light",
]
