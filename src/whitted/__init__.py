"""Whitted-style recursive ray tracer built on Taichi.

This package renders scenes of spheres, planes and point lights with
Phong local shading, hard shadows and recursive mirror reflection:
- Closed set of shape primitives (sphere, plane) with a tagged dispatch
- Per-light shadow feelers against every shape
- Depth-bounded mirror reflection
- Scanline and full-frame rendering kernels

Subpackages:
    core: Vector utilities, colors and the trace engine
    geometry: Sphere and plane intersection routines
    materials: Phong material parameters and shading
    scene: Shape/light registries, the Scene facade and scene files
    camera: Camera pose, ray generation and camera motion
    preview: PNG export and the interactive viewer

The device side runs in double precision, so Taichi must be initialized with
``default_fp=ti.f64`` before any submodule is imported. Use init_runtime().
"""

import taichi as ti

__version__ = "0.1.0"


def init_runtime(arch=None, **kwargs) -> None:
    """Initialize Taichi for the tracer.

    Args:
        arch: Taichi backend (default: ti.cpu).
        **kwargs: Extra keyword arguments forwarded to ti.init().
    """
    ti.init(arch=arch if arch is not None else ti.cpu, default_fp=ti.f64, **kwargs)
