"""Pytest configuration for raytracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts. All kernels run in
    f64, matching the library's runtime setup.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Reset shapes, materials, lights, camera and trace settings around each test."""
    # Import here so the modules declare their fields after ti.init()
    from src.whitted.camera.pinhole import PinholeCamera, setup_camera
    from src.whitted.core.tracer import DEFAULT_MAX_REFLECTION_DEPTH, set_max_reflection_depth
    from src.whitted.geometry.sphere import DEFAULT_SELF_HIT_EPSILON
    from src.whitted.materials.phong import clear_materials
    from src.whitted.scene.intersection import clear_shapes, set_self_hit_epsilon
    from src.whitted.scene.lights import clear_lights

    def _clear_all():
        clear_shapes()
        clear_materials()
        clear_lights()
        set_self_hit_epsilon(DEFAULT_SELF_HIT_EPSILON)
        set_max_reflection_depth(DEFAULT_MAX_REFLECTION_DEPTH)
        setup_camera(PinholeCamera())

    _clear_all()

    yield

    _clear_all()
