"""Preview module for output and the interactive driver.

Components:
    export: 8-bit conversion and PNG export via Pillow
    interactive: Taichi GGUI viewer with walk/look controls

Example:
    >>> from src.whitted.preview import save_png
    >>> from src.whitted.scene.demo import create_demo_scene
    >>>
    >>> save_png(create_demo_scene(), "demo.png", 512, 512)
"""

from src.whitted.preview.export import (
    compute_rmse,
    frame_to_uint8,
    save_png,
    save_png_from_array,
)
from src.whitted.preview.interactive import (
    FpsCounter,
    InteractiveViewer,
    ViewerSettings,
    mouse_delta_to_rotation,
)

__all__ = [
    # Interactive viewer
    "InteractiveViewer",
    "ViewerSettings",
    "FpsCounter",
    "mouse_delta_to_rotation",
    # Export functions
    "save_png",
    "save_png_from_array",
    "frame_to_uint8",
    "compute_rmse",
]
