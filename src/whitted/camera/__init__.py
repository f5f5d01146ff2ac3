"""Camera module for view and ray generation.

Components:
    pinhole: Position/direction/up camera with per-pixel primary rays and
        the walk and yaw/pitch motion kernels

The image plane sits one unit in front of the camera and spans 90 degrees
in each direction, whatever the aspect ratio.
"""

from .pinhole import (
    PinholeCamera,
    camera_ray_direction,
    get_camera,
    get_camera_position,
    move_camera,
    rotate_camera,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_camera",
    "get_camera_position",
    "camera_ray_direction",
    "move_camera",
    "rotate_camera",
]
