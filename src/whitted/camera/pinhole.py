"""Camera pose, primary-ray generation and camera motion.

The camera is a position plus a forward direction and an up hint. Ray
directions for a frame of h x v pixels are spanned by a fixed +-1 field:

    left   = normalize(cross(dir, up))
    true_up = normalize(cross(left, dir))
    top_left = left + true_up + dir
    h_step = left * (-2 / h),  v_step = true_up * (-2 / v)

Pixel x of scanline l looks along normalize(top_left + l * v_step +
(x + 1) * h_step): the horizontal step is applied before the first pixel
is traced. The field of view is not configurable; only the magnitude of
dir would change it.

Camera motion runs as separate kernels and must only happen between frames.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.camera.pinhole import PinholeCamera, rotate_camera, setup_camera
    >>> setup_camera(PinholeCamera(position=(0, 0, 0), direction=(0, 0, 1), up=(0, 1, 0)))
    >>> rotate_camera(0.1, 0.0)  # yaw by 0.1 rad
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.whitted.core.vector import cross, normalize, real, rot_x, rot_y, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Camera pose.

    Attributes:
        position: Camera position in world space.
        direction: Forward direction (unit length; its magnitude is also the
            step length of move_camera).
        up: Up hint; need not be orthogonal to direction.
    """

    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    direction: tuple[float, float, float] = (0.0, 0.0, 1.0)
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)


_camera_pos = ti.Vector.field(3, dtype=real, shape=())
_camera_dir = ti.Vector.field(3, dtype=real, shape=())
_camera_up = ti.Vector.field(3, dtype=real, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Load a camera pose into the device fields."""
    _camera_pos[None] = list(camera.position)
    _camera_dir[None] = list(camera.direction)
    _camera_up[None] = list(camera.up)


def get_camera() -> PinholeCamera:
    """Read the current camera pose back from the device fields."""
    pos = _camera_pos[None]
    direction = _camera_dir[None]
    up = _camera_up[None]
    return PinholeCamera(
        position=(float(pos[0]), float(pos[1]), float(pos[2])),
        direction=(float(direction[0]), float(direction[1]), float(direction[2])),
        up=(float(up[0]), float(up[1]), float(up[2])),
    )


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_camera_position() -> vec3:
    """Get the camera position in world space."""
    return _camera_pos[None]


@ti.func
def camera_ray_direction(h_res: ti.i32, v_res: ti.i32, x: ti.i32, line: ti.i32) -> vec3:
    """Unit ray direction for pixel x of scanline line.

    Args:
        h_res: Horizontal resolution.
        v_res: Vertical resolution.
        x: Pixel column, 0 = left.
        line: Scanline, 0 = top.

    Returns:
        The normalized ray direction.
    """
    forward = _camera_dir[None]
    left = normalize(cross(forward, _camera_up[None]))
    true_up = normalize(cross(left, forward))
    top_left = left + true_up + forward
    h_step = left * (-2.0 / ti.cast(h_res, real))
    v_step = true_up * (-2.0 / ti.cast(v_res, real))
    point = top_left + v_step * ti.cast(line, real) + h_step * ti.cast(x + 1, real)
    return normalize(point)


# =============================================================================
# Camera Motion
# =============================================================================


@ti.kernel
def move_camera(sign: real):
    """Move the camera by sign * direction (sign is +1 forward, -1 back)."""
    _camera_pos[None] = _camera_pos[None] + sign * _camera_dir[None]


@ti.kernel
def rotate_camera(x_rot: real, y_rot: real):
    """Yaw by x_rot, then pitch by y_rot about the camera's own side axis.

    The direction is yawed about Y, swung back onto the YZ plane by its
    current heading, pitched about X, swung back, and re-normalized. Pitch
    is not limited.
    """
    d = rot_y(_camera_dir[None], x_rot)

    heading = 0.0
    flat = vec3(d.x, 0.0, d.z)
    flat_length = tm.length(flat)
    if flat_length > 1e-12:
        flat = flat / flat_length
        heading = ti.acos(ti.min(1.0, ti.max(-1.0, flat.z)))
        if flat.x < 0.0:
            heading = -heading

    d = rot_y(d, -heading)
    d = rot_x(d, y_rot)
    d = rot_y(d, heading)
    _camera_dir[None] = normalize(d)
