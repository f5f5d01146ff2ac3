"""Image export utilities for rendered frames.

Rendered frames are unclamped float64 RGB arrays of shape (H, W, 3). Export
clamps each channel to [0, 1], scales by 255 and truncates; no tone mapping
or gamma correction is applied.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from src.whitted.preview.export import save_png
    >>> from src.whitted.scene.demo import create_demo_scene
    >>>
    >>> scene = create_demo_scene()
    >>> save_png(scene, "demo.png", 512, 512)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.whitted.core.color import colors_to_u8

if TYPE_CHECKING:
    from src.whitted.scene.manager import Scene

logger = logging.getLogger(__name__)


def frame_to_uint8(frame: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert an unclamped float frame to 8-bit RGB.

    Args:
        frame: Image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3).

    Raises:
        ValueError: If the array is not (H, W, 3).
    """
    if frame.ndim != 3 or frame.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) frame, got shape {frame.shape}")
    return colors_to_u8(frame)


def save_png_from_array(frame: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a float frame as a PNG file.

    Args:
        frame: Unclamped image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(frame_to_uint8(frame), mode="RGB")
    pil_image.save(filepath)
    logger.debug("Saved %dx%d PNG to %s", frame.shape[1], frame.shape[0], filepath)


def save_png(scene: Scene, filepath: str | Path, width: int, height: int) -> None:
    """Render a scene and save the frame as a PNG file.

    Args:
        scene: The scene to render from its current camera pose.
        filepath: Output file path (should end in .png).
        width: Image width in pixels.
        height: Image height in pixels.
    """
    save_png_from_array(scene.render_frame(width, height), filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
