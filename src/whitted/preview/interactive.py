"""Interactive viewer using Taichi GGUI.

Each frame the viewer:
    1. applies input: W/S walk the camera forward/back, dragging with the
       left mouse button yaws/pitches it (0.010 rad per pixel of motion)
    2. advances the scene animation with scene.step()
    3. renders a full frame
    4. converts it to 8-bit and shows it

Escape or closing the window quits; P saves the current frame as a
timestamped PNG.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.preview.interactive import InteractiveViewer
    >>> from src.whitted.scene.demo import create_demo_scene
    >>>
    >>> viewer = InteractiveViewer(create_demo_scene())
    >>> viewer.run()
"""

from __future__ import annotations

import os
import sys
import time
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from src.whitted.preview.export import frame_to_uint8, save_png_from_array

if TYPE_CHECKING:
    import numpy.typing as npt

    from src.whitted.scene.manager import Scene


@dataclass
class ViewerSettings:
    """Configuration for the interactive viewer.

    Attributes:
        resolution: Width and height of the (square) render in pixels.
        title: Window title.
        rotation_speed: Radians of camera rotation per pixel of mouse motion.
        fps_interval: Frames between FPS reports; 0 disables them.
        vsync: Whether the window waits for vertical sync.
    """

    resolution: int = 512
    title: str = "Whitted Raytracer"
    rotation_speed: float = 0.010
    fps_interval: int = 10
    vsync: bool = False


class FpsCounter:
    """Reports the average frame rate every `interval` frames."""

    def __init__(self, interval: int) -> None:
        self.interval = interval
        self._count = 0
        self._start = time.perf_counter()

    def update(self) -> float | None:
        """Count a frame; return the average FPS when a report is due."""
        fps = None
        if self.interval > 0 and self._count >= self.interval:
            elapsed = time.perf_counter() - self._start
            fps = self._count / elapsed if elapsed > 0.0 else float("inf")
            self._start = time.perf_counter()
            self._count = 0
        self._count += 1
        return fps


def mouse_delta_to_rotation(
    previous: tuple[float, float],
    current: tuple[float, float],
    width: int,
    height: int,
    speed: float,
) -> tuple[float, float]:
    """Convert two normalized GGUI cursor positions to (x_rot, y_rot).

    GGUI cursor coordinates are in [0, 1] with y pointing up; the rotation
    uses screen pixels with y pointing down.
    """
    dx = (current[0] - previous[0]) * width
    dy = -(current[1] - previous[1]) * height
    return dx * speed, dy * speed


class InteractiveViewer:
    """Interactive window driving a Scene frame by frame.

    Attributes:
        scene: The scene being viewed.
        settings: Viewer configuration.
        display_image: Taichi field holding the frame shown on the canvas.
    """

    def __init__(self, scene: Scene, settings: ViewerSettings | None = None) -> None:
        """Initialize the viewer.

        The window is created lazily on first use so construction works
        headless.
        """
        self.scene = scene
        self.settings = settings if settings is not None else ViewerSettings()
        self.width = self.settings.resolution
        self.height = self.settings.resolution
        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None
        self._last_cursor: tuple[float, float] | None = None
        self._last_frame: npt.NDArray[np.float64] | None = None
        self._fps = FpsCounter(self.settings.fps_interval)
        self.frame_count = 0

        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(self.width, self.height)
        )

    def _initialize_window(self) -> None:
        if self._window is not None:
            return
        self._window = ti.ui.Window(
            name=self.settings.title,
            res=(self.width, self.height),
            vsync=self.settings.vsync,
        )
        self._canvas = self._window.get_canvas()

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        self._initialize_window()
        assert self._window is not None
        return self._window

    def update_image(self, frame: npt.NDArray[np.floating]) -> None:
        """Load a rendered (H, W, 3) frame into the display field.

        Raises:
            ValueError: If the frame shape doesn't match the window.
        """
        expected_shape = (self.height, self.width, 3)
        if frame.shape != expected_shape:
            raise ValueError(
                f"Frame shape {frame.shape} doesn't match expected {expected_shape}"
            )
        image = frame_to_uint8(frame).astype(np.float32) / 255.0
        # Taichi fields are (x, y) with the origin at the bottom-left
        image_transposed = np.ascontiguousarray(np.transpose(np.flipud(image), (1, 0, 2)))
        self.display_image.from_numpy(image_transposed)

    def handle_input(self) -> bool:
        """Apply pending keyboard and mouse input to the camera.

        Returns:
            True if the viewer should quit.
        """
        window = self.window
        for event in window.get_events(ti.ui.PRESS):
            if event.key == ti.ui.ESCAPE:
                return True
            if event.key == "w":
                self.scene.move_forward()
            elif event.key == "s":
                self.scene.move_back()
            elif event.key == "p":
                self.export_png()

        cursor = window.get_cursor_pos()
        if window.is_pressed(ti.ui.LMB) and self._last_cursor is not None:
            x_rot, y_rot = mouse_delta_to_rotation(
                self._last_cursor,
                cursor,
                self.width,
                self.height,
                self.settings.rotation_speed,
            )
            if x_rot != 0.0 or y_rot != 0.0:
                self.scene.rotate(x_rot, y_rot)
        self._last_cursor = cursor
        return False

    def render_frame(self) -> npt.NDArray[np.float64]:
        """Advance the animation and render one frame into the display."""
        self.scene.step()
        frame = self.scene.render_frame(self.width, self.height)
        self._last_frame = frame
        self.update_image(frame)
        self.frame_count += 1
        return frame

    def run(self) -> None:
        """Run the frame loop until Escape is pressed or the window closes."""
        self._initialize_window()
        assert self._canvas is not None

        while self.window.running:
            if self.handle_input():
                break
            self.render_frame()
            self._canvas.set_image(self.display_image)
            self.window.show()

            fps = self._fps.update()
            if fps is not None:
                print(f"FPS {fps:.1f}", file=sys.stderr)

    def export_png(self) -> str | None:
        """Save the last rendered frame to a timestamped PNG file.

        Returns:
            The file name, or None if nothing has been rendered yet.
        """
        if self._last_frame is None:
            print("Error: No frame rendered yet")
            return None
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"whitted_{timestamp}.png"
        save_png_from_array(self._last_frame, filename)
        print(f"Exported: {filename}")
        return filename

    def close(self) -> None:
        """Close the viewer window."""
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering."""
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        if sys.platform == "darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            return not (ssh_connection and not display)

        if display or wayland:
            return True

        return os.name == "nt"
