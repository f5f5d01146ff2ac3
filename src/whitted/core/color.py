"""RGB color value type and the 8-bit export boundary.

On the device side a color is simply a ``vec3`` and is combined with plain
channel-wise arithmetic, never clamped. This module holds the host-side
Color value type handed to drivers and the conversion to 8-bit triples,
which is the only place clamping happens.

Example:
    >>> from src.whitted.core.color import Color, to_u8_triple
    >>> c = Color(0.2, 0.4, 0.6) + Color(0.9, 0.1, 0.0)
    >>> c.as_tuple()
    (1.0, 0.5, 0.6)
    >>> to_u8_triple(Color(1.5, 0.5, -0.1))
    (255, 127, 0)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt


@dataclass(frozen=True)
class Color:
    """An RGB triple with channels conceptually in [0, 1].

    Channels may exceed 1.0 after combination; they are clamped only by
    to_u8() / to_u8_triple().

    Attributes:
        r: Red channel.
        g: Green channel.
        b: Blue channel.
    """

    r: float
    g: float
    b: float

    def __add__(self, other: Color) -> Color:
        """Channel-wise sum, saturated at 1.0 per channel."""
        if not isinstance(other, Color):
            return NotImplemented
        return Color(
            min(self.r + other.r, 1.0),
            min(self.g + other.g, 1.0),
            min(self.b + other.b, 1.0),
        )

    def __mul__(self, other: Color | float) -> Color:
        """Channel-wise product with a Color, or scale by a number."""
        if isinstance(other, Color):
            return Color(self.r * other.r, self.g * other.g, self.b * other.b)
        if isinstance(other, (int, float)):
            return self.scale(other)
        return NotImplemented

    __rmul__ = __mul__

    def scale(self, factor: float) -> Color:
        """Multiply every channel by a scalar."""
        return Color(self.r * factor, self.g * factor, self.b * factor)

    def intensity(self) -> float:
        """Arithmetic mean of the three channels."""
        return (self.r + self.g + self.b) / 3.0

    def to_u8(self) -> tuple[int, int, int]:
        """Convert to an 8-bit triple (see to_u8_triple)."""
        return to_u8_triple(self)

    def as_tuple(self) -> tuple[float, float, float]:
        """Return the channels as a plain (r, g, b) tuple."""
        return (self.r, self.g, self.b)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> Color:
        """Build a Color from any 3-element sequence (tuple, list, vector)."""
        if len(values) != 3:
            raise ValueError(f"Color needs exactly 3 channels, got {len(values)}")
        return cls(float(values[0]), float(values[1]), float(values[2]))


RED = Color(1.0, 0.0, 0.0)
GREEN = Color(0.0, 1.0, 0.0)
BLUE = Color(0.0, 0.0, 1.0)
WHITE = Color(1.0, 1.0, 1.0)
BLACK = Color(0.0, 0.0, 0.0)


def _channel_to_u8(value: float) -> int:
    clamped = min(max(value, 0.0), 1.0)
    return int(clamped * 255.0)


def to_u8_triple(color: Color) -> tuple[int, int, int]:
    """Convert a color to 8 bits per channel.

    Each channel is clamped to [0, 1], multiplied by 255 and truncated
    toward zero. Negative channels therefore map to 0.

    Args:
        color: The color to convert.

    Returns:
        Tuple of (R, G, B) integers in [0, 255].
    """
    return (
        _channel_to_u8(color.r),
        _channel_to_u8(color.g),
        _channel_to_u8(color.b),
    )


def colors_to_u8(colors: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Vectorized to_u8_triple for arrays of colors.

    Args:
        colors: Array whose last axis holds (R, G, B), e.g. a scanline of
            shape (W, 3) or a frame of shape (H, W, 3).

    Returns:
        uint8 array of the same shape.
    """
    clamped = np.clip(np.asarray(colors, dtype=np.float64), 0.0, 1.0)
    return (clamped * 255.0).astype(np.uint8)
