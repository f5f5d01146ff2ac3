"""Unit tests for the host-side Color type.

Tests cover:
- Saturating addition
- Channel-wise product and scalar scaling
- Intensity
- 8-bit conversion (single values and whole arrays)
"""

import numpy as np
import pytest


class TestColorArithmetic:
    """Tests for Color operators."""

    def test_add_saturates_at_one(self):
        """Test that addition clamps each channel at 1.0."""
        from src.whitted.core.color import Color

        result = Color(0.6, 0.2, 1.0) + Color(0.6, 0.3, 0.5)
        assert result.as_tuple() == pytest.approx((1.0, 0.5, 1.0))

    def test_add_below_one_is_plain_sum(self):
        """Test that sums below 1.0 are unchanged."""
        from src.whitted.core.color import Color

        result = Color(0.1, 0.2, 0.3) + Color(0.1, 0.2, 0.3)
        assert result.as_tuple() == pytest.approx((0.2, 0.4, 0.6))

    def test_channel_product(self):
        """Test multiplying two colors channel-wise."""
        from src.whitted.core.color import Color

        result = Color(0.5, 1.0, 0.2) * Color(0.5, 0.3, 1.0)
        assert result.as_tuple() == pytest.approx((0.25, 0.3, 0.2))

    def test_scalar_scale_both_sides(self):
        """Test scaling by a number from either side."""
        from src.whitted.core.color import Color

        c = Color(0.2, 0.4, 0.8)
        assert (c * 0.5).as_tuple() == pytest.approx((0.1, 0.2, 0.4))
        assert (0.5 * c).as_tuple() == pytest.approx((0.1, 0.2, 0.4))
        assert c.scale(2.0).as_tuple() == pytest.approx((0.4, 0.8, 1.6))

    def test_intensity_is_mean(self):
        """Test intensity is the arithmetic mean of the channels."""
        from src.whitted.core.color import Color

        assert Color(0.3, 0.6, 0.9).intensity() == pytest.approx(0.6)

    def test_from_sequence(self):
        """Test building a Color from a list."""
        from src.whitted.core.color import Color

        assert Color.from_sequence([1, 0.5, 0]) == Color(1.0, 0.5, 0.0)

    def test_from_sequence_wrong_length(self):
        """Test that a sequence without 3 channels is rejected."""
        from src.whitted.core.color import Color

        with pytest.raises(ValueError):
            Color.from_sequence([1.0, 0.5])

    def test_color_is_immutable(self):
        """Test that Color values cannot be modified."""
        from dataclasses import FrozenInstanceError

        from src.whitted.core.color import RED

        with pytest.raises(FrozenInstanceError):
            RED.r = 0.5


class TestColorToU8:
    """Tests for 8-bit conversion."""

    def test_clamp_and_truncate(self):
        """Test out-of-range channels clamp and in-range channels truncate."""
        from src.whitted.core.color import Color

        assert Color(1.5, 0.5, -0.1).to_u8() == (255, 127, 0)

    def test_to_u8_triple(self):
        """Test the free-function form of the conversion."""
        from src.whitted.core.color import BLACK, WHITE, to_u8_triple

        assert to_u8_triple(WHITE) == (255, 255, 255)
        assert to_u8_triple(BLACK) == (0, 0, 0)

    def test_colors_to_u8_matches_scalar_conversion(self):
        """Test that the array conversion agrees with the per-color one."""
        from src.whitted.core.color import Color, colors_to_u8

        values = [(1.5, 0.5, -0.1), (0.999, 0.004, 0.25), (0.0, 1.0, 2.0)]
        converted = colors_to_u8(np.array(values))

        assert converted.dtype == np.uint8
        for row, value in zip(converted, values):
            assert tuple(int(c) for c in row) == Color(*value).to_u8()

    def test_colors_to_u8_keeps_frame_shape(self):
        """Test that a whole frame keeps its shape."""
        from src.whitted.core.color import colors_to_u8

        frame = np.full((4, 5, 3), 2.0)
        converted = colors_to_u8(frame)
        assert converted.shape == (4, 5, 3)
        assert np.all(converted == 255)
