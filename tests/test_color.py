"""Unit tests for the Color value type."""

import math

import numpy as np
import pytest


class TestColorConstruction:
    """Tests for Color validation."""

    def test_valid_color(self):
        from src.pathtracer.core.color import Color

        color = Color(0.0, 0.5, 1.0)
        assert color.red == 0.0
        assert color.green == 0.5
        assert color.blue == 1.0

    @pytest.mark.parametrize(
        "channels",
        [(-0.01, 0.5, 0.5), (0.5, 1.0001, 0.5), (0.5, 0.5, 2.0), (math.nan, 0.0, 0.0)],
    )
    def test_out_of_range_channel_raises(self, channels):
        from src.pathtracer.core.color import Color

        with pytest.raises(ValueError, match="outside"):
            Color(*channels)

    def test_from_vector(self):
        from src.pathtracer.core.color import Color

        color = Color.from_vector(np.array([0.25, 0.5, 0.75]))
        assert color == Color(0.25, 0.5, 0.75)

    def test_from_vector_wrong_length(self):
        from src.pathtracer.core.color import Color

        with pytest.raises(ValueError, match="3 channels"):
            Color.from_vector([0.1, 0.2])

    def test_color_is_immutable(self):
        from dataclasses import FrozenInstanceError

        from src.pathtracer.core.color import Color

        color = Color(0.1, 0.2, 0.3)
        with pytest.raises(FrozenInstanceError):
            color.red = 0.5


class TestColorOutput:
    """Tests for gamma correction and PPM formatting."""

    def test_write_color_matches_rounded_channels(self):
        """write_color reproduces round(channel * 255) for each channel."""
        from src.pathtracer.core.color import Color

        for value in np.linspace(0.0, 1.0, 257):
            expected = math.floor(value * 255 + 0.5)
            line = Color(value, value / 2, 1.0 - value).write_color()
            r, g, b = (int(part) for part in line.split())
            assert r == expected
            assert g == math.floor(value / 2 * 255 + 0.5)
            assert b == math.floor((1.0 - value) * 255 + 0.5)

    def test_write_color_extremes(self):
        from src.pathtracer.core.color import Color

        assert Color(0.0, 0.0, 0.0).write_color() == "0 0 0"
        assert Color(1.0, 1.0, 1.0).write_color() == "255 255 255"

    def test_halves_round_away_from_zero(self):
        from src.pathtracer.core.color import Color

        # 0.5 * 255 = 127.5
        assert Color(0.5, 0.5, 0.5).to_bytes() == (128, 128, 128)

    def test_gamma_corrected(self):
        from src.pathtracer.core.color import Color

        corrected = Color(0.25, 0.0, 1.0).gamma_corrected()
        assert corrected == Color(0.5, 0.0, 1.0)
