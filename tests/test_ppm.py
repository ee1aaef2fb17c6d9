"""Tests for PPM export.

This module tests the output functions including:
- Header layout
- Pixel ordering (top row first, left to right)
- Gamma correction and channel scaling
- Rejection of out-of-range pixels without partial output
"""

import io

import numpy as np
import pytest

from src.pathtracer.output.ppm import image_to_colors, ppm_header, save_ppm, write_ppm


def _gradient_image(height: int, width: int) -> np.ndarray:
    image = np.zeros((height, width, 3), dtype=np.float64)
    for y in range(height):
        for x in range(width):
            image[y, x] = [x / max(1, width - 1), y / max(1, height - 1), 0.25]
    return image


class TestHeader:
    """Tests for the P3 header."""

    def test_header_lines(self):
        assert ppm_header(400, 225) == ["P3", "400 225", "255"]

    def test_written_header(self):
        buf = io.StringIO()
        write_ppm(np.zeros((2, 3, 3)), buf)
        assert buf.getvalue().splitlines()[:3] == ["P3", "3 2", "255"]


class TestPixels:
    """Tests for pixel lines."""

    def test_one_line_per_pixel(self):
        buf = io.StringIO()
        write_ppm(_gradient_image(4, 5), buf)
        lines = buf.getvalue().splitlines()
        assert len(lines) == 3 + 4 * 5
        assert buf.getvalue().endswith("\n")

    def test_row_major_top_row_first(self):
        image = np.zeros((2, 2, 3))
        image[0, 1] = [1.0, 0.0, 0.0]  # top right
        image[1, 0] = [0.0, 0.0, 1.0]  # bottom left

        buf = io.StringIO()
        write_ppm(image, buf, gamma=False)
        assert buf.getvalue().splitlines()[3:] == ["0 0 0", "255 0 0", "0 0 255", "0 0 0"]

    def test_gamma_correction(self):
        image = np.full((1, 1, 3), 0.25)

        gamma_buf = io.StringIO()
        write_ppm(image, gamma_buf, gamma=True)
        linear_buf = io.StringIO()
        write_ppm(image, linear_buf, gamma=False)

        # sqrt(0.25) * 255 = 127.5 rounds up
        assert gamma_buf.getvalue().splitlines()[3] == "128 128 128"
        # 0.25 * 255 = 63.75
        assert linear_buf.getvalue().splitlines()[3] == "64 64 64"

    def test_image_to_colors_count(self):
        colors = list(image_to_colors(_gradient_image(3, 4), gamma=False))
        assert len(colors) == 12
        assert colors[0].red == 0.0
        assert colors[3].red == 1.0
        assert colors[-1].green == 1.0


class TestValidation:
    """Tests for invalid input."""

    def test_wrong_shape(self):
        with pytest.raises(ValueError, match="shape"):
            write_ppm(np.zeros((4, 4)), io.StringIO())
        with pytest.raises(ValueError, match="shape"):
            write_ppm(np.zeros((4, 4, 4)), io.StringIO())

    @pytest.mark.parametrize("bad", [1.5, -0.1, np.nan])
    def test_out_of_range_pixel_writes_nothing(self, bad):
        image = np.full((2, 2, 3), 0.5)
        image[1, 1, 2] = bad

        buf = io.StringIO()
        with pytest.raises(ValueError, match="outside"):
            write_ppm(image, buf)
        assert buf.getvalue() == ""

    def test_save_ppm_leaves_no_file_on_error(self, tmp_path):
        image = np.full((2, 2, 3), 0.5)
        image[0, 0, 0] = 2.0
        filepath = tmp_path / "bad.ppm"

        with pytest.raises(ValueError):
            save_ppm(image, filepath)
        assert not filepath.exists()


class TestSavePpm:
    """Tests for save_ppm()."""

    def test_save_matches_write(self, tmp_path):
        image = _gradient_image(3, 2)
        filepath = tmp_path / "image.ppm"

        save_ppm(image, filepath)
        buf = io.StringIO()
        write_ppm(image, buf)

        assert filepath.read_text(encoding="ascii") == buf.getvalue()

    def test_save_accepts_str_path(self, tmp_path):
        filepath = tmp_path / "image.ppm"
        save_ppm(np.ones((1, 1, 3)), str(filepath))
        assert filepath.read_text(encoding="ascii").splitlines() == ["P3", "1 1", "255", "255 255 255"]
