"""Plain-text PPM (P3) export for rendered images.

The format is a three-line header followed by one "r g b" line per pixel:

    P3
    <width> <height>
    255
    r g b
    ...

Pixels are written in row-major order from the top scanline to the bottom.
Every channel goes through Color, so an averaged value outside [0, 1] aborts
the export instead of being clamped.

Example:
    >>> import numpy as np
    >>> from src.pathtracer.output.ppm import write_ppm
    >>> import io
    >>> buf = io.StringIO()
    >>> write_ppm(np.full((1, 2, 3), 0.25), buf, gamma=True)
    >>> buf.getvalue().splitlines()
    ['P3', '2 1', '255', '128 128 128', '128 128 128']
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt

from src.pathtracer.core.color import MAX_CHANNEL_VALUE, Color

PPM_MAGIC = "P3"


def _check_image_shape(image: npt.NDArray[np.floating]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (height, width, 3), got {image.shape}")


def ppm_header(width: int, height: int) -> list[str]:
    """Return the three P3 header lines for an image of the given size."""
    return [PPM_MAGIC, f"{width} {height}", str(MAX_CHANNEL_VALUE)]


def image_to_colors(image: npt.NDArray[np.floating], gamma: bool = True) -> Iterator[Color]:
    """Convert an averaged image into Colors, top row first.

    Args:
        image: Array of shape (height, width, 3), top scanline first.
        gamma: Apply gamma 2 correction to every pixel.

    Yields:
        One Color per pixel in row-major order.

    Raises:
        ValueError: If the image has the wrong shape or a channel is outside
            [0, 1].
    """
    _check_image_shape(image)
    for row in image:
        for pixel in row:
            color = Color.from_vector(pixel)
            yield color.gamma_corrected() if gamma else color


def ppm_lines(image: npt.NDArray[np.floating], gamma: bool = True) -> Iterator[str]:
    """Yield the lines of the P3 file for an image, header included."""
    _check_image_shape(image)
    height, width = image.shape[:2]
    yield from ppm_header(width, height)
    for color in image_to_colors(image, gamma=gamma):
        yield color.write_color()


def write_ppm(image: npt.NDArray[np.floating], stream: TextIO, gamma: bool = True) -> None:
    """Write an image to a text stream in P3 format.

    Args:
        image: Array of shape (height, width, 3) with channels in [0, 1].
        stream: Destination text stream (e.g. sys.stdout or an open file).
        gamma: Apply gamma 2 correction before scaling to bytes.

    Every pixel is validated before anything is written to the stream.
    """
    lines = list(ppm_lines(image, gamma=gamma))
    for line in lines:
        stream.write(line)
        stream.write("\n")


def save_ppm(image: npt.NDArray[np.floating], filepath: str | Path, gamma: bool = True) -> None:
    """Save an image to a P3 file.

    The lines are generated before the file is opened, so an out-of-range
    pixel leaves no partial file behind.
    """
    lines = list(ppm_lines(image, gamma=gamma))
    with open(filepath, "w", encoding="ascii") as f:
        f.write("\n".join(lines))
        f.write("\n")
