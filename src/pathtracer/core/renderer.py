"""Scanline renderer driving the integrator.

This module provides a convenient wrapper around the core integrator that
supports:
- Render settings with validated defaults
- Rendering scanlines from the top of the image to the bottom
- Progress callbacks or a generator for progress reporting
- PPM output of the finished image

The Renderer class encapsulates the render target state and the settings,
and delegates the per-pixel work to the integrator kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.renderer import Renderer, RenderSettings
    >>> from src.pathtracer.scene.scenes import create_default_scene
    >>> from src.pathtracer.camera.camera import setup_camera
    >>>
    >>> settings = RenderSettings(image_width=400, samples_per_pixel=10)
    >>> scene, camera = create_default_scene(aspect_ratio=settings.aspect_ratio)
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(settings)
    >>> renderer.render()
    >>> renderer.save_ppm("image.ppm")
"""

import time
from collections.abc import Callable, Generator
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt

from src.pathtracer.core.color import Color
from src.pathtracer.core.integrator import (
    get_image_numpy,
    render_scanline,
    setup_render_target,
)
from src.pathtracer.core.log import get_logger
from src.pathtracer.output.ppm import image_to_colors, save_ppm, write_ppm

logger = get_logger(__name__)

# Type alias for progress callback
# Callback receives (scanlines_remaining, total_scanlines)
ProgressCallback = Callable[[int, int], None]


@dataclass
class RenderSettings:
    """Image and sampling parameters for a render.

    Attributes:
        image_width: Image width in pixels.
        aspect_ratio: Width divided by height.
        image_height: Image height in pixels. Derived from the width and
            aspect ratio when not given.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of bounces per sample.
        gamma_correct: Apply gamma 2 correction on output.
    """

    image_width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    image_height: int | None = None
    samples_per_pixel: int = 100
    max_depth: int = 50
    gamma_correct: bool = True

    def __post_init__(self) -> None:
        if self.image_width <= 0:
            raise ValueError(f"image_width = {self.image_width} must be positive")
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        if self.image_height is None:
            self.image_height = max(1, int(round(self.image_width / self.aspect_ratio)))
        if self.image_height <= 0:
            raise ValueError(f"image_height = {self.image_height} must be positive")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel = {self.samples_per_pixel} must be positive")
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must be non-negative")


class Renderer:
    """Renders the current scene and camera into an image.

    The scene and camera live in global Taichi fields, so they must be set
    up (e.g. with a SceneManager and setup_camera()) before rendering.

    Attributes:
        settings: The render settings in use.
    """

    def __init__(self, settings: RenderSettings | None = None) -> None:
        """Initialize the renderer and its render target.

        Raises:
            ValueError: If the image exceeds the maximum supported size.
        """
        self.settings = settings if settings is not None else RenderSettings()
        setup_render_target(self.width, self.height)
        self._rendered = False

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.settings.image_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return int(self.settings.image_height)

    @property
    def rendered(self) -> bool:
        """Whether every scanline has been rendered."""
        return self._rendered

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render scanlines from top to bottom, yielding progress.

        Yields:
            Tuple of (scanlines_remaining, total_scanlines) before each
            scanline is rendered, then (0, total_scanlines) once finished.

        Example:
            >>> for remaining, total in renderer.render_progressive():
            ...     print(f"Scanlines remaining: {remaining}")
        """
        settings = self.settings
        total = self.height
        self._rendered = False

        logger.info(
            "Rendering %dx%d, %d samples per pixel, max depth %d",
            self.width,
            self.height,
            settings.samples_per_pixel,
            settings.max_depth,
        )
        start = time.perf_counter()

        for j in reversed(range(total)):
            yield (j + 1, total)
            render_scanline(j, settings.samples_per_pixel, settings.max_depth)

        self._rendered = True
        logger.info("Render finished in %.2fs", time.perf_counter() - start)
        yield (0, total)

    def render(self, callback: ProgressCallback | None = None) -> None:
        """Render the full image.

        Args:
            callback: Optional callback receiving (scanlines_remaining,
                total_scanlines) before each scanline and once at the end.
        """
        for remaining, total in self.render_progressive():
            if callback is not None:
                callback(remaining, total)

    def _check_rendered(self) -> None:
        if not self._rendered:
            raise RuntimeError("Image has not been rendered. Call render() first.")

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the averaged image, shape (height, width, 3), top row first."""
        self._check_rendered()
        return get_image_numpy()

    def get_colors(self) -> list[list[Color]]:
        """Get the output Colors row by row, gamma corrected per settings.

        Raises:
            ValueError: If any averaged channel is outside [0, 1].
        """
        image = self.get_image_numpy()
        colors = list(image_to_colors(image, gamma=self.settings.gamma_correct))
        return [colors[row * self.width : (row + 1) * self.width] for row in range(self.height)]

    def write_ppm(self, stream: TextIO) -> None:
        """Write the rendered image to a text stream in P3 format."""
        write_ppm(self.get_image_numpy(), stream, gamma=self.settings.gamma_correct)

    def save_ppm(self, filepath: str | Path) -> None:
        """Save the rendered image to a P3 file."""
        save_ppm(self.get_image_numpy(), filepath, gamma=self.settings.gamma_correct)
        logger.info("Wrote %s", filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.settings.samples_per_pixel}, "
            f"max_depth={self.settings.max_depth})"
        )
