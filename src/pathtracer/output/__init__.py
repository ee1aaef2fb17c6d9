"""Image output in the plain-text PPM (P3) format."""

from .ppm import PPM_MAGIC, image_to_colors, ppm_header, ppm_lines, save_ppm, write_ppm

__all__ = [
    "PPM_MAGIC",
    "image_to_colors",
    "ppm_header",
    "ppm_lines",
    "write_ppm",
    "save_ppm",
]
