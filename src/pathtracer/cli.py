"""Command-line entry point for rendering a scene to a PPM image.

Usage:
    pathtracer [options] > image.ppm
    python -m src.pathtracer.cli [options]

Options:
    --width WIDTH           Image width in pixels (default: 400)
    --aspect-ratio RATIO    Width / height (default: 16/9)
    --height HEIGHT         Image height in pixels (default: width / aspect ratio)
    --samples SAMPLES       Number of samples per pixel (default: 100)
    --max-depth DEPTH       Maximum ray bounces (default: 50)
    --scene NAME            Scene to render: default, glass, single
    --vfov DEGREES          Override the scene's vertical field of view
    --output PATH           Output file path, "-" for stdout (default: -)
    --seed SEED             Random seed (default: 0)
    --no-gamma              Write linear values without gamma correction
    --arch ARCH             Taichi backend: auto, cpu, gpu (default: auto)
    --quiet                 Suppress progress output
    --verbose               Enable debug logging

Example:
    pathtracer --width 200 --samples 20 --scene glass --output glass.ppm
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from fractions import Fraction

import taichi as ti

from src.pathtracer.core.log import set_log_level


def _aspect_ratio(value: str) -> float:
    """Parse an aspect ratio given as a number or a fraction like 16/9."""
    try:
        ratio = float(Fraction(value))
    except (ValueError, ZeroDivisionError) as e:
        raise argparse.ArgumentTypeError(f"invalid aspect ratio: {value!r}") from e
    if ratio <= 0.0:
        raise argparse.ArgumentTypeError(f"aspect ratio must be positive: {value!r}")
    return ratio


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="pathtracer",
        description="Render a scene of spheres to a plain-text PPM image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=_aspect_ratio,
        default=16.0 / 9.0,
        help="Width / height, as a number or fraction (default: 16/9)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (default: width / aspect ratio)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum ray bounces (default: 50)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default="default",
        choices=("default", "glass", "single"),
        help="Scene to render (default: default)",
    )
    parser.add_argument(
        "--vfov",
        type=float,
        default=None,
        help="Vertical field of view in degrees (default: per scene)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help='Output file path, "-" for stdout (default: -)',
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "--no-gamma",
        action="store_true",
        help="Write linear values without gamma correction",
    )
    parser.add_argument(
        "--arch",
        type=str,
        default="auto",
        choices=("auto", "cpu", "gpu"),
        help="Taichi backend (default: auto, GPU with CPU fallback)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    verbosity.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def init_taichi(arch: str = "auto", seed: int = 0) -> str:
    """Initialize Taichi on the requested backend.

    With "auto", the GPU is tried first and the CPU is used if no GPU
    backend is available.

    Returns:
        The name of the backend that was initialized.
    """
    if arch == "cpu":
        ti.init(arch=ti.cpu, random_seed=seed)
        return "cpu"
    if arch == "gpu":
        ti.init(arch=ti.gpu, random_seed=seed)
        return "gpu"

    try:
        ti.init(arch=ti.gpu, random_seed=seed)
        return "gpu"
    except Exception:
        ti.init(arch=ti.cpu, random_seed=seed)
        return "cpu"


def run(args: argparse.Namespace) -> None:
    """Build the scene, render it and write the PPM output.

    Taichi must already be initialized.

    Raises:
        ValueError: If a setting or scene parameter is invalid.
        RuntimeError: If the scene exceeds the supported capacity.
    """
    # Lazy imports so that Taichi fields are created after initialization
    from src.pathtracer.camera.camera import setup_camera
    from src.pathtracer.core.renderer import Renderer, RenderSettings
    from src.pathtracer.scene.scenes import get_scene

    settings = RenderSettings(
        image_width=args.width,
        aspect_ratio=args.aspect_ratio,
        image_height=args.height,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        gamma_correct=not args.no_gamma,
    )

    # The camera follows the actual image shape
    aspect_ratio = settings.image_width / settings.image_height
    _, camera = get_scene(args.scene, aspect_ratio=aspect_ratio, vfov=args.vfov)
    setup_camera(camera)

    renderer = Renderer(settings)

    def progress_callback(remaining: int, total: int) -> None:
        if not args.quiet:
            print(f"\rScanlines remaining: {remaining:<6d}", end="", file=sys.stderr, flush=True)

    renderer.render(callback=progress_callback)

    if not args.quiet:
        print("\nDone.", file=sys.stderr)

    if args.output == "-":
        renderer.write_ppm(sys.stdout)
        sys.stdout.flush()
    else:
        renderer.save_ppm(args.output)
        if not args.quiet:
            print(f"Saved to: {args.output}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        set_log_level(logging.DEBUG)
    elif args.quiet:
        set_log_level(logging.WARNING)

    backend = init_taichi(args.arch, args.seed)
    if not args.quiet:
        print(f"Using {backend.upper()} backend", file=sys.stderr)

    try:
        run(args)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
