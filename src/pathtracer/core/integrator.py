"""Ray color integrator for Monte Carlo light transport.

This module implements the light transport estimator and the rendering
kernels built on it. A ray is traced through the scene, bouncing off surfaces
according to their material properties, until it escapes to the sky, is
absorbed, or runs out of bounces.

The estimator is the iterative form of the classic recursion

    ray_color(ray, depth) = attenuation * ray_color(scattered, depth - 1)

with a throughput accumulator: each scatter multiplies the throughput by the
material's attenuation, an escaped ray contributes throughput * sky, and
absorption or exhausting the depth contributes black.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Sky gradient background for escaped rays
    - Per-scanline rendering with per-pixel sample averaging
    - t_min of 0.001 to suppress shadow acne

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.integrator import render_scanline, setup_render_target
    >>> from src.pathtracer.scene.scenes import create_default_scene
    >>> from src.pathtracer.camera.camera import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> for j in reversed(range(225)):
    ...     render_scanline(j, samples_per_pixel=100, max_depth=50)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.camera import get_ray_jittered
from src.pathtracer.core.ray import Ray, make_ray, unit_vector, vec3
from src.pathtracer.materials.dielectric import (
    get_dielectric_ior,
    scatter_dielectric,
)
from src.pathtracer.materials.lambertian import (
    get_lambertian_albedo,
    scatter_lambertian,
)
from src.pathtracer.materials.metal import (
    get_metal_albedo,
    get_metal_fuzz,
    scatter_metal,
)
from src.pathtracer.scene.intersection import hit_world
from src.pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# =============================================================================
# Rendering Constants
# =============================================================================

# t range for scene queries; t_min > 0 suppresses self-intersection
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints (horizon and zenith)
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky color seen along a ray that escapes the scene.

    Blends white at the horizon into light blue overhead based on the
    y-component of the unit direction.
    """
    unit_direction = unit_vector(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Averaged color per pixel, indexed [x, y] with y = 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.
    The buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT
    to avoid Taichi kernel recompilation issues.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)


def reset_render_target() -> None:
    """Mark the render target as uninitialized."""
    _render_target_initialized[None] = 0
    _image_width[None] = 0
    _image_height[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit length, facing against the ray).
        front_face: 1 if hit front face, 0 if back face.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The new ray direction.
        - attenuation: The color attenuation for this bounce.
        - did_scatter: 1 if ray scattered, 0 if absorbed. Unknown material
          IDs absorb.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered_direction, attenuation, did_scatter = scatter_lambertian(albedo, normal)

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter = scatter_metal(
            albedo, fuzz, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_dielectric_ior(type_index)
        scattered_direction, attenuation, did_scatter = scatter_dielectric(
            ior, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Light Transport
# =============================================================================


@ti.func
def ray_color(ray: Ray, depth: ti.i32) -> vec3:
    """Estimate the color carried back along a ray.

    Args:
        ray: The ray to trace. Its direction need not be unit length.
        depth: Maximum number of surface interactions. A depth of 0 is
            always black.

    Returns:
        The estimated color (RGB). Each scattered ray starts at the hit
        point; the t_min bound keeps it from re-hitting the same surface.
    """
    origin = ray.origin
    direction = ray.direction

    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation
    active = 1

    for _ in range(depth):
        if active == 1:
            rec = hit_world(origin, direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background_color(direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = scatter_material(
                    rec.material_id, direction, rec.normal, rec.front_face
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered_direction

    # Paths still active here ran out of bounces and stay black
    return color


@ti.func
def sample_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Average independent jittered ray_color samples for one pixel."""
    total = vec3(0.0, 0.0, 0.0)
    for _ in range(samples_per_pixel):
        ray = get_ray_jittered(pixel_i, pixel_j, width, height)
        total += ray_color(ray, max_depth)
    return total / ti.cast(samples_per_pixel, ti.f32)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_scanline(
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Render every pixel of one scanline; pixels run in parallel."""
    for i in range(width):
        _color_buffer[i, pixel_j] = sample_pixel(
            i, pixel_j, width, height, samples_per_pixel, max_depth
        )


@ti.kernel
def _trace_ray(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    depth: ti.i32,
) -> vec3:
    return ray_color(make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz)), depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int,
) -> tuple[float, float, float]:
    """Evaluate ray_color for a single ray against the current scene.

    This is a Python-callable function for testing and inspection. For
    image rendering, use render_scanline() which processes pixels in
    parallel.

    Args:
        origin: The ray origin (x, y, z).
        direction: The ray direction (x, y, z), any non-zero length.
        depth: Maximum number of bounces.

    Returns:
        Tuple of (R, G, B) color values.
    """
    color = _trace_ray(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], depth
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_scanline(pixel_j: int, samples_per_pixel: int, max_depth: int) -> None:
    """Render one row of the image into the color buffer.

    Args:
        pixel_j: Row index, 0 = bottom scanline.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of bounces per sample.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the row is outside the image or the sample count
            is not positive.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not 0 <= pixel_j < height:
        raise ValueError(f"Scanline {pixel_j} is outside the image (height {height})")
    if samples_per_pixel <= 0:
        raise ValueError(f"samples_per_pixel = {samples_per_pixel} must be positive")

    _render_scanline(pixel_j, width, height, samples_per_pixel, max_depth)


def get_image_numpy() -> np.ndarray:
    """Get the rendered image as a NumPy array.

    The array shape is (height, width, 3) with the top scanline first.
    Values are the averaged sample colors and are not clamped.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # Transpose from (width, height, 3) to (height, width, 3) for standard image format
    image = np.transpose(image, (1, 0, 2))

    # Flip vertically (buffer uses bottom-left origin, images use top-left)
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float64)
