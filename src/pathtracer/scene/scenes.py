"""Built-in example scenes.

Each factory clears the global scene, builds its spheres and materials
through a SceneManager, and returns the scene together with a matching
Camera configuration.

Available scenes:
    default: Yellow ground and center sphere flanked by a polished and a
        brushed metal sphere, seen from the origin.
    glass: Glass sphere with a hollow core next to diffuse and metal spheres,
        seen from above with a narrow field of view and depth of field.
    single: One gray diffuse sphere in front of the camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.scenes import get_scene
    >>> from src.pathtracer.camera.camera import setup_camera
    >>>
    >>> scene, camera = get_scene("glass", aspect_ratio=16.0 / 9.0)
    >>> setup_camera(camera)
"""

import math
from collections.abc import Callable

from src.pathtracer.camera.camera import Camera
from src.pathtracer.scene.manager import SceneManager

SceneFactory = Callable[..., tuple[SceneManager, Camera]]

DEFAULT_ASPECT_RATIO = 16.0 / 9.0

# =============================================================================
# Shared Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0
GROUND_ALBEDO = (0.8, 0.8, 0.0)

SPHERE_RADIUS = 0.5


def create_default_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    vfov: float | None = None,
) -> tuple[SceneManager, Camera]:
    """Create the default four-sphere scene.

    - Ground: large yellow diffuse sphere
    - Center: yellow diffuse sphere
    - Left: polished metal (fuzz 0.3)
    - Right: brushed gold metal (fuzz 1.0)

    The camera sits at the origin looking down -z.

    Args:
        aspect_ratio: Image width divided by height.
        vfov: Vertical field of view in degrees. Defaults to 90.

    Returns:
        A tuple of (SceneManager, Camera).
    """
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    center = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
    left = scene.add_metal_material(albedo=(0.8, 0.8, 0.8), fuzz=0.3)
    right = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=1.0)

    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground)
    scene.add_sphere((0.0, 0.1, -1.0), SPHERE_RADIUS, center)
    scene.add_sphere((-1.2, 0.1, -1.0), SPHERE_RADIUS, left)
    scene.add_sphere((1.2, 0.1, -1.0), SPHERE_RADIUS, right)

    camera = Camera(aspect_ratio=aspect_ratio)
    if vfov is not None:
        camera.vfov = vfov

    return scene, camera


def create_glass_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    vfov: float | None = None,
) -> tuple[SceneManager, Camera]:
    """Create a scene with a hollow glass sphere and depth of field.

    The left sphere is a glass shell: an outer sphere and an inner sphere
    with negative radius sharing one dielectric material. The inverted
    normal of the inner sphere makes it act as an air bubble.

    The camera looks down on the spheres from (3, 3, 2), focused on the
    center sphere.

    Args:
        aspect_ratio: Image width divided by height.
        vfov: Vertical field of view in degrees. Defaults to 20.

    Returns:
        A tuple of (SceneManager, Camera).
    """
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    center = scene.add_lambertian_material(albedo=(0.1, 0.2, 0.5))
    glass = scene.add_dielectric_material(ior=1.5)
    right = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.0)

    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground)
    scene.add_sphere((0.0, 0.0, -1.0), SPHERE_RADIUS, center)
    scene.add_sphere((-1.0, 0.0, -1.0), SPHERE_RADIUS, glass)
    scene.add_sphere((-1.0, 0.0, -1.0), -0.45, glass)
    scene.add_sphere((1.0, 0.0, -1.0), SPHERE_RADIUS, right)

    lookfrom = (3.0, 3.0, 2.0)
    lookat = (0.0, 0.0, -1.0)
    camera = Camera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=20.0 if vfov is None else vfov,
        aspect_ratio=aspect_ratio,
        aperture=2.0,
        focus_dist=math.dist(lookfrom, lookat),
    )

    return scene, camera


def create_single_sphere_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    vfov: float | None = None,
    albedo: tuple[float, float, float] = (0.5, 0.5, 0.5),
) -> tuple[SceneManager, Camera]:
    """Create a scene with one diffuse sphere at (0, 0, -1).

    Narrow fields of view fill the image with the sphere; very wide ones
    shrink it below a pixel so only the sky remains.

    Args:
        aspect_ratio: Image width divided by height.
        vfov: Vertical field of view in degrees. Defaults to 90.
        albedo: Diffuse color of the sphere.

    Returns:
        A tuple of (SceneManager, Camera).
    """
    scene = SceneManager()
    scene.add_lambertian_sphere((0.0, 0.0, -1.0), SPHERE_RADIUS, albedo)

    camera = Camera(aspect_ratio=aspect_ratio)
    if vfov is not None:
        camera.vfov = vfov

    return scene, camera


SCENES: dict[str, SceneFactory] = {
    "default": create_default_scene,
    "glass": create_glass_scene,
    "single": create_single_sphere_scene,
}


def get_scene(
    name: str,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    vfov: float | None = None,
) -> tuple[SceneManager, Camera]:
    """Build a named scene.

    Raises:
        ValueError: If no scene with that name exists.
    """
    try:
        factory = SCENES[name]
    except KeyError:
        raise ValueError(
            f"Unknown scene {name!r}. Available scenes: {', '.join(sorted(SCENES))}"
        ) from None
    return factory(aspect_ratio=aspect_ratio, vfov=vfov)
