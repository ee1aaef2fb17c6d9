"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the sphere
intersection routine. The quadratic is solved with the robust formulation
from Ray Tracing Gems to avoid catastrophic cancellation when b^2 is nearly
equal to 4ac.

A sphere with a negative radius is a valid surface: its outward normal
(hit_point - center) / radius points toward the center, which turns the
sphere into a hollow shell when nested inside a sphere of the same material.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material handle.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Negative values invert the normal.
        material_id: The unified material ID used for shading.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The unit surface normal at the intersection point. Always
            points against the incoming ray. Only valid if hit == 1.
        front_face: 1 if the ray hit the side the outward normal points to,
            0 otherwise. Only valid if hit == 1.
        material_id: The material ID of the hit surface, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a normal against the incoming ray.

    Args:
        ray_direction: The direction of the incoming ray.
        outward_normal: The geometric normal of the surface.

    Returns:
        A tuple (front_face, normal) where front_face is 1 when the ray
        arrives on the side the outward normal points to, and normal is the
        outward normal on a front-face hit and its negation otherwise.
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(-tm.normalize(ray_direction), tm.normalize(outward_normal)) > 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 in a numerically stable way.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of the discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant)) keeps both terms the same sign
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        # Tangent ray through the center; fall back to the textbook formula
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Find the nearest ray-sphere intersection strictly inside (t_min, t_max).

    The intersection solves |ray_origin + t * ray_direction - center|^2 =
    radius^2, which expands to a*t^2 + 2*h*t + c = 0 with:
        a = dot(direction, direction)
        h = dot(direction, oc)
        c = dot(oc, oc) - radius^2
        oc = origin - center

    A negative discriminant is a miss. Otherwise the smaller root is tried
    first and the larger one only if the smaller is out of range.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (need not be normalized).
        sphere: The sphere to test.
        t_min: Lower bound (exclusive) for a valid hit.
        t_max: Upper bound (exclusive) for a valid hit.

    Returns:
        A HitRecord. Check the hit field to determine if an intersection
        occurred.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = t1
            valid = (t > t_min) and (t < t_max)

        if valid:
            hit_point = ray_origin + t * ray_direction
            # Dividing by the signed radius flips the normal of hollow spheres
            outward_normal = (hit_point - sphere.center) / sphere.radius
            front_face, normal = face_normal(ray_direction, outward_normal)
            result = HitRecord(
                hit=1,
                t=t,
                point=hit_point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material_id: ti.i32) -> Sphere:
    """Create a sphere from center, radius and material ID."""
    return Sphere(center=center, radius=radius, material_id=material_id)
