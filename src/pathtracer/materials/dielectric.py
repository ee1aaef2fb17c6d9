"""Dielectric (glass/water) material implementation.

This module implements clear dielectrics that either reflect or refract:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when ratio * sin(theta) > 1

The reflect/refract choice is made randomly with probability equal to the
Schlick reflectance, so reflection becomes more likely at grazing angles.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import (
    reflect,
    refract,
    schlick_reflectance,
    unit_vector,
    vec3,
)


@ti.func
def refraction_ratio(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio of refractive indices for a ray crossing the surface.

    Entering from the front face (air to glass) gives 1 / ior; leaving
    through the back face (glass to air) gives ior.
    """
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def incidence_cosine(incident_direction: vec3, normal: vec3) -> ti.f32:
    """Cosine of the angle between the reversed unit direction and the normal."""
    return tm.min(tm.dot(-unit_vector(incident_direction), normal), 1.0)


@ti.func
def will_reflect(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Determine if total internal reflection will occur.

    Returns:
        1 if the ray cannot refract, 0 otherwise.
    """
    ratio = refraction_ratio(ior, front_face)
    cos_theta = incidence_cosine(incident_direction, normal)
    sin_theta = tm.sqrt(1.0 - cos_theta * cos_theta)
    result = 0
    if ratio * sin_theta > 1.0:
        result = 1
    return result


@ti.func
def fresnel_reflectance(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Compute the Schlick reflectance for a ray hitting the surface."""
    ratio = refraction_ratio(ior, front_face)
    return schlick_reflectance(incidence_cosine(incident_direction, normal), ratio)


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Compute the scattered direction for a dielectric surface.

    The ray reflects under total internal reflection, or otherwise with
    probability equal to the Schlick reflectance, and refracts in all other
    cases.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing against the incoming ray.
        front_face: 1 if the ray hit the outside of the surface, 0 if it is
            leaving the material from within.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The reflected or refracted direction.
        - attenuation: White (clear glass absorbs nothing).
        - did_scatter: Always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    unit_direction = unit_vector(incident_direction)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if will_reflect(ior, incident_direction, normal, front_face) == 1 or ti.random(
        ti.f32
    ) < fresnel_reflectance(ior, incident_direction, normal, front_face):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(
            unit_direction, normal, refraction_ratio(ior, front_face)
        )

    did_scatter = 1

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be >= 1.0.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If IOR is less than 1.0.
    """
    if not ior >= 1.0:
        raise ValueError(
            f"Index of refraction = {ior} is less than 1.0. "
            "IOR must be >= 1.0 for physically meaningful materials."
        )

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    """Get the IOR for a dielectric material by type-local index."""
    return dielectric_iors[material_idx]
