"""Materials module for scattering models.

This module implements the material models that decide how light leaves a
surface:

Components:
    lambertian: Ideal diffuse reflection (never absorbs)
    metal: Specular reflection with optional fuzz (absorbs below the horizon)
    dielectric: Clear glass-like refraction with Schlick reflectance

Each material provides a scatter function returning
(scattered_direction, attenuation, did_scatter), where did_scatter == 0
signals full absorption. Material parameters are stored in per-type Taichi
fields and referenced by index, so one material can be shared by many
surfaces.
"""

from .dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    fresnel_reflectance,
    incidence_cosine,
    get_dielectric_ior,
    get_dielectric_material_count,
    refraction_ratio,
    scatter_dielectric,
    will_reflect,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    validate_albedo,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    "validate_albedo",
    # Metal
    "scatter_metal",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "scatter_dielectric",
    "refraction_ratio",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ior",
    "fresnel_reflectance",
    "incidence_cosine",
    "will_reflect",
]
