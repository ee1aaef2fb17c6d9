"""Geometry module for shape primitives.

This module provides the sphere primitive and the hit record shared by all
intersection routines:

Components:
    sphere: Sphere primitive, HitRecord and ray-sphere intersection

All intersection routines are implemented as Taichi functions (@ti.func)
and follow the pattern:
    record = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)

The returned HitRecord always carries a normal facing against the incoming
ray, so materials never need to re-check which side was hit.
"""

from .sphere import HitRecord, Sphere, face_normal, hit_sphere, make_miss_record, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "face_normal",
    "make_sphere",
    "make_miss_record",
]
