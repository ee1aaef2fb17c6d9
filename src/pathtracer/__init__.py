"""Taichi-based stochastic ray tracer.

This package renders scenes of spheres by Monte Carlo ray tracing, with
support for:
- Lambertian, metal (with fuzz) and dielectric materials
- Hollow spheres through negative radii
- A positionable camera with depth of field
- Plain-text PPM output

Subpackages:
    core: Vector algebra, colors, the integrator and the renderer
    geometry: Sphere primitive and hit records
    materials: Material scattering models and parameter storage
    scene: Surface list, scene manager and built-in scenes
    camera: Camera model with ray generation
    output: PPM image export
"""

__version__ = "0.1.0"
