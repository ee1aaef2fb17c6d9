"""Unit tests for the Dielectric material module.

Tests cover:
- Refraction ratio selection by face
- Straight-through transmission for an index of 1
- Total internal reflection
- Schlick-weighted choice between reflection and refraction
- Dielectrics never absorb and have white attenuation
- Material registry operations and IOR validation
"""

import math

import numpy as np
import pytest
import taichi as ti


def _scatter_many(n, ior, incident, normal, front_face):
    from src.pathtracer.core.ray import vec3
    from src.pathtracer.materials.dielectric import scatter_dielectric

    directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
    attenuations = ti.Vector.field(3, dtype=ti.f32, shape=n)
    scattered = ti.field(dtype=ti.i32, shape=n)

    @ti.kernel
    def test_kernel(
        ior: ti.f32,
        ix: ti.f32,
        iy: ti.f32,
        iz: ti.f32,
        nx: ti.f32,
        ny: ti.f32,
        nz: ti.f32,
        front_face: ti.i32,
    ):
        for i in range(n):
            direction, attenuation, did_scatter = scatter_dielectric(
                ior, vec3(ix, iy, iz), vec3(nx, ny, nz), front_face
            )
            directions[i] = direction
            attenuations[i] = attenuation
            scattered[i] = did_scatter

    test_kernel(ior, *incident, *normal, front_face)
    return directions.to_numpy(), attenuations.to_numpy(), scattered.to_numpy()


class TestRefractionRatio:
    """Tests for refraction_ratio()."""

    def test_front_and_back_face(self):
        from src.pathtracer.materials.dielectric import refraction_ratio

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = refraction_ratio(1.5, 1)
            result[1] = refraction_ratio(1.5, 0)

        test_kernel()
        assert abs(result[0] - 1.0 / 1.5) < 1e-6
        assert abs(result[1] - 1.5) < 1e-6


class TestDielectricScatter:
    """Tests for scatter_dielectric()."""

    def test_never_absorbs_and_white_attenuation(self):
        incident = (0.6, -0.8, 0.0)
        _, attenuations, scattered = _scatter_many(500, 1.5, incident, (0.0, 1.0, 0.0), 1)
        assert np.all(scattered == 1)
        np.testing.assert_allclose(attenuations, 1.0)

    def test_index_one_passes_straight_through(self):
        incident = (0.0, 0.0, -1.0)
        directions, _, _ = _scatter_many(200, 1.0, incident, (0.0, 0.0, 1.0), 1)
        np.testing.assert_allclose(directions, np.tile(incident, (200, 1)), atol=1e-6)

    def test_total_internal_reflection(self):
        """Leaving glass at 60 degrees always reflects (sin * 1.5 > 1)."""
        theta = math.radians(60.0)
        incident = (math.sin(theta), math.cos(theta), 0.0)
        # Inside the glass the normal faces against the ray
        directions, _, _ = _scatter_many(200, 1.5, incident, (0.0, -1.0, 0.0), 0)
        expected = np.array([math.sin(theta), -math.cos(theta), 0.0])
        np.testing.assert_allclose(directions, np.tile(expected, (200, 1)), atol=1e-5)

    def test_reflection_probability_follows_schlick(self):
        """At normal incidence on glass, about 4% of rays reflect."""
        n = 20000
        directions, _, _ = _scatter_many(n, 1.5, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0), 1)
        reflected = directions[:, 1] > 0.0
        assert abs(np.mean(reflected) - 0.04) < 0.01

    def test_refracted_direction_bends_toward_normal(self):
        theta = math.radians(45.0)
        incident = (math.sin(theta), -math.cos(theta), 0.0)
        directions, _, _ = _scatter_many(2000, 1.5, incident, (0.0, 1.0, 0.0), 1)
        refracted = directions[directions[:, 1] < 0.0]
        assert len(refracted) > 0
        np.testing.assert_allclose(refracted[:, 0], math.sin(theta) / 1.5, atol=1e-5)


class TestReflectionHelpers:
    """Tests for will_reflect(), fresnel_reflectance() and incidence_cosine()."""

    def test_will_reflect(self):
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.materials.dielectric import will_reflect

        result = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            steep = vec3(0.1, 1.0, 0.0)
            grazing = vec3(1.0, 0.2, 0.0)
            normal = vec3(0.0, -1.0, 0.0)
            result[0] = will_reflect(1.5, steep, normal, 0)
            result[1] = will_reflect(1.5, grazing, normal, 0)

        test_kernel()
        assert result[0] == 0
        assert result[1] == 1

    def test_fresnel_reflectance_normal_incidence(self):
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.materials.dielectric import fresnel_reflectance

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = fresnel_reflectance(1.5, vec3(0.0, -2.0, 0.0), vec3(0.0, 1.0, 0.0), 1)

        test_kernel()
        assert abs(result[None] - 0.04) < 1e-6

    def test_incidence_cosine_clamped(self):
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.materials.dielectric import incidence_cosine

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = incidence_cosine(vec3(0.0, -3.0, 0.0), vec3(0.0, 1.0, 0.0))
            result[1] = incidence_cosine(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert result[0] <= 1.0
        assert abs(result[0] - 1.0) < 1e-6
        assert abs(result[1] - 1.0 / math.sqrt(2.0)) < 1e-5

    def test_scatter_reflects_at_fresnel_rate(self):
        """Entering glass at 60 degrees, the reflected share matches the reflectance helper."""
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.materials.dielectric import fresnel_reflectance, will_reflect

        theta = math.radians(60.0)
        incident = (math.sin(theta), -math.cos(theta), 0.0)
        normal = (0.0, 1.0, 0.0)

        helpers = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel(ix: ti.f32, iy: ti.f32, iz: ti.f32):
            d = vec3(ix, iy, iz)
            n = vec3(0.0, 1.0, 0.0)
            helpers[0] = fresnel_reflectance(1.5, d, n, 1)
            helpers[1] = will_reflect(1.5, d, n, 1)

        test_kernel(*incident)
        reflectance = helpers[0]
        assert helpers[1] == 0
        # Schlick at cos = 0.5 with r0 = 0.04
        assert abs(reflectance - (0.04 + 0.96 * 0.5**5)) < 1e-5

        directions, _, _ = _scatter_many(20000, 1.5, incident, normal, 1)
        reflected = directions[:, 1] > 0.0
        assert abs(np.mean(reflected) - reflectance) < 0.01


class TestDielectricRegistry:
    """Tests for dielectric material storage."""

    def test_add_and_read_back(self):
        from src.pathtracer.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_ior,
            get_dielectric_material_count,
        )

        assert add_dielectric_material() == 0
        assert add_dielectric_material(2.4) == 1
        assert get_dielectric_material_count() == 2

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = get_dielectric_ior(0)
            result[1] = get_dielectric_ior(1)

        test_kernel()
        assert abs(result[0] - 1.5) < 1e-6
        assert abs(result[1] - 2.4) < 1e-6

    @pytest.mark.parametrize("ior", [0.9, 0.0, -1.5, math.nan])
    def test_ior_below_one_rejected(self, ior):
        from src.pathtracer.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError, match="less than 1.0"):
            add_dielectric_material(ior)

    def test_ior_exactly_one_accepted(self):
        from src.pathtracer.materials.dielectric import add_dielectric_material

        assert add_dielectric_material(1.0) == 0
