"""Tests for the ray color integrator.

Tests cover:
- Background sky gradient
- Depth limits (depth 0 is black, exhausted paths are black)
- Material dispatch and absorption
- Invisibility of an index-1 dielectric sphere
- Render target setup and scanline rendering
"""

import numpy as np
import pytest
import taichi as ti


def _sky(direction):
    d = np.asarray(direction, dtype=np.float64)
    t = 0.5 * (d[1] / np.linalg.norm(d) + 1.0)
    return (1.0 - t) * np.ones(3) + t * np.array([0.5, 0.7, 1.0])


class TestBackground:
    """Tests for rays that escape the scene."""

    @pytest.mark.parametrize(
        "direction", [(0.0, 1.0, 0.0), (0.0, -1.0, 0.0), (0.0, 0.0, -1.0), (1.0, 2.0, -3.0)]
    )
    def test_empty_scene_returns_sky(self, direction):
        from src.pathtracer.core.integrator import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), direction, depth=5)
        np.testing.assert_allclose(color, _sky(direction), atol=1e-6)

    def test_background_color_endpoints(self):
        from src.pathtracer.core.integrator import background_color
        from src.pathtracer.core.ray import vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = background_color(vec3(0.0, 5.0, 0.0))
            result[1] = background_color(vec3(0.0, -0.1, 0.0))

        test_kernel()
        np.testing.assert_allclose(result[0].to_numpy(), [0.5, 0.7, 1.0], atol=1e-6)
        np.testing.assert_allclose(result[1].to_numpy(), [1.0, 1.0, 1.0], atol=1e-6)


class TestDepth:
    """Tests for the bounce limit."""

    def test_depth_zero_is_black_for_any_ray(self):
        from src.pathtracer.core.integrator import trace_ray
        from src.pathtracer.scene.scenes import create_default_scene

        create_default_scene()
        for direction in [(0.0, 1.0, 0.0), (0.0, 0.0, -1.0), (0.3, -0.5, -1.0)]:
            assert trace_ray((0.0, 0.0, 0.0), direction, depth=0) == (0.0, 0.0, 0.0)

    def test_depth_zero_is_black_in_empty_scene(self):
        from src.pathtracer.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=0) == (0.0, 0.0, 0.0)

    def test_single_bounce_on_diffuse_is_black(self):
        """With depth 1 the scattered ray has no budget left."""
        from src.pathtracer.core.integrator import trace_ray
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=1) == (0.0, 0.0, 0.0)

    def test_mirror_bounce_to_sky(self):
        """A perfect mirror attenuates the sky seen in the reflected direction."""
        from src.pathtracer.core.integrator import trace_ray
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, -2.0), 1.0, (0.8, 0.6, 0.4), fuzz=0.0)

        # Head-on hit reflects straight back toward +z
        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=2)
        expected = np.array([0.8, 0.6, 0.4]) * _sky((0.0, 0.0, 1.0))
        np.testing.assert_allclose(color, expected, atol=1e-5)

        # Not enough depth to reach the sky after the bounce
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=1) == (0.0, 0.0, 0.0)


class TestMaterialDispatch:
    """Tests for scatter_material() dispatch."""

    def test_unknown_material_absorbs(self):
        from src.pathtracer.core.integrator import scatter_material
        from src.pathtracer.core.ray import vec3

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            _, _, did_scatter = scatter_material(42, vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0), 1)
            result[None] = did_scatter

        test_kernel()
        assert result[None] == 0

    def test_dispatch_by_material_type(self):
        from src.pathtracer.core.integrator import scatter_material
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        diffuse = scene.add_lambertian_material((0.2, 0.4, 0.6))
        mirror = scene.add_metal_material((0.9, 0.8, 0.7), fuzz=0.0)
        glass = scene.add_dielectric_material(1.5)

        attenuations = ti.Vector.field(3, dtype=ti.f32, shape=3)
        directions = ti.Vector.field(3, dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel(m0: ti.i32, m1: ti.i32, m2: ti.i32):
            incident = vec3(1.0, -1.0, 0.0)
            normal = vec3(0.0, 1.0, 0.0)
            d0, a0, _ = scatter_material(m0, incident, normal, 1)
            d1, a1, _ = scatter_material(m1, incident, normal, 1)
            d2, a2, _ = scatter_material(m2, incident, normal, 1)
            attenuations[0] = a0
            attenuations[1] = a1
            attenuations[2] = a2
            directions[0] = d0
            directions[1] = d1
            directions[2] = d2

        test_kernel(diffuse, mirror, glass)
        np.testing.assert_allclose(attenuations[0].to_numpy(), [0.2, 0.4, 0.6], atol=1e-6)
        np.testing.assert_allclose(attenuations[1].to_numpy(), [0.9, 0.8, 0.7], atol=1e-6)
        np.testing.assert_allclose(attenuations[2].to_numpy(), [1.0, 1.0, 1.0], atol=1e-6)
        inv_sqrt2 = 1.0 / np.sqrt(2.0)
        np.testing.assert_allclose(directions[1].to_numpy(), [inv_sqrt2, inv_sqrt2, 0.0], atol=1e-5)


class TestDielectricInvisibility:
    """An index-1 dielectric sphere does not change what a ray sees."""

    @pytest.mark.parametrize("depth", [3, 10, 50])
    def test_index_one_sphere_matches_empty_scene(self, depth):
        from src.pathtracer.core.integrator import trace_ray
        from src.pathtracer.scene.manager import SceneManager

        direction = (0.0, 0.0, -1.0)
        empty = trace_ray((0.0, 0.0, 0.0), direction, depth=depth)

        scene = SceneManager()
        scene.add_dielectric_sphere((0.0, 0.0, -2.0), 0.5, ior=1.0)
        with_sphere = trace_ray((0.0, 0.0, 0.0), direction, depth=depth)

        np.testing.assert_allclose(with_sphere, empty, atol=1e-4)


class TestRenderTarget:
    """Tests for render target setup and scanline rendering."""

    def test_requires_setup(self):
        from src.pathtracer.core.integrator import get_image_numpy, render_scanline

        with pytest.raises(RuntimeError, match="setup_render_target"):
            render_scanline(0, samples_per_pixel=1, max_depth=1)
        with pytest.raises(RuntimeError, match="setup_render_target"):
            get_image_numpy()

    @pytest.mark.parametrize("size", [(0, 10), (10, -1), (4096, 10), (10, 4096)])
    def test_invalid_dimensions(self, size):
        from src.pathtracer.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(*size)

    def test_scanline_out_of_range(self):
        from src.pathtracer.core.integrator import render_scanline, setup_render_target

        setup_render_target(4, 3)
        with pytest.raises(ValueError, match="outside the image"):
            render_scanline(3, samples_per_pixel=1, max_depth=1)
        with pytest.raises(ValueError, match="samples_per_pixel"):
            render_scanline(0, samples_per_pixel=0, max_depth=1)

    def test_render_sky_image_orientation(self):
        """The top row of the image is bluer than the bottom row."""
        from src.pathtracer.camera.camera import Camera, setup_camera
        from src.pathtracer.core.integrator import (
            get_image_dimensions,
            get_image_numpy,
            render_scanline,
            setup_render_target,
        )

        setup_camera(Camera(aspect_ratio=2.0))
        setup_render_target(8, 4)
        assert get_image_dimensions() == (8, 4)
        for j in reversed(range(4)):
            render_scanline(j, samples_per_pixel=4, max_depth=5)

        image = get_image_numpy()
        assert image.shape == (4, 8, 3)
        assert image.dtype == np.float64
        # Red fades toward the zenith, so the top row has less red
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()
        np.testing.assert_allclose(image[:, :, 2], 1.0, atol=1e-6)
