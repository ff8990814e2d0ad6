"""Integration tests for the end-to-end rendering pipeline.

This module renders complete scenes and checks properties of the final
buffers: the analytic sky around a sphere's silhouette, the invisibility of an
index-matched glass sphere, convergence with more samples and the preset
scenes.

Tests are designed to be fast (low resolution, few samples) while still
exercising the full pipeline.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

import numpy as np
import pytest

SIZE = 32
CENTER = (SIZE - 1) / 2.0


def _pixel_distances() -> np.ndarray:
    ys, xs = np.mgrid[0:SIZE, 0:SIZE]
    return np.hypot(xs - CENTER, ys - CENTER)


class TestSingleSphereSilhouette:
    """A unit-distance sphere of radius 0.5 seen through a 90 degree pinhole."""

    def _render(self, square_camera, gray):
        from rtweekend.core.renderer import render
        from rtweekend.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5, gray)
        return render(world, square_camera, SIZE, SIZE, samples_per_pixel=2, max_depth=5)

    def test_background_outside_silhouette(self, square_camera, gray):
        buffer = self._render(square_camera, gray)
        pixels = buffer.to_numpy().astype(np.float64)
        outside = pixels[_pixel_distances() > 11.0]

        # Sky blue is 1 everywhere on the gradient
        np.testing.assert_allclose(outside[:, 2], 1.0, atol=1e-5)
        # Red and green fall off along the same blend factor: 0.5 a and 0.3 a
        r_lin = outside[:, 0] ** 2
        g_lin = outside[:, 1] ** 2
        np.testing.assert_allclose(0.3 * (1.0 - r_lin), 0.5 * (1.0 - g_lin), atol=1e-5)

    def test_sphere_inside_silhouette(self, square_camera, gray):
        buffer = self._render(square_camera, gray)
        pixels = buffer.to_numpy()
        inside = pixels[_pixel_distances() < 6.0]

        assert len(inside) > 0
        # A 50% gray surface returns at most half the sky's blue after one bounce
        assert np.all(inside[:, 2] < 0.75)

    def test_silhouette_is_centered(self, square_camera, gray):
        buffer = self._render(square_camera, gray)
        dark = buffer.to_numpy()[:, :, 2] < 0.9
        ys, xs = np.nonzero(dark)
        assert xs.mean() == pytest.approx(CENTER, abs=1.0)
        assert ys.mean() == pytest.approx(CENTER, abs=1.0)


class TestIndexMatchedDielectric:
    def test_glass_with_unit_ior_is_invisible(self, square_camera):
        from rtweekend.core.renderer import render
        from rtweekend.materials import Dielectric
        from rtweekend.scene.world import World

        empty = render(World(), square_camera, SIZE, SIZE, samples_per_pixel=2, max_depth=5, seed=4)

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5, Dielectric(1.0))
        with_sphere = render(world, square_camera, SIZE, SIZE, samples_per_pixel=2, max_depth=5, seed=4)

        np.testing.assert_allclose(with_sphere.to_numpy(), empty.to_numpy(), atol=1e-4)


class TestConvergence:
    def test_variance_shrinks_with_more_samples(self, square_camera, gray):
        """Spread between independently seeded renders falls as samples grow."""
        from rtweekend.core.renderer import render
        from rtweekend.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5, gray)

        def spread(samples: int) -> float:
            renders = np.stack(
                [
                    render(world, square_camera, 16, 16, samples, 5, seed=seed).to_numpy()
                    for seed in range(6)
                ]
            )
            return float(renders.var(axis=0).mean())

        coarse = spread(1)
        fine = spread(16)
        assert coarse > 0.0
        assert fine < 0.25 * coarse


class TestPresetScenes:
    def test_three_spheres_scene(self):
        from rtweekend.core.renderer import render
        from rtweekend.materials import Dielectric, Lambertian, Metal
        from rtweekend.scene.presets import create_three_spheres_scene

        world, camera = create_three_spheres_scene(aspect_ratio=2.0)
        assert len(world) == 4
        assert {type(m) for m in world.materials} == {Lambertian, Metal, Dielectric}
        assert camera.vfov == 90.0

        buffer = render(world, camera, 32, 16, samples_per_pixel=2, max_depth=8)
        pixels = buffer.to_numpy()
        assert buffer.shape == (16, 32, 3)
        # Yellow-green ground at the bottom, sky at the top
        assert pixels[-1, :, 2].mean() < pixels[0, :, 2].mean()

    def test_random_spheres_scene_is_reproducible(self):
        from rtweekend.scene.presets import create_random_spheres_scene

        world_a, camera = create_random_spheres_scene(seed=5)
        world_b, _ = create_random_spheres_scene(seed=5)

        assert world_a.spheres == world_b.spheres
        # Ground, three landmarks and up to 22 x 22 small spheres
        assert 4 < len(world_a) <= 4 + 22 * 22
        assert camera.lookfrom == (13.0, 2.0, 3.0)
        assert camera.aperture == 0.05
        assert camera.focus_dist == 10.0
