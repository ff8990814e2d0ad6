"""Tests for the light transport kernel and render target.

Tests cover:
- Sky gradient on the device and host
- Render target setup and validation
- Depth termination in ray_color
- Sample accumulation across calls
"""

import numpy as np
import pytest
import taichi as ti


class TestBackground:
    @pytest.mark.parametrize(
        "direction, expected",
        [
            ((0.0, 1.0, 0.0), (0.5, 0.7, 1.0)),
            ((0.0, -1.0, 0.0), (1.0, 1.0, 1.0)),
            ((0.0, 0.0, -1.0), (0.75, 0.85, 1.0)),
        ],
    )
    def test_sky_gradient(self, direction, expected):
        from rtweekend.core.integrator import background_color, sky_gradient

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(x: ti.f32, y: ti.f32, z: ti.f32):
            result[None] = background_color(ti.math.vec3(x, y, z))

        test_kernel(*direction)
        r = result[None]
        assert (r[0], r[1], r[2]) == pytest.approx(expected, abs=1e-6)
        assert sky_gradient(direction) == pytest.approx(expected)

    def test_background_ignores_direction_length(self):
        from rtweekend.core.integrator import sky_gradient

        assert sky_gradient((0.0, 3.0, 4.0)) == pytest.approx(sky_gradient((0.0, 0.6, 0.8)))


class TestRenderTarget:
    def test_setup_render_target(self):
        from rtweekend.core.integrator import (
            get_image_dimensions,
            get_total_samples,
            setup_render_target,
        )

        setup_render_target(64, 32)
        assert get_image_dimensions() == (64, 32)
        assert get_total_samples() == 0

    @pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (-1, 10), (4096, 10), (10, 4096)])
    def test_invalid_dimensions(self, width, height):
        from rtweekend.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(width, height)

    def test_image_shape_and_orientation(self):
        from rtweekend.camera.thin_lens import Camera, setup_camera
        from rtweekend.core.integrator import get_image_numpy, render_samples, setup_render_target
        from rtweekend.scene.world import World

        World().upload()
        setup_camera(
            Camera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vup=(0.0, 1.0, 0.0),
                vfov=90.0,
                aspect_ratio=2.0,
            )
        )
        setup_render_target(16, 8)
        render_samples(1, 5, seed=0)
        image = get_image_numpy()

        assert image.shape == (8, 16, 3)
        assert image.dtype == np.float32
        # Top rows look up into the blue sky, bottom rows toward the white horizon
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()


class TestRayColor:
    def _trace(self, max_depth):
        from rtweekend.core.integrator import ray_color
        from rtweekend.core.rng import seed_stream

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(depth: ti.i32):
            for k in range(1):
                state = seed_stream(ti.u32(0), k, 0, 0)
                color, state = ray_color(
                    ti.math.vec3(0.0, 0.0, 0.0), ti.math.vec3(0.0, 0.0, -1.0), depth, state
                )
                result[None] = color

        test_kernel(max_depth)
        r = result[None]
        return (float(r[0]), float(r[1]), float(r[2]))

    def test_miss_returns_sky(self):
        from rtweekend.scene.world import World

        World().upload()
        assert self._trace(5) == pytest.approx((0.75, 0.85, 1.0), abs=1e-6)

    def test_zero_depth_is_black(self):
        from rtweekend.scene.world import World

        World().upload()
        assert self._trace(0) == (0.0, 0.0, 0.0)

    def test_depth_one_on_geometry_is_black(self, gray):
        from rtweekend.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5, gray)
        world.upload()
        assert self._trace(1) == (0.0, 0.0, 0.0)

    def test_mirror_bounce_attenuates_sky(self):
        """A perfect mirror facing the camera reflects the sky behind it."""
        from rtweekend.materials import Metal
        from rtweekend.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5, Metal((0.5, 0.5, 0.5), fuzz=0.0))
        world.upload()
        # Reflected straight back along +z: sky gradient at y = 0 times albedo
        assert self._trace(2) == pytest.approx((0.375, 0.425, 0.5), abs=1e-5)


class TestAccumulation:
    def _setup(self, world):
        from rtweekend.camera.thin_lens import Camera, setup_camera
        from rtweekend.core.integrator import setup_render_target

        world.upload()
        setup_camera(
            Camera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vup=(0.0, 1.0, 0.0),
                vfov=90.0,
                aspect_ratio=1.0,
            )
        )
        setup_render_target(8, 8)

    def test_batches_match_single_call(self, gray):
        from rtweekend.core.integrator import get_image_numpy, get_total_samples, render_samples
        from rtweekend.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5, gray)

        self._setup(world)
        render_samples(4, 10, seed=3)
        single = get_image_numpy()
        assert get_total_samples() == 4

        self._setup(world)
        render_samples(1, 10, seed=3)
        render_samples(3, 10, seed=3)
        batched = get_image_numpy()

        np.testing.assert_allclose(single, batched, rtol=1e-6, atol=1e-7)

    def test_render_without_target_raises(self):
        from rtweekend.core import integrator

        integrator._render_target_initialized[None] = 0
        with pytest.raises(RuntimeError):
            integrator.render_samples(1, 1, seed=0)
