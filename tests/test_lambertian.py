"""Unit tests for the Lambertian material.

Tests cover:
- Scattered directions are unit length and leave above the surface
- Attenuation equals the albedo
- Cosine-weighted distribution around the normal
- Albedo validation
"""

import numpy as np
import pytest
import taichi as ti

N_SAMPLES = 4096


class TestLambertianScatter:
    def test_scatter_directions(self):
        from rtweekend.core.rng import seed_stream
        from rtweekend.materials.lambertian import scatter_lambertian

        directions = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)
        attenuations = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for k in range(N_SAMPLES):
                state = seed_stream(ti.u32(3), k, 0, 0)
                albedo = ti.math.vec3(0.8, 0.3, 0.1)
                normal = ti.math.vec3(0.0, 1.0, 0.0)
                direction, attenuation, state = scatter_lambertian(albedo, normal, state)
                directions[k] = direction
                attenuations[k] = attenuation

        test_kernel()
        d = directions.to_numpy()
        lengths = np.linalg.norm(d, axis=1)
        np.testing.assert_allclose(lengths, 1.0, atol=1e-5)

        # normal + point inside the unit sphere never points below the surface
        assert np.all(d[:, 1] >= -1e-6)
        # Cosine weighting concentrates directions near the normal
        assert d[:, 1].mean() > 0.5

        np.testing.assert_allclose(attenuations.to_numpy(), np.tile([0.8, 0.3, 0.1], (N_SAMPLES, 1)), atol=1e-6)

    def test_scatter_is_symmetric_around_normal(self):
        from rtweekend.core.rng import seed_stream
        from rtweekend.materials.lambertian import scatter_lambertian

        directions = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for k in range(N_SAMPLES):
                state = seed_stream(ti.u32(5), k, 0, 0)
                direction, _, state = scatter_lambertian(
                    ti.math.vec3(0.5, 0.5, 0.5), ti.math.vec3(0.0, 0.0, 1.0), state
                )
                directions[k] = direction

        test_kernel()
        d = directions.to_numpy()
        assert abs(d[:, 0].mean()) < 0.05
        assert abs(d[:, 1].mean()) < 0.05


class TestLambertianValidation:
    def test_valid_albedo(self):
        from rtweekend.materials import Lambertian, MaterialType

        material = Lambertian((0.0, 0.5, 1.0))
        assert material.albedo == (0.0, 0.5, 1.0)
        assert material.material_type == MaterialType.LAMBERTIAN

    @pytest.mark.parametrize("albedo", [(1.2, 0.5, 0.5), (-0.1, 0.5, 0.5), (0.5, 0.5)])
    def test_invalid_albedo(self, albedo):
        from rtweekend.materials import Lambertian

        with pytest.raises(ValueError):
            Lambertian(albedo)

    def test_equal_materials_hash_equal(self):
        from rtweekend.materials import Lambertian

        assert Lambertian((0.1, 0.2, 0.3)) == Lambertian([0.1, 0.2, 0.3])
        assert hash(Lambertian((0.1, 0.2, 0.3))) == hash(Lambertian([0.1, 0.2, 0.3]))
