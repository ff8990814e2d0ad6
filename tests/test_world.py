"""Tests for the World container and closest-hit queries."""

import pytest


class TestWorldConstruction:
    def test_empty_world(self):
        from rtweekend.scene.world import World

        world = World()
        assert len(world) == 0
        assert world.spheres == ()
        assert world.materials == ()

    def test_materials_are_interned_by_value(self):
        from rtweekend.materials import Lambertian, Metal
        from rtweekend.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5, Lambertian((0.5, 0.5, 0.5)))
        world.add_sphere((1.0, 0.0, -1.0), 0.5, Lambertian((0.5, 0.5, 0.5)))
        world.add_sphere((2.0, 0.0, -1.0), 0.5, Metal((0.5, 0.5, 0.5), fuzz=0.1))

        assert len(world) == 3
        assert len(world.materials) == 2
        assert world.material_id(Lambertian((0.5, 0.5, 0.5))) == 0
        assert world.material_id(Metal((0.5, 0.5, 0.5), fuzz=0.1)) == 1

    def test_unknown_material_id_raises(self, gray):
        from rtweekend.materials import Dielectric
        from rtweekend.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5, gray)
        with pytest.raises(KeyError):
            world.material_id(Dielectric(1.5))

    def test_iteration_preserves_insertion_order(self, gray):
        from rtweekend.scene.world import World

        world = World()
        first = world.add_sphere((0.0, 0.0, -1.0), 0.5, gray)
        second = world.add_sphere((0.0, 0.0, -3.0), 0.5, gray)
        assert list(world) == [first, second]

    def test_add_rejects_non_sphere(self):
        from rtweekend.scene.world import World

        with pytest.raises(ValueError):
            World().add((0.0, 0.0, 0.0))

    def test_add_sphere_validates(self, gray):
        from rtweekend.scene.world import World

        world = World()
        with pytest.raises(ValueError):
            world.add_sphere((0.0, 0.0, -1.0), 0.0, gray)
        assert len(world) == 0


class TestWorldHit:
    def test_empty_world_misses(self):
        from rtweekend.scene.world import World

        assert World().hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) is None

    def test_closest_sphere_wins(self):
        from rtweekend.materials import Lambertian, Metal
        from rtweekend.scene.world import World

        far = Lambertian((0.2, 0.2, 0.2))
        near = Metal((0.9, 0.9, 0.9))
        world = World()
        # Far sphere added first so ordering cannot explain the result
        world.add_sphere((0.0, 0.0, -5.0), 0.5, far)
        world.add_sphere((0.0, 0.0, -2.0), 0.5, near)

        hit = world.hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit is not None
        assert hit.t == pytest.approx(1.5, abs=1e-5)
        assert hit.material == near

    def test_equidistant_hits_resolve_to_first_added(self):
        from rtweekend.materials import Lambertian
        from rtweekend.scene.world import World

        first = Lambertian((0.1, 0.1, 0.1))
        second = Lambertian((0.9, 0.9, 0.9))
        world = World()
        world.add_sphere((0.0, 0.0, -2.0), 0.5, first)
        world.add_sphere((0.0, 0.0, -2.0), 0.5, second)

        hit = world.hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit is not None
        assert hit.material == first

    def test_hit_respects_interval(self, gray):
        from rtweekend.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -2.0), 0.5, gray)

        assert world.hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=1.0) is None
        hit = world.hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_min=2.0)
        assert hit is not None
        assert hit.t == pytest.approx(2.5, abs=1e-5)
        assert hit.front_face is False

    def test_upload_fills_device_tables(self, gray):
        from rtweekend.materials.registry import get_material_count
        from rtweekend.scene.intersection import get_sphere_count
        from rtweekend.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5, gray)
        world.add_sphere((0.0, -100.5, -1.0), 100.0, gray)
        world.upload()

        assert get_sphere_count() == 2
        assert get_material_count() == 1


class TestDeviceTables:
    def test_load_spheres_rejects_mismatched_lengths(self):
        from rtweekend.scene.intersection import load_spheres

        with pytest.raises(ValueError):
            load_spheres([(0.0, 0.0, 0.0)], [1.0, 2.0], [0])

    def test_load_spheres_rejects_too_many(self):
        from rtweekend.scene.intersection import MAX_SPHERES, load_spheres

        count = MAX_SPHERES + 1
        with pytest.raises(ValueError):
            load_spheres([(0.0, 0.0, 0.0)] * count, [1.0] * count, [0] * count)

    def test_load_materials_records_types(self):
        from rtweekend.materials import Dielectric, Lambertian, MaterialType, Metal
        from rtweekend.materials.registry import (
            load_materials,
            material_fuzz,
            material_iors,
            material_types,
        )

        load_materials([Lambertian((0.5, 0.5, 0.5)), Metal((0.5, 0.5, 0.5), 0.25), Dielectric(1.33)])

        assert material_types[0] == MaterialType.LAMBERTIAN
        assert material_types[1] == MaterialType.METAL
        assert material_types[2] == MaterialType.DIELECTRIC
        assert material_fuzz[1] == pytest.approx(0.25)
        assert material_iors[2] == pytest.approx(1.33)

    def test_load_materials_rejects_unknown(self):
        from rtweekend.materials.registry import load_materials

        with pytest.raises(ValueError):
            load_materials([object()])
