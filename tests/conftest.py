"""Pytest configuration for raytracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear the uploaded scene, material table and render target around each test."""
    # Import here so the field-allocating modules load after ti.init()
    from rtweekend.core.integrator import clear_render_target
    from rtweekend.materials.registry import clear_materials
    from rtweekend.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def gray():
    from rtweekend.materials import Lambertian

    return Lambertian((0.5, 0.5, 0.5))


@pytest.fixture
def square_camera():
    """Pinhole camera at the origin looking down -z with a 90 degree field of view."""
    from rtweekend.camera.thin_lens import Camera

    return Camera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=1.0,
    )
