"""Ready-made scenes.

Each factory returns a (World, Camera) pair that can be handed straight to
``render``:

    three spheres: a diffuse sphere flanked by glass and metal spheres, resting
        on a large diffuse ground sphere
    random spheres: the cover image, a field of small random spheres around
        three large ones, seen through a narrow lens with shallow depth of field

Note: This module imports the camera module, which allocates Taichi fields,
so it must be imported after ti.init().

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtweekend.scene.presets import create_three_spheres_scene
    >>> world, camera = create_three_spheres_scene(aspect_ratio=16.0 / 9.0)
    >>> len(world)
    4
"""

import numpy as np

from rtweekend.camera.thin_lens import Camera
from rtweekend.materials import Dielectric, Lambertian, Metal
from rtweekend.scene.world import World

# Ground sphere shared by both scenes
GROUND_RADIUS = 100.0
GLASS_IOR = 1.5

# Random scene grid: small spheres at (a + 0.9 u, 0.2, b + 0.9 v) for a, b in this range
RANDOM_GRID_EXTENT = 11
SMALL_SPHERE_RADIUS = 0.2


def create_three_spheres_scene(aspect_ratio: float = 16.0 / 9.0) -> tuple[World, Camera]:
    """Create the three spheres scene.

    Args:
        aspect_ratio: Image width divided by height.

    Returns:
        Tuple of (world, camera) with the camera at the origin looking down -z.
    """
    world = World()
    world.add_sphere((0.0, -100.5, -1.0), GROUND_RADIUS, Lambertian((0.8, 0.8, 0.0)))
    world.add_sphere((0.0, 0.0, -1.0), 0.5, Lambertian((0.1, 0.2, 0.5)))
    world.add_sphere((-1.0, 0.0, -1.0), 0.5, Dielectric(GLASS_IOR))
    world.add_sphere((1.0, 0.0, -1.0), 0.5, Metal((0.8, 0.6, 0.2), fuzz=0.0))

    camera = Camera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
    )
    return world, camera


def create_random_spheres_scene(
    aspect_ratio: float = 16.0 / 9.0,
    seed: int | None = 0,
) -> tuple[World, Camera]:
    """Create the random spheres scene.

    Small spheres are scattered on a jittered grid; each one is diffuse
    (80%), metal (15%) or glass (5%). Spheres that would overlap the large
    metal sphere are skipped.

    Args:
        aspect_ratio: Image width divided by height.
        seed: Seed for the scene layout. None draws fresh entropy.

    Returns:
        Tuple of (world, camera).
    """
    rng = np.random.default_rng(seed)
    world = World()
    world.add_sphere((0.0, -1000.0, 0.0), 1000.0, Lambertian((0.5, 0.5, 0.5)))

    glass = Dielectric(GLASS_IOR)
    landmark = np.array([4.0, 0.2, 0.0])

    for a in range(-RANDOM_GRID_EXTENT, RANDOM_GRID_EXTENT):
        for b in range(-RANDOM_GRID_EXTENT, RANDOM_GRID_EXTENT):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), SMALL_SPHERE_RADIUS, b + 0.9 * rng.random()])
            if np.linalg.norm(center - landmark) <= 0.9:
                continue

            if choose_mat < 0.8:
                albedo = rng.random(3) * rng.random(3)
                material = Lambertian(tuple(float(c) for c in albedo))
            elif choose_mat < 0.95:
                albedo = rng.uniform(0.5, 1.0, 3)
                material = Metal(tuple(float(c) for c in albedo), fuzz=float(rng.uniform(0.0, 0.5)))
            else:
                material = glass
            world.add_sphere(tuple(float(c) for c in center), SMALL_SPHERE_RADIUS, material)

    world.add_sphere((0.0, 1.0, 0.0), 1.0, glass)
    world.add_sphere((-4.0, 1.0, 0.0), 1.0, Lambertian((0.4, 0.2, 0.1)))
    world.add_sphere((4.0, 1.0, 0.0), 1.0, Metal((0.7, 0.6, 0.5), fuzz=0.0))

    camera = Camera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.05,
        focus_dist=10.0,
    )
    return world, camera


SCENES = {
    "three-spheres": create_three_spheres_scene,
    "random-spheres": create_random_spheres_scene,
}
