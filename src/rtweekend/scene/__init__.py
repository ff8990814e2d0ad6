"""Scene module: the World container and its device-side intersection.

Components:
    world: Ordered sphere collection with an interned material table
    intersection: Device sphere arrays and closest-hit queries
    presets: Ready-made (World, Camera) pairs

A World is plain host data until it is uploaded; the render kernel only ever
reads the Structure-of-Arrays copy held in the intersection module.
"""

from .world import World

# Note: intersection and presets are NOT imported here because they allocate
# Taichi fields (directly or through the camera) and must only be imported
# after ti.init().
#
# For ready-made scenes, use:
#   from rtweekend.scene.presets import create_three_spheres_scene

__all__ = [
    "World",
]
