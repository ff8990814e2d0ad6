"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    rng: Explicit per-sample random streams
    integrator: Light transport kernel and render target
    renderer: Render entry point and sample accumulation loop
    buffer: The rendered pixel buffer handed to callers

All compute-intensive operations use Taichi kernels; the backend parallelizes
the per-pixel loop.
"""

from .buffer import PixelBuffer, quantize
from .ray import (
    NEAR_ZERO_EPSILON,
    Ray,
    Vec3Tuple,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .rng import (
    next_float,
    random_in_unit_disk,
    random_in_unit_sphere,
    seed_stream,
    wang_hash,
)

# Note: integrator and renderer are NOT imported here because they allocate
# Taichi fields and must only be imported after ti.init().
#
# For rendering, use:
#   from rtweekend.core.renderer import Renderer, render

__all__ = [
    "PixelBuffer",
    "quantize",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "Vec3Tuple",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "NEAR_ZERO_EPSILON",
    "wang_hash",
    "seed_stream",
    "next_float",
    "random_in_unit_sphere",
    "random_in_unit_disk",
]
