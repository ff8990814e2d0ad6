"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters incident light around the surface normal. The
scattered direction is the hit normal plus a uniform random point inside the
unit sphere, which approximates a cosine-weighted distribution without any
explicit PDF bookkeeping. The attenuation is simply the albedo and the
material never absorbs a ray outright.

Example:
    >>> from rtweekend.materials.lambertian import Lambertian
    >>> red = Lambertian(albedo=(0.8, 0.3, 0.3))
    >>> # Inside a Taichi kernel:
    >>> # direction, attenuation, state = scatter_lambertian(albedo, normal, state)
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from rtweekend.core.ray import near_zero
from rtweekend.core.rng import random_in_unit_sphere
from rtweekend.materials.base import MaterialType, validate_color

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Lambertian:
    """Lambertian (ideal diffuse) material properties.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
            Represents the fraction of light reflected for each color channel.
    """

    material_type: ClassVar[MaterialType] = MaterialType.LAMBERTIAN

    albedo: tuple[float, float, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_color("Albedo", self.albedo))


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, state: ti.u32):
    """Sample a scattered ray direction for a Lambertian surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The surface normal at the hit point, facing the incoming ray.
        state: The random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, state) where:
        - scattered_direction: normalize(normal + random point in unit sphere).
        - attenuation: The albedo.
        - state: The advanced random stream state.
    """
    offset, s = random_in_unit_sphere(state)
    scattered_direction = normal + offset

    # Catch degenerate scatter direction (offset almost exactly -normal)
    if near_zero(scattered_direction):
        scattered_direction = normal

    scattered_direction = tm.normalize(scattered_direction)
    attenuation = albedo

    return scattered_direction, attenuation, s
