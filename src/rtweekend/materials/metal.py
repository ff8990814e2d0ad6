"""Metal (specular reflective) material implementation.

Perfect metals (fuzz=0) produce mirror reflections, while fuzzier metals
perturb the reflected direction by a random offset inside a sphere scaled by
the fuzz parameter.

The reflection formula is:
    R = I - 2(I . N)N

where I is the incident direction and N is the surface normal. A fuzzed
direction that ends up on or below the surface is absorbed.

Example:
    >>> from rtweekend.materials.metal import Metal
    >>> gold = Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
    >>> # Inside a Taichi kernel:
    >>> # direction, attenuation, did_scatter, state = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal, state
    >>> # )
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from rtweekend.core.ray import near_zero, reflect
from rtweekend.core.rng import random_in_unit_sphere
from rtweekend.materials.base import MaterialType, validate_color, validate_finite

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Metal:
    """Metal (specular reflective) material properties.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: The surface fuzziness in [0, 1].
            0 = perfect mirror, 1 = maximum fuzziness.
    """

    material_type: ClassVar[MaterialType] = MaterialType.METAL

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_color("Albedo", self.albedo))

        fuzz = validate_finite("Fuzz", self.fuzz)
        if fuzz < 0.0 or fuzz > 1.0:
            raise ValueError(
                f"Fuzz = {fuzz} is outside [0, 1]. "
                "Fuzz must be between 0 (perfect mirror) and 1 (maximum fuzz)."
            )
        object.__setattr__(self, "fuzz", fuzz)


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Compute the scattered ray direction for a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The fuzziness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal facing the incoming ray (normalized).
        state: The random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, state) where:
        - scattered_direction: The reflected direction (normalized), or zero
          when absorbed.
        - attenuation: The albedo.
        - did_scatter: 1 if the ray left above the surface, 0 if absorbed.
        - state: The advanced random stream state.
    """
    reflected = reflect(tm.normalize(incident_direction), normal)

    offset, s = random_in_unit_sphere(state)
    scattered_direction = reflected + fuzz * offset

    did_scatter = 1
    if near_zero(scattered_direction) or tm.dot(scattered_direction, normal) <= 0.0:
        # Fuzzed into the surface
        did_scatter = 0
        scattered_direction = vec3(0.0, 0.0, 0.0)
    else:
        scattered_direction = tm.normalize(scattered_direction)

    attenuation = albedo

    return scattered_direction, attenuation, did_scatter, s
