"""Dielectric (glass/water) material implementation.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when sin(theta_t) > 1

The material randomly chooses between reflection and refraction based on
the Fresnel reflectance probability, which increases at grazing angles.
At an index-matched boundary (refraction ratio of exactly 1) there is no
Fresnel reflection at all and the ray passes straight through.

Example:
    >>> from rtweekend.materials.dielectric import Dielectric
    >>> glass = Dielectric(ior=1.5)
    >>> # Inside a Taichi kernel:
    >>> # direction, attenuation, state = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face, state
    >>> # )
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from rtweekend.core.ray import reflect, refract, schlick_reflectance
from rtweekend.core.rng import next_float
from rtweekend.materials.base import MaterialType, validate_finite

# Type alias for 3D vectors
vec3 = tm.vec3

# Refraction ratios this close to 1 are treated as index-matched
INDEX_MATCH_EPSILON = 1e-6


@dataclass(frozen=True)
class Dielectric:
    """Dielectric (glass/water) material properties.

    Attributes:
        ior: Index of refraction. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    material_type: ClassVar[MaterialType] = MaterialType.DIELECTRIC

    ior: float = 1.5

    def __post_init__(self) -> None:
        ior = validate_finite("Index of refraction", self.ior)
        if ior <= 0.0:
            raise ValueError(
                f"Index of refraction = {ior} must be positive."
            )
        object.__setattr__(self, "ior", ior)


@ti.func
def refraction_ratio_for(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio n_incident / n_transmitted for a ray entering or leaving the medium.

    Entering (front_face=1) goes from vacuum into the material: 1 / ior.
    Leaving (front_face=0) goes from the material into vacuum: ior.
    """
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def will_reflect(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Return 1 if total internal reflection forces a reflection."""
    refraction_ratio = refraction_ratio_for(ior, front_face)
    unit_direction = tm.normalize(incident_direction)

    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    sin_theta = tm.sqrt(tm.max(0.0, 1.0 - cos_theta * cos_theta))

    return 1 if refraction_ratio * sin_theta > 1.0 else 0


@ti.func
def fresnel_reflectance(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Probability of reflection when refraction is possible.

    Schlick's approximation, except at an index-matched boundary where the
    reflectance is exactly zero.
    """
    refraction_ratio = refraction_ratio_for(ior, front_face)
    unit_direction = tm.normalize(incident_direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)

    reflectance = schlick_reflectance(cos_theta, refraction_ratio)
    if ti.abs(refraction_ratio - 1.0) < INDEX_MATCH_EPSILON:
        reflectance = 0.0
    return reflectance


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Compute the scattered ray direction for a dielectric surface.

    Dielectrics never absorb; the attenuation is white.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal facing the incoming ray (normalized).
        front_face: 1 if the ray hits the outside of the surface,
            0 if it hits from inside the material.
        state: The random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, state) where:
        - scattered_direction: The reflected or refracted direction (normalized).
        - attenuation: (1, 1, 1).
        - state: The advanced random stream state.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    unit_direction = tm.normalize(incident_direction)
    refraction_ratio = refraction_ratio_for(ior, front_face)

    cannot_refract = will_reflect(ior, unit_direction, normal, front_face)
    reflectance = fresnel_reflectance(ior, unit_direction, normal, front_face)

    # Always draw so every dielectric hit consumes the same amount of the stream
    u, s = next_float(state)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract == 1 or u < reflectance:
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, refraction_ratio)

    scattered_direction = tm.normalize(scattered_direction)

    return scattered_direction, attenuation, s
