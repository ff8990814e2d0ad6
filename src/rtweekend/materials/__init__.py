"""Materials module for surface scattering models.

Components:
    base: MaterialType tags and parameter validation
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like refraction with Schlick reflectance
    material: The closed Material union
    registry: Device material table and scatter dispatch

Every scatter function takes and returns the random stream state, so a
material never touches shared generator state.
"""

from .base import MaterialType, validate_color
from .dielectric import (
    Dielectric,
    fresnel_reflectance,
    refraction_ratio_for,
    scatter_dielectric,
    will_reflect,
)
from .lambertian import Lambertian, scatter_lambertian
from .material import MATERIAL_CLASSES, Material, validate_material
from .metal import Metal, scatter_metal

# Note: registry is NOT imported here because it allocates Taichi fields and
# must only be imported after ti.init().

__all__ = [
    "MaterialType",
    "Material",
    "MATERIAL_CLASSES",
    "validate_material",
    "validate_color",
    # Lambertian
    "Lambertian",
    "scatter_lambertian",
    # Metal
    "Metal",
    "scatter_metal",
    # Dielectric
    "Dielectric",
    "scatter_dielectric",
    "fresnel_reflectance",
    "refraction_ratio_for",
    "will_reflect",
]
