"""The closed set of surface materials.

A material is exactly one of Lambertian, Metal or Dielectric. Materials are
immutable and shared by reference: any number of spheres may point at the same
instance, and the World stores each distinct instance once in its material
table.
"""

from typing import Union

from rtweekend.materials.dielectric import Dielectric
from rtweekend.materials.lambertian import Lambertian
from rtweekend.materials.metal import Metal

Material = Union[Lambertian, Metal, Dielectric]

MATERIAL_CLASSES = (Lambertian, Metal, Dielectric)


def validate_material(material: object) -> None:
    """Raise ValueError unless material is one of the supported variants."""
    if not isinstance(material, MATERIAL_CLASSES):
        raise ValueError(
            f"Unsupported material {material!r}; "
            "expected Lambertian, Metal or Dielectric"
        )
