"""Device-side material table and scatter dispatch.

Materials live in a Structure-of-Arrays table indexed by material id. The
integrator calls ``scatter_material`` with the id stored on the hit record,
which switches on the MaterialType tag and forwards to the matching scatter
function.

Note: this module allocates Taichi fields and must only be imported after
ti.init().
"""

from collections.abc import Sequence

import numpy as np
import taichi as ti
import taichi.math as tm

from rtweekend.materials.base import MaterialType
from rtweekend.materials.dielectric import Dielectric, scatter_dielectric
from rtweekend.materials.lambertian import Lambertian, scatter_lambertian
from rtweekend.materials.material import Material, validate_material
from rtweekend.materials.metal import Metal, scatter_metal

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum number of distinct materials in a scene
MAX_MATERIALS = 1024

# Material table: Structure of Arrays layout
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_fuzz = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_iors = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Forget every material in the table."""
    num_materials[None] = 0


def load_materials(materials: Sequence[Material]) -> None:
    """Upload a material list to the device table.

    The position of each material in the sequence is its material id.

    Args:
        materials: The materials, in id order.

    Raises:
        ValueError: If there are more than MAX_MATERIALS materials or an entry
            is not one of the supported variants.
    """
    count = len(materials)
    if count > MAX_MATERIALS:
        raise ValueError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded: {count}")

    types = np.zeros(MAX_MATERIALS, dtype=np.int32)
    albedos = np.zeros((MAX_MATERIALS, 3), dtype=np.float32)
    fuzz = np.zeros(MAX_MATERIALS, dtype=np.float32)
    iors = np.ones(MAX_MATERIALS, dtype=np.float32)

    for idx, material in enumerate(materials):
        validate_material(material)
        types[idx] = int(material.material_type)
        if isinstance(material, Lambertian):
            albedos[idx] = material.albedo
        elif isinstance(material, Metal):
            albedos[idx] = material.albedo
            fuzz[idx] = material.fuzz
        elif isinstance(material, Dielectric):
            albedos[idx] = (1.0, 1.0, 1.0)
            iors[idx] = material.ior

    material_types.from_numpy(types)
    material_albedos.from_numpy(albedos)
    material_fuzz.from_numpy(fuzz)
    material_iors.from_numpy(iors)
    num_materials[None] = count


def get_material_count() -> int:
    """Get the number of materials in the table."""
    return int(num_materials[None])


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    return material_types[material_id]


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Dispatch to the scatter function of the material's variant.

    Args:
        material_id: Index into the material table.
        incident_direction: The incoming ray direction.
        normal: The surface normal facing the incoming ray (normalized).
        front_face: 1 if the ray hit the outside of the surface, 0 otherwise.
        state: The random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, state) where:
        - scattered_direction: The new ray direction (normalized).
        - attenuation: The color attenuation for this bounce.
        - did_scatter: 1 if the ray scattered, 0 if it was absorbed.
        - state: The advanced random stream state.
    """
    mat_type = get_material_type(material_id)

    # Default values (unknown tag absorbs)
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    s = state

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, s = scatter_lambertian(
            material_albedos[material_id], normal, s
        )
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter, s = scatter_metal(
            material_albedos[material_id],
            material_fuzz[material_id],
            incident_direction,
            normal,
            s,
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, s = scatter_dielectric(
            material_iors[material_id], incident_direction, normal, front_face, s
        )
        did_scatter = 1

    return scattered_direction, attenuation, did_scatter, s
