"""Scene-level primitive intersection testing.

This module stores the scene's spheres in Taichi fields and provides the
closest-hit query the integrator runs for every ray, plus small query kernels
that expose the same device code to host-side callers.

Each sphere carries the material id of its surface; the material table itself
lives in :mod:`rtweekend.materials.registry`.

Note: this module allocates Taichi fields and must only be imported after
ti.init().

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtweekend.scene.intersection import load_spheres, query_scene
    >>> load_spheres([(0.0, 0.0, -1.0)], [0.5], [0])
    >>> query_scene((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 1e-3, 1e10)[0]
    0.5
"""

from collections.abc import Sequence

import numpy as np
import taichi as ti
import taichi.math as tm

from rtweekend.core.ray import Vec3Tuple
from rtweekend.geometry.sphere import HitRecord, SphereData, hit_sphere, miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Result slots for host-side queries
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_front_face = ti.field(dtype=ti.i32, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())

# (t, point, normal, front_face, material_id)
QueryResult = tuple[float, Vec3Tuple, Vec3Tuple, bool, int]


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive count to zero. The field data is not cleared but will
    be overwritten by the next upload.
    """
    num_spheres[None] = 0


def load_spheres(
    centers: Sequence[Vec3Tuple],
    radii: Sequence[float],
    material_ids: Sequence[int],
) -> None:
    """Replace the scene's spheres.

    Sphere order is preserved; it decides ties between equidistant hits.

    Args:
        centers: Center of each sphere.
        radii: Radius of each sphere.
        material_ids: Material table index of each sphere.

    Raises:
        ValueError: If the sequences differ in length or exceed MAX_SPHERES.
    """
    count = len(centers)
    if len(radii) != count or len(material_ids) != count:
        raise ValueError("centers, radii and material_ids must have the same length")
    if count > MAX_SPHERES:
        raise ValueError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded: {count}")

    center_array = np.zeros((MAX_SPHERES, 3), dtype=np.float32)
    radius_array = np.zeros(MAX_SPHERES, dtype=np.float32)
    id_array = np.full(MAX_SPHERES, -1, dtype=np.int32)
    if count > 0:
        center_array[:count] = np.asarray(centers, dtype=np.float32).reshape(count, 3)
        radius_array[:count] = np.asarray(radii, dtype=np.float32)
        id_array[:count] = np.asarray(material_ids, dtype=np.int32)

    sphere_centers.from_numpy(center_array)
    sphere_radii.from_numpy(radius_array)
    sphere_material_ids.from_numpy(id_array)
    num_spheres[None] = count


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Find the closest sphere hit along a ray.

    Tests every sphere, shrinking the admissible t_max to the closest hit so
    far. A later sphere must be strictly closer to replace an earlier one, so
    equidistant hits resolve to the first sphere in scene order.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        The closest HitRecord, or a miss record.
    """
    closest_t = t_max
    result = miss_record()

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        sphere = SphereData(
            center=sphere_centers[i],
            radius=sphere_radii[i],
            material_id=sphere_material_ids[i],
        )
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    return result


# =============================================================================
# Host-side queries
# =============================================================================


@ti.func
def _store_query(rec: HitRecord):
    _query_hit[None] = rec.hit
    _query_t[None] = rec.t
    _query_point[None] = rec.point
    _query_normal[None] = rec.normal
    _query_front_face[None] = rec.front_face
    _query_material_id[None] = rec.material_id


@ti.kernel
def _query_scene_kernel(origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32):
    # Outer loop keeps the sphere loop serial; closest_t is loop-carried
    for _ in range(1):
        _store_query(intersect_scene(origin, direction, t_min, t_max))


@ti.kernel
def _query_sphere_kernel(
    center: vec3,
    radius: ti.f32,
    origin: vec3,
    direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
):
    sphere = SphereData(center=center, radius=radius, material_id=0)
    _store_query(hit_sphere(origin, direction, sphere, t_min, t_max))


def _to_vec3(v: Sequence[float]) -> vec3:
    return vec3(float(v[0]), float(v[1]), float(v[2]))


def _read_vector(field: "ti.MatrixField") -> Vec3Tuple:
    value = field[None]
    return (float(value[0]), float(value[1]), float(value[2]))


def _read_query() -> QueryResult | None:
    if _query_hit[None] == 0:
        return None
    return (
        float(_query_t[None]),
        _read_vector(_query_point),
        _read_vector(_query_normal),
        bool(_query_front_face[None]),
        int(_query_material_id[None]),
    )


def query_scene(
    ray_origin: Vec3Tuple,
    ray_direction: Vec3Tuple,
    t_min: float,
    t_max: float,
) -> QueryResult | None:
    """Run the closest-hit query for one ray against the loaded spheres.

    Returns:
        (t, point, normal, front_face, material_id), or None on a miss.
    """
    _query_scene_kernel(_to_vec3(ray_origin), _to_vec3(ray_direction), t_min, t_max)
    return _read_query()


def query_sphere(
    center: Vec3Tuple,
    radius: float,
    ray_origin: Vec3Tuple,
    ray_direction: Vec3Tuple,
    t_min: float,
    t_max: float,
) -> QueryResult | None:
    """Intersect one ray with a single sphere that is not part of the scene.

    Returns:
        (t, point, normal, front_face, 0), or None on a miss.
    """
    _query_sphere_kernel(
        _to_vec3(center),
        radius,
        _to_vec3(ray_origin),
        _to_vec3(ray_direction),
        t_min,
        t_max,
    )
    return _read_query()
