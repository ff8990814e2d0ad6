"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so they run inside the
render kernel. The host-side ``Sphere`` is the value scenes are built from;
``Sphere.hit`` runs the same device code for a single query.

Ray-object intersection follows the pattern:
    record = hit_shape(ray_origin, ray_direction, shape_data, t_min, t_max)
"""

from .sphere import (
    HitRecord,
    Sphere,
    SphereData,
    SurfaceHit,
    hit_sphere,
    make_sphere,
    miss_record,
)

__all__ = [
    "Sphere",
    "SphereData",
    "SurfaceHit",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "miss_record",
]
