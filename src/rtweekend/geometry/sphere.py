"""Sphere primitive with robust ray-sphere intersection.

This module provides the device-side sphere record and intersection function,
using the robust quadratic formula from Ray Tracing Gems to avoid
floating-point artifacts, plus the host-side ``Sphere`` that scenes are built
from.

The robust quadratic formula avoids catastrophic cancellation when b^2 is
nearly equal to 4ac by using a reformulated calculation that maintains
numerical stability.

Example:
    >>> from rtweekend.geometry.sphere import Sphere
    >>> from rtweekend.materials import Lambertian
    >>> ball = Sphere(center=(0.0, 0.0, -1.0), radius=0.5,
    ...               material=Lambertian((0.5, 0.5, 0.5)))
    >>> # After ti.init():
    >>> hit = ball.hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
    >>> hit.t
    0.5
"""

import math
from dataclasses import dataclass
import taichi as ti
import taichi.math as tm

from rtweekend.core.ray import Vec3Tuple
from rtweekend.materials.material import Material, validate_material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Default ray interval for host-side queries
DEFAULT_T_MIN = 1e-3
DEFAULT_T_MAX = 1e10


@ti.dataclass
class SphereData:
    """A sphere as stored on the device.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material_id: Index into the material table.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The surface normal at the intersection point (unit length,
            always points against the incoming ray).
            Only valid if hit == 1.
        front_face: Whether the ray hit the front face (1) or back face (0).
            Front face means the ray hit from outside the sphere.
            Only valid if hit == 1.
        material_id: Material of the hit primitive, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def miss_record() -> HitRecord:
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 without catastrophic cancellation.

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: SphereData,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection using robust quadratic formula.

    The ray-sphere intersection is found by solving:
        |ray_origin + t * ray_direction - center|^2 = radius^2

    which expands to a*t^2 + 2*h*t + c = 0 with
        a = dot(direction, direction)
        h = dot(direction, oc)
        c = dot(oc, oc) - radius^2
        oc = origin - center

    A discriminant of zero or less is a miss, so exactly grazing rays never
    register. Only roots strictly inside (t_min, t_max) count; the nearer root
    is preferred and the farther one is tried when the nearer is out of range.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Lower bound of the admissible interval (excluded).
        t_max: Upper bound of the admissible interval (excluded).

    Returns:
        A HitRecord. Check the hit field to determine if intersection occurred.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0
    material_id = -1

    if discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = t1
            valid = (t > t_min) and (t < t_max)

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            material_id = sphere.material_id

            outward_normal = (hit_point - sphere.center) / sphere.radius

            # Front face: ray direction and outward normal point in opposite directions
            if tm.dot(ray_direction, outward_normal) > 0.0:
                is_front_face = 0
                hit_normal = -outward_normal
            else:
                is_front_face = 1
                hit_normal = outward_normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
        material_id=material_id,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material_id: ti.i32) -> SphereData:
    """Create a device sphere record inside a Taichi kernel."""
    return SphereData(center=center, radius=radius, material_id=material_id)


# =============================================================================
# Host-side API
# =============================================================================


@dataclass(frozen=True)
class SurfaceHit:
    """Result of a host-side intersection query.

    Attributes:
        t: Ray parameter of the hit.
        point: Hit point in world space.
        normal: Unit normal facing the incoming ray.
        front_face: True if the ray arrived from outside the surface.
        material: The material of the surface that was hit.
    """

    t: float
    point: Vec3Tuple
    normal: Vec3Tuple
    front_face: bool
    material: Material


@dataclass(frozen=True)
class Sphere:
    """A sphere with a center, a positive radius and a surface material.

    Attributes:
        center: Center point (x, y, z).
        radius: Radius, must be positive.
        material: One of Lambertian, Metal or Dielectric.
    """

    center: Vec3Tuple
    radius: float
    material: Material

    def __post_init__(self) -> None:
        if len(self.center) != 3:
            raise ValueError(f"Sphere center must have 3 components, got {len(self.center)}")
        center = tuple(float(c) for c in self.center)
        if not all(math.isfinite(c) for c in center):
            raise ValueError(f"Sphere center must be finite, got {center}")
        radius = float(self.radius)
        if not math.isfinite(radius) or radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")

        validate_material(self.material)
        object.__setattr__(self, "center", center)
        object.__setattr__(self, "radius", radius)

    def hit(
        self,
        ray_origin: Vec3Tuple,
        ray_direction: Vec3Tuple,
        t_min: float = DEFAULT_T_MIN,
        t_max: float = DEFAULT_T_MAX,
    ) -> SurfaceHit | None:
        """Intersect a ray with this sphere alone.

        Runs the same device code the renderer uses. Requires ti.init().

        Returns:
            The SurfaceHit, or None if the ray misses within (t_min, t_max).
        """
        from rtweekend.scene.intersection import query_sphere

        result = query_sphere(self.center, self.radius, ray_origin, ray_direction, t_min, t_max)
        if result is None:
            return None
        t, point, normal, front_face, _ = result
        return SurfaceHit(
            t=t, point=point, normal=normal, front_face=front_face, material=self.material
        )
