"""Thin-lens camera model with defocus blur.

The camera is positioned with look-at parameters and builds an orthonormal
basis (u, v, w) from them:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The image plane sits at ``focus_dist`` in front of the eye. Each ray starts
from a random point on a lens disk of radius ``aperture`` and passes through
the image-plane point for (s, t), so geometry on the focus plane stays sharp
and everything else blurs. With aperture 0 every ray starts at the eye and the
model is a pinhole camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtweekend.camera.thin_lens import Camera, setup_camera, get_ray
    >>>
    >>> camera = Camera(
    ...     lookfrom=(3.0, 3.0, 2.0),
    ...     lookat=(0.0, 0.0, -1.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=0.1,
    ...     focus_dist=5.2,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     state = seed_stream(ti.u32(0), 0, 0, 0)
    ...     lens_sample, state = random_in_unit_disk(state)
    ...     ray = get_ray(0.5, 0.5, lens_sample)  # Ray through image center
"""

import math
from dataclasses import dataclass, field

import numpy as np
import taichi as ti
import taichi.math as tm

from rtweekend.core.ray import Ray, Vec3Tuple, make_ray, vec3

# Minimum length of cross(vup, w) for a usable basis
_DEGENERATE_BASIS_EPSILON = 1e-8


def _as_vec(values: Vec3Tuple, name: str) -> np.ndarray:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    array = np.array(values, dtype=np.float64)
    if not np.all(np.isfinite(array)):
        raise ValueError(f"{name} must be finite, got {values}")
    return array


def _as_tuple(array: np.ndarray) -> Vec3Tuple:
    return (float(array[0]), float(array[1]), float(array[2]))


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class Camera:
    """Configuration for a thin-lens camera.

    The derived frame (basis, viewport and lens radius) is computed once at
    construction and never changes.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Radius of the lens disk. 0 gives a pinhole camera.
        focus_dist: Distance from the eye to the plane of perfect focus.
    """

    lookfrom: Vec3Tuple
    lookat: Vec3Tuple
    vup: Vec3Tuple
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_dist: float = 1.0

    u: Vec3Tuple = field(init=False, repr=False)
    v: Vec3Tuple = field(init=False, repr=False)
    w: Vec3Tuple = field(init=False, repr=False)
    horizontal: Vec3Tuple = field(init=False, repr=False)
    vertical: Vec3Tuple = field(init=False, repr=False)
    lower_left_corner: Vec3Tuple = field(init=False, repr=False)
    lens_radius: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        lookfrom = _as_vec(self.lookfrom, "lookfrom")
        lookat = _as_vec(self.lookat, "lookat")
        vup = _as_vec(self.vup, "vup")

        if not math.isfinite(self.aspect_ratio) or self.aspect_ratio <= 0.0:
            raise ValueError(f"Aspect ratio must be positive, got {self.aspect_ratio}")
        if not (0.0 < self.vfov < 180.0):
            raise ValueError(f"Vertical field of view must be in (0, 180) degrees, got {self.vfov}")
        if not math.isfinite(self.aperture) or self.aperture < 0.0:
            raise ValueError(f"Aperture must be non-negative, got {self.aperture}")
        if not math.isfinite(self.focus_dist) or self.focus_dist <= 0.0:
            raise ValueError(f"Focus distance must be positive, got {self.focus_dist}")

        # w points from lookat toward lookfrom (backward)
        w = lookfrom - lookat
        w_length = np.linalg.norm(w)
        if w_length == 0.0:
            raise ValueError("lookfrom and lookat must be different points")
        w = w / w_length

        # u points right (perpendicular to w and vup)
        u = np.cross(vup, w)
        u_length = np.linalg.norm(u)
        if u_length < _DEGENERATE_BASIS_EPSILON:
            raise ValueError("vup must not be parallel to the view direction")
        u = u / u_length

        # v points up in the camera's frame
        v = np.cross(w, u)

        theta = math.radians(self.vfov)
        h = math.tan(theta / 2.0)
        viewport_height = 2.0 * h
        viewport_width = self.aspect_ratio * viewport_height

        # The viewport lives on the focus plane
        horizontal = self.focus_dist * viewport_width * u
        vertical = self.focus_dist * viewport_height * v
        lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - self.focus_dist * w

        object.__setattr__(self, "lookfrom", _as_tuple(lookfrom))
        object.__setattr__(self, "lookat", _as_tuple(lookat))
        object.__setattr__(self, "vup", _as_tuple(vup))
        object.__setattr__(self, "u", _as_tuple(u))
        object.__setattr__(self, "v", _as_tuple(v))
        object.__setattr__(self, "w", _as_tuple(w))
        object.__setattr__(self, "horizontal", _as_tuple(horizontal))
        object.__setattr__(self, "vertical", _as_tuple(vertical))
        object.__setattr__(self, "lower_left_corner", _as_tuple(lower_left))
        object.__setattr__(self, "lens_radius", float(self.aperture))

    def ray_direction(self, s: float, t: float) -> Vec3Tuple:
        """Unit direction of the lens-center ray through image point (s, t).

        Host-side counterpart of get_ray with a zero lens sample.
        """
        target = (
            np.array(self.lower_left_corner)
            + s * np.array(self.horizontal)
            + t * np.array(self.vertical)
        )
        direction = target - np.array(self.lookfrom)
        return _as_tuple(direction / np.linalg.norm(direction))


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Viewport on the focus plane
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Upload a camera's derived frame to the device.

    Must be called before rendering, from Python (not from within a kernel).
    """
    _camera_origin[None] = list(camera.lookfrom)
    _camera_u[None] = list(camera.u)
    _camera_v[None] = list(camera.v)
    _camera_w[None] = list(camera.w)
    _viewport_horizontal[None] = list(camera.horizontal)
    _viewport_vertical[None] = list(camera.vertical)
    _lower_left_corner[None] = list(camera.lower_left_corner)
    _lens_radius[None] = camera.lens_radius


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32, lens_sample: vec3) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    The coordinates are normalized:
    - s = 0: left edge of image, s = 1: right edge
    - t = 0: bottom edge of image, t = 1: top edge

    Args:
        s: Horizontal coordinate in [0, 1] (left to right).
        t: Vertical coordinate in [0, 1] (bottom to top).
        lens_sample: Point in the unit disk (z ignored), usually drawn with
            random_in_unit_disk.

    Returns:
        A Ray from the sampled lens point through the focus-plane point for
        (s, t), with a normalized direction.
    """
    rd = _lens_radius[None] * lens_sample
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y
    origin = _camera_origin[None] + offset

    target = _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]
    direction = tm.normalize(target - origin)

    return make_ray(origin, direction)


@ti.func
def get_camera_origin() -> vec3:
    return _camera_origin[None]


# =============================================================================
# Utility Functions
# =============================================================================


def _read(vector_field: "ti.MatrixField") -> Vec3Tuple:
    value = vector_field[None]
    return (float(value[0]), float(value[1]), float(value[2]))


def get_camera_info() -> dict[str, Vec3Tuple | float]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left and
        lens_radius.
    """
    return {
        "origin": _read(_camera_origin),
        "u": _read(_camera_u),
        "v": _read(_camera_v),
        "w": _read(_camera_w),
        "horizontal": _read(_viewport_horizontal),
        "vertical": _read(_viewport_vertical),
        "lower_left": _read(_lower_left_corner),
        "lens_radius": float(_lens_radius[None]),
    }
