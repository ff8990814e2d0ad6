"""Light transport kernel and render target.

This module implements the per-pixel sampling kernel. Every sample shoots a
jittered camera ray and follows it through the scene, bouncing off surfaces
according to their materials, until it escapes to the sky, is absorbed, or
runs out of bounces.

The bounce loop is the iterative form of the depth-bounded recursion

    ray_color(ray, depth) = 0                                   if depth <= 0
                          = attenuation * ray_color(scattered, depth - 1)
                                                                if hit and scattered
                          = 0                                   if hit and absorbed
                          = background(ray)                     if missed

with the product of attenuations carried forward as a throughput.

The sky gradient is the only light source: there are no emitters.

Note: this module allocates Taichi fields and must only be imported after
ti.init().

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtweekend.core.integrator import (
    ...     get_image_numpy, render_samples, setup_render_target
    ... )
    >>> world.upload()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_samples(num_samples=10, max_depth=50, seed=0)
    >>> linear = get_image_numpy()
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from rtweekend.camera.thin_lens import get_ray
from rtweekend.core.ray import Vec3Tuple
from rtweekend.core.rng import next_float, random_in_unit_disk, seed_stream
from rtweekend.materials.registry import scatter_material
from rtweekend.scene.intersection import intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min suppresses self-intersection at the origin of scattered rays
T_MIN = 1e-3
T_MAX = 1e10

# Sky gradient endpoints: white at the horizon blending to light blue overhead
HORIZON_COLOR = (1.0, 1.0, 1.0)
SKY_COLOR = (0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Running mean of linear radiance, indexed (x, y) with y = 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Number of samples averaged into _color_buffer
_samples_taken = ti.field(dtype=ti.i32, shape=())

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers are
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT to avoid Taichi kernel
    recompilation issues.

    Args:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is zero, negative, or exceeds the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _samples_taken[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def get_total_samples() -> int:
    """Get the number of samples per pixel accumulated so far."""
    return int(_samples_taken[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Background
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky gradient seen by a ray that escapes the scene.

    Linear blend between HORIZON_COLOR and SKY_COLOR by a = 0.5 * (y + 1),
    where y is the vertical component of the unit direction.
    """
    unit_direction = tm.normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    horizon = vec3(HORIZON_COLOR[0], HORIZON_COLOR[1], HORIZON_COLOR[2])
    sky = vec3(SKY_COLOR[0], SKY_COLOR[1], SKY_COLOR[2])
    return (1.0 - a) * horizon + a * sky


def sky_gradient(direction: Vec3Tuple) -> Vec3Tuple:
    """Host-side evaluation of the sky gradient for a direction."""
    d = np.asarray(direction, dtype=np.float64)
    a = 0.5 * (d[1] / np.linalg.norm(d) + 1.0)
    color = (1.0 - a) * np.asarray(HORIZON_COLOR) + a * np.asarray(SKY_COLOR)
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Light Transport
# =============================================================================


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32, state: ti.u32):
    """Estimate the radiance arriving along a ray.

    At most max_depth surface interactions are processed. A path that is
    still bouncing when the depth runs out contributes black, so
    max_depth = 0 yields black for every ray.

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized).
        max_depth: Maximum number of surface interactions.
        state: The random stream state.

    Returns:
        A tuple (color, state).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction
    s = state

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background_color(ray_direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter, s = scatter_material(
                    rec.material_id, ray_direction, rec.normal, rec.front_face, s
                )

                if did_scatter == 0:
                    # Absorbed
                    active = 0
                else:
                    throughput = throughput * attenuation
                    ray_origin = rec.point
                    ray_direction = scattered_direction

    return color, s


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
    sample_index: ti.i32,
):
    """Trace one sample through every pixel and fold it into the running mean.

    Pixel (i, j) maps to s = (i + u) / (width - 1), t = (j + v) / (height - 1)
    with (u, v) uniform jitter in [0, 1). The divisor is floored at 1 for
    single-pixel dimensions.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum surface interactions per path.
        seed: Per-render seed.
        sample_index: Index of this sample within the pixel.
    """
    inv_w = 1.0 / ti.cast(ti.max(width - 1, 1), ti.f32)
    inv_h = 1.0 / ti.cast(ti.max(height - 1, 1), ti.f32)
    n = ti.cast(sample_index + 1, ti.f32)

    for i, j in ti.ndrange(width, height):
        state = seed_stream(seed, i, j, sample_index)

        jitter_u, state = next_float(state)
        jitter_v, state = next_float(state)
        s = (ti.cast(i, ti.f32) + jitter_u) * inv_w
        t = (ti.cast(j, ti.f32) + jitter_v) * inv_h

        lens_sample, state = random_in_unit_disk(state)
        ray = get_ray(s, t, lens_sample)

        color, state = ray_color(ray.origin, ray.direction, max_depth, state)

        # Clamp negative values (numerical errors)
        color = tm.max(color, vec3(0.0, 0.0, 0.0))

        # Check for NaN/Inf and replace with zero
        for c in ti.static(range(3)):
            if tm.isnan(color[c]) or tm.isinf(color[c]):
                color[c] = 0.0

        # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
        _color_buffer[i, j] += (color - _color_buffer[i, j]) / n


# =============================================================================
# Public Rendering API
# =============================================================================


def render_samples(num_samples: int, max_depth: int, seed: int) -> None:
    """Accumulate more samples per pixel into the render target.

    Sample indices continue from the samples already taken, so rendering
    4 samples in one call or in two calls of 2 gives the same image.

    Args:
        num_samples: Number of samples to add per pixel.
        max_depth: Maximum surface interactions per path.
        seed: Per-render seed (reduced to 32 bits).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    seed32 = seed & 0xFFFFFFFF

    for _ in range(num_samples):
        sample_index = int(_samples_taken[None])
        _render_one_spp(width, height, max_depth, seed32, sample_index)
        _samples_taken[None] = sample_index + 1


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the linear (pre-gamma) mean radiance as a NumPy array.

    The array shape is (height, width, 3) with dtype float32, row 0 at the
    top of the image. Values are not clamped.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()

    # Extract active region
    image = full_image[:width, :height, :]

    # Transpose from (width, height, 3) to (height, width, 3) for standard image format
    image = np.transpose(image, (1, 0, 2))

    # Flip vertically (Taichi uses bottom-left origin, images use top-left)
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)
