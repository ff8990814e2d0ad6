"""Explicit random streams for Monte Carlo sampling inside Taichi kernels.

Every pixel sample owns an independent 32-bit xorshift stream seeded from
``(seed, i, j, sample)`` through a Wang hash. The stream state is passed into
and returned from every sampling function, so no generator state is shared
between parallel pixel computations and a render is bit-reproducible for a
given seed no matter how the backend schedules its threads.

Example:
    >>> @ti.kernel
    ... def sample() -> ti.f32:
    ...     state = seed_stream(ti.u32(7), 0, 0, 0)
    ...     u, state = next_float(state)
    ...     return u
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# 2^-24: maps the top 24 bits of a 32-bit word onto [0, 1)
INV_2_POW_24 = 1.0 / 16777216.0

# Upper bound on rejection-sampling attempts (acceptance is ~52% for the sphere)
MAX_REJECTION_ATTEMPTS = 64


@ti.func
def wang_hash(value: ti.u32) -> ti.u32:
    """Thomas Wang's 32-bit integer hash."""
    h = (value ^ ti.u32(61)) ^ (value >> ti.u32(16))
    h = h * ti.u32(9)
    h = h ^ (h >> ti.u32(4))
    h = h * ti.u32(0x27D4EB2D)
    h = h ^ (h >> ti.u32(15))
    return h


@ti.func
def seed_stream(seed: ti.u32, i: ti.i32, j: ti.i32, sample: ti.i32) -> ti.u32:
    """Derive the initial stream state for one pixel sample.

    Args:
        seed: The per-render seed.
        i: Pixel column.
        j: Pixel row (0 = bottom).
        sample: Index of the sample within the pixel.

    Returns:
        A non-zero xorshift state.
    """
    h = wang_hash(ti.cast(sample, ti.u32))
    h = wang_hash(ti.cast(j, ti.u32) + h)
    h = wang_hash(ti.cast(i, ti.u32) + h)
    h = wang_hash(seed + h)
    if h == ti.u32(0):
        h = ti.u32(1)
    return h


@ti.func
def next_float(state: ti.u32):
    """Advance the stream and draw a uniform float in [0, 1).

    Args:
        state: The current stream state (non-zero).

    Returns:
        A tuple (u, new_state).
    """
    s = state
    s = s ^ (s << ti.u32(13))
    s = s ^ (s >> ti.u32(17))
    s = s ^ (s << ti.u32(5))
    u = ti.cast(s >> ti.u32(8), ti.f32) * INV_2_POW_24
    return u, s


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Uniform random point strictly inside the unit sphere.

    Uses rejection sampling over the enclosing cube.

    Args:
        state: The current stream state.

    Returns:
        A tuple (point, new_state) with length(point) < 1.
    """
    s = state
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, s = next_float(s)
            y, s = next_float(s)
            z, s = next_float(s)
            p = vec3(2.0 * x - 1.0, 2.0 * y - 1.0, 2.0 * z - 1.0)
            if tm.dot(p, p) < 1.0:
                found = True
    return p, s


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Uniform random point (x, y, 0) strictly inside the unit disk.

    Used for lens sampling by the thin-lens camera.

    Args:
        state: The current stream state.

    Returns:
        A tuple (point, new_state) with x^2 + y^2 < 1.
    """
    s = state
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, s = next_float(s)
            y, s = next_float(s)
            p = vec3(2.0 * x - 1.0, 2.0 * y - 1.0, 0.0)
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    return p, s
