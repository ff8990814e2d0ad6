"""Render entry point and sample accumulation loop.

``render`` turns a World and a Camera into a PixelBuffer. The Renderer class
keeps the image size and sampling settings between renders and adds batched
progress reporting for interactive use.

Every pixel sample draws from its own random stream derived from the seed,
the pixel coordinates and the sample index, so a render is bit-identical for
a given seed no matter how the backend schedules its threads or how the
samples are split into batches.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtweekend.core.renderer import render
    >>> from rtweekend.scene.presets import create_three_spheres_scene
    >>>
    >>> world, camera = create_three_spheres_scene(aspect_ratio=16.0 / 9.0)
    >>> buffer = render(world, camera, 400, 225, samples_per_pixel=10, max_depth=50)
    >>> buffer.pixel(200, 112)
"""

import logging
import time
from collections.abc import Callable, Generator

import numpy as np

from rtweekend.camera.thin_lens import Camera, setup_camera
from rtweekend.core.buffer import PixelBuffer
from rtweekend.core.integrator import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    get_image_numpy,
    get_total_samples,
    render_samples,
    setup_render_target,
)
from rtweekend.scene.world import World

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]

# Relative aspect-ratio mismatch tolerated before warning
_ASPECT_TOLERANCE = 0.01


def finalize_image(linear: np.ndarray) -> PixelBuffer:
    """Gamma correct (square root) and clamp a linear image into a PixelBuffer."""
    corrected = np.sqrt(np.maximum(linear, 0.0))
    return PixelBuffer(np.clip(corrected, 0.0, 1.0))


class Renderer:
    """Renders Worlds at a fixed image size and sampling configuration.

    The renderer delegates to the global integrator buffers (which are Taichi
    fields), so only one render can be in flight at a time.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Samples averaged per pixel. 0 is treated as 1.
        max_depth: Maximum surface interactions per path.
        seed: Seed of the per-sample random streams.
    """

    def __init__(
        self,
        width: int,
        height: int,
        samples_per_pixel: int = 10,
        max_depth: int = 50,
        seed: int = 0,
    ) -> None:
        """Initialize the renderer.

        Raises:
            ValueError: If a dimension is outside 1..2048, or samples_per_pixel
                or max_depth is negative.
        """
        _validate_dimensions(width, height)
        if samples_per_pixel < 0:
            raise ValueError(f"samples_per_pixel must be non-negative, got {samples_per_pixel}")
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")

        self._width = width
        self._height = height
        self.samples_per_pixel = samples_per_pixel
        self.max_depth = max_depth
        self.seed = seed
        self._last_buffer: PixelBuffer | None = None

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def last_buffer(self) -> PixelBuffer | None:
        """The buffer produced by the most recent completed render."""
        return self._last_buffer

    @property
    def effective_samples(self) -> int:
        return max(self.samples_per_pixel, 1)

    def resize(self, width: int, height: int) -> None:
        """Change the image size used by subsequent renders.

        Raises:
            ValueError: If a dimension is outside 1..2048.
        """
        _validate_dimensions(width, height)
        self._width = width
        self._height = height

    def _prepare(self, world: World, camera: Camera) -> None:
        image_aspect = self._width / self._height
        if abs(camera.aspect_ratio - image_aspect) > _ASPECT_TOLERANCE * image_aspect:
            logger.warning(
                "Camera aspect ratio %.4f does not match image aspect ratio %.4f; "
                "the image will be stretched",
                camera.aspect_ratio,
                image_aspect,
            )
        world.upload()
        setup_camera(camera)
        setup_render_target(self._width, self._height)

    def render_progressive(
        self,
        world: World,
        camera: Camera,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, PixelBuffer]:
        """Render, yielding progress after each batch of samples.

        Args:
            world: The scene to render.
            camera: The camera to render through.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Returns:
            The finished PixelBuffer (as the generator's return value).

        Example:
            >>> for current, target in renderer.render_progressive(world, camera, 10):
            ...     print(f"Progress: {current}/{target} samples")
            >>> buffer = renderer.last_buffer
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")

        self._prepare(world, camera)
        target_samples = self.effective_samples

        logger.info(
            "Rendering %dx%d, %d spp, max depth %d, %d spheres",
            self._width,
            self._height,
            target_samples,
            self.max_depth,
            len(world),
        )
        start = time.perf_counter()

        remaining = target_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_samples(batch, self.max_depth, self.seed)
            remaining -= batch
            yield (get_total_samples(), target_samples)

        buffer = finalize_image(get_image_numpy())
        self._last_buffer = buffer

        logger.info("Render finished in %.2fs", time.perf_counter() - start)
        return buffer

    def render(
        self,
        world: World,
        camera: Camera,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> PixelBuffer:
        """Render a World through a Camera.

        Args:
            world: The scene to render.
            camera: The camera to render through.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback called after each batch with
                (current_total_samples, target_total_samples).

        Returns:
            The post-gamma, clamped PixelBuffer.
        """
        progress = self.render_progressive(world, camera, batch_size)
        while True:
            try:
                current, target = next(progress)
            except StopIteration as done:
                return done.value
            if callback is not None:
                callback(current, target)

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.samples_per_pixel}, max_depth={self.max_depth})"
        )


def _validate_dimensions(width: int, height: int) -> None:
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )


def render(
    world: World,
    camera: Camera,
    width: int,
    height: int,
    samples_per_pixel: int,
    max_depth: int,
    *,
    seed: int = 0,
    batch_size: int = 1,
    callback: ProgressCallback | None = None,
) -> PixelBuffer:
    """Render a World through a Camera into a new PixelBuffer.

    Args:
        world: The scene to render.
        camera: The camera to render through.
        width: Image width in pixels (1 to 2048).
        height: Image height in pixels (1 to 2048).
        samples_per_pixel: Jittered samples averaged per pixel; 0 renders one.
        max_depth: Maximum surface interactions per path; 0 renders black.
        seed: Seed of the per-sample random streams.
        batch_size: Number of samples between progress callbacks.
        callback: Optional progress callback (current, target).

    Returns:
        A PixelBuffer of gamma-corrected colors in [0, 1], row 0 at the top.

    Raises:
        ValueError: If the dimensions are invalid.
    """
    renderer = Renderer(width, height, samples_per_pixel, max_depth, seed)
    return renderer.render(world, camera, batch_size=batch_size, callback=callback)
