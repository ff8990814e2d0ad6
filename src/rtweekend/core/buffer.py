"""The rendered pixel buffer.

A PixelBuffer is the value a render hands back to its caller: a
height x width grid of RGB colors, already gamma corrected (square root per
channel) and clamped to [0, 1]. Row 0 is the top of the image and column 0 is
the left edge.

Collaborators that need 8-bit integers quantize each channel with

    q(c) = min(int(256 * c), 255)

which maps [0, 1] onto 0..255 in 256 equal-width bins.

Example:
    >>> import numpy as np
    >>> buffer = PixelBuffer(np.zeros((2, 3, 3), dtype=np.float32))
    >>> buffer.width, buffer.height
    (3, 2)
    >>> buffer.to_uint8().dtype
    dtype('uint8')
"""

import numpy as np
import numpy.typing as npt

from rtweekend.core.ray import Vec3Tuple


def quantize(c: float) -> int:
    """Map a channel value in [0, 1] to an 8-bit integer."""
    return min(int(256.0 * c), 255)


class PixelBuffer:
    """Immutable post-gamma RGB image.

    Args:
        pixels: Array of shape (height, width, 3) with values in [0, 1].

    Raises:
        ValueError: If the array is not (height, width, 3) with positive
            height and width.
    """

    def __init__(self, pixels: npt.ArrayLike) -> None:
        array = np.array(pixels, dtype=np.float32)
        if array.ndim != 3 or array.shape[2] != 3:
            raise ValueError(f"Pixel array must have shape (height, width, 3), got {array.shape}")
        if array.shape[0] < 1 or array.shape[1] < 1:
            raise ValueError(f"Pixel buffer must be at least 1x1, got {array.shape}")
        array.setflags(write=False)
        self._pixels = array

    @classmethod
    def gradient(cls, width: int, height: int) -> "PixelBuffer":
        """Placeholder image: red ramps left to right, green ramps top to bottom.

        Shown by the live preview before the first render completes.
        """
        xs = np.arange(width, dtype=np.float32) / width
        ys = np.arange(height, dtype=np.float32) / height
        pixels = np.zeros((height, width, 3), dtype=np.float32)
        pixels[..., 0] = xs[np.newaxis, :]
        pixels[..., 1] = ys[:, np.newaxis]
        return cls(pixels)

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def shape(self) -> tuple[int, int, int]:
        return (self.height, self.width, 3)

    def pixel(self, x: int, y: int) -> Vec3Tuple:
        """Color at column x, row y (top-left origin).

        Raises:
            IndexError: If (x, y) lies outside the buffer.
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} buffer")
        r, g, b = self._pixels[y, x]
        return (float(r), float(g), float(b))

    def to_numpy(self) -> npt.NDArray[np.float32]:
        """Read-only (height, width, 3) float32 view of the pixels."""
        return self._pixels

    def to_uint8(self) -> npt.NDArray[np.uint8]:
        """Quantize every channel with q(c) = min(int(256 * c), 255)."""
        scaled = np.floor(self._pixels.astype(np.float64) * 256.0)
        return np.clip(scaled, 0, 255).astype(np.uint8)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return bool(np.array_equal(self._pixels, other._pixels))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"
