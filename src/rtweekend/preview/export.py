"""Image export utilities for rendered pixel buffers.

Supported formats:
    - PPM, plain text (P3) or binary (P6), 8-bit per channel
    - PNG (8-bit via Pillow)

Every writer quantizes channels with the PixelBuffer's documented mapping
q(c) = min(int(256 * c), 255). Write failures are reported through the
returned ExportResult instead of raising, and never touch the buffer.

Example:
    >>> from rtweekend.preview.export import save_ppm
    >>> result = save_ppm(buffer, "image.ppm")
    >>> if not result.ok:
    ...     print(result.error)
"""

import logging
import os
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from rtweekend.core.buffer import PixelBuffer

logger = logging.getLogger(__name__)

# Maximum channel value written to PPM headers
PPM_MAX_VALUE = 255


@dataclass(frozen=True)
class ExportResult:
    """Outcome of writing a buffer to disk.

    Attributes:
        ok: True if the file was written completely.
        path: Destination path.
        error: Description of the failure when ok is False.
    """

    ok: bool
    path: str
    error: str | None = None


def _failure(path: str, exc: OSError) -> ExportResult:
    logger.error("Failed to write %s: %s", path, exc)
    return ExportResult(ok=False, path=path, error=str(exc))


def ppm_header(buffer: PixelBuffer, magic: str = "P3") -> str:
    """Header block: magic token, dimensions and max value, one per line."""
    return f"{magic}\n{buffer.width} {buffer.height}\n{PPM_MAX_VALUE}\n"


def save_ppm(
    buffer: PixelBuffer,
    filepath: str | os.PathLike[str],
    *,
    binary: bool = False,
) -> ExportResult:
    """Save a buffer as a portable pixmap.

    The plain format writes one "r g b" integer triple per line, rows from
    top to bottom and pixels left to right. The binary format writes the
    same bytes packed after a P6 header.

    Args:
        buffer: The rendered buffer.
        filepath: Output file path.
        binary: Write P6 instead of P3.

    Returns:
        ExportResult describing success or the OS error.
    """
    path = os.fspath(filepath)
    pixels = buffer.to_uint8()

    try:
        if binary:
            with open(path, "wb") as f:
                f.write(ppm_header(buffer, "P6").encode("ascii"))
                f.write(pixels.tobytes())
        else:
            with open(path, "w", encoding="ascii") as f:
                f.write(ppm_header(buffer, "P3"))
                np.savetxt(f, pixels.reshape(-1, 3), fmt="%d", delimiter=" ")
    except OSError as exc:
        return _failure(path, exc)

    logger.info("Wrote %dx%d PPM to %s", buffer.width, buffer.height, path)
    return ExportResult(ok=True, path=path)


def save_png(buffer: PixelBuffer, filepath: str | os.PathLike[str]) -> ExportResult:
    """Save a buffer as an 8-bit RGB PNG file.

    Args:
        buffer: The rendered buffer.
        filepath: Output file path.

    Returns:
        ExportResult describing success or the OS error.
    """
    path = os.fspath(filepath)
    pil_image = PILImage.fromarray(buffer.to_uint8())

    try:
        pil_image.save(path, format="PNG")
    except OSError as exc:
        return _failure(path, exc)

    logger.info("Wrote %dx%d PNG to %s", buffer.width, buffer.height, path)
    return ExportResult(ok=True, path=path)


def load_ppm(filepath: str | os.PathLike[str]) -> npt.NDArray[np.uint8]:
    """Read a P3 or P6 file written by save_ppm back as (height, width, 3) uint8.

    Raises:
        ValueError: If the file is not a P3/P6 pixmap with max value 255.
    """
    with open(filepath, "rb") as f:
        data = f.read()

    # Header lines: magic, "width height", max value
    parts = data.split(b"\n", 3)
    if len(parts) < 4 or parts[0] not in (b"P3", b"P6"):
        raise ValueError(f"{os.fspath(filepath)} is not a P3/P6 pixmap")
    magic, dimensions, max_value_text, body = parts
    width, height = (int(v) for v in dimensions.split())
    max_value = int(max_value_text)
    if max_value != PPM_MAX_VALUE:
        raise ValueError(f"Unsupported max value {max_value}")

    if magic == b"P3":
        values = np.array(body.split(), dtype=np.int64)
    else:
        values = np.frombuffer(body, dtype=np.uint8)
    return values.astype(np.uint8).reshape(height, width, 3)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
