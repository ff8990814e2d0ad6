"""Matplotlib-based preview display for rendered buffers.

The buffers handed out by the renderer are already gamma corrected and
clamped, so display is a direct imshow with no further processing.

Example:
    >>> from rtweekend.preview.display import show_buffer
    >>> buffer = render(world, camera, 400, 225, 10, 50)
    >>> show_buffer(buffer, title="Three spheres")
"""

import numpy as np
import numpy.typing as npt

from rtweekend.core.buffer import PixelBuffer


def buffer_to_field_layout(buffer: PixelBuffer) -> npt.NDArray[np.float32]:
    """Rearrange a buffer into Taichi field layout.

    Taichi fields use (x, y) indexing with the origin at the bottom-left,
    while buffers are (row, column) with row 0 at the top.

    Returns:
        Contiguous float32 array of shape (width, height, 3).
    """
    return np.ascontiguousarray(
        np.transpose(np.flipud(buffer.to_numpy()), (1, 0, 2)), dtype=np.float32
    )


def show_buffer(
    buffer: PixelBuffer,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> None:
    """Display a rendered buffer as a Matplotlib figure.

    Args:
        buffer: The rendered buffer.
        title: Figure title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    ax.imshow(buffer.to_numpy(), interpolation="nearest")
    ax.axis("off")
    ax.set_title(title if title is not None else f"Render {buffer.width}x{buffer.height}")

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    buffer_a: PixelBuffer,
    buffer_b: PixelBuffer,
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display side-by-side comparison of two buffers with difference view.

    Args:
        buffer_a: First buffer.
        buffer_b: Second buffer (same size as buffer_a).
        labels: Labels for the two images.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two buffers.
    """
    import matplotlib.pyplot as plt

    from rtweekend.preview.export import compute_rmse

    image_a = buffer_a.to_numpy()
    image_b = buffer_b.to_numpy()
    rmse = compute_rmse(image_a, image_b)

    diff = np.abs(image_a.astype(np.float64) - image_b.astype(np.float64))
    diff_amplified = np.clip(diff * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(image_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(image_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
