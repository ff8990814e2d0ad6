"""Material type tags and shared parameter validation."""

import math
from collections.abc import Sequence
from enum import IntEnum


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the integrator to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


def validate_color(name: str, color: Sequence[float]) -> tuple[float, float, float]:
    """Check that a reflectance color has three components in [0, 1].

    Args:
        name: Parameter name used in the error message.
        color: The (R, G, B) sequence to check.

    Returns:
        The color as a tuple of floats.

    Raises:
        ValueError: If the color does not have three components or any
            component is outside [0, 1].
    """
    if len(color) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(color)}")

    for i, component in enumerate(color):
        if not (0.0 <= component <= 1.0):
            raise ValueError(
                f"{name} component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return (float(color[0]), float(color[1]), float(color[2]))


def validate_finite(name: str, value: float) -> float:
    """Reject NaN and infinite scalars."""
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")
    return float(value)
