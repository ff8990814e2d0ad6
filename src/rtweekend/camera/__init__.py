"""Camera module for view and ray generation.

Components:
    thin_lens: Look-at camera with a lens disk for defocus blur

Camera responsibilities:
    - Transform (s, t) image coordinates to world-space rays
    - Sample ray origins over the lens aperture
    - Support look-at positioning with up vector

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .thin_lens import (
    Camera,
    get_camera_info,
    get_camera_origin,
    get_ray,
    setup_camera,
)

__all__ = [
    "Camera",
    "setup_camera",
    "get_ray",
    "get_camera_origin",
    "get_camera_info",
]
