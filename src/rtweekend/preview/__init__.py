"""Preview module for output and visualization.

Components:
    display: Matplotlib-based static preview
    export: PPM and PNG writers
    interactive: Taichi GGUI key-driven preview window

The renderer hands out buffers that are already gamma corrected and clamped,
so every consumer here only quantizes or copies.

Example:
    >>> from rtweekend.preview import save_ppm, show_buffer
    >>> buffer = render(world, camera, 400, 225, 10, 50)
    >>> save_ppm(buffer, "image.ppm")
    >>> show_buffer(buffer)

For the interactive GGUI preview:
    >>> from rtweekend.preview import InteractivePreview
    >>> preview = InteractivePreview(400, 225, render_fn=my_render)
    >>> preview.run()
"""

from rtweekend.preview.display import (
    buffer_to_field_layout,
    show_buffer,
    show_comparison,
)
from rtweekend.preview.export import (
    ExportResult,
    compute_rmse,
    load_ppm,
    ppm_header,
    save_png,
    save_ppm,
)
from rtweekend.preview.interactive import InteractivePreview

__all__ = [
    # Interactive preview
    "InteractivePreview",
    # Display functions
    "show_buffer",
    "show_comparison",
    "buffer_to_field_layout",
    # Export functions
    "ExportResult",
    "save_ppm",
    "save_png",
    "load_ppm",
    "ppm_header",
    "compute_rmse",
]
