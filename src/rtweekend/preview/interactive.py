"""Interactive preview window using Taichi GGUI.

The window shows the most recent render and reacts to three keys:
    - Space: run a render and copy the result to the canvas
    - S: export the most recent render to a PPM file
    - Escape: close the window

Before the first render the canvas shows a gradient placeholder.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtweekend.core.renderer import Renderer
    >>> from rtweekend.preview.interactive import InteractivePreview
    >>>
    >>> renderer = Renderer(400, 225, samples_per_pixel=10)
    >>> preview = InteractivePreview(
    ...     400, 225, render_fn=lambda: renderer.render(world, camera)
    ... )
    >>> preview.run()
"""

import logging
import os
from collections.abc import Callable

import taichi as ti

from rtweekend.core.buffer import PixelBuffer
from rtweekend.preview.display import buffer_to_field_layout
from rtweekend.preview.export import ExportResult, save_ppm

logger = logging.getLogger(__name__)

# Key bindings
RENDER_KEY = ti.ui.SPACE
EXPORT_KEYS = ("s", "S")
QUIT_KEY = ti.ui.ESCAPE

# Callable producing a freshly rendered buffer
RenderFunction = Callable[[], PixelBuffer]


class InteractivePreview:
    """Key-driven preview window using Taichi GGUI.

    The window is created lazily in run(), so key handling and image updates
    work without a display.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        output_path: File written by the export key.
        display_image: Taichi field storing the display image (RGB float).
        last_buffer: Most recent buffer shown, or None before the first render.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        render_fn: RenderFunction | None = None,
        output_path: str = "out.ppm",
        title: str = "rtweekend",
    ) -> None:
        """Initialize the preview.

        Args:
            width: Window width in pixels.
            height: Window height in pixels.
            render_fn: Called on the render key; must return a buffer of
                size width x height.
            output_path: Destination of the export key.
            title: Window title.
        """
        self.width = width
        self.height = height
        self.output_path = output_path
        self._render_fn = render_fn
        self._title = title
        self.last_buffer: PixelBuffer | None = None
        self.last_export: ExportResult | None = None

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Shape is (width, height) for Taichi field, RGB values stored as vec3
        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(width, height)
        )
        self._show(PixelBuffer.gradient(width, height))

    def _initialize_window(self) -> None:
        if self._window is not None:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    def _show(self, buffer: PixelBuffer) -> None:
        if (buffer.height, buffer.width) != (self.height, self.width):
            raise ValueError(
                f"Buffer size {buffer.width}x{buffer.height} doesn't match "
                f"window size {self.width}x{self.height}"
            )
        self.display_image.from_numpy(buffer_to_field_layout(buffer))

    def update_buffer(self, buffer: PixelBuffer) -> None:
        """Copy a rendered buffer to the canvas image.

        Raises:
            ValueError: If the buffer size doesn't match the window.
        """
        self._show(buffer)
        self.last_buffer = buffer

    def render_now(self) -> PixelBuffer | None:
        """Run the render callback and display its result."""
        if self._render_fn is None:
            logger.warning("No render function configured")
            return None
        print("Rendering...")
        buffer = self._render_fn()
        self.update_buffer(buffer)
        print("Render complete")
        return buffer

    def export(self) -> ExportResult | None:
        """Write the most recent render to output_path."""
        if self.last_buffer is None:
            logger.warning("Nothing to export yet; render first")
            return None
        result = save_ppm(self.last_buffer, self.output_path)
        self.last_export = result
        if result.ok:
            print(f"Exported: {result.path}")
        else:
            print(f"Export failed: {result.error}")
        return result

    def handle_key(self, key: str) -> bool:
        """React to a key press.

        Returns:
            False if the key asks the window to close, True otherwise.
        """
        if key == QUIT_KEY:
            return False
        if key == RENDER_KEY:
            self.render_now()
        elif key in EXPORT_KEYS:
            self.export()
        return True

    def show_frame(self) -> None:
        """Present the current display image."""
        assert self._canvas is not None and self._window is not None
        self._canvas.set_image(self.display_image)
        self._window.show()

    def run(self) -> None:
        """Run the window event loop until Escape or the window is closed."""
        self._initialize_window()
        assert self._window is not None

        while self._window.running:
            for event in self._window.get_events(ti.ui.PRESS):
                if not self.handle_key(event.key):
                    self._window.running = False
            if self._window.running:
                self.show_frame()

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        # Windows generally always has display
        if os.name == "nt":
            return True

        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        # On macOS, display is always available if not in SSH
        if os.uname().sysname == "Darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            if ssh_connection and not display:
                return False
            return True

        return bool(display or wayland)
