#!/usr/bin/env python3
"""Live preview window for the preset sphere scenes.

The window opens on a gradient placeholder. Rendering only happens on demand,
so the window stays responsive between renders.

Usage:
    python examples/interactive_spheres.py [options]

Controls:
    - Space: render the scene and show the result
    - S: export the last render to the output path
    - Escape: close the window

Options are the same as render_spheres.py, minus --batch-size and --quiet.
"""

from __future__ import annotations

import argparse
import logging
import platform
import sys

import taichi as ti

from rtweekend.config import RenderSettings, add_render_arguments

SCENE_NAMES = ("three-spheres", "random-spheres")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Interactive sphere scene preview.")
    parser.add_argument(
        "--scene",
        choices=SCENE_NAMES,
        default="three-spheres",
        help="Scene to render (default: three-spheres)",
    )
    add_render_arguments(parser)
    return parser.parse_args()


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    if platform.system() == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except Exception:
            pass

    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except Exception:
        pass

    ti.init(arch=ti.cpu)
    return "CPU"


def main() -> int:
    """Main entry point for the interactive preview.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = parse_args()
    logging.basicConfig(level=logging.INFO)

    try:
        settings = RenderSettings.from_args(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Initialize Taichi first (before importing modules that allocate fields)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    # Import after Taichi initialization
    from rtweekend.core.renderer import Renderer
    from rtweekend.preview.interactive import InteractivePreview
    from rtweekend.scene.presets import SCENES

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    world, camera = SCENES[args.scene](aspect_ratio=settings.aspect_ratio)
    renderer = Renderer(
        settings.width,
        settings.height,
        samples_per_pixel=settings.samples_per_pixel,
        max_depth=settings.max_depth,
        seed=settings.seed,
    )

    print(f"Creating preview window ({settings.width}x{settings.height})...")
    preview = InteractivePreview(
        settings.width,
        settings.height,
        render_fn=lambda: renderer.render(world, camera),
        output_path=settings.output,
    )

    print("  - Space: render")
    print(f"  - S: export to {settings.output}")
    print("  - Escape: quit")
    print()

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        print("Preview window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
