#!/usr/bin/env python3
"""Render one of the preset sphere scenes to a file.

The image is written as a plain PPM unless the output path ends in .png.

Usage:
    python examples/render_spheres.py [options]

Options:
    --scene NAME        three-spheres or random-spheres (default: three-spheres)
    --width WIDTH       Image width in pixels (default: 1280)
    --height HEIGHT     Image height in pixels (default: 720)
    --samples SAMPLES   Number of samples per pixel (default: 10)
    --max-depth DEPTH   Maximum bounces per path (default: 50)
    --seed SEED         Seed for the per-sample random streams (default: 0)
    --output OUTPUT     Output file path (default: out.ppm)
    --batch-size SIZE   Samples per progress update (default: 1)
    --quiet             Suppress progress output

Example:
    python examples/render_spheres.py --scene random-spheres --width 400 --height 225
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

from rtweekend.config import RenderSettings, add_render_arguments

SCENE_NAMES = ("three-spheres", "random-spheres")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=SCENE_NAMES,
        default="three-spheres",
        help="Scene to render (default: three-spheres)",
    )
    add_render_arguments(parser)
    parser.add_argument(
        "--batch-size",
        type=int,
        default=1,
        help="Samples per progress update (default: 1)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_scene(
    scene: str,
    settings: RenderSettings,
    batch_size: int = 1,
    quiet: bool = False,
) -> Path:
    """Render a preset scene and save it to settings.output.

    Args:
        scene: Name of the preset scene.
        settings: Image size, sampling and output settings.
        batch_size: Number of samples to render between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.

    Raises:
        OSError: If the image could not be written.
    """
    # Lazy imports to allow Taichi initialization first
    from rtweekend.core.renderer import Renderer
    from rtweekend.preview.export import save_png, save_ppm
    from rtweekend.scene.presets import SCENES

    if not quiet:
        print(f"Creating {scene} scene ({settings.width}x{settings.height})...")

    world, camera = SCENES[scene](aspect_ratio=settings.aspect_ratio)

    renderer = Renderer(
        settings.width,
        settings.height,
        samples_per_pixel=settings.samples_per_pixel,
        max_depth=settings.max_depth,
        seed=settings.seed,
    )

    if not quiet:
        print(f"Rendering {renderer.effective_samples} samples per pixel, {len(world)} spheres...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    buffer = renderer.render(world, camera, batch_size=batch_size, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(settings.output)
    if output_file.suffix.lower() == ".png":
        result = save_png(buffer, output_file)
    else:
        result = save_ppm(buffer, output_file)
    if not result.ok:
        raise OSError(result.error)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO)

    try:
        settings = RenderSettings.from_args(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Initialize Taichi
    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_scene(args.scene, settings, batch_size=args.batch_size, quiet=args.quiet)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
