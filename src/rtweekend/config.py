"""Render settings shared by the command-line scripts.

RenderSettings bundles the knobs a render run needs (image size, sampling,
seed and output path) and validates them at construction, before any Taichi
state is touched. The scripts under examples/ build one from argparse.

Example:
    >>> import argparse
    >>> from rtweekend.config import RenderSettings, add_render_arguments
    >>> parser = argparse.ArgumentParser()
    >>> add_render_arguments(parser)
    >>> settings = RenderSettings.from_args(parser.parse_args(["--width", "400"]))
    >>> settings.width, settings.height
    (400, 720)
"""

import argparse
from dataclasses import dataclass

# Largest image the render target can hold
MAX_DIMENSION = 2048

DEFAULT_WIDTH = 1280
DEFAULT_HEIGHT = 720
DEFAULT_SAMPLES_PER_PIXEL = 10
DEFAULT_MAX_DEPTH = 50
DEFAULT_OUTPUT = "out.ppm"


@dataclass(frozen=True)
class RenderSettings:
    """Settings for one render run.

    Attributes:
        width: Image width in pixels (1 to 2048).
        height: Image height in pixels (1 to 2048).
        samples_per_pixel: Jittered samples per pixel; 0 renders one.
        max_depth: Maximum surface interactions per path; 0 renders black.
        seed: Seed of the per-sample random streams.
        output: Destination of the exported image.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_depth: int = DEFAULT_MAX_DEPTH
    seed: int = 0
    output: str = DEFAULT_OUTPUT

    def __post_init__(self) -> None:
        if not (1 <= self.width <= MAX_DIMENSION and 1 <= self.height <= MAX_DIMENSION):
            raise ValueError(
                f"Image dimensions must be between 1 and {MAX_DIMENSION}, "
                f"got {self.width}x{self.height}"
            )
        if self.samples_per_pixel < 0:
            raise ValueError(f"samples_per_pixel must be non-negative, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if not self.output:
            raise ValueError("output path must not be empty")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "RenderSettings":
        """Build settings from arguments registered by add_render_arguments."""
        return cls(
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            output=args.output,
        )


def add_render_arguments(parser: argparse.ArgumentParser, *, output: str = DEFAULT_OUTPUT) -> None:
    """Register the RenderSettings options on an argument parser."""
    parser.add_argument(
        "--width",
        type=int,
        default=DEFAULT_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=DEFAULT_HEIGHT,
        help=f"Image height in pixels (default: {DEFAULT_HEIGHT})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES_PER_PIXEL,
        help=f"Number of samples per pixel (default: {DEFAULT_SAMPLES_PER_PIXEL})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum bounces per path (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the per-sample random streams (default: 0)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=output,
        help=f"Output file path (default: {output})",
    )
