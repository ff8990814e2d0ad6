"""Tests for render settings and their command-line options."""

import argparse

import pytest

from rtweekend.config import RenderSettings, add_render_arguments


def _parse(argv):
    parser = argparse.ArgumentParser()
    add_render_arguments(parser)
    return parser.parse_args(argv)


class TestRenderSettings:
    def test_defaults(self):
        settings = RenderSettings()
        assert (settings.width, settings.height) == (1280, 720)
        assert settings.samples_per_pixel == 10
        assert settings.max_depth == 50
        assert settings.seed == 0
        assert settings.output == "out.ppm"
        assert settings.aspect_ratio == pytest.approx(16.0 / 9.0)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"width": 0},
            {"height": 0},
            {"width": 4096},
            {"samples_per_pixel": -1},
            {"max_depth": -1},
            {"output": ""},
        ],
    )
    def test_rejects_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            RenderSettings(**overrides)

    def test_zero_samples_and_depth_are_valid(self):
        settings = RenderSettings(samples_per_pixel=0, max_depth=0)
        assert settings.samples_per_pixel == 0
        assert settings.max_depth == 0


class TestArguments:
    def test_defaults_match_settings(self):
        assert RenderSettings.from_args(_parse([])) == RenderSettings()

    def test_overrides(self):
        args = _parse(
            [
                "--width", "400",
                "--height", "225",
                "--samples", "100",
                "--max-depth", "8",
                "--seed", "7",
                "--output", "cover.png",
            ]
        )
        settings = RenderSettings.from_args(args)
        assert settings == RenderSettings(400, 225, 100, 8, 7, "cover.png")

    def test_custom_default_output(self):
        parser = argparse.ArgumentParser()
        add_render_arguments(parser, output="preview.ppm")
        assert parser.parse_args([]).output == "preview.ppm"
