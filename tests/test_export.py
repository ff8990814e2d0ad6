"""Tests for image export utilities."""

import numpy as np
import pytest


def _buffer():
    from rtweekend.core.buffer import PixelBuffer

    pixels = np.array(
        [
            [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]],
            [[0.5, 0.5, 0.5], [0.25, 0.75, 0.0], [1.0, 1.0, 1.0]],
        ],
        dtype=np.float32,
    )
    return PixelBuffer(pixels)


class TestPPM:
    def test_plain_ppm_layout(self, tmp_path):
        from rtweekend.preview.export import save_ppm

        path = tmp_path / "image.ppm"
        result = save_ppm(_buffer(), path)

        assert result.ok
        assert result.path == str(path)
        lines = path.read_text(encoding="ascii").splitlines()
        assert lines[:3] == ["P3", "3 2", "255"]
        # One pixel per line, rows top to bottom, pixels left to right
        assert lines[3:] == [
            "255 0 0",
            "0 255 0",
            "0 0 255",
            "128 128 128",
            "64 192 0",
            "255 255 255",
        ]

    @pytest.mark.parametrize("binary", [False, True])
    def test_load_round_trip(self, tmp_path, binary):
        from rtweekend.preview.export import load_ppm, save_ppm

        buffer = _buffer()
        path = tmp_path / "image.ppm"
        save_ppm(buffer, path, binary=binary)

        np.testing.assert_array_equal(load_ppm(path), buffer.to_uint8())

    def test_binary_header(self, tmp_path):
        from rtweekend.preview.export import save_ppm

        path = tmp_path / "image.ppm"
        save_ppm(_buffer(), path, binary=True)
        data = path.read_bytes()

        assert data.startswith(b"P6\n3 2\n255\n")
        assert len(data) == len(b"P6\n3 2\n255\n") + 3 * 2 * 3

    def test_write_failure_is_reported(self, tmp_path):
        from rtweekend.preview.export import save_ppm

        buffer = _buffer()
        result = save_ppm(buffer, tmp_path / "missing" / "image.ppm")

        assert not result.ok
        assert result.error
        # The buffer is untouched
        assert buffer.pixel(0, 0) == (1.0, 0.0, 0.0)

    def test_load_rejects_other_formats(self, tmp_path):
        from rtweekend.preview.export import load_ppm

        path = tmp_path / "image.pgm"
        path.write_bytes(b"P2\n1 1\n255\n0\n")
        with pytest.raises(ValueError):
            load_ppm(path)


class TestPNG:
    def test_png_round_trip(self, tmp_path):
        from PIL import Image

        from rtweekend.preview.export import save_png

        path = tmp_path / "image.png"
        result = save_png(_buffer(), path)

        assert result.ok
        with Image.open(path) as image:
            assert image.size == (3, 2)
            assert image.mode == "RGB"
            np.testing.assert_array_equal(np.asarray(image), _buffer().to_uint8())

    def test_png_failure_is_reported(self, tmp_path):
        from rtweekend.preview.export import save_png

        result = save_png(_buffer(), tmp_path / "missing" / "image.png")
        assert not result.ok


class TestRMSE:
    def test_identical_images(self):
        from rtweekend.preview.export import compute_rmse

        image = np.random.default_rng(0).random((4, 4, 3))
        assert compute_rmse(image, image) == 0.0

    def test_known_difference(self):
        from rtweekend.preview.export import compute_rmse

        a = np.zeros((2, 2, 3))
        b = np.full((2, 2, 3), 0.5)
        assert compute_rmse(a, b) == pytest.approx(0.5)

    def test_shape_mismatch(self):
        from rtweekend.preview.export import compute_rmse

        with pytest.raises(ValueError):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((3, 2, 3)))
