"""Tests for PNG, JPEG, WebP, and GIF encoding."""

from __future__ import annotations

from unittest.mock import patch

import numpy as np
import pytest
from conftest import sample_array

from photonx.errors import EncodeError, InvalidParameterError
from photonx.imaging.decoder import decode
from photonx.imaging.encoder import GIF_TRANSPARENT_INDEX, encode, validate_jpeg_quality
from photonx.imaging.formats import ImageFormat, detect_format
from photonx.imaging.pixels import PixelBuffer, PixelFormat


def _make_buffer(mode: str = "RGBA", size: tuple[int, int] = (32, 24), seed: int = 0) -> PixelBuffer:
    return PixelBuffer.from_array(sample_array(mode, size, seed))


def _round_trip(buffer: PixelBuffer, fmt: ImageFormat, quality: int | None = None) -> PixelBuffer:
    data = encode(buffer, fmt, quality=quality)
    assert detect_format(data) is fmt
    return decode(data, fmt)


class TestPng:
    @pytest.mark.parametrize("mode", ["L", "LA", "RGB", "RGBA"])
    def test_lossless_round_trip(self, mode: str) -> None:
        src = _make_buffer(mode)
        out = _round_trip(src, ImageFormat.PNG)
        assert out.pixel_format is src.pixel_format
        np.testing.assert_array_equal(out.samples, src.samples)

    def test_rejects_quality(self) -> None:
        with pytest.raises(InvalidParameterError, match="does not accept a quality"):
            encode(_make_buffer(), ImageFormat.PNG, quality=80)


class TestJpeg:
    def test_size_grows_with_quality(self) -> None:
        src = _make_buffer("RGB", size=(64, 64), seed=11)
        sizes = [len(encode(src, ImageFormat.JPEG, quality=q)) for q in (10, 50, 90)]
        assert sizes == sorted(sizes)
        assert sizes[0] < sizes[2]

    def test_alpha_dropped_silently(self) -> None:
        src = _make_buffer("RGBA")
        out = _round_trip(src, ImageFormat.JPEG, quality=90)
        assert out.pixel_format is PixelFormat.RGB8
        assert not out.pixel_format.has_alpha
        assert (out.width, out.height) == (src.width, src.height)

    def test_grayscale_alpha_becomes_grayscale(self) -> None:
        out = _round_trip(_make_buffer("LA"), ImageFormat.JPEG, quality=90)
        assert out.pixel_format is PixelFormat.L8

    @pytest.mark.parametrize("quality", [0, 1, 100])
    def test_quality_bounds_accepted(self, quality: int) -> None:
        assert detect_format(encode(_make_buffer("RGB"), ImageFormat.JPEG, quality=quality)) is ImageFormat.JPEG

    @pytest.mark.parametrize("quality", [-1, 101, 255, None, 50.5, True, "80"])
    def test_invalid_quality_rejected(self, quality: object) -> None:
        with pytest.raises(InvalidParameterError):
            encode(_make_buffer("RGB"), ImageFormat.JPEG, quality=quality)  # type: ignore[arg-type]

    def test_validate_jpeg_quality_returns_int(self) -> None:
        assert validate_jpeg_quality(np.int64(42)) == 42


class TestWebp:
    @pytest.mark.parametrize("mode", ["RGB", "RGBA"])
    def test_lossless_round_trip(self, mode: str) -> None:
        src = _make_buffer(mode, seed=2)
        out = _round_trip(src, ImageFormat.WEBP)
        assert out.pixel_format is src.pixel_format
        np.testing.assert_array_equal(out.samples, src.samples)

    def test_grayscale_expanded_to_rgb(self) -> None:
        src = _make_buffer("L")
        out = _round_trip(src, ImageFormat.WEBP)
        assert out.pixel_format is PixelFormat.RGB8
        np.testing.assert_array_equal(out.samples[:, :, 1], src.samples[:, :, 0])

    def test_rejects_quality(self) -> None:
        with pytest.raises(InvalidParameterError):
            encode(_make_buffer(), ImageFormat.WEBP, quality=90)


class TestGif:
    def test_few_colors_round_trip_exactly(self) -> None:
        samples = np.zeros((8, 8, 3), dtype=np.uint8)
        samples[:4] = (255, 0, 0)
        samples[4:] = (0, 0, 255)
        out = _round_trip(PixelBuffer.from_array(samples), ImageFormat.GIF)
        assert out.pixel_format is PixelFormat.RGB8
        np.testing.assert_array_equal(out.samples, samples)

    def test_many_colors_quantized(self) -> None:
        src = _make_buffer("RGB", size=(64, 64), seed=4)
        out = _round_trip(src, ImageFormat.GIF)
        assert (out.width, out.height) == (64, 64)
        colors = np.unique(out.samples.reshape(-1, 3), axis=0)
        assert len(colors) <= 256

    def test_alpha_becomes_transparent_index(self) -> None:
        samples = np.zeros((4, 4, 4), dtype=np.uint8)
        samples[:, :] = (0, 200, 0, 255)
        samples[0, 0, 3] = 0
        samples[0, 1, 3] = 100

        out = _round_trip(PixelBuffer.from_array(samples), ImageFormat.GIF)

        assert out.pixel_format is PixelFormat.RGBA8
        assert out.samples[0, 0, 3] == 0
        assert out.samples[0, 1, 3] == 0
        assert tuple(out.samples[3, 3]) == (0, 200, 0, 255)
        assert GIF_TRANSPARENT_INDEX == 255

    def test_grayscale_input(self) -> None:
        out = _round_trip(_make_buffer("L"), ImageFormat.GIF)
        assert (out.width, out.height) == (32, 24)

    def test_rejects_quality(self) -> None:
        with pytest.raises(InvalidParameterError):
            encode(_make_buffer(), ImageFormat.GIF, quality=90)


class TestEncodeGeneral:
    def test_accepts_string_format(self) -> None:
        assert detect_format(encode(_make_buffer(), "png")) is ImageFormat.PNG

    def test_unknown_format_rejected(self) -> None:
        with pytest.raises(InvalidParameterError, match="Unsupported output format"):
            encode(_make_buffer(), "bmp")

    @pytest.mark.parametrize("fmt", list(ImageFormat))
    def test_source_buffer_not_mutated(self, fmt: ImageFormat) -> None:
        src = _make_buffer()
        before = src.samples.copy()
        encode(src, fmt, quality=75 if fmt is ImageFormat.JPEG else None)
        np.testing.assert_array_equal(src.samples, before)
        assert not src.samples.flags.writeable

    def test_codec_failure_wrapped(self) -> None:
        with (
            patch("photonx.imaging.encoder.Image.Image.save", side_effect=OSError("encoder exploded")),
            pytest.raises(EncodeError, match="Failed to encode PNG: encoder exploded"),
        ):
            encode(_make_buffer(), ImageFormat.PNG)
