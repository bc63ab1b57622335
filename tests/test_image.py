"""Tests for the PhotonImage handle and the public package surface."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import pytest

import photonx
from photonx import (
    DecodeError,
    FilterKind,
    FormatUnknownError,
    ImageFormat,
    InvalidDimensionsError,
    InvalidParameterError,
    PhotonImage,
    PixelFormat,
    detect_format,
)

if TYPE_CHECKING:
    from conftest import MakeEncoded


class TestConstruct:
    @pytest.mark.parametrize("fmt", ["png", "jpeg", "webp", "gif"])
    def test_from_bytes_reports_dimensions(self, make_encoded: MakeEncoded, fmt: str) -> None:
        image = PhotonImage.from_bytes(make_encoded(fmt, size=(30, 20)))
        assert (image.width, image.height) == (30, 20)
        assert image.source_format is ImageFormat(fmt)

    def test_unknown_bytes_rejected(self) -> None:
        with pytest.raises(FormatUnknownError):
            PhotonImage.from_bytes(bytes(128))

    def test_corrupt_payload_rejected(self, make_encoded: MakeEncoded) -> None:
        data = make_encoded("png", size=(64, 64))
        with pytest.raises(DecodeError):
            PhotonImage.from_bytes(data[:40])

    def test_pixel_limit_forwarded(self, make_encoded: MakeEncoded) -> None:
        with pytest.raises(DecodeError):
            PhotonImage.from_bytes(make_encoded("png", size=(30, 20)), max_pixels=100)

    def test_repr(self, rgba_png: bytes) -> None:
        assert repr(PhotonImage.from_bytes(rgba_png)) == "PhotonImage(32x24, rgba8, source=png)"


class TestResize:
    def test_returns_new_handle_and_keeps_original(self, rgba_png: bytes) -> None:
        original = PhotonImage.from_bytes(rgba_png)
        before = original.buffer.samples.copy()

        resized = original.resize(100, 7, FilterKind.GAUSSIAN)

        assert resized is not original
        assert (resized.width, resized.height) == (100, 7)
        assert resized.source_format is None
        assert resized.pixel_format is PixelFormat.RGBA8
        assert (original.width, original.height) == (32, 24)
        np.testing.assert_array_equal(original.buffer.samples, before)

    def test_default_filter_is_lanczos3(self, rgba_png: bytes) -> None:
        image = PhotonImage.from_bytes(rgba_png)
        explicit = image.resize(10, 10, FilterKind.LANCZOS3)
        default = image.resize(10, 10)
        np.testing.assert_array_equal(default.buffer.samples, explicit.buffer.samples)

    def test_failed_resize_leaves_handle_valid(self, rgba_png: bytes) -> None:
        image = PhotonImage.from_bytes(rgba_png)
        with pytest.raises(InvalidDimensionsError):
            image.resize(0, 10)
        assert detect_format(image.to_png()) is ImageFormat.PNG


class TestEncodeMethods:
    def test_each_target_format(self, rgba_png: bytes) -> None:
        image = PhotonImage.from_bytes(rgba_png)
        assert detect_format(image.to_png()) is ImageFormat.PNG
        assert detect_format(image.to_jpeg(85)) is ImageFormat.JPEG
        assert detect_format(image.to_webp()) is ImageFormat.WEBP
        assert detect_format(image.to_gif()) is ImageFormat.GIF

    def test_generic_encode(self, rgba_png: bytes) -> None:
        image = PhotonImage.from_bytes(rgba_png)
        assert image.encode("jpeg", quality=50) == image.to_jpeg(50)

    def test_png_round_trip_is_pixel_identical(self, rgba_png: bytes) -> None:
        first = PhotonImage.from_bytes(rgba_png)
        second = PhotonImage.from_bytes(first.to_png())
        assert (second.width, second.height) == (first.width, first.height)
        np.testing.assert_array_equal(second.buffer.samples, first.buffer.samples)

    def test_jpeg_from_rgba_is_opaque(self, rgba_png: bytes) -> None:
        decoded = PhotonImage.from_bytes(PhotonImage.from_bytes(rgba_png).to_jpeg(80))
        assert decoded.pixel_format is PixelFormat.RGB8

    def test_jpeg_quality_out_of_range(self, rgba_png: bytes) -> None:
        with pytest.raises(InvalidParameterError):
            PhotonImage.from_bytes(rgba_png).to_jpeg(120)

    def test_full_pipeline(self, make_encoded: MakeEncoded) -> None:
        source = PhotonImage.from_bytes(make_encoded("jpeg", size=(120, 80), quality=90))
        thumb = PhotonImage.from_bytes(source.resize(60, 40, FilterKind.CATMULL_ROM).to_webp())
        assert (thumb.width, thumb.height) == (60, 40)
        assert thumb.source_format is ImageFormat.WEBP


class TestPackageExports:
    def test_all_names_importable(self) -> None:
        for name in photonx.__all__:
            assert hasattr(photonx, name)
