"""Shrink an encoded image until it fits dimension and byte-size limits.

The search order is fixed: PNG at the fitted size, then JPEG at decreasing
quality, then JPEG at progressively smaller sizes. The first candidate under the
byte limit wins; if none fits, the smallest candidate is returned and flagged.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass
from typing import TYPE_CHECKING

from photonx.errors import EncodeError, InvalidDimensionsError, InvalidParameterError
from photonx.imaging.encoder import validate_jpeg_quality
from photonx.imaging.filters import FilterKind
from photonx.imaging.formats import ImageFormat, detect_format
from photonx.imaging.image import PhotonImage

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

JPEG_FALLBACK_QUALITIES: tuple[int, ...] = (70, 55, 40)
SCALE_STEPS: tuple[float, ...] = (0.75, 0.5, 0.35, 0.25)
SCALED_JPEG_QUALITIES: tuple[int, ...] = (85, 70, 55, 40)
MIN_SCALED_SIDE = 100


@dataclass(frozen=True)
class FitResult:
    """Outcome of ``fit_image``."""

    data: bytes
    format: ImageFormat
    width: int
    height: int
    resized: bool
    within_limit: bool

    @property
    def mime_type(self) -> str:
        return self.format.mime_type


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def fit_dimensions(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """Scale ``width`` x ``height`` down to fit inside the box, keeping aspect ratio.

    Never enlarges. Each side is at least 1.
    """
    for name, value in (("max_width", max_width), ("max_height", max_height)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
            raise InvalidDimensionsError(f"{name} must be a positive integer, got {value!r}")
    max_width, max_height = int(max_width), int(max_height)

    target_w, target_h = width, height
    if target_w > max_width:
        target_h = _round_half_up(target_h * max_width / target_w)
        target_w = max_width
    if target_h > max_height:
        target_w = _round_half_up(target_w * max_height / target_h)
        target_h = max_height
    return max(target_w, 1), max(target_h, 1)


def fit_image(
    data: bytes,
    *,
    max_width: int,
    max_height: int,
    max_bytes: int,
    jpeg_quality: int = 80,
    filter: FilterKind | str = FilterKind.LANCZOS3,
    max_pixels: int | None = None,
) -> FitResult:
    """Return ``data`` re-encoded so it fits ``max_width`` x ``max_height`` and ``max_bytes``.

    Input already within all limits is returned unchanged.

    Raises:
        FormatUnknownError: If ``data`` is not a supported image.
        DecodeError: If ``data`` cannot be decoded.
        InvalidParameterError: If ``max_bytes`` or ``jpeg_quality`` is invalid.
        EncodeError: If every candidate encoding failed.
    """
    if isinstance(max_bytes, bool) or not isinstance(max_bytes, numbers.Integral) or max_bytes <= 0:
        raise InvalidParameterError(f"max_bytes must be a positive integer, got {max_bytes!r}")
    max_bytes = int(max_bytes)
    jpeg_quality = validate_jpeg_quality(jpeg_quality)

    source_format = detect_format(data)
    image = PhotonImage.from_bytes(data, max_pixels=max_pixels)
    target_w, target_h = fit_dimensions(image.width, image.height, max_width, max_height)
    fits_box = (target_w, target_h) == (image.width, image.height)

    if fits_box and len(data) <= max_bytes:
        return FitResult(
            data=data,
            format=source_format,
            width=image.width,
            height=image.height,
            resized=False,
            within_limit=True,
        )

    fitted = image if fits_box else image.resize(target_w, target_h, filter)

    first_pass = [(ImageFormat.PNG, None), (ImageFormat.JPEG, jpeg_quality)]
    first_pass += [(ImageFormat.JPEG, q) for q in JPEG_FALLBACK_QUALITIES]

    best: FitResult | None = None
    for candidate in _candidates(fitted, first_pass, resized=fitted is not image, max_bytes=max_bytes):
        if candidate.within_limit:
            return candidate
        best = _smaller(best, candidate)

    for scale in SCALE_STEPS:
        scaled_w = _round_half_up(target_w * scale)
        scaled_h = _round_half_up(target_h * scale)
        if scaled_w < MIN_SCALED_SIDE or scaled_h < MIN_SCALED_SIDE:
            break

        scaled = image.resize(scaled_w, scaled_h, filter)
        attempts = [(ImageFormat.JPEG, q) for q in SCALED_JPEG_QUALITIES]
        for candidate in _candidates(scaled, attempts, resized=True, max_bytes=max_bytes):
            if candidate.within_limit:
                return candidate
            best = _smaller(best, candidate)

    if best is None:
        raise EncodeError("Failed to encode any candidate while fitting image")

    logger.info(
        "No candidate fits %d bytes; returning smallest (%d bytes, %s %dx%d)",
        max_bytes,
        len(best.data),
        best.format,
        best.width,
        best.height,
    )
    return best


def _candidates(
    image: PhotonImage,
    attempts: Iterable[tuple[ImageFormat, int | None]],
    *,
    resized: bool,
    max_bytes: int,
) -> Iterable[FitResult]:
    for fmt, quality in attempts:
        try:
            data = image.encode(fmt, quality=quality)
        except EncodeError as exc:
            logger.warning("Skipping %s candidate (quality=%s): %s", fmt, quality, exc)
            continue
        logger.debug("Candidate %s q=%s %dx%d: %d bytes", fmt, quality, image.width, image.height, len(data))
        yield FitResult(
            data=data,
            format=fmt,
            width=image.width,
            height=image.height,
            resized=resized,
            within_limit=len(data) <= max_bytes,
        )


def _smaller(best: FitResult | None, candidate: FitResult) -> FitResult:
    if best is None or len(candidate.data) < len(best.data):
        return candidate
    return best
