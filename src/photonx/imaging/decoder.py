"""Decode encoded image bytes into a normalized 8-bit ``PixelBuffer``.

Pillow does the container/codec work; this module restricts it to the detected
format and folds Pillow's many image modes into the four ``PixelFormat`` tags.
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

from photonx.errors import DecodeError
from photonx.imaging.formats import ImageFormat
from photonx.imaging.pixels import PixelBuffer, PixelFormat

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)

_SIXTEEN_BIT_MODES = frozenset({"I", "I;16", "I;16B", "I;16L", "I;16N"})

# Pillow raises a mix of these for corrupt, truncated, or hostile input.
_PIL_DECODE_ERRORS = (OSError, SyntaxError, ValueError, EOFError, Image.DecompressionBombError)


def decode(data: bytes, fmt: ImageFormat, *, max_pixels: int | None = None) -> PixelBuffer:
    """Decode ``data`` as ``fmt``.

    Only the first frame of animated GIF/WebP input is kept.

    Args:
        data: Encoded image bytes.
        fmt: Container format, normally from ``detect_format``.
        max_pixels: Optional upper bound on ``width * height``.

    Raises:
        DecodeError: If the payload is malformed, truncated, or exceeds ``max_pixels``.
    """
    try:
        with Image.open(io.BytesIO(data), formats=[fmt.pil_name]) as img:
            width, height = img.size
            if width <= 0 or height <= 0:
                raise DecodeError(f"Failed to decode image: invalid dimensions {width}x{height}")
            if max_pixels is not None and width * height > max_pixels:
                raise DecodeError(
                    f"Failed to decode image: {width}x{height} exceeds the limit of {max_pixels} pixels"
                )

            frames = getattr(img, "n_frames", 1)
            if frames > 1:
                logger.debug("Keeping first of %d frames from %s input", frames, fmt)

            img.load()
            buffer = _normalize(img)
    except DecodeError:
        raise
    except _PIL_DECODE_ERRORS as exc:
        raise DecodeError(f"Failed to decode image: {exc}") from exc

    logger.debug("Decoded %s %dx%d as %s", fmt, buffer.width, buffer.height, buffer.pixel_format)
    return buffer


def _normalize(img: Image.Image) -> PixelBuffer:
    mode = img.mode
    # PNG tRNS on gray/truecolor data: a single color key, not a palette entry.
    color_key = img.info.get("transparency")

    if mode in _SIXTEEN_BIT_MODES:
        wide = np.asarray(img).astype(np.int64)
        samples = (np.clip(wide, 0, 0xFFFF) >> 8).astype(np.uint8)
        if isinstance(color_key, int):
            return _key_out(samples, wide == color_key)
        return PixelBuffer.from_array(samples, PixelFormat.L8)

    if mode == "F":
        samples = np.clip(np.rint(np.asarray(img)), 0, 255).astype(np.uint8)
        return PixelBuffer.from_array(samples, PixelFormat.L8)

    if mode == "L" and isinstance(color_key, int):
        samples = np.asarray(img, dtype=np.uint8)
        return _key_out(samples, samples == color_key)

    if mode == "RGB" and isinstance(color_key, tuple) and len(color_key) == 3:
        samples = np.asarray(img, dtype=np.uint8)
        return _key_out(samples, np.all(samples == np.asarray(color_key), axis=2))

    if mode == "1":
        img = img.convert("L")
    elif mode == "La":
        img = img.convert("LA")
    elif mode in ("P", "PA"):
        has_alpha = mode == "PA" or "transparency" in img.info
        img = img.convert("RGBA" if has_alpha else "RGB")
    elif mode == "RGBa":
        img = img.convert("RGBA")
    elif mode not in ("L", "LA", "RGB", "RGBA"):
        # CMYK / YCbCr JPEGs and anything exotic
        img = img.convert("RGB")

    pixel_format = {
        "L": PixelFormat.L8,
        "LA": PixelFormat.LA8,
        "RGB": PixelFormat.RGB8,
        "RGBA": PixelFormat.RGBA8,
    }[img.mode]
    return PixelBuffer.from_array(np.asarray(img, dtype=np.uint8), pixel_format)


def _key_out(samples: NDArray[np.uint8], keyed: NDArray[np.bool_]) -> PixelBuffer:
    """Add an alpha channel: transparent where ``keyed``, opaque elsewhere."""
    color = samples if samples.ndim == 3 else samples[:, :, np.newaxis]
    alpha = np.where(keyed, 0, 255).astype(np.uint8)[:, :, np.newaxis]
    pixel_format = PixelFormat.LA8 if color.shape[2] == 1 else PixelFormat.RGBA8
    return PixelBuffer.from_array(np.concatenate([color, alpha], axis=2), pixel_format)
