"""Encode a ``PixelBuffer`` into PNG, JPEG, lossless WebP, or GIF bytes."""

from __future__ import annotations

import io
import logging
import numbers

import numpy as np
from PIL import Image

from photonx.errors import EncodeError, InvalidParameterError
from photonx.imaging.formats import ImageFormat
from photonx.imaging.pixels import PixelBuffer, PixelFormat

logger = logging.getLogger(__name__)

JPEG_QUALITY_MIN = 0
JPEG_QUALITY_MAX = 100

GIF_MAX_COLORS = 256
GIF_TRANSPARENT_INDEX = GIF_MAX_COLORS - 1
GIF_ALPHA_THRESHOLD = 128

_PIL_ENCODE_ERRORS = (OSError, ValueError, KeyError, TypeError)


def encode(buffer: PixelBuffer, fmt: ImageFormat | str, *, quality: int | None = None) -> bytes:
    """Encode ``buffer`` as ``fmt``.

    ``quality`` is required for JPEG and rejected for every other format.
    Out-of-range JPEG quality is rejected rather than clamped.

    Raises:
        InvalidParameterError: On an unknown format or a bad ``quality``.
        EncodeError: If the codec fails.
    """
    try:
        fmt = ImageFormat(fmt)
    except ValueError:
        raise InvalidParameterError(f"Unsupported output format: {fmt!r}") from None

    if fmt is ImageFormat.JPEG:
        quality = validate_jpeg_quality(quality)
    elif quality is not None:
        raise InvalidParameterError(f"{fmt.pil_name} encoding does not accept a quality parameter")

    out = io.BytesIO()
    try:
        if fmt is ImageFormat.PNG:
            _to_pil(buffer).save(out, format="PNG")
        elif fmt is ImageFormat.JPEG:
            # JPEG has no alpha channel; dropping it is expected, not an error.
            _to_pil(buffer.drop_alpha()).save(out, format="JPEG", quality=quality)
        elif fmt is ImageFormat.WEBP:
            _to_pil(_expand_gray(buffer)).save(out, format="WEBP", lossless=True, exact=True)
        else:
            _quantize_for_gif(buffer).save(
                out,
                format="GIF",
                optimize=False,
                **({"transparency": GIF_TRANSPARENT_INDEX} if buffer.pixel_format.has_alpha else {}),
            )
    except _PIL_ENCODE_ERRORS as exc:
        raise EncodeError(f"Failed to encode {fmt.pil_name}: {exc}") from exc

    data = out.getvalue()
    logger.debug("Encoded %dx%d %s as %s (%d bytes)", buffer.width, buffer.height, buffer.pixel_format, fmt, len(data))
    return data


def validate_jpeg_quality(quality: object) -> int:
    """Return ``quality`` if it is an integer in ``[0, 100]``, else raise ``InvalidParameterError``."""
    if quality is None:
        raise InvalidParameterError("JPEG encoding requires a quality between 0 and 100")
    if isinstance(quality, bool) or not isinstance(quality, numbers.Integral):
        raise InvalidParameterError(f"JPEG quality must be an integer, got {quality!r}")
    if not JPEG_QUALITY_MIN <= quality <= JPEG_QUALITY_MAX:
        raise InvalidParameterError(
            f"JPEG quality must be between {JPEG_QUALITY_MIN} and {JPEG_QUALITY_MAX}, got {quality}"
        )
    return int(quality)


def _to_pil(buffer: PixelBuffer) -> Image.Image:
    return Image.frombytes(buffer.pixel_format.pil_mode, (buffer.width, buffer.height), buffer.samples.tobytes())


def _expand_gray(buffer: PixelBuffer) -> PixelBuffer:
    """Lift L8/LA8 to RGB8/RGBA8 for codecs that only take color input."""
    if buffer.pixel_format is PixelFormat.L8:
        return PixelBuffer(PixelFormat.RGB8, np.repeat(buffer.samples, 3, axis=2))
    if buffer.pixel_format is PixelFormat.LA8:
        gray = buffer.samples[:, :, :1]
        alpha = buffer.samples[:, :, 1:]
        return PixelBuffer(PixelFormat.RGBA8, np.concatenate([gray, gray, gray, alpha], axis=2))
    return buffer


def _quantize_for_gif(buffer: PixelBuffer) -> Image.Image:
    """Reduce ``buffer`` to a paletted image of at most 256 colors.

    With alpha, 255 colors are quantized and the last slot becomes the
    transparent index for pixels with alpha below the threshold.
    """
    color = _expand_gray(buffer)
    has_alpha = color.pixel_format.has_alpha
    rgb = _to_pil(color.drop_alpha())

    colors = GIF_MAX_COLORS - 1 if has_alpha else GIF_MAX_COLORS
    paletted = rgb.quantize(colors=colors, method=Image.Quantize.MEDIANCUT)

    palette = list(paletted.getpalette() or [])[: colors * 3]
    palette += [0] * (GIF_MAX_COLORS * 3 - len(palette))

    indices = np.asarray(paletted, dtype=np.uint8).copy()
    if has_alpha:
        indices[color.samples[:, :, 3] < GIF_ALPHA_THRESHOLD] = GIF_TRANSPARENT_INDEX

    result = Image.frombytes("P", (buffer.width, buffer.height), indices.tobytes())
    result.putpalette(palette)
    return result
