"""Container format detection from magic bytes."""

from __future__ import annotations

from enum import StrEnum

from photonx.errors import FormatUnknownError


class ImageFormat(StrEnum):
    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"
    GIF = "gif"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def pil_name(self) -> str:
        """Format identifier understood by Pillow's ``open``/``save``."""
        return self.value.upper()


PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff"
GIF_SIGNATURES = (b"GIF87a", b"GIF89a")

MIN_SIGNATURE_LENGTH = len(JPEG_SIGNATURE)


def _is_webp(data: bytes) -> bool:
    # RIFF <u32 size> WEBP
    return len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP"


def detect_format(data: bytes) -> ImageFormat:
    """Detect the container format of ``data`` from its leading signature.

    Args:
        data: Encoded image bytes, possibly truncated.

    Returns:
        The first format whose signature matches.

    Raises:
        FormatUnknownError: If the buffer is too short or no signature matches.
    """
    if len(data) < MIN_SIGNATURE_LENGTH:
        raise FormatUnknownError(
            f"Failed to detect image format: need at least {MIN_SIGNATURE_LENGTH} bytes, got {len(data)}"
        )

    if data[:8] == PNG_SIGNATURE:
        return ImageFormat.PNG
    if data[:3] == JPEG_SIGNATURE:
        return ImageFormat.JPEG
    if data[:6] in GIF_SIGNATURES:
        return ImageFormat.GIF
    if _is_webp(data):
        return ImageFormat.WEBP

    raise FormatUnknownError(f"Failed to detect image format: unrecognized signature {data[:12].hex()}")
