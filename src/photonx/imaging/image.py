"""``PhotonImage``: an owning handle around one decoded pixel buffer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from photonx.imaging.decoder import decode
from photonx.imaging.encoder import encode
from photonx.imaging.filters import FilterKind
from photonx.imaging.formats import ImageFormat, detect_format
from photonx.imaging.resampler import resample

if TYPE_CHECKING:
    from photonx.imaging.pixels import PixelBuffer, PixelFormat


class PhotonImage:
    """Decoded image with resize and encode operations.

    Instances are created by ``from_bytes`` or ``resize`` and never change
    afterwards, so one handle may be read from several threads at once.
    """

    __slots__ = ("_buffer", "_source_format")

    def __init__(self, buffer: PixelBuffer, source_format: ImageFormat | None = None) -> None:
        self._buffer = buffer
        self._source_format = source_format

    @classmethod
    def from_bytes(cls, data: bytes, *, max_pixels: int | None = None) -> PhotonImage:
        """Detect the container format of ``data`` and decode it.

        Raises:
            FormatUnknownError: If no supported signature matches.
            DecodeError: If the payload cannot be decoded.
        """
        fmt = detect_format(data)
        return cls(decode(data, fmt, max_pixels=max_pixels), source_format=fmt)

    @property
    def width(self) -> int:
        return self._buffer.width

    @property
    def height(self) -> int:
        return self._buffer.height

    @property
    def pixel_format(self) -> PixelFormat:
        return self._buffer.pixel_format

    @property
    def source_format(self) -> ImageFormat | None:
        """Container the image was decoded from; ``None`` for resized images."""
        return self._source_format

    @property
    def buffer(self) -> PixelBuffer:
        return self._buffer

    def resize(
        self,
        width: int,
        height: int,
        filter: FilterKind | str = FilterKind.LANCZOS3,
    ) -> PhotonImage:
        """Return a new image of exactly ``width`` x ``height``; this one is left untouched."""
        return PhotonImage(resample(self._buffer, width, height, filter))

    def encode(self, fmt: ImageFormat | str, *, quality: int | None = None) -> bytes:
        return encode(self._buffer, fmt, quality=quality)

    def to_png(self) -> bytes:
        return encode(self._buffer, ImageFormat.PNG)

    def to_jpeg(self, quality: int) -> bytes:
        return encode(self._buffer, ImageFormat.JPEG, quality=quality)

    def to_webp(self) -> bytes:
        """Encode as lossless WebP."""
        return encode(self._buffer, ImageFormat.WEBP)

    def to_gif(self) -> bytes:
        return encode(self._buffer, ImageFormat.GIF)

    def __repr__(self) -> str:
        return f"PhotonImage({self.width}x{self.height}, {self.pixel_format}, source={self._source_format})"
