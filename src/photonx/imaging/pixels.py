"""In-memory pixel representation.

A ``PixelBuffer`` is a read-only ``(height, width, channels)`` uint8 array tagged
with its ``PixelFormat``. Algorithms branch on the tag instead of inspecting the
array shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


class PixelFormat(StrEnum):
    L8 = "l8"
    LA8 = "la8"
    RGB8 = "rgb8"
    RGBA8 = "rgba8"

    @property
    def channels(self) -> int:
        return _CHANNELS[self]

    @property
    def has_alpha(self) -> bool:
        return self in (PixelFormat.LA8, PixelFormat.RGBA8)

    @property
    def pil_mode(self) -> str:
        return _PIL_MODES[self]

    def without_alpha(self) -> PixelFormat:
        if self is PixelFormat.LA8:
            return PixelFormat.L8
        if self is PixelFormat.RGBA8:
            return PixelFormat.RGB8
        return self


_CHANNELS: dict[PixelFormat, int] = {
    PixelFormat.L8: 1,
    PixelFormat.LA8: 2,
    PixelFormat.RGB8: 3,
    PixelFormat.RGBA8: 4,
}

_PIL_MODES: dict[PixelFormat, str] = {
    PixelFormat.L8: "L",
    PixelFormat.LA8: "LA",
    PixelFormat.RGB8: "RGB",
    PixelFormat.RGBA8: "RGBA",
}


@dataclass(frozen=True)
class PixelBuffer:
    """Immutable grid of 8-bit samples in row-major order."""

    pixel_format: PixelFormat
    samples: NDArray[np.uint8]

    def __post_init__(self) -> None:
        samples = self.samples
        if samples.dtype != np.uint8:
            raise TypeError(f"PixelBuffer samples must be uint8, got {samples.dtype}")
        if samples.ndim != 3 or samples.shape[2] != self.pixel_format.channels:
            raise ValueError(
                f"PixelBuffer of format {self.pixel_format} expects shape (h, w, {self.pixel_format.channels}), "
                f"got {samples.shape}"
            )
        if samples.shape[0] == 0 or samples.shape[1] == 0:
            raise ValueError("PixelBuffer must have positive width and height")

        # Always take a private copy so no two buffers alias the same memory.
        samples = np.array(samples, dtype=np.uint8, order="C", copy=True)
        samples.flags.writeable = False
        object.__setattr__(self, "samples", samples)

    @classmethod
    def from_array(cls, samples: NDArray[np.uint8], pixel_format: PixelFormat | None = None) -> PixelBuffer:
        """Build a buffer from an ``(h, w)`` or ``(h, w, c)`` array, inferring the format from ``c``."""
        if samples.ndim == 2:
            samples = samples[:, :, np.newaxis]
        if pixel_format is None:
            by_channels = {fmt.channels: fmt for fmt in PixelFormat}
            try:
                pixel_format = by_channels[samples.shape[2]]
            except KeyError:
                raise ValueError(f"Unsupported channel count: {samples.shape[2]}") from None
        return cls(pixel_format=pixel_format, samples=samples)

    @property
    def width(self) -> int:
        return int(self.samples.shape[1])

    @property
    def height(self) -> int:
        return int(self.samples.shape[0])

    @property
    def channels(self) -> int:
        return self.pixel_format.channels

    def drop_alpha(self) -> PixelBuffer:
        """Return a buffer without the alpha channel; color samples are kept as-is."""
        if not self.pixel_format.has_alpha:
            return self
        return PixelBuffer(
            pixel_format=self.pixel_format.without_alpha(),
            samples=self.samples[:, :, :-1],
        )
