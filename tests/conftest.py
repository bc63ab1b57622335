"""Shared fixtures: deterministic sample images encoded with Pillow."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Protocol

import numpy as np
import pytest
from PIL import Image

if TYPE_CHECKING:
    from numpy.typing import NDArray


class MakeEncoded(Protocol):
    def __call__(
        self,
        fmt: str,
        mode: str = "RGB",
        size: tuple[int, int] = (32, 24),
        seed: int = 0,
        **save_kwargs: object,
    ) -> bytes: ...


_MODE_CHANNELS = {"L": 1, "LA": 2, "RGB": 3, "RGBA": 4}


def sample_array(mode: str, size: tuple[int, int], seed: int = 0) -> NDArray[np.uint8]:
    """Gradient plus noise, shaped (h, w, c) for ``mode``."""
    width, height = size
    channels = _MODE_CHANNELS[mode]
    rng = np.random.default_rng(seed)
    ys, xs = np.mgrid[0:height, 0:width]
    gradient = (xs * 200 // max(width - 1, 1) + ys * 55 // max(height - 1, 1)).astype(np.int64)
    noise = rng.integers(-16, 17, size=(height, width, channels))
    return np.clip(gradient[:, :, np.newaxis] + noise, 0, 255).astype(np.uint8)


def to_pil(samples: NDArray[np.uint8], mode: str) -> Image.Image:
    height, width = samples.shape[:2]
    return Image.frombytes(mode, (width, height), np.ascontiguousarray(samples).tobytes())


def encode_pil(image: Image.Image, fmt: str, **save_kwargs: object) -> bytes:
    out = io.BytesIO()
    image.save(out, format=fmt.upper(), **save_kwargs)
    return out.getvalue()


@pytest.fixture()
def make_encoded() -> MakeEncoded:
    """Factory returning encoded bytes of a deterministic sample image."""

    def _make(
        fmt: str,
        mode: str = "RGB",
        size: tuple[int, int] = (32, 24),
        seed: int = 0,
        **save_kwargs: object,
    ) -> bytes:
        return encode_pil(to_pil(sample_array(mode, size, seed), mode), fmt, **save_kwargs)

    return _make


@pytest.fixture()
def rgba_png() -> bytes:
    return encode_pil(to_pil(sample_array("RGBA", (32, 24)), "RGBA"), "png")
