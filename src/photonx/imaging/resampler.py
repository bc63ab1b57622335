"""Separable convolution resampling.

Each axis is resized independently: for every output sample a window of source
samples is weighted by the filter kernel, stretched by the downscale ratio when
shrinking so the kernel also acts as a low-pass pre-filter. Source coordinates
outside the image clamp to the edge pixel.
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import TYPE_CHECKING

import numpy as np

from photonx.errors import InvalidDimensionsError, InvalidParameterError
from photonx.imaging.filters import FilterKind, Kernel, kernel_for
from photonx.imaging.pixels import PixelBuffer

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


def resample(
    buffer: PixelBuffer,
    width: int,
    height: int,
    filter: FilterKind | str = FilterKind.LANCZOS3,
) -> PixelBuffer:
    """Resize ``buffer`` to exactly ``width`` x ``height``.

    Aspect ratio is not preserved; callers compute an aspect-correct target
    themselves (see ``photonx.imaging.fit.fit_dimensions``). An axis whose size
    does not change is passed through untouched.

    Raises:
        InvalidDimensionsError: If either target is not a positive integer.
        InvalidParameterError: If ``filter`` is not a known filter kind.
    """
    _check_dimension("width", width)
    _check_dimension("height", height)
    try:
        kind = FilterKind(filter)
    except ValueError:
        raise InvalidParameterError(f"Unknown resampling filter: {filter!r}") from None

    if kind is FilterKind.NEAREST:
        rows = _nearest_indices(buffer.height, height)
        cols = _nearest_indices(buffer.width, width)
        samples = buffer.samples[rows][:, cols]
    else:
        samples = _convolve_separable(buffer.samples, width, height, kernel_for(kind))

    logger.debug(
        "Resampled %dx%d -> %dx%d with %s",
        buffer.width,
        buffer.height,
        width,
        height,
        kind,
    )
    return PixelBuffer(pixel_format=buffer.pixel_format, samples=samples)


def _check_dimension(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
        raise InvalidDimensionsError(f"Resize {name} must be a positive integer, got {value!r}")


def _nearest_indices(src_size: int, dst_size: int) -> NDArray[np.intp]:
    scale = src_size / dst_size
    indices = np.floor((np.arange(dst_size) + 0.5) * scale).astype(np.intp)
    return np.minimum(indices, src_size - 1)


def _contributions(src_size: int, dst_size: int, kernel: Kernel) -> tuple[NDArray[np.intp], NDArray[np.float32]]:
    """Return ``(indices, weights)``, both shaped ``(dst_size, taps)``.

    Indices are already clamped into ``[0, src_size)``; weights of each row sum to 1.
    """
    scale = src_size / dst_size
    filter_scale = max(scale, 1.0)
    support = kernel.support * filter_scale
    taps = 2 * math.ceil(support) + 1

    centers = (np.arange(dst_size, dtype=np.float64) + 0.5) * scale
    left = np.floor(centers - support).astype(np.intp)
    positions = left[:, np.newaxis] + np.arange(taps, dtype=np.intp)[np.newaxis, :]

    weights = kernel.function((positions + 0.5 - centers[:, np.newaxis]) / filter_scale)
    totals = weights.sum(axis=1, keepdims=True)
    weights = weights / np.where(totals == 0.0, 1.0, totals)

    indices = np.clip(positions, 0, src_size - 1)
    return indices, weights.astype(np.float32)


def _convolve_separable(samples: NDArray[np.uint8], width: int, height: int, kernel: Kernel) -> NDArray[np.uint8]:
    src_height, src_width = samples.shape[:2]
    work = samples.astype(np.float32)

    if width != src_width:
        indices, weights = _contributions(src_width, width, kernel)
        out = np.zeros((work.shape[0], width, work.shape[2]), dtype=np.float32)
        for tap in range(indices.shape[1]):
            out += work[:, indices[:, tap], :] * weights[np.newaxis, :, tap, np.newaxis]
        work = out

    if height != src_height:
        indices, weights = _contributions(src_height, height, kernel)
        out = np.zeros((height, work.shape[1], work.shape[2]), dtype=np.float32)
        for tap in range(indices.shape[1]):
            out += work[indices[:, tap], :, :] * weights[:, tap, np.newaxis, np.newaxis]
        work = out

    return np.clip(np.rint(work), 0, 255).astype(np.uint8)
