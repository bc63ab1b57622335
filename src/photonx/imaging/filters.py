"""Resampling filter kinds and their 1-D kernels."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Callable

    from numpy.typing import NDArray

    KernelFn = Callable[[NDArray[np.float64]], NDArray[np.float64]]


class FilterKind(StrEnum):
    NEAREST = "nearest"
    TRIANGLE = "triangle"
    CATMULL_ROM = "catmull_rom"
    GAUSSIAN = "gaussian"
    LANCZOS3 = "lanczos3"


@dataclass(frozen=True)
class Kernel:
    """A 1-D weighting function and the radius outside which it is zero."""

    function: KernelFn
    support: float


def _box(x: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.where((x >= -0.5) & (x < 0.5), 1.0, 0.0)


def _triangle(x: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.maximum(0.0, 1.0 - np.abs(x))


def _catmull_rom(x: NDArray[np.float64]) -> NDArray[np.float64]:
    # Mitchell-Netravali cubic with B=0, C=0.5
    ax = np.abs(x)
    ax2 = ax * ax
    ax3 = ax2 * ax
    near = 1.5 * ax3 - 2.5 * ax2 + 1.0
    far = -0.5 * ax3 + 2.5 * ax2 - 4.0 * ax + 2.0
    return np.where(ax < 1.0, near, np.where(ax < 2.0, far, 0.0))


_GAUSSIAN_SIGMA = 0.5


def _gaussian(x: NDArray[np.float64]) -> NDArray[np.float64]:
    sigma2 = _GAUSSIAN_SIGMA * _GAUSSIAN_SIGMA
    weights = np.exp(-(x * x) / (2.0 * sigma2)) / math.sqrt(2.0 * math.pi * sigma2)
    return np.where(np.abs(x) < 3.0, weights, 0.0)


def _lanczos3(x: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.where(np.abs(x) < 3.0, np.sinc(x) * np.sinc(x / 3.0), 0.0)


KERNELS: dict[FilterKind, Kernel] = {
    FilterKind.NEAREST: Kernel(function=_box, support=0.0),
    FilterKind.TRIANGLE: Kernel(function=_triangle, support=1.0),
    FilterKind.CATMULL_ROM: Kernel(function=_catmull_rom, support=2.0),
    FilterKind.GAUSSIAN: Kernel(function=_gaussian, support=3.0),
    FilterKind.LANCZOS3: Kernel(function=_lanczos3, support=3.0),
}


def kernel_for(kind: FilterKind) -> Kernel:
    """Return the kernel for ``kind``."""
    return KERNELS[FilterKind(kind)]
