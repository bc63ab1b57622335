"""Decode, resample, and encode PNG, JPEG, WebP, and GIF images.

Pipeline:
    bytes -> detect_format -> decode -> PhotonImage -> resize -> encode -> bytes
"""

from photonx.imaging.filters import FilterKind
from photonx.imaging.fit import FitResult, fit_dimensions, fit_image
from photonx.imaging.formats import ImageFormat, detect_format
from photonx.imaging.image import PhotonImage
from photonx.imaging.pixels import PixelBuffer, PixelFormat

__all__ = [
    "FilterKind",
    "FitResult",
    "ImageFormat",
    "PhotonImage",
    "PixelBuffer",
    "PixelFormat",
    "detect_format",
    "fit_dimensions",
    "fit_image",
]
