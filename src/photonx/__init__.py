"""PhotonX: image transcoding and resampling, plus HTML to Markdown conversion."""

from photonx.errors import (
    ConversionFailedError,
    DecodeError,
    EncodeError,
    FormatUnknownError,
    ImagingError,
    InvalidDimensionsError,
    InvalidParameterError,
    PhotonError,
)
from photonx.imaging import (
    FilterKind,
    FitResult,
    ImageFormat,
    PhotonImage,
    PixelBuffer,
    PixelFormat,
    detect_format,
    fit_dimensions,
    fit_image,
)
from photonx.markdown import ConversionOptions, html_to_markdown

__all__ = [
    # Imaging
    "FilterKind",
    "FitResult",
    "ImageFormat",
    "PhotonImage",
    "PixelBuffer",
    "PixelFormat",
    "detect_format",
    "fit_dimensions",
    "fit_image",
    # Markdown
    "ConversionOptions",
    "html_to_markdown",
    # Errors
    "ConversionFailedError",
    "DecodeError",
    "EncodeError",
    "FormatUnknownError",
    "ImagingError",
    "InvalidDimensionsError",
    "InvalidParameterError",
    "PhotonError",
]
