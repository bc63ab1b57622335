"""Exception hierarchy shared by the imaging core and the Markdown adapter."""

from __future__ import annotations


class PhotonError(Exception):
    """Base class for all PhotonX failures.

    Every subclass carries a human-readable cause in ``str(exc)``.
    """


class ImagingError(PhotonError):
    """Base class for decode/resample/encode failures."""


class FormatUnknownError(ImagingError):
    """No known container signature matched the input bytes."""


class DecodeError(ImagingError):
    """A signature matched but the payload is malformed, truncated, or unsupported."""


class InvalidDimensionsError(ImagingError, ValueError):
    """A resize target is not a positive integer."""


class InvalidParameterError(ImagingError, ValueError):
    """An encode parameter is out of range or not accepted by the target format."""


class EncodeError(ImagingError):
    """The codec failed to encode the pixel buffer."""


class ConversionFailedError(PhotonError):
    """HTML-to-Markdown conversion failed."""
