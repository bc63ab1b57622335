"""Pydantic request/response schemas for the PhotonX API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from photonx.imaging.filters import FilterKind
from photonx.imaging.formats import ImageFormat
from photonx.imaging.pixels import PixelFormat


class ImageInfo(BaseModel):
    """Dimensions and layout of a decoded image."""

    format: ImageFormat = Field(description="Detected container format")
    mime_type: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    pixel_format: PixelFormat = Field(description="Normalized 8-bit pixel layout after decoding")
    has_alpha: bool


class MarkdownRequest(BaseModel):
    """Request body for HTML to Markdown conversion."""

    html: str
    clean_content: bool = Field(default=False, description="Remove navigation, forms, headers, and footers")
    skip_images: bool = Field(default=False, description="Omit image references from the output")


class MarkdownResponse(BaseModel):
    """Response for HTML to Markdown conversion."""

    markdown: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    concurrent_requests: int
    queue_depth: int
    formats: list[ImageFormat]
    filters: list[FilterKind]


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
