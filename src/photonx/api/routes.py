"""API route definitions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, UploadFile, status

from photonx.api.middleware import CONTENT_TOO_LARGE, UNPROCESSABLE, verify_api_key
from photonx.api.schemas import (
    ErrorResponse,
    HealthResponse,
    ImageInfo,
    MarkdownRequest,
    MarkdownResponse,
)
from photonx.errors import InvalidDimensionsError
from photonx.imaging.filters import FilterKind
from photonx.imaging.fit import FitResult, fit_image
from photonx.imaging.formats import ImageFormat, detect_format
from photonx.imaging.image import PhotonImage
from photonx.markdown import ConversionOptions, html_to_markdown

if TYPE_CHECKING:
    from photonx.config import Settings
    from photonx.workers import WorkerPool

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", dependencies=[Depends(verify_api_key)])

_IMAGE_ERRORS: dict[int | str, dict[str, object]] = {
    CONTENT_TOO_LARGE: {"model": ErrorResponse},
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: {"model": ErrorResponse},
    UNPROCESSABLE: {"model": ErrorResponse},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
}

_IMAGE_CONTENT: dict[str, dict[str, object]] = {fmt.mime_type: {} for fmt in ImageFormat}


def _get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def _get_worker_pool(request: Request) -> WorkerPool:
    pool: WorkerPool = request.app.state.worker_pool
    return pool


async def _read_upload(file: UploadFile, settings: Settings) -> bytes:
    data = await file.read(settings.max_file_size + 1)
    if len(data) > settings.max_file_size:
        logger.warning("Rejected upload %r: larger than %d bytes", file.filename, settings.max_file_size)
        raise HTTPException(
            status_code=CONTENT_TOO_LARGE,
            detail=f"Upload exceeds the limit of {settings.max_file_size} bytes",
        )
    return data


# ---------------------------------------------------------------------------
# Synchronous workers (run inside the WorkerPool)
# ---------------------------------------------------------------------------


def _inspect(data: bytes, max_pixels: int) -> ImageInfo:
    source_format = detect_format(data)
    image = PhotonImage.from_bytes(data, max_pixels=max_pixels)
    return ImageInfo(
        format=source_format,
        mime_type=source_format.mime_type,
        width=image.width,
        height=image.height,
        pixel_format=image.pixel_format,
        has_alpha=image.pixel_format.has_alpha,
    )


def _transcode(
    data: bytes,
    max_pixels: int,
    output: ImageFormat,
    size: tuple[int, int] | None,
    filter_kind: FilterKind,
    quality: int | None,
) -> tuple[bytes, int, int]:
    image = PhotonImage.from_bytes(data, max_pixels=max_pixels)
    if size is not None:
        image = image.resize(size[0], size[1], filter_kind)
    return image.encode(output, quality=quality), image.width, image.height


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post(
    "/images/inspect",
    response_model=ImageInfo,
    responses=_IMAGE_ERRORS,
    summary="Detect format and dimensions of an image",
)
async def inspect_image(request: Request, file: UploadFile) -> ImageInfo:
    """Decode an uploaded image and report its format and pixel layout."""
    settings = _get_settings(request)
    data = await _read_upload(file, settings)
    return await _get_worker_pool(request).run(_inspect, data, settings.max_image_pixels)


@router.post(
    "/images/transcode",
    response_class=Response,
    responses={**_IMAGE_ERRORS, status.HTTP_200_OK: {"content": _IMAGE_CONTENT}},
    summary="Resize and re-encode an image",
)
async def transcode_image(
    request: Request,
    file: UploadFile,
    output: Annotated[ImageFormat, Query(description="Target container format")] = ImageFormat.PNG,
    width: Annotated[int | None, Query(description="Exact target width; requires height")] = None,
    height: Annotated[int | None, Query(description="Exact target height; requires width")] = None,
    filter_kind: Annotated[FilterKind | None, Query(alias="filter", description="Resampling filter")] = None,
    quality: Annotated[int | None, Query(description="JPEG quality (0-100)")] = None,
) -> Response:
    """Decode an uploaded image, optionally resize it exactly, and encode it as ``output``."""
    settings = _get_settings(request)
    if (width is None) != (height is None):
        raise InvalidDimensionsError("width and height must be given together")
    size = (width, height) if width is not None and height is not None else None
    if output is ImageFormat.JPEG and quality is None:
        quality = settings.default_jpeg_quality

    data = await _read_upload(file, settings)
    encoded, out_width, out_height = await _get_worker_pool(request).run(
        _transcode,
        data,
        settings.max_image_pixels,
        output,
        size,
        filter_kind or settings.default_filter,
        quality,
    )
    return Response(
        content=encoded,
        media_type=output.mime_type,
        headers={"X-Image-Width": str(out_width), "X-Image-Height": str(out_height)},
    )


@router.post(
    "/images/fit",
    response_class=Response,
    responses={**_IMAGE_ERRORS, status.HTTP_200_OK: {"content": _IMAGE_CONTENT}},
    summary="Shrink an image to fit dimension and size limits",
)
async def fit_image_route(
    request: Request,
    file: UploadFile,
    max_width: Annotated[int | None, Query()] = None,
    max_height: Annotated[int | None, Query()] = None,
    max_bytes: Annotated[int | None, Query()] = None,
    jpeg_quality: Annotated[int | None, Query()] = None,
) -> Response:
    """Re-encode an uploaded image until it fits the limits (defaults from settings)."""
    settings = _get_settings(request)
    data = await _read_upload(file, settings)

    def _fit() -> FitResult:
        return fit_image(
            data,
            max_width=settings.fit_max_width if max_width is None else max_width,
            max_height=settings.fit_max_height if max_height is None else max_height,
            max_bytes=settings.fit_max_bytes if max_bytes is None else max_bytes,
            jpeg_quality=settings.fit_jpeg_quality if jpeg_quality is None else jpeg_quality,
            filter=settings.default_filter,
            max_pixels=settings.max_image_pixels,
        )

    result = await _get_worker_pool(request).run(_fit)
    return Response(
        content=result.data,
        media_type=result.mime_type,
        headers={
            "X-Image-Width": str(result.width),
            "X-Image-Height": str(result.height),
            "X-Resized": str(result.resized).lower(),
            "X-Within-Limit": str(result.within_limit).lower(),
        },
    )


@router.post(
    "/html/markdown",
    response_model=MarkdownResponse,
    responses={
        CONTENT_TOO_LARGE: {"model": ErrorResponse},
        UNPROCESSABLE: {"model": ErrorResponse},
    },
    summary="Convert HTML to Markdown",
)
async def convert_html(request: Request, body: MarkdownRequest) -> MarkdownResponse:
    """Convert an HTML document to Markdown."""
    settings = _get_settings(request)
    if len(body.html) > settings.max_html_size:
        raise HTTPException(
            status_code=CONTENT_TOO_LARGE,
            detail=f"HTML exceeds the limit of {settings.max_html_size} characters",
        )
    options = ConversionOptions(clean_content=body.clean_content, skip_images=body.skip_images)
    markdown = await _get_worker_pool(request).run(html_to_markdown, body.html, options)
    return MarkdownResponse(markdown=markdown)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health(request: Request) -> HealthResponse:
    """Return service health status."""
    pool = _get_worker_pool(request)
    return HealthResponse(
        status="ok",
        concurrent_requests=pool.active_count,
        queue_depth=pool.queue_depth,
        formats=list(ImageFormat),
        filters=list(FilterKind),
    )
