"""Middleware: API key authentication and error mapping."""

from __future__ import annotations

import logging
import secrets
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from photonx.errors import (
    ConversionFailedError,
    DecodeError,
    EncodeError,
    FormatUnknownError,
    InvalidDimensionsError,
    InvalidParameterError,
    PhotonError,
)

if TYPE_CHECKING:
    from fastapi import FastAPI

    from photonx.config import Settings

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)

# Starlette renamed the 413 and 422 constants between releases.
CONTENT_TOO_LARGE = 413
UNPROCESSABLE = 422

_ERROR_STATUS: dict[type[PhotonError], int] = {
    FormatUnknownError: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    DecodeError: UNPROCESSABLE,
    InvalidDimensionsError: UNPROCESSABLE,
    InvalidParameterError: UNPROCESSABLE,
    EncodeError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConversionFailedError: UNPROCESSABLE,
}


def _get_settings_from_request(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


async def verify_api_key(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> None:
    """Check the Bearer token against the configured API key.

    If no API key is configured (PHOTONX_API_KEY not set), all requests pass.
    If configured, requests must include 'Authorization: Bearer <key>'.
    """
    settings = _get_settings_from_request(request)
    if settings.api_key is None:
        return

    if credentials is None or not secrets.compare_digest(credentials.credentials.encode(), settings.api_key.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "Bearer"},
        )


def status_for(exc: Exception) -> int:
    """Return the HTTP status code for an exception raised by PhotonX."""
    for error_type, code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _photon_error_handler(request: Request, exc: Exception) -> JSONResponse:
    code = status_for(exc)
    if code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.warning("%s %s rejected (%d): %s", request.method, request.url.path, code, exc)
    return JSONResponse(status_code=code, content={"detail": str(exc)})


async def _timeout_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("%s %s: worker pool busy", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Server busy, try again later"},
    )


def install_error_handlers(app: FastAPI) -> None:
    """Map PhotonX errors and worker-pool timeouts to JSON error responses."""
    app.add_exception_handler(PhotonError, _photon_error_handler)
    app.add_exception_handler(TimeoutError, _timeout_handler)
