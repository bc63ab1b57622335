"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from photonx.api.middleware import install_error_handlers
from photonx.api.routes import router
from photonx.config import get_settings
from photonx.workers import WorkerPool

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: initialize on startup, clean up on shutdown."""
    settings = get_settings()
    app.state.settings = settings

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    logger.info(
        "Starting PhotonX (max_concurrent=%s, max_image_pixels=%s, max_file_size=%s, default_filter=%s)",
        settings.max_concurrent,
        settings.max_image_pixels,
        settings.max_file_size,
        settings.default_filter,
    )

    worker_pool = WorkerPool(settings)
    app.state.worker_pool = worker_pool

    logger.info("PhotonX ready")
    yield

    logger.info("Shutting down PhotonX")
    worker_pool.shutdown()
    logger.info("PhotonX shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="PhotonX",
        description="Image transcoding, resampling, and HTML-to-Markdown conversion API",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_error_handlers(application)
    application.include_router(router)
    return application


app = create_app()


def run() -> None:
    """Serve the application with uvicorn using PHOTONX_HOST / PHOTONX_PORT."""
    settings = get_settings()
    uvicorn.run(
        "photonx.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
