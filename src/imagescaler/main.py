"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from imagescaler.api.routes import router
from imagescaler.config import get_settings
from imagescaler.errors import ImageScalerError
from imagescaler.imaging.pipeline import ImagePipeline
from imagescaler.imaging.pool import TransformPool

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
        "Starting ImageScaler (max_concurrent=%s, max_file_size=%s, max_image_pixels=%s, resample=%s)",
        settings.max_concurrent,
        settings.max_file_size,
        settings.max_image_pixels,
        settings.resample,
    )

    transform_pool = TransformPool(settings)
    app.state.transform_pool = transform_pool
    app.state.pipeline = ImagePipeline(transform_pool, settings)

    logger.info("ImageScaler ready")
    yield

    logger.info("Shutting down ImageScaler")
    transform_pool.shutdown()
    logger.info("ImageScaler shutdown complete")


async def image_scaler_error_handler(request: Request, exc: ImageScalerError) -> PlainTextResponse:
    """Render a request-scoped transform failure as a plain-text response."""
    level = logging.WARNING if exc.status_code >= 500 else logging.INFO
    logger.log(level, "%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return PlainTextResponse(exc.detail, status_code=exc.status_code)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="ImageScaler",
        description="Resize and re-encode uploaded raster images",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(ImageScalerError, image_scaler_error_handler)  # type: ignore[arg-type]
    application.include_router(router)
    return application


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "imagescaler.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
