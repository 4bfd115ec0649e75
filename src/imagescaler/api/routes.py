"""API route definitions.

The upload routes take unauthenticated multipart posts and do not require a
CSRF token. The service keeps no session or cookie state, so there is no
ambient credential a forged cross-site request could ride on.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Annotated, Any

from fastapi import APIRouter, File, Query, Request, UploadFile
from fastapi.responses import PlainTextResponse, Response

from imagescaler.api.schemas import FormatInfo, FormatsResponse, HealthResponse
from imagescaler.api.validation import read_upload, validate
from imagescaler.errors import TransformTimeoutError
from imagescaler.imaging.codecs import CODECS

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from imagescaler.config import Settings
    from imagescaler.imaging.pipeline import ConvertedImage, ImagePipeline, Upload
    from imagescaler.imaging.pool import TransformPool

logger = logging.getLogger(__name__)

router = APIRouter()

_TEXT_ERROR: dict[str, Any] = {"content": {"text/plain": {}}}

_IMAGE_RESPONSES: dict[int | str, dict[str, Any]] = {
    200: {
        "description": "The transformed image",
        "content": {codec.mime_type: {} for codec in CODECS.values()},
    },
    400: {"description": "Invalid upload or parameters", **_TEXT_ERROR},
    413: {"description": "Upload exceeds size limits", **_TEXT_ERROR},
    422: {"description": "Image could not be decoded", **_TEXT_ERROR},
    503: {"description": "No transform slot available", **_TEXT_ERROR},
    504: {"description": "Transform timed out", **_TEXT_ERROR},
}

UploadField = Annotated[UploadFile | None, File(description="Image file to transform")]
NewFileExt = Annotated[
    str | None,
    Query(alias="newFileExt", description="Output extension, e.g. '.png'; falls back to the upload's own"),
]


def _get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def _get_pipeline(request: Request) -> ImagePipeline:
    pipeline: ImagePipeline = request.app.state.pipeline
    return pipeline


def _get_transform_pool(request: Request) -> TransformPool:
    pool: TransformPool = request.app.state.transform_pool
    return pool


async def _transform_upload(
    request: Request,
    file: UploadFile | None,
    operation: Callable[[ImagePipeline, Upload], Awaitable[ConvertedImage]],
    filename_stem: str,
) -> Response:
    settings = _get_settings(request)
    upload = await read_upload(file, settings.max_file_size)

    error = validate(upload, settings.max_file_size)
    if error is not None:
        raise error

    try:
        converted = await asyncio.wait_for(
            operation(_get_pipeline(request), upload),
            timeout=settings.transform_timeout,
        )
    except TimeoutError as exc:
        logger.warning("Transform of %r exceeded %.1fs", upload.filename, settings.transform_timeout)
        raise TransformTimeoutError() from exc

    filename = f"{filename_stem}{converted.extension}"
    return Response(
        content=converted.data,
        media_type=converted.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/test", response_class=PlainTextResponse, summary="Service check")
async def service_test() -> str:
    return "Service OK"


@router.post(
    "/ScaleImageSize",
    response_class=Response,
    responses=_IMAGE_RESPONSES,
    summary="Resize an image to explicit dimensions",
)
async def scale_image_size(
    request: Request,
    width: Annotated[int, Query(description="Target width in pixels (-1 keeps the source width)")],
    height: Annotated[int, Query(description="Target height in pixels (-1 keeps the source height)")],
    file: UploadField = None,
    new_file_ext: NewFileExt = None,
) -> Response:
    """Resize an uploaded image, optionally changing its format."""
    return await _transform_upload(
        request,
        file,
        lambda pipeline, upload: pipeline.scale_to_size(upload, width, height, new_file_ext),
        "resized_image",
    )


@router.post(
    "/ScaleImagePercentage",
    response_class=Response,
    responses=_IMAGE_RESPONSES,
    summary="Scale an image by a percentage",
)
async def scale_image_percentage(
    request: Request,
    percentage_change: Annotated[int, Query(alias="percentageChange", description="Scale factor in percent")],
    file: UploadField = None,
    new_file_ext: NewFileExt = None,
) -> Response:
    """Scale both sides of an uploaded image, optionally changing its format."""
    return await _transform_upload(
        request,
        file,
        lambda pipeline, upload: pipeline.scale_by_percentage(upload, percentage_change, new_file_ext),
        "resized_image",
    )


@router.post(
    "/ChangeImageFileType",
    response_class=Response,
    responses=_IMAGE_RESPONSES,
    summary="Convert an image to another format",
)
async def change_image_file_type(
    request: Request,
    new_file_ext: Annotated[str, Query(alias="newFileExt", description="Output extension, e.g. '.png'")],
    file: UploadField = None,
) -> Response:
    """Re-encode an uploaded image without changing its dimensions."""
    return await _transform_upload(
        request,
        file,
        lambda pipeline, upload: pipeline.change_type(upload, new_file_ext),
        "converted_image",
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health(request: Request) -> HealthResponse:
    """Return service health status."""
    settings = _get_settings(request)
    pool = _get_transform_pool(request)
    return HealthResponse(
        status="ok",
        concurrent_requests=pool.active_count,
        queue_depth=pool.queue_depth,
        max_concurrent=settings.max_concurrent,
    )


@router.get(
    "/formats",
    response_model=FormatsResponse,
    summary="List supported output formats",
)
async def list_formats() -> FormatsResponse:
    """Return the allow-listed extensions and the MIME types they are served with."""
    return FormatsResponse(
        formats=[FormatInfo(extension=codec.extension, mime_type=codec.mime_type) for codec in CODECS.values()]
    )
