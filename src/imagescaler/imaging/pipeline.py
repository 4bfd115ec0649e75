"""Image transform pipeline.

Decodes an upload with Pillow, optionally resizes it, and re-encodes it with
the codec chosen for the output extension. The blocking work lives in
:func:`transform_image`; :class:`ImagePipeline` runs it on the transform pool
so request handlers can await it.
"""

from __future__ import annotations

import io
import logging
from contextlib import ExitStack
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from PIL import Image, UnidentifiedImageError

from imagescaler.errors import DecodeError, EncodeError, ResizeError, ServiceBusyError, UploadTooLargeError
from imagescaler.imaging.codecs import get_codec, resolve_extension
from imagescaler.imaging.dimensions import (
    KEEP_DIMENSION,
    NoResize,
    ResizeDirective,
    directive_from_params,
    resolve,
)

if TYPE_CHECKING:
    from imagescaler.config import Settings
    from imagescaler.imaging.pool import TransformPool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Upload:
    """Raw uploaded file as received from the caller."""

    data: bytes
    content_type: str | None = None
    filename: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ConvertedImage:
    """Encoded output of a transform."""

    data: bytes
    extension: str
    mime_type: str


def _decode(data: bytes, max_image_pixels: int | None) -> Image.Image:
    """Open and fully load ``data``; the caller owns closing the result."""
    try:
        image = Image.open(io.BytesIO(data))
    except Image.DecompressionBombError as exc:
        raise UploadTooLargeError(str(exc)) from exc
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise DecodeError(f"Image could not be decoded: {exc}") from exc

    pixels = image.width * image.height
    if max_image_pixels is not None and pixels > max_image_pixels:
        image.close()
        raise UploadTooLargeError(f"Image has {pixels} pixels, limit is {max_image_pixels}")

    try:
        image.load()
    except (OSError, SyntaxError, ValueError) as exc:
        image.close()
        raise DecodeError(f"Image could not be decoded: {exc}") from exc
    return image


def _target_size(
    source: tuple[int, int], directive: ResizeDirective, max_image_pixels: int | None
) -> tuple[int, int]:
    source_width, source_height = source
    width, height = resolve(source_width, source_height, directive)
    if width == KEEP_DIMENSION:
        width = source_width
    if height == KEEP_DIMENSION:
        height = source_height

    if width < 1 or height < 1:
        raise ResizeError(f"Invalid target dimensions {width}x{height}")
    if max_image_pixels is not None and width * height > max_image_pixels:
        raise ResizeError(f"Target dimensions {width}x{height} exceed the {max_image_pixels} pixel limit")
    return width, height


def transform_image(
    upload: Upload,
    directive: ResizeDirective,
    requested_extension: str | None = None,
    *,
    max_image_pixels: int | None = None,
    resample: Image.Resampling = Image.Resampling.BICUBIC,
) -> ConvertedImage:
    """Decode, optionally resize, and re-encode an uploaded image.

    Args:
        upload: The uploaded bytes and their original filename.
        directive: How (or whether) to change the pixel dimensions.
        requested_extension: Output extension; ignored unless allow-listed,
            in which case the upload's own extension is used.
        max_image_pixels: Upper bound for decoded and resized rasters.
        resample: Pillow resampling filter used when resizing.

    Returns:
        The encoded bytes with their extension and MIME type.

    Raises:
        DecodeError: If the bytes are not a readable image.
        UnsupportedFormatError: If neither extension is allow-listed.
        UploadTooLargeError: If the decoded raster exceeds the pixel limit.
        ResizeError: If the resolved dimensions are not usable.
        EncodeError: If the encoder cannot write the raster.
    """
    with ExitStack() as stack:
        image = _decode(upload.data, max_image_pixels)
        stack.callback(image.close)
        source_size = image.size
        source_format = image.format

        codec = get_codec(resolve_extension(requested_extension, upload.filename))

        if not isinstance(directive, NoResize):
            target = _target_size(source_size, directive, max_image_pixels)
            try:
                image = image.resize(target, resample)
            except ValueError as exc:
                raise ResizeError(f"Image could not be resized: {exc}") from exc
            stack.callback(image.close)

        prepared = codec.prepare(image)
        if prepared is not image:
            stack.callback(prepared.close)

        buffer = io.BytesIO()
        try:
            prepared.save(buffer, format=codec.pil_format)
        except (OSError, ValueError) as exc:
            raise EncodeError(f"Image could not be encoded as {codec.extension}: {exc}") from exc
        output_size = prepared.size

    logger.info(
        "Transformed %s %dx%d -> %s %dx%d (%d bytes)",
        source_format,
        source_size[0],
        source_size[1],
        codec.extension,
        output_size[0],
        output_size[1],
        buffer.tell(),
    )
    return ConvertedImage(buffer.getvalue(), codec.extension, codec.mime_type)


class ImagePipeline:
    """Async entry points that run :func:`transform_image` on the transform pool."""

    def __init__(self, pool: TransformPool, settings: Settings) -> None:
        self._pool = pool
        self._max_image_pixels = settings.max_image_pixels
        self._resample = Image.Resampling[settings.resample.upper()]

    async def transform(
        self,
        upload: Upload,
        directive: ResizeDirective,
        requested_extension: str | None = None,
    ) -> ConvertedImage:
        """Transform ``upload`` without blocking the event loop.

        Raises:
            ServiceBusyError: If no transform slot frees up in time.
        """
        func = partial(
            transform_image,
            upload,
            directive,
            requested_extension,
            max_image_pixels=self._max_image_pixels,
            resample=self._resample,
        )
        try:
            return await self._pool.run(func)
        except TimeoutError as exc:
            raise ServiceBusyError() from exc

    async def change_type(self, upload: Upload, new_extension: str) -> ConvertedImage:
        """Re-encode ``upload`` to ``new_extension`` keeping its dimensions."""
        return await self.transform(upload, NoResize(), new_extension)

    async def scale_by_percentage(
        self, upload: Upload, percentage: int, new_extension: str | None = None
    ) -> ConvertedImage:
        return await self.transform(upload, directive_from_params(percentage=percentage), new_extension)

    async def scale_to_size(
        self, upload: Upload, width: int, height: int, new_extension: str | None = None
    ) -> ConvertedImage:
        return await self.transform(upload, directive_from_params(width, height), new_extension)
