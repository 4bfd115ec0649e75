"""Upload checks performed before any decode work."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from imagescaler.errors import EmptyFileError, ImageScalerError, NotAnImageError, UploadTooLargeError
from imagescaler.imaging.pipeline import Upload

if TYPE_CHECKING:
    from fastapi import UploadFile

logger = logging.getLogger(__name__)


async def read_upload(file: UploadFile | None, max_file_size: int) -> Upload:
    """Read a multipart file into an :class:`Upload`.

    At most ``max_file_size + 1`` bytes are read so oversized uploads can be
    rejected without buffering them whole. A missing file yields an empty
    upload.
    """
    if file is None:
        return Upload(data=b"")
    try:
        data = await file.read(max_file_size + 1)
    finally:
        await file.close()
    return Upload(data=data, content_type=file.content_type, filename=file.filename)


def validate(upload: Upload | None, max_file_size: int | None = None) -> ImageScalerError | None:
    """Return the reason an upload must be rejected, or None if it may be decoded.

    Passing does not mean the bytes decode; that is only known once the
    pipeline opens them.
    """
    if upload is None or upload.size == 0:
        return EmptyFileError()
    if not (upload.content_type or "").lower().startswith("image"):
        logger.info("Rejected upload %r with content type %r", upload.filename, upload.content_type)
        return NotAnImageError()
    if max_file_size is not None and upload.size > max_file_size:
        return UploadTooLargeError(f"Upload exceeds the {max_file_size} byte limit")
    return None
