"""Error taxonomy for image transforms.

Every failure is scoped to a single request. Each error carries the HTTP
status and the plain-text reason the API returns for it.
"""

from __future__ import annotations


class ImageScalerError(Exception):
    """Base class for request-scoped image transform failures."""

    status_code: int = 400
    detail: str = "Bad request"

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class EmptyFileError(ImageScalerError):
    """No file, or a zero-length file, was uploaded."""

    detail = "No image uploaded."


class NotAnImageError(ImageScalerError):
    """The declared content type is not an image type."""

    detail = "Invalid image file"


class DecodeError(ImageScalerError):
    """The uploaded bytes could not be decoded as a raster image."""

    status_code = 422
    detail = "Image could not be decoded"


class UnsupportedFormatError(ImageScalerError):
    """The output extension is not in the allow-list."""

    detail = "Unsupported image format"


class EncodeError(UnsupportedFormatError):
    """The raster cannot be written in the chosen output format."""

    detail = "Image could not be encoded"


class ResizeError(ImageScalerError):
    """The resolved target dimensions are not usable."""

    detail = "Invalid target dimensions"


class UploadTooLargeError(ImageScalerError):
    status_code = 413
    detail = "Image too large"


class ServiceBusyError(ImageScalerError):
    status_code = 503
    detail = "Service busy, try again later"


class TransformTimeoutError(ImageScalerError):
    status_code = 504
    detail = "Image transform timed out"
