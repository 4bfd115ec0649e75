"""Allow-listed output formats.

``CODECS`` is the single source of truth for which extensions are accepted,
which Pillow encoder writes them and which MIME type they are served with.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePath
from types import MappingProxyType
from typing import TYPE_CHECKING

from imagescaler.errors import UnsupportedFormatError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from PIL import Image

logger = logging.getLogger(__name__)

JPG_EXT = ".jpg"
PNG_EXT = ".png"
BMP_EXT = ".bmp"
TIFF_EXT = ".tiff"
GIF_EXT = ".gif"


def mime_type_for(extension: str) -> str:
    """Return the MIME type served for an extension."""
    ext = extension.lower()
    if ext == JPG_EXT:
        return "image/jpeg"
    return f"image/{ext.lstrip('.')}"


@dataclass(frozen=True)
class Codec:
    """Encoder settings for one output extension.

    Rasters whose mode is not in ``save_modes`` are converted to
    ``fallback_mode`` before saving, since Pillow refuses to write them.
    An empty ``save_modes`` accepts every mode.
    """

    extension: str
    pil_format: str
    save_modes: frozenset[str] = frozenset()
    fallback_mode: str = "RGB"

    @property
    def mime_type(self) -> str:
        return mime_type_for(self.extension)

    def prepare(self, image: Image.Image) -> Image.Image:
        """Return ``image`` in a mode this codec can write.

        The returned image is a new object when a conversion happened; the
        caller owns closing it.
        """
        if not self.save_modes or image.mode in self.save_modes:
            return image
        logger.debug("Converting %s raster to %s for %s", image.mode, self.fallback_mode, self.pil_format)
        return image.convert(self.fallback_mode)


CODECS: Mapping[str, Codec] = MappingProxyType(
    {
        JPG_EXT: Codec(JPG_EXT, "JPEG", frozenset({"1", "L", "RGB", "CMYK"})),
        PNG_EXT: Codec(PNG_EXT, "PNG", frozenset({"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}), "RGBA"),
        BMP_EXT: Codec(BMP_EXT, "BMP", frozenset({"1", "L", "P", "RGB", "RGBA"}), "RGBA"),
        TIFF_EXT: Codec(TIFF_EXT, "TIFF"),
        GIF_EXT: Codec(GIF_EXT, "GIF", frozenset({"1", "L", "LA", "P", "RGB", "RGBA"})),
    }
)

PERMITTED_EXTENSIONS: tuple[str, ...] = tuple(CODECS)


def normalize_extension(value: str | None) -> str:
    """Lowercase and strip an extension; ``None`` becomes an empty string."""
    return (value or "").strip().lower()


def is_supported(value: str | None) -> bool:
    return normalize_extension(value) in CODECS


def extension_from_filename(filename: str | None) -> str:
    """Return the lowercased dotted suffix of ``filename`` (``""`` if none)."""
    if not filename:
        return ""
    return PurePath(filename).suffix.lower()


def resolve_extension(requested: str | None, filename: str | None) -> str:
    """Pick the output extension for a request.

    A requested extension is used when it is allow-listed (case-insensitive);
    anything else falls back to the extension of the uploaded filename.
    """
    if is_supported(requested):
        return normalize_extension(requested)
    if requested:
        logger.info("Ignoring unsupported extension %r, falling back to source file", requested)
    return extension_from_filename(filename)


def get_codec(extension: str) -> Codec:
    """Return the codec for an extension.

    Raises:
        UnsupportedFormatError: If the extension is not allow-listed.
    """
    try:
        return CODECS[normalize_extension(extension)]
    except KeyError:
        shown = extension or "(none)"
        raise UnsupportedFormatError(
            f"Unsupported image format: {shown}. Supported: {', '.join(PERMITTED_EXTENSIONS)}"
        ) from None
