"""Tests for the output format table."""

from __future__ import annotations

import pytest
from PIL import Image

from imagescaler.errors import UnsupportedFormatError
from imagescaler.imaging.codecs import (
    CODECS,
    PERMITTED_EXTENSIONS,
    extension_from_filename,
    get_codec,
    is_supported,
    mime_type_for,
    resolve_extension,
)


class TestCodecTable:
    def test_allow_list(self) -> None:
        assert set(PERMITTED_EXTENSIONS) == {".jpg", ".png", ".bmp", ".tiff", ".gif"}

    def test_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            CODECS[".webp"] = CODECS[".png"]  # type: ignore[index]

    @pytest.mark.parametrize(
        ("extension", "mime_type"),
        [
            (".jpg", "image/jpeg"),
            (".png", "image/png"),
            (".bmp", "image/bmp"),
            (".tiff", "image/tiff"),
            (".gif", "image/gif"),
        ],
    )
    def test_mime_types(self, extension: str, mime_type: str) -> None:
        assert CODECS[extension].mime_type == mime_type
        assert mime_type_for(extension.upper()) == mime_type

    def test_get_codec_is_case_insensitive(self) -> None:
        assert get_codec(".JPG").pil_format == "JPEG"

    @pytest.mark.parametrize("extension", [".webp", "", "png", ".jpeg"])
    def test_get_codec_rejects_unlisted(self, extension: str) -> None:
        with pytest.raises(UnsupportedFormatError):
            get_codec(extension)


class TestResolveExtension:
    def test_requested_extension_used(self) -> None:
        assert resolve_extension(".gif", "photo.png") == ".gif"

    def test_requested_extension_normalized(self) -> None:
        assert resolve_extension(".TIFF", "photo.png") == ".tiff"

    def test_unlisted_request_falls_back_to_filename(self) -> None:
        assert resolve_extension(".webp", "photo.PNG") == ".png"

    @pytest.mark.parametrize("requested", [None, ""])
    def test_missing_request_falls_back_to_filename(self, requested: str | None) -> None:
        assert resolve_extension(requested, "photo.bmp") == ".bmp"

    def test_no_extension_anywhere(self) -> None:
        assert resolve_extension(None, "photo") == ""
        assert not is_supported("")

    def test_extension_from_filename(self) -> None:
        assert extension_from_filename("archive.tar.GIF") == ".gif"
        assert extension_from_filename(None) == ""


class TestPrepare:
    def test_jpeg_converts_alpha(self) -> None:
        with Image.new("RGBA", (4, 4)) as image:
            prepared = get_codec(".jpg").prepare(image)
            assert prepared.mode == "RGB"
            assert prepared is not image

    def test_png_keeps_supported_mode(self) -> None:
        with Image.new("RGBA", (4, 4)) as image:
            assert get_codec(".png").prepare(image) is image

    def test_unrestricted_codec_keeps_mode(self) -> None:
        with Image.new("CMYK", (4, 4)) as image:
            assert get_codec(".tiff").prepare(image) is image
