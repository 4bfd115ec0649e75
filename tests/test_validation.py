"""Tests for upload validation."""

from __future__ import annotations

import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from imagescaler.api.validation import read_upload, validate
from imagescaler.errors import EmptyFileError, NotAnImageError, UploadTooLargeError
from imagescaler.imaging.pipeline import Upload


class TestValidate:
    def test_missing_upload(self) -> None:
        assert isinstance(validate(None), EmptyFileError)

    @pytest.mark.parametrize("content_type", ["image/png", "text/plain", None])
    def test_empty_upload_regardless_of_content_type(self, content_type: str | None) -> None:
        assert isinstance(validate(Upload(b"", content_type, "a.png")), EmptyFileError)

    def test_text_content_type_rejected(self) -> None:
        error = validate(Upload(b"\x89PNG not really", "text/plain", "a.png"))
        assert isinstance(error, NotAnImageError)
        assert error.detail == "Invalid image file"

    def test_missing_content_type_rejected(self) -> None:
        assert isinstance(validate(Upload(b"data", None, "a.png")), NotAnImageError)

    def test_image_content_type_accepted_without_decoding(self) -> None:
        assert validate(Upload(b"not decoded here", "image/png", "a.png")) is None

    def test_byte_limit(self) -> None:
        error = validate(Upload(b"x" * 11, "image/png", "a.png"), max_file_size=10)
        assert isinstance(error, UploadTooLargeError)
        assert error.status_code == 413


class TestReadUpload:
    async def test_missing_file_reads_as_empty(self) -> None:
        upload = await read_upload(None, 100)
        assert upload.size == 0

    async def test_reads_at_most_one_byte_past_limit(self) -> None:
        file = UploadFile(
            io.BytesIO(b"x" * 50),
            filename="big.png",
            headers=Headers({"content-type": "image/png"}),
        )
        upload = await read_upload(file, 10)
        assert upload.size == 11
        assert upload.filename == "big.png"
        assert upload.content_type == "image/png"
