"""Pydantic response schemas for the ImageScaler API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    concurrent_requests: int
    queue_depth: int
    max_concurrent: int


class FormatInfo(BaseModel):
    """A supported output format."""

    extension: str = Field(description="Lowercase dotted extension, e.g. '.png'")
    mime_type: str


class FormatsResponse(BaseModel):
    """Response for the formats listing endpoint."""

    formats: list[FormatInfo]
