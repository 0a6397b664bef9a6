"""Response schemas for API endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from crabo.api.schemas.base import APIBaseSchema


class SnapshotResponse(APIBaseSchema):
    """Link preview of a single URL."""

    url: str
    preview_url: str | None = None
    title: str | None = None
    description: str | None = None
    source: str | None = None
    tags: list[str] = Field(default_factory=list)
    preview_mime_type: str | None = None
    application_name: str | None = None


class SnapResponse(APIBaseSchema):
    """Snapshots of requested URLs; URLs without preview are left out."""

    snapshots: list[SnapshotResponse]


# Health check
class HealthResponse(APIBaseSchema):
    """Health check response."""

    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    services: dict[str, Literal["up", "down", "unknown"]]
