"""Request schemas for API endpoints."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

from crabo.api.schemas.base import APIBaseSchema

MAX_URLS_PER_REQUEST = 100


class SnapRequest(APIBaseSchema):
    """Request to make snapshots of URLs."""

    urls: Annotated[
        list[str],
        Field(
            max_length=MAX_URLS_PER_REQUEST,
            description="URLs to make snapshots of.",
        ),
    ]

    bypass_cache: Annotated[
        bool,
        Field(
            default=False,
            description="Ignore cached snapshots and resolve every URL again.",
        ),
    ]
