"""API schema definitions."""

from crabo.api.schemas.base import APIBaseSchema
from crabo.api.schemas.requests import MAX_URLS_PER_REQUEST, SnapRequest
from crabo.api.schemas.responses import HealthResponse, SnapResponse, SnapshotResponse

__all__ = [
    # Base
    "APIBaseSchema",
    # Requests
    "MAX_URLS_PER_REQUEST",
    "SnapRequest",
    # Responses
    "HealthResponse",
    "SnapResponse",
    "SnapshotResponse",
]
