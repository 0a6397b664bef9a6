"""Core types, models, and utilities."""

from .cleaner import ContentCleaner
from .exceptions import (
    CacheError,
    ClientError,
    ConfigurationError,
    CraboError,
    ResponseParseError,
    SuppressedError,
    TransportError,
    UnexpectedStatusError,
)
from .models import (
    CacheHints,
    CacheItem,
    ServerIndexingPermissions,
    Snapshot,
    SnapshotAndHints,
)
from .types import Provider, RobotsTxtStatus

__all__ = [
    # Types
    "Provider",
    "RobotsTxtStatus",
    # Models
    "CacheHints",
    "CacheItem",
    "ServerIndexingPermissions",
    "Snapshot",
    "SnapshotAndHints",
    # Cleaning
    "ContentCleaner",
    # Exceptions
    "CacheError",
    "ClientError",
    "ConfigurationError",
    "CraboError",
    "ResponseParseError",
    "SuppressedError",
    "TransportError",
    "UnexpectedStatusError",
]
