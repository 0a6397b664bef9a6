"""Crabo - link preview snapshots of videos and web pages."""

from crabo.client import CraboClient, snap_many
from crabo.core.models import CacheHints, Snapshot, SnapshotAndHints
from crabo.core.types import Provider, RobotsTxtStatus

__version__ = "0.3.0"
__all__ = [
    # Client
    "CraboClient",
    "snap_many",
    # Types
    "Provider",
    "RobotsTxtStatus",
    # Models
    "CacheHints",
    "Snapshot",
    "SnapshotAndHints",
    # Version
    "__version__",
]
