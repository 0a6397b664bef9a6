"""Service layer for orchestrating business logic."""

from crabo.services.snapshot import SnapshotMaker

__all__ = [
    "SnapshotMaker",
]
