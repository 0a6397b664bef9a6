"""Domain models for snapshots, cache hints and robots.txt permissions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .types import Provider, RobotsTxtStatus


class Snapshot(BaseModel):
    """Normalized preview of a single URL."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="URL the snapshot was made for")
    preview_url: str | None = Field(default=None, description="Preview image URL")
    title: str | None = Field(default=None, description="Page or video title")
    description: str | None = Field(default=None, description="Page or video description")
    source: str | None = Field(default=None, description="Site or service name")
    tags: list[str] = Field(default_factory=list, description="Tags, e.g. video hashtags")
    preview_mime_type: str | None = Field(
        default=None, description="Media type of the preview image"
    )
    application_name: str | None = Field(
        default=None, description="Guessed application class, e.g. 'guessed.social'"
    )


@dataclass(frozen=True)
class CacheHints:
    """Routing key for a URL: which provider handles it and its cache id."""

    # Identifies resolver for these hints
    provider: Provider

    # ID of object, e.g. video ID to pass to a service API, or page URL
    id: str


@dataclass
class SnapshotAndHints:
    """Snapshot produced by a resolver together with the hints used."""

    snapshot: Snapshot | None
    hints: CacheHints

    # Absent because of local configuration, not the remote content; not cached
    transient: bool = False


class ServerIndexingPermissions(BaseModel):
    """What a site told us in its robots.txt, if anything."""

    model_config = ConfigDict(frozen=True)

    robots_txt: str | None = None
    robots_txt_status: RobotsTxtStatus

    @classmethod
    def from_string(cls, data: str) -> ServerIndexingPermissions:
        """Permissions backed by acquired robots.txt content."""
        return cls(robots_txt=data, robots_txt_status=RobotsTxtStatus.ACQUIRED)

    @classmethod
    def from_status(cls, status: RobotsTxtStatus) -> ServerIndexingPermissions:
        """Permissions for a site without robots.txt content."""
        return cls(robots_txt=None, robots_txt_status=status)


class CacheItem(BaseModel):
    """Record stored in the two-tier cache.

    ``content`` set to ``None`` is a recorded absence (negative entry),
    which is different from the key not being in cache at all.
    """

    id: str
    content: str | None = None
    expires_at: datetime
    local_expires_at: datetime | None = None

    @property
    def is_negative(self) -> bool:
        return self.content is None
