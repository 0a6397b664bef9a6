"""YouTube resolver using the official Data API v3."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from crabo.core.exceptions import ClientError
from crabo.core.models import CacheHints, Snapshot, SnapshotAndHints
from crabo.core.types import Provider
from crabo.http.media import guess_mime_from_path
from crabo.resolution.base import AbstractResolver

if TYPE_CHECKING:
    from crabo.http.client import Clients

logger = logging.getLogger(__name__)

SHORT_HOST = "youtu.be"
CANONICAL_HOST = "youtube.com"

# Canonical paths carrying the video id as second segment
ID_PATH_PREFIXES = ("shorts", "embed", "live")

# Thumbnail preference, see
# https://developers.google.com/youtube/v3/docs/videos#snippet.thumbnails
#   default  -  120px x 90px
#   medium   -  320px x 180px
#   high     -  480px x 360px
#   standard -  640px x 480px (available for some videos)
#   maxres   - 1280px x 720px (available for some videos)
THUMBNAIL_PREFERENCE = ("high", "standard", "maxres", "medium", "default")


class Thumbnail(BaseModel):
    """Thumbnail image details."""

    url: str | None = None


class Snippet(BaseModel):
    """Basic details about a video."""

    title: str | None = None
    description: str | None = None
    thumbnails: dict[str, Thumbnail] = Field(default_factory=dict)
    tags: list[str] | None = None


class Video(BaseModel):
    snippet: Snippet


class VideoListResponse(BaseModel):
    """Response of ``videos.list``."""

    model_config = ConfigDict(populate_by_name=True)

    videos: list[Video] = Field(default_factory=list, alias="items")


def _host_is(host: str, domain: str) -> bool:
    return host == domain or host.endswith(f".{domain}")


def extract_video_id(url: str) -> str | None:
    """
    Extract YouTube video id from ``url``.

    Supports short ``youtu.be/<id>`` links, ``youtube.com/watch?v=<id>`` and
    ``youtube.com/{shorts,embed,live}/<id>`` paths.
    """
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()

    if _host_is(host, SHORT_HOST):
        return parsed.path.strip("/").split("/", 1)[0] or None

    if _host_is(host, CANONICAL_HOST):
        if values := parse_qs(parsed.query).get("v"):
            return values[0] or None

        segments = [s for s in parsed.path.split("/") if s]
        if len(segments) >= 2 and segments[0] in ID_PATH_PREFIXES:
            return segments[1]

    logger.debug(f"Could not extract YouTube video ID from URL {url}")
    return None


class YoutubeResolver(AbstractResolver):
    """
    YouTube video metadata resolver.

    API Documentation: https://developers.google.com/youtube/v3/docs/videos/list
    """

    PROVIDER: ClassVar[Provider] = Provider.YOUTUBE
    API_URL: ClassVar[str] = "https://www.googleapis.com/youtube/v3/videos"
    SOURCE: ClassVar[str] = "YouTube"

    def __init__(self, api_key: str | None) -> None:
        self.api_key = api_key

    def cache_hints(self, url: str) -> CacheHints | None:
        video_id = extract_video_id(url)
        return self.hints(video_id) if video_id else None

    def thumbnail_to_snapshot(
        self,
        url: str,
        video: Video,
    ) -> Snapshot | None:
        """Produce snapshot from ``video`` details if it has a usable thumbnail."""
        thumbnail = next(
            (
                video.snippet.thumbnails[key]
                for key in THUMBNAIL_PREFERENCE
                if key in video.snippet.thumbnails
            ),
            None,
        )

        if thumbnail is None:
            return None

        return Snapshot(
            url=url,
            preview_url=thumbnail.url,
            title=video.snippet.title,
            description=video.snippet.description,
            source=self.SOURCE,
            tags=[f"#{tag}" for tag in video.snippet.tags or []],
            preview_mime_type=guess_mime_from_path(thumbnail.url),
        )

    async def _snap(
        self,
        url: str,
        hints: CacheHints,
        clients: Clients,
    ) -> SnapshotAndHints:
        video_id = hints.id

        if not self.api_key:
            logger.warning(f"No YouTube API key configured, skipping '{video_id}'")
            return SnapshotAndHints(snapshot=None, hints=hints, transient=True)

        try:
            data = await clients.generic_client.get_json(
                self.API_URL,
                params={
                    "id": video_id,
                    "key": self.api_key,
                    "part": "snippet",
                    "fields": "items(id,snippet)",
                },
            )
            response = VideoListResponse.model_validate(data)
        except ClientError as e:
            logger.warning(
                f"Failed to get details for YouTube '{video_id}', "
                f"API call result is: {e.message}"
            )
            return self.absent(hints)
        except ValidationError as e:
            logger.warning(f"Unexpected YouTube API response for '{video_id}': {e}")
            return self.absent(hints)

        if not response.videos:
            logger.info(f"YouTube has no video '{video_id}'")
            return self.absent(hints)

        return SnapshotAndHints(
            snapshot=self.thumbnail_to_snapshot(url, response.videos[0]),
            hints=hints,
        )
