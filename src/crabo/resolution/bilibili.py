"""BiliBili resolver using the public web-interface API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, ClassVar
from urllib.parse import urljoin, urlparse

from pydantic import BaseModel, ValidationError

from crabo.core.exceptions import ClientError
from crabo.core.models import CacheHints, Snapshot, SnapshotAndHints
from crabo.core.types import Provider
from crabo.http.media import guess_mime_from_path
from crabo.resolution.base import AbstractResolver

if TYPE_CHECKING:
    from crabo.http.client import Clients, GenericClient

logger = logging.getLogger(__name__)

SHORT_HOST = "b23.tv"
CANONICAL_HOST = "bilibili.com"
VIDEO_PATH_PREFIX = "/video/"
VIDEO_ID_PREFIX = "BV"


class VideoData(BaseModel):
    """A very simplified version of BiliBili's video data."""

    # Thumbnail image reference
    pic: str | None = None
    title: str | None = None
    desc: str | None = None


class BiliBiliResponse(BaseModel):
    """
    Example response:

        {
          "code": 0,
          "message": "0",
          "data": {"bvid": "BV...", "pic": "https://...", "title": "...", "desc": "..."}
        }

    ``data`` is null when the video does not exist.
    """

    code: int = 0
    message: str | None = None
    data: VideoData | None = None


def _host_is(host: str, domain: str) -> bool:
    return host == domain or host.endswith(f".{domain}")


def extract_video_id(url: str) -> str | None:
    """
    Extract BiliBili video id from ``url``.

    For ``b23.tv`` short links the short code is returned instead; it is
    resolved into a real video id when the snapshot is made.
    """
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()

    if _host_is(host, SHORT_HOST):
        return parsed.path.strip("/") or None

    if not _host_is(host, CANONICAL_HOST):
        logger.debug(f"Could not extract BiliBili video ID from URL {url}")
        return None

    if not parsed.path.startswith(VIDEO_PATH_PREFIX):
        return None

    return parsed.path.removeprefix(VIDEO_PATH_PREFIX).strip("/") or None


async def resolve_short_url(code: str, client: GenericClient) -> str | None:
    """
    Resolve ``b23.tv`` short ``code`` into a video id.

    ``client`` must not follow redirects, the target is read from the
    ``location`` header.
    """
    url = urljoin(f"https://{SHORT_HOST}/", code)

    try:
        headers = await client.head(url)
    except ClientError as e:
        logger.warning(f"Failed to resolve short URL {url}: {e.message}")
        return None

    location = headers.get("location")
    if not location:
        logger.warning(f"Short URL {url} did not redirect anywhere")
        return None

    return extract_video_id(urljoin(url, location))


class BiliBiliResolver(AbstractResolver):
    """
    Barebones BiliBili video metadata resolver.

    API endpoint was taken from https://github.com/Nemo2011/bilibili-api
    """

    PROVIDER: ClassVar[Provider] = Provider.BILIBILI
    API_URL: ClassVar[str] = "https://api.bilibili.com/x/web-interface/view"
    SOURCE: ClassVar[str] = "BiliBili"

    def cache_hints(self, url: str) -> CacheHints | None:
        video_id = extract_video_id(url)
        return self.hints(video_id) if video_id else None

    def video_to_snapshot(self, url: str, video: VideoData) -> Snapshot:
        return Snapshot(
            url=url,
            preview_url=video.pic,
            title=video.title,
            description=video.desc,
            source=self.SOURCE,
            preview_mime_type=guess_mime_from_path(video.pic),
        )

    async def _snap(
        self,
        url: str,
        hints: CacheHints,
        clients: Clients,
    ) -> SnapshotAndHints:
        video_id = hints.id

        # Anything that does not look like a video id came from a short link
        if not video_id.startswith(VIDEO_ID_PREFIX):
            resolved = await resolve_short_url(video_id, clients.no_follow_client)
            video_id = resolved or video_id

        try:
            data = await clients.generic_client.get_json(
                self.API_URL,
                params={"bvid": video_id},
            )
            response = BiliBiliResponse.model_validate(data)
        except ClientError as e:
            logger.warning(
                f"Failed to get details for BiliBili video '{video_id}', "
                f"API call result is: {e.message}"
            )
            return self.absent(hints)
        except ValidationError as e:
            logger.warning(f"Unexpected BiliBili API response for '{video_id}': {e}")
            return self.absent(hints)

        if response.data is None:
            logger.info(
                f"BiliBili has no video '{video_id}': "
                f"code {response.code}, {response.message}"
            )
            return self.absent(hints)

        return SnapshotAndHints(
            snapshot=self.video_to_snapshot(url, response.data),
            hints=hints,
        )
