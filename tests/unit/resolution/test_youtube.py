"""Tests for YouTube resolver."""

from __future__ import annotations

from typing import Any

import pytest
import respx
from httpx import Response

from crabo.core.models import CacheHints
from crabo.core.types import Provider
from crabo.http.client import Clients
from crabo.resolution.youtube import YoutubeResolver, extract_video_id

API_HOST = "www.googleapis.com"
API_PATH = "/youtube/v3/videos"


@pytest.fixture
def resolver() -> YoutubeResolver:
    """Create a YouTube resolver."""
    return YoutubeResolver(api_key="test-youtube-key")


@pytest.fixture
def video_response_data() -> dict[str, Any]:
    """Sample videos.list response."""
    return {
        "items": [
            {
                "id": "x8",
                "snippet": {
                    "title": "Crab dance",
                    "description": "Crabs dancing\non the beach",
                    "thumbnails": {
                        "default": {"url": "https://i.ytimg.com/vi/x8/default.jpg"},
                        "medium": {"url": "https://i.ytimg.com/vi/x8/mqdefault.jpg"},
                        "high": {"url": "https://i.ytimg.com/vi/x8/hqdefault.jpg"},
                        "maxres": {"url": "https://i.ytimg.com/vi/x8/maxresdefault.jpg"},
                    },
                    "tags": ["crab", "dance"],
                },
            }
        ]
    }


# ============================================================================
# Video ID Extraction Tests
# ============================================================================


class TestExtractVideoId:
    """Tests for video id extraction."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://youtu.be/x8?si=HxxxJ", "x8"),
            ("https://youtu.be/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
            ("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42", "dQw4w9WgXcQ"),
            ("https://m.youtube.com/watch?v=abc", "abc"),
            ("https://youtube.com/shorts/abc123", "abc123"),
            ("https://www.youtube.com/embed/abc123?autoplay=1", "abc123"),
            ("https://youtu.be/", None),
            ("https://www.youtube.com/", None),
            ("https://www.youtube.com/@crabs", None),
            ("https://example.com/watch?v=abc", None),
            ("https://notyoutube.com/watch?v=abc", None),
        ],
    )
    def test_extract(self, url: str, expected: str | None):
        """Video id is taken from short path or v parameter."""
        assert extract_video_id(url) == expected


class TestYoutubeCacheHints:
    """Tests for hint generation."""

    def test_hints(self, resolver: YoutubeResolver):
        """Hints carry provider and video id."""
        assert resolver.cache_hints("https://youtu.be/x8?si=HxxxJ") == CacheHints(
            Provider.YOUTUBE, "x8"
        )

    def test_same_video_same_hints(self, resolver: YoutubeResolver):
        """Short and canonical links share hints."""
        assert resolver.cache_hints("https://youtu.be/x8") == resolver.cache_hints(
            "https://www.youtube.com/watch?v=x8"
        )

    def test_other_sites(self, resolver: YoutubeResolver):
        """Other sites get no hints."""
        assert resolver.cache_hints("https://example.com/") is None


# ============================================================================
# Snapshot Tests
# ============================================================================


class TestYoutubeSnap:
    """Tests for snapshot production."""

    @respx.mock
    async def test_snapshot(
        self,
        resolver: YoutubeResolver,
        video_response_data: dict[str, Any],
        clients: Clients,
    ):
        """Video details become snapshot."""
        route = respx.get(host=API_HOST, path=API_PATH).mock(
            return_value=Response(200, json=video_response_data)
        )
        hints = resolver.cache_hints("https://youtu.be/x8")

        result = await resolver.snap("https://youtu.be/x8", hints, clients)

        snapshot = result.snapshot
        assert snapshot is not None
        assert snapshot.url == "https://youtu.be/x8"
        assert snapshot.title == "Crab dance"
        assert snapshot.source == "YouTube"
        assert snapshot.tags == ["#crab", "#dance"]
        assert snapshot.preview_url == "https://i.ytimg.com/vi/x8/hqdefault.jpg"
        assert snapshot.preview_mime_type == "image/jpeg"
        assert result.hints == hints

        params = route.calls.last.request.url.params
        assert params["id"] == "x8"
        assert params["key"] == "test-youtube-key"
        assert params["part"] == "snippet"
        assert params["fields"] == "items(id,snippet)"

    @respx.mock
    async def test_thumbnail_preference(self, resolver: YoutubeResolver, clients: Clients):
        """Standard is preferred over maxres when high is missing."""
        respx.get(host=API_HOST, path=API_PATH).mock(
            return_value=Response(
                200,
                json={
                    "items": [
                        {
                            "snippet": {
                                "title": "t",
                                "thumbnails": {
                                    "maxres": {"url": "https://i.ytimg.com/max.jpg"},
                                    "standard": {"url": "https://i.ytimg.com/sd.jpg"},
                                },
                            }
                        }
                    ]
                },
            )
        )

        result = await resolver.snap("https://youtu.be/x8", resolver.hints("x8"), clients)

        assert result.snapshot.preview_url == "https://i.ytimg.com/sd.jpg"
        assert result.snapshot.tags == []

    @respx.mock
    async def test_no_thumbnails(self, resolver: YoutubeResolver, clients: Clients):
        """Video without thumbnails has no snapshot."""
        respx.get(host=API_HOST, path=API_PATH).mock(
            return_value=Response(
                200,
                json={"items": [{"snippet": {"title": "t", "thumbnails": {}}}]},
            )
        )

        result = await resolver.snap("https://youtu.be/x8", resolver.hints("x8"), clients)

        assert result.snapshot is None

    @respx.mock
    async def test_unknown_video(self, resolver: YoutubeResolver, clients: Clients):
        """Empty item list gives no snapshot."""
        respx.get(host=API_HOST, path=API_PATH).mock(
            return_value=Response(200, json={"items": []})
        )

        result = await resolver.snap("https://youtu.be/x8", resolver.hints("x8"), clients)

        assert result.snapshot is None

    @respx.mock
    async def test_api_error(self, resolver: YoutubeResolver, clients: Clients):
        """API failure gives no snapshot."""
        respx.get(host=API_HOST, path=API_PATH).mock(
            return_value=Response(403, json={"error": {"code": 403}})
        )

        result = await resolver.snap("https://youtu.be/x8", resolver.hints("x8"), clients)

        assert result.snapshot is None
        assert result.hints == resolver.hints("x8")

    @respx.mock
    async def test_unexpected_payload(self, resolver: YoutubeResolver, clients: Clients):
        """Payload of unexpected shape gives no snapshot."""
        respx.get(host=API_HOST, path=API_PATH).mock(
            return_value=Response(200, json={"items": "nope"})
        )

        result = await resolver.snap("https://youtu.be/x8", resolver.hints("x8"), clients)

        assert result.snapshot is None

    @respx.mock
    async def test_no_api_key(self, clients: Clients):
        """Without API key no request is made and the result is not final."""
        route = respx.get(host=API_HOST, path=API_PATH)
        resolver = YoutubeResolver(api_key=None)

        result = await resolver.snap("https://youtu.be/x8", resolver.hints("x8"), clients)

        assert result.snapshot is None
        assert result.transient
        assert not route.called
