"""Shared test fixtures for all tests."""

from __future__ import annotations

from datetime import timedelta
from typing import AsyncIterator

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from crabo.cache.client import AsyncRedisClient
from crabo.cache.keys import CacheKeys
from crabo.cache.tiered import TieredCache, TypedCache
from crabo.config import CraboSettings
from crabo.core.models import ServerIndexingPermissions, Snapshot
from crabo.http.client import Clients, GenericClient, SuppressedClient
from crabo.robots.matchers import MatcherCache
from crabo.robots.validator import RobotsValidator

TEST_USER_AGENT = "fedineko/crabo-test"
ROBOTS_USER_AGENT = "fedineko-crabo"


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_snapshot() -> Snapshot:
    """Create a fully populated sample snapshot."""
    return Snapshot(
        url="https://news.example/article?id=7",
        preview_url="https://news.example/img/preview.png",
        title="Crabs are great",
        description="Everything about crabs",
        source="News Example",
        tags=[],
        preview_mime_type="image/png",
    )


@pytest.fixture
def sample_video_snapshot() -> Snapshot:
    """Create a sample video snapshot."""
    return Snapshot(
        url="https://youtu.be/x8",
        preview_url="https://i.ytimg.com/vi/x8/hqdefault.jpg",
        title="Crab dance",
        description="Crabs dancing",
        source="YouTube",
        tags=["#crab", "#dance"],
        preview_mime_type="image/jpeg",
    )


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def mock_settings() -> CraboSettings:
    """Create mock settings for testing."""
    return CraboSettings(
        redis_url=None,
        youtube_api_key="test-youtube-key",
        user_agent=TEST_USER_AGENT,
        request_timeout=5.0,
        debug=True,
        log_level="DEBUG",
    )


@pytest.fixture
def mock_settings_no_keys() -> CraboSettings:
    """Create settings without optional services and API keys."""
    return CraboSettings(
        redis_url=None,
        youtube_api_key=None,
        user_agent=TEST_USER_AGENT,
    )


# ============================================================================
# Redis Fixtures
# ============================================================================


class FakePipeline:
    """In-memory stand-in for ``redis.asyncio`` pipeline."""

    def __init__(self, redis: FakeRedis) -> None:
        self._redis = redis
        self._commands: list[tuple[str, str, int | None]] = []

    def set(self, key: str, value: str, exat: int | None = None) -> FakePipeline:
        self._commands.append((key, value, exat))
        return self

    async def execute(self) -> list[bool]:
        if self._redis.fail:
            raise RedisConnectionError("Connection refused")

        for key, value, exat in self._commands:
            self._redis.store[key] = value
            self._redis.expire_at[key] = exat

        return [True] * len(self._commands)


class FakeRedis:
    """In-memory stand-in for the ``redis.asyncio.Redis`` calls crabo makes."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.expire_at: dict[str, int | None] = {}
        self.fail = False
        self.mget_calls = 0

    async def mget(self, keys: list[str]) -> list[str | None]:
        if self.fail:
            raise RedisConnectionError("Connection refused")
        self.mget_calls += 1
        return [self.store.get(key) for key in keys]

    def pipeline(self) -> FakePipeline:
        return FakePipeline(self)

    async def ping(self) -> bool:
        if self.fail:
            raise RedisConnectionError("Connection refused")
        return True

    async def aclose(self) -> None:
        pass


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Provide in-memory Redis."""
    return FakeRedis()


@pytest.fixture
def redis_client(fake_redis: FakeRedis) -> AsyncRedisClient:
    """Provide Redis client wired to in-memory Redis."""
    client = AsyncRedisClient("redis://localhost:6379/15")
    client._redis = fake_redis
    return client


# ============================================================================
# HTTP Client Fixtures
# ============================================================================


@pytest.fixture
async def clients() -> AsyncIterator[Clients]:
    """Provide HTTP clients bundle, closed after the test."""
    bundle = Clients(
        generic_client=GenericClient(TEST_USER_AGENT, timeout=5.0),
        no_follow_client=GenericClient(
            TEST_USER_AGENT,
            timeout=5.0,
            follow_redirects=False,
        ),
        suppressed_client=SuppressedClient(
            GenericClient(TEST_USER_AGENT, timeout=5.0),
            suppressed_hosts=["blocked.example"],
        ),
    )
    yield bundle
    await bundle.close()


# ============================================================================
# robots.txt Fixtures
# ============================================================================


@pytest.fixture
def permissions_cache() -> TypedCache[ServerIndexingPermissions]:
    """Provide local-only robots.txt permissions cache."""
    return TypedCache(
        ServerIndexingPermissions,
        TieredCache(
            CacheKeys.ROBOTS_PERMISSIONS,
            local_capacity=16,
            default_local_ttl=timedelta(hours=2),
            default_remote_ttl=timedelta(days=1),
        ),
    )


@pytest.fixture
def matcher_cache() -> MatcherCache:
    """Provide small matcher cache."""
    return MatcherCache(capacity=16)


@pytest.fixture
def robots_validator(
    permissions_cache: TypedCache[ServerIndexingPermissions],
    matcher_cache: MatcherCache,
) -> RobotsValidator:
    """Provide robots.txt validator with local caches only."""
    return RobotsValidator(ROBOTS_USER_AGENT, permissions_cache, matcher_cache)
