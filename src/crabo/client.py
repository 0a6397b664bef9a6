"""Main library client for standalone usage."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from crabo.config import CraboSettings
from crabo.core.models import Snapshot
from crabo.http.client import Clients
from crabo.resolution.registry import ResolverRegistry
from crabo.robots.validator import RobotsValidator
from crabo.services.snapshot import SnapshotMaker

if TYPE_CHECKING:
    from crabo.cache.client import AsyncRedisClient

logger = logging.getLogger(__name__)


class CraboClient:
    """
    Main client for the crabo library.

    Makes link previews without requiring the web server.

    Usage:
        async with CraboClient() as client:
            snapshots = await client.snap_many([
                "https://youtu.be/dQw4w9WgXcQ",
                "https://example.com/article",
            ])

    Settings are loaded from environment variables or can be passed explicitly.
    """

    def __init__(
        self,
        settings: CraboSettings | None = None,
        *,
        use_cache: bool = True,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Application settings. If not provided, loaded from environment.
            use_cache: Whether to use Redis caching if available.
        """
        self._settings = settings or CraboSettings()
        self._use_cache = use_cache
        self._cache: AsyncRedisClient | None = None
        self._clients: Clients | None = None
        self._maker: SnapshotMaker | None = None

    async def __aenter__(self) -> CraboClient:
        """Initialize resources on context entry."""
        await self._initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Clean up resources on context exit."""
        await self.close()

    @property
    def settings(self) -> CraboSettings:
        return self._settings

    @property
    def cache(self) -> AsyncRedisClient | None:
        """Redis client, None when running with local cache only."""
        return self._cache

    async def _initialize(self) -> None:
        """Initialize client resources."""
        if self._use_cache and self._settings.redis_url:
            from crabo.cache.client import AsyncRedisClient

            self._cache = AsyncRedisClient(str(self._settings.redis_url))
            await self._cache.connect()
            logger.info("Redis cache initialized")
        else:
            logger.info("Running without Redis, local cache only")

        self._clients = Clients.from_settings(self._settings)

        robots_validator = RobotsValidator.from_settings(self._settings, self._cache)
        registry = ResolverRegistry.from_settings(self._settings, robots_validator)
        self._maker = SnapshotMaker.from_settings(self._settings, registry, self._cache)

    async def close(self) -> None:
        """Close all resources."""
        if self._clients:
            await self._clients.close()
            self._clients = None

        if self._cache:
            await self._cache.close()
            self._cache = None

        self._maker = None

    def _ensure_initialized(self) -> tuple[SnapshotMaker, Clients]:
        """Ensure client is initialized."""
        if self._maker is None or self._clients is None:
            raise RuntimeError(
                "Client not initialized. Use 'async with CraboClient() as client:'"
            )
        return self._maker, self._clients

    async def snap_many(
        self,
        urls: list[str],
        *,
        bypass_cache: bool = False,
    ) -> list[Snapshot]:
        """
        Make snapshots of ``urls``.

        Args:
            urls: URLs to snapshot
            bypass_cache: Ignore cached snapshots

        Returns:
            Snapshots for URLs that have one, in no particular order
        """
        maker, clients = self._ensure_initialized()
        return await maker.snap_many(urls, clients, bypass_cache=bypass_cache)


# Convenience function for one-off snapshots
async def snap_many(
    urls: list[str],
    *,
    bypass_cache: bool = False,
    settings: CraboSettings | None = None,
) -> list[Snapshot]:
    """
    Make snapshots of ``urls`` (convenience function).

    For repeated calls, use CraboClient so caches and connections are reused.
    """
    async with CraboClient(settings) as client:
        return await client.snap_many(urls, bypass_cache=bypass_cache)
