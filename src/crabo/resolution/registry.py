"""Resolver registry: routes URLs to the resolver responsible for them."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from crabo.core.models import CacheHints, SnapshotAndHints
from crabo.core.types import Provider
from crabo.resolution.base import AbstractResolver

if TYPE_CHECKING:
    from crabo.config import CraboSettings
    from crabo.http.client import Clients
    from crabo.robots.validator import RobotsValidator

logger = logging.getLogger(__name__)


class ResolverRegistry:
    """
    Ordered list of resolvers.

    The first resolver returning hints for a URL owns it, so specific
    resolvers go before the generic HTML one, which accepts everything.
    Hints later route the URL back to its resolver by provider tag.
    """

    def __init__(self, resolvers: list[AbstractResolver] | None = None) -> None:
        self._resolvers: list[AbstractResolver] = []
        self._by_provider: dict[Provider, AbstractResolver] = {}

        for resolver in resolvers or []:
            self.register(resolver)

    def register(self, resolver: AbstractResolver) -> None:
        """Append ``resolver`` to the routing list."""
        if resolver.provider in self._by_provider:
            raise ValueError(f"Resolver for {resolver.provider} is already registered")

        self._resolvers.append(resolver)
        self._by_provider[resolver.provider] = resolver

    @property
    def resolvers(self) -> list[AbstractResolver]:
        """Resolvers in routing order."""
        return list(self._resolvers)

    def cache_hints(self, url: str) -> CacheHints | None:
        """Hints from the first resolver that handles ``url``."""
        for resolver in self._resolvers:
            if (hints := resolver.cache_hints(url)) is not None:
                return hints
        return None

    def get(self, provider: Provider) -> AbstractResolver | None:
        """Resolver registered for ``provider``."""
        return self._by_provider.get(provider)

    async def snap(
        self,
        url: str,
        hints: CacheHints,
        clients: Clients,
    ) -> SnapshotAndHints:
        """Make snapshot of ``url`` with the resolver ``hints`` point to."""
        resolver = self.get(hints.provider)

        if resolver is None:
            logger.warning(f"No resolver for provider '{hints.provider}' of {url}")
            return SnapshotAndHints(snapshot=None, hints=hints)

        return await resolver.snap(url, hints, clients)

    @classmethod
    def from_settings(
        cls,
        settings: CraboSettings,
        robots_validator: RobotsValidator,
    ) -> ResolverRegistry:
        """
        Create a registry with the standard routing order.

        YouTube is registered even without an API key; its snapshots are
        absent then.
        """
        from crabo.resolution.bilibili import BiliBiliResolver
        from crabo.resolution.html_meta import HtmlMetaResolver
        from crabo.resolution.youtube import YoutubeResolver

        if not settings.youtube_api_key:
            logger.warning("YouTube API key is not configured")

        return cls(
            [
                YoutubeResolver(settings.youtube_api_key),
                BiliBiliResolver(),
                # Accepts any URL, must be the last one
                HtmlMetaResolver(robots_validator),
            ]
        )
