"""Abstract base resolver: the contract every snapshot provider implements."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from crabo.core.models import CacheHints, SnapshotAndHints
from crabo.core.types import Provider

if TYPE_CHECKING:
    from crabo.http.client import Clients

logger = logging.getLogger(__name__)


class AbstractResolver(ABC):
    """
    Abstract base class for all snapshot resolvers.

    A resolver does two things:
    - ``cache_hints`` tells synchronously, without I/O, whether the resolver
      handles a URL and under which id its snapshot is cached
    - ``snap`` produces the snapshot; it never raises, every failure
      degrades to an absent snapshot

    Anything that needs the network, e.g. resolving a short link into a
    canonical id, happens inside ``snap``.
    """

    # Class-level configuration (to be overridden by subclasses)
    PROVIDER: ClassVar[Provider]

    @property
    def provider(self) -> Provider:
        """The provider tag this resolver answers to."""
        return self.PROVIDER

    def hints(self, hint_id: str) -> CacheHints:
        """Build cache hints for this resolver."""
        return CacheHints(provider=self.PROVIDER, id=hint_id)

    def absent(self, hints: CacheHints) -> SnapshotAndHints:
        """Result for a URL that has no snapshot."""
        return SnapshotAndHints(snapshot=None, hints=hints)

    @abstractmethod
    def cache_hints(self, url: str) -> CacheHints | None:
        """
        Return hints for ``url`` if this resolver can deal with it.

        Args:
            url: Absolute URL

        Returns:
            CacheHints, or None if the URL is not handled by this resolver
        """
        ...

    @abstractmethod
    async def _snap(
        self,
        url: str,
        hints: CacheHints,
        clients: Clients,
    ) -> SnapshotAndHints:
        """Produce a snapshot. Implementations may raise, ``snap`` contains it."""
        ...

    async def snap(
        self,
        url: str,
        hints: CacheHints,
        clients: Clients,
    ) -> SnapshotAndHints:
        """
        Produce a snapshot for ``url`` using ``hints``.

        Args:
            url: URL to make snapshot of
            hints: Hints returned by ``cache_hints`` for the URL
            clients: Shared HTTP clients

        Returns:
            Snapshot (or None) together with the hints used
        """
        try:
            return await self._snap(url, hints, clients)
        except Exception:
            logger.exception(f"Resolver {self.provider} failed for '{hints.id}'")
            return self.absent(hints)
