"""Snapshot service orchestrating the hint -> cache -> resolve -> cache flow."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import timedelta
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from pydantic import ValidationError

from crabo.cache.keys import CacheKeys
from crabo.cache.tiered import TieredCache, utcnow
from crabo.core.cleaner import ContentCleaner
from crabo.core.models import CacheHints, CacheItem, Snapshot, SnapshotAndHints

if TYPE_CHECKING:
    from crabo.cache.client import AsyncRedisClient
    from crabo.config import CraboSettings
    from crabo.http.client import Clients
    from crabo.resolution.registry import ResolverRegistry

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = frozenset({"http", "https"})
DEFAULT_PORTS = {"http": 80, "https": 443}

# Sites known to provide useless data or errors
IGNORED_HOST_SUFFIXES = ("twitter.com", ".x.com")
IGNORED_HOSTS = frozenset({"x.com"})


def parse_url(raw: str) -> str | None:
    """
    Canonical form of ``raw`` if it is an absolute http(s) URL with a host.

    Scheme and host are lowercased, the default port is dropped and an
    empty path becomes ``/``, so spellings of one URL share a cache entry.
    """
    try:
        parsed = urlparse(raw.strip())
        host = parsed.hostname
        # Raises for out of range or non-numeric ports
        port = parsed.port
    except ValueError:
        return None

    scheme = parsed.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES or not host:
        return None

    netloc = f"[{host}]" if ":" in host else host
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"

    userinfo, at, _ = parsed.netloc.rpartition("@")
    if at:
        netloc = f"{userinfo}@{netloc}"

    return parsed._replace(scheme=scheme, netloc=netloc, path=parsed.path or "/").geturl()


class SnapshotMaker:
    """
    Produces snapshots for batches of URLs.

    Flow for a batch:
    1. Drop invalid and ignored URLs
    2. Route each URL to a resolver via cache hints
    3. Look hint ids up in the snapshot cache (unless bypassed)
    4. Resolve misses concurrently
    5. Clean fresh snapshots and cache them, absent ones as negative entries
    6. Return cached and fresh snapshots
    """

    def __init__(
        self,
        cache: TieredCache,
        registry: ResolverRegistry,
        cleaner: ContentCleaner | None = None,
        snapshot_ttl: timedelta = timedelta(weeks=1),
    ) -> None:
        """
        Initialize the snapshot maker.

        Args:
            cache: Snapshot cache
            registry: Resolvers in routing order
            cleaner: Sanitizer of text fields
            snapshot_ttl: How long snapshots, positive or negative, are cached
        """
        self._cache = cache
        self._registry = registry
        self._cleaner = cleaner or ContentCleaner()
        self.snapshot_ttl = snapshot_ttl

    @classmethod
    def from_settings(
        cls,
        settings: CraboSettings,
        registry: ResolverRegistry,
        remote: AsyncRedisClient | None = None,
    ) -> SnapshotMaker:
        snapshot_ttl = timedelta(seconds=settings.snapshot_ttl_seconds)
        cache = TieredCache(
            CacheKeys.SNAPSHOTS,
            remote,
            local_capacity=settings.snapshot_local_capacity,
            default_remote_ttl=snapshot_ttl,
        )
        return cls(cache, registry, snapshot_ttl=snapshot_ttl)

    @staticmethod
    def ignored_url(url: str) -> bool:
        """Check if ``url`` points to a site that is never snapshotted."""
        host = (urlparse(url).hostname or "").lower()

        if not host:
            return True

        return host in IGNORED_HOSTS or host.endswith(IGNORED_HOST_SUFFIXES)

    def _clean_text(self, text: str | None, keep_markup: bool = False) -> str | None:
        if text is None:
            return None
        return self._cleaner.clean_content(text, keep_markup=keep_markup) or None

    def clean_snapshot(self, snapshot: Snapshot) -> Snapshot:
        """
        Sanitize text fields of ``snapshot`` so it is safe to render.

        Line breaks in description are kept as ``<br/>``, everything else
        is plain text.
        """
        description = snapshot.description
        if description is not None:
            description = self._clean_text(
                description.replace("\n", "<br />"),
                keep_markup=True,
            )

        tags = [self._cleaner.clean_content(tag) for tag in snapshot.tags]

        return snapshot.model_copy(
            update={
                "title": self._clean_text(snapshot.title),
                "description": description,
                "source": self._clean_text(snapshot.source),
                "tags": [tag for tag in tags if tag],
            }
        )

    def cache_item_to_snapshot(self, item: CacheItem) -> Snapshot | None:
        """Decode cached ``item``; negative and undecodable items give None."""
        if item.content is None:
            logger.debug(f"Got negative hit for '{item.id}'")
            return None

        logger.debug(f"Got cached snapshot for '{item.id}'")

        try:
            return Snapshot.model_validate_json(item.content)
        except ValidationError as e:
            logger.warning(f"Skipping undecodable cached snapshot '{item.id}': {e}")
            return None

    async def update_cache_many(self, results: list[SnapshotAndHints]) -> None:
        """
        Cache ``results``, absent snapshots as negative entries.

        Transient results are not cached, so they are resolved again next time.
        """
        expires_at = utcnow() + self.snapshot_ttl

        await self._cache.put(
            [
                CacheItem(
                    id=result.hints.id,
                    content=(
                        result.snapshot.model_dump_json()
                        if result.snapshot is not None
                        else None
                    ),
                    expires_at=expires_at,
                    local_expires_at=None,
                )
                for result in results
                if not result.transient
            ]
        )

    async def snap_with_cache_hints(
        self,
        hinted: dict[str, CacheHints],
        clients: Clients,
    ) -> list[SnapshotAndHints]:
        """Resolve every ``url -> hints`` pair concurrently."""
        results = await asyncio.gather(
            *(
                self._registry.snap(url, hints, clients)
                for url, hints in hinted.items()
            )
        )

        return [
            SnapshotAndHints(
                snapshot=(
                    self.clean_snapshot(result.snapshot)
                    if result.snapshot is not None
                    else None
                ),
                hints=result.hints,
                transient=result.transient,
            )
            for result in results
        ]

    def _route(self, urls: list[str]) -> dict[str, CacheHints]:
        """Map valid, not ignored URLs to hints, one URL per hint id."""
        hinted: dict[str, CacheHints] = {}
        seen_ids: set[str] = set()

        for raw in urls:
            url = parse_url(raw)

            if url is None:
                logger.info(f"'{raw}' is not a valid URL, ignored")
                continue

            if self.ignored_url(url):
                logger.info(f"{url} is ignored")
                continue

            hints = self._registry.cache_hints(url)
            if hints is None:
                logger.info(f"No resolver accepts {url}")
                continue

            if hints.id in seen_ids:
                continue

            seen_ids.add(hints.id)
            hinted[url] = hints

        return hinted

    async def snap_many(
        self,
        urls: list[str],
        clients: Clients,
        bypass_cache: bool = False,
    ) -> list[Snapshot]:
        """
        Make snapshots for ``urls``.

        Args:
            urls: URLs to snapshot, invalid ones are dropped
            clients: Shared HTTP clients
            bypass_cache: Ignore cached snapshots, fresh ones are still cached

        Returns:
            Snapshots of cached and freshly resolved URLs, in no particular
            order. URLs without a snapshot are left out.
        """
        start = time.monotonic()
        logger.debug(f"Got request to snap {urls}, bypass cache option is {bypass_cache}")

        hinted = self._route(urls)

        cached: list[CacheItem] = []
        if not bypass_cache and hinted:
            cached = await self._cache.get([hints.id for hints in hinted.values()])

        cached_ids = {item.id for item in cached}
        missing = {
            url: hints for url, hints in hinted.items() if hints.id not in cached_ids
        }

        fresh = await self.snap_with_cache_hints(missing, clients) if missing else []

        if fresh:
            await self.update_cache_many(fresh)

        snapshots = [
            snapshot
            for item in cached
            if (snapshot := self.cache_item_to_snapshot(item)) is not None
        ]
        snapshots.extend(r.snapshot for r in fresh if r.snapshot is not None)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            f"Snapped {len(hinted)} URLs: {len(cached)} cached, "
            f"{len(fresh)} resolved, {len(snapshots)} snapshots in {elapsed_ms}ms"
        )

        return snapshots
