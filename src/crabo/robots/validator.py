"""robots.txt compliance gate used before fetching generic pages."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from crabo.cache.keys import CacheKeys
from crabo.cache.tiered import TieredCache, TypedCache
from crabo.core.exceptions import ClientError, SuppressedError, UnexpectedStatusError
from crabo.core.models import ServerIndexingPermissions
from crabo.core.types import RobotsTxtStatus
from crabo.robots.matchers import (
    MatcherCache,
    MatcherCompileError,
    compile_matcher,
    is_allowed,
)

if TYPE_CHECKING:
    from crabo.cache.client import AsyncRedisClient
    from crabo.config import CraboSettings
    from crabo.http.client import Clients

logger = logging.getLogger(__name__)

# Some servers answer 403 for files that do not exist, so both mean "no robots.txt"
NOT_FOUND_STATUSES = frozenset({403, 404})


class RobotsValidator:
    """
    Decides whether a URL may be fetched according to its site's robots.txt.

    Permissions are cached per site in a two-tier cache; compiled matchers are
    cached in process. The policy is fail-closed: besides a matching rule, the
    only way to be allowed is a site confirmed to have no robots.txt.

    A suppressed robots.txt fetch denies the current request but is not
    cached, so the site is checked again once suppression lifts.
    """

    def __init__(
        self,
        user_agent: str,
        permissions: TypedCache[ServerIndexingPermissions],
        matchers: MatcherCache,
    ) -> None:
        self.user_agent = user_agent
        self._permissions = permissions
        self._matchers = matchers

    @classmethod
    def from_settings(
        cls,
        settings: CraboSettings,
        remote: AsyncRedisClient | None = None,
    ) -> RobotsValidator:
        """Create a validator with cache sizes and TTLs from settings."""
        cache = TieredCache(
            CacheKeys.ROBOTS_PERMISSIONS,
            remote,
            local_capacity=settings.robots_local_capacity,
            default_local_ttl=timedelta(seconds=settings.robots_local_ttl_seconds),
            default_remote_ttl=timedelta(seconds=settings.robots_remote_ttl_seconds),
        )

        return cls(
            user_agent=settings.robots_user_agent,
            permissions=TypedCache(ServerIndexingPermissions, cache),
            matchers=MatcherCache(settings.matcher_cache_capacity),
        )

    async def _download_robots_txt(
        self,
        site: str,
        scheme: str,
        clients: Clients,
    ) -> ServerIndexingPermissions | None:
        """
        Fetch robots.txt of ``site``.

        Returns:
            Permissions to cache, or None if requests to the site are suppressed
        """
        logger.info(f"Requested robots.txt for {site}")
        robots_url = f"{scheme}://{site}/robots.txt"

        try:
            data = await clients.suppressed_client.get_bytes(robots_url)
        except SuppressedError:
            logger.warning(f"Requests to server for {robots_url} are suppressed")
            return None
        except UnexpectedStatusError as e:
            if e.status_code in NOT_FOUND_STATUSES:
                return ServerIndexingPermissions.from_status(
                    RobotsTxtStatus.REQUESTED_NOT_FOUND
                )
            logger.warning(f"Failed to fetch {robots_url}: status {e.status_code}")
            return ServerIndexingPermissions.from_status(RobotsTxtStatus.REQUESTED_FAILED)
        except ClientError as e:
            logger.warning(f"Failed to fetch {robots_url}: {e.message}")
            return ServerIndexingPermissions.from_status(RobotsTxtStatus.REQUESTED_FAILED)

        try:
            return ServerIndexingPermissions.from_string(data.decode("utf-8"))
        except UnicodeDecodeError as e:
            logger.warning(
                f"Failed to read robots.txt for {site}, "
                f"treating it as not permissive policy: {e}"
            )
            return ServerIndexingPermissions.from_status(RobotsTxtStatus.REQUESTED_FAILED)

    async def _get_permissions(
        self,
        site: str,
        scheme: str,
        clients: Clients,
    ) -> ServerIndexingPermissions:
        """Return cached permissions for ``site``, fetching robots.txt on miss."""
        cached = await self._permissions.get([site])

        # Negative entries are never written here, so None means nothing stored
        if (permissions := cached.get(site)) is not None:
            return permissions

        permissions = await self._download_robots_txt(site, scheme, clients)

        if permissions is None:
            # Suppressed: cannot access the server regardless of robots.txt
            return ServerIndexingPermissions.from_status(RobotsTxtStatus.NOT_REQUESTED)

        await self._permissions.put({site: permissions})
        return permissions

    def _check_acquired_permissions(
        self,
        site: str,
        url: str,
        permissions: ServerIndexingPermissions,
    ) -> bool:
        """Compile acquired robots.txt, remember the matcher and evaluate ``url``."""
        try:
            matcher = compile_matcher(permissions.robots_txt or "")
        except MatcherCompileError as e:
            logger.warning(
                f"Failed to parse robots.txt for {site}, assuming no access: {e.message}"
            )
            return False

        self._matchers.put(site, matcher)
        return is_allowed(matcher, self.user_agent, url)

    async def can_access_url(self, url: str, clients: Clients) -> bool:
        """Check whether robots.txt of the site permits fetching ``url``."""
        parsed = urlparse(url)

        try:
            host = parsed.hostname
            port = parsed.port
        except ValueError:
            host, port = None, None

        if not host:
            logger.warning(f"Invalid URL passed to robots.txt permissions validator: {url}")
            return False

        site = f"{host}:{port}" if port else host

        if (matcher := self._matchers.get(site)) is not None:
            return is_allowed(matcher, self.user_agent, url)

        permissions = await self._get_permissions(site, parsed.scheme, clients)

        match permissions.robots_txt_status:
            case RobotsTxtStatus.ACQUIRED:
                return self._check_acquired_permissions(site, url, permissions)
            case RobotsTxtStatus.REQUESTED_NOT_FOUND:
                return True
            case RobotsTxtStatus.REQUESTED_FAILED | RobotsTxtStatus.NOT_REQUESTED:
                return False

        return False
