"""HTTP clients shared by resolvers and the robots.txt validator."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

import httpx

from crabo.core.exceptions import (
    ResponseParseError,
    SuppressedError,
    TransportError,
    UnexpectedStatusError,
)

if TYPE_CHECKING:
    from crabo.config import CraboSettings

logger = logging.getLogger(__name__)


class GenericClient:
    """
    Thin wrapper around ``httpx.AsyncClient``.

    Non-2xx responses raise :class:`UnexpectedStatusError`, network failures
    raise :class:`TransportError`. A client constructed with
    ``follow_redirects=False`` treats 3xx responses as success, so ``head``
    exposes the ``location`` header.
    """

    def __init__(
        self,
        user_agent: str,
        *,
        timeout: float = 15.0,
        follow_redirects: bool = True,
        max_connections: int = 100,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.user_agent = user_agent
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.max_connections = max_connections
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={"User-Agent": self.user_agent},
                follow_redirects=self.follow_redirects,
                limits=httpx.Limits(max_connections=self.max_connections),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self._get_client().request(
                method, url, headers=headers, **kwargs
            )
        except httpx.HTTPError as e:
            raise TransportError(
                message=f"{method} {url} failed: {e!r}",
                url=url,
            ) from e

        acceptable = response.is_success or (
            not self.follow_redirects and response.is_redirect
        )

        if not acceptable:
            raise UnexpectedStatusError(
                message=f"{method} {url} returned {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        return response

    async def get_json(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """GET ``url`` and decode the response body as JSON."""
        response = await self._request("GET", url, headers=headers, params=params)

        try:
            return response.json()
        except ValueError as e:
            raise ResponseParseError(
                message=f"Response from {url} is not valid JSON: {e}",
                url=url,
            ) from e

    async def get_bytes(
        self,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> bytes:
        """GET ``url`` and return the raw response body."""
        response = await self._request("GET", url, headers=headers)
        return response.content

    async def head(
        self,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> httpx.Headers:
        """HEAD ``url`` and return response headers."""
        response = await self._request("HEAD", url, headers=headers)
        return response.headers

    async def __aenter__(self) -> GenericClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def _host_matches(host: str, patterns: Iterable[str]) -> bool:
    return any(host == p or host.endswith(f".{p}") for p in patterns)


class SuppressedClient:
    """
    Client that refuses to talk to unreliable servers.

    A host is suppressed when it is listed in ``suppressed_hosts`` (including
    subdomains) or after ``failure_threshold`` consecutive transport errors
    or 5xx responses. Dynamic suppression lasts ``cooldown`` seconds.
    Suppressed requests raise :class:`SuppressedError` without touching the
    network.
    """

    def __init__(
        self,
        client: GenericClient,
        *,
        suppressed_hosts: Iterable[str] = (),
        failure_threshold: int = 3,
        cooldown: float = 600.0,
    ) -> None:
        self._client = client
        self._suppressed_hosts = frozenset(h.lower() for h in suppressed_hosts)
        self._failure_threshold = failure_threshold
        self._cooldown = cooldown
        self._failures: dict[str, int] = {}
        self._suppressed_until: dict[str, float] = {}

    def is_suppressed(self, host: str) -> bool:
        """Check whether requests to ``host`` are currently refused."""
        host = host.lower()

        if _host_matches(host, self._suppressed_hosts):
            return True

        until = self._suppressed_until.get(host)
        if until is None:
            return False

        if time.monotonic() < until:
            return True

        # Cooldown is over, give the server another chance
        del self._suppressed_until[host]
        self._failures.pop(host, None)
        return False

    def _record_failure(self, host: str) -> None:
        failures = self._failures.get(host, 0) + 1
        self._failures[host] = failures

        if failures >= self._failure_threshold:
            logger.warning(
                f"Suppressing requests to {host} for {self._cooldown:.0f}s "
                f"after {failures} consecutive failures"
            )
            self._suppressed_until[host] = time.monotonic() + self._cooldown

    def _record_success(self, host: str) -> None:
        self._failures.pop(host, None)

    async def close(self) -> None:
        """Close the wrapped client."""
        await self._client.close()

    async def get_bytes(
        self,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> bytes:
        """GET ``url`` unless its host is suppressed."""
        host = (urlparse(url).hostname or "").lower()

        if self.is_suppressed(host):
            raise SuppressedError(
                message=f"Requests to {host} are suppressed",
                url=url,
            )

        try:
            data = await self._client.get_bytes(url, headers=headers)
        except UnexpectedStatusError as e:
            if e.status_code >= 500:
                self._record_failure(host)
            raise
        except TransportError:
            self._record_failure(host)
            raise

        self._record_success(host)
        return data


@dataclass
class Clients:
    """HTTP clients passed around resolvers."""

    # The simplest HTTP client.
    generic_client: GenericClient

    # Does not follow redirects, used to resolve short links.
    no_follow_client: GenericClient

    # Knows how to ignore servers that report errors.
    suppressed_client: SuppressedClient

    @classmethod
    def from_settings(cls, settings: CraboSettings) -> Clients:
        """Build the client bundle from application settings."""
        generic = GenericClient(
            settings.user_agent,
            timeout=settings.request_timeout,
            max_connections=settings.max_connections,
        )

        return cls(
            generic_client=generic,
            no_follow_client=GenericClient(
                settings.user_agent,
                timeout=settings.request_timeout,
                follow_redirects=False,
                max_connections=settings.max_connections,
            ),
            suppressed_client=SuppressedClient(
                GenericClient(
                    settings.user_agent,
                    timeout=settings.request_timeout,
                    max_connections=settings.max_connections,
                ),
                suppressed_hosts=settings.suppressed_hosts,
                failure_threshold=settings.suppression_failure_threshold,
                cooldown=float(settings.suppression_cooldown_seconds),
            ),
        )

    async def close(self) -> None:
        """Close all underlying HTTP clients."""
        await self.generic_client.close()
        await self.no_follow_client.close()
        await self.suppressed_client.close()
