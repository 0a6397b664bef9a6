"""Two-tier cache of opaque string records: local LRU in front of Redis."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from crabo.cache.keys import CacheKeys
from crabo.cache.local import LocalCache
from crabo.core.exceptions import CacheError, ConfigurationError
from crabo.core.models import CacheItem

if TYPE_CHECKING:
    from crabo.cache.client import AsyncRedisClient

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TieredCache:
    """
    Cache of :class:`CacheItem` records within one namespace.

    Lookups go to the local tier first and to Redis for whatever is left.
    Items found remotely are copied into the local tier. A record with
    ``content=None`` is a negative entry and is returned like any other hit;
    keys that are not cached are simply absent from results.

    Cache failures never propagate: a failed read is a miss and a failed
    write is logged and dropped.
    """

    def __init__(
        self,
        namespace: str,
        remote: AsyncRedisClient | None = None,
        *,
        local_capacity: int | None = None,
        default_local_ttl: timedelta | None = None,
        default_remote_ttl: timedelta | None = None,
    ) -> None:
        """
        Args:
            namespace: Key namespace, e.g. ``thumbnail``
            remote: Shared Redis cache, optional
            local_capacity: Size of the local tier, None disables it
            default_local_ttl: Local expiry for items without ``local_expires_at``
            default_remote_ttl: Remote TTL used by :class:`TypedCache`
        """
        if (
            default_local_ttl is not None
            and default_remote_ttl is not None
            and default_remote_ttl < default_local_ttl
        ):
            raise ConfigurationError(
                f"Remote TTL {default_remote_ttl} of '{namespace}' cache is "
                f"shorter than local TTL {default_local_ttl}"
            )

        self.namespace = namespace
        self._remote = remote
        self._local: LocalCache[CacheItem] | None = (
            LocalCache(local_capacity) if local_capacity else None
        )
        self.default_local_ttl = default_local_ttl
        self.default_remote_ttl = default_remote_ttl

    def _key(self, record_id: str) -> str:
        return CacheKeys.record(self.namespace, record_id)

    def _local_expiry(self, item: CacheItem, now: datetime) -> datetime:
        if item.local_expires_at is not None:
            local_expires_at = item.local_expires_at
        elif self.default_local_ttl is not None:
            local_expires_at = now + self.default_local_ttl
        else:
            local_expires_at = item.expires_at

        return min(local_expires_at, item.expires_at)

    async def get(self, ids: list[str]) -> list[CacheItem]:
        """Return cached items (positive and negative) for ``ids``."""
        now = utcnow()
        found: list[CacheItem] = []
        missing: list[str] = []

        for record_id in dict.fromkeys(ids):
            item = self._local.get(record_id, now) if self._local is not None else None
            if item is None:
                missing.append(record_id)
            else:
                found.append(item)

        if not missing or self._remote is None:
            return found

        try:
            records = await self._remote.get_many([self._key(i) for i in missing])
        except CacheError as e:
            logger.warning(f"Remote '{self.namespace}' cache read failed: {e.message}")
            return found

        for record_id in missing:
            record = records.get(self._key(record_id))
            if record is None:
                continue

            item = self._parse_record(record_id, record)
            if item is None or item.expires_at <= now:
                continue

            if self._local is not None:
                self._local.put(record_id, item, self._local_expiry(item, now))

            found.append(item)

        return found

    def _parse_record(self, record_id: str, record: object) -> CacheItem | None:
        if not isinstance(record, dict) or "content" not in record:
            logger.warning(f"Malformed '{self.namespace}' cache record for '{record_id}'")
            return None

        try:
            return CacheItem(
                id=record_id,
                content=record["content"],
                expires_at=record.get("expires_at"),
            )
        except ValidationError as e:
            logger.warning(
                f"Malformed '{self.namespace}' cache record for '{record_id}': {e}"
            )
            return None

    async def put(self, items: list[CacheItem]) -> None:
        """Store ``items`` in both tiers."""
        if not items:
            return

        now = utcnow()
        by_expiry: dict[datetime, dict[str, dict]] = defaultdict(dict)

        for item in items:
            if self._local is not None:
                self._local.put(item.id, item, self._local_expiry(item, now))

            by_expiry[item.expires_at][self._key(item.id)] = {
                "content": item.content,
                "expires_at": item.expires_at.isoformat(),
            }

        if self._remote is None:
            return

        for expires_at, mapping in by_expiry.items():
            try:
                await self._remote.set_many(mapping, expires_at=expires_at)
            except CacheError as e:
                logger.warning(
                    f"Remote '{self.namespace}' cache write failed: {e.message}"
                )


class TypedCache(Generic[ModelT]):
    """
    :class:`TieredCache` storing pydantic models serialized as JSON.

    ``get`` maps each cached key to a model, or to None for a negative
    entry. Keys that are not cached are left out.
    """

    def __init__(self, model: type[ModelT], cache: TieredCache) -> None:
        if cache.default_remote_ttl is None:
            raise ConfigurationError(
                f"Typed cache '{cache.namespace}' needs a default remote TTL"
            )
        self._model = model
        self._cache = cache

    async def get(self, keys: list[str]) -> dict[str, ModelT | None]:
        result: dict[str, ModelT | None] = {}

        for item in await self._cache.get(keys):
            if item.content is None:
                result[item.id] = None
                continue

            try:
                result[item.id] = self._model.model_validate_json(item.content)
            except ValidationError as e:
                logger.warning(
                    f"Skipping undecodable '{self._cache.namespace}' entry "
                    f"'{item.id}': {e}"
                )

        return result

    async def put(self, values: dict[str, ModelT | None]) -> None:
        now = utcnow()
        expires_at = now + self._cache.default_remote_ttl
        local_expires_at = (
            now + self._cache.default_local_ttl
            if self._cache.default_local_ttl is not None
            else None
        )

        await self._cache.put(
            [
                CacheItem(
                    id=key,
                    content=value.model_dump_json() if value is not None else None,
                    expires_at=expires_at,
                    local_expires_at=local_expires_at,
                )
                for key, value in values.items()
            ]
        )
