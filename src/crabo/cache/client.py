"""Async Redis client wrapper."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from crabo.core.exceptions import CacheError


class AsyncRedisClient:
    """Async Redis client wrapper with JSON serialization."""

    def __init__(self, redis_url: str) -> None:
        self._redis_url = redis_url
        self._pool: aioredis.ConnectionPool | None = None
        self._redis: aioredis.Redis | None = None

    async def connect(self) -> None:
        """Connect to Redis."""
        self._pool = aioredis.ConnectionPool.from_url(
            self._redis_url,
            max_connections=20,
            decode_responses=True,
        )
        self._redis = aioredis.Redis(connection_pool=self._pool)

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._redis:
            await self._redis.aclose()
        if self._pool:
            await self._pool.disconnect()
        self._redis = None
        self._pool = None

    async def ping(self) -> bool:
        """Check that Redis answers."""
        if not self._redis:
            return False
        try:
            return bool(await self._redis.ping())
        except RedisError as e:
            raise CacheError(f"Redis ping failed: {e}") from e

    async def set_many(
        self,
        mapping: dict[str, Any],
        *,
        expires_at: datetime,
    ) -> None:
        """Set multiple values at once, all expiring at ``expires_at``."""
        if not self._redis or not mapping:
            return
        pipe = self._redis.pipeline()
        for key, value in mapping.items():
            serialized = json.dumps(value, default=str)
            pipe.set(key, serialized, exat=int(expires_at.timestamp()))
        try:
            await pipe.execute()
        except RedisError as e:
            raise CacheError(
                f"Failed to store {len(mapping)} keys: {e}",
                details={"keys": list(mapping)},
            ) from e

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        """Get multiple values at once. Missing keys are not returned."""
        if not self._redis or not keys:
            return {}
        try:
            values = await self._redis.mget(keys)
        except RedisError as e:
            raise CacheError(
                f"Failed to read {len(keys)} keys: {e}",
                details={"keys": keys},
            ) from e
        result = {}
        for key, value in zip(keys, values):
            if value is not None:
                try:
                    result[key] = json.loads(value)
                except json.JSONDecodeError:
                    result[key] = value
        return result

    async def __aenter__(self) -> "AsyncRedisClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
