"""Caching layer: local LRU tier in front of Redis."""

from .client import AsyncRedisClient
from .keys import CacheKeys
from .local import LocalCache
from .tiered import TieredCache, TypedCache

__all__ = [
    "AsyncRedisClient",
    "CacheKeys",
    "LocalCache",
    "TieredCache",
    "TypedCache",
]
