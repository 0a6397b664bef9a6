"""Bounded in-process cache with per-entry expiry."""

from __future__ import annotations

from collections import OrderedDict
from datetime import datetime
from typing import Generic, TypeVar

V = TypeVar("V")


class LocalCache(Generic[V]):
    """
    Least-recently-used cache where every entry has its own expiry time.

    Only touched from the event loop thread and never across an await,
    so no locking is needed.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"Capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: OrderedDict[str, tuple[V, datetime]] = OrderedDict()

    def get(self, key: str, now: datetime) -> V | None:
        """Return live value for ``key`` or None, dropping it if expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at <= now:
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return value

    def put(self, key: str, value: V, expires_at: datetime) -> None:
        """Store ``value`` until ``expires_at``, evicting the oldest entry if full."""
        self._entries[key] = (value, expires_at)
        self._entries.move_to_end(key)

        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
