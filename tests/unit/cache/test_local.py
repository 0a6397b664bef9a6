"""Tests for the in-process cache tier."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from crabo.cache.local import LocalCache

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)
LATER = NOW + timedelta(hours=1)


class TestLocalCache:
    """Tests for LocalCache."""

    def test_get_missing(self):
        """Missing key gives None."""
        assert LocalCache[str](2).get("a", NOW) is None

    def test_put_and_get(self):
        """Stored value is returned before expiry."""
        cache = LocalCache[str](2)
        cache.put("a", "crab", LATER)

        assert cache.get("a", NOW) == "crab"

    def test_expired_entry_dropped(self):
        """Expired value is not returned and is removed."""
        cache = LocalCache[str](2)
        cache.put("a", "crab", NOW)

        assert cache.get("a", NOW) is None
        assert "a" not in cache

    def test_evicts_least_recently_used(self):
        """Oldest untouched entry is evicted when full."""
        cache = LocalCache[str](2)
        cache.put("a", "1", LATER)
        cache.put("b", "2", LATER)
        cache.get("a", NOW)
        cache.put("c", "3", LATER)

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        assert len(cache) == 2

    def test_invalid_capacity(self):
        """Capacity must be positive."""
        with pytest.raises(ValueError):
            LocalCache[str](0)
