"""Cache key builders for consistent key formatting."""


class CacheKeys:
    """Cache key builders for consistent key formatting."""

    PREFIX = "crabo"

    # Namespaces of typeless records
    SNAPSHOTS = "thumbnail"
    ROBOTS_PERMISSIONS = "robots_txt_permissions"

    @classmethod
    def record(cls, namespace: str, record_id: str) -> str:
        """Key for a cached record within a namespace."""
        return f"{cls.PREFIX}:{namespace}:{record_id}"

    @classmethod
    def snapshot(cls, hint_id: str) -> str:
        """Key for a snapshot by cache hint id."""
        return cls.record(cls.SNAPSHOTS, hint_id)

    @classmethod
    def robots_permissions(cls, site: str) -> str:
        """Key for robots.txt permissions of a site."""
        return cls.record(cls.ROBOTS_PERMISSIONS, site)
