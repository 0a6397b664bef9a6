"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, RedisDsn, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ONE_HOUR = 3600
ONE_DAY = 24 * ONE_HOUR
ONE_WEEK = 7 * ONE_DAY


class CraboSettings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="CRABO_",
    )

    # Server
    host: str = Field(
        default="127.0.0.1",
        description="Address the API listens on",
    )
    port: int = Field(
        default=8003,
        description="Port the API listens on",
    )

    # Redis
    redis_url: RedisDsn | None = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (optional, local cache only without it)",
    )

    # External APIs
    youtube_api_key: str | None = Field(
        default=None,
        description="YouTube Data API v3 key (YouTube snapshots are absent without it)",
    )

    # HTTP
    user_agent: str = Field(
        default="fedineko/crabo-0.3",
        description="User-Agent header sent with every request",
    )
    request_timeout: float = Field(
        default=15.0,
        gt=0.0,
        description="Timeout of a single HTTP request in seconds",
    )
    max_connections: int = Field(
        default=100,
        ge=1,
        description="Connection pool size, the only bound on batch fan-out",
    )
    suppressed_hosts: list[str] = Field(
        default_factory=list,
        description="Hosts never requested by the page fetcher",
    )
    suppression_failure_threshold: int = Field(
        default=3,
        ge=1,
        description="Consecutive failures after which a host is suppressed",
    )
    suppression_cooldown_seconds: int = Field(
        default=600,
        ge=0,
        description="How long a failing host stays suppressed",
    )

    # robots.txt
    robots_user_agent: str = Field(
        default="fedineko-crabo",
        description="Token matched against robots.txt groups and robots meta tags",
    )
    robots_remote_ttl_seconds: int = Field(
        default=ONE_DAY,
        description="How long robots.txt permissions are kept in Redis",
    )
    robots_local_ttl_seconds: int = Field(
        default=2 * ONE_HOUR,
        description="How long robots.txt permissions are kept in process",
    )
    robots_local_capacity: int = Field(
        default=512,
        ge=1,
        description="Number of sites kept in the in-process permissions cache",
    )
    matcher_cache_capacity: int = Field(
        default=256,
        ge=1,
        description="Number of compiled robots.txt matchers kept in process",
    )

    # Snapshots
    snapshot_ttl_seconds: int = Field(
        default=ONE_WEEK,
        description="How long snapshots, including negative ones, are cached",
    )
    snapshot_local_capacity: int = Field(
        default=1024,
        ge=0,
        description="Number of snapshots kept in process, 0 disables local tier",
    )

    # App settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    @model_validator(mode="after")
    def check_robots_ttls(self) -> "CraboSettings":
        """Remote tier must outlive the local one."""
        if self.robots_remote_ttl_seconds < self.robots_local_ttl_seconds:
            raise ValueError(
                "robots_remote_ttl_seconds must not be shorter than "
                "robots_local_ttl_seconds"
            )
        return self


@lru_cache
def get_settings() -> CraboSettings:
    """Get cached settings instance."""
    return CraboSettings()
