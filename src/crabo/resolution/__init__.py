"""Resolution layer producing snapshots from video platforms and web pages."""

from crabo.resolution.base import AbstractResolver
from crabo.resolution.bilibili import BiliBiliResolver
from crabo.resolution.html_meta import HtmlMetaResolver
from crabo.resolution.registry import ResolverRegistry
from crabo.resolution.youtube import YoutubeResolver

__all__ = [
    # Base
    "AbstractResolver",
    # Resolvers
    "BiliBiliResolver",
    "HtmlMetaResolver",
    "YoutubeResolver",
    # Registry
    "ResolverRegistry",
]
