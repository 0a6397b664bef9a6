"""Core enums and type definitions."""

from enum import StrEnum


class Provider(StrEnum):
    """Snapshot providers, one per resolver."""

    YOUTUBE = "youtube"
    BILIBILI = "bilibili"
    # Generic HTML meta tags resolver, applicable to any URL
    DEFAULT = "default"


class RobotsTxtStatus(StrEnum):
    """Status of robots.txt for a site."""

    # robots.txt was fetched successfully and is available.
    ACQUIRED = "acquired"

    # robots.txt was requested but does not exist, so only page meta tags
    # decide whether a snapshot can be made.
    REQUESTED_NOT_FOUND = "requested_not_found"

    # robots.txt was requested but fetch failed for any reason.
    REQUESTED_FAILED = "requested_failed"

    # robots.txt was not requested, e.g. requests to the server are suppressed.
    NOT_REQUESTED = "not_requested"
