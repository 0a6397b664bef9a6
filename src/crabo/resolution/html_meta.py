"""Generic resolver extracting OpenGraph and similar meta data from HTML pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar
from urllib.parse import parse_qsl, urlencode, urljoin, urlparse, urlunparse

from crabo.core.exceptions import ClientError, SuppressedError
from crabo.core.models import CacheHints, Snapshot, SnapshotAndHints
from crabo.core.types import Provider
from crabo.http.media import guess_mime_from_url
from crabo.markup import MetaScanner
from crabo.resolution.base import AbstractResolver

if TYPE_CHECKING:
    from crabo.http.client import Clients, GenericClient
    from crabo.robots.validator import RobotsValidator

logger = logging.getLogger(__name__)

# Robots meta instructions that forbid making a snapshot
DENY_INSTRUCTIONS = ("noindex", "none", "nosnippet")

DESCRIPTION_KEYS = ("og:description", "twitter:description", "description", "Description")

# Meta tags used by Mastodon-like and Misskey-like servers
SOCIAL_PROFILE_KEYS = (
    "profile:username",
    "og:profile:username",
    "misskey:user-username",
    "misskey:user-id",
    "misskey:note-id",
)

# Only Misskey family provides usable application-name,
# see https://trypancakes.com/misskey-comparison/
SOCIAL_APPLICATIONS = frozenset(
    {"misskey", "sharkey", "foundkey", "iceshrimp", "catodon", "firefish"}
)

GUESSED_SOCIAL = "guessed.social"

PAGE_HEADERS = {
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Site": "none",
}


@dataclass
class PageMeta:
    """Meta properties collected from a page."""

    properties: dict[str, str] = field(default_factory=dict)

    # False if robots meta tags deny snapshots
    can_index: bool = True

    def first(self, *keys: str) -> str | None:
        """Value of the first ``keys`` entry that is present and non-empty."""
        return next((self.properties[k] for k in keys if self.properties.get(k)), None)


def param_matches_utm(parameter: str) -> bool:
    """
    Check if query ``parameter`` is a known campaign tracking one.

    Some sites deny access to URLs with parameters, presumably to keep
    dynamic content away from crawlers; tracking parameters are not part of
    such content.
    """
    return (
        parameter.startswith(("utm", "amp;utm", "amp;amp;utm"))
        or parameter in ("smid", "via")
    )


def remove_known_campaign_tracking_parameters(url: str) -> str:
    """Remove campaign tracking query parameters from ``url``."""
    parsed = urlparse(url)
    if not parsed.query:
        return url

    params = parse_qsl(parsed.query, keep_blank_values=True)
    kept = [(name, value) for name, value in params if not param_matches_utm(name)]

    if len(kept) == len(params):
        return url

    stripped = urlunparse(parsed._replace(query=urlencode(kept)))
    logger.info(f"Filtered campaign tracking parameters so '{url}' became '{stripped}'")
    return stripped


def cannot_index(text: str) -> bool:
    """Check if robots meta ``text`` contains an instruction to deny indexing."""
    text = text.lower()
    return any(instruction in text for instruction in DENY_INSTRUCTIONS)


def parse_meta(document: bytes | str, robots_user_agent: str) -> PageMeta:
    """
    Collect ``meta`` properties and the ``title`` text of ``document``.

    Meta tags are keyed by ``property`` with ``name`` as fallback; later
    tags overwrite earlier ones. The ``title`` element wins over a meta tag
    named ``title``. Robots instructions are evaluated for all robots and
    for tags naming ``robots_user_agent``, e.g.::

        <meta name="robots" content="noindex">
        <meta name="fedineko-crabo, some-other-bot" content="noindex, noarchive">
    """
    meta = PageMeta()
    titles: list[str] = []

    def on_meta(attrs: dict[str, str]) -> None:
        key = attrs.get("property", attrs.get("name"))
        content = attrs.get("content")

        if key is None or content is None:
            return

        if key == "robots" or robots_user_agent in key:
            meta.can_index &= not cannot_index(content)

        meta.properties[key] = content

    scanner = MetaScanner()
    scanner.on_element("meta", on_meta)
    scanner.on_text("title", titles.append)
    scanner.scan(document)

    if titles:
        meta.properties["title"] = titles[-1].strip()

    return meta


def select_description(properties: dict[str, str]) -> str | None:
    """
    Pick the longest of the known description properties present.

    Present but empty values count, so a page with only empty
    descriptions gives an empty string rather than None.
    """
    candidates = [properties[k] for k in DESCRIPTION_KEYS if k in properties]
    # max() keeps the first of equally long candidates
    return max(candidates, key=len, default=None)


def guess_social(properties: dict[str, str]) -> str | None:
    """
    Guess whether the page belongs to a social networking service.

    People often quote posts of others as plain links. There is no consent
    for indexing such content, so the snapshot is kept but marked, and
    consumers can skip indexing it.
    """
    if any(key in properties for key in SOCIAL_PROFILE_KEYS):
        return GUESSED_SOCIAL

    application = properties.get("application-name")
    if application and application.lower() in SOCIAL_APPLICATIONS:
        return GUESSED_SOCIAL

    return None


def parse_image_url(page_url: str, image_url: str) -> str | None:
    """Resolve ``image_url``, possibly relative, against ``page_url``."""
    try:
        resolved = urljoin(page_url, image_url.strip())
        parsed = urlparse(resolved)
    except ValueError as e:
        logger.warning(f"{page_url}: Failed to parse '{image_url}' as valid URL: {e}")
        return None

    if not parsed.scheme or not (parsed.netloc or parsed.scheme == "data"):
        logger.warning(f"{page_url}: '{image_url}' is not an absolute URL")
        return None

    return resolved


async def properties_to_snapshot(
    url: str,
    meta: PageMeta,
    client: GenericClient,
) -> Snapshot | None:
    """
    Build snapshot of ``url`` from collected ``meta``.

    Returns None if the page forbids snapshots or has neither image nor
    description. ``client`` is used to guess preview media type when the
    image URL does not tell it.
    """
    if not meta.can_index:
        logger.info(f"{url}: snapshotting is not allowed by meta tags")
        return None

    title = meta.first("og:title", "og:site_name", "title")
    description = select_description(meta.properties)
    if description is None:
        description = title
    # Empty description tags mean no description, not the title
    description = description or None
    image = meta.first("og:image", "twitter:image")
    source = meta.first("og:site_name", "twitter:site") or title

    if image is None and description is None:
        logger.info(f"{url}: page has neither image nor description")
        return None

    preview_url = parse_image_url(url, image) if image else None

    return Snapshot(
        url=url,
        preview_url=preview_url,
        title=title,
        description=description,
        source=source,
        preview_mime_type=await guess_mime_from_url(preview_url, client),
        application_name=guess_social(meta.properties),
    )


class HtmlMetaResolver(AbstractResolver):
    """
    Fallback resolver for any web page.

    Pages are fetched only when robots.txt allows it, and robots meta tags
    are honored as well.
    """

    PROVIDER: ClassVar[Provider] = Provider.DEFAULT

    def __init__(self, robots_validator: RobotsValidator) -> None:
        self.robots_validator = robots_validator

    def cache_hints(self, url: str) -> CacheHints | None:
        return self.hints(url)

    async def _snap(
        self,
        url: str,
        hints: CacheHints,
        clients: Clients,
    ) -> SnapshotAndHints:
        target = remove_known_campaign_tracking_parameters(url)

        if not await self.robots_validator.can_access_url(target, clients):
            logger.info(f"Access to {target} is disallowed by robots.txt")
            return self.absent(hints)

        try:
            document = await clients.suppressed_client.get_bytes(
                target,
                headers=PAGE_HEADERS,
            )
        except SuppressedError:
            logger.warning(f"Server for '{target}' is suppressed, no request was made")
            return self.absent(hints)
        except ClientError as e:
            logger.warning(f"Failed to get '{target}': {e.message}")
            return self.absent(hints)

        meta = parse_meta(document, self.robots_validator.user_agent)

        return SnapshotAndHints(
            snapshot=await properties_to_snapshot(url, meta, clients.generic_client),
            hints=hints,
        )
