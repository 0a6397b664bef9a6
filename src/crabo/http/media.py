"""Media type guessing for preview images."""

from __future__ import annotations

import logging
import mimetypes
from urllib.parse import urlparse

from crabo.core.exceptions import ClientError
from crabo.http.client import GenericClient

logger = logging.getLogger(__name__)


def guess_mime_from_path(url: str | None) -> str | None:
    """Guess media type of ``url`` by its path extension only."""
    if not url:
        return None

    mime_type, _ = mimetypes.guess_type(urlparse(url).path)
    return mime_type


async def guess_mime_from_url(
    url: str | None,
    client: GenericClient,
) -> str | None:
    """
    Guess media type of the resource at ``url``.

    The path extension is tried first; if it says nothing, a HEAD request
    is made and ``Content-Type`` is read from the response.
    """
    if not url:
        return None

    if mime_type := guess_mime_from_path(url):
        return mime_type

    try:
        headers = await client.head(url)
    except ClientError as e:
        logger.debug(f"Could not guess media type of {url}: {e.message}")
        return None

    content_type = headers.get("content-type")
    if not content_type:
        return None

    return content_type.split(";", 1)[0].strip().lower() or None
