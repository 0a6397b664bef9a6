"""Sanitizing of free text fields before they are stored or rendered."""

from __future__ import annotations

import html
import re
from typing import ClassVar
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Comment, Tag


class ContentCleaner:
    """
    Strips markup and unsafe constructs from text.

    With ``keep_markup=False`` only visible text is kept, HTML-escaped. With
    ``keep_markup=True`` a small set of inline tags survives, so line
    breaks and emphasis in descriptions are preserved. Output depends only
    on input; no network access.
    """

    ALLOWED_TAGS: ClassVar[frozenset[str]] = frozenset(
        {"a", "b", "br", "em", "i", "p", "strong"}
    )

    # Dropped together with everything inside them
    DROPPED_TAGS: ClassVar[frozenset[str]] = frozenset(
        {"embed", "iframe", "noscript", "object", "script", "style", "template"}
    )

    SAFE_URL_SCHEMES: ClassVar[frozenset[str]] = frozenset({"http", "https"})

    _WHITESPACE: ClassVar[re.Pattern[str]] = re.compile(r"[ \t\r\f\v]+")

    def clean_content(self, text: str, keep_markup: bool = False) -> str:
        """Return sanitized ``text``."""
        if not text:
            return ""

        soup = BeautifulSoup(text, "html.parser")

        for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
            comment.extract()

        for tag in soup.find_all(list(self.DROPPED_TAGS)):
            if not tag.decomposed:
                tag.decompose()

        if not keep_markup:
            # Decoded entities must not turn back into markup
            return html.escape(self._collapse(soup.get_text()), quote=False)

        for tag in soup.find_all(True):
            if tag.name not in self.ALLOWED_TAGS:
                tag.unwrap()
            else:
                self._strip_attributes(tag)

        return self._collapse(str(soup))

    def _strip_attributes(self, tag: Tag) -> None:
        href = tag.get("href") if tag.name == "a" else None
        tag.attrs = {}

        if href and urlparse(str(href)).scheme.lower() in self.SAFE_URL_SCHEMES:
            tag.attrs["href"] = href
            tag.attrs["rel"] = "nofollow noopener"

    def _collapse(self, text: str) -> str:
        return self._WHITESPACE.sub(" ", text).strip()
