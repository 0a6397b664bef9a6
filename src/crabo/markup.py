"""Callback based scanner of HTML documents."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

ElementHandler = Callable[[dict[str, str]], None]
TextHandler = Callable[[str], None]


@dataclass
class MetaScanner:
    """
    Walks an HTML document and feeds registered handlers.

    Element handlers receive the attributes of every matching element,
    text handlers receive the text content of every matching element.
    Handlers are called in document order. Character encoding of raw bytes
    is detected by BeautifulSoup (BOM, ``<meta charset>``, then heuristics).

    Usage:
        scanner = MetaScanner()
        scanner.on_element("meta", lambda attrs: ...)
        scanner.on_text("title", lambda text: ...)
        scanner.scan(page_bytes)
    """

    element_handlers: dict[str, list[ElementHandler]] = field(default_factory=dict)
    text_handlers: dict[str, list[TextHandler]] = field(default_factory=dict)

    def on_element(self, tag: str, handler: ElementHandler) -> None:
        """Register ``handler`` for attributes of ``tag`` elements."""
        self.element_handlers.setdefault(tag.lower(), []).append(handler)

    def on_text(self, tag: str, handler: TextHandler) -> None:
        """Register ``handler`` for text content of ``tag`` elements."""
        self.text_handlers.setdefault(tag.lower(), []).append(handler)

    def scan(self, document: bytes | str) -> str | None:
        """
        Parse ``document`` and dispatch matching elements to handlers.

        Returns:
            The encoding detected for byte input, None for text input
        """
        tags = set(self.element_handlers) | set(self.text_handlers)
        soup = BeautifulSoup(document, "html.parser")

        for element in soup.find_all(list(tags)):
            if not isinstance(element, Tag):
                continue

            for handler in self.element_handlers.get(element.name, []):
                handler(self._attributes(element))

            if handlers := self.text_handlers.get(element.name):
                text = element.get_text()
                for handler in handlers:
                    handler(text)

        encoding = soup.original_encoding
        logger.debug(f"Scanned document, detected encoding: {encoding}")
        return encoding

    @staticmethod
    def _attributes(element: Tag) -> dict[str, str]:
        """Flatten multi-valued attributes (e.g. ``class``) into strings."""
        return {
            name: " ".join(value) if isinstance(value, list) else str(value)
            for name, value in element.attrs.items()
        }
