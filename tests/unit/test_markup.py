"""Tests for HTML meta scanner."""

from __future__ import annotations

from crabo.markup import MetaScanner


class TestMetaScanner:
    """Tests for MetaScanner."""

    def test_element_handlers_in_document_order(self):
        """Element handlers get attributes in document order."""
        seen: list[dict[str, str]] = []
        scanner = MetaScanner()
        scanner.on_element("meta", seen.append)

        scanner.scan(
            b'<html><head><meta name="a" content="1">'
            b'<meta property="b" content="2"></head></html>'
        )

        assert seen == [
            {"name": "a", "content": "1"},
            {"property": "b", "content": "2"},
        ]

    def test_text_handlers(self):
        """Text handlers get element text."""
        titles: list[str] = []
        scanner = MetaScanner()
        scanner.on_text("title", titles.append)

        scanner.scan("<html><head><title>Crabs &amp; fish</title></head></html>")

        assert titles == ["Crabs & fish"]

    def test_multi_valued_attributes_flattened(self):
        """Multi-valued attributes are joined into strings."""
        seen: list[dict[str, str]] = []
        scanner = MetaScanner()
        scanner.on_element("link", seen.append)

        scanner.scan('<link rel="icon shortcut" href="/favicon.ico">')

        assert seen[0]["rel"] == "icon shortcut"
        assert seen[0]["href"] == "/favicon.ico"

    def test_unregistered_tags_ignored(self):
        """Only registered tags reach handlers."""
        seen: list[dict[str, str]] = []
        scanner = MetaScanner()
        scanner.on_element("meta", seen.append)

        scanner.scan("<div><p>No meta here</p></div>")

        assert seen == []

    def test_declared_encoding(self):
        """Encoding declared in meta charset is used for bytes."""
        titles: list[str] = []
        scanner = MetaScanner()
        scanner.on_text("title", titles.append)
        document = (
            '<html><head><meta charset="windows-1251">'
            "<title>Краб</title></head></html>"
        ).encode("windows-1251")

        encoding = scanner.scan(document)

        assert encoding == "windows-1251"
        assert titles == ["Краб"]

    def test_text_input_has_no_encoding(self):
        """Text documents need no encoding detection."""
        assert MetaScanner().scan("<html></html>") is None

    def test_handlers_for_same_tag(self):
        """Several handlers for a tag are all called."""
        first: list[dict[str, str]] = []
        second: list[dict[str, str]] = []
        scanner = MetaScanner()
        scanner.on_element("META", first.append)
        scanner.on_element("meta", second.append)

        scanner.scan('<meta name="a" content="1">')

        assert first == second == [{"name": "a", "content": "1"}]
