"""Unit test fixtures with HTTP mocking."""

from __future__ import annotations

from typing import Any

import pytest
import respx
from httpx import Response


# ============================================================================
# HTTP Mocking Fixtures
# ============================================================================


@pytest.fixture
def respx_mock():
    """Provide a respx mock router for HTTP mocking.

    Use this when you need fine-grained control over mocked responses.
    The mock is automatically started and stopped by respx.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ============================================================================
# Mock Response Helpers
# ============================================================================


def mock_json_response(data: dict[str, Any], status_code: int = 200) -> Response:
    """Create a mock JSON response."""
    return Response(
        status_code=status_code,
        json=data,
        headers={"Content-Type": "application/json"},
    )


def mock_html_response(html: str, status_code: int = 200) -> Response:
    """Create a mock HTML page response."""
    return Response(
        status_code=status_code,
        content=html.encode("utf-8"),
        headers={"Content-Type": "text/html; charset=utf-8"},
    )


def mock_robots_response(rules: str) -> Response:
    """Create a mock robots.txt response."""
    return Response(
        status_code=200,
        content=rules.encode("utf-8"),
        headers={"Content-Type": "text/plain"},
    )


@pytest.fixture
def mock_responses():
    """Provide helper functions for creating mock responses."""
    return {
        "json": mock_json_response,
        "html": mock_html_response,
        "robots": mock_robots_response,
    }


# ============================================================================
# Page Fixtures
# ============================================================================


ARTICLE_HTML = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Crabs are great | News Example</title>
  <meta property="og:title" content="Crabs are great">
  <meta property="og:site_name" content="News Example">
  <meta property="og:description" content="Everything about crabs">
  <meta name="description" content="Crabs">
  <meta property="og:image" content="/img/preview.png">
</head>
<body><p>Article text</p></body>
</html>
"""

NOINDEX_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Private</title>
  <meta name="robots" content="noindex, nofollow">
  <meta property="og:description" content="Not for you">
</head>
<body></body>
</html>
"""

MISSKEY_NOTE_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Note by crab</title>
  <meta name="application-name" content="Misskey">
  <meta property="og:description" content="Hello from the shore">
</head>
<body></body>
</html>
"""


@pytest.fixture
def article_html() -> str:
    """Sample article page with OpenGraph tags."""
    return ARTICLE_HTML


@pytest.fixture
def noindex_html() -> str:
    """Sample page denying indexing via robots meta tag."""
    return NOINDEX_HTML


@pytest.fixture
def misskey_note_html() -> str:
    """Sample note page of a Misskey server."""
    return MISSKEY_NOTE_HTML
