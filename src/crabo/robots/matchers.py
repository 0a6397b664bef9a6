"""Compiled robots.txt matchers and their in-process cache."""

from __future__ import annotations

import threading
from collections import OrderedDict
from urllib.robotparser import RobotFileParser

from crabo.core.exceptions import CraboError


class MatcherCompileError(CraboError):
    """robots.txt content could not be turned into a matcher."""

    pass


def compile_matcher(robots_txt: str) -> RobotFileParser:
    """Build a matcher from raw robots.txt content."""
    parser = RobotFileParser()
    try:
        parser.parse(robots_txt.splitlines())
    except (ValueError, TypeError, IndexError) as e:
        raise MatcherCompileError(f"Unparsable robots.txt: {e}") from e
    return parser


def is_allowed(matcher: RobotFileParser, user_agent: str, url: str) -> bool:
    """Ask ``matcher`` whether ``user_agent`` may fetch ``url``."""
    return matcher.can_fetch(user_agent, url)


class MatcherCache:
    """
    Least-recently-used cache of compiled matchers keyed by site.

    The lock is held for a single get or put only, never across I/O,
    so a slow robots.txt fetch for one site cannot stall another.
    """

    def __init__(self, capacity: int = 256) -> None:
        if capacity < 1:
            raise ValueError(f"Capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._matchers: OrderedDict[str, RobotFileParser] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, site: str) -> RobotFileParser | None:
        with self._lock:
            matcher = self._matchers.get(site)
            if matcher is not None:
                self._matchers.move_to_end(site)
            return matcher

    def put(self, site: str, matcher: RobotFileParser) -> None:
        with self._lock:
            self._matchers[site] = matcher
            self._matchers.move_to_end(site)
            while len(self._matchers) > self.capacity:
                self._matchers.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._matchers)
