"""robots.txt compliance."""

from .matchers import MatcherCache, MatcherCompileError, compile_matcher
from .validator import RobotsValidator

__all__ = [
    "MatcherCache",
    "MatcherCompileError",
    "RobotsValidator",
    "compile_matcher",
]
