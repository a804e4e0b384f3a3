"""Path and content pattern matching."""

from repolang.patterns.matcher import (
    Dialect,
    GlobMatcher,
    Matcher,
    RegexMatcher,
    compile_pattern,
)

__all__ = ["Dialect", "GlobMatcher", "Matcher", "RegexMatcher", "compile_pattern"]
