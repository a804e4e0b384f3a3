"""Pattern compilation for the two dialects used by the pipeline.

GLOB   : gitignore wildmatch semantics (``**``, ``*``, ``?``, trailing ``/``),
         matched against paths relative to the folder the pattern belongs to.
REGEX  : the Ruby/PCRE dialect of the linguist tables, converted to Python
         ``re`` by :mod:`repolang.patterns.pcre`.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import pathspec

from repolang.exceptions import PatternSyntaxError
from repolang.patterns import pcre


class Dialect(str, Enum):
    GLOB = "glob"
    REGEX = "regex"


class Matcher(Protocol):
    """A compiled, side-effect-free predicate over a path or a text."""

    pattern: str

    def test(self, text: str) -> bool: ...


@dataclass(frozen=True)
class RegexMatcher:
    pattern: str
    regex: re.Pattern[str]

    def test(self, text: str) -> bool:
        return self.regex.search(text) is not None


@dataclass(frozen=True)
class GlobMatcher:
    pattern: str
    spec: pathspec.PathSpec

    def test(self, text: str) -> bool:
        return self.spec.match_file(text)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> GlobMatcher:
        """Build one matcher from several gitignore lines.

        Later ``!negated`` lines re-include paths matched by earlier lines.
        """
        lines = list(lines)
        return cls(pattern="\n".join(lines), spec=pathspec.GitIgnoreSpec.from_lines(lines))


@functools.lru_cache(maxsize=4096)
def _compile(pattern: str, dialect: Dialect) -> Matcher:
    if dialect is Dialect.REGEX:
        converted, flags = pcre.convert(pattern)
        return RegexMatcher(pattern=pattern, regex=re.compile(converted, flags))
    if not pattern.strip():
        raise ValueError("empty glob")
    return GlobMatcher(pattern=pattern, spec=pathspec.GitIgnoreSpec.from_lines([pattern]))


def compile_pattern(pattern: str, dialect: Dialect, source: str = "<inline>") -> Matcher:
    """Compile *pattern* once; identical (pattern, dialect) pairs share a matcher.

    Raises :class:`PatternSyntaxError` naming *source* when the pattern is invalid.
    """
    try:
        return _compile(pattern, dialect)
    except (re.error, ValueError) as e:
        raise PatternSyntaxError(source, pattern, str(e)) from e
