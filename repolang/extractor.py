"""Signal extraction: shebang, override, filename and extension candidates."""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from repolang.config import AnalysisOptions
from repolang.models.language import LinguistContext


class CandidateSet:
    """Ordered set of language names; insertion order is preserved."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: list[str] = []
        for name in names:
            self.add(name)

    def add(self, name: str) -> None:
        if name not in self._names:
            self._names.append(name)

    def first(self) -> str | None:
        return self._names[0] if self._names else None

    def as_list(self) -> list[str]:
        return list(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CandidateSet):
            return self._names == other._names
        return NotImplemented

    def __repr__(self) -> str:
        return f"CandidateSet({self._names!r})"


@dataclass
class Extraction:
    candidates: CandidateSet = field(default_factory=CandidateSet)
    source: str = "none"  # shebang | override | filename | extension | none

    @property
    def terminal(self) -> bool:
        """Shebang and override results are final; nothing else is consulted."""
        return self.source in ("shebang", "override")


@functools.lru_cache(maxsize=1024)
def _interpreter_regex(interpreter: str) -> re.Pattern[str]:
    return re.compile(r"\b" + re.escape(interpreter) + r"\b")


def match_shebang(first_line: str, context: LinguistContext) -> str | None:
    """Return the first language whose interpreter appears in a ``#!`` line."""
    if not first_line.startswith("#!"):
        return None
    for name, interpreters in context.interpreter_index:
        if any(_interpreter_regex(i).search(first_line) for i in interpreters):
            return name
    return None


def _suffixes(basename: str) -> Iterator[str]:
    start = basename.find(".")
    while start != -1:
        yield basename[start:]
        start = basename.find(".", start + 1)


def extract_candidates(
    path: str,
    context: LinguistContext,
    options: AnalysisOptions,
    *,
    first_line: str | None = None,
    override: str | None = None,
) -> Extraction:
    """Collect candidate languages for *path* in precedence order.

    *first_line* is the file's first line (only needed for shebang checks) and
    *override* the language forced by a ``linguist-language`` attribute.
    Filename matches suppress extension matching.  Child languages are
    replaced by their parent unless ``options.child_languages`` is set.
    """
    result = Extraction()

    def _add(name: str) -> None:
        result.candidates.add(name if options.child_languages else context.coarsen(name))

    if options.check_shebang and first_line:
        lang = match_shebang(first_line, context)
        if lang is not None:
            _add(lang)
            result.source = "shebang"
            return result

    if options.check_attributes and override:
        _add(override)
        result.source = "override"
        return result

    basename = PurePosixPath(path).name.lower()
    for name in context.filename_index.get(basename, ()):
        _add(name)
    if result.candidates:
        result.source = "filename"
        return result

    matched: set[str] = set()
    for suffix in _suffixes(basename):
        matched.update(context.extension_index.get(suffix, ()))
    # Table order, not suffix order
    for name in context.languages:
        if name in matched:
            _add(name)
    if result.candidates:
        result.source = "extension"
    return result
