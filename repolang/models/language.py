"""Language table, heuristic rules, and the read-only analysis context."""

from __future__ import annotations

import functools
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Literal

Category = Literal["data", "markup", "programming", "prose"]
CATEGORIES: tuple[Category, ...] = ("data", "markup", "programming", "prose")


@dataclass(frozen=True)
class LanguageDefinition:
    """One entry of the language table."""

    name: str
    category: Category
    group: str | None = None  # parent language, e.g. "TSX" -> "TypeScript"
    filenames: tuple[str, ...] = ()
    extensions: tuple[str, ...] = ()
    interpreters: tuple[str, ...] = ()
    aliases: tuple[str, ...] = ()
    color: str | None = None


@dataclass(frozen=True)
class HeuristicRule:
    """A content rule narrowing an ambiguous extension to ``language``.

    ``patterns`` holds inline and named patterns concatenated; any one of them
    matching satisfies the rule.  ``and_rules`` must all match as well.
    """

    language: str
    patterns: tuple[str, ...] = ()
    negative_patterns: tuple[str, ...] = ()
    and_rules: tuple[HeuristicRule, ...] = ()

    @property
    def unconditional(self) -> bool:
        return not (self.patterns or self.negative_patterns or self.and_rules)


@dataclass(frozen=True)
class Disambiguation:
    """Ordered rules applying to a set of extensions."""

    extensions: tuple[str, ...]
    rules: tuple[HeuristicRule, ...]


@dataclass(frozen=True)
class LinguistContext:
    """Immutable tables shared by every stage of one analysis run.

    Built once by :mod:`repolang.tables.loader` and passed explicitly; never
    mutated.  Use :meth:`without_languages` to derive a filtered copy.
    """

    languages: Mapping[str, LanguageDefinition]
    vendor_patterns: tuple[str, ...] = ()
    generated_patterns: tuple[str, ...] = ()
    disambiguations: tuple[Disambiguation, ...] = ()
    source: str = "bundled"
    _alias_index: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.languages, MappingProxyType):
            object.__setattr__(self, "languages", MappingProxyType(dict(self.languages)))
        aliases: dict[str, str] = {}
        for name, lang in self.languages.items():
            for alias in lang.aliases:
                aliases.setdefault(alias.lower(), name)
        object.__setattr__(self, "_alias_index", MappingProxyType(aliases))

    def get(self, name: str | None) -> LanguageDefinition | None:
        if name is None:
            return None
        return self.languages.get(name)

    def parent_of(self, name: str) -> str | None:
        lang = self.languages.get(name)
        return lang.group if lang else None

    def coarsen(self, name: str) -> str:
        """Replace a child language by its parent (if it has one)."""
        return self.parent_of(name) or name

    def resolve_alias(self, name: str) -> str:
        """Return the canonical key for *name*, looking up aliases case-insensitively.

        Unknown names are returned unchanged.
        """
        if name in self.languages:
            return name
        return self._alias_index.get(name.lower(), name)

    @functools.cached_property
    def interpreter_index(self) -> tuple[tuple[str, tuple[str, ...]], ...]:
        return tuple(
            (name, lang.interpreters) for name, lang in self.languages.items() if lang.interpreters
        )

    @functools.cached_property
    def filename_index(self) -> Mapping[str, tuple[str, ...]]:
        """Lower-cased filename -> languages declaring it, in table order."""
        return self._index(lambda lang: lang.filenames)

    @functools.cached_property
    def extension_index(self) -> Mapping[str, tuple[str, ...]]:
        """Lower-cased extension -> languages declaring it, in table order."""
        return self._index(lambda lang: lang.extensions)

    def _index(self, keys) -> Mapping[str, tuple[str, ...]]:
        index: dict[str, list[str]] = {}
        for name, lang in self.languages.items():
            for key in keys(lang):
                names = index.setdefault(key.lower(), [])
                if name not in names:
                    names.append(name)
        return MappingProxyType({k: tuple(v) for k, v in index.items()})

    def without_languages(self, names: Iterable[str]) -> LinguistContext:
        """Return a copy with *names* (matched case-insensitively) removed."""
        drop = {n.lower() for n in names}
        if not drop:
            return self
        kept = {k: v for k, v in self.languages.items() if k.lower() not in drop}
        return replace(self, languages=kept)
