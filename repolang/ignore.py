"""Ignore & override resolution.

Collects, folder by folder and parents first, every rule that removes a path
from the analysis or changes how it is treated:

- built-in vendor and generated-file regexes (skipped with ``keep_vendored``)
- user-supplied gitignore-style globs (``ignored_files``), always applied
- ``.gitignore`` lines, rooted at the folder that holds the file
- ``.gitattributes`` lines: forced text/binary, vendored/generated/documentation
  exclusion and ``linguist-language=`` overrides

Paths are posix strings relative to the analysed root; folders carry a
trailing ``/``.  Ignore patterns are unioned; overrides are first-match-wins.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import structlog

from repolang.config import AnalysisOptions
from repolang.exceptions import PatternSyntaxError
from repolang.models.language import LinguistContext
from repolang.patterns import Dialect, GlobMatcher, Matcher, compile_pattern
from repolang.walker import VCS_DIRS

log = structlog.get_logger("repolang.ignore")

GITIGNORE = ".gitignore"
GITATTRIBUTES = ".gitattributes"

_TEXT_TOKENS = ("text", "-binary")
_BINARY_TOKENS = ("-text", "binary")
_EXCLUDE_ATTRS = ("linguist-vendored", "linguist-generated", "linguist-documentation")
_LANGUAGE_ATTR = "linguist-language="


class IgnoreOrigin(str, Enum):
    BUILTIN_VENDOR = "builtin-vendor"
    BUILTIN_GENERATED = "builtin-generated"
    USER_GITIGNORE = "user-gitignore"
    USER_GITATTRIBUTES = "user-gitattributes"
    USER_SUPPLIED = "user-supplied"


def _scoped(path: str, folder: str) -> str | None:
    """Return *path* relative to *folder*, or None when it lies outside it."""
    if not folder:
        return path
    prefix = folder.rstrip("/") + "/"
    if not path.startswith(prefix) or path == prefix:
        return None
    return path[len(prefix):]


@dataclass(frozen=True)
class PathRule:
    """A matcher applied to paths under ``folder``."""

    matcher: Matcher
    folder: str = ""

    def test(self, path: str) -> bool:
        rel = _scoped(path, self.folder)
        return rel is not None and self.matcher.test(rel)


@dataclass(frozen=True)
class IgnorePattern(PathRule):
    origin: IgnoreOrigin = IgnoreOrigin.USER_SUPPLIED


@dataclass(frozen=True)
class OverrideEntry(PathRule):
    language: str = ""


@dataclass
class ResolvedRules:
    """Everything the resolver has collected so far."""

    ignores: list[IgnorePattern] = field(default_factory=list)
    forced_text: list[PathRule] = field(default_factory=list)
    forced_binary: list[PathRule] = field(default_factory=list)
    overrides: list[OverrideEntry] = field(default_factory=list)

    def ignored_by(self, path: str) -> IgnorePattern | None:
        for pattern in self.ignores:
            if pattern.test(path):
                return pattern
        return None

    def is_forced_text(self, path: str) -> bool:
        return any(rule.test(path) for rule in self.forced_text)

    def is_forced_binary(self, path: str) -> bool:
        return any(rule.test(path) for rule in self.forced_binary)

    def override_for(self, path: str) -> str | None:
        for entry in self.overrides:
            if entry.test(path):
                return entry.language
        return None


class IgnoreResolver:
    """Build :class:`ResolvedRules` incrementally while the tree is walked.

    Call :meth:`load_folder` for each folder as the walker reaches it, and use
    :meth:`is_ignored` both to prune folders and to drop files.
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        context: LinguistContext,
        options: AnalysisOptions,
    ) -> None:
        self.root = Path(root)
        self.context = context
        self.options = options
        self.rules = ResolvedRules()
        self._loaded: set[str] = set()

        if not options.keep_vendored:
            self._add_regexes(context.vendor_patterns, IgnoreOrigin.BUILTIN_VENDOR)
            self._add_regexes(context.generated_patterns, IgnoreOrigin.BUILTIN_GENERATED)
        self._add_user_patterns(options.ignored_files)

    # ── public ───────────────────────────────────────────────────────────

    def is_ignored(self, path: str) -> bool:
        """True if *path* (``dir/`` for folders) must not be analysed."""
        parts = path.rstrip("/").split("/")
        if any(part in VCS_DIRS for part in parts):
            return True
        hit = self.rules.ignored_by(path)
        if hit is not None:
            log.debug("ignore.matched", path=path, origin=hit.origin.value, pattern=hit.matcher.pattern)
            return True
        return False

    def load_folder(self, folder: str) -> None:
        """Read the ``.gitignore`` and ``.gitattributes`` files of *folder*.

        No-op in quick mode, for folders already loaded, and for folders that
        are themselves ignored.
        """
        if self.options.quick or folder in self._loaded:
            return
        self._loaded.add(folder)
        if folder and self.is_ignored(folder + "/"):
            return

        base = self.root / folder
        if self.options.check_ignored:
            text = self._read(base / GITIGNORE)
            if text is not None:
                self._parse_gitignore(text, folder)
        if self.options.check_attributes:
            text = self._read(base / GITATTRIBUTES)
            if text is not None:
                self._parse_gitattributes(text, folder)

    # ── internal ─────────────────────────────────────────────────────────

    def _read(self, path: Path) -> str | None:
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            log.warning("ignore.read_failed", path=str(path), error=str(e))
            return None

    def _compile(self, pattern: str, dialect: Dialect, source: str) -> Matcher | None:
        try:
            return compile_pattern(pattern, dialect, source=source)
        except PatternSyntaxError as e:
            log.warning("ignore.pattern_skipped", source=e.source, pattern=e.pattern, reason=e.reason)
            return None

    def _add_regexes(self, patterns: tuple[str, ...], origin: IgnoreOrigin) -> None:
        for pattern in patterns:
            matcher = self._compile(pattern, Dialect.REGEX, origin.value)
            if matcher is not None:
                self.rules.ignores.append(IgnorePattern(matcher=matcher, origin=origin))

    def _add_user_patterns(self, patterns: list[str]) -> None:
        valid = [p for p in patterns if self._compile(p, Dialect.GLOB, "ignored_files")]
        if valid:
            self.rules.ignores.append(
                IgnorePattern(matcher=GlobMatcher.from_lines(valid), origin=IgnoreOrigin.USER_SUPPLIED)
            )

    def _parse_gitignore(self, text: str, folder: str) -> None:
        source = f"{folder}/{GITIGNORE}" if folder else GITIGNORE
        lines = [
            line.rstrip("\r")
            for line in text.split("\n")
            if line.strip() and not line.startswith("#")
        ]
        valid = [line for line in lines if self._compile(line, Dialect.GLOB, source)]
        if not valid or self.options.keep_vendored:
            return
        # One spec per file so that "!negation" lines re-include earlier matches.
        self.rules.ignores.append(
            IgnorePattern(
                matcher=GlobMatcher.from_lines(valid),
                folder=folder,
                origin=IgnoreOrigin.USER_GITIGNORE,
            )
        )
        log.debug("ignore.gitignore_loaded", source=source, patterns=len(valid))

    def _parse_gitattributes(self, text: str, folder: str) -> None:
        source = f"{folder}/{GITATTRIBUTES}" if folder else GITATTRIBUTES
        for raw in text.split("\n"):
            tokens = raw.split()
            if len(tokens) < 2 or tokens[0].startswith("#"):
                continue
            pattern, attrs = tokens[0].strip('"'), tokens[1:]
            matcher = self._compile(pattern, Dialect.GLOB, source)
            if matcher is None:
                continue

            content_type = next(
                (a for a in attrs if a in _TEXT_TOKENS + _BINARY_TOKENS or a.startswith("text=")),
                None,
            )
            if content_type in _BINARY_TOKENS:
                self.rules.forced_binary.append(PathRule(matcher=matcher, folder=folder))
            elif content_type is not None:
                self.rules.forced_text.append(PathRule(matcher=matcher, folder=folder))

            if not self.options.keep_vendored and any(_is_exclusion(a) for a in attrs):
                self.rules.ignores.append(
                    IgnorePattern(matcher=matcher, folder=folder, origin=IgnoreOrigin.USER_GITATTRIBUTES)
                )

            for attr in attrs:
                if attr.startswith(_LANGUAGE_ATTR) and len(attr) > len(_LANGUAGE_ATTR):
                    language = self.context.resolve_alias(attr[len(_LANGUAGE_ATTR):])
                    self.rules.overrides.append(
                        OverrideEntry(matcher=matcher, folder=folder, language=language)
                    )
                    break


def _is_exclusion(attr: str) -> bool:
    name, _, value = attr.partition("=")
    return name in _EXCLUDE_ATTRS and value.lower() != "false"
