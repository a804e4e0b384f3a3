"""Content heuristics for extensions shared by several languages."""

from __future__ import annotations

from pathlib import PurePosixPath

import structlog

from repolang.config import AnalysisOptions
from repolang.exceptions import PatternSyntaxError
from repolang.extractor import CandidateSet
from repolang.models.language import Disambiguation, HeuristicRule, LinguistContext
from repolang.patterns import Dialect, compile_pattern

log = structlog.get_logger("repolang.heuristics")


class HeuristicDisambiguator:
    """Pick one candidate using the first matching disambiguation rule."""

    def __init__(self, context: LinguistContext, options: AnalysisOptions) -> None:
        self.context = context
        self.options = options
        self._by_extension: dict[str, list[Disambiguation]] = {}
        self._invalid: set[str] = set()
        for group in context.disambiguations:
            for ext in group.extensions:
                self._by_extension.setdefault(ext, []).append(group)

    def groups_for(self, path: str) -> list[Disambiguation]:
        return self._by_extension.get(PurePosixPath(path).suffix.lower(), [])

    def applies_to(self, path: str, candidates: CandidateSet) -> bool:
        """True when the heuristic stage would run for *path* at all."""
        return (
            self.options.check_heuristics
            and len(candidates) > 1
            and bool(self.groups_for(path))
        )

    def disambiguate(self, path: str, candidates: CandidateSet, content: str) -> str | None:
        """Return the language of the first rule matching *content*, or None."""
        if not self.applies_to(path, candidates):
            return None
        for group in self.groups_for(path):
            for rule in group.rules:
                if not self._is_candidate(rule.language, candidates):
                    continue
                if self._matches(rule, content):
                    log.debug("heuristics.matched", path=path, language=rule.language)
                    if self.options.child_languages:
                        return rule.language
                    return self.context.coarsen(rule.language)
        return None

    def _is_candidate(self, language: str, candidates: CandidateSet) -> bool:
        if language not in self.context.languages:
            return False
        parent = self.context.parent_of(language)
        return language in candidates or (parent is not None and parent in candidates)

    def _matches(self, rule: HeuristicRule, content: str) -> bool:
        if rule.patterns and not any(self._search(p, content) for p in rule.patterns):
            return False
        if any(self._search(p, content) for p in rule.negative_patterns):
            return False
        return all(self._matches(sub, content) for sub in rule.and_rules)

    def _search(self, pattern: str, content: str) -> bool:
        try:
            matcher = compile_pattern(pattern, Dialect.REGEX, source="heuristics")
        except PatternSyntaxError as e:
            if pattern not in self._invalid:
                self._invalid.add(pattern)
                log.warning("heuristics.pattern_skipped", pattern=e.pattern, reason=e.reason)
            return False
        return matcher.test(content)
