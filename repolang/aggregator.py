"""Aggregation of per-file classifications into the analysis result."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import PurePosixPath

import structlog

from repolang.config import AnalysisOptions
from repolang.models.language import LinguistContext
from repolang.models.result import AnalysisResult, FileClassification, LanguageStats

log = structlog.get_logger("repolang.aggregator")


class Aggregator:
    """Single-writer accumulator; feed files in walk order with :meth:`add`."""

    def __init__(self, context: LinguistContext, options: AnalysisOptions) -> None:
        self.context = context
        self.options = options
        self.categories = set(options.categories) if options.categories else None
        self._result = AnalysisResult()
        self.dropped = 0

    def add(self, item: FileClassification) -> bool:
        """Account for one file; returns False when the file is dropped."""
        if item.binary:
            return self._drop(item, "binary")

        lang = self.context.get(item.language)
        if lang is not None and self.categories is not None and lang.category not in self.categories:
            return self._drop(item, "category_filtered")

        files = self._result.files
        files.results[item.path] = item.language
        if item.language is not None and lang is None:
            # Named by an override or heuristic but absent from the table:
            # listed per file, counted in no byte total.
            log.debug("aggregate.language_not_in_table", path=item.path, language=item.language)
            return True

        files.bytes += item.size
        if lang is None:
            self._add_unknown(item)
            return True

        stats = self._result.languages.results.get(lang.name)
        if stats is None:
            stats = LanguageStats(
                type=lang.category,
                color=lang.color,
                parent=lang.group if self.options.child_languages else None,
            )
            self._result.languages.results[lang.name] = stats
        stats.bytes += item.size
        self._result.languages.bytes += item.size
        return True

    def result(self) -> AnalysisResult:
        res = self._result
        empty = [name for name, stats in res.languages.results.items() if stats.bytes <= 0]
        for name in empty:
            del res.languages.results[name]
        res.files.count = len(res.files.results)
        res.languages.count = len(res.languages.results)
        res.unknown.count = len(res.unknown.extensions) + len(res.unknown.filenames)
        return res

    def _add_unknown(self, item: FileClassification) -> None:
        unknown = self._result.unknown
        name = PurePosixPath(item.path).name
        ext = PurePosixPath(name).suffix
        bucket = unknown.extensions if ext else unknown.filenames
        key = ext if ext else name
        bucket[key] = bucket.get(key, 0) + item.size
        unknown.bytes += item.size

    def _drop(self, item: FileClassification, reason: str) -> bool:
        self.dropped += 1
        log.debug("aggregate.dropped", path=item.path, language=item.language, reason=reason)
        return False


def aggregate(
    items: Iterable[FileClassification],
    context: LinguistContext,
    options: AnalysisOptions,
) -> AnalysisResult:
    agg = Aggregator(context, options)
    for item in items:
        agg.add(item)
    return agg.result()
