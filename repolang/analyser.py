"""Analysis entry point: walk, resolve, classify, aggregate."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import structlog

from repolang import reader
from repolang.aggregator import Aggregator
from repolang.config import AnalysisOptions
from repolang.extractor import extract_candidates
from repolang.fallback import StatisticalFallback
from repolang.heuristics import HeuristicDisambiguator
from repolang.ignore import IgnoreResolver, ResolvedRules
from repolang.models.language import LinguistContext
from repolang.models.result import AnalysisResult, FileClassification
from repolang.progress import ProgressTracker
from repolang.samples import InMemorySampleProvider, SampleProvider
from repolang.tables import load_bundled_context
from repolang.walker import walk_tree

log = structlog.get_logger("repolang.analyser")

PathInput = Union[str, os.PathLike, Iterable[Union[str, os.PathLike]], None]


@dataclass(frozen=True)
class FileEntry:
    """A file that survived ignore resolution."""

    key: str  # path as reported in the result
    rel: str  # posix path relative to its root
    abs_path: Path
    rules: ResolvedRules


# ── public ───────────────────────────────────────────────────────────────


async def analyse(
    input: PathInput = None,
    options: AnalysisOptions | Mapping[str, Any] | None = None,
    *,
    context: LinguistContext | None = None,
    sample_provider: SampleProvider | None = None,
    tracker: ProgressTracker | None = None,
) -> AnalysisResult:
    """Classify every file under *input* and aggregate bytes per language.

    *input* is a folder, a file, or a list of either (default: the current
    directory).  *options* may be an :class:`AnalysisOptions` or a mapping of
    option names.  Without a *sample_provider* ambiguous files that heuristics
    cannot settle get their first candidate.

    Raises ``ConfigLoadError`` when the bundled tables cannot be loaded and
    ``FileNotFoundError`` when an input path does not exist.
    """
    opts = options if isinstance(options, AnalysisOptions) else AnalysisOptions.model_validate(options or {})
    ctx = (context or load_bundled_context()).without_languages(opts.ignored_languages)
    tracker = tracker or ProgressTracker()

    with tracker.phase("resolve"):
        entries = await asyncio.to_thread(_resolve_inputs, _as_paths(input), ctx, opts)
    tracker.files_found(len(entries))

    classifier = _FileClassifier(ctx, opts, sample_provider or InMemorySampleProvider({}))
    semaphore = asyncio.Semaphore(opts.concurrency)

    async def _bounded(entry: FileEntry) -> FileClassification:
        async with semaphore:
            item = await classifier.classify(entry)
            tracker.file_done(item)
            return item

    with tracker.phase("classify"):
        items = await asyncio.gather(*(_bounded(e) for e in entries))

    # Single writer, walk order
    with tracker.phase("aggregate"):
        agg = Aggregator(ctx, opts)
        for item in items:
            agg.add(item)
        result = agg.result()

    log.info(
        "analyse.done",
        files=result.files.count,
        bytes=result.files.bytes,
        languages=result.languages.count,
        dropped=agg.dropped,
        tables=ctx.source,
    )
    return result


def analyse_sync(
    input: PathInput = None,
    options: AnalysisOptions | Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> AnalysisResult:
    """Blocking wrapper around :func:`analyse`."""
    return asyncio.run(analyse(input, options, **kwargs))


# ── resolve ──────────────────────────────────────────────────────────────


def _as_paths(input: PathInput) -> list[Path]:
    if input is None:
        return [Path(".")]
    if isinstance(input, (str, os.PathLike)):
        return [Path(input)]
    return [Path(p) for p in input]


def _resolve_inputs(
    paths: list[Path],
    context: LinguistContext,
    options: AnalysisOptions,
) -> list[FileEntry]:
    for path in paths:
        if not path.exists():
            raise FileNotFoundError(f"Input path not found: {path}")

    files = [p for p in paths if not p.is_dir()]
    file_resolver = IgnoreResolver(_file_root(files), context, options) if files else None

    entries: list[FileEntry] = []
    seen: set[str] = set()
    for path in paths:
        if path.is_dir():
            found = _resolve_tree(path, context, options)
        else:
            found = _resolve_file(path, file_resolver)
        for entry in found:
            if entry.key not in seen:
                seen.add(entry.key)
                entries.append(entry)
    return entries


def _resolve_tree(root: Path, context: LinguistContext, options: AnalysisOptions) -> list[FileEntry]:
    resolver = IgnoreResolver(root, context, options)
    entries: list[FileEntry] = []

    def _skip(folder: str) -> bool:
        return resolver.is_ignored(folder + "/")

    for folder, files in walk_tree(root, skip_folder=_skip):
        resolver.load_folder(folder)
        for name in files:
            rel = f"{folder}/{name}" if folder else name
            if resolver.is_ignored(rel):
                continue
            abs_path = root / rel
            entries.append(
                FileEntry(key=abs_path.as_posix(), rel=rel, abs_path=abs_path, rules=resolver.rules)
            )
    log.debug("resolve.tree", root=str(root), files=len(entries), rules=len(resolver.rules.ignores))
    return entries


def _file_root(files: list[Path]) -> Path:
    """Folder that explicit file inputs are matched from.

    The cwd when it holds every file, otherwise their deepest common folder.
    """
    cwd = Path.cwd().resolve()
    resolved = [f.resolve() for f in files]
    if all(f.is_relative_to(cwd) for f in resolved):
        return cwd
    return Path(os.path.commonpath([f.parent for f in resolved]))


def _resolve_file(path: Path, resolver: IgnoreResolver) -> list[FileEntry]:
    rel = path.resolve().relative_to(resolver.root).as_posix()
    parts = rel.split("/")[:-1]
    # Rule files load top-down so a folder's rules see its ancestors' exclusions.
    for depth in range(len(parts) + 1):
        folder = "/".join(parts[:depth])
        if folder and resolver.is_ignored(folder + "/"):
            log.debug("resolve.file_ignored", path=str(path), folder=folder)
            return []
        resolver.load_folder(folder)
    if resolver.is_ignored(rel):
        log.debug("resolve.file_ignored", path=str(path))
        return []
    return [FileEntry(key=path.as_posix(), rel=rel, abs_path=path, rules=resolver.rules)]


# ── classify ─────────────────────────────────────────────────────────────


class _FileClassifier:
    """Runs the per-file pipeline; file I/O happens in worker threads."""

    def __init__(
        self,
        context: LinguistContext,
        options: AnalysisOptions,
        provider: SampleProvider,
    ) -> None:
        self.context = context
        self.options = options
        self.heuristics = HeuristicDisambiguator(context, options)
        self.fallback = StatisticalFallback(provider)

    async def classify(self, entry: FileEntry) -> FileClassification:
        item = FileClassification(path=entry.key, language=None)
        try:
            item.size = (await asyncio.to_thread(entry.abs_path.stat)).st_size
            item.binary = await asyncio.to_thread(self._is_binary, entry)
            if item.binary:
                return item
            await self._detect(entry, item)
        except OSError as e:
            log.warning("classify.read_failed", path=entry.key, error=str(e))
            item.language = None
            item.source = "none"
        return item

    def _is_binary(self, entry: FileEntry) -> bool:
        if self.options.keep_binary:
            return False
        if entry.rules.is_forced_text(entry.rel):
            return False
        return entry.rules.is_forced_binary(entry.rel) or reader.is_binary(entry.abs_path)

    async def _detect(self, entry: FileEntry, item: FileClassification) -> None:
        first_line = None
        if self.options.check_shebang:
            first_line = await asyncio.to_thread(reader.read_first_line, entry.abs_path)
        override = entry.rules.override_for(entry.rel) if self.options.check_attributes else None

        found = extract_candidates(
            entry.rel, self.context, self.options, first_line=first_line, override=override
        )
        item.source = found.source
        if found.terminal or len(found.candidates) <= 1:
            item.language = found.candidates.first()
            return

        content = await asyncio.to_thread(reader.read_text, entry.abs_path)
        language = self.heuristics.disambiguate(entry.rel, found.candidates, content)
        if language is not None:
            item.language, item.source = language, "heuristic"
            return

        item.language = await self.fallback.classify(entry.key, found.candidates, content)
        item.source = "classifier"
