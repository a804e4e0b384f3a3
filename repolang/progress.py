"""Progress reporting for one analysis run.

The tracker times the resolve, classify and aggregate phases and follows
files through classification: how many were found, how many are done, how
many bytes they hold and which signal decided each one.  Listeners get the
live :class:`AnalysisProgress` after every change.
"""

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import structlog

from repolang.models.result import FileClassification

log = structlog.get_logger("repolang.progress")


@dataclass
class PhaseTiming:
    name: str
    status: str = "running"  # "running" | "completed" | "failed"
    started: float = field(default_factory=time.monotonic)
    finished: float | None = None
    error: str | None = None

    @property
    def duration(self) -> float | None:
        if self.finished is None:
            return None
        return round(self.finished - self.started, 3)


@dataclass
class AnalysisProgress:
    files_total: int = 0
    files_done: int = 0
    bytes_done: int = 0
    sources: Counter[str] = field(default_factory=Counter)
    phases: list[PhaseTiming] = field(default_factory=list)

    @property
    def fraction(self) -> float:
        if not self.files_total:
            return 1.0
        return self.files_done / self.files_total


class ProgressTracker:
    """Collect run progress and notify listeners."""

    def __init__(self) -> None:
        self.state = AnalysisProgress()
        self.callbacks: list[Callable[[AnalysisProgress], None]] = []

    @contextmanager
    def phase(self, name: str) -> Iterator[PhaseTiming]:
        """Time the enclosed block as phase *name*; errors mark it failed and propagate."""
        timing = PhaseTiming(name=name)
        self.state.phases.append(timing)
        self._notify()
        try:
            yield timing
        except Exception as e:
            timing.status, timing.error = "failed", str(e)
            timing.finished = time.monotonic()
            log.debug("progress.phase_failed", phase=name, error=timing.error)
            self._notify()
            raise
        timing.status = "completed"
        timing.finished = time.monotonic()
        log.debug("progress.phase_done", phase=name, duration=timing.duration)
        self._notify()

    def files_found(self, count: int) -> None:
        self.state.files_total = count
        self._notify()

    def file_done(self, item: FileClassification) -> None:
        self.state.files_done += 1
        self.state.bytes_done += item.size
        self.state.sources[item.source] += 1
        self._notify()

    def summary(self) -> dict[str, Any]:
        s = self.state
        return {
            "files": {"total": s.files_total, "done": s.files_done, "bytes": s.bytes_done},
            "sources": dict(s.sources),
            "phases": [
                {"phase": p.name, "status": p.status, "duration": p.duration, "error": p.error}
                for p in s.phases
            ],
            "total_duration": round(sum(p.duration or 0 for p in s.phases), 3),
        }

    def _notify(self) -> None:
        for cb in self.callbacks:
            try:
                cb(self.state)
            except Exception:
                log.debug("progress.callback_failed", exc_info=True)
