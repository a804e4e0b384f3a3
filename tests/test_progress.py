"""Tests for ProgressTracker."""

from __future__ import annotations

import time

import pytest

from repolang.models.result import FileClassification as FC
from repolang.progress import ProgressTracker


class TestPhases:
    def test_completed_phase_is_timed(self):
        tracker = ProgressTracker()
        with tracker.phase("resolve") as timing:
            time.sleep(0.01)
            assert timing.status == "running"
        assert timing.status == "completed"
        assert timing.duration >= 0.01

    def test_failed_phase_records_error_and_reraises(self):
        tracker = ProgressTracker()
        with pytest.raises(OSError):
            with tracker.phase("resolve"):
                raise OSError("disk error")
        phase = tracker.summary()["phases"][0]
        assert phase["status"] == "failed"
        assert phase["error"] == "disk error"

    def test_phases_in_order(self):
        tracker = ProgressTracker()
        for name in ("resolve", "classify", "aggregate"):
            with tracker.phase(name):
                pass
        assert [p["phase"] for p in tracker.summary()["phases"]] == ["resolve", "classify", "aggregate"]


class TestFiles:
    def test_counts_bytes_and_sources(self):
        tracker = ProgressTracker()
        tracker.files_found(3)
        tracker.file_done(FC("a.py", "Python", 10, source="extension"))
        tracker.file_done(FC("run", "Shell", 5, source="shebang"))
        assert tracker.state.fraction == pytest.approx(2 / 3)

        tracker.file_done(FC("b.py", "Python", 1, source="extension"))
        summary = tracker.summary()
        assert summary["files"] == {"total": 3, "done": 3, "bytes": 16}
        assert summary["sources"] == {"extension": 2, "shebang": 1}

    def test_nothing_found_is_complete(self):
        tracker = ProgressTracker()
        tracker.files_found(0)
        assert tracker.state.fraction == 1.0


class TestCallbacks:
    def test_listeners_see_live_state_and_failures_are_contained(self):
        seen = []
        tracker = ProgressTracker()
        tracker.callbacks.append(lambda s: seen.append(s.files_done))
        tracker.callbacks.append(lambda s: 1 / 0)

        tracker.files_found(1)
        tracker.file_done(FC("a.py", "Python", 1))

        assert seen == [0, 1]
