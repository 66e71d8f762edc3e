"""Tests for wiki run progress events."""

from __future__ import annotations

from codewiki.constants import StageProgress
from codewiki.services.events import StageEvent


class TestStageEvent:
    def test_label_falls_back_to_name(self) -> None:
        assert (
            StageEvent(name="scan", status=StageProgress.RUNNING).label
            == "Scanning source files"
        )
        unknown = StageEvent(name="lint", status=StageProgress.DONE)
        assert unknown.label == "lint"

    def test_percent_only_during_writes(self) -> None:
        render = StageEvent(name="render", status=StageProgress.RUNNING)
        assert render.percent is None
        started = StageEvent(
            name="write",
            status=StageProgress.RUNNING,
            documents_written=0,
            documents_total=8,
        )
        halfway = StageEvent(
            name="write",
            status=StageProgress.RUNNING,
            documents_written=4,
            documents_total=8,
        )
        assert started.percent == 0.0
        assert halfway.percent == 50.0

    def test_nothing_to_write_is_complete(self) -> None:
        event = StageEvent(
            name="write",
            status=StageProgress.RUNNING,
            documents_written=0,
            documents_total=0,
        )
        assert event.percent == 100.0

    def test_failed(self) -> None:
        assert StageEvent(name="scan", status=StageProgress.ERROR).failed
        assert not StageEvent(name="scan", status=StageProgress.DONE).failed

    def test_str_running(self) -> None:
        event = StageEvent(
            name="write",
            status=StageProgress.RUNNING,
            message="Writing 8 documents to docs/wiki",
            documents_written=0,
            documents_total=8,
        )
        assert str(event) == "Writing 8 documents to docs/wiki [0/8]"

    def test_str_finished(self) -> None:
        done = StageEvent(
            name="analysis", status=StageProgress.DONE, duration_ms=41.6
        )
        failed = StageEvent(
            name="scan",
            status=StageProgress.ERROR,
            message="Not a directory: /missing",
            duration_ms=3.0,
        )
        assert str(done) == "Analyzing codebase (done, 42ms)"
        assert str(failed) == "Not a directory: /missing (error, 3ms)"
