"""Tests for the typed pipeline framework."""

from __future__ import annotations

import asyncio

import pytest

from codewiki.analysis.pipeline import ParallelGroup, PipelineStage
from codewiki.constants import StageOutcome


async def _succeed(data: str) -> str:
    return f"ok:{data}"


async def _fail(data: str) -> str:
    msg = "intentional"
    raise ValueError(msg)


async def _slow(data: str) -> str:
    await asyncio.sleep(0.05)
    return f"slow:{data}"


async def _hang(data: str) -> str:
    await asyncio.sleep(10)
    return data


class TestPipelineStage:
    @pytest.mark.asyncio
    async def test_successful_run(self) -> None:
        stage: PipelineStage[str, str] = PipelineStage(
            name="test", execute=_succeed
        )
        result = await stage.run("hello")
        assert result.status == StageOutcome.COMPLETED
        assert result.ok is True
        assert result.output == "ok:hello"
        assert result.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_failure_becomes_result(self) -> None:
        stage: PipelineStage[str, str] = PipelineStage(
            name="broken", execute=_fail
        )
        result = await stage.run("hello")
        assert result.status == StageOutcome.FAILED
        assert result.ok is False
        assert result.output is None
        assert result.error == "intentional"


class TestParallelGroup:
    @pytest.mark.asyncio
    async def test_results_in_stage_order(self) -> None:
        group: ParallelGroup[str] = ParallelGroup(
            name="g",
            stages=[
                PipelineStage(name="slow", execute=_slow),
                PipelineStage(name="fast", execute=_succeed),
            ],
        )
        results = await group.execute("x")
        assert [r.stage_name for r in results] == ["slow", "fast"]
        assert [r.output for r in results] == ["slow:x", "ok:x"]

    @pytest.mark.asyncio
    async def test_failure_does_not_cancel_siblings(self) -> None:
        group: ParallelGroup[str] = ParallelGroup(
            name="g",
            stages=[
                PipelineStage(name="bad", execute=_fail),
                PipelineStage(name="slow", execute=_slow),
            ],
        )
        bad, slow = await group.execute("x")
        assert bad.status == StageOutcome.FAILED
        assert slow.status == StageOutcome.COMPLETED

    @pytest.mark.asyncio
    async def test_empty_group(self) -> None:
        group: ParallelGroup[str] = ParallelGroup(name="empty")
        assert await group.execute("x") == []

    @pytest.mark.asyncio
    async def test_timeout_marks_unfinished_stages(self) -> None:
        group: ParallelGroup[str] = ParallelGroup(
            name="g",
            stages=[
                PipelineStage(name="fast", execute=_succeed),
                PipelineStage(name="hang", execute=_hang),
            ],
            timeout=0.1,
        )
        fast, hang = await group.execute("x")
        assert fast.status == StageOutcome.COMPLETED
        assert hang.status == StageOutcome.FAILED
        assert hang.error is not None
        assert "timed out" in hang.error

    @pytest.mark.asyncio
    async def test_max_concurrency(self) -> None:
        running = 0
        peak = 0

        async def _track(data: str) -> str:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return data

        group: ParallelGroup[str] = ParallelGroup(
            name="g",
            stages=[PipelineStage(name=f"s{i}", execute=_track) for i in range(4)],
            max_concurrency=2,
        )
        results = await group.execute("x")
        assert all(r.ok for r in results)
        assert peak <= 2
