"""Typed pipeline stages with parallel fan-out support."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from codewiki.constants import StageOutcome

logger = logging.getLogger(__name__)


@dataclass
class StageResult[TOutput]:
    """Outcome of a single pipeline stage execution."""

    stage_name: str
    output: TOutput | None
    duration_ms: float
    status: StageOutcome
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == StageOutcome.COMPLETED


@dataclass
class PipelineStage[TInput, TOutput]:
    """A named async stage. Exceptions become a FAILED result."""

    name: str
    execute: Callable[[TInput], Awaitable[TOutput]]

    async def run(self, input_data: TInput) -> StageResult[TOutput]:
        start = time.monotonic()
        try:
            output = await self.execute(input_data)
        except Exception as exc:
            elapsed = (time.monotonic() - start) * 1000
            logger.warning(
                "event=stage_failed stage=%s error=%s",
                self.name,
                exc,
                exc_info=True,
            )
            return StageResult(
                stage_name=self.name,
                output=None,
                duration_ms=elapsed,
                status=StageOutcome.FAILED,
                error=str(exc),
            )
        elapsed = (time.monotonic() - start) * 1000
        logger.debug(
            "event=stage_done stage=%s duration_ms=%.0f", self.name, elapsed
        )
        return StageResult(
            stage_name=self.name,
            output=output,
            duration_ms=elapsed,
            status=StageOutcome.COMPLETED,
        )


@dataclass
class ParallelGroup[TInput]:
    """Run several stages concurrently on the same input.

    The group is a barrier: ``execute`` returns only after every
    stage has completed, failed or hit the group deadline. A failing
    stage never cancels its siblings.
    """

    name: str
    stages: list[PipelineStage[TInput, Any]] = field(
        default_factory=lambda: list[PipelineStage[Any, Any]]()
    )
    max_concurrency: int | None = None
    timeout: float | None = None  # seconds; None = no deadline

    async def execute(self, input_data: TInput) -> list[StageResult[Any]]:
        """Results are returned in stage order, not completion order."""
        if not self.stages:
            return []

        results: list[StageResult[Any]] = [
            StageResult(
                stage_name=s.name,
                output=None,
                duration_ms=0.0,
                status=StageOutcome.SKIPPED,
            )
            for s in self.stages
        ]
        semaphore = (
            asyncio.Semaphore(self.max_concurrency)
            if self.max_concurrency
            else None
        )

        async def _run_stage(
            idx: int, stage: PipelineStage[TInput, Any]
        ) -> None:
            if semaphore is None:
                results[idx] = await stage.run(input_data)
                return
            async with semaphore:
                results[idx] = await stage.run(input_data)

        gathered = asyncio.gather(
            *(_run_stage(i, s) for i, s in enumerate(self.stages)),
            return_exceptions=True,
        )
        if self.timeout is None:
            await gathered
            return results

        try:
            await asyncio.wait_for(gathered, timeout=self.timeout)
        except TimeoutError:
            logger.error(
                "event=parallel_group_timeout group=%s timeout_s=%.1f",
                self.name,
                self.timeout,
            )
            for i, r in enumerate(results):
                if r.status == StageOutcome.SKIPPED:
                    results[i] = StageResult(
                        stage_name=r.stage_name,
                        output=None,
                        duration_ms=self.timeout * 1000,
                        status=StageOutcome.FAILED,
                        error=f"timed out after {self.timeout:.1f}s",
                    )
        return results
