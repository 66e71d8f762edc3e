"""Pipeline orchestration: scan, analyze, infer, index, render, write."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

from codewiki.analysis.analyzer import (
    analyze_codebase_full,
    run_codebase_analysis,
)
from codewiki.analysis.pipeline import ParallelGroup, PipelineStage
from codewiki.analysis.schemas import CodebaseAnalysis
from codewiki.config import Settings
from codewiki.constants import DEFAULT_DOMAIN, StageProgress
from codewiki.domain.mapper import infer_domain_model as _infer_domain_model
from codewiki.domain.schemas import DomainModel
from codewiki.ingestion.chunker import analyze_file as _analyze_file
from codewiki.ingestion.scanner import analyze_codebase as _scan_codebase
from codewiki.ingestion.schemas import CodebaseScan, FileAnalysis
from codewiki.resilience.errors import CodeWikiError, DocumentWriteError
from codewiki.search import build_semantic_index as _build_semantic_index
from codewiki.search.indexer import SemanticSearch
from codewiki.services.events import ProgressCallback, StageEvent
from codewiki.wiki.generator import WikiGenerator, write_failures
from codewiki.wiki.schemas import (
    DocumentWriteResult,
    WikiConfig,
    WikiDocument,
)

logger = logging.getLogger(__name__)


@dataclass
class StageStatus:
    """Status of a pipeline stage."""

    name: str
    ok: bool
    duration_ms: float = 0.0
    error: str | None = None


@dataclass
class WikiRunResult:
    """Full result of a wiki generation run."""

    base_path: str
    stages: list[StageStatus] = field(
        default_factory=lambda: list[StageStatus]()
    )
    analysis: CodebaseAnalysis | None = None
    domain_model: DomainModel | None = None
    search: SemanticSearch | None = None
    documents: list[WikiDocument] = field(
        default_factory=lambda: list[WikiDocument]()
    )
    write_results: list[DocumentWriteResult] = field(
        default_factory=lambda: list[DocumentWriteResult]()
    )
    total_duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return bool(self.stages) and all(s.ok for s in self.stages)

    def failed_stage(self) -> StageStatus | None:
        """The first stage that did not succeed, if any."""
        return next((s for s in self.stages if not s.ok), None)


@dataclass
class PipelineContext:
    """Shared mutable state passed through all pipeline stages.

    INVARIANT: parallel stages write to disjoint fields.
    _domain_stage writes ctx.domain_model; _index_stage writes
    ctx.search.
    """

    base_path: Path
    settings: Settings
    config: WikiConfig
    on_progress: ProgressCallback | None = None

    # Phase 1 output
    scan: CodebaseScan | None = None

    # Phase 2 output
    analysis: CodebaseAnalysis | None = None

    # Phase 3 outputs
    domain_model: DomainModel | None = None
    search: SemanticSearch | None = None

    # Phase 4+5 outputs
    documents: list[WikiDocument] = field(
        default_factory=lambda: list[WikiDocument]()
    )
    write_results: list[DocumentWriteResult] = field(
        default_factory=lambda: list[DocumentWriteResult]()
    )

    def report(self, event: StageEvent) -> None:
        """Emit a progress event if callback is set."""
        if self.on_progress:
            self.on_progress(event)

    def report_done(self, status: StageStatus) -> None:
        """Emit a DONE/ERROR event for a completed stage."""
        self.report(
            StageEvent(
                name=status.name,
                status=(
                    StageProgress.DONE
                    if status.ok
                    else StageProgress.ERROR
                ),
                duration_ms=status.duration_ms,
                message=status.error or "",
            )
        )


async def run_wiki_generation(
    base_path: str | Path,
    settings: Settings | None = None,
    config: WikiConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> WikiRunResult:
    """Run the full wiki pipeline over *base_path*.

    Phases:
      1. Scan: discover and chunk source files
      2. Analysis: graph, patterns, modules, metrics
      3. Domain model + semantic index (concurrent via ParallelGroup)
      4. Render every wiki document
      5. Write documents under the output path

    Never raises for stage failures: a failed scan or analysis stops
    the run early, and every outcome is recorded in ``result.stages``.
    """
    cfg = settings or Settings()
    ctx = PipelineContext(
        base_path=Path(base_path),
        settings=cfg,
        config=config or WikiConfig.from_settings(cfg),
        on_progress=on_progress,
    )
    result = WikiRunResult(base_path=str(ctx.base_path))
    t0 = time.monotonic()
    logger.info("event=wiki_run_start base=%s", ctx.base_path)

    if not await _phase_scan(ctx, result):
        return _finalize(ctx, result, t0)
    if not await _phase_analysis(ctx, result):
        return _finalize(ctx, result, t0)
    await _phase_domain_and_index(ctx, result)
    if not _phase_render(ctx, result):
        return _finalize(ctx, result, t0)
    await _phase_write(ctx, result)

    return _finalize(ctx, result, t0)


# -- Pipeline phase functions --


async def _phase_scan(ctx: PipelineContext, result: WikiRunResult) -> bool:
    """Phase 1: Discover and chunk every matching source file."""
    ctx.report(
        StageEvent(
            name="scan",
            status=StageProgress.RUNNING,
            message=f"Scanning {ctx.base_path}",
        )
    )
    scan, status = await _run_stage(
        "scan",
        lambda: _scan_codebase(ctx.base_path, settings=ctx.settings),
    )
    result.stages.append(status)
    ctx.report_done(status)
    if scan is None:
        return False
    ctx.scan = scan
    return True


async def _phase_analysis(
    ctx: PipelineContext, result: WikiRunResult
) -> bool:
    """Phase 2: Dependency graph, patterns, modules and metrics."""
    scan = ctx.scan or CodebaseScan(base_path=str(ctx.base_path))
    ctx.report(
        StageEvent(
            name="analysis",
            status=StageProgress.RUNNING,
            message=f"Analyzing {len(scan.files)} files",
        )
    )
    analysis, status = await _run_stage(
        "analysis", lambda: run_codebase_analysis(scan)
    )
    result.stages.append(status)
    ctx.report_done(status)
    if analysis is None:
        return False
    ctx.analysis = result.analysis = analysis
    return True


async def _phase_domain_and_index(
    ctx: PipelineContext, result: WikiRunResult
) -> None:
    """Phase 3: Domain inference + semantic index (concurrent)."""
    n_files = len(ctx.analysis.files) if ctx.analysis else 0
    ctx.report(
        StageEvent(
            name="domain_model",
            status=StageProgress.RUNNING,
            message=f"Inferring domain model from {n_files} files",
        )
    )
    ctx.report(
        StageEvent(
            name="semantic_index",
            status=StageProgress.RUNNING,
            message=f"Indexing chunks from {n_files} files",
        )
    )

    group: ParallelGroup[PipelineContext] = ParallelGroup(
        name="domain_and_index",
        stages=[
            PipelineStage(name="domain_model", execute=_domain_stage),
            PipelineStage(name="semantic_index", execute=_index_stage),
        ],
        max_concurrency=ctx.settings.phase_max_concurrency,
        timeout=ctx.settings.phase_timeout_s,
    )
    for sr in await group.execute(ctx):
        ss = StageStatus(
            name=sr.stage_name,
            ok=sr.ok,
            duration_ms=sr.duration_ms,
            error=sr.error,
        )
        result.stages.append(ss)
        ctx.report_done(ss)

    if ctx.domain_model is None:
        ctx.domain_model = DomainModel(
            name=DEFAULT_DOMAIN, description=""
        )
    result.domain_model = ctx.domain_model
    result.search = ctx.search


def _phase_render(ctx: PipelineContext, result: WikiRunResult) -> bool:
    """Phase 4: Render every page of the wiki."""
    if ctx.analysis is None or ctx.domain_model is None:
        raise RuntimeError(
            "_phase_render requires analysis and domain model"
        )
    analysis, model = ctx.analysis, ctx.domain_model
    ctx.report(
        StageEvent(name="render", status=StageProgress.RUNNING)
    )
    generator = WikiGenerator(ctx.config, ctx.settings)
    documents, status = _run_stage_sync(
        "render", lambda: generator.render(analysis, model)
    )
    result.stages.append(status)
    ctx.report_done(status)
    if documents is None:
        return False
    ctx.documents = result.documents = documents
    return True


async def _phase_write(ctx: PipelineContext, result: WikiRunResult) -> None:
    """Phase 5: Write documents; one failure never stops the rest."""
    total = len(ctx.documents)
    ctx.report(
        StageEvent(
            name="write",
            status=StageProgress.RUNNING,
            message=f"Writing {total} documents to {ctx.config.output_path}",
            documents_written=0,
            documents_total=total,
        )
    )
    t0 = time.monotonic()
    generator = WikiGenerator(ctx.config, ctx.settings)
    ctx.write_results = result.write_results = await generator.write_all(
        ctx.documents
    )
    failures = write_failures(ctx.write_results)
    status = StageStatus(
        name="write",
        ok=not failures,
        duration_ms=_elapsed(t0),
        error=str(DocumentWriteError(failures)) if failures else None,
    )
    written = total - len(failures)
    ctx.report(
        StageEvent(
            name="write",
            status=StageProgress.RUNNING,
            documents_written=written,
            documents_total=total,
        )
    )
    result.stages.append(status)
    ctx.report_done(status)


def _finalize(
    ctx: PipelineContext, result: WikiRunResult, t0: float
) -> WikiRunResult:
    result.total_duration_ms = _elapsed(t0)
    logger.info(
        "event=wiki_run_done base=%s ok=%s documents=%d duration_ms=%.0f",
        ctx.base_path,
        result.ok,
        len(result.documents),
        result.total_duration_ms,
    )
    return result


# -- Context-based stage functions for ParallelGroup --


async def _domain_stage(ctx: PipelineContext) -> None:
    """Phase 3a: Infer the business domain model."""
    if ctx.analysis is None:
        raise RuntimeError(
            "_domain_stage requires ctx.analysis to be set by a prior stage"
        )
    ctx.domain_model = await asyncio.to_thread(
        _infer_domain_model, ctx.analysis
    )


async def _index_stage(ctx: PipelineContext) -> None:
    """Phase 3b: Build the tf-idf semantic index."""
    files = ctx.analysis.files if ctx.analysis else []
    ctx.search = await asyncio.to_thread(
        build_semantic_index, files, ctx.settings
    )


# -- Convenience entry points --


def analyze_file(
    path: str | Path, base_path: str | Path | None = None
) -> FileAnalysis:
    """Quick analysis of a single file."""
    return _analyze_file(path, base_path)


async def analyze_codebase(
    base_path: str | Path,
    include_patterns: list[str] | None = None,
    ignore_patterns: list[str] | None = None,
    settings: Settings | None = None,
) -> CodebaseAnalysis:
    """Full codebase analysis."""
    return await analyze_codebase_full(
        base_path, include_patterns, ignore_patterns, settings
    )


def infer_domain_model(analysis: CodebaseAnalysis) -> DomainModel:
    return _infer_domain_model(analysis)


def build_semantic_index(
    files: list[FileAnalysis], settings: Settings | None = None
) -> SemanticSearch:
    """Build the semantic index for code search."""
    return _build_semantic_index(files, settings)


async def generate_comprehensive_wiki(
    base_path: str | Path,
    settings: Settings | None = None,
    config: WikiConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> WikiRunResult:
    """Generate the wiki and return it with its analysis and index.

    Unlike run_wiki_generation(), failures raise: CodeWikiError when
    the run stopped before rendering, DocumentWriteError when any
    document could not be written.
    """
    result = await run_wiki_generation(
        base_path, settings, config, on_progress
    )
    if not result.documents:
        failed = result.failed_stage()
        if failed is not None:
            raise CodeWikiError(
                f"Wiki generation failed at stage '{failed.name}': "
                f"{failed.error}"
            )
    failures = write_failures(result.write_results)
    if failures:
        raise DocumentWriteError(failures)
    return result


async def generate_wiki(
    base_path: str | Path,
    settings: Settings | None = None,
    config: WikiConfig | None = None,
) -> list[WikiDocument]:
    """Generate and write the complete wiki for a codebase."""
    result = await generate_comprehensive_wiki(base_path, settings, config)
    return result.documents


# -- Generic stage runners --


async def _run_stage[T](
    name: str,
    fn: Callable[[], Awaitable[T]],
) -> tuple[T | None, StageStatus]:
    """Run an async stage with error capture."""
    t0 = time.monotonic()
    try:
        out = await fn()
        return out, StageStatus(
            name=name, ok=True, duration_ms=_elapsed(t0)
        )
    except Exception as exc:
        logger.exception("event=stage_failed stage=%s", name)
        return None, StageStatus(
            name=name,
            ok=False,
            duration_ms=_elapsed(t0),
            error=str(exc),
        )


def _run_stage_sync[T](
    name: str,
    fn: Callable[[], T],
) -> tuple[T | None, StageStatus]:
    """Run a sync stage with error capture."""
    t0 = time.monotonic()
    try:
        out = fn()
        return out, StageStatus(
            name=name, ok=True, duration_ms=_elapsed(t0)
        )
    except Exception as exc:
        logger.exception("event=stage_failed stage=%s", name)
        return None, StageStatus(
            name=name,
            ok=False,
            duration_ms=_elapsed(t0),
            error=str(exc),
        )


def _elapsed(t0: float) -> float:
    return (time.monotonic() - t0) * 1000
