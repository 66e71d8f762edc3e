"""Codebase analysis orchestrator: graph, patterns, modules, metrics."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from codewiki.analysis.dependency_graph import build_dependency_graph
from codewiki.analysis.metrics import compute_metrics
from codewiki.analysis.modules import analyze_modules
from codewiki.analysis.patterns import detect_patterns
from codewiki.analysis.schemas import (
    ArchitecturalPattern,
    CodebaseAnalysis,
    CodebaseMetrics,
    DependencyGraph,
    ModuleInfo,
)
from codewiki.config import Settings
from codewiki.ingestion.scanner import analyze_codebase
from codewiki.ingestion.schemas import CodebaseScan

logger = logging.getLogger(__name__)


async def run_codebase_analysis(scan: CodebaseScan) -> CodebaseAnalysis:
    """Derive graph, patterns, modules and metrics from a scan.

    Graph building, pattern detection and module analysis only read
    the scan, so they run in parallel via asyncio.gather() with
    to_thread() wrappers. Metrics need the graph and run after it.

    Each step has independent error recovery: if one fails, its
    result is empty and the remaining steps still complete.
    """
    files = scan.files

    async def _graph() -> DependencyGraph:
        try:
            return await asyncio.to_thread(build_dependency_graph, files)
        except Exception:  # noqa: BLE001
            logger.warning("Dependency graph failed", exc_info=True)
            return DependencyGraph()

    async def _patterns() -> list[ArchitecturalPattern]:
        try:
            return await asyncio.to_thread(detect_patterns, files)
        except Exception:  # noqa: BLE001
            logger.warning("Pattern detection failed", exc_info=True)
            return []

    async def _modules() -> list[ModuleInfo]:
        try:
            return await asyncio.to_thread(analyze_modules, files)
        except Exception:  # noqa: BLE001
            logger.warning("Module analysis failed", exc_info=True)
            return []

    graph, patterns, modules = await asyncio.gather(
        _graph(), _patterns(), _modules()
    )

    try:
        metrics = await asyncio.to_thread(compute_metrics, files, graph)
    except Exception:  # noqa: BLE001
        logger.warning("Metrics computation failed", exc_info=True)
        metrics = CodebaseMetrics()

    logger.info(
        "event=analysis_done files=%d nodes=%d edges=%d patterns=%d modules=%d",
        len(files),
        len(graph.nodes),
        len(graph.edges),
        len(patterns),
        len(modules),
    )
    return CodebaseAnalysis(
        base_path=scan.base_path,
        files=files,
        diagnostics=scan.diagnostics,
        graph=graph,
        patterns=patterns,
        modules=modules,
        metrics=metrics,
    )


async def analyze_codebase_full(
    base_path: str | Path,
    include_patterns: list[str] | None = None,
    ignore_patterns: list[str] | None = None,
    settings: Settings | None = None,
) -> CodebaseAnalysis:
    """Scan *base_path* and analyze the result."""
    scan = await analyze_codebase(
        base_path, include_patterns, ignore_patterns, settings
    )
    return await run_codebase_analysis(scan)
