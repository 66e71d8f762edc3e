"""Source chunking: parse files into chunks, imports, exports and summaries."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from codewiki.ingestion.schemas import (
    Chunk,
    ChunkMetadata,
    CodebaseScan,
    Dependency,
    ExportInfo,
    FileAnalysis,
    FileDiagnostic,
    FileSummary,
    ImportInfo,
    ImportSpecifier,
    ParameterInfo,
)

if TYPE_CHECKING:
    from codewiki.config import Settings

__all__ = [
    "Chunk",
    "ChunkMetadata",
    "CodebaseScan",
    "Dependency",
    "ExportInfo",
    "FileAnalysis",
    "FileDiagnostic",
    "FileSummary",
    "ImportInfo",
    "ImportSpecifier",
    "ParameterInfo",
    "analyze_codebase",
    "analyze_file",
]


def analyze_file(
    path: str | Path, base_path: str | Path | None = None
) -> FileAnalysis:
    """Parse one source file into a FileAnalysis."""
    from codewiki.ingestion.chunker import analyze_file as _impl

    return _impl(path, base_path)


async def analyze_codebase(
    base_path: str | Path,
    include_patterns: list[str] | None = None,
    ignore_patterns: list[str] | None = None,
    settings: Settings | None = None,
) -> CodebaseScan:
    """Chunk every matching source file under *base_path*."""
    from codewiki.ingestion.scanner import analyze_codebase as _impl

    return await _impl(base_path, include_patterns, ignore_patterns, settings)
