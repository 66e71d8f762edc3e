"""Whole-codebase scan: discover source files and chunk them concurrently."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

import pathspec

from codewiki.config import SUPPORTED_EXTENSIONS, Settings
from codewiki.ingestion.chunker import analyze_file
from codewiki.ingestion.schemas import (
    CodebaseScan,
    FileAnalysis,
    FileDiagnostic,
)

logger = logging.getLogger(__name__)


async def analyze_codebase(
    base_path: str | Path,
    include_patterns: list[str] | None = None,
    ignore_patterns: list[str] | None = None,
    settings: Settings | None = None,
) -> CodebaseScan:
    """Chunk every matching source file under *base_path*.

    * Files are parsed in worker threads, bounded by
      ``analysis_max_concurrency``.
    * A file that fails to parse is logged and recorded as a
      diagnostic; the rest of the batch still completes.
    * Results are sorted by relative path so output order does not
      depend on thread scheduling.
    """
    cfg = settings or Settings()
    root = Path(base_path)
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {base_path}")

    candidates = discover_files(
        root,
        cfg.include_patterns if include_patterns is None else include_patterns,
        cfg.ignore_patterns if ignore_patterns is None else ignore_patterns,
        cfg,
    )
    t0 = time.monotonic()
    logger.info(
        "event=scan_start base=%s files=%d", root, len(candidates)
    )

    semaphore = asyncio.Semaphore(cfg.analysis_max_concurrency)

    async def _analyze(path: Path) -> FileAnalysis | FileDiagnostic:
        async with semaphore:
            try:
                return await asyncio.to_thread(analyze_file, path, root)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "event=file_analysis_failed file=%s error=%s",
                    path,
                    exc,
                    exc_info=True,
                )
                return FileDiagnostic(file_path=str(path), error=str(exc))

    outcomes = await asyncio.gather(*(_analyze(p) for p in candidates))

    files = [o for o in outcomes if isinstance(o, FileAnalysis)]
    diagnostics = [o for o in outcomes if isinstance(o, FileDiagnostic)]
    files.sort(key=lambda f: f.relative_path)

    logger.info(
        "event=scan_done base=%s analyzed=%d failed=%d duration_ms=%.0f",
        root,
        len(files),
        len(diagnostics),
        (time.monotonic() - t0) * 1000,
    )
    return CodebaseScan(
        base_path=str(root), files=files, diagnostics=diagnostics
    )


def discover_files(
    root: Path,
    include_patterns: list[str],
    ignore_patterns: list[str],
    settings: Settings,
) -> list[Path]:
    """Walk *root* and return supported files matching the globs."""
    include = pathspec.GitIgnoreSpec.from_lines(include_patterns)
    ignore = pathspec.GitIgnoreSpec.from_lines(ignore_patterns)
    gitignore = (
        _load_gitignore(root)
        if settings.respect_gitignore
        else pathspec.GitIgnoreSpec.from_lines([])
    )

    found: list[Path] = []
    for path in _walk_source_files(
        root, set(settings.skip_directories), gitignore
    ):
        if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
            continue
        rel = path.relative_to(root).as_posix()
        if include.match_file(rel) and not ignore.match_file(rel):
            found.append(path)
    return found


def _walk_source_files(
    root: Path,
    skip_dirs: set[str],
    gitignore_patterns: pathspec.PathSpec,
) -> list[Path]:
    """Walk the file tree, respecting skip dirs and gitignore patterns.

    Symlinks that resolve outside the base directory are skipped.
    """
    resolved_root = root.resolve()
    return _walk_inner(root, root, skip_dirs, gitignore_patterns, resolved_root)


def _walk_inner(
    current: Path,
    root: Path,
    skip_dirs: set[str],
    gitignore_patterns: pathspec.PathSpec,
    resolved_root: Path,
) -> list[Path]:
    files: list[Path] = []
    for item in sorted(current.iterdir()):
        if item.is_symlink():
            resolved = item.resolve()
            if not resolved.is_relative_to(resolved_root):
                continue
        rel = item.relative_to(root).as_posix()
        if item.is_dir():
            if item.name in skip_dirs:
                continue
            if gitignore_patterns.match_file(rel + "/"):
                continue
            files.extend(
                _walk_inner(
                    item, root, skip_dirs, gitignore_patterns, resolved_root
                )
            )
        elif item.is_file():
            if not gitignore_patterns.match_file(rel):
                files.append(item)
    return files


def _load_gitignore(root: Path) -> pathspec.PathSpec:
    """Load .gitignore patterns using pathspec."""
    gitignore = root / ".gitignore"
    if not gitignore.exists():
        return pathspec.GitIgnoreSpec.from_lines([])
    try:
        with open(gitignore, encoding="utf-8") as f:
            return pathspec.GitIgnoreSpec.from_lines(f)
    except OSError:
        logger.warning("event=gitignore_unreadable path=%s", gitignore)
        return pathspec.GitIgnoreSpec.from_lines([])
