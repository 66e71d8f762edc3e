"""CLI entry point: ``codewiki generate``, ``codewiki file`` and ``codewiki search``."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from codewiki import __version__
from codewiki.config import Settings
from codewiki.logging_config import setup_logging
from codewiki.resilience.errors import CodeWikiError

# Stages whose failure means the wiki on disk is incomplete
_FATAL_STAGES = frozenset({"scan", "analysis", "render", "write"})


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"codewiki {__version__}")
        return

    if getattr(args, "verbose", False):
        setup_logging("DEBUG")
    else:
        setup_logging(Settings().log_level)

    if args.command == "generate":
        _run_generate(args)
    elif args.command == "file":
        _run_file(args)
    elif args.command == "search":
        _run_search(args)
    else:
        parser.print_help()


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="codewiki",
        description=(
            "Source comprehension engine: turns a TypeScript/JavaScript "
            "codebase into a linked architectural wiki."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    generate = sub.add_parser(
        "generate",
        help="Generate the wiki for a codebase",
    )
    generate.add_argument(
        "base_path",
        type=str,
        help="Root directory of the codebase",
    )
    generate.add_argument(
        "--output-dir",
        "-o",
        default=None,
        help="Output directory (default: docs/wiki)",
    )
    generate.add_argument(
        "--name",
        default=None,
        help="Project name used in page titles",
    )
    generate.add_argument(
        "--description",
        default=None,
        help="One-line project description for the overview",
    )
    generate.add_argument(
        "--include",
        nargs="+",
        default=None,
        metavar="GLOB",
        help="Source globs to include (default: ts/tsx/js/jsx)",
    )
    generate.add_argument(
        "--ignore",
        nargs="+",
        default=None,
        metavar="GLOB",
        help="Globs to skip (default: dependency and build dirs)",
    )
    generate.add_argument(
        "--no-index",
        action="store_true",
        help="Do not write index.md",
    )
    generate.add_argument(
        "--no-business-context",
        action="store_true",
        help="Omit the domain model page and business sections",
    )
    generate.add_argument(
        "--no-code-links",
        action="store_true",
        help="Omit source file links",
    )
    generate.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    file_parser = sub.add_parser(
        "file",
        help="Document a single source file",
    )
    file_parser.add_argument(
        "path",
        type=str,
        help="Path to a .ts/.tsx/.js/.jsx file",
    )
    file_parser.add_argument(
        "--base",
        default=None,
        help="Base directory for the relative path in the page",
    )
    file_parser.add_argument(
        "--output-dir",
        "-o",
        default=None,
        help="Output directory (default: docs/wiki)",
    )

    search = sub.add_parser(
        "search",
        help="Semantic search over a codebase",
    )
    search.add_argument(
        "base_path",
        type=str,
        help="Root directory of the codebase",
    )
    search.add_argument(
        "query",
        type=str,
        help="Free-text query",
    )
    search.add_argument(
        "--limit",
        "-n",
        type=int,
        default=10,
        help="Maximum results (default: 10)",
    )

    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    """Settings with CLI flags layered over environment defaults."""
    overrides: dict[str, Any] = {}
    if getattr(args, "output_dir", None):
        overrides["output_path"] = Path(args.output_dir)
    if getattr(args, "name", None):
        overrides["project_name"] = args.name
    if getattr(args, "description", None):
        overrides["project_description"] = args.description
    if getattr(args, "include", None):
        overrides["include_patterns"] = args.include
    if getattr(args, "ignore", None):
        overrides["ignore_patterns"] = args.ignore
    if getattr(args, "no_index", False):
        overrides["generate_index"] = False
    if getattr(args, "no_business_context", False):
        overrides["include_business_context"] = False
    if getattr(args, "no_code_links", False):
        overrides["include_code_links"] = False
    return Settings(**overrides)


def _require_path(raw: str) -> Path:
    path = Path(raw).resolve()
    if not path.exists():
        print(f"Error: {path} does not exist", file=sys.stderr)
        sys.exit(1)
    return path


def _run_generate(args: argparse.Namespace) -> None:
    """Execute the generate command."""
    from codewiki.services.events import StageEvent
    from codewiki.services.wiki_service import run_wiki_generation

    base_path = _require_path(args.base_path)
    settings = _settings_from_args(args)

    def on_progress(event: StageEvent) -> None:
        if event.failed:
            print(f"  {event}", file=sys.stderr)
        elif args.verbose:
            print(f"  {event}")

    print(f"Generating wiki: {base_path}")

    result = asyncio.run(
        run_wiki_generation(
            base_path, settings=settings, on_progress=on_progress
        )
    )

    ok_count = sum(1 for s in result.stages if s.ok)
    fail_count = sum(1 for s in result.stages if not s.ok)
    if args.verbose:
        for stage in result.stages:
            status = "ok" if stage.ok else "FAILED"
            print(
                f"  [{status}] {stage.name} "
                f"({stage.duration_ms:.0f}ms)"
            )
            if stage.error:
                print(f"    Error: {stage.error}")

    written = sum(1 for r in result.write_results if r.ok)
    print(
        f"\nDone! {written}/{len(result.documents)} documents written "
        f"({ok_count} stages ok, {fail_count} failed)"
    )
    print(
        f"Output: {settings.output_path}/ "
        f"({result.total_duration_ms:.0f}ms)"
    )

    fatal = [
        s for s in result.stages if not s.ok and s.name in _FATAL_STAGES
    ]
    if fatal:
        print(f"Error: {fatal[0].error}", file=sys.stderr)
        sys.exit(1)


def _run_file(args: argparse.Namespace) -> None:
    """Execute the file command."""
    from codewiki.wiki.generator import WikiGenerator

    path = _require_path(args.path)
    settings = _settings_from_args(args)
    generator = WikiGenerator(settings=settings)

    try:
        document = generator.generate_file_doc(path, args.base)
        asyncio.run(generator.write([document]))
    except CodeWikiError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"Wrote {settings.output_path / document.path}")


def _run_search(args: argparse.Namespace) -> None:
    """Execute the search command."""
    from codewiki.ingestion.scanner import analyze_codebase
    from codewiki.search import build_semantic_index

    base_path = _require_path(args.base_path)
    settings = Settings()

    scan = asyncio.run(analyze_codebase(base_path, settings=settings))
    search = build_semantic_index(scan.files, settings)
    results = search.search(args.query, limit=args.limit)

    if not results:
        print("No matches.")
        return
    for r in results:
        print(
            f"{r.score:.2f}  {r.chunk.name} ({r.chunk.type})  "
            f"{r.chunk.file_path}"
        )
        print(f"      {r.explanation}")


if __name__ == "__main__":
    main()
