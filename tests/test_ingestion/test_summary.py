"""Tests for per-file line classification and summaries."""

from __future__ import annotations

from codewiki.constants import ChunkType
from codewiki.ingestion.chunker import analyze_source
from codewiki.ingestion.summary import classify_lines


class TestClassifyLines:
    def test_mixed_source(self) -> None:
        source = "/* one-line */\ncode();\n/*\n * block\n */\n\n// c\n"
        counts = classify_lines(source)
        assert counts.total == 8
        assert counts.comment == 5
        assert counts.code == 1
        assert counts.blank == 2

    def test_single_line_block_does_not_swallow_code(self) -> None:
        counts = classify_lines("/* a */\nconst x = 1;\n")
        assert counts.comment == 1
        assert counts.code == 1

    def test_counts_add_up(self) -> None:
        source = "// header\n\nfunction f() {\n  /* inline */\n  return 1;\n}\n"
        counts = classify_lines(source)
        assert counts.code + counts.comment + counts.blank == counts.total

    def test_empty_source(self) -> None:
        counts = classify_lines("")
        assert counts.total == 1
        assert counts.blank == 1


class TestComputeSummary:
    def test_histogram_and_complexity(self) -> None:
        source = (
            "export class Box {\n"
            "  size: number = 0;\n"
            "  grow(): void {\n"
            "    if (this.size < 10) {\n"
            "      this.size++;\n"
            "    }\n"
            "  }\n"
            "}\n"
        )
        analysis = analyze_source(source, "box.ts", "box.ts", "typescript")
        summary = analysis.summary
        assert summary.chunk_count[ChunkType.CLASS] == 1
        assert summary.chunk_count[ChunkType.METHOD] == 1
        assert summary.chunk_count[ChunkType.PROPERTY] == 1
        assert summary.complexity == sum(
            c.metadata.complexity for c in analysis.chunks
        )
        assert summary.main_exports == ["Box"]
