"""Per-file line classification and chunk statistics."""

from __future__ import annotations

from dataclasses import dataclass

from codewiki.constants import ChunkType
from codewiki.ingestion.schemas import Chunk, FileSummary, ImportInfo


@dataclass(frozen=True)
class LineCounts:
    total: int
    code: int
    comment: int
    blank: int


def classify_lines(source: str) -> LineCounts:
    """Count code, comment and blank lines in one pass.

    A block comment that opens and closes on the same line does not
    enter block state. Inside a block, every line is a comment until
    the line containing ``*/``.
    """
    lines = source.split("\n")
    code = comment = blank = 0
    in_block = False

    for raw in lines:
        line = raw.strip()
        if not line:
            blank += 1
        elif in_block:
            comment += 1
            if "*/" in line:
                in_block = False
        elif line.startswith("/*"):
            comment += 1
            if "*/" not in line[2:]:
                in_block = True
        elif line.startswith("//"):
            comment += 1
        else:
            code += 1

    return LineCounts(
        total=len(lines), code=code, comment=comment, blank=blank
    )


def compute_summary(
    source: str,
    chunks: list[Chunk],
    imports: list[ImportInfo],
) -> FileSummary:
    """Build the FileSummary for one analyzed file."""
    counts = classify_lines(source)

    histogram = dict.fromkeys(ChunkType, 0)
    for chunk in chunks:
        histogram[chunk.chunk_type] += 1

    external: list[str] = []
    for imp in imports:
        if not imp.source.startswith(".") and imp.source not in external:
            external.append(imp.source)

    return FileSummary(
        total_lines=counts.total,
        code_lines=counts.code,
        comment_lines=counts.comment,
        blank_lines=counts.blank,
        complexity=sum(c.metadata.complexity for c in chunks),
        chunk_count=histogram,
        main_exports=[
            c.name for c in chunks if c.exported and c.parent is None
        ],
        external_dependencies=external,
    )
