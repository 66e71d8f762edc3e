"""Semantic search: tf-idf indexing, similarity queries, relationships."""

from __future__ import annotations

from typing import TYPE_CHECKING

from codewiki.search.schemas import (
    ChunkRelationship,
    IndexedChunk,
    SearchResult,
    SemanticIndex,
)

if TYPE_CHECKING:
    from codewiki.config import Settings
    from codewiki.ingestion.schemas import FileAnalysis
    from codewiki.search.indexer import SemanticSearch

__all__ = [
    "ChunkRelationship",
    "IndexedChunk",
    "SearchResult",
    "SemanticIndex",
    "build_semantic_index",
]


def build_semantic_index(
    files: list[FileAnalysis], settings: Settings | None = None
) -> SemanticSearch:
    """Return a SemanticSearch with its index already built over *files*."""
    from codewiki.search.indexer import SemanticSearch

    search = SemanticSearch(settings=settings)
    search.build_index(files)
    return search
