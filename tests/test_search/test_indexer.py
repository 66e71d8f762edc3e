"""Tests for the tf-idf semantic index."""

from __future__ import annotations

import threading
from types import MappingProxyType

import numpy as np
import pytest

from codewiki.config import Settings
from codewiki.constants import ChunkType, RelationshipKind
from codewiki.ingestion.chunker import analyze_source
from codewiki.ingestion.schemas import Chunk, FileAnalysis
from codewiki.resilience.errors import (
    ChunkNotFoundError,
    DiscoveryCancelledError,
    IndexNotBuiltError,
)
from codewiki.search import build_semantic_index
from codewiki.search.indexer import (
    SemanticSearch,
    VocabularyBuilder,
    categorize,
    embed,
    hash_dimension,
    importance,
    term_frequency,
)

CATALOG = """
/** Loads invoices for a customer account. */
export function loadInvoices(account: string): void {}

/** Loads invoice totals for a customer account. */
export function loadInvoiceTotals(account: string): void {}

/** Renders the navigation sidebar widget. */
export function renderSidebar(): void {}
"""


def _files() -> list[FileAnalysis]:
    return [analyze_source(CATALOG, "billing.ts", "billing.ts", "typescript")]


def _chunk(name: str, chunk_type: ChunkType) -> Chunk:
    return Chunk(
        id=f"x:{chunk_type}:{name}",
        chunk_type=chunk_type,
        name=name,
        file_path="x.ts",
        start_line=1,
        end_line=1,
        code="",
    )


class TestEmbeddingHelpers:
    def test_hash_dimension_stable_and_in_range(self) -> None:
        first = hash_dimension("invoice", 128)
        assert first == hash_dimension("invoice", 128)
        assert 0 <= first < 128

    def test_term_frequency_normalized_by_peak(self) -> None:
        tf = term_frequency(["user", "user", "load"])
        assert tf == {"user": 1.0, "load": 0.5}

    def test_embed_unit_norm(self) -> None:
        vector = embed(["user", "load"], MappingProxyType({}), 64)
        assert float(np.linalg.norm(vector)) == pytest.approx(1.0)

    def test_embed_empty_is_zero(self) -> None:
        vector = embed([], MappingProxyType({}), 16)
        assert not vector.any()

    def test_vocabulary_idf(self) -> None:
        builder = VocabularyBuilder()
        builder.add_document(["user", "user", "load"])
        builder.add_document(["user"])
        assert builder.vocabulary == {"user": 0, "load": 1}
        idf = builder.idf()
        assert idf["user"] == pytest.approx(1.0)
        assert idf["load"] > idf["user"]


class TestCategorizeAndImportance:
    def test_type_categories_first(self) -> None:
        assert categorize(_chunk("UserService", ChunkType.INTERFACE)) == "types"
        assert categorize(_chunk("Color", ChunkType.ENUM)) == "enums"

    def test_name_categories(self) -> None:
        assert categorize(_chunk("UserService", ChunkType.CLASS)) == "services"
        assert categorize(_chunk("OrderRepository", ChunkType.CLASS)) == "data"
        assert categorize(_chunk("Widget", ChunkType.CLASS)) == "classes"
        assert categorize(_chunk("run", ChunkType.FUNCTION)) == "functions"
        assert categorize(_chunk("run", ChunkType.METHOD)) == "general"

    def test_importance(self) -> None:
        chunk = _chunk("run", ChunkType.FUNCTION)
        chunk.exported = True
        chunk.documentation = "Runs."
        # exported 2 + top-level 1 + documented 1 + complexity 0.1 + keywords 0.4
        assert importance(chunk, 2) == pytest.approx(4.5)


class TestSemanticSearch:
    def test_rejects_non_positive_dimensions(self) -> None:
        with pytest.raises(ValueError):
            SemanticSearch(dimensions=-1)

    def test_queries_before_build(self) -> None:
        search = SemanticSearch(dimensions=32)
        with pytest.raises(IndexNotBuiltError):
            search.search("invoice")
        with pytest.raises(IndexNotBuiltError):
            search.find_related("billing:function:loadInvoices")
        with pytest.raises(IndexNotBuiltError):
            search.discover_relationships()
        assert search.get_keywords("anything") == []
        assert search.find_by_category("functions") == []
        assert search.get_importance_ranking() == []

    def test_index_shape_and_norms(self) -> None:
        search = SemanticSearch(dimensions=64)
        index = search.build_index(_files())
        assert index.matrix.shape == (3, 64)
        assert index.document_count == 3
        norms = np.linalg.norm(index.matrix, axis=1)
        assert norms.tolist() == pytest.approx([1.0, 1.0, 1.0])
        assert [c.type for c in index.chunks] == ["function"] * 3

    def test_search_ranks_matching_chunks(self) -> None:
        search = build_semantic_index(_files())
        results = search.search("customer invoices")
        assert results
        assert results[0].chunk.name in {"loadInvoices", "loadInvoiceTotals"}
        assert "renderSidebar" not in [r.chunk.name for r in results]
        assert results[0].explanation.startswith("Matches: ")
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_search_limit(self) -> None:
        search = build_semantic_index(_files())
        assert len(search.search("customer account", limit=1)) == 1

    def test_search_nothing_matches(self) -> None:
        search = build_semantic_index(_files())
        assert search.search("zebra") == []

    def test_self_similarity(self) -> None:
        search = SemanticSearch(dimensions=64)
        index = search.build_index(_files())
        for row in index.matrix:
            assert float(row @ row) == pytest.approx(1.0)

    def test_find_related_excludes_self(self) -> None:
        search = build_semantic_index(_files())
        related = search.find_related("billing:function:loadInvoices")
        names = [r.chunk.name for r in related]
        assert "loadInvoices" not in names
        assert names[0] == "loadInvoiceTotals"

    def test_find_related_unknown_chunk(self) -> None:
        search = build_semantic_index(_files())
        with pytest.raises(ChunkNotFoundError):
            search.find_related("nope")

    def test_discover_relationships_threshold(self) -> None:
        search = build_semantic_index(_files())
        relationships = search.discover_relationships(0.3)
        assert relationships
        for rel in relationships:
            assert rel.strength >= 0.3
            assert rel.source.id != rel.target.id
        pairs = {frozenset((r.source.id, r.target.id)) for r in relationships}
        assert len(pairs) == len(relationships)
        first = relationships[0]
        assert first.relationship == RelationshipKind.SIMILAR_FUNCTIONALITY

    def test_discover_relationships_cancelled(self) -> None:
        search = build_semantic_index(_files())
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(DiscoveryCancelledError):
            search.discover_relationships(cancel_event=cancel)

    def test_max_chunks_caps_the_pass(self) -> None:
        search = build_semantic_index(_files())
        assert search.discover_relationships(0.0, max_chunks=1) == []

    def test_explicit_zero_max_chunks(self) -> None:
        search = build_semantic_index(_files())
        assert search.discover_relationships(0.0)
        assert search.discover_relationships(0.0, max_chunks=0) == []

    def test_configured_cap_applies_by_default(self) -> None:
        settings = Settings(max_relationship_chunks=1)
        search = build_semantic_index(_files(), settings)
        assert search.discover_relationships(0.0) == []
        assert search.discover_relationships(0.0, max_chunks=3)

    def test_threshold_defaults_to_configured_value(self) -> None:
        strict = build_semantic_index(
            _files(), Settings(relationship_threshold=0.9)
        )
        loose = build_semantic_index(
            _files(), Settings(relationship_threshold=0.3)
        )
        assert strict.discover_relationships() == []
        (rel,) = loose.discover_relationships()
        assert {rel.source.name, rel.target.name} == {
            "loadInvoices",
            "loadInvoiceTotals",
        }
        assert len(strict.discover_relationships(0.3)) == 1

    def test_keywords_categories_and_ranking(self) -> None:
        search = build_semantic_index(_files())
        keywords = search.get_keywords("billing:function:loadInvoices")
        assert "invoices" in keywords
        assert len(search.find_by_category("FUNCTIONS")) == 3
        ranking = search.get_importance_ranking(limit=2)
        assert len(ranking) == 2
        assert ranking[0].importance >= ranking[1].importance

    def test_rebuild_replaces_index(self) -> None:
        search = SemanticSearch(dimensions=32)
        search.build_index(_files())
        index = search.build_index([])
        assert index.chunks == ()
        assert search.search("invoice") == []
