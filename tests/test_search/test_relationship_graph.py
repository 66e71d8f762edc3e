"""Tests for the relationship graph over the semantic index."""

from __future__ import annotations

from codewiki.config import Settings
from codewiki.ingestion.chunker import analyze_source
from codewiki.ingestion.schemas import FileAnalysis
from codewiki.search import build_semantic_index
from codewiki.search.relationship_graph import RelationshipGraph

SOURCE = """
/** Loads invoices for a customer account. */
export function loadInvoices(account: string): void {}

/** Loads invoice totals for a customer account. */
export function loadInvoiceTotals(account: string): void {}

/** Renders the navigation sidebar widget. */
export function renderSidebar(): void {}
"""

LOAD = "billing:function:loadInvoices"
TOTALS = "billing:function:loadInvoiceTotals"


def _files() -> list[FileAnalysis]:
    return [analyze_source(SOURCE, "billing.ts", "billing.ts", "typescript")]


def _graph() -> RelationshipGraph:
    files = _files()
    graph = RelationshipGraph(build_semantic_index(files))
    graph.build_graph(0.3)
    return graph


class TestRelationshipGraph:
    def test_only_related_chunks_become_nodes(self) -> None:
        graph = _graph()
        assert set(graph.nodes) == {LOAD, TOTALS}
        assert len(graph.edges) == 1

    def test_neighbors_are_symmetric(self) -> None:
        graph = _graph()
        (left,) = graph.neighbors(LOAD)
        (right,) = graph.neighbors(TOTALS)
        assert left[0].id == TOTALS
        assert right[0].id == LOAD
        assert left[1] is right[1]
        assert graph.neighbors("billing:function:renderSidebar") == []

    def test_find_paths(self) -> None:
        graph = _graph()
        (path,) = graph.find_paths(LOAD, TOTALS)
        assert [c.id for c in path] == [LOAD, TOTALS]
        assert graph.find_paths(LOAD, TOTALS, max_depth=0) == []
        assert graph.find_paths("missing", TOTALS) == []

    def test_clusters(self) -> None:
        graph = _graph()
        (cluster,) = graph.clusters()
        assert {c.id for c in cluster} == {LOAD, TOTALS}

    def test_to_dot(self) -> None:
        dot = _graph().to_dot()
        lines = dot.splitlines()
        assert lines[0] == "digraph CodeRelationships {"
        assert lines[1] == "  rankdir=LR;"
        assert lines[-1] == "}"
        assert f'"{LOAD}" -> "{TOTALS}"' in dot
        assert '[label="similar-functionality"]' in dot

    def test_threshold_defaults_to_configured_value(self) -> None:
        strict = RelationshipGraph(
            build_semantic_index(
                _files(), Settings(relationship_threshold=0.9)
            )
        )
        strict.build_graph()
        assert strict.nodes == {}
        assert strict.edges == []

        loose = RelationshipGraph(
            build_semantic_index(
                _files(), Settings(relationship_threshold=0.3)
            )
        )
        loose.build_graph()
        assert set(loose.nodes) == {LOAD, TOTALS}
