"""Tests for codebase metrics, import cycles and hotspots."""

from __future__ import annotations

from codewiki.analysis.dependency_graph import build_dependency_graph
from codewiki.analysis.metrics import (
    compute_metrics,
    find_hotspots,
    find_import_cycles,
)
from codewiki.analysis.schemas import DependencyGraph, GraphEdge, GraphNode
from codewiki.constants import EdgeType, HotspotType
from codewiki.ingestion.schemas import FileAnalysis


def _graph(*edges: tuple[str, str]) -> DependencyGraph:
    graph = DependencyGraph()
    for source, target in edges:
        for node_id in (source, target):
            graph.add_node(
                GraphNode(id=node_id, node_type="file", name=node_id, path=node_id)
            )
        graph.add_edge(GraphEdge(source, target, EdgeType.IMPORTS))
    return graph


class TestFindImportCycles:
    def test_two_node_cycle(self) -> None:
        cycles = find_import_cycles(_graph(("a", "b"), ("b", "a")))
        assert cycles == [["a", "b", "a"]]

    def test_three_node_cycle(self) -> None:
        cycles = find_import_cycles(_graph(("a", "b"), ("b", "c"), ("c", "a")))
        assert cycles == [["a", "b", "c", "a"]]

    def test_acyclic(self) -> None:
        assert find_import_cycles(_graph(("a", "b"), ("b", "c"), ("a", "c"))) == []

    def test_cycle_closes_on_itself(self) -> None:
        for cycle in find_import_cycles(
            _graph(("a", "b"), ("b", "c"), ("c", "b"), ("c", "a"))
        ):
            assert cycle[0] == cycle[-1]

    def test_only_import_edges_count(self) -> None:
        graph = _graph(("a", "b"))
        graph.add_edge(GraphEdge("b", "a", EdgeType.USES))
        assert find_import_cycles(graph) == []


class TestComputeMetrics:
    def test_sample_app(self, sample_files: list[FileAnalysis]) -> None:
        graph = build_dependency_graph(sample_files)
        metrics = compute_metrics(sample_files, graph)
        chunks = [c for f in sample_files for c in f.chunks]

        assert metrics.total_files == 2
        assert metrics.total_chunks == len(chunks)
        assert metrics.total_lines == sum(
            f.summary.total_lines for f in sample_files
        )
        assert metrics.max_complexity == max(
            c.metadata.complexity for c in chunks
        )
        assert metrics.dependency_count == len(graph.edges)
        assert metrics.chunk_distribution["class"] == 2
        assert metrics.chunk_distribution["enum"] == 0
        assert metrics.circular_dependencies == []

    def test_empty(self) -> None:
        metrics = compute_metrics([], DependencyGraph())
        assert metrics.total_files == 0
        assert metrics.average_complexity == 0.0
        assert metrics.max_complexity == 0


class TestFindHotspots:
    def test_hub_detected(self) -> None:
        graph = _graph(*[(f"f{i}", "hub") for i in range(11)])
        hotspots = find_hotspots([], graph)
        assert [(h.file, h.hotspot_type) for h in hotspots] == [
            ("hub", HotspotType.HUB)
        ]
        assert hotspots[0].score == 11

    def test_high_coupling_detected(self) -> None:
        graph = _graph(*[("fan", f"t{i}") for i in range(16)])
        hotspots = find_hotspots([], graph)
        assert [h.hotspot_type for h in hotspots] == [HotspotType.HIGH_COUPLING]

    def test_sorted_by_score(self) -> None:
        edges = [(f"f{i}", "hub") for i in range(12)]
        edges += [("fan", f"t{i}") for i in range(16)]
        hotspots = find_hotspots([], _graph(*edges))
        scores = [h.score for h in hotspots]
        assert scores == sorted(scores, reverse=True)
