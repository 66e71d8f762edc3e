"""Codebase-wide statistics, import cycles and hotspots."""

from __future__ import annotations

from collections import Counter

from codewiki.analysis.schemas import (
    CodebaseMetrics,
    DependencyGraph,
    Hotspot,
)
from codewiki.constants import (
    HOTSPOT_COUPLING_OUTGOING,
    HOTSPOT_FILE_COMPLEXITY,
    HOTSPOT_GOD_CLASS_CHILDREN,
    HOTSPOT_HUB_INCOMING,
    ChunkType,
    EdgeType,
    HotspotType,
)
from codewiki.ingestion.schemas import FileAnalysis


def compute_metrics(
    files: list[FileAnalysis], graph: DependencyGraph
) -> CodebaseMetrics:
    chunks = [c for f in files for c in f.chunks]
    total_complexity = sum(c.metadata.complexity for c in chunks)

    distribution = {str(t): 0 for t in ChunkType}
    for chunk in chunks:
        distribution[chunk.chunk_type] += 1

    return CodebaseMetrics(
        total_files=len(files),
        total_lines=sum(f.summary.total_lines for f in files),
        total_code_lines=sum(f.summary.code_lines for f in files),
        total_chunks=len(chunks),
        average_complexity=total_complexity / len(chunks) if chunks else 0.0,
        max_complexity=max((c.metadata.complexity for c in chunks), default=0),
        chunk_distribution=distribution,
        dependency_count=len(graph.edges),
        circular_dependencies=find_import_cycles(graph),
        hotspots=find_hotspots(files, graph),
    )


def find_import_cycles(graph: DependencyGraph) -> list[list[str]]:
    """DFS with a recursion stack over ``imports`` edges.

    Each cycle is reported as the path from the revisited node back
    to itself, e.g. ``[a, b, a]``.
    """
    adjacency: dict[str, list[str]] = {}
    for edge in graph.edges_of_type(EdgeType.IMPORTS):
        adjacency.setdefault(edge.source, []).append(edge.target)

    cycles: list[list[str]] = []
    visited: set[str] = set()
    on_stack: set[str] = set()
    path: list[str] = []

    for start in graph.nodes:
        if start in visited or start not in adjacency:
            continue
        # Iterative DFS: each frame is (node, iterator over neighbours)
        visited.add(start)
        on_stack.add(start)
        path.append(start)
        stack = [(start, iter(adjacency.get(start, [])))]
        while stack:
            node, neighbours = stack[-1]
            advanced = False
            for nxt in neighbours:
                if nxt not in visited:
                    visited.add(nxt)
                    on_stack.add(nxt)
                    path.append(nxt)
                    stack.append((nxt, iter(adjacency.get(nxt, []))))
                    advanced = True
                    break
                if nxt in on_stack:
                    begin = path.index(nxt)
                    cycles.append([*path[begin:], nxt])
            if not advanced:
                stack.pop()
                path.pop()
                on_stack.discard(node)
    return cycles


def find_hotspots(
    files: list[FileAnalysis], graph: DependencyGraph
) -> list[Hotspot]:
    hotspots: list[Hotspot] = []

    for f in files:
        if f.summary.complexity > HOTSPOT_FILE_COMPLEXITY:
            hotspots.append(
                Hotspot(
                    file=f.relative_path,
                    hotspot_type=HotspotType.HIGH_COMPLEXITY,
                    score=f.summary.complexity,
                    details=f"Cyclomatic complexity: {f.summary.complexity}",
                )
            )
        for chunk in f.chunks:
            members = len(chunk.children)
            if (
                chunk.chunk_type == ChunkType.CLASS
                and members > HOTSPOT_GOD_CLASS_CHILDREN
            ):
                hotspots.append(
                    Hotspot(
                        file=f.relative_path,
                        hotspot_type=HotspotType.GOD_CLASS,
                        score=members,
                        details=f"{chunk.name} has {members} members",
                    )
                )

    incoming: Counter[str] = Counter()
    outgoing: Counter[str] = Counter()
    for edge in graph.edges_of_type(EdgeType.IMPORTS):
        outgoing[edge.source] += 1
        incoming[edge.target] += 1

    for node_id, count in incoming.items():
        if count > HOTSPOT_HUB_INCOMING:
            hotspots.append(
                Hotspot(
                    file=node_id.removeprefix("file:"),
                    hotspot_type=HotspotType.HUB,
                    score=count,
                    details=f"Imported by {count} other files",
                )
            )
    for node_id, count in outgoing.items():
        if count > HOTSPOT_COUPLING_OUTGOING:
            hotspots.append(
                Hotspot(
                    file=node_id.removeprefix("file:"),
                    hotspot_type=HotspotType.HIGH_COUPLING,
                    score=count,
                    details=f"Imports {count} other files",
                )
            )

    hotspots.sort(key=lambda h: h.score, reverse=True)
    return hotspots
