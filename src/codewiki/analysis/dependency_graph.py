"""Build the cross-file dependency graph from chunked files."""

from __future__ import annotations

import posixpath
from types import MappingProxyType

from codewiki.analysis.schemas import DependencyGraph, GraphEdge, GraphNode
from codewiki.config import IMPORT_RESOLUTION_SUFFIXES
from codewiki.constants import FILE_NODE_TYPE, DependencyKind, EdgeType
from codewiki.ingestion.schemas import Chunk, FileAnalysis

_DEPENDENCY_EDGES: dict[DependencyKind, EdgeType] = {
    DependencyKind.IMPORT: EdgeType.IMPORTS,
    DependencyKind.EXTENDS: EdgeType.EXTENDS,
    DependencyKind.IMPLEMENTS: EdgeType.IMPLEMENTS,
    DependencyKind.USES: EdgeType.USES,
    DependencyKind.REFERENCE: EdgeType.REFERENCES,
}


def file_node_id(relative_path: str) -> str:
    return f"file:{relative_path}"


def build_dependency_graph(files: list[FileAnalysis]) -> DependencyGraph:
    """Nodes for every file and chunk; contains, dependency and import edges.

    Dependency targets are resolved by bare name against the whole
    corpus, first match in file order. Relative imports are resolved
    by suffix guessing; path aliases are not honoured.
    """
    graph = DependencyGraph()
    by_name: dict[str, Chunk] = {}

    for analysis in files:
        file_id = file_node_id(analysis.relative_path)
        graph.add_node(
            GraphNode(
                id=file_id,
                node_type=FILE_NODE_TYPE,
                name=posixpath.basename(analysis.relative_path),
                path=analysis.relative_path,
                metadata=MappingProxyType({
                    "lines": analysis.summary.total_lines,
                    "complexity": analysis.summary.complexity,
                    "exports": len(analysis.summary.main_exports),
                }),
            )
        )
        for chunk in analysis.chunks:
            graph.add_node(
                GraphNode(
                    id=chunk.id,
                    node_type=chunk.chunk_type,
                    name=chunk.name,
                    path=analysis.relative_path,
                    metadata=MappingProxyType({
                        "signature": chunk.signature,
                        "complexity": chunk.metadata.complexity,
                        "exported": chunk.exported,
                    }),
                )
            )
            by_name.setdefault(chunk.name, chunk)
            if chunk.parent is None:
                graph.add_edge(GraphEdge(file_id, chunk.id, EdgeType.CONTAINS))
            for child_id in chunk.children:
                graph.add_edge(GraphEdge(chunk.id, child_id, EdgeType.CONTAINS))

    for analysis in files:
        for chunk in analysis.chunks:
            for dep in chunk.dependencies:
                target = by_name.get(dep.name)
                if target is None:
                    continue
                graph.add_edge(
                    GraphEdge(chunk.id, target.id, _DEPENDENCY_EDGES[dep.kind])
                )

    known = {f.relative_path for f in files}
    for analysis in files:
        source_id = file_node_id(analysis.relative_path)
        for imp in analysis.imports:
            if not imp.source.startswith("."):
                continue
            resolved = resolve_import(analysis.relative_path, imp.source, known)
            if resolved is None:
                continue
            graph.add_edge(
                GraphEdge(
                    source_id,
                    file_node_id(resolved),
                    EdgeType.IMPORTS,
                    weight=max(1, len(imp.specifiers)),
                )
            )

    return graph


def resolve_import(
    importer: str, specifier: str, known: set[str]
) -> str | None:
    """Resolve a relative import to one of the *known* relative paths.

    ``..`` pops a segment and ``.`` is skipped. Candidates are tried
    with each suffix of IMPORT_RESOLUTION_SUFFIXES in order.
    """
    parts = [p for p in posixpath.dirname(importer).split("/") if p]
    for segment in specifier.split("/"):
        if segment == "..":
            if parts:
                parts.pop()
        elif segment and segment != ".":
            parts.append(segment)
    target = "/".join(parts)
    for suffix in IMPORT_RESOLUTION_SUFFIXES:
        candidate = f"{target}{suffix}"
        if candidate in known:
            return candidate
    return None
