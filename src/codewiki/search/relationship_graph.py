"""Graph view over discovered chunk relationships."""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field

from codewiki.search.indexer import SemanticSearch
from codewiki.search.schemas import ChunkRelationship, IndexedChunk

logger = logging.getLogger(__name__)


def _dot_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


@dataclass
class RelationshipGraph:
    """Undirected graph whose edges are ChunkRelationships.

    Nodes are only the chunks that take part in at least one edge.
    """

    search: SemanticSearch
    nodes: dict[str, IndexedChunk] = field(
        default_factory=lambda: dict[str, IndexedChunk]()
    )
    edges: list[ChunkRelationship] = field(
        default_factory=lambda: list[ChunkRelationship]()
    )
    _adjacency: dict[str, list[tuple[IndexedChunk, ChunkRelationship]]] = (
        field(
            init=False,
            default_factory=lambda: defaultdict[
                str, list[tuple[IndexedChunk, ChunkRelationship]]
            ](list),
            repr=False,
        )
    )

    def build_graph(self, threshold: float | None = None) -> None:
        for rel in self.search.discover_relationships(threshold):
            self.nodes[rel.source.id] = rel.source
            self.nodes[rel.target.id] = rel.target
            self.edges.append(rel)
            self._adjacency[rel.source.id].append((rel.target, rel))
            self._adjacency[rel.target.id].append((rel.source, rel))
        logger.debug(
            "event=relationship_graph_built nodes=%d edges=%d",
            len(self.nodes),
            len(self.edges),
        )

    def neighbors(
        self, chunk_id: str
    ) -> list[tuple[IndexedChunk, ChunkRelationship]]:
        """Adjacent chunks with the edge that links them, in edge order."""
        return list(self._adjacency.get(chunk_id, []))

    def find_paths(
        self, source_id: str, target_id: str, max_depth: int = 5
    ) -> list[list[IndexedChunk]]:
        """All simple paths from source to target of at most *max_depth* hops."""
        start = self.nodes.get(source_id)
        if start is None:
            return []
        paths: list[list[IndexedChunk]] = []
        on_path: set[str] = set()

        def _dfs(current: str, path: list[IndexedChunk], depth: int) -> None:
            if depth > max_depth:
                return
            if current == target_id:
                paths.append(list(path))
                return
            on_path.add(current)
            for neighbor, _ in self.neighbors(current):
                if neighbor.id not in on_path:
                    path.append(neighbor)
                    _dfs(neighbor.id, path, depth + 1)
                    path.pop()
            on_path.discard(current)

        _dfs(source_id, [start], 0)
        return paths

    def clusters(self) -> list[list[IndexedChunk]]:
        """Connected components of two or more chunks, largest first."""
        visited: set[str] = set()
        found: list[list[IndexedChunk]] = []
        for node_id, chunk in self.nodes.items():
            if node_id in visited:
                continue
            visited.add(node_id)
            cluster: list[IndexedChunk] = []
            queue = deque([chunk])
            while queue:
                current = queue.popleft()
                cluster.append(current)
                for neighbor, _ in self.neighbors(current.id):
                    if neighbor.id not in visited:
                        visited.add(neighbor.id)
                        queue.append(neighbor)
            if len(cluster) > 1:
                found.append(cluster)
        found.sort(key=len, reverse=True)
        return found

    def to_dot(self) -> str:
        lines = ["digraph CodeRelationships {", "  rankdir=LR;"]
        for node_id, chunk in self.nodes.items():
            label = f"{_dot_escape(chunk.name)}\\n({chunk.type})"
            lines.append(f'  "{_dot_escape(node_id)}" [label="{label}"];')
        for edge in self.edges:
            lines.append(
                f'  "{_dot_escape(edge.source.id)}" -> '
                f'"{_dot_escape(edge.target.id)}" '
                f'[label="{edge.relationship}"];'
            )
        lines.append("}")
        return "\n".join(lines)
