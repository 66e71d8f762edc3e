"""Models produced by codebase analysis."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, Field

from codewiki.constants import (
    EdgeType,
    HotspotType,
    ModulePurpose,
    PatternType,
)
from codewiki.ingestion.schemas import FileAnalysis, FileDiagnostic


@dataclass(frozen=True)
class GraphNode:
    """A file or chunk in the dependency graph."""

    id: str
    node_type: str  # a ChunkType value or "file"
    name: str
    path: str
    metadata: MappingProxyType[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )


@dataclass(frozen=True)
class GraphEdge:
    """A typed, weighted edge between two nodes."""

    source: str
    target: str
    edge_type: EdgeType
    weight: int = 1

    @property
    def key(self) -> str:
        return f"{self.source}->{self.edge_type}->{self.target}"


@dataclass
class DependencyGraph:
    """Nodes and edges, deduplicated by id and by edge key."""

    nodes: dict[str, GraphNode] = field(
        default_factory=lambda: dict[str, GraphNode]()
    )
    edges: list[GraphEdge] = field(
        default_factory=lambda: list[GraphEdge]()
    )
    _edge_keys: set[str] = field(init=False, default_factory=set, repr=False)
    _incoming: dict[str, list[GraphEdge]] = field(
        init=False,
        default_factory=lambda: defaultdict[str, list[GraphEdge]](list),
        repr=False,
    )
    _outgoing: dict[str, list[GraphEdge]] = field(
        init=False,
        default_factory=lambda: defaultdict[str, list[GraphEdge]](list),
        repr=False,
    )

    def add_node(self, node: GraphNode) -> bool:
        """Add a node unless one with the same id exists."""
        if node.id in self.nodes:
            return False
        self.nodes[node.id] = node
        return True

    def add_edge(self, edge: GraphEdge) -> bool:
        """Add an edge unless one with the same key exists."""
        if edge.key in self._edge_keys:
            return False
        self._edge_keys.add(edge.key)
        self.edges.append(edge)
        self._outgoing[edge.source].append(edge)
        self._incoming[edge.target].append(edge)
        return True

    def outgoing(
        self, node_id: str, edge_type: EdgeType | None = None
    ) -> list[GraphEdge]:
        return [
            e
            for e in self._outgoing.get(node_id, [])
            if edge_type is None or e.edge_type == edge_type
        ]

    def incoming(
        self, node_id: str, edge_type: EdgeType | None = None
    ) -> list[GraphEdge]:
        return [
            e
            for e in self._incoming.get(node_id, [])
            if edge_type is None or e.edge_type == edge_type
        ]

    def edges_of_type(self, edge_type: EdgeType) -> list[GraphEdge]:
        return [e for e in self.edges if e.edge_type == edge_type]


class PatternLocation(BaseModel):
    """Where a pattern shows up: one file and the chunks involved."""

    file: str
    chunks: list[str] = Field(default_factory=list)
    role: str


class ArchitecturalPattern(BaseModel):
    """A detected architectural idiom with supporting evidence."""

    pattern_type: PatternType
    name: str
    description: str
    confidence: float = Field(ge=0.0, le=1.0)
    locations: list[PatternLocation] = Field(
        default_factory=lambda: list[PatternLocation]()
    )
    evidence: list[str] = Field(default_factory=list)


class PublicApiInfo(BaseModel):
    """One exported symbol of a module."""

    name: str
    type: str
    signature: str
    documentation: str | None = None


class ModuleInfo(BaseModel):
    """A directory-level grouping of files."""

    name: str
    path: str
    description: str
    purpose: ModulePurpose
    files: list[str] = Field(default_factory=list)
    exports: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    internal_dependencies: list[str] = Field(default_factory=list)
    external_dependencies: list[str] = Field(default_factory=list)
    public_api: list[PublicApiInfo] = Field(
        default_factory=lambda: list[PublicApiInfo]()
    )
    complexity: int = 0
    cohesion: float = Field(default=0.0, ge=0.0, le=1.0)


class Hotspot(BaseModel):
    """A code-health concern worth a reviewer's attention."""

    file: str
    hotspot_type: HotspotType
    score: float
    details: str


class CodebaseMetrics(BaseModel):
    """Aggregate statistics over the whole codebase."""

    total_files: int = 0
    total_lines: int = 0
    total_code_lines: int = 0
    total_chunks: int = 0
    average_complexity: float = 0.0
    max_complexity: int = 0
    chunk_distribution: dict[str, int] = Field(default_factory=dict)
    dependency_count: int = 0
    circular_dependencies: list[list[str]] = Field(default_factory=list)
    hotspots: list[Hotspot] = Field(default_factory=lambda: list[Hotspot]())


@dataclass
class CodebaseAnalysis:
    """Everything derived from one scan of a codebase."""

    base_path: str
    files: list[FileAnalysis] = field(
        default_factory=lambda: list[FileAnalysis]()
    )
    diagnostics: list[FileDiagnostic] = field(
        default_factory=lambda: list[FileDiagnostic]()
    )
    graph: DependencyGraph = field(default_factory=DependencyGraph)
    patterns: list[ArchitecturalPattern] = field(
        default_factory=lambda: list[ArchitecturalPattern]()
    )
    modules: list[ModuleInfo] = field(
        default_factory=lambda: list[ModuleInfo]()
    )
    metrics: CodebaseMetrics = field(default_factory=CodebaseMetrics)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
