"""Records held by the semantic index and returned by its queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType

import numpy as np
import numpy.typing as npt

from codewiki.constants import RelationshipKind

type Vector = npt.NDArray[np.float64]


@dataclass(frozen=True, eq=False)
class IndexedChunk:
    """A chunk with its tokens, keywords and unit-norm embedding."""

    id: str
    type: str
    name: str
    file_path: str
    content: str
    tokens: tuple[str, ...]
    term_frequency: MappingProxyType[str, float]
    keywords: tuple[str, ...]
    category: str
    importance: float
    embedding: Vector = field(repr=False)


@dataclass(frozen=True)
class SearchResult:
    chunk: IndexedChunk
    score: float
    matched_terms: list[str]
    explanation: str


@dataclass(frozen=True)
class ChunkRelationship:
    """An unordered pair of chunks whose similarity cleared a threshold."""

    source: IndexedChunk
    target: IndexedChunk
    relationship: RelationshipKind
    strength: float
    explanation: str


@dataclass(frozen=True, eq=False)
class SemanticIndex:
    """The built corpus: one matrix row per chunk, in chunk order."""

    chunks: tuple[IndexedChunk, ...]
    vocabulary: MappingProxyType[str, int]
    idf: MappingProxyType[str, float]
    document_count: int
    dimensions: int
    matrix: Vector = field(repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
