"""TF-IDF semantic index over code chunks with hashed embeddings.

Each chunk is tokenized, weighted by tf-idf and folded into a fixed
number of dimensions by hashing each term with sha1. Vectors are
L2-normalized, so similarity is a plain dot product and a whole
query is one matrix-vector multiply.
"""

from __future__ import annotations

import hashlib
import logging
import math
import re
import threading
from collections import Counter
from types import MappingProxyType

import numpy as np

from codewiki.config import Settings
from codewiki.constants import (
    COLLABORATOR_MIN_SHARED_KEYWORDS,
    MAX_KEYWORDS,
    RELATED_MIN_SCORE,
    SEARCH_MIN_SCORE,
    ChunkType,
    RelationshipKind,
)
from codewiki.ingestion.schemas import Chunk, FileAnalysis
from codewiki.resilience.errors import (
    ChunkNotFoundError,
    DiscoveryCancelledError,
    IndexNotBuiltError,
)
from codewiki.search.schemas import (
    ChunkRelationship,
    IndexedChunk,
    SearchResult,
    SemanticIndex,
    Vector,
)
from codewiki.search.tokenizer import chunk_text, tokenize

logger = logging.getLogger(__name__)

# (name pattern, category), tried after the type-based categories.
_NAME_CATEGORIES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"service|handler|controller|manager"), "services"),
    (re.compile(r"repository|store|dao"), "data"),
    (re.compile(r"component|view|ui"), "ui"),
    (re.compile(r"util|helper|common"), "utilities"),
    (re.compile(r"config|settings"), "config"),
    (re.compile(r"test|spec"), "tests"),
)


def hash_dimension(term: str, dimensions: int) -> int:
    """Stable bucket for *term*: sha1 of its UTF-8 bytes, mod dimensions."""
    digest = hashlib.sha1(term.encode("utf-8")).hexdigest()
    return int(digest, 16) % dimensions


def term_frequency(tokens: list[str]) -> dict[str, float]:
    """Counts normalized by the most frequent term, in first-seen order."""
    counts = Counter(tokens)
    if not counts:
        return {}
    peak = max(counts.values())
    return {term: count / peak for term, count in counts.items()}


def embed(
    tokens: list[str], idf: MappingProxyType[str, float], dimensions: int
) -> Vector:
    """Unit-norm tf-idf vector; all zeros when *tokens* is empty."""
    vector = np.zeros(dimensions, dtype=np.float64)
    for term, freq in term_frequency(tokens).items():
        vector[hash_dimension(term, dimensions)] += freq * idf.get(term, 1.0)
    norm = float(np.linalg.norm(vector))
    if norm > 0:
        vector /= norm
    return vector


def categorize(chunk: Chunk) -> str:
    if chunk.chunk_type in (ChunkType.INTERFACE, ChunkType.TYPE):
        return "types"
    if chunk.chunk_type == ChunkType.ENUM:
        return "enums"
    lowered = chunk.name.lower()
    for pattern, category in _NAME_CATEGORIES:
        if pattern.search(lowered):
            return category
    if chunk.chunk_type == ChunkType.CLASS:
        return "classes"
    if chunk.chunk_type == ChunkType.FUNCTION:
        return "functions"
    return "general"


def importance(chunk: Chunk, keyword_count: int) -> float:
    """Exported, top-level, documented, large or complex chunks rank higher."""
    score = 0.0
    if chunk.exported:
        score += 2
    if chunk.parent is None:
        score += 1
    if chunk.documentation:
        score += 1
    score += min(len(chunk.children) * 0.5, 2)
    score += min(chunk.metadata.complexity * 0.1, 1)
    score += min(keyword_count * 0.2, 1)
    return score


class VocabularyBuilder:
    """Accumulates the corpus vocabulary and document frequencies.

    Terms are numbered in first-seen order. ``idf()`` uses the smoothed
    form ``ln((N + 1) / (df + 1)) + 1``.
    """

    def __init__(self) -> None:
        self.vocabulary: dict[str, int] = {}
        self.document_frequency: Counter[str] = Counter()
        self.document_count = 0

    def add_document(self, tokens: list[str]) -> None:
        self.document_count += 1
        for term in dict.fromkeys(tokens):
            if term not in self.vocabulary:
                self.vocabulary[term] = len(self.vocabulary)
            self.document_frequency[term] += 1

    def idf(self) -> dict[str, float]:
        n = self.document_count
        return {
            term: math.log((n + 1) / (df + 1)) + 1
            for term, df in self.document_frequency.items()
        }


def _percent(score: float) -> int:
    return round(score * 100)


class SemanticSearch:
    """Build a semantic index once, then query it."""

    def __init__(
        self,
        dimensions: int | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self.dimensions = dimensions or self._settings.embedding_dimensions
        if self.dimensions <= 0:
            raise ValueError("dimensions must be positive")
        self._index: SemanticIndex | None = None
        self._by_id: dict[str, int] = {}

    @property
    def index(self) -> SemanticIndex | None:
        return self._index

    def _require_index(self) -> SemanticIndex:
        if self._index is None:
            raise IndexNotBuiltError()
        return self._index

    def build_index(self, files: list[FileAnalysis]) -> SemanticIndex:
        """Index every chunk of *files*; replaces any previous index."""
        chunks = [c for f in files for c in f.chunks]
        token_lists = [tokenize(chunk_text(c)) for c in chunks]

        builder = VocabularyBuilder()
        for tokens in token_lists:
            builder.add_document(tokens)
        idf = MappingProxyType(builder.idf())

        indexed: list[IndexedChunk] = []
        for chunk, tokens in zip(chunks, token_lists, strict=True):
            tf = term_frequency(tokens)
            keywords = sorted(
                tf, key=lambda t: tf[t] * idf.get(t, 1.0), reverse=True
            )[:MAX_KEYWORDS]
            indexed.append(
                IndexedChunk(
                    id=chunk.id,
                    type=str(chunk.chunk_type),
                    name=chunk.name,
                    file_path=chunk.file_path,
                    content=chunk_text(chunk),
                    tokens=tuple(tokens),
                    term_frequency=MappingProxyType(tf),
                    keywords=tuple(keywords),
                    category=categorize(chunk),
                    importance=importance(chunk, len(keywords)),
                    embedding=embed(tokens, idf, self.dimensions),
                )
            )

        matrix = (
            np.vstack([c.embedding for c in indexed])
            if indexed
            else np.zeros((0, self.dimensions), dtype=np.float64)
        )
        self._index = SemanticIndex(
            chunks=tuple(indexed),
            vocabulary=MappingProxyType(dict(builder.vocabulary)),
            idf=idf,
            document_count=builder.document_count,
            dimensions=self.dimensions,
            matrix=matrix,
        )
        self._by_id = {}
        for position, chunk in enumerate(indexed):
            self._by_id.setdefault(chunk.id, position)

        logger.info(
            "event=index_built chunks=%d vocabulary=%d dimensions=%d",
            len(indexed),
            len(builder.vocabulary),
            self.dimensions,
        )
        return self._index

    def search(self, query: str, limit: int = 10) -> list[SearchResult]:
        """Chunks scoring above the search floor, best first."""
        index = self._require_index()
        query_tokens = tokenize(query)
        vector = embed(query_tokens, index.idf, index.dimensions)
        scores = index.matrix @ vector

        results: list[SearchResult] = []
        for position, score in enumerate(scores.tolist()):
            if score <= SEARCH_MIN_SCORE:
                continue
            chunk = index.chunks[position]
            present = set(chunk.tokens)
            matched = [t for t in query_tokens if t in present]
            if matched:
                explanation = (
                    f"Matches: {', '.join(matched)} "
                    f"({_percent(score)}% similar)"
                )
            else:
                explanation = f"Semantic match ({_percent(score)}% similar)"
            results.append(SearchResult(chunk, score, matched, explanation))

        results.sort(key=lambda r: r.score, reverse=True)
        return results[:limit]

    def find_related(self, chunk_id: str, limit: int = 10) -> list[SearchResult]:
        """Chunks most similar to *chunk_id*, excluding itself."""
        index = self._require_index()
        position = self._by_id.get(chunk_id)
        if position is None:
            raise ChunkNotFoundError(chunk_id)
        source = index.chunks[position]
        scores = index.matrix @ source.embedding

        results: list[SearchResult] = []
        for other, score in enumerate(scores.tolist()):
            target = index.chunks[other]
            if target.id == chunk_id or score <= RELATED_MIN_SCORE:
                continue
            present = set(target.tokens)
            matched = [t for t in source.tokens if t in present]
            shared = _shared_keywords(source, target)
            explanation = (
                f"Shared concepts: {', '.join(shared)}"
                if shared
                else f"Semantic similarity: {_percent(score)}%"
            )
            results.append(SearchResult(target, score, matched, explanation))

        results.sort(key=lambda r: r.score, reverse=True)
        return results[:limit]

    def discover_relationships(
        self,
        threshold: float | None = None,
        *,
        cancel_event: threading.Event | None = None,
        max_chunks: int | None = None,
    ) -> list[ChunkRelationship]:
        """Every unordered pair at or above *threshold*, strongest first.

        The pass is quadratic, so it checks *cancel_event* once per row
        and only considers the *max_chunks* most important chunks.
        Unset arguments fall back to the configured settings.
        """
        index = self._require_index()
        if threshold is None:
            threshold = self._settings.relationship_threshold
        cap = (
            self._settings.max_relationship_chunks
            if max_chunks is None
            else max_chunks
        )
        positions = list(range(len(index.chunks)))
        if len(positions) > cap:
            logger.warning(
                "event=relationship_cap chunks=%d max_chunks=%d",
                len(positions),
                cap,
            )
            positions = sorted(
                positions,
                key=lambda p: index.chunks[p].importance,
                reverse=True,
            )[:cap]
            positions.sort()

        matrix = index.matrix[positions]
        relationships: list[ChunkRelationship] = []
        for row, i in enumerate(positions):
            if cancel_event is not None and cancel_event.is_set():
                raise DiscoveryCancelledError(
                    f"Relationship discovery cancelled after {row} rows"
                )
            source = index.chunks[i]
            similarities = matrix[row + 1 :] @ source.embedding
            for offset, similarity in enumerate(similarities.tolist()):
                if similarity < threshold:
                    continue
                target = index.chunks[positions[row + 1 + offset]]
                kind, explanation = classify_relationship(
                    source, target, similarity
                )
                relationships.append(
                    ChunkRelationship(
                        source=source,
                        target=target,
                        relationship=kind,
                        strength=similarity,
                        explanation=explanation,
                    )
                )

        relationships.sort(key=lambda r: r.strength, reverse=True)
        logger.debug(
            "event=relationships_discovered pairs=%d threshold=%.2f",
            len(relationships),
            threshold,
        )
        return relationships

    def get_keywords(self, chunk_id: str) -> list[str]:
        if self._index is None:
            return []
        position = self._by_id.get(chunk_id)
        if position is None:
            return []
        return list(self._index.chunks[position].keywords)

    def find_by_category(self, category: str) -> list[IndexedChunk]:
        if self._index is None:
            return []
        wanted = category.lower()
        return [c for c in self._index.chunks if c.category.lower() == wanted]

    def get_importance_ranking(self, limit: int = 20) -> list[IndexedChunk]:
        if self._index is None:
            return []
        ranked = sorted(
            self._index.chunks, key=lambda c: c.importance, reverse=True
        )
        return ranked[:limit]


def _shared_keywords(a: IndexedChunk, b: IndexedChunk) -> list[str]:
    theirs = set(b.keywords)
    return [k for k in a.keywords if k in theirs]


def classify_relationship(
    source: IndexedChunk, target: IndexedChunk, similarity: float
) -> tuple[RelationshipKind, str]:
    """Type, then category, then interface/class, then keyword overlap."""
    if source.type == target.type:
        return (
            RelationshipKind.SIMILAR_FUNCTIONALITY,
            f"Both are {source.type}s with similar implementations",
        )
    if source.category == target.category:
        return (
            RelationshipKind.SAME_DOMAIN,
            f"Both belong to the {source.category} domain",
        )
    if {source.type, target.type} == {ChunkType.INTERFACE, ChunkType.CLASS}:
        return (
            RelationshipKind.EXTENSION,
            "Interface-implementation relationship",
        )
    shared = _shared_keywords(source, target)
    if len(shared) >= COLLABORATOR_MIN_SHARED_KEYWORDS:
        return (
            RelationshipKind.COLLABORATOR,
            f"Share common concepts: {', '.join(shared)}",
        )
    return (
        RelationshipKind.SIMILAR_FUNCTIONALITY,
        f"Semantic similarity: {_percent(similarity)}%",
    )
