"""Identifier-aware tokenizer for the semantic index."""

from __future__ import annotations

import re

from codewiki.constants import MIN_TOKEN_LENGTH
from codewiki.ingestion.schemas import Chunk

# Language keywords and filler words carry no meaning for similarity.
STOP_WORDS: frozenset[str] = frozenset({
    "the", "and", "for", "that", "this", "with", "from", "are", "was",
    "were", "been", "have", "has", "had", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "need", "not",
    "get", "set", "new", "var", "let", "const", "function", "class",
    "interface", "type", "return", "void", "null", "undefined", "true",
    "false", "string", "number", "boolean", "object", "array", "any",
    "public", "private", "protected", "static", "async", "await",
    "export", "import", "default", "extends", "implements",
})

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])|([A-Z])([A-Z][a-z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _split_camel(text: str) -> str:
    return _CAMEL_BOUNDARY.sub(
        lambda m: f"{m[1]} {m[2]}" if m[1] else f"{m[3]} {m[4]}", text
    )


def tokenize(text: str) -> list[str]:
    """Split camelCase, lowercase, drop short tokens and stop words.

    ``"findUserById"`` becomes ``["find", "user"]``.
    """
    lowered = _split_camel(text).lower()
    return [
        t
        for t in _NON_ALNUM.sub(" ", lowered).split()
        if len(t) >= MIN_TOKEN_LENGTH and t not in STOP_WORDS
    ]


def chunk_text(chunk: Chunk) -> str:
    """Everything searchable about a chunk, space-joined."""
    parts = [chunk.name, chunk.documentation or "", chunk.signature or ""]
    for param in chunk.metadata.parameters:
        parts.extend((param.name, param.type))
    if chunk.metadata.return_type:
        parts.append(chunk.metadata.return_type)
    return " ".join(p for p in parts if p)
