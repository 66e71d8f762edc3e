"""tree-sitter grammar cache for TypeScript and JavaScript sources."""

from __future__ import annotations

import threading
from collections.abc import Callable

import tree_sitter
import tree_sitter_javascript
import tree_sitter_typescript

from codewiki.config import EXTENSION_GRAMMARS

# Grammar name → capsule factory. The TypeScript package ships two
# grammars and exposes no plain ``language()`` entry point.
_GRAMMAR_FACTORIES: dict[str, Callable[[], object]] = {
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
    "javascript": tree_sitter_javascript.language,
}

_language_cache: dict[str, tree_sitter.Language] = {}
_cache_lock = threading.Lock()


def get_language(grammar: str) -> tree_sitter.Language:
    """Get or create the cached Language for a grammar name."""
    with _cache_lock:
        lang = _language_cache.get(grammar)
        if lang is None:
            lang = tree_sitter.Language(_GRAMMAR_FACTORIES[grammar]())
            _language_cache[grammar] = lang
        return lang


def grammar_for(extension: str) -> str | None:
    """Return the grammar name for a file extension, if supported."""
    return EXTENSION_GRAMMARS.get(extension.lower())


def parse_source(source: bytes, grammar: str) -> tree_sitter.Tree:
    """Parse *source* with a fresh parser.

    Language objects are shared; parsers are not, so concurrent
    parses in worker threads never touch the same parser state.
    """
    parser = tree_sitter.Parser(get_language(grammar))
    return parser.parse(source)


def node_text(node: tree_sitter.Node | None) -> str:
    """Decode a node's source text, or '' for a missing node."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")
