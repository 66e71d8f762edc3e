"""Architectural wiki generation: page rendering and document writing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from codewiki.wiki.schemas import (
    DocumentWriteResult,
    WikiConfig,
    WikiDocument,
    WikiFrontmatter,
    WikiSection,
)

if TYPE_CHECKING:
    from codewiki.wiki.generator import WikiGenerator

__all__ = [
    "DocumentWriteResult",
    "WikiConfig",
    "WikiDocument",
    "WikiFrontmatter",
    "WikiSection",
    "create_generator",
]


def create_generator(config: WikiConfig | None = None) -> WikiGenerator:
    """Return a WikiGenerator for *config* (defaults from Settings)."""
    from codewiki.wiki.generator import WikiGenerator

    return WikiGenerator(config)
