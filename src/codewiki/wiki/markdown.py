"""Markdown and YAML-frontmatter rendering helpers."""

from __future__ import annotations

from typing import Any

import yaml

from codewiki.wiki.schemas import WikiDocument, WikiFrontmatter, WikiSection


def heading(text: str, level: int = 2) -> str:
    """Return a Markdown heading."""
    return f"{'#' * level} {text}"


def table(headers: list[str], rows: list[list[str]]) -> str:
    """Return a Markdown table."""
    if not headers:
        return ""
    lines: list[str] = []
    lines.append("| " + " | ".join(headers) + " |")
    lines.append("| " + " | ".join("---" for _ in headers) + " |")
    for row in rows:
        padded = row + [""] * (len(headers) - len(row))
        lines.append("| " + " | ".join(_cell(c) for c in padded) + " |")
    return "\n".join(lines)


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def bullet_list(items: list[str]) -> str:
    """Return a Markdown bullet list."""
    return "\n".join(f"- {item}" for item in items)


def fenced_code(content: str, language: str = "") -> str:
    """Return a Markdown fenced code block."""
    return f"```{language}\n{content}\n```"


def code(text: str) -> str:
    return f"`{text}`"


def render_frontmatter(frontmatter: WikiFrontmatter) -> str:
    """YAML block between ``---`` fences, in declaration order.

    Empty optional fields (no tags, no category) are left out.
    """
    data: dict[str, Any] = frontmatter.model_dump(exclude_none=True)
    if not data.get("tags"):
        data.pop("tags", None)
    body = yaml.safe_dump(
        data,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return f"---\n{body}---"


def render_document(
    path: str, frontmatter: WikiFrontmatter, sections: list[WikiSection]
) -> WikiDocument:
    """Assemble frontmatter and ``##`` sections into one page.

    No H1 is emitted: the title appears only in the frontmatter.
    """
    parts = [render_frontmatter(frontmatter)]
    for section in sections:
        title = heading(section.title, section.level)
        parts.append(f"{title}\n\n{section.content}")
    return WikiDocument(
        path=path,
        frontmatter=frontmatter,
        sections=sections,
        content="\n\n".join(parts).strip(),
    )
