"""Tests for Markdown and frontmatter rendering."""

from __future__ import annotations

import yaml

from codewiki.wiki.markdown import (
    bullet_list,
    fenced_code,
    heading,
    render_document,
    render_frontmatter,
    table,
)
from codewiki.wiki.schemas import WikiFrontmatter, WikiSection


def _frontmatter(**overrides: object) -> WikiFrontmatter:
    data: dict[str, object] = {
        "title": "Overview",
        "generated": "2026-01-01T00:00:00+00:00",
        "description": "Architectural overview",
    }
    data.update(overrides)
    return WikiFrontmatter.model_validate(data)


class TestBlocks:
    def test_heading(self) -> None:
        assert heading("Summary") == "## Summary"
        assert heading("Detail", 3) == "### Detail"

    def test_table_escapes_and_pads(self) -> None:
        rendered = table(["A", "B"], [["x|y"], ["multi\nline", "z"]])
        assert rendered.splitlines() == [
            "| A | B |",
            "| --- | --- |",
            "| x\\|y |  |",
            "| multi line | z |",
        ]

    def test_table_without_headers(self) -> None:
        assert table([], [["a"]]) == ""

    def test_bullet_list_and_code(self) -> None:
        assert bullet_list(["a", "b"]) == "- a\n- b"
        assert fenced_code("x = 1", "ts") == "```ts\nx = 1\n```"


class TestFrontmatter:
    def test_field_order_and_fences(self) -> None:
        rendered = render_frontmatter(
            _frontmatter(related=["architecture"], category="overview")
        )
        lines = rendered.splitlines()
        assert lines[0] == "---"
        assert lines[-1] == "---"
        keys = [line.split(":")[0] for line in lines if line[:1].isalpha()]
        assert keys == [
            "title",
            "generated",
            "description",
            "related",
            "sources",
            "category",
        ]

    def test_empty_optionals_omitted(self) -> None:
        data = yaml.safe_load(render_frontmatter(_frontmatter()).strip("-\n"))
        assert "tags" not in data
        assert "category" not in data
        assert data["related"] == []

    def test_round_trips_through_yaml(self) -> None:
        rendered = render_frontmatter(
            _frontmatter(tags=["pattern", "repository"], sources=["a.ts"])
        )
        data = yaml.safe_load(rendered.strip("-\n"))
        assert data["tags"] == ["pattern", "repository"]
        assert data["sources"] == ["a.ts"]


class TestRenderDocument:
    def test_no_h1_and_sections_in_order(self) -> None:
        document = render_document(
            "overview.md",
            _frontmatter(),
            [
                WikiSection(id="one", title="One", content="first"),
                WikiSection(id="two", title="Two", level=3, content="second"),
            ],
        )
        lines = document.content.splitlines()
        assert not any(line.startswith("# ") for line in lines)
        assert document.content.startswith("---\ntitle: Overview\n")
        assert document.content.index("## One") < document.content.index(
            "### Two"
        )
        assert document.content.endswith("second")
        assert document.path == "overview.md"
