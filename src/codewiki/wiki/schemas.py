"""Wiki documents, their frontmatter and generator configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from codewiki.config import Settings


class WikiFrontmatter(BaseModel):
    """YAML header of a wiki page. The title lives only here."""

    title: str
    generated: str
    description: str
    related: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    tags: list[str] | None = None
    category: str | None = None


class WikiSection(BaseModel):
    id: str
    title: str
    level: int = 2
    content: str


class WikiDocument(BaseModel):
    """A rendered page: relative path, frontmatter, sections, full text."""

    path: str
    frontmatter: WikiFrontmatter
    sections: list[WikiSection] = Field(
        default_factory=lambda: list[WikiSection]()
    )
    content: str


class WikiConfig(BaseModel):
    output_path: Path = Path("docs/wiki")
    project_name: str = "Project"
    project_description: str = ""
    include_technical_details: bool = True
    include_business_context: bool = True
    include_code_links: bool = True
    generate_index: bool = True
    max_depth: int = Field(default=3, ge=1)

    @classmethod
    def from_settings(cls, settings: Settings) -> WikiConfig:
        return cls(
            output_path=settings.output_path,
            project_name=settings.project_name,
            project_description=settings.project_description,
            include_technical_details=settings.include_technical_details,
            include_business_context=settings.include_business_context,
            include_code_links=settings.include_code_links,
            generate_index=settings.generate_index,
            max_depth=settings.max_depth,
        )


@dataclass(frozen=True)
class DocumentWriteResult:
    """Outcome of writing one document. ``error`` is set when not ok."""

    path: str
    ok: bool
    error: str | None = None
