"""Pydantic models for the chunking data flow."""

from pydantic import BaseModel, Field

from codewiki.constants import ChunkType, DependencyKind


class ParameterInfo(BaseModel):
    """A single formal parameter of a function or method."""

    name: str
    type: str = "any"
    optional: bool = False
    default_value: str | None = None


class Dependency(BaseModel):
    """A symbol a chunk refers to."""

    name: str
    kind: DependencyKind
    source: str = ""
    is_external: bool = False


class ChunkMetadata(BaseModel):
    """Structural facts about a chunk."""

    complexity: int = 1
    line_count: int = 1
    parameters: list[ParameterInfo] = Field(
        default_factory=lambda: list[ParameterInfo]()
    )
    return_type: str | None = None
    decorators: list[str] = Field(default_factory=list)
    generic_types: list[str] = Field(default_factory=list)
    access_modifier: str | None = None


class Chunk(BaseModel):
    """A named semantic unit of a source file."""

    id: str
    chunk_type: ChunkType
    name: str
    file_path: str
    start_line: int
    end_line: int
    code: str
    documentation: str | None = None
    signature: str | None = None
    modifiers: list[str] = Field(default_factory=list)
    dependencies: list[Dependency] = Field(
        default_factory=lambda: list[Dependency]()
    )
    exported: bool = False
    parent: str | None = None
    children: list[str] = Field(default_factory=list)
    metadata: ChunkMetadata = Field(default_factory=ChunkMetadata)


class ImportSpecifier(BaseModel):
    """One bound name of an import statement."""

    name: str
    alias: str | None = None


class ImportInfo(BaseModel):
    """A single import statement."""

    source: str
    specifiers: list[ImportSpecifier] = Field(
        default_factory=lambda: list[ImportSpecifier]()
    )
    is_default: bool = False
    is_namespace: bool = False
    is_type: bool = False


class ExportInfo(BaseModel):
    """A named, default or re-exported symbol."""

    name: str
    is_default: bool = False
    is_re_export: bool = False
    source: str | None = None


class FileSummary(BaseModel):
    """Line classification and chunk histogram for one file."""

    total_lines: int = 0
    code_lines: int = 0
    comment_lines: int = 0
    blank_lines: int = 0
    complexity: int = 0
    chunk_count: dict[ChunkType, int] = Field(
        default_factory=lambda: dict.fromkeys(ChunkType, 0)
    )
    main_exports: list[str] = Field(default_factory=list)
    external_dependencies: list[str] = Field(default_factory=list)


class FileAnalysis(BaseModel):
    """Output of the chunker for a single source file."""

    file_path: str
    relative_path: str
    chunks: list[Chunk] = Field(default_factory=lambda: list[Chunk]())
    imports: list[ImportInfo] = Field(
        default_factory=lambda: list[ImportInfo]()
    )
    exports: list[ExportInfo] = Field(
        default_factory=lambda: list[ExportInfo]()
    )
    summary: FileSummary = Field(default_factory=FileSummary)

    def chunk(self, chunk_id: str) -> Chunk | None:
        """Return the chunk with the given id, if present."""
        for c in self.chunks:
            if c.id == chunk_id:
                return c
        return None

    def children_of(self, chunk: Chunk) -> list[Chunk]:
        """Return the child chunks of *chunk* in source order."""
        wanted = set(chunk.children)
        return [c for c in self.chunks if c.id in wanted]


class FileDiagnostic(BaseModel):
    """A file that could not be analyzed during a scan."""

    file_path: str
    error: str


class CodebaseScan(BaseModel):
    """Output of a whole-codebase scan."""

    base_path: str
    files: list[FileAnalysis] = Field(
        default_factory=lambda: list[FileAnalysis]()
    )
    diagnostics: list[FileDiagnostic] = Field(
        default_factory=lambda: list[FileDiagnostic]()
    )
