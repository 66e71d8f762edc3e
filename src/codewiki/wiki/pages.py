"""Page builders for codebase-level wiki documents.

Each builder returns a finished WikiDocument. Builders are pure: the
same analysis, config and timestamp always give the same page.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

from codewiki.analysis.schemas import (
    ArchitecturalPattern,
    CodebaseAnalysis,
    CodebaseMetrics,
    Hotspot,
    ModuleInfo,
)
from codewiki.constants import (
    KEY_COMPONENTS_LIMIT,
    RECENT_DOCUMENTS,
    TECH_STACK_LIMIT,
    TOP_CYCLES,
    TOP_HOTSPOTS,
    ChunkType,
)
from codewiki.domain.concepts import get_module_role
from codewiki.domain.schemas import DomainModel
from codewiki.ingestion.schemas import Chunk, FileAnalysis, ImportInfo
from codewiki.naming import humanize, slugify
from codewiki.wiki.health import (
    calculate_health_score,
    infer_architectural_style,
)
from codewiki.wiki.markdown import (
    bullet_list,
    code,
    fenced_code,
    render_document,
    table,
)
from codewiki.wiki.schemas import (
    WikiConfig,
    WikiDocument,
    WikiFrontmatter,
    WikiSection,
)


@dataclass(frozen=True)
class PageContext:
    """Settings shared by every page of one render."""

    config: WikiConfig
    generated: str


def section(section_id: str, title: str, content: str) -> WikiSection:
    return WikiSection(id=section_id, title=title, level=2, content=content)


def module_slug_for(path: str) -> str:
    """Slug of the module page covering the directory of *path*."""
    directory = posixpath.dirname(path)
    return slugify(posixpath.basename(directory) or "root")


def _percent(value: float) -> int:
    return round(value * 100)


def _external_dependencies(analysis: CodebaseAnalysis) -> list[str]:
    return list(
        dict.fromkeys(
            d for f in analysis.files for d in f.summary.external_dependencies
        )
    )


# ── Overview ─────────────────────────────────────────────


def overview_page(
    ctx: PageContext, analysis: CodebaseAnalysis, model: DomainModel
) -> WikiDocument:
    name = ctx.config.project_name
    return render_document(
        "overview.md",
        WikiFrontmatter(
            title=f"{name} - Overview",
            generated=ctx.generated,
            description=f"Architectural overview of {name}",
            related=["architecture", "domain-model"],
            category="overview",
        ),
        [
            section("summary", "Summary", _summary(ctx, analysis, model)),
            section("quick-stats", "Quick Stats", _quick_stats(analysis)),
            section(
                "technology-stack", "Technology Stack", _tech_stack(analysis)
            ),
            section(
                "key-components", "Key Components", _key_components(model)
            ),
            section("getting-started", "Getting Started", _GETTING_STARTED),
        ],
    )


def _summary(
    ctx: PageContext, analysis: CodebaseAnalysis, model: DomainModel
) -> str:
    intro = (
        ctx.config.project_description
        or f"{ctx.config.project_name} is a software system."
    )
    return (
        f"{intro}\n\n"
        f"This codebase contains **{len(analysis.files)} files** with "
        f"**{analysis.metrics.total_lines:,} lines of code**. The system "
        f"implements {len(analysis.patterns)} recognized architectural "
        f"patterns and is organized around the **{model.name}** domain.\n\n"
        "Key characteristics:\n"
        f"- **{len(model.entities)}** domain entities\n"
        f"- **{len(model.services)}** domain services\n"
        f"- **{len(analysis.modules)}** modules"
    )


def _quick_stats(analysis: CodebaseAnalysis) -> str:
    metrics = analysis.metrics
    dist = metrics.chunk_distribution
    return table(
        ["Metric", "Value"],
        [
            ["Files", str(len(analysis.files))],
            ["Lines of Code", f"{metrics.total_code_lines:,}"],
            ["Total Lines", f"{metrics.total_lines:,}"],
            ["Classes", str(dist.get(ChunkType.CLASS, 0))],
            ["Interfaces", str(dist.get(ChunkType.INTERFACE, 0))],
            ["Functions", str(dist.get(ChunkType.FUNCTION, 0))],
            ["Average Complexity", f"{metrics.average_complexity:.2f}"],
        ],
    )


def _tech_stack(analysis: CodebaseAnalysis) -> str:
    deps = _external_dependencies(analysis)
    if not deps:
        return "No external dependencies detected."
    content = "**External Dependencies**:\n" + bullet_list(
        [code(d) for d in deps[:TECH_STACK_LIMIT]]
    )
    if len(deps) > TECH_STACK_LIMIT:
        content += f"\n\n...and {len(deps) - TECH_STACK_LIMIT} more"
    return content


def _key_components(model: DomainModel) -> str:
    half = KEY_COMPONENTS_LIMIT // 2
    entities = model.entities[:half]
    services = model.services[:half]
    if entities:
        content = "**Core Entities**:\n" + bullet_list(
            [f"**{e.name}**: {_clip(e.description)}" for e in entities]
        )
    else:
        content = "No domain entities detected."
    if services:
        content += "\n\n**Key Services**:\n" + bullet_list(
            [f"**{s.name}**: {_clip(s.description)}" for s in services]
        )
    return content


def _clip(text: str, limit: int = 100) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


_GETTING_STARTED = """\
To explore this codebase:

1. Start with the [Architecture](architecture.md) document for a technical overview
2. Review the [Domain Model](domain-model.md) to understand the business concepts
3. Explore individual [Modules](modules/) for specific functionality
4. Check [Metrics](metrics.md) for code health indicators"""


# ── Architecture ─────────────────────────────────────────


def architecture_page(
    ctx: PageContext, analysis: CodebaseAnalysis
) -> WikiDocument:
    sections = [
        section(
            "architecture-overview",
            "Architecture Overview",
            _architecture_overview(ctx, analysis),
        )
    ]
    if analysis.patterns:
        sections.append(
            section(
                "detected-patterns",
                "Detected Architectural Patterns",
                "\n\n".join(
                    f"### {p.name}\n\n{p.description}\n\n"
                    f"**Confidence**: {_percent(p.confidence)}%"
                    for p in analysis.patterns
                ),
            )
        )
    sections += [
        section(
            "module-structure",
            "Module Structure",
            fenced_code(module_tree(analysis.modules, ctx.config.max_depth)),
        ),
        section("dependencies", "Dependencies", _dependency_overview(analysis)),
        section("code-health", "Code Health", _code_health(analysis.metrics)),
    ]
    return render_document(
        "architecture.md",
        WikiFrontmatter(
            title="System Architecture",
            generated=ctx.generated,
            description="Technical architecture and design patterns of the system",
            related=[
                "overview",
                "domain-model",
                *(f"patterns/{slugify(p.name)}" for p in analysis.patterns),
            ],
            category="architecture",
        ),
        sections,
    )


def _architecture_overview(ctx: PageContext, analysis: CodebaseAnalysis) -> str:
    layers = bullet_list(
        [f"**{m.name}**: {m.description}" for m in analysis.modules[:10]]
    )
    return (
        f"The {ctx.config.project_name} system follows a structured "
        f"architecture with {len(analysis.patterns)} identifiable design "
        "patterns.\n\n"
        "**Architectural Style**: "
        f"{infer_architectural_style(analysis.patterns)}\n\n"
        f"**Layer Organization**:\n{layers}"
    )


def module_tree(modules: list[ModuleInfo], max_depth: int = 3) -> str:
    """Indented directory tree with up to three exports per module.

    Directories nested deeper than *max_depth* are left out.
    """
    lines: list[str] = []
    for mod in sorted(modules, key=lambda m: m.path):
        depth = 0 if mod.path == "." else mod.path.count("/")
        if depth >= max_depth:
            continue
        indent = "  " * depth
        name = mod.name if mod.path == "." else posixpath.basename(mod.path)
        lines.append(f"{indent}{name}/")
        for export in mod.exports[:3]:
            lines.append(f"{indent}  - {export}")
        if len(mod.exports) > 3:
            lines.append(f"{indent}  ... and {len(mod.exports) - 3} more")
    return "\n".join(lines)


def _dependency_overview(analysis: CodebaseAnalysis) -> str:
    metrics = analysis.metrics
    cycles = len(metrics.circular_dependencies)
    status = (
        f"**Warning**: {cycles} circular dependencies detected."
        if cycles
        else "**Status**: No circular dependencies detected."
    )
    return (
        f"The codebase has **{metrics.dependency_count}** internal "
        f"dependencies and **{len(_external_dependencies(analysis))}** "
        f"external dependencies.\n\n{status}"
    )


def _code_health(metrics: CodebaseMetrics) -> str:
    score = calculate_health_score(metrics)
    detail = (
        f"**Attention Required**: {len(metrics.hotspots)} code hotspots "
        "identified"
        if metrics.hotspots
        else "No significant code quality issues detected."
    )
    return f"**Overall Health Score**: {score}/100\n\n{detail}"


# ── Patterns and modules ─────────────────────────────────


def pattern_page(ctx: PageContext, pattern: ArchitecturalPattern) -> WikiDocument:
    implementation = (
        "This pattern is implemented across "
        f"{len(pattern.locations)} locations in the codebase.\n\n"
        "**How it works**:\n" + bullet_list(pattern.evidence[:5])
    )
    return render_document(
        f"patterns/{slugify(pattern.name)}.md",
        WikiFrontmatter(
            title=pattern.name,
            generated=ctx.generated,
            description=pattern.description,
            related=[
                "architecture",
                *dict.fromkeys(
                    f"modules/{module_slug_for(loc.file)}"
                    for loc in pattern.locations
                ),
            ],
            sources=[loc.file for loc in pattern.locations],
            tags=["pattern", str(pattern.pattern_type)],
            category="patterns",
        ),
        [
            section("description", "Description", pattern.description),
            section("implementation", "Implementation", implementation),
            section(
                "locations",
                "Code Locations",
                bullet_list(
                    [
                        f"{code(loc.file)} - Role: {loc.role}"
                        for loc in pattern.locations
                    ]
                ),
            ),
            section("evidence", "Evidence", bullet_list(pattern.evidence)),
            section(
                "confidence",
                "Confidence",
                f"Detection confidence: **{_percent(pattern.confidence)}%**",
            ),
        ],
    )


def module_page(ctx: PageContext, module: ModuleInfo) -> WikiDocument:
    role = get_module_role(module)
    overview = (
        f"{module.description}\n\n"
        f"**Purpose**: {humanize(module.purpose)}\n"
        f"**Role**: {role}\n"
        f"**Complexity**: {module.complexity}\n"
        f"**Cohesion**: {module.cohesion * 100:.1f}%"
    )
    sections = [section("overview", "Overview", overview)]
    if module.public_api:
        sections.append(
            section(
                "public-api",
                "Public API",
                "\n\n".join(
                    f"### {api.name}\n\n{code(api.signature)}\n\n"
                    f"{api.documentation or 'No documentation available.'}"
                    for api in module.public_api
                ),
            )
        )
    if module.internal_dependencies or module.external_dependencies:
        sections.append(
            section("dependencies", "Dependencies", _module_dependencies(module))
        )
    if ctx.config.include_business_context:
        sections.append(
            section(
                "business-context",
                "Business Context",
                f"**Role in System**: {role}\n\n{module.description}",
            )
        )
    return render_document(
        f"modules/{slugify(module.name)}.md",
        WikiFrontmatter(
            title=module.name,
            generated=ctx.generated,
            description=module.description,
            related=list(
                dict.fromkeys(
                    f"modules/{slugify(posixpath.basename(d))}"
                    for d in module.internal_dependencies
                )
            ),
            sources=[module.path],
            tags=[str(module.purpose)],
            category="modules",
        ),
        sections,
    )


def _module_dependencies(module: ModuleInfo) -> str:
    blocks: list[str] = []
    if module.internal_dependencies:
        blocks.append(
            "**Internal Dependencies**:\n"
            + bullet_list([code(d) for d in module.internal_dependencies])
        )
    if module.external_dependencies:
        blocks.append(
            "**External Dependencies**:\n"
            + bullet_list([code(d) for d in module.external_dependencies])
        )
    return "\n\n".join(blocks)


# ── Metrics and index ────────────────────────────────────


def metrics_page(ctx: PageContext, metrics: CodebaseMetrics) -> WikiDocument:
    stats = table(
        ["Metric", "Value"],
        [
            ["Total Files", str(metrics.total_files)],
            ["Total Lines", f"{metrics.total_lines:,}"],
            ["Code Lines", f"{metrics.total_code_lines:,}"],
            ["Total Chunks", str(metrics.total_chunks)],
            ["Dependencies", str(metrics.dependency_count)],
        ],
    )
    verdict = (
        "The codebase has elevated complexity that may benefit from "
        "refactoring."
        if metrics.average_complexity > 10
        else "Complexity levels are within acceptable ranges."
    )
    complexity = (
        f"**Average Complexity**: {metrics.average_complexity:.2f}\n"
        f"**Maximum Complexity**: {metrics.max_complexity}\n\n{verdict}"
    )
    sections = [
        section("stats", "Codebase Statistics", stats),
        section("complexity", "Complexity Analysis", complexity),
    ]
    if metrics.hotspots:
        sections.append(
            section("hotspots", "Code Hotspots", _hotspots(metrics.hotspots))
        )
    if metrics.circular_dependencies:
        sections.append(
            section(
                "circular-deps",
                "Circular Dependencies",
                _cycles(metrics.circular_dependencies),
            )
        )
    sections.append(
        section(
            "distribution",
            "Code Distribution",
            _distribution(metrics.chunk_distribution),
        )
    )
    return render_document(
        "metrics.md",
        WikiFrontmatter(
            title="Code Metrics & Health",
            generated=ctx.generated,
            description="Codebase health metrics and quality indicators",
            related=["architecture", "overview"],
            category="metrics",
        ),
        sections,
    )


def _hotspots(hotspots: list[Hotspot]) -> str:
    return table(
        ["File", "Type", "Score", "Details"],
        [
            [h.file, str(h.hotspot_type), f"{h.score:g}", h.details]
            for h in hotspots[:TOP_HOTSPOTS]
        ],
    )


def _cycles(cycles: list[list[str]]) -> str:
    listed = "\n".join(
        f"{i}. {' → '.join(cycle)}"
        for i, cycle in enumerate(cycles[:TOP_CYCLES], start=1)
    )
    content = (
        "**Warning**: The following circular dependencies were detected:"
        f"\n\n{listed}"
    )
    if len(cycles) > TOP_CYCLES:
        content += f"\n\n...and {len(cycles) - TOP_CYCLES} more"
    return content


def _distribution(distribution: dict[str, int]) -> str:
    entries = sorted(
        ((t, n) for t, n in distribution.items() if n > 0),
        key=lambda e: e[1],
        reverse=True,
    )
    return table(["Type", "Count"], [[t, str(n)] for t, n in entries])


def index_page(ctx: PageContext, documents: list[WikiDocument]) -> WikiDocument:
    """Table of contents over *documents*, grouped by category."""
    name = ctx.config.project_name
    categories: dict[str, list[WikiDocument]] = {}
    for doc in documents:
        categories.setdefault(doc.frontmatter.category or "general", []).append(
            doc
        )

    sections = [
        section(
            "introduction",
            "Introduction",
            ctx.config.project_description
            or f"Welcome to the {name} architectural wiki. This documentation "
            "is automatically generated from source code analysis.",
        )
    ]
    for category, docs in categories.items():
        sections.append(
            section(
                f"category-{slugify(category)}",
                humanize(category),
                bullet_list(
                    [
                        f"[{d.frontmatter.title}]({d.path}) - "
                        f"{d.frontmatter.description}"
                        for d in docs
                    ]
                ),
            )
        )

    recent = sorted(
        documents, key=lambda d: d.frontmatter.generated, reverse=True
    )[:RECENT_DOCUMENTS]
    sections.append(
        section(
            "recent",
            "Recently Updated",
            bullet_list([f"[{d.frontmatter.title}]({d.path})" for d in recent]),
        )
    )
    return render_document(
        "index.md",
        WikiFrontmatter(
            title=f"{name} Wiki",
            generated=ctx.generated,
            description=f"Architectural documentation for {name}",
            related=["overview", "architecture", "domain-model"],
            category="index",
        ),
        sections,
    )


# ── Single file ──────────────────────────────────────────


def file_page(ctx: PageContext, analysis: FileAnalysis) -> WikiDocument:
    """Standalone page documenting one source file."""
    summary = analysis.summary
    overview = (
        f"**Path**: {code(analysis.relative_path)}\n\n"
        + table(
            ["Metric", "Value"],
            [
                ["Total Lines", str(summary.total_lines)],
                ["Code Lines", str(summary.code_lines)],
                ["Comment Lines", str(summary.comment_lines)],
                ["Complexity", str(summary.complexity)],
                ["Exports", ", ".join(summary.main_exports) or "None"],
            ],
        )
    )
    sections = [section("overview", "Overview", overview)]

    exported = [c for c in analysis.chunks if c.exported and c.parent is None]
    if exported:
        sections.append(section("exports", "Exports", _exports(exported)))
    if analysis.imports:
        sections.append(
            section("dependencies", "Dependencies", _imports(analysis.imports))
        )
    sections.append(
        section(
            "structure",
            "Code Structure",
            bullet_list(
                [
                    f"**{c.chunk_type}** {code(c.name)} "
                    f"(lines {c.start_line}-{c.end_line})"
                    for c in analysis.chunks
                    if c.parent is None
                ]
            ),
        )
    )

    basename = posixpath.basename(analysis.relative_path)
    return render_document(
        f"files/{slugify(basename)}.md",
        WikiFrontmatter(
            title=basename,
            generated=ctx.generated,
            description=f"Documentation for {analysis.relative_path}",
            related=[i.source for i in analysis.imports if i.source.startswith(".")],
            sources=[analysis.relative_path],
            category="files",
        ),
        sections,
    )


def _exports(chunks: list[Chunk]) -> str:
    return "\n\n".join(
        f"### {c.name}\n\n{code(c.signature or c.chunk_type)}\n\n"
        f"{c.documentation or 'No documentation.'}"
        for c in chunks
    )


def _imports(imports: list[ImportInfo]) -> str:
    def _line(imp: ImportInfo) -> str:
        names = ", ".join(s.name for s in imp.specifiers)
        return f"{code(imp.source)}: {names}"

    external = [i for i in imports if not i.source.startswith(".")]
    internal = [i for i in imports if i.source.startswith(".")]
    blocks: list[str] = []
    if external:
        blocks.append("**External**:\n" + bullet_list([_line(i) for i in external]))
    if internal:
        blocks.append("**Internal**:\n" + bullet_list([_line(i) for i in internal]))
    return "\n\n".join(blocks)
