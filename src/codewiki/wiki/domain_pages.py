"""Page builders for the business-domain side of the wiki."""

from __future__ import annotations

from codewiki.domain.schemas import (
    BusinessWorkflow,
    DomainEntity,
    DomainModel,
    DomainService,
)
from codewiki.naming import slugify
from codewiki.wiki.markdown import bullet_list, code, render_document, table
from codewiki.wiki.pages import PageContext, section
from codewiki.wiki.schemas import WikiDocument, WikiFrontmatter, WikiSection


def domain_model_page(ctx: PageContext, model: DomainModel) -> WikiDocument:
    sections = [section("domain-overview", "Domain Overview", model.description)]
    if model.entities:
        sections.append(
            section(
                "entities",
                "Domain Entities",
                bullet_list(
                    [f"**{e.name}**: {e.description}" for e in model.entities]
                ),
            )
        )
    if model.aggregates:
        sections.append(
            section(
                "aggregates",
                "Aggregates",
                "\n\n".join(
                    f"### {a.name}\n\n{a.description}\n\n"
                    f"**Root**: {a.root_entity}\n"
                    f"**Entities**: {', '.join(a.entities)}"
                    for a in model.aggregates
                ),
            )
        )
    if model.services:
        sections.append(
            section(
                "services",
                "Domain Services",
                bullet_list(
                    [f"**{s.name}**: {s.description}" for s in model.services]
                ),
            )
        )
    if model.events:
        sections.append(
            section(
                "events",
                "Domain Events",
                bullet_list(
                    [f"**{e.name}**: {e.description}" for e in model.events]
                ),
            )
        )
    if model.bounded_contexts:
        sections.append(
            section(
                "bounded-contexts",
                "Bounded Contexts",
                "\n\n".join(
                    f"### {c.name}\n\n{c.description}\n\n"
                    f"**Responsibility**: {c.responsibility}"
                    for c in model.bounded_contexts
                ),
            )
        )
    return render_document(
        "domain-model.md",
        WikiFrontmatter(
            title=f"{model.name} Domain Model",
            generated=ctx.generated,
            description=f"Business domain model for {model.name}",
            related=[
                "overview",
                "architecture",
                *(f"entities/{slugify(e.technical_name)}" for e in model.entities),
                *(f"services/{slugify(s.technical_name)}" for s in model.services),
            ],
            category="domain",
        ),
        sections,
    )


def entity_page(ctx: PageContext, entity: DomainEntity) -> WikiDocument:
    sections = [
        section(
            "overview",
            "Overview",
            f"{entity.description}\n\n**Purpose**: {entity.purpose}",
        )
    ]
    if entity.attributes:
        sections.append(
            section(
                "attributes",
                "Attributes",
                table(
                    ["Attribute", "Type", "Required", "Business Meaning"],
                    [
                        [
                            a.name,
                            code(a.type),
                            "Yes" if a.required else "No",
                            a.business_meaning,
                        ]
                        for a in entity.attributes
                    ],
                ),
            )
        )
    if entity.behaviors:
        sections.append(
            section(
                "behaviors",
                "Behaviors",
                bullet_list(
                    [f"**{b.name}**: {b.description}" for b in entity.behaviors]
                ),
            )
        )
    if entity.relationships:
        sections.append(
            section(
                "relationships",
                "Relationships",
                bullet_list(
                    [
                        f"**{r.type}** → {r.target_entity}: {r.description}"
                        for r in entity.relationships
                    ]
                ),
            )
        )
    if ctx.config.include_code_links:
        sections.append(_source_section(entity.source_files))
    return render_document(
        f"entities/{slugify(entity.technical_name)}.md",
        WikiFrontmatter(
            title=entity.name,
            generated=ctx.generated,
            description=entity.description,
            related=[
                "domain-model",
                *dict.fromkeys(
                    f"entities/{slugify(r.target_entity)}"
                    for r in entity.relationships
                ),
            ],
            sources=entity.source_files,
            tags=["entity", "domain"],
            category="entities",
        ),
        sections,
    )


def service_page(ctx: PageContext, service: DomainService) -> WikiDocument:
    sections = [section("overview", "Overview", service.description)]
    if service.capabilities:
        sections.append(
            section(
                "capabilities",
                "Capabilities",
                table(
                    ["Capability", "Input", "Output", "Business Value"],
                    [
                        [
                            c.name,
                            code(c.input),
                            code(c.output),
                            c.business_value,
                        ]
                        for c in service.capabilities
                    ],
                ),
            )
        )
    if service.dependencies:
        sections.append(
            section(
                "dependencies",
                "Dependencies",
                bullet_list(service.dependencies),
            )
        )
    if ctx.config.include_code_links:
        sections.append(_source_section(service.source_files))
    return render_document(
        f"services/{slugify(service.technical_name)}.md",
        WikiFrontmatter(
            title=service.name,
            generated=ctx.generated,
            description=service.description,
            related=[
                "domain-model",
                *(f"entities/{slugify(d)}" for d in service.dependencies),
            ],
            sources=service.source_files,
            tags=["service", "domain"],
            category="services",
        ),
        sections,
    )


def workflow_page(ctx: PageContext, workflow: BusinessWorkflow) -> WikiDocument:
    steps = "\n\n".join(
        f"{s.order}. **{s.name}**\n"
        f"   - Actor: {s.actor}\n"
        f"   - Action: {s.action}\n"
        f"   - Outcome: {s.outcome}"
        for s in workflow.steps
    )
    return render_document(
        f"workflows/{slugify(workflow.name)}.md",
        WikiFrontmatter(
            title=workflow.name,
            generated=ctx.generated,
            description=workflow.description,
            related=["domain-model", "architecture"],
            tags=["workflow", "process"],
            category="workflows",
        ),
        [
            section(
                "overview",
                "Overview",
                f"{workflow.description}\n\n**Purpose**: {workflow.purpose}",
            ),
            section("triggers", "Triggers", bullet_list(workflow.triggers)),
            section("steps", "Workflow Steps", steps),
            section(
                "participants",
                "Participants",
                bullet_list([f"**{p}**" for p in workflow.participants]),
            ),
            section(
                "outcomes", "Possible Outcomes", bullet_list(workflow.outcomes)
            ),
        ],
    )


def _source_section(files: list[str]) -> WikiSection:
    return section(
        "source-code", "Source Code", bullet_list([code(f) for f in files])
    )
