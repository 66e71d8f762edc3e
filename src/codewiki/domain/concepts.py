"""Per-chunk domain mapping and business-facing descriptions."""

from __future__ import annotations

import re

from codewiki.analysis.schemas import CodebaseAnalysis, ModuleInfo
from codewiki.constants import ChunkType, ConceptType, ModulePurpose
from codewiki.domain.mapper import (
    infer_domain_name,
    is_entity_like,
    is_repository,
    is_service,
)
from codewiki.domain.schemas import BusinessContext, DomainConcept, DomainMapping
from codewiki.ingestion.schemas import Chunk
from codewiki.naming import humanize

_CAPABILITIES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"auth|login|session"), "Authentication and authorization"),
    (re.compile(r"user|profile|account"), "User management"),
    (re.compile(r"data|store|persist"), "Data persistence"),
    (re.compile(r"api|fetch|http"), "External communication"),
    (re.compile(r"ui|component|view"), "User interface"),
    (re.compile(r"validate|check|verify"), "Validation"),
    (re.compile(r"transform|convert|map"), "Data transformation"),
)

MODULE_ROLES: dict[ModulePurpose, str] = {
    ModulePurpose.UI_COMPONENT: "Provides the user interface layer",
    ModulePurpose.BUSINESS_LOGIC: (
        "Implements core business rules and domain logic"
    ),
    ModulePurpose.DATA_ACCESS: "Handles data persistence and retrieval",
    ModulePurpose.UTILITY: "Provides shared utility functions",
    ModulePurpose.CONFIGURATION: (
        "Manages application settings and configuration"
    ),
    ModulePurpose.API_CLIENT: "Communicates with external services",
    ModulePurpose.STATE_MANAGEMENT: "Manages application state",
    ModulePurpose.ROUTING: "Controls navigation and URL handling",
    ModulePurpose.MIDDLEWARE: "Processes requests and responses",
    ModulePurpose.TESTING: "Supports testing and quality assurance",
    ModulePurpose.TYPES: "Defines data structures and contracts",
    ModulePurpose.INFRASTRUCTURE: "Provides technical infrastructure",
    ModulePurpose.UNKNOWN: "General purpose module",
}


def _strip(name: str, suffix: str) -> str:
    return humanize(name.removesuffix(suffix))


def chunk_concepts(chunk: Chunk) -> list[DomainConcept]:
    """Every concept the chunk's name and shape suggest, most confident first."""
    name = chunk.name
    concepts: list[DomainConcept] = []
    if is_entity_like(chunk):
        concepts.append(
            DomainConcept(
                type=ConceptType.ENTITY,
                name=name,
                description=f"Domain entity representing {humanize(name)}",
                confidence=0.8,
            )
        )
    if is_service(chunk):
        concepts.append(
            DomainConcept(
                type=ConceptType.SERVICE,
                name=name,
                description=(
                    f"Domain service providing {humanize(name)} capabilities"
                ),
                confidence=0.85,
            )
        )
    if is_repository(chunk):
        concepts.append(
            DomainConcept(
                type=ConceptType.REPOSITORY,
                name=name,
                description=(
                    f"Repository for {_strip(name, 'Repository')} persistence"
                ),
                confidence=0.9,
            )
        )
    if re.search(r"event", name, re.IGNORECASE):
        concepts.append(
            DomainConcept(
                type=ConceptType.EVENT,
                name=name,
                description=f"Domain event: {humanize(name)}",
                confidence=0.85,
            )
        )
    if re.search(r"command", name, re.IGNORECASE):
        concepts.append(
            DomainConcept(
                type=ConceptType.COMMAND,
                name=name,
                description=f"Command to {_strip(name, 'Command')}",
                confidence=0.85,
            )
        )
    if re.search(r"query", name, re.IGNORECASE):
        concepts.append(
            DomainConcept(
                type=ConceptType.QUERY,
                name=name,
                description=f"Query for {_strip(name, 'Query')}",
                confidence=0.85,
            )
        )
    if re.search(r"factory|^create", name, re.IGNORECASE):
        concepts.append(
            DomainConcept(
                type=ConceptType.FACTORY,
                name=name,
                description=f"Factory for creating {_strip(name, 'Factory')}",
                confidence=0.8,
            )
        )
    # Stable sort: equal confidences keep detection order.
    concepts.sort(key=lambda c: c.confidence, reverse=True)
    return concepts


def infer_capability(chunk: Chunk) -> str:
    lowered = chunk.name.lower()
    for pattern, capability in _CAPABILITIES:
        if pattern.search(lowered):
            return capability
    return "General processing"


def generate_user_story(chunk: Chunk, domain: str) -> str | None:
    """A user story for functions and methods; None for everything else."""
    if chunk.chunk_type not in (ChunkType.FUNCTION, ChunkType.METHOD):
        return None
    action = humanize(chunk.name).lower()
    return (
        f"As a user, I want to {action} so that I can accomplish "
        f"my {domain} goals."
    )


def map_chunk_to_domain(
    chunk: Chunk, analysis: CodebaseAnalysis
) -> DomainMapping:
    domain = infer_domain_name(analysis)
    return DomainMapping(
        chunk_id=chunk.id,
        concepts=chunk_concepts(chunk),
        context=BusinessContext(
            domain=domain,
            capability=infer_capability(chunk),
            user_story=generate_user_story(chunk, domain),
        ),
    )


def generate_business_description(
    chunk: Chunk, analysis: CodebaseAnalysis
) -> str:
    """Describe *chunk* in business terms using its strongest concept.

    Falls back to the documentation, or ``<type>: <name>``, when the
    chunk maps to no concept at all.
    """
    mapping = map_chunk_to_domain(chunk, analysis)
    if not mapping.concepts:
        return chunk.documentation or f"{chunk.chunk_type}: {chunk.name}"

    context = mapping.context
    name = chunk.name
    match mapping.concepts[0].type:
        case ConceptType.ENTITY:
            description = (
                f"Represents the {humanize(name)} in the {context.domain} "
                f"domain. {_entity_depth(chunk)}"
            )
        case ConceptType.SERVICE:
            description = (
                f"Provides {context.capability} capabilities for the "
                f"{context.domain} domain. {_service_breadth(chunk)}"
            )
        case ConceptType.REPOSITORY:
            description = (
                "Manages persistence and retrieval of "
                f"{_strip(name, 'Repository')} data. Acts as a "
                "collection-like abstraction over the underlying data store."
            )
        case ConceptType.EVENT:
            description = (
                f"Signals that {_strip(name, 'Event')} has occurred in the "
                "system. Other parts of the application can react to this "
                "event."
            )
        case ConceptType.COMMAND:
            description = (
                f"Represents an intent to {_strip(name, 'Command')}. "
                "This triggers business logic when executed."
            )
        case ConceptType.QUERY:
            description = (
                f"Retrieves {_strip(name, 'Query')} information from the "
                "system. This is a read-only operation that does not "
                "modify state."
            )
        case ConceptType.FACTORY:
            description = (
                f"Creates {_strip(name, 'Factory')} instances. "
                "Encapsulates complex object creation logic."
            )
        case _:
            description = mapping.concepts[0].description

    if context.user_story:
        description += f"\n\n**User Story**: {context.user_story}"
    return description


def _entity_depth(chunk: Chunk) -> str:
    members = len(chunk.children)
    if members > 10:
        return "This is a rich domain entity with many attributes and behaviors."
    if members > 5:
        return (
            "This entity contains core business data and associated operations."
        )
    return (
        "This is a lightweight entity representing a specific piece of "
        "domain data."
    )


def _service_breadth(chunk: Chunk) -> str:
    members = len(chunk.children)
    if members > 10:
        return "This is a comprehensive service with many operations."
    if members > 3:
        return "This service provides a focused set of business operations."
    return "This is a specialized service with a narrow responsibility."


def get_module_role(module: ModuleInfo) -> str:
    return MODULE_ROLES.get(module.purpose, "General purpose module")
