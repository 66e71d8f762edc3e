"""Business domain inference over an analyzed codebase."""

from __future__ import annotations

from typing import TYPE_CHECKING

from codewiki.domain.schemas import (
    BoundedContext,
    BusinessContext,
    BusinessWorkflow,
    DomainAggregate,
    DomainConcept,
    DomainEntity,
    DomainEvent,
    DomainMapping,
    DomainModel,
    DomainService,
    EntityAttribute,
    EntityBehavior,
    EntityRelationship,
    ServiceCapability,
    WorkflowStep,
)

if TYPE_CHECKING:
    from codewiki.analysis.schemas import CodebaseAnalysis
    from codewiki.ingestion.schemas import Chunk

__all__ = [
    "BoundedContext",
    "BusinessContext",
    "BusinessWorkflow",
    "DomainAggregate",
    "DomainConcept",
    "DomainEntity",
    "DomainEvent",
    "DomainMapping",
    "DomainModel",
    "DomainService",
    "EntityAttribute",
    "EntityBehavior",
    "EntityRelationship",
    "ServiceCapability",
    "WorkflowStep",
    "generate_business_description",
    "infer_domain_model",
    "map_chunk_to_domain",
]


def infer_domain_model(analysis: CodebaseAnalysis) -> DomainModel:
    """Infer entities, services, events and contexts from *analysis*."""
    from codewiki.domain.mapper import infer_domain_model as _impl

    return _impl(analysis)


def map_chunk_to_domain(
    chunk: Chunk, analysis: CodebaseAnalysis
) -> DomainMapping:
    """Concepts and business context for one chunk."""
    from codewiki.domain.concepts import map_chunk_to_domain as _impl

    return _impl(chunk, analysis)


def generate_business_description(
    chunk: Chunk, analysis: CodebaseAnalysis
) -> str:
    from codewiki.domain.concepts import (
        generate_business_description as _impl,
    )

    return _impl(chunk, analysis)
