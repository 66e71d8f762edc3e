"""Pydantic models for the inferred business domain."""

from pydantic import BaseModel, Field

from codewiki.constants import ConceptType, EntityRelationshipType


class EntityAttribute(BaseModel):
    """A property of a domain entity."""

    name: str
    type: str = "unknown"
    business_meaning: str
    required: bool = True


class EntityBehavior(BaseModel):
    name: str
    description: str


class EntityRelationship(BaseModel):
    """A directed link from one entity to another."""

    type: EntityRelationshipType
    target_entity: str
    description: str


class DomainEntity(BaseModel):
    """A class or interface that models business data."""

    name: str
    technical_name: str
    description: str
    purpose: str
    attributes: list[EntityAttribute] = Field(
        default_factory=lambda: list[EntityAttribute]()
    )
    behaviors: list[EntityBehavior] = Field(
        default_factory=lambda: list[EntityBehavior]()
    )
    relationships: list[EntityRelationship] = Field(
        default_factory=lambda: list[EntityRelationship]()
    )
    source_files: list[str] = Field(default_factory=list)
    source_chunks: list[str] = Field(default_factory=list)


class DomainAggregate(BaseModel):
    """A cluster of entities reachable from a root via ownership links."""

    name: str
    root_entity: str
    entities: list[str] = Field(default_factory=list)
    description: str
    invariants: list[str] = Field(default_factory=list)


class ServiceCapability(BaseModel):
    """One public operation a domain service offers."""

    name: str
    description: str
    input: str = "none"
    output: str = "void"
    business_value: str


class DomainService(BaseModel):
    name: str
    technical_name: str
    description: str
    capabilities: list[ServiceCapability] = Field(
        default_factory=lambda: list[ServiceCapability]()
    )
    dependencies: list[str] = Field(default_factory=list)
    source_files: list[str] = Field(default_factory=list)


class DomainEvent(BaseModel):
    """Something that happened which other parts of the system react to."""

    name: str
    description: str
    trigger: str
    payload: list[str] = Field(default_factory=list)
    handlers: list[str] = Field(default_factory=list)
    business_significance: str


class WorkflowStep(BaseModel):
    order: int
    name: str
    description: str
    actor: str
    action: str
    outcome: str


class BusinessWorkflow(BaseModel):
    """A multi-step process spanning several files."""

    name: str
    description: str
    purpose: str
    steps: list[WorkflowStep] = Field(
        default_factory=lambda: list[WorkflowStep]()
    )
    participants: list[str] = Field(default_factory=list)
    triggers: list[str] = Field(default_factory=list)
    outcomes: list[str] = Field(default_factory=list)


class BoundedContext(BaseModel):
    """A group of modules sharing a top-level directory."""

    name: str
    description: str
    responsibility: str
    entities: list[str] = Field(default_factory=list)
    services: list[str] = Field(default_factory=list)
    external_dependencies: list[str] = Field(default_factory=list)
    internal_modules: list[str] = Field(default_factory=list)


class DomainModel(BaseModel):
    """Everything the domain mapper inferred about a codebase."""

    name: str
    description: str
    entities: list[DomainEntity] = Field(
        default_factory=lambda: list[DomainEntity]()
    )
    aggregates: list[DomainAggregate] = Field(
        default_factory=lambda: list[DomainAggregate]()
    )
    services: list[DomainService] = Field(
        default_factory=lambda: list[DomainService]()
    )
    events: list[DomainEvent] = Field(
        default_factory=lambda: list[DomainEvent]()
    )
    workflows: list[BusinessWorkflow] = Field(
        default_factory=lambda: list[BusinessWorkflow]()
    )
    bounded_contexts: list[BoundedContext] = Field(
        default_factory=lambda: list[BoundedContext]()
    )


class DomainConcept(BaseModel):
    """A domain role a single chunk plausibly plays."""

    type: ConceptType
    name: str
    description: str
    confidence: float = Field(ge=0.0, le=1.0)


class BusinessContext(BaseModel):
    domain: str
    capability: str
    user_story: str | None = None


class DomainMapping(BaseModel):
    """Concepts and business context for one chunk."""

    chunk_id: str
    concepts: list[DomainConcept] = Field(
        default_factory=lambda: list[DomainConcept]()
    )
    context: BusinessContext
