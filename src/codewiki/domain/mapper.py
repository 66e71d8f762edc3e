"""Infer a business domain model from a codebase analysis.

Every inference here is a heuristic over names, paths and chunk
structure. Nothing raises on odd input: a chunk that fits no rule is
simply left out of the model.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass, field

from codewiki.analysis.schemas import CodebaseAnalysis, ModuleInfo
from codewiki.constants import (
    DEFAULT_DOMAIN,
    DOMAIN_SCORE_THRESHOLD,
    ChunkType,
    DependencyKind,
    EntityRelationshipType,
    ModulePurpose,
    PatternType,
)
from codewiki.domain.lexicon import DOMAIN_LEXICON, score_domain
from codewiki.domain.schemas import (
    BoundedContext,
    BusinessWorkflow,
    DomainAggregate,
    DomainEntity,
    DomainEvent,
    DomainModel,
    DomainService,
    EntityAttribute,
    EntityBehavior,
    EntityRelationship,
    ServiceCapability,
    WorkflowStep,
)
from codewiki.ingestion.schemas import Chunk, Dependency, FileAnalysis
from codewiki.naming import humanize

logger = logging.getLogger(__name__)

_UTILITY = re.compile(r"utils?|helpers?|common|shared", re.IGNORECASE)
_SERVICE = re.compile(
    r"service|handler|controller|manager|provider", re.IGNORECASE
)
_REPOSITORY = re.compile(r"repository|repo|store|dao|gateway", re.IGNORECASE)
_ENTITY_NAME = re.compile(r"model|entity|dto|data", re.IGNORECASE)
_EVENT_NAME = re.compile(r"event|message|notification", re.IGNORECASE)
_COLLECTION = re.compile(r"\[\]|Array|List|Set", re.IGNORECASE)
_SERVICE_MODULE = re.compile(r"service", re.IGNORECASE)

_ENTITY_TYPES = frozenset({ChunkType.CLASS, ChunkType.INTERFACE})
_EVENT_TYPES = frozenset({ChunkType.INTERFACE, ChunkType.TYPE, ChunkType.CLASS})
_CALLABLE_TYPES = frozenset({ChunkType.METHOD, ChunkType.FUNCTION})
_OWNERSHIP = frozenset({
    EntityRelationshipType.HAS_ONE,
    EntityRelationshipType.HAS_MANY,
})

# First match wins; the last entry of each table is the fallback.
_EVENT_TRIGGERS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"created|added|inserted"), "Entity creation"),
    (re.compile(r"updated|changed|modified"), "Entity modification"),
    (re.compile(r"deleted|removed"), "Entity deletion"),
    (re.compile(r"clicked|pressed|submitted"), "User interaction"),
)
_EVENT_SIGNIFICANCE: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"error|failure|failed"),
        "Indicates a system failure that may require attention",
    ),
    (
        re.compile(r"success|completed|finished"),
        "Indicates successful completion of an operation",
    ),
    (re.compile(r"started|began|initiated"), "Marks the beginning of a process"),
)
_BUSINESS_VALUES: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"get|find|fetch|load"),
        "Retrieves information for display or processing",
    ),
    (re.compile(r"create|add|insert"), "Creates new records or entities"),
    (re.compile(r"update|modify|change"), "Updates existing data"),
    (re.compile(r"delete|remove"), "Removes data from the system"),
    (re.compile(r"validate|check|verify"), "Ensures data integrity"),
    (re.compile(r"process|handle|execute"), "Performs business operations"),
)
_CONTEXT_RESPONSIBILITIES: tuple[tuple[ModulePurpose, str], ...] = (
    (ModulePurpose.UI_COMPONENT, "Handles user interface presentation"),
    (ModulePurpose.BUSINESS_LOGIC, "Implements core business logic"),
    (ModulePurpose.DATA_ACCESS, "Manages data persistence"),
    (ModulePurpose.API_CLIENT, "Handles external integrations"),
)


def is_utility(chunk: Chunk) -> bool:
    return bool(
        _UTILITY.search(chunk.name) or _UTILITY.search(chunk.file_path)
    )


def is_service(chunk: Chunk) -> bool:
    return bool(_SERVICE.search(chunk.name))


def is_repository(chunk: Chunk) -> bool:
    return bool(_REPOSITORY.search(chunk.name))


def is_entity_like(chunk: Chunk) -> bool:
    """Classes and interfaces that carry data and are not infrastructure."""
    if chunk.chunk_type not in _ENTITY_TYPES:
        return False
    if is_utility(chunk) or is_service(chunk) or is_repository(chunk):
        return False
    return bool(chunk.children) or bool(_ENTITY_NAME.search(chunk.name))


@dataclass
class _Corpus:
    """Chunk lookups shared by every inference step of one run."""

    files: list[FileAnalysis]
    chunks: list[Chunk] = field(init=False)
    _owner: dict[str, FileAnalysis] = field(init=False, repr=False)
    _by_name: dict[str, Chunk] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.chunks = [c for f in self.files for c in f.chunks]
        self._owner = {}
        self._by_name = {}
        for f in self.files:
            for c in f.chunks:
                self._owner.setdefault(c.id, f)
                # Bare-name resolution: the first chunk with a name wins.
                self._by_name.setdefault(c.name, c)

    def owner(self, chunk: Chunk) -> FileAnalysis | None:
        return self._owner.get(chunk.id)

    def named(self, name: str) -> Chunk | None:
        return self._by_name.get(name)

    def children(self, chunk: Chunk, chunk_type: ChunkType) -> list[Chunk]:
        owner = self.owner(chunk)
        if owner is None:
            return []
        return [
            c for c in owner.children_of(chunk) if c.chunk_type == chunk_type
        ]


def infer_domain_model(analysis: CodebaseAnalysis) -> DomainModel:
    """Build the full domain model for *analysis*. Deterministic."""
    corpus = _Corpus(analysis.files)
    name = infer_domain_name(analysis)
    entities = infer_entities(corpus)
    services = infer_services(analysis, corpus)
    events = infer_events(corpus)
    aggregates = infer_aggregates(entities)
    workflows = infer_workflows(analysis)
    contexts = infer_bounded_contexts(analysis.modules)

    logger.info(
        "event=domain_inferred domain=%s entities=%d services=%d events=%d "
        "aggregates=%d workflows=%d contexts=%d",
        name,
        len(entities),
        len(services),
        len(events),
        len(aggregates),
        len(workflows),
        len(contexts),
    )
    return DomainModel(
        name=name,
        description=(
            f"{humanize(name)} domain with {len(entities)} entities "
            f"and {len(services)} services."
        ),
        entities=entities,
        aggregates=aggregates,
        services=services,
        events=events,
        workflows=workflows,
        bounded_contexts=contexts,
    )


def infer_domain_name(analysis: CodebaseAnalysis) -> str:
    """Score chunk names and paths against the lexicon.

    The best domain must score above the threshold, otherwise the
    codebase is just an ``application``. Ties keep the earlier entry.
    """
    names = [c.name.lower() for f in analysis.files for c in f.chunks]
    paths = [f.relative_path.lower() for f in analysis.files]
    text = " ".join([*names, *paths])

    best, best_score = DEFAULT_DOMAIN, 0.0
    for domain, terms in DOMAIN_LEXICON.items():
        score = score_domain(text, terms)
        if score > best_score:
            best, best_score = domain, score
    return best if best_score > DOMAIN_SCORE_THRESHOLD else DEFAULT_DOMAIN


# ── Entities ─────────────────────────────────────────────


def infer_entities(corpus: _Corpus) -> list[DomainEntity]:
    entities: list[DomainEntity] = []
    for chunk in corpus.chunks:
        if chunk.chunk_type not in _ENTITY_TYPES:
            continue
        if is_utility(chunk) or is_service(chunk) or is_repository(chunk):
            continue
        owner = corpus.owner(chunk)
        if owner is None:
            continue
        relationships = _relationships(chunk, corpus)
        entities.append(
            DomainEntity(
                name=humanize(chunk.name),
                technical_name=chunk.name,
                description=chunk.documentation
                or f"Represents {humanize(chunk.name)} data within the system.",
                purpose=_entity_purpose(relationships),
                attributes=[
                    EntityAttribute(
                        name=p.name,
                        type=p.metadata.return_type or "unknown",
                        business_meaning=humanize(p.name),
                        required="optional" not in p.modifiers,
                    )
                    for p in corpus.children(chunk, ChunkType.PROPERTY)
                ],
                behaviors=[
                    EntityBehavior(
                        name=m.name,
                        description=m.documentation or humanize(m.name),
                    )
                    for m in corpus.children(chunk, ChunkType.METHOD)
                ],
                relationships=relationships,
                source_files=[owner.relative_path],
                source_chunks=[chunk.id],
            )
        )
    return entities


def _relationships(chunk: Chunk, corpus: _Corpus) -> list[EntityRelationship]:
    """Links to other entity-like chunks.

    Candidates are the chunk's own dependencies plus the type
    references of its properties; for the latter the declared
    property type decides between has-one and has-many.
    """
    candidates: list[tuple[Dependency, str]] = [
        (d, d.name) for d in chunk.dependencies
    ]
    for prop in corpus.children(chunk, ChunkType.PROPERTY):
        declared = prop.metadata.return_type or ""
        candidates.extend((d, f"{d.name} {declared}") for d in prop.dependencies)

    relationships: list[EntityRelationship] = []
    seen: set[tuple[EntityRelationshipType, str]] = set()
    for dep, type_text in candidates:
        if dep.name == chunk.name:
            continue
        target = corpus.named(dep.name)
        if target is None or not is_entity_like(target):
            continue
        if dep.kind == DependencyKind.EXTENDS:
            rel_type = EntityRelationshipType.BELONGS_TO
        elif _COLLECTION.search(type_text):
            rel_type = EntityRelationshipType.HAS_MANY
        else:
            rel_type = EntityRelationshipType.HAS_ONE
        if (rel_type, dep.name) in seen:
            continue
        seen.add((rel_type, dep.name))
        relationships.append(
            EntityRelationship(
                type=rel_type,
                target_entity=dep.name,
                description=f"{chunk.name} {rel_type} {dep.name}",
            )
        )
    return relationships


def _entity_purpose(relationships: list[EntityRelationship]) -> str:
    owns = any(r.type in _OWNERSHIP for r in relationships)
    belongs = any(
        r.type == EntityRelationshipType.BELONGS_TO for r in relationships
    )
    if belongs:
        return "Supporting entity that belongs to a larger aggregate"
    if owns:
        return "Core domain entity that aggregates related data"
    return "Independent domain entity"


# ── Services ─────────────────────────────────────────────


def infer_services(
    analysis: CodebaseAnalysis, corpus: _Corpus
) -> list[DomainService]:
    services: list[DomainService] = []
    seen: set[str] = set()
    for module in analysis.modules:
        if not (
            module.purpose == ModulePurpose.BUSINESS_LOGIC
            or _SERVICE_MODULE.search(module.name)
        ):
            continue
        module_files = set(module.files)
        for f in analysis.files:
            if f.relative_path not in module_files:
                continue
            for chunk in f.chunks:
                if chunk.id in seen or not _is_service_candidate(chunk):
                    continue
                seen.add(chunk.id)
                capabilities = _capabilities(chunk, corpus)
                services.append(
                    DomainService(
                        name=humanize(chunk.name),
                        technical_name=chunk.name,
                        description=chunk.documentation
                        or _service_description(capabilities),
                        capabilities=capabilities,
                        dependencies=list(
                            dict.fromkeys(d.name for d in chunk.dependencies)
                        ),
                        source_files=[f.relative_path],
                    )
                )
    return services


def _is_service_candidate(chunk: Chunk) -> bool:
    if chunk.chunk_type == ChunkType.CLASS:
        return is_service(chunk)
    return (
        chunk.chunk_type == ChunkType.FUNCTION
        and chunk.exported
        and chunk.parent is None
    )


def _capabilities(chunk: Chunk, corpus: _Corpus) -> list[ServiceCapability]:
    return [
        ServiceCapability(
            name=m.name,
            description=m.documentation or humanize(m.name),
            input=", ".join(
                f"{p.name}: {p.type}" for p in m.metadata.parameters
            )
            or "none",
            output=m.metadata.return_type or "void",
            business_value=business_value(m.name),
        )
        for m in corpus.children(chunk, ChunkType.METHOD)
        if m.metadata.access_modifier != "private"
    ]


def _service_description(capabilities: list[ServiceCapability]) -> str:
    names = ", ".join(c.name for c in capabilities[:3])
    more = " and more" if len(capabilities) > 3 else ""
    return f"Service providing {names}{more} functionality."


def business_value(method_name: str) -> str:
    lowered = method_name.lower()
    for pattern, value in _BUSINESS_VALUES:
        if pattern.search(lowered):
            return value
    return "Supports system operations"


# ── Events ───────────────────────────────────────────────


def infer_events(corpus: _Corpus) -> list[DomainEvent]:
    events: list[DomainEvent] = []
    callables = [c for c in corpus.chunks if c.chunk_type in _CALLABLE_TYPES]
    for chunk in corpus.chunks:
        if chunk.chunk_type not in _EVENT_TYPES:
            continue
        if not _EVENT_NAME.search(chunk.name):
            continue
        lowered = chunk.name.lower()
        events.append(
            DomainEvent(
                name=humanize(chunk.name),
                description=chunk.documentation
                or f"Event: {humanize(chunk.name)}",
                trigger=_first_match(lowered, _EVENT_TRIGGERS, "System action"),
                payload=[
                    f"{p.name}: {p.metadata.return_type or 'unknown'}"
                    for p in corpus.children(chunk, ChunkType.PROPERTY)
                ],
                handlers=_event_handlers(chunk.name, callables),
                business_significance=_first_match(
                    lowered,
                    _EVENT_SIGNIFICANCE,
                    "Signals a state change in the system",
                ),
            )
        )
    return events


def _event_handlers(event_name: str, callables: list[Chunk]) -> list[str]:
    stem = event_name.lower().replace("event", "", 1)
    handlers: list[str] = []
    for c in callables:
        lowered = c.name.lower()
        if (stem and stem in lowered) or "handle" in lowered or "on" in lowered:
            handlers.append(c.name)
    return handlers


def _first_match(
    text: str, table: tuple[tuple[re.Pattern[str], str], ...], default: str
) -> str:
    for pattern, value in table:
        if pattern.search(text):
            return value
    return default


# ── Aggregates, workflows, contexts ──────────────────────


def infer_aggregates(entities: list[DomainEntity]) -> list[DomainAggregate]:
    """BFS over has-one / has-many links from each unvisited entity."""
    by_name = {e.technical_name: e for e in entities}
    visited: set[str] = set()
    aggregates: list[DomainAggregate] = []

    for entity in entities:
        if entity.technical_name in visited:
            continue
        members = [entity.technical_name]
        queue = deque([entity])
        while queue:
            current = queue.popleft()
            for rel in current.relationships:
                if rel.type not in _OWNERSHIP:
                    continue
                related = by_name.get(rel.target_entity)
                if related is None or related.technical_name in members:
                    continue
                members.append(related.technical_name)
                queue.append(related)

        if len(members) > 1:
            aggregates.append(
                DomainAggregate(
                    name=f"{entity.name} Aggregate",
                    root_entity=entity.technical_name,
                    entities=members,
                    description=(
                        f"Aggregate rooted at {entity.name} "
                        "containing related entities"
                    ),
                    invariants=_invariants(entity),
                )
            )
            visited.update(members)
    return aggregates


def _invariants(root: DomainEntity) -> list[str]:
    invariants: list[str] = []
    for rel in root.relationships:
        if rel.type == EntityRelationshipType.HAS_MANY:
            invariants.append(
                f"{root.name} can have zero or more {rel.target_entity}"
            )
        elif rel.type == EntityRelationshipType.HAS_ONE:
            invariants.append(
                f"{root.name} must have exactly one {rel.target_entity}"
            )
    return invariants


def infer_workflows(analysis: CodebaseAnalysis) -> list[BusinessWorkflow]:
    """One workflow per middleware or service-layer pattern spanning 3+ files."""
    workflows: list[BusinessWorkflow] = []
    for pattern in analysis.patterns:
        if pattern.pattern_type not in (
            PatternType.MIDDLEWARE,
            PatternType.SERVICE_LAYER,
        ):
            continue
        locations = pattern.locations
        if len(locations) <= 2:
            continue
        last = len(locations) - 1
        workflows.append(
            BusinessWorkflow(
                name=f"{pattern.name} Workflow",
                description=pattern.description,
                purpose="Business process flow",
                steps=[
                    WorkflowStep(
                        order=i + 1,
                        name=f"Step {i + 1}",
                        description=f"Process in {loc.file}",
                        actor=loc.role,
                        action="process",
                        outcome="continue" if i < last else "complete",
                    )
                    for i, loc in enumerate(locations)
                ],
                participants=[loc.role for loc in locations],
                triggers=["API request", "User action"],
                outcomes=["Success", "Failure"],
            )
        )
    return workflows


def infer_bounded_contexts(modules: list[ModuleInfo]) -> list[BoundedContext]:
    """Group modules by first path segment; keep groups of two or more."""
    groups: dict[str, list[ModuleInfo]] = {}
    for module in modules:
        top = module.path.split("/")[0]
        if not top or top == ".":
            top = "root"
        groups.setdefault(top, []).append(module)

    contexts: list[BoundedContext] = []
    for directory, members in groups.items():
        if len(members) <= 1:
            continue
        label = humanize(directory)
        contexts.append(
            BoundedContext(
                name=label,
                description=f"Bounded context for {label} functionality",
                responsibility=_context_responsibility(members),
                entities=[e for m in members for e in m.exports],
                services=[
                    e
                    for m in members
                    if m.purpose == ModulePurpose.BUSINESS_LOGIC
                    for e in m.exports
                ],
                external_dependencies=list(
                    dict.fromkeys(
                        d for m in members for d in m.external_dependencies
                    )
                ),
                internal_modules=[m.path for m in members],
            )
        )
    return contexts


def _context_responsibility(modules: list[ModuleInfo]) -> str:
    purposes = {m.purpose for m in modules}
    for purpose, text in _CONTEXT_RESPONSIBILITIES:
        if purpose in purposes:
            return text
    return "Provides supporting functionality"
