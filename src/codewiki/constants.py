"""Shared constants: single source of truth for cross-module values.

All magic strings and numbers that appear in 2+ files belong here.
StrEnum members are str-compatible, so downstream code (YAML
frontmatter, DOT output, markdown tables) works unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class ChunkType(StrEnum):
    """Kind of semantic unit extracted from a source file."""

    CLASS = "class"
    INTERFACE = "interface"
    TYPE = "type"
    ENUM = "enum"
    FUNCTION = "function"
    METHOD = "method"
    PROPERTY = "property"
    VARIABLE = "variable"
    IMPORT = "import"
    EXPORT = "export"
    NAMESPACE = "namespace"
    MODULE = "module"


class DependencyKind(StrEnum):
    """How a chunk refers to another symbol."""

    IMPORT = "import"
    REFERENCE = "reference"
    EXTENDS = "extends"
    IMPLEMENTS = "implements"
    USES = "uses"


class EdgeType(StrEnum):
    """Dependency graph edge types."""

    IMPORTS = "imports"
    EXPORTS = "exports"
    EXTENDS = "extends"
    IMPLEMENTS = "implements"
    USES = "uses"
    CONTAINS = "contains"
    REFERENCES = "references"


FILE_NODE_TYPE = "file"


class PatternType(StrEnum):
    """Architectural idioms the pattern detector recognises."""

    REPOSITORY = "repository"
    SERVICE_LAYER = "service-layer"
    FACTORY = "factory"
    SINGLETON = "singleton"
    OBSERVER = "observer"
    PROVIDER = "provider-pattern"
    HOOK = "hook-pattern"
    MIDDLEWARE = "middleware"
    DTO = "data-transfer-object"
    DEPENDENCY_INJECTION = "dependency-injection"
    LAYERED = "layered-architecture"


class ModulePurpose(StrEnum):
    """Role a directory-level module plays in the codebase."""

    UI_COMPONENT = "ui-component"
    BUSINESS_LOGIC = "business-logic"
    DATA_ACCESS = "data-access"
    UTILITY = "utility"
    CONFIGURATION = "configuration"
    API_CLIENT = "api-client"
    STATE_MANAGEMENT = "state-management"
    ROUTING = "routing"
    MIDDLEWARE = "middleware"
    TESTING = "testing"
    TYPES = "types"
    INFRASTRUCTURE = "infrastructure"
    UNKNOWN = "unknown"


class HotspotType(StrEnum):
    """Kinds of code-health hotspots."""

    HIGH_COMPLEXITY = "high-complexity"
    HIGH_COUPLING = "high-coupling"
    GOD_CLASS = "god-class"
    HUB = "hub"


class EntityRelationshipType(StrEnum):
    """Relationship between two domain entities."""

    HAS_ONE = "has-one"
    HAS_MANY = "has-many"
    BELONGS_TO = "belongs-to"
    MANY_TO_MANY = "many-to-many"
    DEPENDS_ON = "depends-on"


class RelationshipKind(StrEnum):
    """Semantic relationship between two indexed chunks."""

    SIMILAR_FUNCTIONALITY = "similar-functionality"
    SAME_DOMAIN = "same-domain"
    DEPENDENCY = "dependency"
    COLLABORATOR = "collaborator"
    ALTERNATIVE = "alternative"
    EXTENSION = "extension"


class ConceptType(StrEnum):
    """Domain concept a single chunk may represent."""

    ENTITY = "entity"
    SERVICE = "service"
    REPOSITORY = "repository"
    EVENT = "event"
    COMMAND = "command"
    QUERY = "query"
    FACTORY = "factory"


class StageProgress(StrEnum):
    """Progress status for pipeline stage events."""

    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


class StageOutcome(StrEnum):
    """Outcome of an individual pipeline stage execution."""

    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


# ── Stage labels ─────────────────────────────────────────

STAGE_LABELS: dict[str, str] = {
    "scan": "Scanning source files",
    "analysis": "Analyzing codebase",
    "domain_model": "Inferring domain model",
    "semantic_index": "Building semantic index",
    "render": "Rendering wiki documents",
    "write": "Writing wiki documents",
}

# ── Thresholds ───────────────────────────────────────────

# Hotspot triggers
HOTSPOT_FILE_COMPLEXITY = 50
HOTSPOT_GOD_CLASS_CHILDREN = 20
HOTSPOT_HUB_INCOMING = 10
HOTSPOT_COUPLING_OUTGOING = 15

# Domain inference
DOMAIN_SCORE_THRESHOLD = 3.0
DEFAULT_DOMAIN = "application"

# Semantic search
DEFAULT_EMBEDDING_DIMENSIONS = 128
SEARCH_MIN_SCORE = 0.1
RELATED_MIN_SCORE = 0.2
DEFAULT_RELATIONSHIP_THRESHOLD = 0.3
MAX_KEYWORDS = 10
MIN_TOKEN_LENGTH = 3
COLLABORATOR_MIN_SHARED_KEYWORDS = 3

# Wiki rendering
MODULE_DESCRIPTION_EXPORTS = 5
TECH_STACK_LIMIT = 20
KEY_COMPONENTS_LIMIT = 10
TOP_HOTSPOTS = 10
TOP_CYCLES = 5
RECENT_DOCUMENTS = 10

# Document writer retry budget
WRITE_RETRY_ATTEMPTS = 3
WRITE_RETRY_INITIAL_S = 0.05
WRITE_RETRY_MAX_S = 1.0
