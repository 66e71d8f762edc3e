"""Heuristic detectors for architectural patterns.

Each detector is a pure function ``(files) -> ArchitecturalPattern | None``
registered in ``PATTERN_DETECTORS``. Detection never raises: a
detector that fails is logged and skipped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from codewiki.analysis.schemas import ArchitecturalPattern, PatternLocation
from codewiki.constants import ChunkType, PatternType
from codewiki.ingestion.schemas import Chunk, FileAnalysis

logger = logging.getLogger(__name__)

type PatternDetector = Callable[[list[FileAnalysis]], ArchitecturalPattern | None]

_REPO_PATH = re.compile(r"repository|repo", re.IGNORECASE)
_DATA_METHOD = re.compile(
    r"^(get|find|save|update|delete|create|fetch|load)", re.IGNORECASE
)
_SERVICE_PATH = re.compile(r"service|svc", re.IGNORECASE)
_TEST_PATH = re.compile(r"mock|test|spec", re.IGNORECASE)
_BUSINESS_METHOD = re.compile(
    r"^(process|handle|execute|validate|calculate|perform)", re.IGNORECASE
)
_FACTORY_NAME = re.compile(r"factory|creator|builder", re.IGNORECASE)
_FACTORY_METHOD = re.compile(
    r"^(create|make|build|new|construct|generate)", re.IGNORECASE
)
_STATIC_INSTANCE = re.compile(
    r"static\s+(?:readonly\s+)?(?:_?instance|shared|default)", re.IGNORECASE
)
_INSTANCE_ACCESSOR = re.compile(r"get\s*instance|shared|default", re.IGNORECASE)
_OBSERVER_INDICATORS = (
    "subscribe",
    "unsubscribe",
    "notify",
    "emit",
    "on",
    "off",
    "addlistener",
    "removelistener",
    "addeventlistener",
    "observer",
    "publish",
    "dispatch",
)
_PROVIDER_NAME = re.compile(r"provider|context", re.IGNORECASE)
_HOOK_NAME = re.compile(r"^use[A-Z]")
_MIDDLEWARE_PATH = re.compile(r"middleware", re.IGNORECASE)
_DTO_PATH = re.compile(r"types?|dto|model|schema", re.IGNORECASE)
_NOT_DTO_NAME = re.compile(r"props|state|context|config", re.IGNORECASE)
_INJECTED_TYPE = re.compile(
    r"service|repository|client|provider|manager|handler", re.IGNORECASE
)
_INJECT_DECORATOR = re.compile(r"injectable|inject|autowired", re.IGNORECASE)

LAYER_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("presentation", re.compile(r"components?|pages?|views?|ui", re.IGNORECASE)),
    ("application", re.compile(r"services?|usecases?|handlers?", re.IGNORECASE)),
    ("domain", re.compile(r"domain|models?|entities", re.IGNORECASE)),
    (
        "infrastructure",
        re.compile(r"infrastructure|data|api|repositories?", re.IGNORECASE),
    ),
    ("shared", re.compile(r"shared|common|utils?|lib", re.IGNORECASE)),
)


def _confidence(base: float, step: float, count: int, cap: float = 0.9) -> float:
    return max(0.0, min(cap, base + step * count))


def _child_chunks(analysis: FileAnalysis, chunk: Chunk) -> list[Chunk]:
    return analysis.children_of(chunk)


def detect_repository(files: list[FileAnalysis]) -> ArchitecturalPattern | None:
    locations: list[PatternLocation] = []
    evidence: list[str] = []
    for f in files:
        if _REPO_PATH.search(f.relative_path) and any(
            _DATA_METHOD.search(c.name) for c in f.chunks
        ):
            locations.append(
                PatternLocation(
                    file=f.relative_path,
                    chunks=[c.id for c in f.chunks if c.exported],
                    role="repository",
                )
            )
            evidence.append(f"{f.relative_path} contains repository methods")
        if any(
            c.chunk_type == ChunkType.INTERFACE and _REPO_PATH.search(c.name)
            for c in f.chunks
        ):
            evidence.append(f"{f.relative_path} defines repository interface")

    if not locations:
        return None
    return ArchitecturalPattern(
        pattern_type=PatternType.REPOSITORY,
        name="Repository Pattern",
        description=(
            "Abstracts data access logic behind a collection-like interface, "
            "separating domain logic from data persistence."
        ),
        confidence=_confidence(0.3, 0.2, len(locations)),
        locations=locations,
        evidence=evidence,
    )


def detect_service_layer(files: list[FileAnalysis]) -> ArchitecturalPattern | None:
    locations: list[PatternLocation] = []
    evidence: list[str] = []
    for f in files:
        path = f.relative_path
        if not _SERVICE_PATH.search(path) or _TEST_PATH.search(path):
            continue
        has_class = any(
            c.chunk_type == ChunkType.CLASS and _SERVICE_PATH.search(c.name)
            for c in f.chunks
        )
        has_business = any(
            c.chunk_type == ChunkType.METHOD and _BUSINESS_METHOD.search(c.name)
            for c in f.chunks
        )
        if has_class or has_business:
            locations.append(
                PatternLocation(
                    file=path,
                    chunks=[
                        c.id
                        for c in f.chunks
                        if c.chunk_type == ChunkType.CLASS
                        or (c.chunk_type == ChunkType.FUNCTION and c.exported)
                    ],
                    role="service",
                )
            )
            evidence.append(f"{path} implements service layer")

    if not locations:
        return None
    return ArchitecturalPattern(
        pattern_type=PatternType.SERVICE_LAYER,
        name="Service Layer Pattern",
        description=(
            "Encapsulates business logic in dedicated service classes, "
            "providing a clear API between the application and domain layers."
        ),
        confidence=_confidence(0.3, 0.15, len(locations)),
        locations=locations,
        evidence=evidence,
    )


def detect_factory(files: list[FileAnalysis]) -> ArchitecturalPattern | None:
    locations: list[PatternLocation] = []
    evidence: list[str] = []
    for f in files:
        named = bool(_FACTORY_NAME.search(f.relative_path))
        has_method = any(
            _FACTORY_METHOD.search(c.name)
            and c.chunk_type in (ChunkType.FUNCTION, ChunkType.METHOD)
            for c in f.chunks
        )
        if not (named or has_method):
            continue
        factory_chunks = [
            c
            for c in f.chunks
            if _FACTORY_METHOD.search(c.name) or _FACTORY_NAME.search(c.name)
        ]
        if not factory_chunks:
            continue
        locations.append(
            PatternLocation(
                file=f.relative_path,
                chunks=[c.id for c in factory_chunks],
                role="factory",
            )
        )
        evidence.append(
            f"{f.relative_path} contains factory methods: "
            + ", ".join(c.name for c in factory_chunks)
        )

    if not locations:
        return None
    return ArchitecturalPattern(
        pattern_type=PatternType.FACTORY,
        name="Factory Pattern",
        description=(
            "Creates objects without exposing instantiation logic, allowing "
            "for flexible object creation based on configuration or context."
        ),
        confidence=_confidence(0.3, 0.2, len(locations)),
        locations=locations,
        evidence=evidence,
    )


def is_singleton(analysis: FileAnalysis, chunk: Chunk) -> bool:
    """Private constructor, or a static instance plus an accessor."""
    if chunk.chunk_type != ChunkType.CLASS:
        return False
    if "private constructor" in chunk.code.lower():
        return True
    if not _STATIC_INSTANCE.search(chunk.code):
        return False
    return any(
        _INSTANCE_ACCESSOR.search(child.name)
        for child in _child_chunks(analysis, chunk)
    )


def detect_singleton(files: list[FileAnalysis]) -> ArchitecturalPattern | None:
    locations: list[PatternLocation] = []
    evidence: list[str] = []
    for f in files:
        for chunk in f.chunks:
            if is_singleton(f, chunk):
                locations.append(
                    PatternLocation(
                        file=f.relative_path, chunks=[chunk.id], role="singleton"
                    )
                )
                evidence.append(f"{chunk.name} implements singleton pattern")

    if not locations:
        return None
    return ArchitecturalPattern(
        pattern_type=PatternType.SINGLETON,
        name="Singleton Pattern",
        description=(
            "Ensures a class has only one instance and provides global "
            "access to it."
        ),
        confidence=_confidence(0.4, 0.25, len(locations)),
        locations=locations,
        evidence=evidence,
    )


def _is_observer_name(name: str) -> bool:
    lowered = name.lower()
    return any(ind in lowered for ind in _OBSERVER_INDICATORS)


def detect_observer(files: list[FileAnalysis]) -> ArchitecturalPattern | None:
    locations: list[PatternLocation] = []
    evidence: list[str] = []
    for f in files:
        observer_chunks = [c for c in f.chunks if _is_observer_name(c.name)]
        if observer_chunks:
            locations.append(
                PatternLocation(
                    file=f.relative_path,
                    chunks=[c.id for c in observer_chunks],
                    role="observer",
                )
            )
            evidence.append(
                f"{f.relative_path} implements observer/event pattern"
            )

    if not locations:
        return None
    return ArchitecturalPattern(
        pattern_type=PatternType.OBSERVER,
        name="Observer Pattern",
        description=(
            "Defines a subscription mechanism allowing objects to be "
            "notified of state changes in other objects."
        ),
        confidence=_confidence(0.3, 0.15, len(locations)),
        locations=locations,
        evidence=evidence,
    )


def detect_provider(files: list[FileAnalysis]) -> ArchitecturalPattern | None:
    locations: list[PatternLocation] = []
    evidence: list[str] = []
    for f in files:
        has_provider = any(
            _PROVIDER_NAME.search(c.name)
            and c.chunk_type in (ChunkType.FUNCTION, ChunkType.VARIABLE)
            for c in f.chunks
        )
        has_create_context = any(
            s.name == "createContext" for i in f.imports for s in i.specifiers
        )
        if not (has_provider or has_create_context):
            continue
        locations.append(
            PatternLocation(
                file=f.relative_path,
                chunks=[c.id for c in f.chunks if _PROVIDER_NAME.search(c.name)],
                role="provider",
            )
        )
        evidence.append(
            f"{f.relative_path} implements React Context/Provider pattern"
        )

    if not locations:
        return None
    return ArchitecturalPattern(
        pattern_type=PatternType.PROVIDER,
        name="Provider Pattern (React Context)",
        description=(
            "Uses React Context to provide data and functionality to "
            "component subtrees without prop drilling."
        ),
        confidence=_confidence(0.4, 0.2, len(locations)),
        locations=locations,
        evidence=evidence,
    )


def detect_hooks(files: list[FileAnalysis]) -> ArchitecturalPattern | None:
    locations: list[PatternLocation] = []
    evidence: list[str] = []
    for f in files:
        hooks = [
            c
            for c in f.chunks
            if c.chunk_type == ChunkType.FUNCTION
            and c.exported
            and _HOOK_NAME.search(c.name)
        ]
        if hooks:
            locations.append(
                PatternLocation(
                    file=f.relative_path,
                    chunks=[h.id for h in hooks],
                    role="custom-hook",
                )
            )
            evidence.append(
                f"{f.relative_path} exports hooks: "
                + ", ".join(h.name for h in hooks)
            )

    if not locations:
        return None
    return ArchitecturalPattern(
        pattern_type=PatternType.HOOK,
        name="React Hooks Pattern",
        description=(
            "Encapsulates reusable stateful logic in custom hooks that can "
            "be shared across components."
        ),
        confidence=_confidence(0.5, 0.1, len(locations), cap=0.95),
        locations=locations,
        evidence=evidence,
    )


def _has_middleware_signature(chunk: Chunk) -> bool:
    params = chunk.metadata.parameters
    if len(params) < 2:
        return False
    return any(p.name in ("req", "request", "next") for p in params)


def detect_middleware(files: list[FileAnalysis]) -> ArchitecturalPattern | None:
    locations: list[PatternLocation] = []
    evidence: list[str] = []
    for f in files:
        if _MIDDLEWARE_PATH.search(f.relative_path) or any(
            _has_middleware_signature(c) for c in f.chunks
        ):
            locations.append(
                PatternLocation(
                    file=f.relative_path,
                    chunks=[c.id for c in f.chunks if c.exported],
                    role="middleware",
                )
            )
            evidence.append(f"{f.relative_path} implements middleware pattern")

    if not locations:
        return None
    return ArchitecturalPattern(
        pattern_type=PatternType.MIDDLEWARE,
        name="Middleware Pattern",
        description=(
            "Chains request/response handlers to process data through a "
            "pipeline of transformations."
        ),
        confidence=_confidence(0.3, 0.2, len(locations)),
        locations=locations,
        evidence=evidence,
    )


def detect_dto(files: list[FileAnalysis]) -> ArchitecturalPattern | None:
    locations: list[PatternLocation] = []
    evidence: list[str] = []
    for f in files:
        if not _DTO_PATH.search(f.relative_path):
            continue
        data_types = [
            c
            for c in f.chunks
            if c.chunk_type in (ChunkType.INTERFACE, ChunkType.TYPE)
            and not _NOT_DTO_NAME.search(c.name)
        ]
        if data_types:
            locations.append(
                PatternLocation(
                    file=f.relative_path,
                    chunks=[c.id for c in data_types],
                    role="dto",
                )
            )
            evidence.append(
                f"{f.relative_path} defines data transfer types: "
                + ", ".join(c.name for c in data_types)
            )

    if not locations:
        return None
    return ArchitecturalPattern(
        pattern_type=PatternType.DTO,
        name="Data Transfer Object Pattern",
        description=(
            "Defines typed structures for data transfer between layers or "
            "systems, ensuring type safety and documentation."
        ),
        confidence=_confidence(0.4, 0.1, len(locations)),
        locations=locations,
        evidence=evidence,
    )


def _uses_injection(analysis: FileAnalysis, chunk: Chunk) -> bool:
    param_sets = [chunk.metadata.parameters] + [
        child.metadata.parameters for child in _child_chunks(analysis, chunk)
    ]
    if any(_INJECTED_TYPE.search(p.type) for params in param_sets for p in params):
        return True
    return any(_INJECT_DECORATOR.search(d) for d in chunk.metadata.decorators)


def detect_dependency_injection(
    files: list[FileAnalysis],
) -> ArchitecturalPattern | None:
    locations: list[PatternLocation] = []
    evidence: list[str] = []
    for f in files:
        for chunk in f.chunks:
            if chunk.chunk_type == ChunkType.CLASS and _uses_injection(f, chunk):
                locations.append(
                    PatternLocation(
                        file=f.relative_path, chunks=[chunk.id], role="injectable"
                    )
                )
                evidence.append(f"{chunk.name} uses dependency injection")

    if not locations:
        return None
    return ArchitecturalPattern(
        pattern_type=PatternType.DEPENDENCY_INJECTION,
        name="Dependency Injection Pattern",
        description=(
            "Injects dependencies through constructors or decorators, "
            "enabling loose coupling and testability."
        ),
        confidence=_confidence(0.4, 0.15, len(locations)),
        locations=locations,
        evidence=evidence,
    )


def classify_layer(relative_path: str) -> str | None:
    """First layer whose pattern matches the path, or None."""
    for layer, pattern in LAYER_PATTERNS:
        if pattern.search(relative_path):
            return layer
    return None


def detect_layered_architecture(
    files: list[FileAnalysis],
) -> ArchitecturalPattern | None:
    layers: dict[str, list[str]] = {}
    for f in files:
        layer = classify_layer(f.relative_path)
        if layer is not None:
            layers.setdefault(layer, []).append(f.relative_path)

    if len(layers) < 2:
        return None
    return ArchitecturalPattern(
        pattern_type=PatternType.LAYERED,
        name="Layered Architecture",
        description=(
            "Organizes code into distinct layers (presentation, business, "
            "data) with clear separation of concerns."
        ),
        confidence=_confidence(0.3, 0.15, len(layers)),
        locations=[
            PatternLocation(file=paths[0], chunks=[], role=layer)
            for layer, paths in layers.items()
        ],
        evidence=[
            f"{layer} layer: {len(paths)} files" for layer, paths in layers.items()
        ],
    )


PATTERN_DETECTORS: tuple[PatternDetector, ...] = (
    detect_repository,
    detect_service_layer,
    detect_factory,
    detect_singleton,
    detect_observer,
    detect_provider,
    detect_hooks,
    detect_middleware,
    detect_dto,
    detect_dependency_injection,
    detect_layered_architecture,
)


def detect_patterns(
    files: list[FileAnalysis],
    detectors: tuple[PatternDetector, ...] = PATTERN_DETECTORS,
) -> list[ArchitecturalPattern]:
    """Run every detector; results sorted by descending confidence."""
    found: list[ArchitecturalPattern] = []
    for detector in detectors:
        try:
            pattern = detector(files)
        except Exception:  # noqa: BLE001
            logger.warning(
                "event=pattern_detector_failed detector=%s",
                detector.__name__,
                exc_info=True,
            )
            continue
        if pattern is not None:
            found.append(pattern)
    found.sort(key=lambda p: p.confidence, reverse=True)
    return found
