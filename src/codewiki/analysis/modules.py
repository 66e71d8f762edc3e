"""Group files into directory-level modules and characterise each one."""

from __future__ import annotations

import posixpath
import re

from codewiki.analysis.schemas import ModuleInfo, PublicApiInfo
from codewiki.constants import MODULE_DESCRIPTION_EXPORTS, ModulePurpose
from codewiki.ingestion.schemas import Chunk, FileAnalysis

# Tried in order against the lowercased directory path; first match wins.
_PURPOSE_RULES: tuple[tuple[re.Pattern[str], ModulePurpose], ...] = (
    (re.compile(r"components?|ui|views?|pages?"), ModulePurpose.UI_COMPONENT),
    (re.compile(r"services?|business|domain"), ModulePurpose.BUSINESS_LOGIC),
    (re.compile(r"data|repositories?|api"), ModulePurpose.DATA_ACCESS),
    (re.compile(r"utils?|helpers?|lib"), ModulePurpose.UTILITY),
    (re.compile(r"config|settings"), ModulePurpose.CONFIGURATION),
    (re.compile(r"client|http|fetch"), ModulePurpose.API_CLIENT),
    (re.compile(r"store|state|redux|zustand"), ModulePurpose.STATE_MANAGEMENT),
    (re.compile(r"routes?|routing|navigation"), ModulePurpose.ROUTING),
    (re.compile(r"middleware"), ModulePurpose.MIDDLEWARE),
    (re.compile(r"test|spec|__tests__"), ModulePurpose.TESTING),
    (re.compile(r"types?|interfaces?|models?"), ModulePurpose.TYPES),
    (re.compile(r"infra|infrastructure"), ModulePurpose.INFRASTRUCTURE),
)
_COMPONENT_CHUNK = re.compile(r"component|^use[A-Z]")
_DATA_CHUNK = re.compile(r"get|find|save|fetch")

PURPOSE_DESCRIPTIONS: dict[ModulePurpose, str] = {
    ModulePurpose.UI_COMPONENT: "Provides reusable UI components",
    ModulePurpose.BUSINESS_LOGIC: "Implements core business logic and domain rules",
    ModulePurpose.DATA_ACCESS: "Handles data fetching and persistence operations",
    ModulePurpose.UTILITY: "Provides utility functions and helpers",
    ModulePurpose.CONFIGURATION: "Manages application configuration",
    ModulePurpose.API_CLIENT: "Handles external API communication",
    ModulePurpose.STATE_MANAGEMENT: "Manages application state",
    ModulePurpose.ROUTING: "Handles application routing and navigation",
    ModulePurpose.MIDDLEWARE: "Provides request/response processing middleware",
    ModulePurpose.TESTING: "Contains test utilities and specifications",
    ModulePurpose.TYPES: "Defines TypeScript types and interfaces",
    ModulePurpose.INFRASTRUCTURE: (
        "Provides infrastructure and cross-cutting concerns"
    ),
    ModulePurpose.UNKNOWN: "Module purpose could not be determined",
}


def analyze_modules(files: list[FileAnalysis]) -> list[ModuleInfo]:
    """One ModuleInfo per directory, in first-seen order."""
    directories: dict[str, list[FileAnalysis]] = {}
    for f in files:
        directory = posixpath.dirname(f.relative_path) or "."
        directories.setdefault(directory, []).append(f)

    return [_build_module(d, dir_files) for d, dir_files in directories.items()]


def _build_module(directory: str, files: list[FileAnalysis]) -> ModuleInfo:
    chunks = [c for f in files for c in f.chunks]
    imports = [i for f in files for i in f.imports]

    internal: list[str] = []
    external: list[str] = []
    for imp in imports:
        bucket = internal if imp.source.startswith(".") else external
        if imp.source not in bucket:
            bucket.append(imp.source)

    public_api = [
        PublicApiInfo(
            name=c.name,
            type=c.chunk_type,
            signature=c.signature or c.name,
            documentation=c.documentation,
        )
        for c in chunks
        if c.exported and c.parent is None
    ]
    purpose = infer_module_purpose(directory, chunks)
    base = posixpath.basename(directory)

    return ModuleInfo(
        name=base if base and base != "." else "root",
        path=directory,
        description=describe_module(purpose, public_api),
        purpose=purpose,
        files=[f.relative_path for f in files],
        exports=[a.name for a in public_api],
        dependencies=[i.source for i in imports],
        internal_dependencies=internal,
        external_dependencies=external,
        public_api=public_api,
        complexity=sum(c.metadata.complexity for c in chunks),
        cohesion=calculate_cohesion(chunks),
    )


def infer_module_purpose(directory: str, chunks: list[Chunk]) -> ModulePurpose:
    """Directory-name rules first, then a look at chunk names."""
    lowered = directory.lower()
    for pattern, purpose in _PURPOSE_RULES:
        if pattern.search(lowered):
            return purpose
    if any(_COMPONENT_CHUNK.search(c.name) for c in chunks):
        return ModulePurpose.UI_COMPONENT
    if any(_DATA_CHUNK.search(c.name) for c in chunks):
        return ModulePurpose.DATA_ACCESS
    return ModulePurpose.UNKNOWN


def describe_module(
    purpose: ModulePurpose, public_api: list[PublicApiInfo]
) -> str:
    description = PURPOSE_DESCRIPTIONS[purpose]
    if public_api:
        top = ", ".join(a.name for a in public_api[:MODULE_DESCRIPTION_EXPORTS])
        more = "..." if len(public_api) > MODULE_DESCRIPTION_EXPORTS else ""
        description += f". Exports: {top}{more}"
    return description


def calculate_cohesion(chunks: list[Chunk]) -> float:
    """Internal references over the n*(n-1) possible pairs, clamped to [0, 1]."""
    if not chunks:
        return 0.0
    names = {c.name for c in chunks}
    internal_refs = sum(
        1 for c in chunks for dep in c.dependencies if dep.name in names
    )
    max_refs = len(chunks) * (len(chunks) - 1)
    if max_refs == 0:
        return 1.0
    return max(0.0, min(1.0, internal_refs / max_refs))
