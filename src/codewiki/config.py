"""Environment-based configuration and source-language constants."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

from codewiki.constants import (
    DEFAULT_EMBEDDING_DIMENSIONS,
    DEFAULT_RELATIONSHIP_THRESHOLD,
    WRITE_RETRY_ATTEMPTS,
)

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE_PATTERNS: tuple[str, ...] = (
    "**/*.ts",
    "**/*.tsx",
    "**/*.js",
    "**/*.jsx",
)

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    "**/node_modules/**",
    "**/dist/**",
    "**/.git/**",
    "**/build/**",
)


class Settings(BaseSettings):
    """Reads from .env file and CODEWIKI_* environment variables."""

    # Logging
    log_level: str = "INFO"

    # Scanning
    include_patterns: Annotated[list[str], NoDecode] = list(
        DEFAULT_INCLUDE_PATTERNS
    )
    ignore_patterns: Annotated[list[str], NoDecode] = list(
        DEFAULT_IGNORE_PATTERNS
    )
    skip_directories: Annotated[list[str], NoDecode] = [
        "node_modules",
        "dist",
        "build",
        "coverage",
        ".git",
        ".next",
        ".turbo",
    ]
    respect_gitignore: bool = True
    analysis_max_concurrency: int = 8

    # Domain inference and indexing phase
    phase_max_concurrency: int = 2
    phase_timeout_s: float | None = None

    # Wiki output
    output_path: Path = Path("docs/wiki")
    project_name: str = "Project"
    project_description: str = ""
    include_technical_details: bool = True
    include_business_context: bool = True
    include_code_links: bool = True
    generate_index: bool = True
    max_depth: int = 3
    write_max_concurrency: int = 8
    write_retry_attempts: int = WRITE_RETRY_ATTEMPTS

    # Semantic index
    embedding_dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS
    relationship_threshold: float = DEFAULT_RELATIONSHIP_THRESHOLD
    max_relationship_chunks: int = 2000

    @field_validator(
        "include_patterns",
        "ignore_patterns",
        "skip_directories",
        mode="before",
    )
    @classmethod
    def _parse_list(cls, v: Any) -> Any:
        """Accept comma-separated string or JSON array."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("include_patterns")
    @classmethod
    def _validate_include(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError(
                "include_patterns must contain at least one glob"
            )
        dupes = {p for p in v if v.count(p) > 1}
        if dupes:
            logger.warning(
                "Duplicate globs in CODEWIKI_INCLUDE_PATTERNS: %s",
                ", ".join(sorted(dupes)),
            )
        return v

    @field_validator(
        "embedding_dimensions",
        "analysis_max_concurrency",
        "write_max_concurrency",
        "write_retry_attempts",
        "max_relationship_chunks",
        "phase_max_concurrency",
    )
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("value must be >= 1")
        return v

    @field_validator("phase_timeout_s")
    @classmethod
    def _validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("phase_timeout_s must be > 0")
        return v

    @field_validator("relationship_threshold")
    @classmethod
    def _validate_threshold(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(
                "relationship_threshold must be within [0, 1]"
            )
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "CODEWIKI_",
        "extra": "ignore",
    }


# File extension → tree-sitter grammar name
EXTENSION_GRAMMARS: dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
}

SUPPORTED_EXTENSIONS = frozenset(EXTENSION_GRAMMARS)

# Suffixes tried, in order, when resolving a relative import
IMPORT_RESOLUTION_SUFFIXES: tuple[str, ...] = (
    "",
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    "/index.ts",
    "/index.tsx",
    "/index.js",
)
