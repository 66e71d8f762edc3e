"""Typed failures and I/O error classification.

Classifies exceptions by category to enable:
- Structured logging (which errors are transient vs permanent)
- Retry decisions in the document writer (only retry transient)
"""

from __future__ import annotations

import errno
from enum import Enum


class CodeWikiError(Exception):
    """Base class for all codewiki failures."""


class SourceFileNotFoundError(CodeWikiError, FileNotFoundError):
    """The path handed to the chunker does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Source file not found: {path}")
        self.path = path


class UnsupportedFileTypeError(CodeWikiError, ValueError):
    """The file extension has no grammar."""

    def __init__(self, path: str, extension: str) -> None:
        super().__init__(
            f"Unsupported file type '{extension}': {path}"
        )
        self.path = path
        self.extension = extension


class IndexNotBuiltError(CodeWikiError, RuntimeError):
    """A search operation ran before build_index()."""

    def __init__(self) -> None:
        super().__init__(
            "Semantic index not built. Call build_index() first."
        )


class ChunkNotFoundError(CodeWikiError, KeyError):
    """A chunk id is not present in the semantic index."""

    def __init__(self, chunk_id: str) -> None:
        super().__init__(chunk_id)
        self.chunk_id = chunk_id

    def __str__(self) -> str:
        return f"Chunk not found in index: {self.chunk_id}"


class DiscoveryCancelledError(CodeWikiError):
    """Relationship discovery was cancelled by its caller."""


class DocumentWriteError(CodeWikiError):
    """One or more wiki documents could not be written.

    ``failures`` maps each failed document path to its error text.
    Documents that were written successfully stay on disk.
    """

    def __init__(self, failures: dict[str, str]) -> None:
        super().__init__(
            f"{len(failures)} document(s) failed to write: "
            + ", ".join(sorted(failures))
        )
        self.failures = failures


class ErrorClass(Enum):
    TRANSIENT = "transient"  # EAGAIN, EBUSY, EINTR: retryable
    TIMEOUT = "timeout"  # deadline exceeded: retryable with backoff
    PERMANENT = "permanent"  # EACCES, EROFS, ENOSPC: do NOT retry
    UNKNOWN = "unknown"  # unclassified: do NOT retry


_TRANSIENT_ERRNOS = frozenset({
    errno.EAGAIN,
    errno.EBUSY,
    errno.EINTR,
})

_TIMEOUT_ERRNOS = frozenset({errno.ETIMEDOUT})

_PERMANENT_ERRNOS = frozenset({
    errno.EACCES,
    errno.EPERM,
    errno.EROFS,
    errno.ENOSPC,
    errno.ENOTDIR,
    errno.EISDIR,
    errno.ENAMETOOLONG,
})


def classify_error(error: BaseException) -> ErrorClass:
    """Classify an error to determine handling strategy.

    Checks the structured errno first, falls back to exception
    type and message matching for untyped exceptions.
    """
    # 1. Structured errno (OSError and subclasses)
    code = getattr(error, "errno", None)
    if isinstance(code, int):
        if code in _TRANSIENT_ERRNOS:
            return ErrorClass.TRANSIENT
        if code in _TIMEOUT_ERRNOS:
            return ErrorClass.TIMEOUT
        if code in _PERMANENT_ERRNOS:
            return ErrorClass.PERMANENT

    # 2. Typed exceptions
    if isinstance(error, TimeoutError):
        return ErrorClass.TIMEOUT
    if isinstance(error, (BlockingIOError, InterruptedError)):
        return ErrorClass.TRANSIENT
    if isinstance(error, (PermissionError, IsADirectoryError)):
        return ErrorClass.PERMANENT

    # 3. Fall back to string matching
    msg = str(error).lower()
    if "timed out" in msg or "timeout" in msg:
        return ErrorClass.TIMEOUT
    if "temporarily unavailable" in msg or "resource busy" in msg:
        return ErrorClass.TRANSIENT

    return ErrorClass.UNKNOWN


_RETRYABLE = frozenset({
    ErrorClass.TRANSIENT,
    ErrorClass.TIMEOUT,
})


def is_retryable(error: BaseException) -> bool:
    """Return True if the error category supports retry."""
    return classify_error(error) in _RETRYABLE
